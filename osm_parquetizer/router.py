from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Mapping
from contextlib import suppress
from types import MappingProxyType
from typing import Any

from osm_parquetizer.config import RunConfig
from osm_parquetizer.observer import NullObserver
from osm_parquetizer.observer import RunObserver
from osm_parquetizer.osm.types import EntityKind
from osm_parquetizer.osm.types import OsmEntity
from osm_parquetizer.sink import EntityFilter
from osm_parquetizer.sink import ParquetSink


class MultiEntitySink:
    """Routes a single ordered entity stream to one ``ParquetSink`` per enabled kind.

    Entities of a disabled kind are dropped. Every entity, routed or dropped, is
    reported to the observer exactly once.
    """

    def __init__(
        self,
        config: RunConfig,
        observer: RunObserver | None = None,
        filters: Mapping[EntityKind, Iterable[EntityFilter]] | None = None,
    ) -> None:
        self.config = config
        self.observer = observer or NullObserver()
        self._filters = {kind: tuple(predicates) for kind, predicates in (filters or {}).items()}
        self._sinks: dict[EntityKind, ParquetSink] = {}
        self._initialized = False
        self._started = False

    @property
    def sinks(self) -> Mapping[EntityKind, ParquetSink]:
        return MappingProxyType(self._sinks)

    def initialize(self) -> None:
        if self._initialized:
            raise RuntimeError("Sinks are already initialized")
        self._initialized = True

        for kind in self.config.entity_kinds:
            self._sinks[kind] = ParquetSink(
                source=self.config.source,
                destination=self.config.destination,
                exclude_metadata=self.config.exclude_metadata,
                kind=kind,
                config=self.config.writer,
                filters=self._filters.get(kind, ()),
            )

        try:
            for sink in self._sinks.values():
                sink.initialize()
        except BaseException:
            self.abort()
            raise

        self._started = True
        self.observer.started()

    def process(self, entity: OsmEntity) -> None:
        sink = self._sinks.get(entity.kind)
        if sink is not None:
            sink.process(entity)
        self.observer.processed(entity)

    def complete(self) -> None:
        first_error: Exception | None = None
        for sink in self._sinks.values():
            try:
                sink.complete()
            except Exception as e:
                if first_error is None:
                    first_error = e
        self._end()
        if first_error is not None:
            raise first_error

    def abort(self) -> None:
        """Close every open sink, ignoring close failures, and end the run."""
        for sink in self._sinks.values():
            with suppress(Exception):
                sink.complete()
        self._end()

    def _end(self) -> None:
        if self._started:
            self._started = False
            self.observer.ended()

    def __enter__(self) -> MultiEntitySink:
        self.initialize()
        return self

    def __exit__(self, exc_type: Any, exc_value: Any, traceback: Any) -> None:
        if exc_type is None:
            self.complete()
        else:
            self.abort()
