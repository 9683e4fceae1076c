from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from typing import Protocol

from tqdm import tqdm

from osm_parquetizer.osm.types import EntityKind
from osm_parquetizer.osm.types import OsmEntity

logger = logging.getLogger(__name__)


class RunObserver(Protocol):
    """Receives the lifecycle notifications of a conversion run.

    ``started`` comes before any ``processed``, ``processed`` is called once per
    entity in stream order, and ``ended`` comes after every sink has completed
    or failed.
    """

    def started(self) -> None: ...

    def processed(self, entity: OsmEntity) -> None: ...

    def ended(self) -> None: ...


class NullObserver:
    def started(self) -> None:
        pass

    def processed(self, entity: OsmEntity) -> None:
        pass

    def ended(self) -> None:
        pass


class LoggingObserver:
    def __init__(self, log_every: int = 1_000_000) -> None:
        self.log_every = log_every
        self.total = 0
        self.per_kind: Counter[EntityKind] = Counter()

    def started(self) -> None:
        self.total = 0
        self.per_kind.clear()
        logger.info("Conversion started")

    def processed(self, entity: OsmEntity) -> None:
        self.total += 1
        self.per_kind[entity.kind] += 1
        if self.total % self.log_every == 0:
            logger.info(f"Entities processed: {self.total}")

    def ended(self) -> None:
        counts = ", ".join(f"{kind.value}s={self.per_kind[kind]}" for kind in EntityKind.ordered())
        logger.info(f"Total entities processed: {self.total} ({counts})")


class ProgressObserver:
    def __init__(self, desc: str = "Converting entities") -> None:
        self.desc = desc
        self._pbar: tqdm | None = None

    def started(self) -> None:
        self._pbar = tqdm(desc=self.desc, unit=" entities", unit_scale=True)

    def processed(self, entity: OsmEntity) -> None:
        if self._pbar is not None:
            self._pbar.update(1)

    def ended(self) -> None:
        if self._pbar is not None:
            self._pbar.close()
            self._pbar = None


class CompositeObserver:
    def __init__(self, observers: Iterable[RunObserver]) -> None:
        self.observers = tuple(observers)

    def started(self) -> None:
        for observer in self.observers:
            observer.started()

    def processed(self, entity: OsmEntity) -> None:
        for observer in self.observers:
            observer.processed(entity)

    def ended(self) -> None:
        for observer in self.observers:
            observer.ended()
