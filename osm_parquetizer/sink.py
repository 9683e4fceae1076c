from __future__ import annotations

from collections.abc import Callable
from collections.abc import Iterable

from osm_parquetizer.arrow import ParquetFileWriter
from osm_parquetizer.arrow import WriterConfig
from osm_parquetizer.arrow import filesystem_for
from osm_parquetizer.errors import WriterError
from osm_parquetizer.helper import join_path
from osm_parquetizer.helper import location_basename
from osm_parquetizer.osm.types import EntityKind
from osm_parquetizer.osm.types import OsmEntity
from osm_parquetizer.schema import entity_to_row
from osm_parquetizer.schema import schema_for

EntityFilter = Callable[[OsmEntity], bool]

PARQUET_EXTENSION = "parquet"


def destination_path(source: str, destination: str, kind: EntityKind) -> str:
    return join_path(destination, f"{location_basename(source)}.{kind.value}.{PARQUET_EXTENSION}")


def has_tag(key: str, value: str | None = None) -> EntityFilter:
    """Filter matching entities tagged with ``key`` (and ``value``, when given)."""

    def predicate(entity: OsmEntity) -> bool:
        if key not in entity.tags:
            return False
        return value is None or entity.tags[key] == value

    return predicate


class ParquetSink:
    """Writes the entities of one kind to a single Parquet file.

    Entities matching any registered filter are skipped. Filters can only be
    changed before ``initialize``.
    """

    def __init__(
        self,
        source: str,
        destination: str,
        exclude_metadata: bool,
        kind: EntityKind,
        config: WriterConfig | None = None,
        filters: Iterable[EntityFilter] = (),
    ) -> None:
        self.kind = kind
        self.exclude_metadata = exclude_metadata
        self.config = config or WriterConfig()
        self.destination = destination_path(source, destination, kind)
        self.written = 0
        self.skipped = 0

        self._filters: list[EntityFilter] = []
        for predicate in filters:
            self._add(predicate)
        self._writer: ParquetFileWriter | None = None
        self._initialized = False

    @property
    def filters(self) -> tuple[EntityFilter, ...]:
        return tuple(self._filters)

    def add_filter(self, predicate: EntityFilter) -> None:
        self._check_configurable()
        self._add(predicate)

    def remove_filter(self, predicate: EntityFilter) -> None:
        self._check_configurable()
        if predicate in self._filters:
            self._filters.remove(predicate)

    def _add(self, predicate: EntityFilter) -> None:
        if predicate not in self._filters:
            self._filters.append(predicate)

    def _check_configurable(self) -> None:
        if self._initialized:
            raise RuntimeError(f"Filters of the {self.kind.value} sink are fixed once initialized")

    def initialize(self) -> None:
        if self._initialized:
            raise RuntimeError(f"The {self.kind.value} sink is already initialized")
        self._initialized = True

        schema = schema_for(self.kind, include_metadata=not self.exclude_metadata)
        try:
            fs, path = filesystem_for(self.destination)
            writer = ParquetFileWriter(fs, path, schema, self.config)
            writer.open()
        except Exception as e:
            raise WriterError("Unable to open writer", self.kind, self.destination) from e
        self._writer = writer

    def process(self, entity: OsmEntity) -> None:
        if entity.kind is not self.kind:
            raise TypeError(f"The {self.kind.value} sink received a {entity.kind.value}")
        if self._writer is None:
            raise RuntimeError(f"The {self.kind.value} sink is not open")

        if any(predicate(entity) for predicate in self._filters):
            self.skipped += 1
            return

        row = entity_to_row(entity, include_metadata=not self.exclude_metadata)
        try:
            self._writer.write(row)
        except Exception as e:
            raise WriterError("Unable to write entity", self.kind, self.destination) from e
        self.written += 1

    def complete(self) -> None:
        if self._writer is None:
            return
        writer, self._writer = self._writer, None
        try:
            writer.close()
        except Exception as e:
            raise WriterError("Unable to close writer", self.kind, self.destination) from e

    @property
    def is_open(self) -> bool:
        return self._writer is not None
