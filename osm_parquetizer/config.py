from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from dataclasses import field
from urllib.parse import urlsplit

from fsspec.core import split_protocol

from osm_parquetizer.arrow import WriterConfig
from osm_parquetizer.errors import ConfigurationError
from osm_parquetizer.helper import location_basename
from osm_parquetizer.helper import parent_location
from osm_parquetizer.osm.types import EntityKind


def validate_location(location: str, what: str) -> str:
    if not location or not location.strip():
        raise ConfigurationError(f"The {what} location is empty")

    protocol, path = split_protocol(location)
    if protocol is None:
        return location

    try:
        parts = urlsplit(location)
    except ValueError as e:
        raise ConfigurationError(f"Invalid {what} location {location!r}: {e}") from e
    if not path.strip("/"):
        raise ConfigurationError(f"Invalid {what} location {location!r}: missing path")
    if protocol == "s3" and not parts.netloc:
        raise ConfigurationError(f"Invalid {what} location {location!r}: missing bucket")
    return location


@dataclass(frozen=True)
class RunConfig:
    source: str
    destination: str
    exclude_metadata: bool = False
    entity_kinds: tuple[EntityKind, ...] = EntityKind.ordered()
    writer: WriterConfig = field(default_factory=WriterConfig)

    def __post_init__(self) -> None:
        validate_location(self.source, "source")
        validate_location(self.destination, "destination")
        if not location_basename(self.source):
            raise ConfigurationError(f"The source location {self.source!r} does not name a file")
        if not self.entity_kinds:
            raise ConfigurationError("At least one entity kind must be enabled")

    @classmethod
    def create(
        cls,
        source: str,
        destination: str | None = None,
        exclude_metadata: bool = False,
        entity_kinds: Iterable[EntityKind] | None = None,
        writer: WriterConfig | None = None,
    ) -> RunConfig:
        """Build a configuration, defaulting the destination to the source's parent."""
        validate_location(source, "source")
        kinds = EntityKind.ordered() if entity_kinds is None else set(entity_kinds)
        return cls(
            source=source,
            destination=destination or parent_location(source),
            exclude_metadata=exclude_metadata,
            entity_kinds=tuple(kind for kind in EntityKind.ordered() if kind in kinds),
            writer=writer or WriterConfig(),
        )
