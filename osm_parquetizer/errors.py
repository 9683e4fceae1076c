from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from osm_parquetizer.osm.types import EntityKind


class ParquetizerError(Exception):
    """Base class of every error raised by a conversion run."""


class ConfigurationError(ParquetizerError):
    """The run configuration is unusable; raised before any sink exists."""


class SourceError(ParquetizerError):
    """The source location could not be resolved or opened."""


class DecodeError(ParquetizerError):
    """The source stream is not a valid OSM PBF file."""


class WriterError(ParquetizerError):
    """A Parquet writer could not be opened, written or closed."""

    def __init__(self, message: str, kind: EntityKind, path: str) -> None:
        super().__init__(f"{message}: kind={kind.value}, destination={path}")
        self.kind = kind
        self.path = path


class ConversionError(ParquetizerError):
    """A conversion run failed at ``stage``; the cause is chained."""

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(f"{stage} failed: {message}")
        self.stage = stage
