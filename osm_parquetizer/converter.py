from __future__ import annotations

import logging
from collections.abc import Iterable
from collections.abc import Mapping

from osm_parquetizer.config import RunConfig
from osm_parquetizer.errors import ConversionError
from osm_parquetizer.errors import DecodeError
from osm_parquetizer.errors import SourceError
from osm_parquetizer.errors import WriterError
from osm_parquetizer.observer import RunObserver
from osm_parquetizer.osm.reader import PbfReader
from osm_parquetizer.osm.types import EntityKind
from osm_parquetizer.router import MultiEntitySink
from osm_parquetizer.sink import EntityFilter
from osm_parquetizer.source import resolve_source

logger = logging.getLogger(__name__)


def pbf_to_parquet(
    config: RunConfig,
    observer: RunObserver | None = None,
    filters: Mapping[EntityKind, Iterable[EntityFilter]] | None = None,
) -> dict[EntityKind, str]:
    """Convert ``config.source`` into one Parquet file per enabled entity kind.

    Returns the written file location of every enabled kind.
    """
    try:
        source = resolve_source(config.source)
    except SourceError as e:
        raise ConversionError("source", str(e)) from e

    router = MultiEntitySink(config, observer=observer, filters=filters)
    try:
        with source.open() as stream:
            PbfReader(stream, exclude_metadata=config.exclude_metadata).run(router)
    except SourceError as e:
        raise ConversionError("source", str(e)) from e
    except DecodeError as e:
        raise ConversionError("decode", str(e)) from e
    except WriterError as e:
        raise ConversionError("write", str(e)) from e
    except OSError as e:
        # Reads failing after the source was opened.
        raise ConversionError("source", f"Unable to read source file: {config.source}: {e}") from e

    outputs = {}
    for kind, sink in router.sinks.items():
        logger.info(f"Finished writing to {sink.destination}: written={sink.written}, skipped={sink.skipped}")
        outputs[kind] = sink.destination
    return outputs
