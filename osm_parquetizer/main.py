from __future__ import annotations

import argparse
import logging
import sys

from osm_parquetizer.arrow import WriterConfig
from osm_parquetizer.config import RunConfig
from osm_parquetizer.converter import pbf_to_parquet
from osm_parquetizer.errors import ConfigurationError
from osm_parquetizer.errors import ConversionError
from osm_parquetizer.observer import CompositeObserver
from osm_parquetizer.observer import LoggingObserver
from osm_parquetizer.observer import ProgressObserver
from osm_parquetizer.observer import RunObserver
from osm_parquetizer.osm.types import EntityKind

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="osm-parquetizer", description="Convert OSM PBF to Parquet")
    parser.add_argument("pbf_path", type=str, help="the OSM PBF file path or URI to be parquetized")
    parser.add_argument(
        "output_path",
        type=str,
        nargs="?",
        default=None,
        help="the directory path or URI where to store the Parquet files (default: next to the PBF file)",
    )
    parser.add_argument("--exclude-metadata", action="store_true", help="do not parquetize the metadata")
    parser.add_argument("--no-nodes", action="store_true", help="do not parquetize the nodes")
    parser.add_argument("--no-ways", action="store_true", help="do not parquetize the ways")
    parser.add_argument("--no-relations", action="store_true", help="do not parquetize the relations")
    parser.add_argument("--batch-size", type=int, default=WriterConfig.batch_size, help="rows per record batch")
    parser.add_argument("--compression", type=str, default=WriterConfig.compression, help="Parquet compression codec")
    parser.add_argument("--progress", action="store_true", help="show a progress bar")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def entity_kinds_from_args(args: argparse.Namespace) -> list[EntityKind]:
    disabled = {
        EntityKind.NODE: args.no_nodes,
        EntityKind.WAY: args.no_ways,
        EntityKind.RELATION: args.no_relations,
    }
    return [kind for kind in EntityKind.ordered() if not disabled[kind]]


def config_from_args(args: argparse.Namespace) -> RunConfig:
    try:
        writer = WriterConfig(batch_size=args.batch_size, compression=args.compression)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e
    return RunConfig.create(
        source=args.pbf_path,
        destination=args.output_path,
        exclude_metadata=args.exclude_metadata,
        entity_kinds=entity_kinds_from_args(args),
        writer=writer,
    )


def main(argv: list[str] | None = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = config_from_args(args)
    except ConfigurationError as e:
        parser.error(str(e))

    observer: RunObserver = LoggingObserver()
    if args.progress:
        observer = CompositeObserver([observer, ProgressObserver()])

    try:
        pbf_to_parquet(config, observer=observer)
    except ConversionError as e:
        logger.error(f"Conversion of {config.source} failed during {e.stage}: {e.__cause__}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
