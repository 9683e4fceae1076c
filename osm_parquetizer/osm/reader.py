from __future__ import annotations

from collections.abc import Generator
from typing import BinaryIO
from typing import Protocol

from osm_parquetizer.errors import DecodeError
from osm_parquetizer.osm.blob import BlobType
from osm_parquetizer.osm.blob import decode_header_blob
from osm_parquetizer.osm.blob import decode_primitive_blob
from osm_parquetizer.osm.blob import read_blobs
from osm_parquetizer.osm.elements import decode_block
from osm_parquetizer.osm.types import OsmEntity
from osm_parquetizer.protos.osmformat import HeaderBlock

SUPPORTED_FEATURES = frozenset({"OsmSchema-V0.6", "DenseNodes"})


class EntitySink(Protocol):
    def initialize(self) -> None: ...

    def process(self, entity: OsmEntity) -> None: ...

    def complete(self) -> None: ...

    def abort(self) -> None: ...


def check_header(header: HeaderBlock) -> None:
    unsupported = [feature for feature in header.required_features if feature not in SUPPORTED_FEATURES]
    if unsupported:
        raise DecodeError(f"Unsupported required features: {', '.join(unsupported)}")


class PbfReader:
    """Decodes an OSM PBF stream and pushes its entities, in file order, into a sink."""

    def __init__(self, source: BinaryIO, exclude_metadata: bool = False) -> None:
        self.source = source
        self.exclude_metadata = exclude_metadata
        self.header: HeaderBlock | None = None

    def iter_blocks(self) -> Generator[list[OsmEntity], None, None]:
        for blob in read_blobs(self.source):
            match blob.header.type:
                case BlobType.OSM_HEADER.value:
                    self.header = decode_header_blob(blob.blob_data)
                    check_header(self.header)
                case BlobType.OSM_DATA.value:
                    if self.header is None:
                        raise DecodeError("OSMData blob found before the OSMHeader blob")
                    block = decode_primitive_blob(blob.blob_data)
                    try:
                        entities = list(decode_block(block, exclude_metadata=self.exclude_metadata))
                    except (IndexError, ValueError) as e:
                        raise DecodeError("Invalid primitive block content") from e
                    yield entities
                case other:
                    raise DecodeError(f"Unknown blob type: {other}")

    def iter_entities(self) -> Generator[OsmEntity, None, None]:
        for entities in self.iter_blocks():
            yield from entities

    def run(self, sink: EntitySink) -> None:
        sink.initialize()
        try:
            for entity in self.iter_entities():
                sink.process(entity)
        except BaseException:
            sink.abort()
            raise
        sink.complete()
