from __future__ import annotations

from osm_parquetizer.protos.builder import add_field
from osm_parquetizer.protos.builder import message_class
from osm_parquetizer.protos.builder import new_file
from osm_parquetizer.protos.builder import register


def _build() -> None:
    file_proto = new_file("fileformat.proto")

    blob = file_proto.message_type.add(name="Blob")
    blob.oneof_decl.add(name="data")
    add_field(blob, "raw_size", 2, "optional", "int32")
    add_field(blob, "raw", 1, "optional", "bytes", oneof_index=0)
    add_field(blob, "zlib_data", 3, "optional", "bytes", oneof_index=0)
    add_field(blob, "lzma_data", 4, "optional", "bytes", oneof_index=0)
    add_field(blob, "OBSOLETE_bzip2_data", 5, "optional", "bytes", oneof_index=0)
    add_field(blob, "lz4_data", 6, "optional", "bytes", oneof_index=0)
    add_field(blob, "zstd_data", 7, "optional", "bytes", oneof_index=0)

    header = file_proto.message_type.add(name="BlobHeader")
    add_field(header, "type", 1, "required", "string")
    add_field(header, "indexdata", 2, "optional", "bytes")
    add_field(header, "datasize", 3, "required", "int32")

    register(file_proto)


_build()

Blob = message_class("Blob")
BlobHeader = message_class("BlobHeader")
