from __future__ import annotations

import lzma
import zlib
from collections.abc import Generator
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO

import zstd
from google.protobuf.message import DecodeError as ProtobufDecodeError

from osm_parquetizer.errors import DecodeError
from osm_parquetizer.protos.fileformat import Blob
from osm_parquetizer.protos.fileformat import BlobHeader
from osm_parquetizer.protos.osmformat import HeaderBlock
from osm_parquetizer.protos.osmformat import PrimitiveBlock

MAX_HEADER_SIZE = 64 * 1024
MAX_BLOB_SIZE = 32 * 1024 * 1024


class BlobType(Enum):
    OSM_HEADER = "OSMHeader"
    OSM_DATA = "OSMData"


@dataclass(frozen=True)
class BlobData:
    header: BlobHeader
    header_data: bytes
    blob_data: bytes


def _read_exactly(source: BinaryIO, size: int, what: str) -> bytes:
    data = source.read(size)
    if len(data) != size:
        raise DecodeError(f"Truncated {what}: expected {size} bytes, got {len(data)}")
    return data


def read_blob_data(source: BinaryIO) -> BlobData | None:
    data = source.read(4)
    if len(data) == 0:
        return None
    if len(data) != 4:
        raise DecodeError("Truncated blob header size")

    header_size = int.from_bytes(data, "big")
    if header_size > MAX_HEADER_SIZE:
        raise DecodeError(f"Blob header too large: {header_size} bytes")

    header_data = _read_exactly(source, header_size, "blob header")
    try:
        blob_header = BlobHeader.FromString(header_data)
    except ProtobufDecodeError as e:
        raise DecodeError("Invalid blob header") from e
    if blob_header.datasize > MAX_BLOB_SIZE:
        raise DecodeError(f"Blob too large: {blob_header.datasize} bytes")

    blob_data = _read_exactly(source, blob_header.datasize, "blob")

    return BlobData(header=blob_header, header_data=header_data, blob_data=blob_data)


def read_blobs(source: BinaryIO) -> Generator[BlobData, None, None]:
    while True:
        data = read_blob_data(source)
        if data is None:
            return
        yield data


def decompress_blob(blob: Blob) -> bytes:
    match blob.WhichOneof("data"):
        case "raw":
            return blob.raw
        case "zlib_data":
            return zlib.decompress(blob.zlib_data)
        case "lzma_data":
            return lzma.decompress(blob.lzma_data)
        case "zstd_data":
            return zstd.decompress(blob.zstd_data)
        case None:
            raise DecodeError("Blob has no data")
        case other:
            raise DecodeError(f"Unsupported blob compression: {other}")


def _parse_blob(blob_data: bytes) -> bytes:
    try:
        blob = Blob.FromString(blob_data)
        return decompress_blob(blob)
    except ProtobufDecodeError as e:
        raise DecodeError("Invalid blob") from e
    except (zlib.error, lzma.LZMAError, zstd.Error) as e:
        raise DecodeError("Unable to decompress blob") from e


def decode_header_blob(blob_data: bytes) -> HeaderBlock:
    data = _parse_blob(blob_data)
    try:
        return HeaderBlock.FromString(data)
    except ProtobufDecodeError as e:
        raise DecodeError("Invalid header block") from e


def decode_primitive_blob(blob_data: bytes) -> PrimitiveBlock:
    data = _parse_blob(blob_data)
    try:
        return PrimitiveBlock.FromString(data)
    except ProtobufDecodeError as e:
        raise DecodeError("Invalid primitive block") from e
