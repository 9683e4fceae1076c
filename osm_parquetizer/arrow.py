from __future__ import annotations

import os
import posixpath
from dataclasses import dataclass
from typing import Any

import pyarrow as pa
import pyarrow.fs
import pyarrow.parquet as pq
from fsspec.core import split_protocol


@dataclass(frozen=True)
class WriterConfig:
    batch_size: int = 64 * 1024
    row_group_size: int | None = None
    compression: str = "snappy"

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError("batch_size must be positive")
        if self.row_group_size is not None and self.row_group_size < 1:
            raise ValueError("row_group_size must be positive")


def filesystem_for(location: str) -> tuple[pa.fs.FileSystem, str]:
    """Resolve a destination location into a pyarrow filesystem and a path on it."""
    protocol, path = split_protocol(location)
    if protocol is None:
        return pa.fs.LocalFileSystem(), os.path.abspath(path)
    return pa.fs.FileSystem.from_uri(location)


class ParquetFileWriter:
    """Buffers rows for a single Parquet file and writes them as record batches."""

    def __init__(self, fs: pa.fs.FileSystem, path: str, schema: pa.Schema, config: WriterConfig) -> None:
        self.fs = fs
        self.path = path
        self.schema = schema
        self.config = config
        self._rows: list[dict[str, Any]] = []
        self._writer: pq.ParquetWriter | None = None

    def open(self) -> None:
        if self._writer is not None:
            raise RuntimeError(f"Writer already open: {self.path}")

        parent = posixpath.dirname(self.path)
        if parent:
            self.fs.create_dir(parent, recursive=True)

        self._writer = pq.ParquetWriter(
            self.path,
            schema=self.schema,
            filesystem=self.fs,
            compression=self.config.compression,
        )

    def write(self, row: dict[str, Any]) -> None:
        if self._writer is None:
            raise RuntimeError(f"Writer is not open: {self.path}")
        self._rows.append(row)
        if len(self._rows) >= self.config.batch_size:
            self.flush()

    def flush(self) -> None:
        if self._writer is None or not self._rows:
            return
        batch = pa.RecordBatch.from_pylist(self._rows, schema=self.schema)
        self._writer.write_batch(batch, row_group_size=self.config.row_group_size)
        self._rows.clear()

    def close(self) -> None:
        if self._writer is None:
            return
        try:
            self.flush()
        finally:
            writer, self._writer = self._writer, None
            self._rows.clear()
            writer.close()
