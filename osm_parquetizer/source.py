from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import AbstractContextManager
from contextlib import contextmanager
from dataclasses import dataclass
from typing import BinaryIO
from typing import Protocol
from urllib.parse import urlsplit

import fsspec
from fsspec.core import split_protocol

from osm_parquetizer.errors import SourceError

logger = logging.getLogger(__name__)

OBJECT_STORAGE_PROTOCOLS = ("s3", "s3a")


class Source(Protocol):
    def open(self) -> AbstractContextManager[BinaryIO]: ...


@contextmanager
def _open_with_fsspec(url: str) -> Generator[BinaryIO, None, None]:
    try:
        open_file = fsspec.open(url, "rb")
        stream = open_file.open()
    except (OSError, ImportError, ValueError) as e:
        raise SourceError(f"Unable to open source file: {url}") from e
    with stream:
        yield stream


@dataclass(frozen=True)
class LocalSource:
    path: str

    @contextmanager
    def open(self) -> Generator[BinaryIO, None, None]:
        logger.info(f"Loading source file (local): {self.path}")
        try:
            stream = open(self.path, "rb")
        except OSError as e:
            raise SourceError(f"Unable to open source file: {self.path}") from e
        with stream:
            yield stream


@dataclass(frozen=True)
class ObjectStorageSource:
    bucket: str
    key: str

    @property
    def url(self) -> str:
        return f"s3://{self.bucket}/{self.key}"

    def open(self) -> AbstractContextManager[BinaryIO]:
        logger.info(f"Loading source file (object storage): bucket={self.bucket}, key={self.key}")
        return _open_with_fsspec(self.url)


@dataclass(frozen=True)
class FilesystemSource:
    url: str

    def open(self) -> AbstractContextManager[BinaryIO]:
        logger.info(f"Loading source file (filesystem): {self.url}")
        return _open_with_fsspec(self.url)


def resolve_source(location: str) -> Source:
    """Pick the source variant for ``location`` from its scheme."""
    protocol, path = split_protocol(location)
    if protocol is None or protocol == "file":
        return LocalSource(path)
    if protocol in OBJECT_STORAGE_PROTOCOLS:
        parts = urlsplit(location)
        if not parts.netloc:
            raise SourceError(f"Missing bucket in source location: {location}")
        return ObjectStorageSource(bucket=parts.netloc, key=parts.path.lstrip("/"))
    return FilesystemSource(location)
