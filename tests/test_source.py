from __future__ import annotations

import fsspec
import pytest

from osm_parquetizer.errors import SourceError
from osm_parquetizer.source import FilesystemSource
from osm_parquetizer.source import LocalSource
from osm_parquetizer.source import ObjectStorageSource
from osm_parquetizer.source import resolve_source


def test_plain_path_is_local():
    assert resolve_source("/data/monaco.pbf") == LocalSource("/data/monaco.pbf")


def test_file_uri_is_local():
    assert resolve_source("file:///data/monaco.pbf") == LocalSource("/data/monaco.pbf")


def test_s3_uri_is_object_storage():
    source = resolve_source("s3://osm-extracts/europe/monaco.pbf")

    assert source == ObjectStorageSource(bucket="osm-extracts", key="europe/monaco.pbf")
    assert source.url == "s3://osm-extracts/europe/monaco.pbf"


def test_other_schemes_use_filesystem_lookup():
    assert resolve_source("hdfs://namenode/osm/monaco.pbf") == FilesystemSource("hdfs://namenode/osm/monaco.pbf")


def test_s3_without_bucket():
    with pytest.raises(SourceError):
        resolve_source("s3:///monaco.pbf")


def test_local_source_reads_bytes(tmp_path):
    path = tmp_path / "monaco.pbf"
    path.write_bytes(b"\x00\x01\x02")

    with resolve_source(str(path)).open() as stream:
        assert stream.read() == b"\x00\x01\x02"


def test_missing_local_source(tmp_path):
    with pytest.raises(SourceError):
        with LocalSource(str(tmp_path / "missing.pbf")).open():
            pass


def test_filesystem_source_reads_bytes():
    with fsspec.open("memory://osm/monaco.pbf", "wb") as fout:
        fout.write(b"pbf")

    with resolve_source("memory://osm/monaco.pbf").open() as stream:
        assert stream.read() == b"pbf"


def test_missing_filesystem_source():
    with pytest.raises(SourceError):
        with FilesystemSource("memory://osm/does-not-exist.pbf").open():
            pass


def test_unknown_protocol():
    with pytest.raises(SourceError):
        with FilesystemSource("nosuchproto://x/monaco.pbf").open():
            pass
