from __future__ import annotations

import pytest

from osm_parquetizer.config import RunConfig
from osm_parquetizer.errors import ConfigurationError
from osm_parquetizer.helper import join_path
from osm_parquetizer.helper import location_basename
from osm_parquetizer.helper import parent_location
from osm_parquetizer.osm.types import EntityKind


@pytest.mark.parametrize(
    "location, basename",
    [
        ("/data/monaco-latest.osm.pbf", "monaco-latest.osm"),
        ("monaco.pbf", "monaco"),
        ("s3://bucket/extracts/romania-latest.osm.pbf", "romania-latest.osm"),
        ("hdfs://namenode:8020/osm/planet.pbf", "planet"),
    ],
)
def test_location_basename(location, basename):
    assert location_basename(location) == basename


@pytest.mark.parametrize(
    "location, parent",
    [
        ("/data/monaco.pbf", "/data"),
        ("monaco.pbf", "."),
        ("s3://bucket/extracts/romania.pbf", "s3://bucket/extracts"),
    ],
)
def test_parent_location(location, parent):
    assert parent_location(location) == parent


def test_join_path():
    assert join_path("s3://bucket/out/", "/a.parquet") == "s3://bucket/out/a.parquet"


def test_defaults():
    config = RunConfig.create("/data/monaco.pbf")

    assert config.destination == "/data"
    assert config.exclude_metadata is False
    assert config.entity_kinds == (EntityKind.NODE, EntityKind.WAY, EntityKind.RELATION)


def test_entity_kinds_are_deduplicated_and_ordered():
    config = RunConfig.create("a.pbf", "out", entity_kinds=[EntityKind.RELATION, EntityKind.NODE, EntityKind.NODE])

    assert config.entity_kinds == (EntityKind.NODE, EntityKind.RELATION)


def test_no_entity_kinds():
    with pytest.raises(ConfigurationError):
        RunConfig.create("a.pbf", "out", entity_kinds=[])


@pytest.mark.parametrize("source", ["", "   ", "s3:///key.pbf", "s3://", "hdfs://[::1/planet.pbf"])
def test_invalid_source(source):
    with pytest.raises(ConfigurationError):
        RunConfig.create(source, "out")


def test_invalid_destination():
    with pytest.raises(ConfigurationError):
        RunConfig.create("a.pbf", "s3://")


def test_config_is_immutable():
    config = RunConfig.create("a.pbf")

    with pytest.raises(AttributeError):
        config.exclude_metadata = True
