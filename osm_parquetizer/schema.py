from __future__ import annotations

from typing import Any

import pyarrow as pa

from osm_parquetizer.osm.types import EntityKind
from osm_parquetizer.osm.types import OsmEntity
from osm_parquetizer.osm.types import OsmInfo
from osm_parquetizer.osm.types import OsmNode
from osm_parquetizer.osm.types import OsmRelation
from osm_parquetizer.osm.types import OsmTags
from osm_parquetizer.osm.types import OsmWay

ARROW_TAGS_TYPE = pa.map_(pa.string(), pa.string())

ARROW_MEMBER_TYPE = pa.struct(
    [
        pa.field("type", pa.string()),
        pa.field("id", pa.int64()),
        pa.field("role", pa.string()),
    ]
)

ARROW_METADATA_FIELDS = [
    pa.field("version", pa.int32()),
    pa.field("timestamp", pa.timestamp("ms", tz="UTC")),
    pa.field("changeset", pa.int64()),
    pa.field("uid", pa.int32()),
    pa.field("user", pa.string()),
]

METADATA_COLUMNS = tuple(f.name for f in ARROW_METADATA_FIELDS)

ARROW_NODE_FIELDS = [
    pa.field("id", pa.int64(), nullable=False),
    pa.field("latitude", pa.float64()),
    pa.field("longitude", pa.float64()),
    pa.field("tags", ARROW_TAGS_TYPE),
]

ARROW_WAY_FIELDS = [
    pa.field("id", pa.int64(), nullable=False),
    pa.field("tags", ARROW_TAGS_TYPE),
    pa.field("nodes", pa.list_(pa.int64())),
]

ARROW_RELATION_FIELDS = [
    pa.field("id", pa.int64(), nullable=False),
    pa.field("tags", ARROW_TAGS_TYPE),
    pa.field("members", pa.list_(ARROW_MEMBER_TYPE)),
]

_FIELDS_BY_KIND = {
    EntityKind.NODE: ARROW_NODE_FIELDS,
    EntityKind.WAY: ARROW_WAY_FIELDS,
    EntityKind.RELATION: ARROW_RELATION_FIELDS,
}


def schema_for(kind: EntityKind, include_metadata: bool) -> pa.Schema:
    fields = list(_FIELDS_BY_KIND[kind])
    if include_metadata:
        fields.extend(ARROW_METADATA_FIELDS)
    return pa.schema(fields)


def _tags_row(tags: OsmTags | None) -> list[tuple[str, str]]:
    if not tags:
        return []
    return list(tags.items())


def _metadata_row(info: OsmInfo | None) -> dict[str, Any]:
    info = info or OsmInfo.default()
    return {
        "version": info.version,
        "timestamp": info.timestamp,
        "changeset": info.changeset,
        "uid": info.uid,
        "user": info.user,
    }


def node_row(node: OsmNode) -> dict[str, Any]:
    return {
        "id": node.id,
        "latitude": node.latitude,
        "longitude": node.longitude,
        "tags": _tags_row(node.tags),
    }


def way_row(way: OsmWay) -> dict[str, Any]:
    return {
        "id": way.id,
        "tags": _tags_row(way.tags),
        "nodes": list(way.nodes),
    }


def relation_row(relation: OsmRelation) -> dict[str, Any]:
    return {
        "id": relation.id,
        "tags": _tags_row(relation.tags),
        "members": [{"type": m.type.value, "id": m.id, "role": m.role} for m in relation.members],
    }


_ROW_BY_KIND = {
    EntityKind.NODE: node_row,
    EntityKind.WAY: way_row,
    EntityKind.RELATION: relation_row,
}


def entity_to_row(entity: OsmEntity, include_metadata: bool) -> dict[str, Any]:
    """Map an entity to one row of ``schema_for(entity.kind, include_metadata)``."""
    row = _ROW_BY_KIND[entity.kind](entity)
    if include_metadata:
        row.update(_metadata_row(entity.info))
    return row
