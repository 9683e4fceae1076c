from __future__ import annotations

import itertools
from collections.abc import Generator
from collections.abc import Iterable
from collections.abc import Iterator
from collections.abc import Sequence

from more_itertools import chunked
from more_itertools import split_at

from osm_parquetizer.errors import DecodeError
from osm_parquetizer.osm.types import EntityKind
from osm_parquetizer.osm.types import OsmEntity
from osm_parquetizer.osm.types import OsmInfo
from osm_parquetizer.osm.types import OsmNode
from osm_parquetizer.osm.types import OsmRelation
from osm_parquetizer.osm.types import OsmRelationMember
from osm_parquetizer.osm.types import OsmTags
from osm_parquetizer.osm.types import OsmWay
from osm_parquetizer.protos.osmformat import DenseInfo
from osm_parquetizer.protos.osmformat import DenseNodes
from osm_parquetizer.protos.osmformat import Info
from osm_parquetizer.protos.osmformat import Node
from osm_parquetizer.protos.osmformat import PrimitiveBlock
from osm_parquetizer.protos.osmformat import Relation
from osm_parquetizer.protos.osmformat import Way

# Indexed by Relation.MemberType
MEMBER_TYPES = (EntityKind.NODE, EntityKind.WAY, EntityKind.RELATION)


def delta_decode(values: Iterable[int]) -> Iterator[int]:
    return itertools.accumulate(values)


class ValueDecoder:
    def __init__(self, block: PrimitiveBlock) -> None:
        self.granularity = block.granularity or 100
        self.lat_offset = block.lat_offset or 0
        self.lon_offset = block.lon_offset or 0
        self.date_granularity = block.date_granularity or 1000

    def lat(self, value: int) -> float:
        return 0.000000001 * (self.lat_offset + (self.granularity * value))

    def lon(self, value: int) -> float:
        return 0.000000001 * (self.lon_offset + (self.granularity * value))

    def timestamp(self, value: int) -> int:
        """Milliseconds since the epoch."""
        return value * self.date_granularity


class PrimitiveBlockDecoder:
    def __init__(self, block: PrimitiveBlock, exclude_metadata: bool = False) -> None:
        self.block = block
        self.exclude_metadata = exclude_metadata
        self.string_table = [s.decode("utf-8") for s in block.stringtable.s]
        self.value_decoder = ValueDecoder(block)

    def decode_string(self, index: int) -> str:
        return self.string_table[index]

    def _make_info(self, version: int, timestamp: int | None, changeset: int, uid: int, user_sid: int) -> OsmInfo:
        return OsmInfo(
            version=version if version >= 0 else None,
            timestamp=self.value_decoder.timestamp(timestamp) if timestamp is not None else None,
            changeset=changeset or None,
            uid=uid if uid >= 0 else None,
            user=self.decode_string(user_sid) if user_sid else None,
        )

    def decode_info(self, entity: Node | Way | Relation) -> OsmInfo | None:
        if self.exclude_metadata:
            return None
        if not entity.HasField("info"):
            return OsmInfo.default()
        info: Info = entity.info
        timestamp = info.timestamp if info.HasField("timestamp") else None
        return self._make_info(info.version, timestamp, info.changeset, info.uid, info.user_sid)

    def decode_tags(self, keys: Sequence[int], vals: Sequence[int]) -> OsmTags:
        return {self.decode_string(key): self.decode_string(val) for key, val in zip(keys, vals, strict=True)}

    def decode_node(self, node: Node) -> OsmNode:
        return OsmNode(
            id=node.id,
            latitude=self.value_decoder.lat(node.lat),
            longitude=self.value_decoder.lon(node.lon),
            tags=self.decode_tags(node.keys, node.vals),
            info=self.decode_info(node),
        )

    def decode_dense_info(self, dense: DenseNodes, count: int) -> Iterable[OsmInfo | None]:
        if self.exclude_metadata:
            return itertools.repeat(None, count)
        if not dense.HasField("denseinfo"):
            return itertools.repeat(OsmInfo.default(), count)

        info: DenseInfo = dense.denseinfo
        columns = (info.version, info.timestamp, info.changeset, info.uid, info.user_sid)
        if any(len(column) != count for column in columns):
            raise DecodeError(f"DenseInfo arrays do not match the {count} dense nodes")
        return itertools.starmap(
            self._make_info,
            zip(
                info.version,
                delta_decode(info.timestamp),
                delta_decode(info.changeset),
                delta_decode(info.uid),
                delta_decode(info.user_sid),
            ),
        )

    def _decode_tag_group(self, group: list[int]) -> OsmTags:
        return {self.decode_string(key): self.decode_string(val) for key, val in chunked(group, 2, strict=True)}

    def decode_dense_tags(self, keys_vals: Sequence[int], count: int) -> list[OsmTags]:
        # Tags of consecutive nodes are separated by a 0 string index.
        if not keys_vals:
            return [{} for _ in range(count)]
        groups = list(split_at(keys_vals, lambda sid: sid == 0))
        if keys_vals[-1] == 0:
            groups.pop()
        if len(groups) != count:
            raise DecodeError(f"Dense tags cover {len(groups)} nodes, expected {count}")
        return [self._decode_tag_group(group) for group in groups]

    def decode_dense_nodes(self, dense: DenseNodes) -> Generator[OsmNode, None, None]:
        count = len(dense.id)
        if len(dense.lat) != count or len(dense.lon) != count:
            raise DecodeError(
                f"Dense node arrays differ in length: id={count}, lat={len(dense.lat)}, lon={len(dense.lon)}"
            )
        for id, info, tags, lat, lon in zip(
            delta_decode(dense.id),
            self.decode_dense_info(dense, count),
            self.decode_dense_tags(dense.keys_vals, count),
            delta_decode(dense.lat),
            delta_decode(dense.lon),
            strict=True,
        ):
            yield OsmNode(
                id=id,
                latitude=self.value_decoder.lat(lat),
                longitude=self.value_decoder.lon(lon),
                tags=tags,
                info=info,
            )

    def decode_way(self, way: Way) -> OsmWay:
        return OsmWay(
            id=way.id,
            nodes=list(delta_decode(way.refs)),
            tags=self.decode_tags(way.keys, way.vals),
            info=self.decode_info(way),
        )

    def decode_relation(self, relation: Relation) -> OsmRelation:
        return OsmRelation(
            id=relation.id,
            members=[
                OsmRelationMember(
                    type=MEMBER_TYPES[member_type],
                    id=member_id,
                    role=self.decode_string(role_sid),
                )
                for role_sid, member_id, member_type in zip(
                    relation.roles_sid, delta_decode(relation.memids), relation.types, strict=True
                )
            ],
            tags=self.decode_tags(relation.keys, relation.vals),
            info=self.decode_info(relation),
        )


def decode_block(block: PrimitiveBlock, exclude_metadata: bool = False) -> Generator[OsmEntity, None, None]:
    decoder = PrimitiveBlockDecoder(block, exclude_metadata=exclude_metadata)

    for group in block.primitivegroup:
        for node in group.nodes:
            yield decoder.decode_node(node)

        if group.HasField("dense"):
            yield from decoder.decode_dense_nodes(group.dense)

        for way in group.ways:
            yield decoder.decode_way(way)

        for relation in group.relations:
            yield decoder.decode_relation(relation)
