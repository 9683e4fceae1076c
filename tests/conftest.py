from __future__ import annotations

import lzma
import zlib
from collections.abc import Iterable
from pathlib import Path

import pytest
import zstd

from osm_parquetizer.osm.types import EntityKind
from osm_parquetizer.osm.types import OsmEntity
from osm_parquetizer.osm.types import OsmInfo
from osm_parquetizer.osm.types import OsmNode
from osm_parquetizer.osm.types import OsmRelation
from osm_parquetizer.osm.types import OsmRelationMember
from osm_parquetizer.osm.types import OsmWay
from osm_parquetizer.protos.fileformat import Blob
from osm_parquetizer.protos.fileformat import BlobHeader
from osm_parquetizer.protos.osmformat import HeaderBlock
from osm_parquetizer.protos.osmformat import PrimitiveBlock

MEMBER_TYPE_NUMBERS = {EntityKind.NODE: 0, EntityKind.WAY: 1, EntityKind.RELATION: 2}


def deltas(values: Iterable[int]) -> list[int]:
    previous = 0
    result = []
    for value in values:
        result.append(value - previous)
        previous = value
    return result


class StringTable:
    def __init__(self) -> None:
        self.strings = [""]
        self._index = {"": 0}

    def __call__(self, value: str) -> int:
        if value not in self._index:
            self._index[value] = len(self.strings)
            self.strings.append(value)
        return self._index[value]


def frame(blob_type: str, payload: bytes, compression: str) -> bytes:
    blob = Blob(raw_size=len(payload))
    match compression:
        case "zlib":
            blob.zlib_data = zlib.compress(payload)
        case "lzma":
            blob.lzma_data = lzma.compress(payload)
        case "zstd":
            blob.zstd_data = zstd.compress(payload)
        case "raw":
            blob.raw = payload
        case "none":
            pass
    blob_data = blob.SerializeToString()
    header = BlobHeader(type=blob_type, datasize=len(blob_data)).SerializeToString()
    return len(header).to_bytes(4, "big") + header + blob_data


class PbfBuilder:
    """Builds small OSM PBF files; each ``add_*`` call produces one primitive block."""

    def __init__(self, required_features: Iterable[str] = ("OsmSchema-V0.6", "DenseNodes")) -> None:
        self.required_features = list(required_features)
        self.blocks: list[PrimitiveBlock] = []

    def _fill_info(self, message, info: OsmInfo | None, strings: StringTable) -> None:
        if info is None:
            return
        message.info.version = info.version
        message.info.timestamp = info.timestamp // 1000
        message.info.changeset = info.changeset
        message.info.uid = info.uid
        message.info.user_sid = strings(info.user)

    def _new_block(self) -> tuple[PrimitiveBlock, StringTable]:
        return PrimitiveBlock(), StringTable()

    def _finish(self, block: PrimitiveBlock, strings: StringTable) -> PbfBuilder:
        block.stringtable.s.extend(s.encode("utf-8") for s in strings.strings)
        self.blocks.append(block)
        return self

    def add_nodes(self, nodes: list[OsmNode]) -> PbfBuilder:
        block, strings = self._new_block()
        group = block.primitivegroup.add()
        for node in nodes:
            message = group.nodes.add(id=node.id, lat=round(node.latitude * 1e7), lon=round(node.longitude * 1e7))
            message.keys.extend(strings(k) for k in node.tags)
            message.vals.extend(strings(v) for v in node.tags.values())
            self._fill_info(message, node.info, strings)
        return self._finish(block, strings)

    def add_dense_nodes(self, nodes: list[OsmNode]) -> PbfBuilder:
        block, strings = self._new_block()
        dense = block.primitivegroup.add().dense
        dense.id.extend(deltas(node.id for node in nodes))
        dense.lat.extend(deltas(round(node.latitude * 1e7) for node in nodes))
        dense.lon.extend(deltas(round(node.longitude * 1e7) for node in nodes))
        if any(node.tags for node in nodes):
            for node in nodes:
                for key, value in node.tags.items():
                    dense.keys_vals.extend([strings(key), strings(value)])
                dense.keys_vals.append(0)
        if all(node.info is not None for node in nodes):
            infos = [node.info for node in nodes]
            dense.denseinfo.version.extend(info.version for info in infos)
            dense.denseinfo.timestamp.extend(deltas(info.timestamp // 1000 for info in infos))
            dense.denseinfo.changeset.extend(deltas(info.changeset for info in infos))
            dense.denseinfo.uid.extend(deltas(info.uid for info in infos))
            dense.denseinfo.user_sid.extend(deltas(strings(info.user) for info in infos))
        return self._finish(block, strings)

    def add_ways(self, ways: list[OsmWay]) -> PbfBuilder:
        block, strings = self._new_block()
        group = block.primitivegroup.add()
        for way in ways:
            message = group.ways.add(id=way.id)
            message.keys.extend(strings(k) for k in way.tags)
            message.vals.extend(strings(v) for v in way.tags.values())
            message.refs.extend(deltas(way.nodes))
            self._fill_info(message, way.info, strings)
        return self._finish(block, strings)

    def add_relations(self, relations: list[OsmRelation]) -> PbfBuilder:
        block, strings = self._new_block()
        group = block.primitivegroup.add()
        for relation in relations:
            message = group.relations.add(id=relation.id)
            message.keys.extend(strings(k) for k in relation.tags)
            message.vals.extend(strings(v) for v in relation.tags.values())
            message.roles_sid.extend(strings(m.role) for m in relation.members)
            message.memids.extend(deltas(m.id for m in relation.members))
            message.types.extend(MEMBER_TYPE_NUMBERS[m.type] for m in relation.members)
            self._fill_info(message, relation.info, strings)
        return self._finish(block, strings)

    def add_entities(self, entities: Iterable[OsmEntity]) -> PbfBuilder:
        """Add each entity in its own block, keeping the given order."""
        for entity in entities:
            match entity.kind:
                case EntityKind.NODE:
                    self.add_nodes([entity])
                case EntityKind.WAY:
                    self.add_ways([entity])
                case EntityKind.RELATION:
                    self.add_relations([entity])
        return self

    def to_bytes(self, compression: str = "zlib") -> bytes:
        header = HeaderBlock(required_features=self.required_features, writingprogram="tests")
        data = [frame("OSMHeader", header.SerializeToString(), compression)]
        data.extend(frame("OSMData", block.SerializeToString(), compression) for block in self.blocks)
        return b"".join(data)

    def write(self, path: Path, compression: str = "zlib") -> Path:
        path.write_bytes(self.to_bytes(compression))
        return path


class RecordingObserver:
    def __init__(self) -> None:
        self.events: list[str] = []
        self.processed_ids: list[int] = []

    def started(self) -> None:
        self.events.append("started")

    def processed(self, entity: OsmEntity) -> None:
        self.events.append("processed")
        self.processed_ids.append(entity.id)

    def ended(self) -> None:
        self.events.append("ended")


INFO = OsmInfo(version=3, timestamp=1_600_000_000_000, changeset=42, uid=7, user="mapper")


@pytest.fixture
def pbf_builder() -> PbfBuilder:
    return PbfBuilder()


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def info() -> OsmInfo:
    return INFO


@pytest.fixture
def sample_entities(info: OsmInfo) -> list[OsmEntity]:
    return [
        OsmNode(id=1, latitude=46.77, longitude=23.59, tags={"amenity": "cafe"}, info=info),
        OsmNode(id=2, latitude=46.78, longitude=23.6, info=info),
        OsmWay(id=10, nodes=[1, 2], tags={"highway": "residential"}, info=info),
        OsmWay(id=11, nodes=[2, 1], tags={"building": "yes", "demolished": "yes"}, info=info),
        OsmRelation(
            id=100,
            members=[
                OsmRelationMember(type=EntityKind.WAY, id=10, role="outer"),
                OsmRelationMember(type=EntityKind.NODE, id=1, role=""),
            ],
            tags={"type": "multipolygon"},
            info=info,
        ),
    ]
