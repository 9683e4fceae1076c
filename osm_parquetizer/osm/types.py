from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from typing import ClassVar
from typing import Union

OsmTags = dict[str, str]


class EntityKind(Enum):
    NODE = "node"
    WAY = "way"
    RELATION = "relation"

    @classmethod
    def ordered(cls) -> tuple[EntityKind, ...]:
        return (cls.NODE, cls.WAY, cls.RELATION)


@dataclass(frozen=True)
class OsmInfo:
    version: int | None
    timestamp: int | None
    changeset: int | None
    uid: int | None
    user: str | None

    @classmethod
    def default(cls) -> OsmInfo:
        return cls(None, None, None, None, None)


@dataclass(frozen=True)
class OsmNode:
    kind: ClassVar[EntityKind] = EntityKind.NODE

    id: int
    latitude: float
    longitude: float
    tags: OsmTags = field(default_factory=dict)
    info: OsmInfo | None = None


@dataclass(frozen=True)
class OsmWay:
    kind: ClassVar[EntityKind] = EntityKind.WAY

    id: int
    nodes: list[int] = field(default_factory=list)
    tags: OsmTags = field(default_factory=dict)
    info: OsmInfo | None = None


@dataclass(frozen=True)
class OsmRelationMember:
    type: EntityKind
    id: int
    role: str


@dataclass(frozen=True)
class OsmRelation:
    kind: ClassVar[EntityKind] = EntityKind.RELATION

    id: int
    members: list[OsmRelationMember] = field(default_factory=list)
    tags: OsmTags = field(default_factory=dict)
    info: OsmInfo | None = None


OsmEntity = Union[OsmNode, OsmWay, OsmRelation]
