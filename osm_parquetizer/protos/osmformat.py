from __future__ import annotations

from osm_parquetizer.protos.builder import add_field
from osm_parquetizer.protos.builder import message_class
from osm_parquetizer.protos.builder import new_file
from osm_parquetizer.protos.builder import register


def _build() -> None:
    file_proto = new_file("osmformat.proto")
    messages = file_proto.message_type

    header = messages.add(name="HeaderBlock")
    add_field(header, "bbox", 1, "optional", "message:HeaderBBox")
    add_field(header, "required_features", 4, "repeated", "string")
    add_field(header, "optional_features", 5, "repeated", "string")
    add_field(header, "writingprogram", 16, "optional", "string")
    add_field(header, "source", 17, "optional", "string")
    add_field(header, "osmosis_replication_timestamp", 32, "optional", "int64")
    add_field(header, "osmosis_replication_sequence_number", 33, "optional", "int64")
    add_field(header, "osmosis_replication_base_url", 34, "optional", "string")

    bbox = messages.add(name="HeaderBBox")
    add_field(bbox, "left", 1, "required", "sint64")
    add_field(bbox, "right", 2, "required", "sint64")
    add_field(bbox, "top", 3, "required", "sint64")
    add_field(bbox, "bottom", 4, "required", "sint64")

    block = messages.add(name="PrimitiveBlock")
    add_field(block, "stringtable", 1, "required", "message:StringTable")
    add_field(block, "primitivegroup", 2, "repeated", "message:PrimitiveGroup")
    add_field(block, "granularity", 17, "optional", "int32", default="100")
    add_field(block, "date_granularity", 18, "optional", "int32", default="1000")
    add_field(block, "lat_offset", 19, "optional", "int64", default="0")
    add_field(block, "lon_offset", 20, "optional", "int64", default="0")

    group = messages.add(name="PrimitiveGroup")
    add_field(group, "nodes", 1, "repeated", "message:Node")
    add_field(group, "dense", 2, "optional", "message:DenseNodes")
    add_field(group, "ways", 3, "repeated", "message:Way")
    add_field(group, "relations", 4, "repeated", "message:Relation")
    add_field(group, "changesets", 5, "repeated", "message:ChangeSet")

    string_table = messages.add(name="StringTable")
    add_field(string_table, "s", 1, "repeated", "bytes")

    info = messages.add(name="Info")
    add_field(info, "version", 1, "optional", "int32", default="-1")
    add_field(info, "timestamp", 2, "optional", "int64")
    add_field(info, "changeset", 3, "optional", "int64")
    add_field(info, "uid", 4, "optional", "int32")
    add_field(info, "user_sid", 5, "optional", "uint32")
    add_field(info, "visible", 6, "optional", "bool")

    dense_info = messages.add(name="DenseInfo")
    add_field(dense_info, "version", 1, "repeated", "int32", packed=True)
    add_field(dense_info, "timestamp", 2, "repeated", "sint64", packed=True)
    add_field(dense_info, "changeset", 3, "repeated", "sint64", packed=True)
    add_field(dense_info, "uid", 4, "repeated", "sint32", packed=True)
    add_field(dense_info, "user_sid", 5, "repeated", "sint32", packed=True)
    add_field(dense_info, "visible", 6, "repeated", "bool", packed=True)

    changeset = messages.add(name="ChangeSet")
    add_field(changeset, "id", 1, "required", "int64")

    node = messages.add(name="Node")
    add_field(node, "id", 1, "required", "sint64")
    add_field(node, "keys", 2, "repeated", "uint32", packed=True)
    add_field(node, "vals", 3, "repeated", "uint32", packed=True)
    add_field(node, "info", 4, "optional", "message:Info")
    add_field(node, "lat", 8, "required", "sint64")
    add_field(node, "lon", 9, "required", "sint64")

    dense = messages.add(name="DenseNodes")
    add_field(dense, "id", 1, "repeated", "sint64", packed=True)
    add_field(dense, "denseinfo", 5, "optional", "message:DenseInfo")
    add_field(dense, "lat", 8, "repeated", "sint64", packed=True)
    add_field(dense, "lon", 9, "repeated", "sint64", packed=True)
    add_field(dense, "keys_vals", 10, "repeated", "int32", packed=True)

    way = messages.add(name="Way")
    add_field(way, "id", 1, "required", "int64")
    add_field(way, "keys", 2, "repeated", "uint32", packed=True)
    add_field(way, "vals", 3, "repeated", "uint32", packed=True)
    add_field(way, "info", 4, "optional", "message:Info")
    add_field(way, "refs", 8, "repeated", "sint64", packed=True)

    relation = messages.add(name="Relation")
    member_type = relation.enum_type.add(name="MemberType")
    member_type.value.add(name="NODE", number=0)
    member_type.value.add(name="WAY", number=1)
    member_type.value.add(name="RELATION", number=2)
    add_field(relation, "id", 1, "required", "int64")
    add_field(relation, "keys", 2, "repeated", "uint32", packed=True)
    add_field(relation, "vals", 3, "repeated", "uint32", packed=True)
    add_field(relation, "info", 4, "optional", "message:Info")
    add_field(relation, "roles_sid", 8, "repeated", "int32", packed=True)
    add_field(relation, "memids", 9, "repeated", "sint64", packed=True)
    add_field(relation, "types", 10, "repeated", "enum:Relation.MemberType", packed=True)

    register(file_proto)


_build()

HeaderBlock = message_class("HeaderBlock")
HeaderBBox = message_class("HeaderBBox")
PrimitiveBlock = message_class("PrimitiveBlock")
PrimitiveGroup = message_class("PrimitiveGroup")
StringTable = message_class("StringTable")
Info = message_class("Info")
DenseInfo = message_class("DenseInfo")
ChangeSet = message_class("ChangeSet")
Node = message_class("Node")
DenseNodes = message_class("DenseNodes")
Way = message_class("Way")
Relation = message_class("Relation")
