"""Builds the OSM PBF protobuf messages at import time.

The message classes are created from ``FileDescriptorProto`` definitions that
mirror ``fileformat.proto`` and ``osmformat.proto`` from the OSM-binary
project, so no protoc step is needed.
"""

from __future__ import annotations

from google.protobuf import descriptor_pb2
from google.protobuf import descriptor_pool
from google.protobuf import message_factory
from google.protobuf.message import Message

FieldProto = descriptor_pb2.FieldDescriptorProto

PACKAGE = "OSMPBF"

POOL = descriptor_pool.DescriptorPool()

_LABELS = {
    "optional": FieldProto.LABEL_OPTIONAL,
    "required": FieldProto.LABEL_REQUIRED,
    "repeated": FieldProto.LABEL_REPEATED,
}

_SCALAR_TYPES = {
    "bool": FieldProto.TYPE_BOOL,
    "bytes": FieldProto.TYPE_BYTES,
    "int32": FieldProto.TYPE_INT32,
    "int64": FieldProto.TYPE_INT64,
    "sint32": FieldProto.TYPE_SINT32,
    "sint64": FieldProto.TYPE_SINT64,
    "string": FieldProto.TYPE_STRING,
    "uint32": FieldProto.TYPE_UINT32,
}


def new_file(name: str) -> descriptor_pb2.FileDescriptorProto:
    return descriptor_pb2.FileDescriptorProto(name=name, package=PACKAGE, syntax="proto2")


def add_field(
    message: descriptor_pb2.DescriptorProto,
    name: str,
    number: int,
    label: str,
    type_name: str,
    packed: bool = False,
    default: str | None = None,
    oneof_index: int | None = None,
) -> None:
    """Add a field; ``type_name`` is a scalar type or ``message:X`` / ``enum:X``."""
    field = message.field.add(name=name, number=number, label=_LABELS[label])
    if type_name.startswith("message:"):
        field.type = FieldProto.TYPE_MESSAGE
        field.type_name = f".{PACKAGE}.{type_name.removeprefix('message:')}"
    elif type_name.startswith("enum:"):
        field.type = FieldProto.TYPE_ENUM
        field.type_name = f".{PACKAGE}.{type_name.removeprefix('enum:')}"
    else:
        field.type = _SCALAR_TYPES[type_name]
    if packed:
        field.options.packed = True
    if default is not None:
        field.default_value = default
    if oneof_index is not None:
        field.oneof_index = oneof_index


def register(file_proto: descriptor_pb2.FileDescriptorProto) -> None:
    POOL.AddSerializedFile(file_proto.SerializeToString())


def message_class(name: str) -> type[Message]:
    return message_factory.GetMessageClass(POOL.FindMessageTypeByName(f"{PACKAGE}.{name}"))
