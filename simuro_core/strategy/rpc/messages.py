"""Protobuf message classes for the strategy wire protocol.

The schema mirrors ``v5rpc.proto`` and is registered in a private descriptor
pool at import time, so no generated ``_pb2`` module has to be shipped.
"""

from typing import Optional, Sequence, Tuple

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.internal import enum_type_wrapper

PACKAGE = "simuro.v5rpc"

_F = descriptor_pb2.FieldDescriptorProto

# (name, number, type, message/enum type name, repeated, oneof index)
_FieldSpec = Tuple[str, int, int, Optional[str], bool, Optional[int]]


def _field(
    name: str,
    number: int,
    type_: int,
    type_name: Optional[str] = None,
    repeated: bool = False,
    oneof: Optional[int] = None,
) -> _FieldSpec:
    return (name, number, type_, type_name, repeated, oneof)


def _message(name: str, fields: Sequence[_FieldSpec] = (), oneofs: Sequence[str] = ()):
    return name, fields, oneofs


_MESSAGES = [
    _message("Vector2", [_field("x", 1, _F.TYPE_FLOAT), _field("y", 2, _F.TYPE_FLOAT)]),
    _message(
        "Wheel",
        [_field("left_speed", 1, _F.TYPE_FLOAT), _field("right_speed", 2, _F.TYPE_FLOAT)],
    ),
    _message(
        "Robot",
        [
            _field("position", 1, _F.TYPE_MESSAGE, "Vector2"),
            _field("rotation", 2, _F.TYPE_FLOAT),
            _field("wheel", 3, _F.TYPE_MESSAGE, "Wheel"),
        ],
    ),
    _message("Ball", [_field("position", 1, _F.TYPE_MESSAGE, "Vector2")]),
    _message(
        "Field",
        [
            _field("our_robots", 1, _F.TYPE_MESSAGE, "Robot", repeated=True),
            _field("opponent_robots", 2, _F.TYPE_MESSAGE, "Robot", repeated=True),
            _field("ball", 3, _F.TYPE_MESSAGE, "Ball"),
            _field("tick_total", 4, _F.TYPE_INT32),
            _field("tick_round", 5, _F.TYPE_INT32),
        ],
    ),
    _message("GetTeamInfoCall"),
    _message("OnEventCall", [_field("type", 1, _F.TYPE_ENUM, "EventType")]),
    _message("GetInstructionCall", [_field("field", 1, _F.TYPE_MESSAGE, "Field")]),
    _message("GetPlacementCall", [_field("field", 1, _F.TYPE_MESSAGE, "Field")]),
    _message("TeamInfo", [_field("team_name", 1, _F.TYPE_STRING)]),
    _message("Ack"),
    _message("Instruction", [_field("wheels", 1, _F.TYPE_MESSAGE, "Wheel", repeated=True)]),
    _message(
        "Placement",
        [
            _field("robots", 1, _F.TYPE_MESSAGE, "Robot", repeated=True),
            _field("ball", 2, _F.TYPE_MESSAGE, "Ball"),
        ],
    ),
    _message(
        "RpcRequest",
        [
            _field("seq", 1, _F.TYPE_UINT32),
            _field("get_team_info", 2, _F.TYPE_MESSAGE, "GetTeamInfoCall", oneof=0),
            _field("on_event", 3, _F.TYPE_MESSAGE, "OnEventCall", oneof=0),
            _field("get_instruction", 4, _F.TYPE_MESSAGE, "GetInstructionCall", oneof=0),
            _field("get_placement", 5, _F.TYPE_MESSAGE, "GetPlacementCall", oneof=0),
        ],
        oneofs=["call"],
    ),
    _message(
        "RpcResponse",
        [
            _field("seq", 1, _F.TYPE_UINT32),
            _field("team_info", 2, _F.TYPE_MESSAGE, "TeamInfo", oneof=0),
            _field("ack", 3, _F.TYPE_MESSAGE, "Ack", oneof=0),
            _field("instruction", 4, _F.TYPE_MESSAGE, "Instruction", oneof=0),
            _field("placement", 5, _F.TYPE_MESSAGE, "Placement", oneof=0),
            _field("error", 6, _F.TYPE_STRING, oneof=0),
        ],
        oneofs=["result"],
    ),
]

_EVENT_TYPES = ["MATCH_START", "MATCH_STOP", "ROUND_START", "ROUND_STOP"]


def _build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    fdp = descriptor_pb2.FileDescriptorProto(name="simuro/v5rpc.proto", package=PACKAGE, syntax="proto3")

    enum = fdp.enum_type.add(name="EventType")
    for number, name in enumerate(_EVENT_TYPES):
        enum.value.add(name=name, number=number)

    for msg_name, fields, oneofs in _MESSAGES:
        msg = fdp.message_type.add(name=msg_name)
        for oneof_name in oneofs:
            msg.oneof_decl.add(name=oneof_name)
        for name, number, type_, type_name, repeated, oneof in fields:
            f = msg.field.add(
                name=name,
                number=number,
                type=type_,
                label=_F.LABEL_REPEATED if repeated else _F.LABEL_OPTIONAL,
            )
            if type_name is not None:
                f.type_name = f".{PACKAGE}.{type_name}"
            if oneof is not None:
                f.oneof_index = oneof
    return fdp


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_build_file_descriptor().SerializeToString())


def _message_class(name: str):
    return message_factory.GetMessageClass(_pool.FindMessageTypeByName(f"{PACKAGE}.{name}"))


EventType = enum_type_wrapper.EnumTypeWrapper(_pool.FindEnumTypeByName(f"{PACKAGE}.EventType"))

Vector2 = _message_class("Vector2")
Wheel = _message_class("Wheel")
Robot = _message_class("Robot")
Ball = _message_class("Ball")
Field = _message_class("Field")
TeamInfo = _message_class("TeamInfo")
Instruction = _message_class("Instruction")
Placement = _message_class("Placement")
RpcRequest = _message_class("RpcRequest")
RpcResponse = _message_class("RpcResponse")

__all__ = [
    "EventType",
    "Vector2",
    "Wheel",
    "Robot",
    "Ball",
    "Field",
    "TeamInfo",
    "Instruction",
    "Placement",
    "RpcRequest",
    "RpcResponse",
]
