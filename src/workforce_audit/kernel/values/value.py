"""Kernel values – closed tagged union for audit payloads and snapshots.

Every payload that reaches the audit store is first lifted into one of the
seven kinds below. The document store then only ever sees plain maps, lists
and primitives, never an opaque "any JSON" wrapper.
"""
from __future__ import annotations

import dataclasses
from enum import Enum
from typing import ClassVar


class ValueKind(str, Enum):
    NULL = "null"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    LIST = "list"
    MAP = "map"


@dataclasses.dataclass(frozen=True, slots=True)
class NullValue:
    kind: ClassVar[ValueKind] = ValueKind.NULL


@dataclasses.dataclass(frozen=True, slots=True)
class BoolValue:
    value: bool
    kind: ClassVar[ValueKind] = ValueKind.BOOL


@dataclasses.dataclass(frozen=True, slots=True)
class IntValue:
    """Signed integer restricted to the BSON int64 range."""

    value: int
    kind: ClassVar[ValueKind] = ValueKind.INT


@dataclasses.dataclass(frozen=True, slots=True)
class FloatValue:
    value: float
    kind: ClassVar[ValueKind] = ValueKind.FLOAT


@dataclasses.dataclass(frozen=True, slots=True)
class StringValue:
    value: str
    kind: ClassVar[ValueKind] = ValueKind.STRING


@dataclasses.dataclass(frozen=True, slots=True)
class ListValue:
    items: tuple[Value, ...] = ()
    kind: ClassVar[ValueKind] = ValueKind.LIST


@dataclasses.dataclass(frozen=True, slots=True)
class MapValue:
    """String-keyed map; insertion order of *entries* is preserved."""

    entries: tuple[tuple[str, Value], ...] = ()
    kind: ClassVar[ValueKind] = ValueKind.MAP

    def get(self, key: str) -> Value | None:
        for k, v in self.entries:
            if k == key:
                return v
        return None

    def keys(self) -> list[str]:
        return [k for k, _ in self.entries]

    def __contains__(self, key: object) -> bool:
        return any(k == key for k, _ in self.entries)


type Value = NullValue | BoolValue | IntValue | FloatValue | StringValue | ListValue | MapValue

NULL = NullValue()

SCALAR_TYPES = (NullValue, BoolValue, IntValue, FloatValue, StringValue)
VALUE_TYPES = (*SCALAR_TYPES, ListValue, MapValue)

__all__ = [
    "NULL",
    "SCALAR_TYPES",
    "VALUE_TYPES",
    "BoolValue",
    "FloatValue",
    "IntValue",
    "ListValue",
    "MapValue",
    "NullValue",
    "StringValue",
    "Value",
    "ValueKind",
]
