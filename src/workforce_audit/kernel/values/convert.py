"""Kernel values – converters between Python, wire JSON and storage forms.

``from_python`` lifts an arbitrary Python object into the closed
:data:`~workforce_audit.kernel.values.value.Value` union, ``to_storage`` lowers
a ``Value`` into plain ``dict`` / ``list`` / primitives accepted by BSON, and
``from_json`` / ``to_json`` cover the wire form.  Lifting and lowering
use explicit stacks and accept any nesting depth.
"""
from __future__ import annotations

import dataclasses
import json
import math
import uuid
from collections.abc import Iterator, Mapping, Set
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any

from workforce_audit.kernel.errors import SerializationError
from workforce_audit.kernel.values.value import (
    NULL,
    VALUE_TYPES,
    BoolValue,
    FloatValue,
    IntValue,
    ListValue,
    MapValue,
    NullValue,
    StringValue,
    Value,
    ValueKind,
)

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def _from_int(obj: int) -> Value:
    # BSON has no integer wider than int64
    if INT64_MIN <= obj <= INT64_MAX:
        return IntValue(obj)
    return FloatValue(float(obj))


def _from_decimal(obj: Decimal) -> Value:
    if not obj.is_finite():
        return FloatValue(float(obj))
    if obj == obj.to_integral_value():
        return _from_int(int(obj))
    return FloatValue(float(obj))


@dataclasses.dataclass(slots=True)
class _OpenContainer:
    """A list or map whose children are still being lifted."""

    kind: ValueKind
    source_id: int
    children: Iterator[tuple[str, Any]]
    built: list[tuple[str, Value]] = dataclasses.field(default_factory=list)
    ordered: bool = False

    def close(self) -> Value:
        if self.kind is ValueKind.MAP:
            return MapValue(tuple(self.built))
        items = [v for _, v in self.built]
        if self.ordered:
            items.sort(key=to_json)
        return ListValue(tuple(items))


def _lift(obj: Any) -> Value | _OpenContainer:
    while isinstance(obj, Enum):
        obj = obj.value
    if isinstance(obj, VALUE_TYPES):
        return obj
    if obj is None:
        return NULL
    # bool before int: bool is an int subclass
    if isinstance(obj, bool):
        return BoolValue(obj)
    if isinstance(obj, int):
        return _from_int(obj)
    if isinstance(obj, float):
        return FloatValue(obj)
    if isinstance(obj, Decimal):
        return _from_decimal(obj)
    if isinstance(obj, str):
        return StringValue(obj)
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return StringValue(bytes(obj).decode("utf-8", errors="replace"))
    if isinstance(obj, (datetime, date, time)):
        return StringValue(obj.isoformat())
    if isinstance(obj, uuid.UUID):
        return StringValue(str(obj))
    if isinstance(obj, Mapping):
        return _OpenContainer(ValueKind.MAP, id(obj), ((str(k), v) for k, v in obj.items()))
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        fields = dataclasses.fields(obj)
        return _OpenContainer(ValueKind.MAP, id(obj), ((f.name, getattr(obj, f.name)) for f in fields))
    if isinstance(obj, Set):
        return _OpenContainer(ValueKind.LIST, id(obj), (("", v) for v in obj), ordered=True)
    if isinstance(obj, (list, tuple)):
        return _OpenContainer(ValueKind.LIST, id(obj), (("", v) for v in obj))
    return StringValue(str(obj))


def from_python(obj: Any) -> Value:
    """Lift *obj* into a :data:`Value`.

    Objects outside the JSON data model are mapped onto the closed kinds:
    temporal values and UUIDs become ISO / canonical strings, enums their
    ``value``, decimals an int or float, bytes UTF-8 text, sets and tuples
    lists, dataclass instances maps.  Anything else falls back to ``str``.

    Containers are walked with an explicit stack, so nesting depth is bounded
    by memory rather than the interpreter's recursion limit.

    Raises:
        SerializationError: *obj* contains itself.
    """
    root = _lift(obj)
    if not isinstance(root, _OpenContainer):
        return root

    stack: list[tuple[str, _OpenContainer]] = [("", root)]
    active = {root.source_id}
    while True:
        key, top = stack[-1]
        entry = next(top.children, None)
        if entry is None:
            stack.pop()
            active.discard(top.source_id)
            closed = top.close()
            if not stack:
                return closed
            stack[-1][1].built.append((key, closed))
            continue

        child_key, raw = entry
        lifted = _lift(raw)
        if isinstance(lifted, _OpenContainer):
            if lifted.source_id in active:
                raise SerializationError("Cyclic structure cannot be audited", payload_type=type(raw).__name__)
            active.add(lifted.source_id)
            stack.append((child_key, lifted))
        else:
            top.built.append((child_key, lifted))


def _shell(value: Value, finite: bool) -> tuple[Any, Iterator[tuple[Any, Value]] | None]:
    """Return the plain counterpart of *value* and, for containers, its children."""
    match value:
        case NullValue():
            return None, None
        case FloatValue(value=v):
            return (None if finite and not math.isfinite(v) else v), None
        case BoolValue(value=v) | IntValue(value=v) | StringValue(value=v):
            return v, None
        case ListValue(items=items):
            return [], ((None, item) for item in items)
        case MapValue(entries=entries):
            return {}, iter(entries)
    raise SerializationError(
        f"Unsupported value kind: {type(value).__name__}",
        payload_type=type(value).__name__,
    )


def _lower(value: Value, *, finite: bool = False) -> Any:
    plain, children = _shell(value, finite)
    stack = [(plain, children)] if children is not None else []
    while stack:
        target, pending = stack[-1]
        entry = next(pending, None)
        if entry is None:
            stack.pop()
            continue
        key, child = entry
        child_plain, grandchildren = _shell(child, finite)
        if isinstance(target, list):
            target.append(child_plain)
        else:
            target[key] = child_plain
        if grandchildren is not None:
            stack.append((child_plain, grandchildren))
    return plain


def to_storage(value: Value) -> Any:
    """Lower *value* into plain Python containers and primitives."""
    return _lower(value)


def normalize(obj: Any) -> Any:
    """Return a storage-safe copy of *obj* (``to_storage(from_python(obj))``)."""
    return to_storage(from_python(obj))


def from_json(data: str | bytes) -> Value:
    """Parse wire JSON into a :data:`Value`.

    Raises:
        SerializationError: *data* is not valid JSON.
    """
    try:
        parsed = json.loads(data)
    except (TypeError, ValueError, RecursionError) as exc:
        raise SerializationError("Invalid JSON document", payload_type="json", cause=exc) from exc
    return from_python(parsed)


def to_json(value: Any) -> str:
    """Render *value* (a ``Value`` or any Python object) as compact JSON.

    Non-finite floats are emitted as ``null`` so the output stays valid JSON.
    """
    plain = _lower(from_python(value), finite=True)
    return json.dumps(plain, ensure_ascii=False, separators=(",", ":"))


__all__ = [
    "INT64_MAX",
    "INT64_MIN",
    "from_json",
    "from_python",
    "normalize",
    "to_json",
    "to_storage",
]
