"""Kernel values – closed value union and its converters."""
from workforce_audit.kernel.values.convert import (
    INT64_MAX,
    INT64_MIN,
    from_json,
    from_python,
    normalize,
    to_json,
    to_storage,
)
from workforce_audit.kernel.values.value import (
    NULL,
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

__all__ = [
    "INT64_MAX",
    "INT64_MIN",
    "NULL",
    "BoolValue",
    "FloatValue",
    "IntValue",
    "ListValue",
    "MapValue",
    "NullValue",
    "StringValue",
    "Value",
    "ValueKind",
    "from_json",
    "from_python",
    "normalize",
    "to_json",
    "to_storage",
]
