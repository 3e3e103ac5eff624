"""Application audit – entity type and id resolution."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from workforce_audit.kernel.values import normalize, to_json

UNKNOWN_ENTITY_TYPE = "Unknown"

# Event families whose first two segments name a single entity.
_COMPOUND_ENTITY_TYPES: dict[tuple[str, str], str] = {
    ("leave", "request"): "LeaveRequest",
    ("project", "member"): "Project",
}


def extract_entity_type(event_type: str) -> str:
    """Map a routing key onto the audited entity type.

    >>> extract_entity_type("employee.created")
    'Employee'
    >>> extract_entity_type("leave.request.approved")
    'LeaveRequest'
    >>> extract_entity_type("project.member.added")
    'Project'
    >>> extract_entity_type("")
    'Unknown'
    """
    parts = (event_type or "").strip().split(".")
    head = parts[0]
    if not head:
        return UNKNOWN_ENTITY_TYPE
    if len(parts) > 1 and (head, parts[1]) in _COMPOUND_ENTITY_TYPES:
        return _COMPOUND_ENTITY_TYPES[(head, parts[1])]
    return head[0].upper() + head[1:]


class EntityIdResolver:
    """Find the audited entity's id in an event payload.

    For entity type ``T`` the candidate keys are tried in order::

        "{T}Id", "{t}Id" (T lower-cased), <extra candidates for T>, "Id", "id"

    The first key present in the payload wins, even if its value is ``None``.
    No match yields ``""``.

    Usage::

        resolver = EntityIdResolver({"LeaveRequest": ["leaveRequestId", "RequestId"]})
        resolver.resolve({"RequestId": "lr-1"}, "LeaveRequest")  # "lr-1"
    """

    GENERIC_CANDIDATES: tuple[str, ...] = ("Id", "id")

    def __init__(self, extra_candidates: Mapping[str, Iterable[str]] | None = None) -> None:
        self._extra = {k: tuple(v) for k, v in (extra_candidates or {}).items()}

    def candidates(self, entity_type: str) -> tuple[str, ...]:
        """Return the ordered, de-duplicated key list for *entity_type*."""
        keys: list[str] = []
        if entity_type:
            keys += [f"{entity_type}Id", f"{entity_type.lower()}Id"]
        keys += self._extra.get(entity_type, ())
        keys += self.GENERIC_CANDIDATES
        return tuple(dict.fromkeys(keys))

    def resolve(self, data: Any, entity_type: str) -> str:
        if not isinstance(data, Mapping):
            return ""
        for key in self.candidates(entity_type):
            if key in data:
                return _id_to_str(data[key])
        return ""


def _id_to_str(value: Any) -> str:
    plain = normalize(value)
    if plain is None:
        return ""
    if isinstance(plain, str):
        return plain
    if isinstance(plain, (bool, dict, list)):
        return to_json(plain)
    return str(plain)


__all__ = ["UNKNOWN_ENTITY_TYPE", "EntityIdResolver", "extract_entity_type"]
