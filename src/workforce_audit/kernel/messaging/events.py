"""Kernel messaging – audit event types and their routing keys."""
from __future__ import annotations

from enum import Enum


class AuditEventType(str, Enum):
    """Domain mutations that produce an audit trail.

    The member value *is* the topic routing key, so the mapping is a stable
    string table that consumers may bind against (``employee.*``, ``#`` …).
    """

    EMPLOYEE_CREATED = "employee.created"
    EMPLOYEE_UPDATED = "employee.updated"
    EMPLOYEE_DELETED = "employee.deleted"

    PROJECT_CREATED = "project.created"
    PROJECT_UPDATED = "project.updated"
    PROJECT_DELETED = "project.deleted"
    PROJECT_MEMBER_ADDED = "project.member.added"
    PROJECT_MEMBER_REMOVED = "project.member.removed"

    TASK_CREATED = "task.created"
    TASK_UPDATED = "task.updated"
    TASK_DELETED = "task.deleted"
    TASK_STATUS_UPDATED = "task.status.updated"

    LEAVE_REQUEST_CREATED = "leave.request.created"
    LEAVE_REQUEST_UPDATED = "leave.request.updated"
    LEAVE_REQUEST_APPROVED = "leave.request.approved"
    LEAVE_REQUEST_REJECTED = "leave.request.rejected"
    LEAVE_REQUEST_CANCELLED = "leave.request.cancelled"

    DEPARTMENT_CREATED = "department.created"
    DEPARTMENT_UPDATED = "department.updated"
    DEPARTMENT_DELETED = "department.deleted"

    DESIGNATION_CREATED = "designation.created"
    DESIGNATION_UPDATED = "designation.updated"
    DESIGNATION_DELETED = "designation.deleted"

    @property
    def routing_key(self) -> str:
        return self.value


def routing_key_for(event_type: AuditEventType | str) -> str:
    """Return the routing key for *event_type*.

    Plain strings are accepted for events outside the enum and are used
    verbatim after trimming.

    Raises:
        ValueError: *event_type* is an empty string.
    """
    if isinstance(event_type, AuditEventType):
        return event_type.routing_key
    key = str(event_type).strip()
    if not key:
        raise ValueError("event type must be a non-empty routing key")
    return key


__all__ = ["AuditEventType", "routing_key_for"]
