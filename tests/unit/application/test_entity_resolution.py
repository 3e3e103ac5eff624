"""Unit tests for entity type and entity id resolution."""

from __future__ import annotations

import pytest

from workforce_audit.application.audit import EntityIdResolver, extract_entity_type


class TestExtractEntityType:
    @pytest.mark.parametrize(
        "event_type, expected",
        [
            ("employee.created", "Employee"),
            ("employee.deleted", "Employee"),
            ("department.updated", "Department"),
            ("designation.created", "Designation"),
            ("project.updated", "Project"),
            ("project.member.added", "Project"),
            ("project.member.removed", "Project"),
            ("task.status.updated", "Task"),
            ("leave.request.created", "LeaveRequest"),
            ("leave.request.approved", "LeaveRequest"),
            ("leave.balance.reset", "Leave"),
            ("payroll", "Payroll"),
            ("", "Unknown"),
            (".created", "Unknown"),
        ],
    )
    def test_mapping_table(self, event_type: str, expected: str) -> None:
        assert extract_entity_type(event_type) == expected

    def test_is_deterministic(self) -> None:
        assert extract_entity_type("task.updated") == extract_entity_type("task.updated")


class TestEntityIdResolver:
    def setup_method(self) -> None:
        self.resolver = EntityIdResolver()

    def test_specific_key_wins_over_generic(self) -> None:
        data = {"EmployeeId": "E1", "Id": "E2"}
        assert self.resolver.resolve(data, "Employee") == "E1"

    def test_generic_id_used_when_specific_absent(self) -> None:
        assert self.resolver.resolve({"Id": "E2"}, "Employee") == "E2"

    def test_no_candidate_yields_empty_string(self) -> None:
        assert self.resolver.resolve({"Name": "Foo"}, "Employee") == ""

    def test_lower_camel_candidate(self) -> None:
        assert self.resolver.resolve({"employeeId": "e-3", "id": "x"}, "Employee") == "e-3"

    def test_lowercase_id_is_last(self) -> None:
        assert self.resolver.resolve({"id": "e-4"}, "Employee") == "e-4"

    def test_candidate_order(self) -> None:
        assert self.resolver.candidates("Task") == ("TaskId", "taskId", "Id", "id")

    def test_extra_candidates_are_tried_before_generic_keys(self) -> None:
        resolver = EntityIdResolver({"LeaveRequest": ["leaveRequestId", "RequestId"]})
        assert resolver.candidates("LeaveRequest") == (
            "LeaveRequestId",
            "leaverequestId",
            "leaveRequestId",
            "RequestId",
            "Id",
            "id",
        )
        assert resolver.resolve({"RequestId": "lr-1", "Id": "x"}, "LeaveRequest") == "lr-1"

    def test_integer_id_is_stringified(self) -> None:
        assert self.resolver.resolve({"TaskId": 17}, "Task") == "17"

    def test_boolean_id_uses_json_form(self) -> None:
        assert self.resolver.resolve({"Id": True}, "Task") == "true"

    def test_null_id_is_empty(self) -> None:
        assert self.resolver.resolve({"TaskId": None, "Id": "t-1"}, "Task") == ""

    def test_non_mapping_payload(self) -> None:
        assert self.resolver.resolve(["E1"], "Employee") == ""
        assert self.resolver.resolve(None, "Employee") == ""
