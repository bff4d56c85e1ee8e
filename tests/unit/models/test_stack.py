"""Tests for stack status classification and StackDescriptor."""

from __future__ import annotations

import pytest

from aws_cleaner.cleanup.errors import StackClassificationError
from aws_cleaner.models.stack import StackDescriptor, StackState, classify_stack_status


class TestClassifyStackStatus:
    """Test suite for classify_stack_status."""

    @pytest.mark.parametrize(
        "status",
        ["CREATE_COMPLETE", "UPDATE_ROLLBACK_FAILED", "ROLLBACK_COMPLETE", "DELETE_FAILED", "IMPORT_COMPLETE"],
    )
    def test_removable(self, status: str) -> None:
        assert classify_stack_status("s", status) == StackState.REMOVABLE

    def test_deleting(self) -> None:
        assert classify_stack_status("s", "DELETE_IN_PROGRESS") == StackState.DELETING

    def test_deleted(self) -> None:
        assert classify_stack_status("s", "DELETE_COMPLETE") == StackState.DELETED

    def test_case_insensitive(self) -> None:
        assert classify_stack_status("s", "create_complete") == StackState.REMOVABLE

    def test_unknown_status_raises(self) -> None:
        with pytest.raises(StackClassificationError) as exc_info:
            classify_stack_status("odd", "SOMETHING_NEW")

        assert exc_info.value.stack_name == "odd"
        assert exc_info.value.status == "SOMETHING_NEW"


class TestStackDescriptor:
    """Test suite for StackDescriptor."""

    def test_exports_and_state(self) -> None:
        stack = StackDescriptor(stack_id="id-net", name="network", status="CREATE_COMPLETE", exports=("vpc-id",))

        assert stack.has_exports is True
        assert stack.state == StackState.REMOVABLE
        assert str(stack) == "network (CREATE_COMPLETE)"

    def test_matches_prefix(self) -> None:
        stack = StackDescriptor(stack_id="id", name="perm-network", status="CREATE_COMPLETE")

        assert stack.matches_prefix(["base-", "perm-"]) is True
        assert stack.matches_prefix(["base-"]) is False
        assert stack.matches_prefix([""]) is False
        assert stack.has_exports is False
