"""Tests for RunContext."""

from __future__ import annotations

import dataclasses

import pytest

from aws_cleaner.models.deletion_operation import OperationMode
from aws_cleaner.models.run_context import RunContext, split_csv


class TestSplitCsv:
    """Test suite for split_csv."""

    def test_trims_and_drops_empty(self) -> None:
        assert split_csv(" keep, prod ,,") == ("keep", "prod")

    def test_accepts_lists(self) -> None:
        assert split_csv(["keep", " ", "prod"]) == ("keep", "prod")

    def test_none(self) -> None:
        assert split_csv(None) == ()


class TestRunContext:
    """Test suite for RunContext."""

    def test_defaults_to_dry_run(self) -> None:
        context = RunContext()

        assert context.commit is False
        assert context.mode == OperationMode.DRY_RUN
        assert context.run_id.startswith("op_")

    def test_create_from_config_values(self) -> None:
        context = RunContext.create(commit=True, skip_names="keep,prod", permanent_stack_prefixes=["base-"])

        assert context.mode == OperationMode.EXECUTE
        assert context.skip_names == ("keep", "prod")
        assert context.permanent_stack_prefixes == ("base-",)

    def test_is_immutable(self) -> None:
        context = RunContext()

        with pytest.raises(dataclasses.FrozenInstanceError):
            context.commit = True  # type: ignore[misc]

    def test_run_ids_are_unique(self) -> None:
        assert RunContext().run_id != RunContext().run_id
