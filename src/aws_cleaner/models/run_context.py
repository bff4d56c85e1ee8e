"""Run context shared by every cleaner in one run."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Optional

from .deletion_operation import OperationMode


def split_csv(value: Optional[str | Iterable[str]]) -> tuple[str, ...]:
    """Convert a comma separated string (or an iterable of strings) to trimmed, non-empty parts.

    Args:
        value: "a, b,c" style string, a list of strings, or None

    Returns:
        Tuple of trimmed values with empty entries removed
    """
    if value is None:
        return ()
    parts = value.split(",") if isinstance(value, str) else value
    return tuple(part.strip() for part in parts if part and part.strip())


@dataclass(frozen=True)
class RunContext:
    """Immutable per-run settings.

    Built once before any cleaner runs and passed to every ``clean`` call, so
    all cleaners see the same commit decision.

    Attributes:
        commit: True performs deletions, False is a dry run
        skip_names: Substrings that protect a physical id from deletion
        permanent_stack_prefixes: Stack name prefixes that are never deleted
        run_id: Unique identifier of the run
        started_at: When the run context was created (UTC)
    """

    commit: bool = False
    skip_names: tuple[str, ...] = ()
    permanent_stack_prefixes: tuple[str, ...] = ()
    run_id: str = field(default_factory=lambda: f"op_{uuid.uuid4()}")
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def create(
        cls,
        commit: bool,
        skip_names: Optional[str | Iterable[str]] = None,
        permanent_stack_prefixes: Optional[str | Iterable[str]] = None,
    ) -> "RunContext":
        """Build a context from raw configuration values (CSV strings or lists)."""
        return cls(
            commit=commit,
            skip_names=split_csv(skip_names),
            permanent_stack_prefixes=split_csv(permanent_stack_prefixes),
        )

    @property
    def mode(self) -> OperationMode:
        return OperationMode.from_commit(self.commit)
