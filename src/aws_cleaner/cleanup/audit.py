"""Audit storage for cleanup runs.

Stores and retrieves audit logs in YAML format for compliance and troubleshooting.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import yaml

from ..models.deletion_operation import DeletionOperation


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class AuditStorage:
    """Audit log storage and retrieval.

    Stores cleanup run audit logs as YAML files organized by year/month.
    Supports querying runs by date range and retrieving a single run.

    Storage structure:
        ~/.aws-cleaner/audit-logs/
            2026/
                10/
                    operation-op_123.yaml
                    operation-op_456.yaml

    Attributes:
        storage_dir: Base directory for audit logs
    """

    def __init__(self, storage_dir: Optional[str] = None) -> None:
        """Initialize audit storage.

        Args:
            storage_dir: Base directory for audit logs (default: ~/.aws-cleaner/audit-logs)
        """
        if storage_dir is None:
            storage_dir = str(Path.home() / ".aws-cleaner" / "audit-logs")

        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def log_operation(self, operation: DeletionOperation) -> Path:
        """Log a cleanup run to audit storage.

        Creates a YAML file with run metadata and all deletion records.
        Overwrites an existing log with the same operation ID.

        Args:
            operation: Cleanup run to log

        Returns:
            Path of the written audit file
        """
        # Create year/month directory structure
        year_month_dir = self.storage_dir / str(operation.timestamp.year) / f"{operation.timestamp.month:02d}"
        year_month_dir.mkdir(parents=True, exist_ok=True)

        audit_data = {
            "metadata": {
                "version": "1.0",
                "log_type": "resource_cleanup",
                "created_at": datetime.now(timezone.utc).isoformat(),
            },
            "operation": {
                "operation_id": operation.operation_id,
                "timestamp": operation.timestamp.isoformat(),
                "aws_profile": operation.aws_profile,
                "account_id": operation.account_id,
                "mode": operation.mode.value,
                "status": operation.status.value,
                "total_resources": operation.total_resources,
                "deleted_count": operation.deleted_count,
                "would_delete_count": operation.would_delete_count,
                "skipped_count": operation.skipped_count,
                "failed_count": operation.failed_count,
                "failed_cleaners": dict(operation.failed_cleaners),
                "started_at": _iso(operation.started_at),
                "completed_at": _iso(operation.completed_at),
                "duration_seconds": operation.duration_seconds,
            },
            "records": [record.to_dict() for record in operation.records],
        }

        audit_file = year_month_dir / f"operation-{operation.operation_id}.yaml"
        with open(audit_file, "w") as f:
            yaml.safe_dump(audit_data, f, default_flow_style=False, sort_keys=False)
        return audit_file

    def get_operation(self, operation_id: str) -> Optional[dict]:
        """Retrieve a run's audit log by ID.

        Args:
            operation_id: Operation ID to retrieve

        Returns:
            Audit log dictionary if found, None otherwise
        """
        for audit_file in self.storage_dir.glob(f"*/*/operation-{operation_id}.yaml"):
            with open(audit_file, "r") as f:
                return yaml.safe_load(f)

        return None

    def query_operations(self, since: Optional[datetime] = None, until: Optional[datetime] = None) -> list[dict]:
        """Query runs within a date range.

        Args:
            since: Start date (inclusive), None for all
            until: End date (inclusive), None for all

        Returns:
            Audit logs matching the criteria, oldest first
        """
        results = []

        for audit_file in sorted(self.storage_dir.glob("*/*/operation-*.yaml")):
            with open(audit_file, "r") as f:
                audit_data = yaml.safe_load(f)

            timestamp = _as_utc(datetime.fromisoformat(audit_data["operation"]["timestamp"]))

            # Filter by date range
            if since and timestamp < _as_utc(since):
                continue
            if until and timestamp > _as_utc(until):
                continue

            results.append(audit_data)

        results.sort(key=lambda data: data["operation"]["timestamp"])
        return results
