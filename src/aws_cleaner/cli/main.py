"""Main CLI entry point using Typer."""

import logging
import sys
from collections import Counter
from datetime import datetime
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from ..aws.client import create_boto_client, create_session
from ..aws.credentials import CredentialValidationError, ensure_cleanable_principal, validate_credentials
from ..cleanup.audit import AuditStorage
from ..cleanup.errors import CleanupFailedError
from ..cleanup.orchestrator import EnvironmentCleaner
from ..cleanup.registry import build_cleaners, provider_kinds
from ..cleanup.throttle import RetryPolicy, ThrottledExecutor
from ..models.deletion_operation import DeletionOperation
from ..models.deletion_record import DeletionStatus
from ..models.run_context import RunContext
from ..utils.logging import setup_logging
from .config import CONFIG_KEYS, Config, ConfigError

logger = logging.getLogger(__name__)

# Create Typer app
app = typer.Typer(
    name="aws-cleaner",
    help="AWS Environment Cleaner - delete leftover resources from non-production AWS accounts",
    add_completion=False,
)

# Create Rich console for output
console = Console()

# Global config
config: Optional[Config] = None


def show_usage(ctx: typer.Context) -> None:
    """Display usage and the recognised configuration keys."""
    console.print(ctx.get_help())
    console.print()
    console.print("[bold]Configuration keys[/bold] (config.yaml or AWS_CLEANER_<KEY> environment variables):")
    for key, description in CONFIG_KEYS.items():
        console.print(f"  [cyan]{key}[/cyan]  {description}")
    console.print()
    console.print("Run [bold]aws-cleaner clean[/bold] for a dry run, add [bold]--commit[/bold] to delete.")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="AWS profile name"),
    region: Optional[str] = typer.Option(None, "--region", "-r", help="AWS region to clean"),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file path (default: $AWS_CLEANER_CONFIG or ~/.aws-cleaner/config.yaml)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress output except errors"),
):
    """AWS Environment Cleaner - delete leftover resources from non-production AWS accounts."""
    global config

    # Load configuration
    try:
        config = Config.load(config_path)
    except ConfigError as e:
        console.print(f"✗ Invalid configuration: {e}", style="bold red")
        raise typer.Exit(code=1)

    # Override with CLI options
    if profile:
        config.aws_profile = profile
    if region:
        config.region = region

    # Setup logging
    log_level = "ERROR" if quiet else ("DEBUG" if verbose else config.log_level)
    setup_logging(level=log_level, verbose=verbose)

    if ctx.invoked_subcommand is None:
        show_usage(ctx)


@app.command()
def version():
    """Show version information."""
    import boto3

    from .. import __version__

    console.print(f"aws-env-cleaner version {__version__}")
    console.print(f"Python {sys.version.split()[0]}")
    console.print(f"boto3 {boto3.__version__}")


@app.command("config")
def show_config():
    """Show recognised configuration keys and their effective values."""
    assert config is not None, "Config not loaded"

    table = Table(title="Configuration")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_column("Description", style="dim")

    values = config.to_dict()
    for key, description in CONFIG_KEYS.items():
        value = values.get(key)
        if isinstance(value, list):
            value = ", ".join(value) or "(none)"
        table.add_row(key, "(not set)" if value is None else str(value), description)

    console.print(table)


def _validate_kinds(kinds: List[str]) -> List[str]:
    known = provider_kinds()
    unknown = [kind for kind in kinds if kind not in known]
    if unknown:
        console.print(f"✗ Unknown resource kind(s): {', '.join(unknown)}", style="bold red")
        console.print(f"\nAvailable kinds: {', '.join(known)}")
        raise typer.Exit(code=1)
    return kinds


def _print_summary(operation: DeletionOperation) -> None:
    """Print per-kind counts and the totals of a run."""
    counts: dict[str, Counter] = {}
    for record in operation.records:
        counts.setdefault(record.resource_kind, Counter())[record.status] += 1

    table = Table(title=f"Cleanup {operation.mode.value} - {operation.operation_id}")
    table.add_column("Resource Kind", style="cyan")
    table.add_column("Deleted", justify="right", style="green")
    table.add_column("Would Delete", justify="right", style="yellow")
    table.add_column("Skipped", justify="right")
    table.add_column("Failed", justify="right", style="red")

    for kind, counter in counts.items():
        table.add_row(
            kind,
            str(counter[DeletionStatus.DELETED]),
            str(counter[DeletionStatus.WOULD_DELETE]),
            str(counter[DeletionStatus.SKIPPED]),
            str(counter[DeletionStatus.FAILED]),
        )

    console.print()
    if counts:
        console.print(table)
    else:
        console.print("No resources found", style="yellow")
    console.print()

    if operation.deleted_count:
        console.print(f"✓ Deleted {operation.deleted_count} resource(s)", style="green")
    if operation.would_delete_count:
        console.print(f"Dry run: {operation.would_delete_count} resource(s) would be deleted", style="yellow")
        console.print("Re-run with [bold]--commit[/bold] to delete them")
    if operation.duration_seconds is not None:
        console.print(f"Duration: {operation.duration_seconds:.1f}s")


@app.command()
def clean(
    commit: bool = typer.Option(False, "--commit", help="Actually delete resources (default is a dry run)"),
    continue_on_error: bool = typer.Option(
        False, "--continue-on-error", help="Run the remaining cleaners after one fails"
    ),
    kinds: Optional[List[str]] = typer.Option(
        None, "--kind", "-k", help="Resource kind to clean (repeatable, default: all)"
    ),
):
    """Clean the AWS account: stacks first, in dependency order, then standalone resources.

    Without --commit nothing is deleted; the resources that would be deleted are
    listed instead.
    """
    assert config is not None, "Config not loaded"

    selected = _validate_kinds(kinds or config.resource_kinds) or None

    try:
        # Validate credentials and refuse production principals
        console.print("🔐 Validating AWS credentials...")
        identity = validate_credentials(config.aws_profile, config.region)
        ensure_cleanable_principal(identity, config.allowed_principal_prefix)
        account_id = identity["account_id"]
        console.print(f"✓ Authenticated for account: {account_id}\n", style="green")
    except CredentialValidationError as e:
        console.print(f"✗ {e}", style="bold red")
        raise typer.Exit(code=1)

    if commit:
        console.print("[bold red]⚠ COMMIT MODE - resources will be deleted[/bold red]\n")
    else:
        console.print("[yellow]Dry run - no resources will be deleted[/yellow]\n")

    context = RunContext.create(
        commit=commit,
        skip_names=config.skip_names,
        permanent_stack_prefixes=config.permanent_stack_prefixes,
    )

    session = create_session(profile_name=config.aws_profile, region_name=config.region)

    def client_factory(service_name: str):
        return create_boto_client(service_name, region_name=config.region, session=session)

    executor = ThrottledExecutor(
        RetryPolicy(
            max_attempts=config.throttle_max_attempts,
            backoff_seconds=config.throttle_backoff_seconds,
        )
    )

    try:
        cleaners = build_cleaners(
            client_factory,
            context,
            executor=executor,
            max_stack_wait_seconds=config.max_stack_wait_seconds,
            stack_polling_delay_ms=config.stack_polling_delay_ms,
            resource_kinds=selected,
        )
        audit_storage = AuditStorage(config.audit_dir) if config.audit_enabled else None
        cleaner = EnvironmentCleaner(
            cleaners,
            audit_storage=audit_storage,
            continue_on_error=continue_on_error or config.continue_on_error,
        )
        operation = cleaner.run(context, account_id, aws_profile=config.aws_profile)
    except CleanupFailedError as e:
        _print_summary(e.operation)
        console.print(f"✗ {len(e.failures)} cleaner(s) failed:", style="bold red")
        for name, error in e.failures.items():
            console.print(f"  • {name}: {error}")
        raise typer.Exit(code=2)
    except Exception as e:
        console.print(f"✗ Error during cleanup: {e}", style="bold red")
        logger.exception("Error in clean command")
        raise typer.Exit(code=2)

    _print_summary(operation)


# Audit commands group
audit_app = typer.Typer(help="Audit log commands")
app.add_typer(audit_app, name="audit")


def _parse_date(value: Optional[str], option: str) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        console.print(f"✗ Invalid {option} date: {value}. Use YYYY-MM-DD", style="bold red")
        raise typer.Exit(code=1)


@audit_app.command("list")
def audit_list(
    since: Optional[str] = typer.Option(None, "--since", help="Only runs on or after this date (YYYY-MM-DD)"),
    until: Optional[str] = typer.Option(None, "--until", help="Only runs on or before this date (YYYY-MM-DD)"),
):
    """List recorded cleanup runs."""
    assert config is not None, "Config not loaded"

    since_date = _parse_date(since, "--since")
    until_date = _parse_date(until, "--until")
    if until_date is not None:
        until_date = until_date.replace(hour=23, minute=59, second=59)

    operations = AuditStorage(config.audit_dir).query_operations(since=since_date, until=until_date)
    if not operations:
        console.print("No cleanup runs recorded", style="yellow")
        return

    table = Table(title="Cleanup Runs")
    table.add_column("Operation ID", style="cyan")
    table.add_column("Timestamp")
    table.add_column("Account")
    table.add_column("Mode")
    table.add_column("Status")
    table.add_column("Deleted", justify="right")
    table.add_column("Would Delete", justify="right")
    table.add_column("Failed Cleaners", justify="right")

    for data in operations:
        op = data["operation"]
        table.add_row(
            op["operation_id"],
            op["timestamp"],
            str(op["account_id"]),
            op["mode"],
            op["status"],
            str(op["deleted_count"]),
            str(op["would_delete_count"]),
            str(len(op.get("failed_cleaners") or {})),
        )

    console.print(table)
    console.print(f"\nTotal runs: {len(operations)}")


@audit_app.command("show")
def audit_show(operation_id: str = typer.Argument(..., help="Operation ID to show")):
    """Show one recorded cleanup run with its deletion records."""
    assert config is not None, "Config not loaded"

    data = AuditStorage(config.audit_dir).get_operation(operation_id)
    if data is None:
        console.print(f"✗ Operation '{operation_id}' not found", style="bold red")
        console.print("\nList recorded runs with: aws-cleaner audit list")
        raise typer.Exit(code=1)

    op = data["operation"]
    console.print()
    console.print(f"[bold]Operation: {op['operation_id']}[/bold]")
    console.print(f"Account: {op['account_id']}")
    console.print(f"Profile: {op.get('aws_profile') or '(default)'}")
    console.print(f"Mode: {op['mode']}")
    console.print(f"Status: {op['status']}")
    console.print(f"Started: {op.get('started_at')}")
    console.print(f"Completed: {op.get('completed_at')}")
    for name, error in (op.get("failed_cleaners") or {}).items():
        console.print(f"  ✗ {name}: {error}", style="red")
    console.print()

    records = data.get("records") or []
    if not records:
        console.print("No deletion records")
        return

    table = Table(title="Deletion Records")
    table.add_column("Kind", style="cyan")
    table.add_column("Physical ID")
    table.add_column("Status")
    table.add_column("Reason / Error")
    for record in records:
        table.add_row(
            record["resource_kind"],
            record["physical_id"],
            record["status"],
            record.get("reason") or record.get("error_message") or "",
        )
    console.print(table)


def cli_main():
    """Entry point for console script."""
    app()


if __name__ == "__main__":
    cli_main()
