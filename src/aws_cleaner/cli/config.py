"""Configuration loading.

Settings come from a YAML file (``$AWS_CLEANER_CONFIG`` or
``~/.aws-cleaner/config.yaml``) and are then overridden by ``AWS_CLEANER_*``
environment variables.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from ..models.run_context import split_csv

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "AWS_CLEANER_CONFIG"
ENV_PREFIX = "AWS_CLEANER_"
DEFAULT_CONFIG_PATH = Path.home() / ".aws-cleaner" / "config.yaml"
DEFAULT_PRINCIPAL_PREFIX = "np"

# Recognised keys and their descriptions, shown by the CLI usage output
CONFIG_KEYS: dict[str, str] = {
    "aws_profile": "AWS profile used for credentials",
    "region": "AWS region to clean",
    "log_level": "Log level (DEBUG, INFO, WARNING, ERROR)",
    "permanent_stack_prefixes": "Comma separated stack name prefixes that are never deleted",
    "skip_names": "Comma separated substrings; resources whose id contains one are never deleted",
    "max_stack_wait_seconds": "Maximum seconds to wait for one stack deletion",
    "stack_polling_delay_ms": "Milliseconds between stack deletion status checks",
    "throttle_max_attempts": "Maximum attempts for a throttled AWS call",
    "throttle_backoff_seconds": "Base backoff in seconds between throttled attempts",
    "allowed_principal_prefix": (
        "Refuse to clean unless the caller name starts with this prefix (default np; empty disables the check)"
    ),
    "continue_on_error": "Run remaining cleaners after one fails",
    "audit_enabled": "Write a YAML audit log for every run",
    "audit_dir": "Directory for audit logs",
    "resource_kinds": "Comma separated resource kinds to clean (default: all)",
}

_LIST_KEYS = {"permanent_stack_prefixes", "skip_names", "resource_kinds"}
_BOOL_KEYS = {"continue_on_error", "audit_enabled"}
_INT_KEYS = {"max_stack_wait_seconds", "stack_polling_delay_ms", "throttle_max_attempts"}
_FLOAT_KEYS = {"throttle_backoff_seconds"}

# Lower bound for each numeric key
_MINIMUMS = {
    "max_stack_wait_seconds": 0,
    "stack_polling_delay_ms": 0,
    "throttle_max_attempts": 1,
    "throttle_backoff_seconds": 0,
}


class ConfigError(ValueError):
    """Raised when a configuration value cannot be parsed."""


def _parse_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off", ""):
        return False
    raise ConfigError(f"Invalid boolean for {key}: {value!r}")


def _coerce(key: str, value: Any) -> Any:
    if value is None:
        return None
    try:
        if key in _LIST_KEYS:
            return list(split_csv(value))
        if key in _BOOL_KEYS:
            return _parse_bool(key, value)
        if key in _INT_KEYS:
            return int(value)
        if key in _FLOAT_KEYS:
            return float(value)
    except (TypeError, ValueError) as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(f"Invalid value for {key}: {value!r}") from e
    return str(value)


@dataclass
class Config:
    """Cleaner configuration.

    Attributes:
        aws_profile: AWS profile name (optional)
        region: AWS region (optional)
        log_level: Default log level
        permanent_stack_prefixes: Stack name prefixes that are never deleted
        skip_names: Deny-list substrings for physical ids
        max_stack_wait_seconds: Upper bound on waiting for one stack deletion
        stack_polling_delay_ms: Delay between stack status checks
        throttle_max_attempts: Attempts before a throttled call gives up
        throttle_backoff_seconds: Linear backoff base
        allowed_principal_prefix: Required caller name prefix, "np" by default
            (an empty string disables the check)
        continue_on_error: Isolate cleaner failures
        audit_enabled: Write audit logs
        audit_dir: Audit log directory (optional)
        resource_kinds: Kinds to clean, empty for all
    """

    aws_profile: Optional[str] = None
    region: Optional[str] = None
    log_level: str = "INFO"
    permanent_stack_prefixes: list[str] = field(default_factory=list)
    skip_names: list[str] = field(default_factory=list)
    max_stack_wait_seconds: int = 1200
    stack_polling_delay_ms: int = 5000
    throttle_max_attempts: int = 7
    throttle_backoff_seconds: float = 2
    allowed_principal_prefix: str = DEFAULT_PRINCIPAL_PREFIX
    continue_on_error: bool = False
    audit_enabled: bool = True
    audit_dir: Optional[str] = None
    resource_kinds: list[str] = field(default_factory=list)

    @classmethod
    def load(cls, path: Optional[str] = None, environ: Optional[dict[str, str]] = None) -> "Config":
        """Load configuration from file and environment.

        Args:
            path: Config file path (default: $AWS_CLEANER_CONFIG or ~/.aws-cleaner/config.yaml)
            environ: Environment mapping (default: os.environ)

        Returns:
            Loaded Config

        Raises:
            ConfigError: If the file is not a mapping, has unknown keys or invalid values
        """
        environ = dict(os.environ) if environ is None else environ
        config_path = Path(path or environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH).expanduser()

        values: dict[str, Any] = {}
        if config_path.exists():
            logger.debug(f"Loading configuration from {config_path}")
            with open(config_path, "r") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ConfigError(f"Configuration file {config_path} must contain a mapping")
            unknown = sorted(set(data) - set(CONFIG_KEYS))
            if unknown:
                raise ConfigError(f"Unknown configuration keys in {config_path}: {', '.join(unknown)}")
            values.update(data)
        elif path:
            raise ConfigError(f"Configuration file {config_path} not found")

        # Environment overrides file values
        for key in CONFIG_KEYS:
            env_name = ENV_PREFIX + key.upper()
            if env_name in environ:
                values[key] = environ[env_name]

        return cls.from_dict(values)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create configuration from a dictionary of raw values.

        Raises:
            ConfigError: If a value cannot be parsed or is out of range
        """
        kwargs = {}
        for config_field in fields(cls):
            if config_field.name in data:
                value = _coerce(config_field.name, data[config_field.name])
                if value is not None:
                    kwargs[config_field.name] = value

        for key, minimum in _MINIMUMS.items():
            if key in kwargs and kwargs[key] < minimum:
                raise ConfigError(f"{key} must be at least {minimum}, got {kwargs[key]}")

        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary for display."""
        return {config_field.name: getattr(self, config_field.name) for config_field in fields(self)}
