"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from aws_cleaner.cli.config import CONFIG_KEYS, Config, ConfigError


class TestConfig:
    """Test suite for Config."""

    def test_defaults(self, tmp_path: Path) -> None:
        """Test defaults apply when no file or environment is present."""
        config = Config.load(environ={"AWS_CLEANER_CONFIG": str(tmp_path / "missing.yaml")})

        assert config.max_stack_wait_seconds == 1200
        assert config.stack_polling_delay_ms == 5000
        assert config.throttle_max_attempts == 7
        assert config.throttle_backoff_seconds == 2
        assert config.continue_on_error is False
        assert config.audit_enabled is True
        assert config.skip_names == []
        assert config.allowed_principal_prefix == "np"

    def test_load_yaml_file(self, tmp_path: Path) -> None:
        """Test values are read from YAML, accepting lists and CSV strings."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "aws_profile: sandbox\n"
            "region: eu-west-1\n"
            "permanent_stack_prefixes:\n"
            "  - base-\n"
            "  - shared-\n"
            "skip_names: keep, prod\n"
            "max_stack_wait_seconds: 600\n"
            "continue_on_error: true\n"
        )

        config = Config.load(str(config_file), environ={})

        assert config.aws_profile == "sandbox"
        assert config.region == "eu-west-1"
        assert config.permanent_stack_prefixes == ["base-", "shared-"]
        assert config.skip_names == ["keep", "prod"]
        assert config.max_stack_wait_seconds == 600
        assert config.continue_on_error is True

    def test_config_path_from_environment(self, tmp_path: Path) -> None:
        config_file = tmp_path / "cleaner.yaml"
        config_file.write_text("log_level: DEBUG\n")

        config = Config.load(environ={"AWS_CLEANER_CONFIG": str(config_file)})

        assert config.log_level == "DEBUG"

    def test_environment_overrides_file(self, tmp_path: Path) -> None:
        """Test AWS_CLEANER_* variables win over file values."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("skip_names: [keep]\naudit_enabled: true\n")

        config = Config.load(
            str(config_file),
            environ={
                "AWS_CLEANER_SKIP_NAMES": "prod,live",
                "AWS_CLEANER_AUDIT_ENABLED": "false",
                "AWS_CLEANER_THROTTLE_BACKOFF_SECONDS": "0.5",
            },
        )

        assert config.skip_names == ["prod", "live"]
        assert config.audit_enabled is False
        assert config.throttle_backoff_seconds == 0.5

    def test_unknown_key_is_rejected(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("skip_name: keep\n")

        with pytest.raises(ConfigError, match="skip_name"):
            Config.load(str(config_file), environ={})

    def test_invalid_value_is_rejected(self) -> None:
        with pytest.raises(ConfigError, match="max_stack_wait_seconds"):
            Config.load(environ={"AWS_CLEANER_CONFIG": "/nonexistent", "AWS_CLEANER_MAX_STACK_WAIT_SECONDS": "soon"})

    def test_invalid_boolean_is_rejected(self) -> None:
        with pytest.raises(ConfigError, match="continue_on_error"):
            Config.from_dict({"continue_on_error": "maybe"})

    def test_explicit_missing_file_is_an_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            Config.load(str(tmp_path / "missing.yaml"), environ={})

    def test_non_mapping_file_is_rejected(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- just\n- a list\n")

        with pytest.raises(ConfigError, match="mapping"):
            Config.load(str(config_file), environ={})

    def test_to_dict_covers_every_key(self) -> None:
        assert set(Config().to_dict()) == set(CONFIG_KEYS)

    def test_empty_principal_prefix_disables_guard(self) -> None:
        """Test an explicit empty prefix overrides the np default."""
        config = Config.load(
            environ={"AWS_CLEANER_CONFIG": "/nonexistent", "AWS_CLEANER_ALLOWED_PRINCIPAL_PREFIX": ""}
        )

        assert config.allowed_principal_prefix == ""

    @pytest.mark.parametrize(
        "key, value",
        [
            ("throttle_max_attempts", 0),
            ("throttle_backoff_seconds", -1),
            ("max_stack_wait_seconds", -5),
            ("stack_polling_delay_ms", -1),
        ],
    )
    def test_out_of_range_value_is_rejected(self, key: str, value: int) -> None:
        with pytest.raises(ConfigError, match=key):
            Config.from_dict({key: value})
