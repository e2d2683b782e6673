"""
Tests for locker_config.

Covers:
- Loading the shipped default set
- LOCKER_CONFIG override and explicit paths
- Rejection of unknown keys and malformed values
- Deterministic checksums
- The bridges into kernel settings, logging and the engine
"""

import logging
from io import StringIO
from pathlib import Path

import pytest
import yaml

from locker_config import CONFIG_ENV_VAR, get_active_config
from locker_config import bridges
from locker_config.bridges import (
    build_engine,
    build_registry_settings,
    configure_kernel_logging,
)
from locker_config.loader import compute_checksum, load_yaml_file, parse_config
from locker_config.schema import LockerConfig
from locker_kernel.db.types import DEFAULT_MAX_RELEASE_TIMESTAMP
from locker_kernel.domain.naming import DEFAULT_NAME_TEMPLATE, DEFAULT_SYMBOL_TEMPLATE
from locker_kernel.logging_config import configure_logging, reset_logging
from locker_kernel.services.position_registry import PositionRegistry, RegistrySettings
from tests.conftest import ALICE, START_TIMESTAMP, TOKEN_A


def _write(tmp_path: Path, data) -> Path:
    path = tmp_path / "locker.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


class TestDefaultConfig:

    def test_default_set_loads(self, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)

        config = get_active_config()

        assert isinstance(config, LockerConfig)
        assert config.max_release_timestamp == 10_000_000_000
        assert config.receipt_name_template == "{asset_name} Lock #{position}"
        assert config.receipt_symbol_template == "{asset_symbol}-L{position}"
        assert config.log_level == "INFO"
        assert len(config.checksum) == 64

    def test_load_is_logged(self, monkeypatch, captured_logs):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)

        config = get_active_config()

        loaded = [r for r in captured_logs() if r["message"] == "locker_config_loaded"]
        assert loaded[0]["checksum"] == config.checksum
        assert loaded[0]["path"].endswith("default.yaml")


class TestConfigSources:

    def test_explicit_path(self, tmp_path):
        path = _write(tmp_path, {"registry_address": "0xexplicit"})

        config = get_active_config(path)

        assert config.registry_address == "0xexplicit"
        assert config.max_release_timestamp == 10_000_000_000

    def test_env_override(self, tmp_path, monkeypatch):
        path = _write(tmp_path, {"registry_address": "0xfromenv"})
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

        assert get_active_config().registry_address == "0xfromenv"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "absent.yaml")

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert load_yaml_file(path) == {}
        assert get_active_config(path).registry_address == LockerConfig().registry_address

    def test_non_mapping_rejected(self, tmp_path):
        path = _write(tmp_path, ["registry_address"])

        with pytest.raises(ValueError, match="mapping"):
            get_active_config(path)


class TestParseConfig:

    def test_unknown_key(self):
        with pytest.raises(ValueError, match="Unknown configuration keys: colour"):
            parse_config({"colour": "blue"})

    def test_checksum_is_not_a_key(self):
        with pytest.raises(ValueError, match="checksum"):
            parse_config({"checksum": "abc"})

    @pytest.mark.parametrize("value", [0, -1, True, "10000000000", 1.5])
    def test_bad_max_release_timestamp(self, value):
        with pytest.raises(ValueError, match="max_release_timestamp"):
            parse_config({"max_release_timestamp": value})

    def test_empty_string_rejected(self):
        with pytest.raises(ValueError, match="registry_address"):
            parse_config({"registry_address": ""})

    def test_log_level_normalized(self):
        assert parse_config({"log_level": "debug"}).log_level == "DEBUG"

    def test_bad_log_level(self):
        with pytest.raises(ValueError, match="log_level"):
            parse_config({"log_level": "LOUD"})

    def test_template_missing_position(self):
        with pytest.raises(ValueError, match="position"):
            parse_config({"receipt_symbol_template": "{asset_symbol}-L"})

    def test_template_unknown_placeholder(self):
        with pytest.raises(ValueError, match="receipt_name_template"):
            parse_config({"receipt_name_template": "{asset_name} {owner} #{position}"})

    def test_checksum_deterministic(self):
        data = {"registry_address": "0xabc", "max_release_timestamp": 5_000}
        reordered = {"max_release_timestamp": 5_000, "registry_address": "0xabc"}

        assert parse_config(data).checksum == parse_config(reordered).checksum
        assert compute_checksum(data) != compute_checksum({"registry_address": "0xabd"})


class TestBridge:

    def test_build_registry_settings(self):
        config = parse_config({
            "registry_address": "0xreg",
            "max_release_timestamp": 5_000_000_000,
            "receipt_symbol_template": "{asset_symbol}v{position}",
        })

        settings = build_registry_settings(config)

        assert settings == RegistrySettings(
            registry_address="0xreg",
            max_release_timestamp=5_000_000_000,
            receipt_name_template="{asset_name} Lock #{position}",
            receipt_symbol_template="{asset_symbol}v{position}",
        )

    def test_registry_uses_config_templates(self, session, gateway, token_a, clock):
        config = parse_config({
            "registry_address": "0xreg",
            "receipt_symbol_template": "{asset_symbol}v{position}",
        })
        registry = PositionRegistry(session, gateway, build_registry_settings(config), clock)
        token_a.approve(ALICE, "0xreg", 100)

        result = registry.lock(ALICE, TOKEN_A, 100, START_TIMESTAMP)

        assert result.receipt_symbol == "TKAv0"
        assert token_a.balance_of("0xreg") == 100

    def test_defaults_match_kernel(self):
        config = LockerConfig()

        assert config.max_release_timestamp == DEFAULT_MAX_RELEASE_TIMESTAMP
        assert config.receipt_name_template == DEFAULT_NAME_TEMPLATE
        assert config.receipt_symbol_template == DEFAULT_SYMBOL_TEMPLATE


class TestLoggingBridge:

    @pytest.fixture
    def fresh_logging(self):
        """Drop the suite's logging setup for one test, then restore it."""
        reset_logging()
        yield
        reset_logging()
        configure_logging(level=logging.DEBUG)

    def test_level_from_config(self, fresh_logging):
        stream = StringIO()
        config = parse_config({"log_level": "warning"})

        configure_kernel_logging(config, handler=logging.StreamHandler(stream))

        kernel_logger = logging.getLogger("locker_kernel")
        assert kernel_logger.level == logging.WARNING
        kernel_logger.getChild("test").info("dropped")
        kernel_logger.getChild("test").warning("kept")
        assert "dropped" not in stream.getvalue()
        assert '"message": "kept"' in stream.getvalue()


class TestEngineBridge:

    def test_database_url_from_config(self, monkeypatch):
        calls = []
        monkeypatch.setattr(
            bridges,
            "init_engine_from_url",
            lambda url, **options: calls.append((url, options)) or "engine",
        )
        config = parse_config({"database_url": "postgresql://locker@db/locker"})

        engine = build_engine(config, echo=True, pool_size=3)

        assert engine == "engine"
        assert calls == [("postgresql://locker@db/locker", {"echo": True, "pool_size": 3})]
