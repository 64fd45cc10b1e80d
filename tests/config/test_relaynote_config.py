"""Tests for RelaynoteConfig: loading, env-var resolution and validation."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
import yaml

from relaynote.config import (
    ConfigValidationError,
    RelaynoteConfig,
    build_settings,
    default_engine_settings,
    get_config,
)
from relaynote.core.types import NotificationType


def _write_config(tmp_path: Path, data: dict) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(
        yaml.safe_dump(data, default_flow_style=False, sort_keys=False),
        encoding="utf-8",
    )
    return path


def _make_config(tmp_path: Path, data: dict) -> RelaynoteConfig:
    return RelaynoteConfig(config_file=_write_config(tmp_path, data))


# ===========================================================================
# Loading
# ===========================================================================


class TestLoading:
    def test_minimal_file(self, tmp_config_file):
        cfg = RelaynoteConfig(config_file=tmp_config_file)
        settings = cfg.settings
        assert settings.engine.max_retries == 3
        assert settings.engine.batch_delay_ms == 5000
        assert settings.engine.fast_batch_delay_ms == 2000
        assert settings.engine.timezone == "UTC"
        assert settings.storage.backend == "memory"
        assert settings.logging.format == "text"
        assert settings.hooks.registered == ()

    def test_empty_sections_take_defaults(self, tmp_path):
        cfg = _make_config(tmp_path, {})
        assert cfg.settings.engine == default_engine_settings()
        assert cfg.settings.storage.settings_key == "notification_settings"

    def test_get_config_singleton(self, tmp_config_file):
        with pytest.raises(RuntimeError, match="not initialised"):
            get_config()
        cfg = RelaynoteConfig(config_file=tmp_config_file)
        assert get_config() is cfg

    def test_fast_batch_types_parsed(self, tmp_path):
        cfg = _make_config(tmp_path, {"engine": {"fast_batch_types": ["task_assigned"]}})
        assert cfg.settings.engine.fast_batch_types == frozenset(
            {NotificationType.TASK_ASSIGNED}
        )


# ===========================================================================
# Environment variables
# ===========================================================================


class TestEnvVars:
    def test_variable_substituted(self, tmp_path, monkeypatch):
        monkeypatch.setenv("RELAYNOTE_TEST_LEVEL", "DEBUG")
        cfg = _make_config(tmp_path, {"logging": {"level": "${RELAYNOTE_TEST_LEVEL}"}})
        assert cfg.settings.logging.level == "DEBUG"

    def test_default_used_when_unset(self, tmp_path, monkeypatch):
        monkeypatch.delenv("RELAYNOTE_TEST_PATH", raising=False)
        cfg = _make_config(
            tmp_path,
            {"storage": {"backend": "file", "path": "${RELAYNOTE_TEST_PATH:-/tmp/rn.json}"}},
        )
        assert cfg.settings.storage.path == "/tmp/rn.json"

    def test_unset_without_default_fails(self, tmp_path, monkeypatch):
        monkeypatch.delenv("RELAYNOTE_TEST_MISSING", raising=False)
        with pytest.raises(ConfigValidationError, match="RELAYNOTE_TEST_MISSING"):
            _make_config(tmp_path, {"storage": {"path": "${RELAYNOTE_TEST_MISSING}"}})


# ===========================================================================
# Validation
# ===========================================================================


class TestValidation:
    def test_schema_rejects_unknown_section(self, tmp_path):
        with pytest.raises((ConfigValidationError, ValueError)):
            _make_config(tmp_path, {"server": {"port": 80}})

    def test_schema_rejects_bad_type(self, tmp_path):
        with pytest.raises((ConfigValidationError, ValueError)):
            _make_config(tmp_path, {"engine": {"max_retries": "three"}})

    def test_file_backend_requires_path(self, tmp_path):
        with pytest.raises(ConfigValidationError, match="storage.path"):
            _make_config(tmp_path, {"storage": {"backend": "file"}})

    def test_unknown_timezone(self, tmp_path):
        with pytest.raises(ConfigValidationError, match="Mars/Olympus"):
            _make_config(tmp_path, {"engine": {"timezone": "Mars/Olympus"}})

    def test_storage_keys_must_differ(self, tmp_path):
        with pytest.raises(ConfigValidationError, match="must differ"):
            _make_config(
                tmp_path,
                {"storage": {"settings_key": "blob", "analytics_key": "blob"}},
            )

    def test_bad_hook_class_path(self, tmp_path):
        with pytest.raises((ConfigValidationError, ValueError)):
            _make_config(tmp_path, {"hooks": {"registered": [{"class": "not a path"}]}})

    def test_errors_are_collected(self, tmp_path):
        with pytest.raises(ConfigValidationError) as exc_info:
            _make_config(
                tmp_path,
                {
                    "engine": {"timezone": "Nowhere/Else"},
                    "storage": {"backend": "file"},
                },
            )
        assert len(exc_info.value.errors) == 2

    def test_slow_fast_delay_only_warns(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING, logger="relaynote.config"):
            cfg = _make_config(
                tmp_path, {"engine": {"batch_delay_ms": 1000, "fast_batch_delay_ms": 3000}}
            )
        assert cfg.settings.engine.fast_batch_delay_ms == 3000
        assert "fast_batch_delay_ms" in caplog.text


# ===========================================================================
# build_settings
# ===========================================================================


class TestBuildSettings:
    def test_unknown_hook_event_rejected(self):
        with pytest.raises(ValueError, match="unknown event"):
            build_settings(
                {"hooks": {"registered": [{"class": "a.B", "events": ["order.created"]}]}}
            )

    def test_hook_entry_defaults(self):
        settings = build_settings({"hooks": {"registered": [{"class": "a.B"}]}})
        entry = settings.hooks.registered[0]
        assert entry.enabled is True
        assert entry.events == ()
        assert entry.config == {}

    def test_defaults_kept_raw(self):
        settings = build_settings({"defaults": {"quietHours": {"enabled": True}}})
        assert settings.defaults == {"quietHours": {"enabled": True}}
