"""Tests for the relaynote CLI entry point and subcommands.

``main()`` uses deferred imports, so everything here runs against a
real config file in ``tmp_path`` rather than mocks.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from relaynote.cli.commands.settings import parse_value
from relaynote.cli.main import _build_parser, main
from relaynote.config import RelaynoteConfig

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def parser():
    """Return a freshly built ArgumentParser."""
    return _build_parser()


@pytest.fixture()
def file_config(tmp_path) -> str:
    """Config whose settings and analytics live in a JSON file store."""
    data = {
        "engine": {"timezone": "UTC", "batch_delay_ms": 200, "fast_batch_delay_ms": 100},
        "storage": {"backend": "file", "path": str(tmp_path / "store.json")},
        "logging": {"level": "WARNING"},
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return str(path)


def _run(argv: list[str]) -> int:
    RelaynoteConfig.reset()
    try:
        main(argv)
    except SystemExit as exc:
        return exc.code or 0
    return 0


# ===========================================================================
# Parser construction
# ===========================================================================


class TestParser:
    def test_config_required(self, parser):
        with pytest.raises(SystemExit):
            parser.parse_args(["demo"])

    def test_settings_set(self, parser):
        args = parser.parse_args(["-c", "x.yaml", "settings", "set", "soundEnabled", "false"])
        assert args.command == "settings"
        assert args.settings_command == "set"
        assert (args.key, args.value) == ("soundEnabled", "false")

    def test_demo_wait(self, parser):
        args = parser.parse_args(["-c", "x.yaml", "demo", "--wait", "0.5"])
        assert args.wait == 0.5


# ===========================================================================
# main()
# ===========================================================================


class TestMain:
    def test_missing_config_file(self, tmp_path, capsys):
        assert _run(["-c", str(tmp_path / "nope.yaml"), "--validate-only"]) == 1
        assert "configuration file not found" in capsys.readouterr().err

    def test_validate_only(self, file_config, capsys):
        assert _run(["-c", file_config, "--validate-only"]) == 0
        out = capsys.readouterr().out
        assert "configuration OK" in out
        assert "storage:  file" in out

    def test_invalid_config(self, tmp_path, capsys):
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.safe_dump({"storage": {"backend": "file"}}), encoding="utf-8")
        assert _run(["-c", str(path), "--validate-only"]) == 1
        assert "storage.path" in capsys.readouterr().err

    def test_no_command_prints_help(self, file_config, capsys):
        assert _run(["-c", file_config]) == 1
        assert "usage:" in capsys.readouterr().out


# ===========================================================================
# Subcommands
# ===========================================================================


class TestSettingsCommand:
    def test_show_defaults(self, file_config, capsys):
        assert _run(["-c", file_config, "settings", "show"]) == 0
        shown = json.loads(capsys.readouterr().out)
        assert shown["soundEnabled"] is True

    def test_set_persists(self, file_config, tmp_path, capsys):
        assert _run(["-c", file_config, "settings", "set", "quietHours.start", "23:30"]) == 0
        capsys.readouterr()
        assert _run(["-c", file_config, "settings", "show"]) == 0
        shown = json.loads(capsys.readouterr().out)
        assert shown["quietHours"]["start"] == "23:30"
        store = json.loads(Path(tmp_path / "store.json").read_text(encoding="utf-8"))
        assert "notification_settings" in store

    def test_set_invalid_value(self, file_config, capsys):
        assert _run(["-c", file_config, "settings", "set", "soundEnabled", "loud"]) == 1
        assert "Invalid value" in capsys.readouterr().err

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("true", True), ("false", False), ("22:30", "22:30"), ("high", "high"), ("3", 3)],
    )
    def test_parse_value(self, raw, expected):
        assert parse_value(raw) == expected


class TestAnalyticsCommand:
    def test_show_export_reset(self, file_config, capsys):
        assert _run(["-c", file_config, "analytics", "show"]) == 0
        assert json.loads(capsys.readouterr().out)["sent"] == 0
        assert _run(["-c", file_config, "analytics", "export"]) == 0
        assert "relaynote_notifications_sent_total 0" in capsys.readouterr().out
        assert _run(["-c", file_config, "analytics", "reset"]) == 0
        assert "analytics reset" in capsys.readouterr().out


class TestDemoCommand:
    def test_demo_runs_and_counts(self, file_config, capsys):
        assert _run(["-c", file_config, "demo", "--wait", "0.4"]) == 0
        analytics = json.loads(capsys.readouterr().out)
        # critical deadline, two connection notices, the queued notice,
        # and the collapsed batch of three assignments
        assert analytics["sent"] == 5
        assert analytics["failed"] == 0
