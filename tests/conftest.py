"""Root conftest for the relaynote test suite."""

from __future__ import annotations

import dataclasses
import sys
from pathlib import Path

import pytest
import yaml

# ---------------------------------------------------------------------------
# Make ``src/`` importable without installing the package
# ---------------------------------------------------------------------------
_SRC = str(Path(__file__).resolve().parent.parent / "src")
if _SRC not in sys.path:
    sys.path.insert(0, _SRC)

from relaynote.config.settings import default_engine_settings  # noqa: E402
from relaynote.core.scheduler import ManualScheduler  # noqa: E402
from relaynote.platform import ManualConnectivity, MemorySink  # noqa: E402
from relaynote.services import NotificationEngine  # noqa: E402
from relaynote.storage import MemoryStore  # noqa: E402

# ---------------------------------------------------------------------------
# Engine building blocks
# ---------------------------------------------------------------------------


@pytest.fixture()
def scheduler() -> ManualScheduler:
    """Fake clock starting at 2025-01-01 12:00 UTC."""
    return ManualScheduler()


@pytest.fixture()
def sink() -> MemorySink:
    return MemorySink()


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def connectivity() -> ManualConnectivity:
    return ManualConnectivity(online=True)


@pytest.fixture()
def engine_settings():
    """Default engine settings pinned to UTC so quiet hours are deterministic."""
    return dataclasses.replace(default_engine_settings(), timezone="UTC")


@pytest.fixture()
def make_engine(sink, store, scheduler, connectivity, engine_settings):
    """Factory building a :class:`NotificationEngine` from the shared fakes."""
    engines: list[NotificationEngine] = []

    def _make(**kwargs) -> NotificationEngine:
        kwargs.setdefault("connectivity", connectivity)
        kwargs.setdefault("settings", engine_settings)
        engine = NotificationEngine(
            kwargs.pop("sink", sink),
            kwargs.pop("store", store),
            kwargs.pop("scheduler", scheduler),
            **kwargs,
        )
        engines.append(engine)
        return engine

    yield _make
    for engine in engines:
        engine.destroy()


@pytest.fixture()
def engine(make_engine) -> NotificationEngine:
    return make_engine()


# ---------------------------------------------------------------------------
# Config files
# ---------------------------------------------------------------------------


@pytest.fixture()
def minimal_config_data() -> dict:
    """Return a small but complete config mapping."""
    return {
        "engine": {"timezone": "UTC"},
        "storage": {"backend": "memory"},
        "logging": {"level": "INFO", "format": "text"},
    }


@pytest.fixture()
def tmp_config_file(tmp_path: Path, minimal_config_data: dict) -> Path:
    """Write *minimal_config_data* to a temp YAML file and return its path."""
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        yaml.safe_dump(minimal_config_data, default_flow_style=False, sort_keys=False),
        encoding="utf-8",
    )
    return cfg


# ---------------------------------------------------------------------------
# ConfigKit singleton cleanup: autouse so every test gets a fresh slate
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def fresh_config():
    """Reset the RelaynoteConfig singleton before and after every test."""
    from relaynote.config.relaynote_config import RelaynoteConfig

    RelaynoteConfig.reset()
    yield
    RelaynoteConfig.reset()


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo ``configure_logging`` so caplog keeps seeing relaynote records."""
    yield
    import logging

    root = logging.getLogger("relaynote")
    root.handlers.clear()
    root.propagate = True
    root.setLevel(logging.NOTSET)
    logging.getLogger("relaynote.sink").setLevel(logging.NOTSET)
