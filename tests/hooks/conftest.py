"""Hook-specific fixtures for testing."""

from __future__ import annotations

import sys
import types

import pytest
from hook_helpers import FAKE_MODULE, FailingHook, NotAHook, RecordingHook, StrictConfigHook


@pytest.fixture()
def fake_module(monkeypatch):
    """Expose the test hook classes as an importable module."""
    module = types.ModuleType(FAKE_MODULE)
    module.RecordingHook = RecordingHook
    module.FailingHook = FailingHook
    module.StrictConfigHook = StrictConfigHook
    module.NotAHook = NotAHook
    monkeypatch.setitem(sys.modules, FAKE_MODULE, module)
    return module
