"""Tests for the persisted user settings."""

from __future__ import annotations

import json

import pytest

from relaynote.core.types import NotificationType, Priority
from relaynote.models.settings import NotificationSettings, QuietHours
from relaynote.services.settings_store import SettingsStore
from relaynote.storage import MemoryStore

KEY = "notification_settings"


# ===========================================================================
# Model
# ===========================================================================


class TestNotificationSettingsModel:
    def test_defaults(self):
        s = NotificationSettings()
        assert s.sound_enabled and s.desktop_enabled and s.batching_enabled
        assert s.quiet_hours == QuietHours(enabled=False, start="22:00", end="08:00")
        assert s.priority_for(NotificationType.DEADLINE_CRITICAL) is Priority.CRITICAL

    def test_blob_shape(self):
        blob = NotificationSettings().to_dict()
        assert blob["soundEnabled"] is True
        assert blob["quietHours"] == {"enabled": False, "start": "22:00", "end": "08:00"}
        assert blob["priority"]["task_assigned"] == "medium"

    def test_missing_keys_take_defaults(self):
        s = NotificationSettings.from_dict({"soundEnabled": False})
        assert s.sound_enabled is False
        assert s.vibration_enabled is True

    def test_unknown_keys_survive(self):
        s = NotificationSettings.from_dict({"theme": "dark"})
        assert s.to_dict()["theme"] == "dark"

    def test_bad_priority_override_skipped(self):
        s = NotificationSettings.from_dict({"priority": {"nope": "high", "task_assigned": "x"}})
        assert s.priority_for(NotificationType.TASK_ASSIGNED) is Priority.MEDIUM


# ===========================================================================
# Store
# ===========================================================================


class TestSettingsStoreLoad:
    def test_empty_store_uses_defaults(self):
        store = SettingsStore(MemoryStore(), KEY)
        assert store.settings == NotificationSettings()

    def test_valid_blob_merged_over_defaults(self):
        backend = MemoryStore({KEY: json.dumps({"batchingEnabled": False})})
        store = SettingsStore(backend, KEY)
        assert store.settings.batching_enabled is False
        assert store.settings.sound_enabled is True

    def test_corrupt_blob_falls_back(self, caplog):
        backend = MemoryStore({KEY: "{broken"})
        store = SettingsStore(backend, KEY)
        assert store.settings == NotificationSettings()
        assert "not valid JSON" in caplog.text

    def test_invalid_blob_falls_back(self, caplog):
        backend = MemoryStore({KEY: json.dumps({"quietHours": {"start": "25:99"}})})
        store = SettingsStore(backend, KEY)
        assert store.settings.quiet_hours.start == "22:00"
        assert "failed validation" in caplog.text

    def test_custom_defaults(self):
        defaults = NotificationSettings(sound_enabled=False)
        store = SettingsStore(MemoryStore(), KEY, defaults)
        assert store.settings.sound_enabled is False


class TestSettingsStoreUpdate:
    def test_update_persists_immediately(self):
        backend = MemoryStore()
        store = SettingsStore(backend, KEY)
        store.update("soundEnabled", False)
        assert json.loads(backend.get(KEY))["soundEnabled"] is False

    def test_snake_case_and_dotted_keys(self):
        store = SettingsStore(MemoryStore(), KEY)
        store.update("quiet_hours.enabled", True)
        store.update("quietHours.start", "23:15")
        assert store.settings.quiet_hours.enabled is True
        assert store.settings.quiet_hours.start == "23:15"

    def test_invalid_value_rejected_and_state_untouched(self):
        backend = MemoryStore()
        store = SettingsStore(backend, KEY)
        with pytest.raises(ValueError, match="soundEnabled"):
            store.update("soundEnabled", "loud")
        assert store.settings.sound_enabled is True
        assert backend.get(KEY) is None

    def test_set_priority(self):
        store = SettingsStore(MemoryStore(), KEY)
        store.set_priority("task_assigned", Priority.HIGH)
        assert store.settings.priority_for(NotificationType.TASK_ASSIGNED) is Priority.HIGH

    def test_set_priority_unknown_type(self):
        store = SettingsStore(MemoryStore(), KEY)
        with pytest.raises(ValueError):
            store.set_priority("not_a_type", "high")

    def test_listeners_notified(self):
        store = SettingsStore(MemoryStore(), KEY)
        seen = []
        store.subscribe(lambda s: seen.append(s.desktop_enabled))
        store.update("desktopEnabled", False)
        assert seen == [False]

    def test_reload_picks_up_external_write(self):
        backend = MemoryStore()
        store = SettingsStore(backend, KEY)
        backend.set(KEY, json.dumps({"vibrationEnabled": False}))
        assert store.reload().vibration_enabled is False

    def test_round_trip_through_new_store(self):
        backend = MemoryStore()
        SettingsStore(backend, KEY).update("quietHours.end", "07:30")
        assert SettingsStore(backend, KEY).settings.quiet_hours.end == "07:30"
