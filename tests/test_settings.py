"""Tests for settings models and stores."""
import json
import stat
import threading

import pytest

from talktohand.config import DEFAULT_MODEL_NAME
from talktohand.settings import (
    InMemorySettingsStore,
    JsonFileSettingsStore,
    Settings,
    create_settings_store,
    settings_from_env,
)


class TestSettings:
    """Tests for the Settings model."""

    def test_defaults(self):
        settings = Settings()
        assert settings.server_url == ""
        assert settings.api_key == ""
        assert settings.model_name == DEFAULT_MODEL_NAME
        assert settings.streaming is True

    def test_api_key_not_in_repr(self):
        assert "secret-token" not in repr(Settings(api_key="secret-token"))

    @pytest.mark.parametrize("key, masked", [
        ("", ""),
        ("abc", "***"),
        ("abcd", "****"),
        ("sk-123456", "*****3456"),
    ])
    def test_masked_api_key(self, key: str, masked: str):
        assert Settings(api_key=key).masked_api_key == masked

    def test_unknown_fields_ignored(self):
        """Test that older or newer settings files still load."""
        settings = Settings.model_validate({"server_url": "http://x", "theme": "dark"})
        assert settings.server_url == "http://x"


class TestInMemorySettingsStore:
    """Tests for the shared store behaviour."""

    def test_set_returns_and_stores_new_snapshot(self):
        store = InMemorySettingsStore()
        before = store.get()

        updated = store.set(server_url="http://localhost:1337", streaming=False)

        assert updated is store.get()
        assert updated.server_url == "http://localhost:1337"
        assert updated.streaming is False
        # Earlier snapshots are unaffected
        assert before.server_url == ""

    def test_unknown_setting_rejected(self):
        store = InMemorySettingsStore()
        with pytest.raises(ValueError, match="Unknown setting"):
            store.set(colour="blue")
        assert store.get() == Settings()

    def test_concurrent_writes_keep_every_change(self):
        """Test that writes from many threads are serialized."""
        store = InMemorySettingsStore()
        fields = ["server_url", "api_key", "model_name"]

        def write(field: str):
            for i in range(50):
                store.set(**{field: f"{field}-{i}"})

        threads = [threading.Thread(target=write, args=(f,)) for f in fields]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        final = store.get()
        assert final.server_url == "server_url-49"
        assert final.api_key == "api_key-49"
        assert final.model_name == "model_name-49"


class TestJsonFileSettingsStore:
    """Tests for the JSON file store."""

    def test_missing_file_gives_defaults(self, tmp_path):
        store = JsonFileSettingsStore(tmp_path / "settings.json")
        assert store.get() == Settings()
        assert not store.path.exists()

    def test_values_survive_reopen(self, tmp_path):
        path = tmp_path / "settings.json"
        JsonFileSettingsStore(path).set(
            server_url="http://localhost:1337", api_key="sk-1", model_name="m", streaming=False
        )

        reopened = JsonFileSettingsStore(path).get()

        assert reopened == Settings(
            server_url="http://localhost:1337", api_key="sk-1", model_name="m", streaming=False
        )

    def test_file_is_owner_only(self, tmp_path):
        """Test that the file holding the API key is not world-readable."""
        path = tmp_path / "settings.json"
        JsonFileSettingsStore(path).set(api_key="sk-1")

        mode = stat.S_IMODE(path.stat().st_mode)
        assert mode & (stat.S_IRWXG | stat.S_IRWXO) == 0

    def test_file_is_plain_json(self, tmp_path):
        path = tmp_path / "settings.json"
        JsonFileSettingsStore(path).set(model_name="m")
        assert json.loads(path.read_text())["model_name"] == "m"

    def test_invalid_file_rejected(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{not json")
        with pytest.raises(ValueError, match="Invalid settings file"):
            JsonFileSettingsStore(path)


class TestFactory:
    """Tests for create_settings_store and settings_from_env."""

    def test_backends(self, tmp_path):
        assert create_settings_store("memory").backend_type == "memory"
        store = create_settings_store("json", path=tmp_path / "s.json")
        assert store.backend_type == "json"

    def test_memory_with_initial(self):
        store = create_settings_store("memory", initial=Settings(model_name="m"))
        assert store.get().model_name == "m"

    def test_unsupported_backend(self):
        with pytest.raises(ValueError, match="Unsupported settings backend"):
            create_settings_store("keychain")

    def test_env_overlay(self, monkeypatch):
        monkeypatch.setenv("TALKTOHAND_SERVER_URL", "http://env:1")
        monkeypatch.setenv("TALKTOHAND_API_KEY", "env-key")
        monkeypatch.setenv("TALKTOHAND_MODEL", "env-model")
        monkeypatch.setenv("TALKTOHAND_STREAM", "off")

        settings = settings_from_env(Settings(server_url="http://file"))

        assert settings == Settings(
            server_url="http://env:1", api_key="env-key", model_name="env-model", streaming=False
        )

    def test_env_overlay_without_variables(self, monkeypatch):
        for name in ("TALKTOHAND_SERVER_URL", "TALKTOHAND_API_KEY",
                     "TALKTOHAND_MODEL", "TALKTOHAND_STREAM"):
            monkeypatch.delenv(name, raising=False)
        base = Settings(server_url="http://file")
        assert settings_from_env(base) is base

    @pytest.mark.parametrize("value", ["1", "true", "YES", " on "])
    def test_truthy_stream_values(self, monkeypatch, value: str):
        monkeypatch.setenv("TALKTOHAND_STREAM", value)
        assert settings_from_env(Settings(streaming=False)).streaming is True
