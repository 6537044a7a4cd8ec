#!/usr/bin/env python3
"""Tests for settings loading."""

from pathlib import Path

import pytest

from config import Settings, load_settings
from models import InvalidInput

ENV_VARS = [
    "MECANICO_CONFIG",
    "MECANICO_DATA_DIR",
    "MECANICO_DUE_SOON_RATIO",
    "MECANICO_OFFLINE_QUEUE",
    "MECANICO_SYNC_INTERVAL",
    "MECANICO_USER",
    "MECANICO_LOG_LEVEL",
    "SECRET_KEY",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings_file(tmp_path):
    def _write(text):
        path = tmp_path / "mecanico.yaml"
        path.write_text(text)
        return path

    return _write


class TestLoadSettings:
    """Tests for load_settings precedence and coercion."""

    def test_defaults(self):
        settings = load_settings()
        assert settings == Settings()
        assert settings.data_dir == Path("data")
        assert settings.due_soon_ratio == 0.1
        assert settings.offline_queue is False
        assert settings.default_user is None
        assert settings.queue_path == Path("data") / "sync-queue.yaml"

    def test_yaml_file(self, settings_file):
        path = settings_file("data_dir: /srv/mecanico\ndue_soon_ratio: 0.2\noffline_queue: true\n")
        settings = load_settings(path)
        assert settings.data_dir == Path("/srv/mecanico")
        assert settings.due_soon_ratio == 0.2
        assert settings.offline_queue is True

    def test_config_path_from_environment(self, settings_file, monkeypatch):
        path = settings_file("default_user: ana\n")
        monkeypatch.setenv("MECANICO_CONFIG", str(path))
        assert load_settings().default_user == "ana"

    def test_environment_overrides_file(self, settings_file, monkeypatch):
        path = settings_file("due_soon_ratio: 0.2\nlog_level: debug\n")
        monkeypatch.setenv("MECANICO_DUE_SOON_RATIO", "0.15")
        settings = load_settings(path)
        assert settings.due_soon_ratio == 0.15
        assert settings.log_level == "DEBUG"

    def test_empty_env_value_is_ignored(self, settings_file, monkeypatch):
        path = settings_file("due_soon_ratio: 0.2\n")
        monkeypatch.setenv("MECANICO_DUE_SOON_RATIO", "")
        assert load_settings(path).due_soon_ratio == 0.2

    def test_empty_file(self, settings_file):
        assert load_settings(settings_file("")) == Settings()

    def test_user_and_secret_key_variables(self, monkeypatch):
        monkeypatch.setenv("MECANICO_USER", "ana")
        monkeypatch.setenv("SECRET_KEY", "s3cret")
        settings = load_settings()
        assert settings.default_user == "ana"
        assert settings.secret_key == "s3cret"

    @pytest.mark.parametrize("raw,expected", [
        ("1", True), ("true", True), ("Yes", True), ("on", True),
        ("0", False), ("false", False), ("no", False),
    ])
    def test_offline_queue_flag(self, raw, expected, monkeypatch):
        monkeypatch.setenv("MECANICO_OFFLINE_QUEUE", raw)
        assert load_settings().offline_queue is expected

    def test_sync_interval(self, monkeypatch):
        monkeypatch.setenv("MECANICO_SYNC_INTERVAL", "5")
        assert load_settings().sync_interval == 5.0

    def test_data_dir_override_copy(self):
        settings = load_settings().model_copy(update={"data_dir": Path("/tmp/other")})
        assert settings.queue_path == Path("/tmp/other") / "sync-queue.yaml"


class TestInvalidSettings:
    """Bad settings raise InvalidInput."""

    @pytest.mark.parametrize("ratio", ["0", "1", "1.5", "-0.1"])
    def test_ratio_out_of_range(self, ratio, monkeypatch):
        monkeypatch.setenv("MECANICO_DUE_SOON_RATIO", ratio)
        with pytest.raises(InvalidInput, match="due_soon_ratio"):
            load_settings()

    def test_ratio_not_a_number(self, monkeypatch):
        monkeypatch.setenv("MECANICO_DUE_SOON_RATIO", "ten percent")
        with pytest.raises(InvalidInput, match="due_soon_ratio"):
            load_settings()

    def test_ratio_out_of_range_in_file(self, settings_file):
        with pytest.raises(InvalidInput, match="due_soon_ratio"):
            load_settings(settings_file("due_soon_ratio: 2\n"))

    def test_sync_interval_must_be_positive(self, monkeypatch):
        monkeypatch.setenv("MECANICO_SYNC_INTERVAL", "0")
        with pytest.raises(InvalidInput, match="sync_interval"):
            load_settings()

    def test_unknown_key_in_file(self, settings_file):
        with pytest.raises(InvalidInput, match="due_soon_ratoi"):
            load_settings(settings_file("due_soon_ratoi: 0.2\n"))

    def test_file_must_be_mapping(self, settings_file):
        with pytest.raises(InvalidInput):
            load_settings(settings_file("- a\n- b\n"))
