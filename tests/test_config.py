"""Unit tests for config.py."""

import json

import pytest
from devwidgets import config as config_module
from devwidgets.config import ConfigError, TimerConfig, dump_config, load_config


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestLoadConfig:
    """Test reading settings files."""

    def test_missing_default_file_gives_defaults(self, tmp_path, monkeypatch):
        """No settings file at the default path is fine."""
        monkeypatch.setattr(config_module, "DEFAULT_CONFIG_PATH", tmp_path / "timer.json")
        assert load_config() == TimerConfig()

    def test_missing_explicit_file(self, tmp_path):
        """An explicitly named file must exist."""
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.json")

    def test_valid_file(self, tmp_path):
        """Values are read and converted to seconds."""
        path = write_json(tmp_path / "timer.json", {
            "work_minutes": 50,
            "break_minutes": 10,
            "long_break_interval": 2,
            "auto_start_pomodoros": True,
            "notify_url": "https://ntfy.example/focus",
        })
        config = load_config(path)
        assert config.work_minutes == 50
        assert config.long_break_minutes == 15
        assert config.notify_url == "https://ntfy.example/focus"

        settings = config.to_settings()
        assert settings.work_duration == 3000
        assert settings.break_duration == 600
        assert settings.long_break_duration == 900
        assert settings.long_break_interval == 2
        assert settings.auto_start_breaks is True
        assert settings.auto_start_pomodoros is True

    def test_invalid_json(self, tmp_path):
        """Broken JSON is reported."""
        path = tmp_path / "timer.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_config(path)

    def test_not_an_object(self, tmp_path):
        """The top level must be an object."""
        with pytest.raises(ConfigError, match="JSON object"):
            load_config(write_json(tmp_path / "timer.json", [25, 5]))

    def test_unknown_keys(self, tmp_path):
        """Misspelled keys are rejected."""
        with pytest.raises(ConfigError, match="workDuration"):
            load_config(write_json(tmp_path / "timer.json", {"workDuration": 25}))

    @pytest.mark.parametrize("data", [
        {"work_minutes": 0},
        {"break_minutes": -5},
        {"long_break_minutes": "15"},
        {"work_minutes": True},
        {"long_break_interval": 0},
        {"volume": 1.5},
        {"volume": "loud"},
    ])
    def test_out_of_range_values(self, tmp_path, data):
        """Durations, interval and volume are range-checked."""
        with pytest.raises(ConfigError):
            load_config(write_json(tmp_path / "timer.json", data))

    @pytest.mark.parametrize("data", [
        {"auto_start_pomodoros": "false"},
        {"auto_start_breaks": 1},
        {"notify_url": 5},
        {"notify_url": ["https://ntfy.example/focus"]},
    ])
    def test_wrong_types(self, tmp_path, data):
        """Switches must be booleans and the URL a string."""
        with pytest.raises(ConfigError):
            load_config(write_json(tmp_path / "timer.json", data))

    def test_null_notify_url(self, tmp_path):
        """A null URL means no webhook."""
        assert load_config(write_json(tmp_path / "timer.json", {"notify_url": None})).notify_url is None

    def test_directory_path(self, tmp_path):
        """A directory cannot be read as a settings file."""
        with pytest.raises(ConfigError, match="Cannot read"):
            load_config(tmp_path)

    def test_not_utf8(self, tmp_path):
        """Undecodable bytes are reported."""
        path = tmp_path / "timer.json"
        path.write_bytes(b"\xff\xfe{}")
        with pytest.raises(ConfigError, match="Cannot read"):
            load_config(path)

    def test_dump_round_trip(self, tmp_path):
        """Dumped settings load back unchanged."""
        config = TimerConfig(work_minutes=40, volume=0.0)
        path = tmp_path / "timer.json"
        path.write_text(dump_config(config), encoding="utf-8")
        assert load_config(path) == config


class TestMerged:
    """Test command-line overrides."""

    def test_none_values_keep_file_values(self):
        """Unset flags do not override."""
        config = TimerConfig(work_minutes=40).merged({"work_minutes": None, "volume": None})
        assert config.work_minutes == 40
        assert config.volume == 0.7

    def test_overrides_apply(self):
        """Set flags win over the file."""
        config = TimerConfig(work_minutes=40).merged({"work_minutes": 20, "auto_start_breaks": False})
        assert config.work_minutes == 20
        assert config.auto_start_breaks is False

    def test_overrides_are_validated(self):
        """Overrides go through the same checks."""
        with pytest.raises(ConfigError):
            TimerConfig().merged({"volume": -1.0})
