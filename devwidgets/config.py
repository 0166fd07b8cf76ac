"""Timer settings file loading."""

import json
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

from .scheduler import Settings

DEFAULT_CONFIG_PATH = Path("~/.config/devwidgets/timer.json").expanduser()

_DURATION_KEYS = ("work_minutes", "break_minutes", "long_break_minutes")
_SWITCH_KEYS = ("auto_start_breaks", "auto_start_pomodoros")


class ConfigError(ValueError):
    """Raised for unreadable or invalid settings files."""


@dataclass(frozen=True)
class TimerConfig:
    """User-facing timer configuration. Durations are in minutes."""
    work_minutes: int = 25
    break_minutes: int = 5
    long_break_minutes: int = 15
    long_break_interval: int = 4
    auto_start_breaks: bool = True
    auto_start_pomodoros: bool = False
    volume: float = 0.7
    notify_url: Optional[str] = None

    def to_settings(self) -> Settings:
        """Convert to state machine settings in seconds."""
        return Settings(
            work_duration=self.work_minutes * 60,
            break_duration=self.break_minutes * 60,
            long_break_duration=self.long_break_minutes * 60,
            long_break_interval=self.long_break_interval,
            auto_start_breaks=self.auto_start_breaks,
            auto_start_pomodoros=self.auto_start_pomodoros,
        )

    def merged(self, overrides: Dict[str, Any]) -> "TimerConfig":
        """Return a copy with non-None overrides applied and validated."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        config = replace(self, **changes)
        validate(config)
        return config


def validate(config: TimerConfig) -> None:
    """Check durations, interval, switches, volume and notification URL.

    Raises:
        ConfigError: If a value has the wrong type or is out of range.
    """
    for key in _DURATION_KEYS:
        value = getattr(config, key)
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            raise ConfigError(f"{key} must be a positive integer, got {value!r}")
    interval = config.long_break_interval
    if not isinstance(interval, int) or isinstance(interval, bool) or interval < 1:
        raise ConfigError(f"long_break_interval must be at least 1, got {interval!r}")
    for key in _SWITCH_KEYS:
        value = getattr(config, key)
        if not isinstance(value, bool):
            raise ConfigError(f"{key} must be true or false, got {value!r}")
    if config.notify_url is not None and not isinstance(config.notify_url, str):
        raise ConfigError(f"notify_url must be a string, got {config.notify_url!r}")
    volume = config.volume
    if not isinstance(volume, (int, float)) or isinstance(volume, bool) or not 0.0 <= volume <= 1.0:
        raise ConfigError(f"volume must be between 0.0 and 1.0, got {config.volume!r}")


def load_config(path: Optional[Path] = None) -> TimerConfig:
    """Load timer settings from a JSON file.

    Args:
        path: Settings file. When omitted, the default path is used and a
            missing file yields the built-in defaults.

    Raises:
        ConfigError: If the file is missing (explicit path only), unreadable,
            not a JSON object, or has unknown keys or invalid values.
    """
    explicit = path is not None
    path = path or DEFAULT_CONFIG_PATH
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        if explicit:
            raise ConfigError(f"Config not found: {path}")
        return TimerConfig()
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {path}: {exc}")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot read {path}: {exc}")

    if not isinstance(raw, dict):
        raise ConfigError(f"Config in {path} must be a JSON object")

    known = {f.name for f in fields(TimerConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigError(f"Unknown keys in {path}: {', '.join(unknown)}")

    config = TimerConfig(**raw)
    validate(config)
    return config


def dump_config(config: TimerConfig) -> str:
    """Serialize a config as the JSON accepted by ``load_config``."""
    return json.dumps(asdict(config), indent=2)
