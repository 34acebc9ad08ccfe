"""Application configuration manager wrapping QSettings."""

import logging
import os
import shutil

from PySide6.QtCore import QObject, Signal, QSettings

from cctime.services.exporter import EXPORT_FORMATS
from cctime.services.turn_cache import CACHE_DIR

logger = logging.getLogger(__name__)

ORGANIZATION = "cctime"
APPLICATION = "cctime"

# Default values
DEFAULTS = {
    "general/sessionDir": "~/.claude/projects",
    "analysis/filterOutliers": True,
    "analysis/maxLatencyMs": 300000,
    "analysis/burstGapMinutes": 15,
    "export/defaultFormat": "json",
    "export/defaultPath": "./cctime-export",
    "export/includeStats": True,
    "cache/enabled": True,
    "advanced/debugLogging": False,
}

# Environment variables that win over stored values
ENV_OVERRIDES = {
    "general/sessionDir": "CCTIME_SESSION_DIR",
    "export/defaultFormat": "CCTIME_OUTPUT_FORMAT",
    "export/defaultPath": "CCTIME_EXPORT_PATH",
    "analysis/maxLatencyMs": "CCTIME_MAX_LATENCY_MS",
}

_CHOICES = {
    "export/defaultFormat": EXPORT_FORMATS,
}


class ConfigManager(QObject):
    """Centralized application settings, INI-backed."""

    settings_changed = Signal(str)  # key

    def __init__(self, settings_path: str | None = None, parent=None):
        super().__init__(parent)
        if settings_path:
            self._settings = QSettings(settings_path, QSettings.IniFormat)
        else:
            self._settings = QSettings(
                QSettings.IniFormat, QSettings.UserScope, ORGANIZATION, APPLICATION,
            )

    def _value(self, key: str, fallback):
        env_name = ENV_OVERRIDES.get(key)
        if env_name and os.environ.get(env_name):
            return os.environ[env_name]
        return self._settings.value(key, DEFAULTS.get(key, fallback))

    def get_string(self, key: str) -> str:
        val = str(self._value(key, ""))
        choices = _CHOICES.get(key)
        if choices and val not in choices:
            logger.warning("Ignoring invalid value %r for %s", val, key)
            return str(DEFAULTS[key])
        return val

    def get_int(self, key: str) -> int:
        val = self._value(key, 0)
        try:
            return int(val)
        except (ValueError, TypeError):
            return DEFAULTS.get(key, 0)

    def get_bool(self, key: str) -> bool:
        val = self._value(key, False)
        if isinstance(val, bool):
            return val
        if isinstance(val, str):
            return val.lower() in ("true", "1", "yes")
        return bool(val)

    def set_string(self, key: str, value: str):
        choices = _CHOICES.get(key)
        if choices and value not in choices:
            raise ValueError(f"Invalid value {value!r} for {key}; expected one of {', '.join(choices)}")
        self._settings.setValue(key, value)
        self.settings_changed.emit(key)

    def set_int(self, key: str, value: int):
        self._settings.setValue(key, value)
        self.settings_changed.emit(key)

    def set_bool(self, key: str, value: bool):
        self._settings.setValue(key, value)
        self.settings_changed.emit(key)

    def sync(self):
        self._settings.sync()

    def clear_cache(self):
        """Clear the turn cache directory."""
        if CACHE_DIR.exists():
            shutil.rmtree(CACHE_DIR, ignore_errors=True)
            CACHE_DIR.mkdir(parents=True, exist_ok=True)
