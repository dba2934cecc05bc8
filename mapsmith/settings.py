"""Runtime settings sourced from environment variables.

Values can be supplied through a local ``.env`` file (loaded by the package
import and by ``run.py --env-file``) or exported in the shell. Settings are
read on demand so tests can monkeypatch the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass


class SettingsError(ValueError):
    pass


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() not in {"0", "false", "no", "off", ""}


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise SettingsError(f"{name} must be an integer (got {raw!r})") from None
    if value < minimum:
        raise SettingsError(f"{name} must be at least {minimum} (got {value})")
    return value


@dataclass(frozen=True)
class Settings:
    generation_metrics: bool = True
    max_patch_actions: int = 100
    history_limit: int = 60

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            generation_metrics=_env_flag("MAPSMITH_GENERATION_METRICS", True),
            max_patch_actions=_env_int("MAPSMITH_MAX_PATCH_ACTIONS", 100),
            history_limit=_env_int("MAPSMITH_HISTORY_LIMIT", 60),
        )


def get_settings() -> Settings:
    return Settings.from_env()


__all__ = ["Settings", "SettingsError", "get_settings"]
