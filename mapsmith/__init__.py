"""
project: Mapsmith
module: __init__.py
License: MIT

Procedural dungeon generation and map-patch engine for campaign tooling.

Importing the package loads a local ``.env`` (if present) so settings such as
``MAPSMITH_LOG_LEVEL`` or ``MAPSMITH_GENERATION_METRICS`` can be supplied
without exporting shell variables during development.
"""

from dotenv import load_dotenv

load_dotenv()

from .settings import Settings, SettingsError, get_settings  # noqa: E402

__all__ = ["Settings", "SettingsError", "get_settings"]
