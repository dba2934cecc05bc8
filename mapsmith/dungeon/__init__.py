"""Public dungeon package interface.

Generation, scoped regeneration, map patching and the player-safe view, plus
the document parsers used at the edges.
"""

from .actions import ACTION_TYPES, Action, action_from_dict  # noqa: F401
from .config import (  # noqa: F401
    ConfigError,
    ContentConfig,
    DoorConfig,
    GeneratorConfig,
    LayoutConfig,
    build_config_hash,
    parse_generator_config,
)
from .editor import ActionOutcome, PatchError, apply_patch, apply_patch_with_report  # noqa: F401
from .integrity import integrity_violations  # noqa: F401
from .models import ALGORITHM_VERSION, SCHEMA_VERSION, DungeonMap  # noqa: F401
from .pipeline import (  # noqa: F401
    build_default_seed,
    generate_base_map,
    generate_with_metrics,
    get_generator_version,
    regenerate,
)
from .player_view import to_player_safe_map  # noqa: F401
from .rng import SeededRandom  # noqa: F401
from .validation import ValidationError, parse_dungeon_map  # noqa: F401

__all__ = [
    "ACTION_TYPES",
    "Action",
    "action_from_dict",
    "ConfigError",
    "ContentConfig",
    "DoorConfig",
    "GeneratorConfig",
    "LayoutConfig",
    "build_config_hash",
    "parse_generator_config",
    "ActionOutcome",
    "PatchError",
    "apply_patch",
    "apply_patch_with_report",
    "integrity_violations",
    "ALGORITHM_VERSION",
    "SCHEMA_VERSION",
    "DungeonMap",
    "build_default_seed",
    "generate_base_map",
    "generate_with_metrics",
    "get_generator_version",
    "regenerate",
    "to_player_safe_map",
    "SeededRandom",
    "ValidationError",
    "parse_dungeon_map",
]
