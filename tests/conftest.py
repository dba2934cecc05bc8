import os
import sys
from itertools import count

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from mapsmith.dungeon import generate_base_map, parse_generator_config  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch):
    """Keep a developer's .env or shell exports from changing limits under test."""
    for name in (
        "MAPSMITH_GENERATION_METRICS",
        "MAPSMITH_MAX_PATCH_ACTIONS",
        "MAPSMITH_HISTORY_LIMIT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def crypt_config():
    return parse_generator_config({"width": 60, "height": 60, "theme": "crypt"})


@pytest.fixture()
def base_map(crypt_config):
    return generate_base_map("seed-deterministic", crypt_config)


@pytest.fixture()
def id_factory():
    """Deterministic ids: room-1, corridor-2, door-3, ..."""
    seq = count(1)

    def make(prefix):
        return f"{prefix}-{next(seq)}"

    return make
