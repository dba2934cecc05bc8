import time

import pytest

from mapsmith.dungeon import generate_base_map, integrity_violations, parse_generator_config

# Simple performance guardrails. Not a strict micro-benchmark; aims to catch large regressions.
# Adjust thresholds if CI hardware differs significantly.


@pytest.mark.performance
@pytest.mark.parametrize(
    "size,density,max_seconds",
    [
        (120, 0.35, 1.5),
        (220, 0.45, 5.0),
    ],
)
def test_large_map_generation_stays_fast(size, density, max_seconds):
    cfg = parse_generator_config({"width": size, "height": size, "layout": {"roomDensity": density}})
    start = time.perf_counter()
    dungeon_map = generate_base_map(f"perf-{size}", cfg)
    elapsed = time.perf_counter() - start
    assert len(dungeon_map.rooms) >= 8
    assert elapsed < max_seconds, f"{size}x{size} took {elapsed:.3f}s (> {max_seconds}s)"
    assert integrity_violations(dungeon_map) == []
