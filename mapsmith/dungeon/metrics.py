from typing import Dict


def init_metrics() -> Dict[str, int | float | dict]:
    return {
        'rooms_target': 0,
        'rooms_placed': 0,
        'placement_attempts': 0,
        'fallback_rooms_used': 0,
        'spanning_edges': 0,
        'extra_edges': 0,
        'corridors_routed': 0,
        'corridor_fallbacks': 0,
        'bfs_expansions': 0,
        'runtime_ms': 0.0,
        'phase_ms': {},
    }
