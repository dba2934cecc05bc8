"""Pipeline orchestration for dungeon generation and scoped regeneration.

``generate_base_map`` runs the layout pass followed by every content pass,
each on its own derived random stream (``seed:pass:configHash``), so the same
seed and config always reproduce the same map and regenerating one category
never shifts another. ``regenerate`` rebuilds the whole map or one category
and records a pass-history entry.
"""
from __future__ import annotations
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple
import time

from mapsmith.logging_utils import get_logger
from mapsmith.settings import get_settings

from .config import GeneratorConfig, build_config_hash
from .doors import door_identity, generate_doors
from .features import generate_dressing, generate_encounters, generate_traps, generate_treasure
from .generator import LayoutGenerator
from .models import (
    ALGORITHM_VERSION,
    SCOPES,
    DungeonMap,
    MapMetadata,
    PassHistoryEntry,
)
from .rng import SeededRandom

log = get_logger("mapsmith.dungeon.pipeline")


class BuildResult(NamedTuple):
    map: DungeonMap
    metrics: Dict


def get_generator_version() -> str:
    return ALGORITHM_VERSION


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _base36(n: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    out = ""
    while True:
        n, r = divmod(n, 36)
        out = digits[r] + out
        if n == 0:
            return out


def build_default_seed() -> str:
    return f"dungeon-{_base36(int(time.time() * 1000))}"


def create_pass_history_entry(
    pass_name: str,
    scope: str,
    seed: str,
    config_hash: str,
    changed_counts: Dict[str, int],
    started_at: Optional[str] = None,
    finished_at: Optional[str] = None,
) -> PassHistoryEntry:
    return PassHistoryEntry(
        pass_name=pass_name,
        scope=scope,
        started_at=started_at or utc_now_iso(),
        finished_at=finished_at or utc_now_iso(),
        seed=seed,
        config_hash=config_hash,
        changed_counts=dict(changed_counts),
    )


def with_history_entry(dungeon_map: DungeonMap, entry: PassHistoryEntry, limit: Optional[int] = None) -> DungeonMap:
    """Append ``entry`` keeping only the most recent ``limit`` entries."""
    if limit is None:
        limit = get_settings().history_limit
    if limit < 1:
        raise ValueError(f"History limit must be at least 1 (got {limit})")
    history = (tuple(dungeon_map.metadata.pass_history) + (entry,))[-limit:]
    return dungeon_map.evolve(metadata=replace(dungeon_map.metadata, pass_history=history))


def _pass_rng(seed: str, pass_name: str, config_hash: str) -> SeededRandom:
    return SeededRandom.for_pass(seed, pass_name, config_hash)


def _assemble(seed: str, config: GeneratorConfig, history: Sequence[PassHistoryEntry] = ()) -> BuildResult:
    """Run every pass and assemble a map; no history entry is added here.

    Per-phase timings land in ``metrics['phase_ms']`` when generation metrics
    are enabled (MAPSMITH_GENERATION_METRICS).
    """
    timed = get_settings().generation_metrics
    config_hash = build_config_hash(seed, config)
    phase_times: Dict[str, int] = {}
    if timed:
        start = time.perf_counter()

        def _phase(label, fn, *a):
            ps = time.perf_counter(); r = fn(*a); pe = time.perf_counter()
            phase_times[label] = int((pe - ps) * 1000)
            return r
    else:
        def _phase(label, fn, *a):
            return fn(*a)

    layout = _phase('layout', LayoutGenerator(config, _pass_rng(seed, 'layout', config_hash)).run)
    doors = _phase('doors', generate_doors, layout.corridors, config.doors, _pass_rng(seed, 'doors', config_hash))
    traps = _phase('traps', generate_traps, layout.rooms, config.content.trap_density,
                   _pass_rng(seed, 'traps', config_hash))
    encounters = _phase('encounters', generate_encounters, layout.rooms, config.content.encounter_density,
                        config.theme, _pass_rng(seed, 'encounters', config_hash))
    treasures = _phase('treasure', generate_treasure, layout.rooms, config.content.treasure_density,
                       _pass_rng(seed, 'treasure', config_hash))
    dressing = _phase('dressing', generate_dressing, layout.rooms, config.content.dressing_density,
                      config.theme, _pass_rng(seed, 'dressing', config_hash))

    metrics = layout.metrics
    if timed:
        metrics['phase_ms'] = phase_times
        metrics['runtime_ms'] = int((time.perf_counter() - start) * 1000)

    dungeon_map = DungeonMap(
        grid_type=config.grid_type,
        width=config.width,
        height=config.height,
        cell_size=config.cell_size,
        rooms=tuple(layout.rooms),
        corridors=tuple(layout.corridors),
        doors=tuple(doors),
        traps=tuple(traps),
        encounters=tuple(encounters),
        treasures=tuple(treasures),
        dressing=tuple(dressing),
        metadata=MapMetadata(
            algorithm_version=ALGORITHM_VERSION,
            config_hash=config_hash,
            generated_at=utc_now_iso(),
            seed=seed,
            pass_history=tuple(history),
        ),
    )
    return BuildResult(dungeon_map, metrics)


def generate_with_metrics(seed: str, config: GeneratorConfig) -> BuildResult:
    """Like ``generate_base_map`` but also returns the layout/pass metrics."""
    started_at = utc_now_iso()
    dungeon_map, metrics = _assemble(seed, config)
    counts = dungeon_map.counts()
    log.info(
        event="dungeon_generated",
        seed=seed,
        config_hash=dungeon_map.metadata.config_hash,
        runtime_ms=metrics.get('runtime_ms'),
        corridor_fallbacks=metrics['corridor_fallbacks'],
        **counts,
    )
    entry = create_pass_history_entry(
        'LAYOUT', 'FULL', seed, dungeon_map.metadata.config_hash, counts,
        started_at=started_at, finished_at=dungeon_map.metadata.generated_at,
    )
    return BuildResult(with_history_entry(dungeon_map, entry), metrics)


def generate_base_map(seed: str, config: GeneratorConfig) -> DungeonMap:
    return generate_with_metrics(seed, config).map


def _keep_previous(prev, fresh):
    return prev


def preserve_by_key(
    next_items: Sequence,
    previous: Sequence,
    key: Callable,
    preserve_locks: bool,
    merge: Callable = _keep_previous,
) -> Tuple[List, int]:
    """Swap in the previous item wherever a locked one shares the fresh item's identity.

    ``merge(prev, fresh)`` builds the preserved item; by default the previous
    item is kept verbatim.
    """
    if not preserve_locks:
        return list(next_items), 0
    prev_by_key = {key(item): item for item in previous}
    out = []
    kept = 0
    for item in next_items:
        prev = prev_by_key.get(key(item))
        if prev is not None and prev.is_locked:
            out.append(merge(prev, item))
            kept += 1
        else:
            out.append(item)
    return out, kept


def _door_flags_under_fresh_id(prev, fresh):
    # Door ids are renumbered per pass; an old id could collide with another fresh door.
    return replace(prev, id=fresh.id)


def _by_id(item):
    return item.id


def _regenerate_doors(seed, config, existing, config_hash, preserve_locks):
    fresh = generate_doors(existing.corridors, config.doors, _pass_rng(seed, 'doors', config_hash))
    items, kept = preserve_by_key(fresh, existing.doors, door_identity, preserve_locks,
                                  merge=_door_flags_under_fresh_id)
    return 'doors', 'doors', items, kept


def _regenerate_traps(seed, config, existing, config_hash, preserve_locks):
    fresh = generate_traps(existing.rooms, config.content.trap_density, _pass_rng(seed, 'traps', config_hash))
    items, kept = preserve_by_key(fresh, existing.traps, _by_id, preserve_locks)
    return 'traps', 'traps', items, kept


def _regenerate_encounters(seed, config, existing, config_hash, preserve_locks):
    fresh = generate_encounters(existing.rooms, config.content.encounter_density, config.theme,
                                _pass_rng(seed, 'encounters', config_hash))
    items, kept = preserve_by_key(fresh, existing.encounters, _by_id, preserve_locks)
    return 'encounters', 'encounters', items, kept


def _regenerate_treasure(seed, config, existing, config_hash, preserve_locks):
    fresh = generate_treasure(existing.rooms, config.content.treasure_density,
                              _pass_rng(seed, 'treasure', config_hash))
    items, kept = preserve_by_key(fresh, existing.treasures, _by_id, preserve_locks)
    return 'treasures', 'treasure', items, kept


_SCOPED_PASSES = {
    'DOORS': _regenerate_doors,
    'TRAPS': _regenerate_traps,
    'ENCOUNTERS': _regenerate_encounters,
    'TREASURE': _regenerate_treasure,
}


def regenerate(
    scope: str,
    seed: str,
    config: GeneratorConfig,
    existing_map: DungeonMap,
    preserve_locks: bool = True,
) -> DungeonMap:
    """Rebuild the whole map (FULL/LAYOUT) or one content category in place.

    Scoped passes work from the existing rooms and corridors and leave every
    other collection untouched. With ``preserve_locks`` a previously locked item
    survives verbatim when the fresh pass produces an item with the same
    identity. Exactly one pass-history entry is appended either way.

    FULL/LAYOUT keeps the existing pass history and appends to it; it does not
    start a fresh history the way ``generate_base_map`` does.
    """
    if scope not in SCOPES:
        raise ValueError(f"Unknown regeneration scope: {scope!r}")
    config_hash = build_config_hash(seed, config)
    started_at = utc_now_iso()

    if scope in ('FULL', 'LAYOUT'):
        rebuilt, _metrics = _assemble(seed, config, existing_map.metadata.pass_history)
        counts = rebuilt.counts()
        entry = create_pass_history_entry('LAYOUT', scope, seed, config_hash, counts, started_at=started_at)
        log.info(event="dungeon_regenerated", scope=scope, seed=seed, config_hash=config_hash, **counts)
        return with_history_entry(rebuilt, entry)

    field_name, count_key, items, kept = _SCOPED_PASSES[scope](
        seed, config, existing_map, config_hash, preserve_locks
    )
    updated = existing_map.evolve(
        **{field_name: items},
        metadata=replace(
            existing_map.metadata,
            algorithm_version=ALGORITHM_VERSION,
            config_hash=config_hash,
            generated_at=utc_now_iso(),
            seed=seed,
        ),
    )
    entry = create_pass_history_entry(scope, scope, seed, config_hash, {count_key: len(items)}, started_at=started_at)
    log.info(event="dungeon_regenerated", scope=scope, seed=seed, config_hash=config_hash,
             items=len(items), preserved=kept)
    return with_history_entry(updated, entry)
