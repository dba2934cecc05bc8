"""Mapsmith CLI entry point.

Provides subcommands for generating dungeon maps, regenerating a single
content category, applying editor patches, deriving the player-safe view and
checking referential integrity. Maps are read and written as camelCase JSON
documents. Configuration comes from flags and environment variables, with
optional .env loading.

Run `python run.py --help` for details.
"""

import argparse
import json
import os
import sys
from textwrap import dedent

from colorama import Fore, Style
from colorama import init as _color_init
from dotenv import load_dotenv

_color_init()
# Banner goes to stderr; disable colors when it is not a real terminal (e.g. under pytest capture)
_COLOR_ENABLED = sys.stderr.isatty()

ROOT = os.path.dirname(os.path.abspath(__file__))


def _load_version() -> str:
    try:
        with open(os.path.join(ROOT, "VERSION"), "r", encoding="utf-8") as f:
            return f.read().strip()
    except OSError:
        return "0.1.0"


__version__ = _load_version()


def parse_args(argv: list[str]) -> argparse.Namespace:
    description = """
    Mapsmith dungeon generator

    Generate seeded dungeon maps, regenerate one content category while keeping
    locked items, apply editor patches and derive the player-safe view. Maps are
    exchanged as JSON documents on files or stdout.
    """

    epilog = dedent(
        """
        Environment variables:
          MAPSMITH_LOG_LEVEL            debug | info | warn | error (default: info)
          MAPSMITH_LOG_JSON             Emit JSON log lines when set to 1
          MAPSMITH_GENERATION_METRICS   Per-phase timings in metrics (default: 1)
          MAPSMITH_MAX_PATCH_ACTIONS    Largest accepted patch (default: 100)
          MAPSMITH_HISTORY_LIMIT        Pass history entries kept (default: 60)

        Examples:
          # Generate a 60x60 crypt with a fixed seed
          python run.py generate --seed seed-deterministic --width 60 --height 60 --theme crypt --out map.json

          # Reroll traps, keeping locked ones
          python run.py regenerate --map map.json --scope TRAPS --out map.json

          # Apply an editor patch and print per-action outcomes
          python run.py patch --map map.json --actions actions.json --report

          # Player-facing view without secret rooms or doors
          python run.py player-view --map map.json

          # Load variables from .env then check a map
          python run.py --env-file .env check --map map.json
        """
    )

    parser = argparse.ArgumentParser(
        prog="Mapsmith",
        description=dedent(description),
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )

    parser.add_argument(
        "--env-file",
        dest="env_file",
        help="Path to a .env file to load before processing flags",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        choices=["debug", "info", "warn", "error"],
        default=None,
        help="Override MAPSMITH_LOG_LEVEL for this run",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress the startup banner",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"Mapsmith {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    # generate subcommand
    gen_parser = subparsers.add_parser(
        "generate",
        help="Generate a new dungeon map",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Run the full generation pipeline for a seed and config.",
    )
    gen_parser.add_argument("--seed", default=None, help="Seed string (default: dungeon-<base36 ms>)")
    gen_parser.add_argument("--config", dest="config_path", default=None, help="Generator config JSON file")
    gen_parser.add_argument("--width", type=int, default=None, help="Override config width")
    gen_parser.add_argument("--height", type=int, default=None, help="Override config height")
    gen_parser.add_argument("--theme", default=None, help="Override config theme")
    gen_parser.add_argument("--metrics", action="store_true", help="Print generation metrics to stderr")
    gen_parser.add_argument("--out", default=None, help="Output file (default: stdout)")
    gen_parser.set_defaults(command="generate")

    # regenerate subcommand
    regen_parser = subparsers.add_parser(
        "regenerate",
        help="Regenerate a map or one content category",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Regenerate FULL/LAYOUT or a single category (DOORS, TRAPS, ENCOUNTERS, TREASURE).",
    )
    regen_parser.add_argument("--map", dest="map_path", required=True, help="Existing map JSON file")
    regen_parser.add_argument(
        "--scope",
        required=True,
        choices=["FULL", "LAYOUT", "DOORS", "TRAPS", "ENCOUNTERS", "TREASURE"],
        help="What to regenerate",
    )
    regen_parser.add_argument("--seed", default=None, help="Seed string (default: the map's seed)")
    regen_parser.add_argument("--config", dest="config_path", default=None, help="Generator config JSON file")
    regen_parser.add_argument(
        "--no-preserve-locks",
        dest="preserve_locks",
        action="store_false",
        help="Replace locked items too (default keeps them)",
    )
    regen_parser.add_argument("--out", default=None, help="Output file (default: stdout)")
    regen_parser.set_defaults(command="regenerate")

    # patch subcommand
    patch_parser = subparsers.add_parser(
        "patch",
        help="Apply editor actions to a map",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Apply a JSON list of actions (or {\"actions\": [...]}) to a map.",
    )
    patch_parser.add_argument("--map", dest="map_path", required=True, help="Map JSON file")
    patch_parser.add_argument("--actions", dest="actions_path", required=True, help="Actions JSON file")
    patch_parser.add_argument("--report", action="store_true", help="Print per-action outcomes to stderr")
    patch_parser.add_argument("--out", default=None, help="Output file (default: stdout)")
    patch_parser.set_defaults(command="patch")

    # player-view subcommand
    pv_parser = subparsers.add_parser(
        "player-view",
        help="Derive the player-safe map",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    pv_parser.add_argument("--map", dest="map_path", required=True, help="Map JSON file")
    pv_parser.add_argument("--out", default=None, help="Output file (default: stdout)")
    pv_parser.set_defaults(command="player-view")

    # check subcommand
    check_parser = subparsers.add_parser(
        "check",
        help="Validate a map document and report integrity violations",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    check_parser.add_argument("--map", dest="map_path", required=True, help="Map JSON file")
    check_parser.set_defaults(command="check")

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help(sys.stderr)
        parser.exit(2)
    return args


def _read_json(path: str):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _write_json(doc, path: str | None) -> None:
    text = json.dumps(doc, indent=2)
    if path:
        with open(path, "w", encoding="utf-8") as f:
            f.write(text + "\n")
    else:
        print(text)


def _load_config(path: str | None, overrides: dict | None = None):
    from mapsmith.dungeon import parse_generator_config

    doc = _read_json(path) if path else {}
    for key, val in (overrides or {}).items():
        if val is not None:
            doc[key] = val
    return parse_generator_config(doc)


def _banner(mode: str, detail: dict) -> None:
    def label(text: str) -> str:
        return f"{Fore.YELLOW}{text}{Style.RESET_ALL}" if _COLOR_ENABLED else text

    def value(val) -> str:
        return f"{Fore.GREEN}{val}{Style.RESET_ALL}" if _COLOR_ENABLED else str(val)

    title = f"{Fore.CYAN}{Style.BRIGHT}Mapsmith {__version__}{Style.RESET_ALL}" if _COLOR_ENABLED else f"Mapsmith {__version__}"
    divider = (Fore.MAGENTA + "=" * 40 + Style.RESET_ALL) if _COLOR_ENABLED else "=" * 40
    lines = [divider, f"  {title}", divider, f"  {label('Mode:'):12} {value(mode.upper())}"]
    for key, val in detail.items():
        if val is not None:
            lines.append(f"  {label(key + ':'):12} {value(val)}")
    lines.append(divider)
    print("\n".join(lines), file=sys.stderr)


def _error(message: str) -> None:
    prefix = f"{Fore.RED}[ERROR]{Style.RESET_ALL}" if _COLOR_ENABLED else "[ERROR]"
    print(f"{prefix} {message}", file=sys.stderr)


def _cmd_generate(args) -> int:
    from mapsmith.dungeon import build_default_seed, generate_with_metrics

    config = _load_config(args.config_path, {"width": args.width, "height": args.height, "theme": args.theme})
    seed = args.seed or build_default_seed()
    if not args.quiet:
        _banner("generate", {"Seed": seed, "Size": f"{config.width}x{config.height}", "Theme": config.theme})
    dungeon_map, metrics = generate_with_metrics(seed, config)
    if args.metrics:
        print(json.dumps(metrics, indent=2), file=sys.stderr)
    _write_json(dungeon_map.to_dict(), args.out)
    return 0


def _cmd_regenerate(args) -> int:
    from mapsmith.dungeon import parse_dungeon_map, regenerate

    existing = parse_dungeon_map(_read_json(args.map_path))
    config = _load_config(args.config_path)
    seed = args.seed or existing.metadata.seed
    if not args.quiet:
        _banner("regenerate", {"Scope": args.scope, "Seed": seed, "Locks": "kept" if args.preserve_locks else "reset"})
    updated = regenerate(args.scope, seed, config, existing, preserve_locks=args.preserve_locks)
    _write_json(updated.to_dict(), args.out)
    return 0


def _cmd_patch(args) -> int:
    from mapsmith.dungeon import apply_patch_with_report, parse_dungeon_map

    dungeon_map = parse_dungeon_map(_read_json(args.map_path))
    actions = _read_json(args.actions_path)
    if isinstance(actions, dict):
        actions = actions.get("actions") or []
    if not args.quiet:
        _banner("patch", {"Actions": len(actions)})
    updated, outcomes = apply_patch_with_report(dungeon_map, actions)
    if args.report:
        print(json.dumps([o.to_dict() for o in outcomes], indent=2), file=sys.stderr)
    _write_json(updated.to_dict(), args.out)
    return 0


def _cmd_player_view(args) -> int:
    from mapsmith.dungeon import parse_dungeon_map, to_player_safe_map

    dungeon_map = parse_dungeon_map(_read_json(args.map_path))
    _write_json(to_player_safe_map(dungeon_map).to_dict(), args.out)
    return 0


def _cmd_check(args) -> int:
    from mapsmith.dungeon import integrity_violations, parse_dungeon_map

    dungeon_map = parse_dungeon_map(_read_json(args.map_path))
    problems = integrity_violations(dungeon_map)
    if problems:
        for p in problems:
            _error(p)
        return 1
    ok = f"{Fore.GREEN}[OK]{Style.RESET_ALL}" if _COLOR_ENABLED else "[OK]"
    print(f"{ok} {len(dungeon_map.rooms)} rooms, {len(dungeon_map.corridors)} corridors, no violations")
    return 0


COMMANDS = {
    "generate": _cmd_generate,
    "regenerate": _cmd_regenerate,
    "patch": _cmd_patch,
    "player-view": _cmd_player_view,
    "check": _cmd_check,
}


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    # Load .env before the package reads any settings
    if getattr(args, "env_file", None):
        load_dotenv(args.env_file)
    else:
        load_dotenv()

    from mapsmith import SettingsError
    from mapsmith.dungeon import ConfigError, PatchError, ValidationError
    from mapsmith.logging_utils import log, set_level

    if args.log_level:
        set_level(args.log_level)

    log.debug(event="cli_start", command=args.command)
    try:
        return COMMANDS[args.command](args)
    except (ConfigError, ValidationError, PatchError, SettingsError) as e:
        _error(str(e))
        log.error(event="cli_rejected", command=args.command, error=str(e))
        return 2
    except (OSError, json.JSONDecodeError) as e:
        _error(f"{type(e).__name__}: {e}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
