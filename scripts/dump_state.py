#!/usr/bin/env python3
"""Dump the persisted extension state.

Opens the storage file, loads it through the state store (so the output
shows exactly what the extension sees) and prints the snapshot.

Note that loading applies the legacy migration: a file written before
``stateVersion`` existed is reset to the default state. Use ``--raw`` to
inspect the stored rows without loading them.

Usage
-----
::

    python scripts/dump_state.py ~/.local/share/pywalfox/state.db
    PYWALSTATE_STORAGE_PATH=state.db python scripts/dump_state.py --initial-data

Options::

    --raw                Print stored rows as-is, skip loading/migration
    --initial-data       Print the data the extension UI receives on open
    --json               Output as machine-readable JSON
    --output FILE        Write JSON output to FILE instead of stdout
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pywalstate import SqliteStorage, StoreConfig, ThemeStateStore  # noqa: E402
from pywalstate.exceptions import PywalStateError  # noqa: E402

# ── helpers ──────────────────────────────────────────────────


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _format_field(key: str, value: Any, indent: int = 2) -> str:
    prefix = " " * indent
    if isinstance(value, list):
        if not value:
            return f"{prefix}{key}: []"
        lines = [f"{prefix}{key}:"]
        lines.extend(f"{prefix}    - {item}" for item in value)
        return "\n".join(lines)
    if isinstance(value, dict):
        return f"{prefix}{key}: <dict with {len(value)} keys>"
    return f"{prefix}{key}: {value}"


def _print_mapping(title: str, data: dict[str, Any], out: list[str]) -> None:
    out.append(_section(title))
    for key, value in data.items():
        out.append(_format_field(key, value))


async def collect(config: StoreConfig, *, raw: bool, initial_data: bool) -> dict[str, Any]:
    """Read the storage file and return what should be printed."""
    assert config.storage_path is not None  # noqa: S101
    async with SqliteStorage(config.storage_path) as storage:
        if raw:
            return await storage.dump()

        store = ThemeStateStore(storage, config)
        try:
            await store.load()
            await store.flush()
            if initial_data:
                return store.get_initial_data().model_dump(by_alias=True, mode="json")
            return store.snapshot()
        finally:
            store.close()


# ── main ─────────────────────────────────────────────────────


async def main() -> int:
    parser = argparse.ArgumentParser(description="Dump the persisted Pywalfox extension state.")
    parser.add_argument("path", nargs="?", help="Storage file (default: $PYWALSTATE_STORAGE_PATH)")
    parser.add_argument("--raw", action="store_true", help="Print stored rows without loading them")
    parser.add_argument("--initial-data", action="store_true", help="Print the UI initial data instead")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--output", "-o", help="Write JSON output to FILE instead of stdout")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides: dict[str, Any] = {}
    if args.path:
        overrides["storage_path"] = args.path

    try:
        config = StoreConfig.from_env(**overrides)
        if config.storage_path is None:
            parser.error("no storage file given (pass PATH or set PYWALSTATE_STORAGE_PATH)")
        result = await collect(config, raw=args.raw, initial_data=args.initial_data)
    except PywalStateError as err:
        print(f"error: {err}", file=sys.stderr)
        return 1

    payload = json.dumps(result, indent=2, default=str, ensure_ascii=False)
    if args.output:
        Path(args.output).write_text(payload, encoding="utf-8")
        print(f"JSON written to {args.output}", file=sys.stderr)
    elif args.json_mode:
        print(payload)
    else:
        out: list[str] = []
        title = "stored rows" if args.raw else "initial data" if args.initial_data else "state"
        _print_mapping(f"pywalstate {title} ({config.storage_path})", result, out)
        print("\n".join(out))
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
