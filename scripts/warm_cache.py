#!/usr/bin/env python3
"""Warm the pygw2 cache and print what was fetched.

Fetches the event list, the map index, the requested maps and continent
floors, writing everything to the persisted cache so later runs are
served locally for the next 24 hours.

Usage
-----
::

    export GW2_STORAGE_DIR="$HOME/.cache/pygw2"
    python scripts/warm_cache.py --floor 1 --floor 2 --map 15

Options::

    --floor N           Continent 1 floor to cache (repeatable)
    --map N             Map id to cache (repeatable)
    --skip-events       Skip the events list
    --skip-index        Skip the map index
    --json              Output as machine-readable JSON
    --verbose           Debug logging
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

from pygw2 import Gw2Client, Gw2Config, Gw2Error  # noqa: E402


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Warm the pygw2 persistent cache")
    parser.add_argument("--floor", type=int, action="append", default=[], help="Continent 1 floor id")
    parser.add_argument("--map", type=int, action="append", default=[], dest="maps", help="Map id")
    parser.add_argument("--skip-events", action="store_true")
    parser.add_argument("--skip-index", action="store_true")
    parser.add_argument("--json", action="store_true", dest="as_json")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args()


async def _run(args: argparse.Namespace) -> int:
    config = Gw2Config.from_env()
    summary: dict[str, Any] = {"storage_dir": config.storage_dir}

    async with Gw2Client(config) as client:
        try:
            if not args.skip_events:
                events = await client.get_events()
                summary["events"] = len(events)
            if not args.skip_index:
                index = await client.get_maps()
                summary["maps_index"] = len(index.get("maps", {}))
            summary["maps"] = {}
            for map_id in args.maps:
                doc = await client.get_map(map_id)
                summary["maps"][map_id] = doc.get("name")
            if args.floor:
                floors = await client.get_continent_floors(args.floor)
                summary["floors"] = {
                    floor_id: len(floor.get("regions", {})) for floor_id, floor in zip(args.floor, floors)
                }
        except Gw2Error as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1

    if args.as_json:
        print(json.dumps(summary, indent=2, default=str))
    else:
        for key, value in summary.items():
            print(f"{key}: {value}")
    return 0


def main() -> int:
    args = _parse_args()
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
