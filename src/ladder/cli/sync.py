"""
Run snapshot sync cycles for the configured roster.

Usage:
    ladder_sync --once
    ladder_sync --once --force --json
    ladder_sync --interval 30 --max-cycles 48
    ladder_sync --status

Requires RIOT_API_KEY (environment or .env) and a database URL
(LADDER_DATABASE_URL, DATABASE_URL or --db-url).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from ladder.core.constants import DEFAULT_FRESHNESS_MINUTES
from ladder.core.exceptions import ConfigError, SnapshotUnavailable
from ladder.core.logging import setup_logging
from ladder.core.scoring import score
from ladder.core.sentry import init_sentry
from ladder.core.time import ms_to_iso
from ladder.sync import BuildCoordinator, SnapshotReader, SyncEngine

from ._common import (
    add_db_argument,
    add_roster_argument,
    build_client,
    load_config,
    open_store,
)

logger = logging.getLogger(__name__)


def _print_table(payload: dict[str, Any]) -> None:
    flags = [k for k in ("cached", "stale", "concurrent") if payload.get(k)]
    print(
        f"Snapshot updated {ms_to_iso(payload.get('updatedAt'))}"
        + (f" ({', '.join(flags)})" if flags else "")
    )
    for i, p in enumerate(payload["players"], start=1):
        rank = p["rankData"][0] if p["rankData"] else None
        if rank:
            label = f"{rank['tier']} {rank['rank']} {rank['leaguePoints']} LP"
            label += f" [{score(rank['tier'], rank['rank'], rank['leaguePoints'])}]"
        else:
            label = "UNRANKED"
        live = " (in game)" if p.get("inGame") else ""
        err = " !" if p.get("error") else ""
        print(f"{i:>3}. {p['gameName']}#{p['tagLine']}: {label}{live}{err}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Snapshot sync for the solo queue ladder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument(
        "--once", action="store_true", help="Run a single trigger and exit"
    )
    mode_group.add_argument(
        "--status",
        action="store_true",
        help="Show persisted snapshot status and exit (no upstream calls)",
    )

    parser.add_argument(
        "--force",
        action="store_true",
        help="Ignore the freshness window with --once",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=DEFAULT_FRESHNESS_MINUTES,
        help=f"Minutes between cycles (default: {DEFAULT_FRESHNESS_MINUTES:g})",
    )
    parser.add_argument(
        "--max-cycles",
        type=int,
        help="Maximum number of cycles to run (default: unlimited)",
    )
    add_roster_argument(parser)
    add_db_argument(parser)
    parser.add_argument("--log-file", type=str, default=None, help="Also log to file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--json", action="store_true", help="Print the snapshot as JSON"
    )

    args = parser.parse_args(argv)

    setup_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_file=args.log_file,
        stream=sys.stderr if args.json else None,
    )
    init_sentry(context="ladder_sync")

    try:
        config = load_config(args.roster)
        _, store = open_store(args.db_url)
        reader = SnapshotReader(
            store,
            config.roster,
            recent_match_limit=config.recent_match_limit,
            queue_type=config.queue_type,
        )

        if args.status:
            latest = store.latest_update_ms()
            status = {
                "players": len(store.tracked_puuids()),
                "roster_size": len(config.roster),
                "updated_at_ms": latest,
                "updated_at": ms_to_iso(latest),
                "freshness_minutes": config.freshness_minutes,
            }
            print(json.dumps(status, indent=2))
            return 0

        engine = SyncEngine(build_client(config), store, config)
        coordinator = BuildCoordinator(engine, reader)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 2

    if args.once:
        try:
            response = coordinator.trigger(force=args.force)
        except SnapshotUnavailable as e:
            logger.error(str(e))
            return 1
        payload = response.to_dict()
        if args.json:
            print(json.dumps(payload, indent=2))
        else:
            _print_table(payload)
        return 0

    coordinator.run_continuous(
        interval_minutes=args.interval, max_cycles=args.max_cycles
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
