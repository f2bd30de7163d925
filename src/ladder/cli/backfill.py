"""
Backfill recent queue matches for every roster entry.

Fetches only match details missing from the cache and repairs participation
rows missing for matches that are already cached. Idempotent.

Usage:
    ladder_backfill --roster roster.json --count 25
"""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict

from ladder.core.constants import DEFAULT_BACKFILL_COUNT
from ladder.core.exceptions import ConfigError
from ladder.core.logging import setup_logging
from ladder.core.sentry import init_sentry
from ladder.sync import backfill_matches

from ._common import (
    add_db_argument,
    add_roster_argument,
    build_client,
    load_config,
    open_store,
)

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Backfill recent matches for the roster"
    )
    add_roster_argument(parser)
    add_db_argument(parser)
    parser.add_argument(
        "--count",
        type=int,
        default=DEFAULT_BACKFILL_COUNT,
        help=f"Matches to list per player (default: {DEFAULT_BACKFILL_COUNT})",
    )
    parser.add_argument(
        "--no-progress", action="store_true", help="Disable the progress bar"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)
    init_sentry(context="ladder_backfill")

    try:
        config = load_config(args.roster)
        _, store = open_store(args.db_url)
        client = build_client(config)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 2

    log = backfill_matches(
        client,
        store,
        config.roster,
        count=args.count,
        progress=not args.no_progress,
    )
    print(json.dumps([asdict(entry) for entry in log], indent=2))
    return 1 if any(entry.error for entry in log) else 0


if __name__ == "__main__":
    raise SystemExit(main())
