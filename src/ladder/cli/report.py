"""
Read-only reports over the persisted ladder.

Usage:
    ladder_report weekly --days 7
    ladder_report standings --json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

import polars as pl

from ladder.core.constants import DEFAULT_WEEKLY_DAYS
from ladder.core.exceptions import ConfigError
from ladder.core.logging import setup_logging
from ladder.reports import standings_delta, weekly_summary
from ladder.sql import create_engine

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Ladder reports")
    parser.add_argument("kind", choices=["weekly", "standings"], help="Report to run")
    parser.add_argument(
        "--days",
        type=int,
        default=DEFAULT_WEEKLY_DAYS,
        help=f"Window for the weekly report (default: {DEFAULT_WEEKLY_DAYS})",
    )
    parser.add_argument(
        "--db-url",
        type=str,
        default=None,
        help="Database URL (overrides LADDER_DATABASE_URL / DATABASE_URL)",
    )
    parser.add_argument("--json", action="store_true", help="Print rows as JSON")
    args = parser.parse_args(argv)

    setup_logging(
        level=logging.WARNING,
        format_style="simple",
        stream=sys.stderr if args.json else None,
    )

    try:
        engine = create_engine(args.db_url)
    except ConfigError as e:
        logger.error(str(e))
        return 2

    if args.kind == "weekly":
        df = weekly_summary(engine, days=args.days)
    else:
        df = standings_delta(engine)

    if args.json:
        print(json.dumps(df.to_dicts(), indent=2))
    else:
        with pl.Config(tbl_rows=-1):
            print(df)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
