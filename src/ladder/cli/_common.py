"""Wiring shared by the CLI entry points."""

from __future__ import annotations

import argparse
import logging
import os
from typing import Optional

import requests
from sqlalchemy.engine import Engine

from ladder.core.config import SyncConfig, load_api_key, load_roster
from ladder.sql import SnapshotStore, create_all, create_engine
from ladder.upstream import RiotClient, UpstreamGateway

logger = logging.getLogger(__name__)

DEFAULT_ROSTER_PATH = "roster.json"


def add_db_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--db-url",
        type=str,
        default=None,
        help="Database URL (overrides LADDER_DATABASE_URL / DATABASE_URL)",
    )


def add_roster_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--roster",
        type=str,
        default=os.getenv("LADDER_ROSTER", DEFAULT_ROSTER_PATH),
        help=f"Roster JSON file (default: $LADDER_ROSTER or {DEFAULT_ROSTER_PATH})",
    )


def open_store(db_url: Optional[str]) -> tuple[Engine, SnapshotStore]:
    engine = create_engine(db_url)
    if engine.dialect.name == "sqlite":
        # Local runs: no separate init step
        create_all(engine)
    return engine, SnapshotStore(engine)


def load_config(roster_path: str) -> SyncConfig:
    return SyncConfig.from_env(load_roster(roster_path))


def build_client(
    config: SyncConfig, session: Optional[requests.Session] = None
) -> RiotClient:
    gateway = UpstreamGateway(
        load_api_key(),
        session=session,
        call_delay_seconds=config.call_delay_seconds,
        timeout=config.request_timeout,
        max_retries=config.max_retries,
        backoff_factor=config.backoff_factor,
    )
    return RiotClient(
        gateway,
        routing_url=config.routing_url,
        platform_url=config.platform_url,
        queue_type=config.queue_type,
        queue_id=config.queue_id,
    )
