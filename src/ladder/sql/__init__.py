"""SQL utilities for the ladder package.

This package defines:
- Schema constant (configurable via env)
- SQLAlchemy models for the ladder schema
- Engine helpers
- ``SnapshotStore`` with the upsert and lookup operations the sync engine uses
- Loaders returning Polars DataFrames for reports

Environment variables:
- LADDER_DB_SCHEMA: default "ladder"
- LADDER_DATABASE_URL or DATABASE_URL: SQLAlchemy URL for the DB engine
"""

from __future__ import annotations

from ladder.sql import models
from ladder.sql.constants import SCHEMA
from ladder.sql.engine import (
    create_all,
    create_engine,
    ensure_schema,
    resolve_database_url,
    target_schema,
)
from ladder.sql.load import (
    load_history_df,
    load_player_matches_df,
    load_players_df,
)
from ladder.sql.store import SnapshotStore, player_score

__all__ = [
    # Config
    "SCHEMA",
    # Engine helpers
    "create_engine",
    "ensure_schema",
    "create_all",
    "resolve_database_url",
    "target_schema",
    # Store
    "SnapshotStore",
    "player_score",
    # Loaders
    "load_players_df",
    "load_history_df",
    "load_player_matches_df",
    # Models submodule
    "models",
]
