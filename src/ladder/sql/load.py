from __future__ import annotations

from typing import Optional

import pandas as pd
import polars as pl
from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.sql import Select

from . import models as LM


def _read_sql(engine: Engine, stmt: Select) -> pl.DataFrame:
    """Read a Core select into a Polars DataFrame via pandas."""
    with engine.connect() as conn:
        pdf = pd.read_sql_query(stmt, conn)
    return pl.from_pandas(pdf) if not pdf.empty else pl.DataFrame([])


def load_players_df(engine: Engine) -> pl.DataFrame:
    """Load the current player rows.

    Columns: puuid, game_name, tag_line, tier, division, league_points,
    wins, losses, updated_at_ms.
    """
    t = LM.Player.__table__
    stmt = select(
        t.c.puuid,
        t.c.game_name,
        t.c.tag_line,
        t.c.tier,
        t.c.division,
        t.c.league_points,
        t.c.wins,
        t.c.losses,
        t.c.updated_at_ms,
    )
    return _read_sql(engine, stmt)


def load_history_df(
    engine: Engine,
    *,
    since_ms: Optional[int] = None,
    until_ms: Optional[int] = None,
) -> pl.DataFrame:
    """Load rank history rows, oldest first.

    Columns: puuid, score, recorded_at_ms.
    """
    t = LM.RankHistory.__table__
    stmt = select(t.c.puuid, t.c.score, t.c.recorded_at_ms, t.c.history_id)
    if since_ms is not None:
        stmt = stmt.where(t.c.recorded_at_ms >= since_ms)
    if until_ms is not None:
        stmt = stmt.where(t.c.recorded_at_ms <= until_ms)
    stmt = stmt.order_by(t.c.recorded_at_ms, t.c.history_id)
    return _read_sql(engine, stmt)


def load_player_matches_df(
    engine: Engine, *, since_ms: Optional[int] = None
) -> pl.DataFrame:
    """Load participation rows.

    Columns: puuid, match_id, win, played_at_ms.
    """
    t = LM.PlayerMatch.__table__
    stmt = select(t.c.puuid, t.c.match_id, t.c.win, t.c.played_at_ms)
    if since_ms is not None:
        stmt = stmt.where(t.c.played_at_ms >= since_ms)
    return _read_sql(engine, stmt)
