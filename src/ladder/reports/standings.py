"""Leaderboard position change against a recent reference window."""

from __future__ import annotations

import logging
from typing import Optional

import polars as pl
from sqlalchemy.engine import Engine

from ladder.core.constants import DEFAULT_STANDINGS_WINDOW_MINUTES, MS_PER_MINUTE
from ladder.core.time import now_ms as _now_ms
from ladder.sql.load import load_history_df, load_players_df

from ._frames import PLAYER_COLUMNS, has_rows, with_scores

logger = logging.getLogger(__name__)

STANDINGS_SCHEMA = {
    "puuid": pl.Utf8,
    "game_name": pl.Utf8,
    "tag_line": pl.Utf8,
    "position": pl.Int64,
    "previous_position": pl.Int64,
    "delta": pl.Int64,
}


def _with_positions(df: pl.DataFrame, name: str) -> pl.DataFrame:
    return df.with_columns(
        pl.Series(name, list(range(1, df.height + 1)), dtype=pl.Int64)
    )


def standings_delta(
    engine: Engine,
    now_ms: Optional[int] = None,
    window_minutes: tuple[int, int] = DEFAULT_STANDINGS_WINDOW_MINUTES,
) -> pl.DataFrame:
    """Current positions versus positions inside a trailing history window.

    The reference position of each player comes from their latest history
    row recorded between ``window_minutes[0]`` and ``window_minutes[1]``
    minutes ago. ``delta = previous_position - position``, so a positive
    delta means the player moved up. With no history in the window every
    delta is 0; players absent from the window get a null delta.
    """
    now_ms = _now_ms() if now_ms is None else int(now_ms)
    oldest, newest = sorted(window_minutes, reverse=True)
    since_ms = now_ms - int(oldest) * MS_PER_MINUTE
    until_ms = now_ms - int(newest) * MS_PER_MINUTE

    players = load_players_df(engine)
    if not has_rows(players):
        return pl.DataFrame(schema=STANDINGS_SCHEMA)

    current = (
        with_scores(players)
        .with_columns(pl.col("game_name").str.to_lowercase().alias("_name"))
        .sort(["score", "_name"], descending=[True, False])
        .select(list(PLAYER_COLUMNS))
    )
    current = _with_positions(current, "position")

    history = load_history_df(engine, since_ms=since_ms, until_ms=until_ms)
    if not has_rows(history):
        logger.info("No history in the standings window; reporting zero deltas")
        return current.with_columns(
            pl.lit(None, dtype=pl.Int64).alias("previous_position"),
            pl.lit(0, dtype=pl.Int64).alias("delta"),
        ).select(list(STANDINGS_SCHEMA))

    previous = (
        history.sort(["recorded_at_ms", "history_id"], descending=[True, True])
        .group_by("puuid", maintain_order=True)
        .agg(pl.col("score").first().alias("previous_score"))
        .sort("previous_score", descending=True, maintain_order=True)
        .select("puuid")
    )
    previous = _with_positions(previous, "previous_position")

    out = current.join(previous, on="puuid", how="left").with_columns(
        (pl.col("previous_position") - pl.col("position")).cast(pl.Int64).alias("delta")
    )
    return out.select(list(STANDINGS_SCHEMA))
