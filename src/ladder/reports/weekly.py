"""Weekly progress per player: score gained and games played in the window."""

from __future__ import annotations

import logging
from typing import Optional

import polars as pl
from sqlalchemy.engine import Engine

from ladder.core.constants import DEFAULT_WEEKLY_DAYS, MS_PER_DAY
from ladder.core.time import now_ms as _now_ms
from ladder.sql.load import load_history_df, load_player_matches_df, load_players_df

from ._frames import PLAYER_COLUMNS, has_rows, with_scores

logger = logging.getLogger(__name__)

WEEKLY_SCHEMA = {
    "puuid": pl.Utf8,
    "game_name": pl.Utf8,
    "tag_line": pl.Utf8,
    "score": pl.Int64,
    "lp_gain": pl.Int64,
    "games_played": pl.Int64,
    "week_wins": pl.Int64,
    "week_losses": pl.Int64,
    "week_wr": pl.Int64,
}


def weekly_summary(
    engine: Engine,
    now_ms: Optional[int] = None,
    days: int = DEFAULT_WEEKLY_DAYS,
) -> pl.DataFrame:
    """Per-player summary over the last ``days`` days.

    ``lp_gain`` is the current score minus the earliest history score
    recorded inside the window (0 when the player has no history there).
    Games, wins and losses are counted from participation rows played inside
    the window; ``week_wr`` is the rounded win percentage, null with no
    games.

    Returns:
        DataFrame sorted by ``lp_gain`` descending, then name.
    """
    now_ms = _now_ms() if now_ms is None else int(now_ms)
    since_ms = now_ms - int(days) * MS_PER_DAY

    players = load_players_df(engine)
    if not has_rows(players):
        return pl.DataFrame(schema=WEEKLY_SCHEMA)
    players = with_scores(players).select([*PLAYER_COLUMNS, "score"])

    history = load_history_df(engine, since_ms=since_ms, until_ms=now_ms)
    if has_rows(history):
        earliest = history.group_by("puuid", maintain_order=True).agg(
            pl.col("score").first().cast(pl.Int64).alias("start_score")
        )
    else:
        earliest = pl.DataFrame(schema={"puuid": pl.Utf8, "start_score": pl.Int64})

    matches = load_player_matches_df(engine, since_ms=since_ms)
    if has_rows(matches):
        games = (
            matches.filter(pl.col("played_at_ms") <= now_ms)
            .group_by("puuid")
            .agg(
                pl.col("match_id").count().cast(pl.Int64).alias("games_played"),
                pl.col("win").cast(pl.Int64).sum().alias("week_wins"),
            )
        )
    else:
        games = pl.DataFrame(
            schema={"puuid": pl.Utf8, "games_played": pl.Int64, "week_wins": pl.Int64}
        )

    out = (
        players.join(earliest, on="puuid", how="left")
        .join(games, on="puuid", how="left")
        .with_columns(
            (pl.col("score") - pl.col("start_score").fill_null(pl.col("score")))
            .cast(pl.Int64)
            .alias("lp_gain"),
            pl.col("games_played").fill_null(0).cast(pl.Int64),
            pl.col("week_wins").fill_null(0).cast(pl.Int64),
        )
        .with_columns(
            (pl.col("games_played") - pl.col("week_wins")).alias("week_losses"),
        )
    )

    # Round half up: floor(wins * 100 / games + 0.5)
    safe_games = pl.when(pl.col("games_played") > 0).then(pl.col("games_played")).otherwise(1)
    out = out.with_columns(
        pl.when(pl.col("games_played") > 0)
        .then((pl.col("week_wins") * 200 + safe_games) // (safe_games * 2))
        .otherwise(None)
        .cast(pl.Int64)
        .alias("week_wr")
    )

    out = out.with_columns(pl.col("game_name").str.to_lowercase().alias("_name"))
    out = out.sort(["lp_gain", "_name"], descending=[True, False]).drop("_name")
    logger.debug(f"Weekly summary for {out.height} players since {since_ms}")
    return out.select(list(WEEKLY_SCHEMA))
