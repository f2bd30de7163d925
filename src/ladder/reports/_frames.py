from __future__ import annotations

import polars as pl

from ladder.core.scoring import score

PLAYER_COLUMNS = ("puuid", "game_name", "tag_line")


def with_scores(players: pl.DataFrame) -> pl.DataFrame:
    """Append a ``score`` column computed from tier/division/points."""
    scores = [
        score(r["tier"], r["division"], r["league_points"])
        for r in players.iter_rows(named=True)
    ]
    return players.with_columns(pl.Series("score", scores, dtype=pl.Int64))


def has_rows(df: pl.DataFrame) -> bool:
    # Empty reads come back without any columns
    return df.height > 0 and "puuid" in df.columns
