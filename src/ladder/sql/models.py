from __future__ import annotations

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    Index,
    Integer,
    String,
)
from sqlalchemy.dialects.postgresql import JSONB

from .constants import SCHEMA
from .engine import Base

JSONType = JSON().with_variant(JSONB(), "postgresql")


class Player(Base):
    """A tracked identity; one row per roster entry once resolved."""

    __tablename__ = "players"
    __table_args__ = (
        CheckConstraint(
            "(tier IS NULL AND division IS NULL) OR (tier IS NOT NULL AND division IS NOT NULL)",
            name="ck_players_tier_division",
        ),
        CheckConstraint("league_points >= 0", name="ck_players_lp"),
        Index("ix_players_riot_id", "game_name", "tag_line"),
        {"schema": SCHEMA},
    )

    puuid = Column(String, primary_key=True)
    game_name = Column(String, nullable=False)
    tag_line = Column(String, nullable=False)
    profile_icon_id = Column(Integer, nullable=True)
    summoner_level = Column(Integer, nullable=True)
    tier = Column(String, nullable=True)
    division = Column(String, nullable=True)
    league_points = Column(Integer, nullable=False, default=0)
    wins = Column(Integer, nullable=False, default=0)
    losses = Column(Integer, nullable=False, default=0)
    in_game = Column(Boolean, nullable=False, default=False)
    updated_at_ms = Column(BigInteger, nullable=False)


class RankHistory(Base):
    """Change log of a player's score; a row exists only where the score moved."""

    __tablename__ = "rank_history"
    __table_args__ = (
        Index("ix_rank_history_puuid_recorded", "puuid", "recorded_at_ms"),
        Index("ix_rank_history_recorded", "recorded_at_ms"),
        {"schema": SCHEMA},
    )

    history_id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    puuid = Column(String, nullable=False)
    tier = Column(String, nullable=True)
    division = Column(String, nullable=True)
    league_points = Column(Integer, nullable=False, default=0)
    wins = Column(Integer, nullable=False, default=0)
    losses = Column(Integer, nullable=False, default=0)
    score = Column(Integer, nullable=False)
    recorded_at_ms = Column(BigInteger, nullable=False)


class Match(Base):
    """Cached match result keyed by the upstream match id.

    ``data`` maps participant puuid to ``{win, champ, k, d, a}``.
    """

    __tablename__ = "matches"
    __table_args__ = ({"schema": SCHEMA},)

    match_id = Column(String, primary_key=True)
    fetched_at_ms = Column(BigInteger, nullable=False)
    played_at_ms = Column(BigInteger, nullable=True)
    data = Column(JSONType, nullable=False)


class PlayerMatch(Base):
    """One tracked player's participation in one cached match."""

    __tablename__ = "player_matches"
    __table_args__ = (
        Index("ix_player_matches_puuid_played", "puuid", "played_at_ms"),
        Index("ix_player_matches_played", "played_at_ms"),
        {"schema": SCHEMA},
    )

    puuid = Column(String, primary_key=True)
    match_id = Column(String, primary_key=True)
    win = Column(Boolean, nullable=False)
    champ = Column(String, nullable=True)
    kills = Column(Integer, nullable=False, default=0)
    deaths = Column(Integer, nullable=False, default=0)
    assists = Column(Integer, nullable=False, default=0)
    played_at_ms = Column(BigInteger, nullable=False)


class Milestone(Base):
    """Append-only log of promotions, demotions and overtakes."""

    __tablename__ = "milestones"
    __table_args__ = (
        CheckConstraint(
            "kind IN ('promoted', 'demoted', 'surpassed')", name="ck_milestones_kind"
        ),
        Index("ix_milestones_detected", "detected_at_ms"),
        {"schema": SCHEMA},
    )

    milestone_id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    kind = Column(String, nullable=False)
    actor_puuid = Column(String, nullable=False)
    target_puuid = Column(String, nullable=True)
    from_tier = Column(String, nullable=True)
    to_tier = Column(String, nullable=True)
    actor_score = Column(Integer, nullable=True)
    target_score = Column(Integer, nullable=True)
    detected_at_ms = Column(BigInteger, nullable=False)


class PendingMatch(Base):
    """A listed match whose detail fetch failed; retried on later cycles."""

    __tablename__ = "pending_matches"
    __table_args__ = ({"schema": SCHEMA},)

    puuid = Column(String, primary_key=True)
    match_id = Column(String, primary_key=True)
    attempts = Column(Integer, nullable=False, default=1)
    first_failed_at_ms = Column(BigInteger, nullable=False)
