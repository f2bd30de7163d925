"""
Persistence operations used by the sync engine and the snapshot reader.

The engine needs only point lookups, upsert-by-key, timestamp range
queries, in-set membership filters and the pending-match queue; everything
here is one of those.
Upserts use the dialect's ``INSERT ... ON CONFLICT DO UPDATE`` so repeated
writes of the same key are idempotent.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine

from ladder.core.constants import DEFAULT_PENDING_MATCH_ATTEMPTS
from ladder.core.exceptions import ConfigError
from ladder.core.scoring import score

from . import models as LM

logger = logging.getLogger(__name__)


def _dialect_insert(engine: Engine):
    name = engine.dialect.name
    if name == "postgresql":
        return pg_insert
    if name == "sqlite":
        return sqlite_insert
    raise ConfigError(f"Unsupported database dialect for upserts: {name}")


def player_score(row: dict[str, Any]) -> int:
    """Score of a persisted player row."""
    return score(row.get("tier"), row.get("division"), row.get("league_points"))


class SnapshotStore:
    """Thin data-access layer over the ladder tables."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._insert = _dialect_insert(engine)

    # ------------------------------------------------------------------
    # Players
    # ------------------------------------------------------------------

    def get_player(self, puuid: str) -> Optional[dict[str, Any]]:
        table = LM.Player.__table__
        with self.engine.connect() as conn:
            row = (
                conn.execute(select(table).where(table.c.puuid == puuid))
                .mappings()
                .first()
            )
        return dict(row) if row else None

    def find_player(self, game_name: str, tag_line: str) -> Optional[dict[str, Any]]:
        """Look up a player by display name and tag, case-insensitively."""
        table = LM.Player.__table__
        stmt = select(table).where(
            func.lower(table.c.game_name) == game_name.lower(),
            func.lower(table.c.tag_line) == tag_line.lower(),
        )
        with self.engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()
        return dict(row) if row else None

    def load_players(self) -> list[dict[str, Any]]:
        table = LM.Player.__table__
        with self.engine.connect() as conn:
            rows = conn.execute(select(table)).mappings().all()
        return [dict(r) for r in rows]

    def load_scores(self) -> dict[str, int]:
        """Current score of every persisted player, keyed by puuid."""
        return {row["puuid"]: player_score(row) for row in self.load_players()}

    def tracked_puuids(self) -> set[str]:
        table = LM.Player.__table__
        with self.engine.connect() as conn:
            return set(conn.execute(select(table.c.puuid)).scalars().all())

    def latest_update_ms(self) -> Optional[int]:
        table = LM.Player.__table__
        with self.engine.connect() as conn:
            return conn.execute(select(func.max(table.c.updated_at_ms))).scalar()

    def upsert_player(self, row: dict[str, Any]) -> None:
        """Insert or fully replace the mutable fields of a player row."""
        table = LM.Player.__table__
        stmt = self._insert(table).values(row)
        set_map = {
            col: stmt.excluded[col] for col in row.keys() if col != "puuid"
        }
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.puuid], set_=set_map
        )
        with self.engine.begin() as conn:
            conn.execute(stmt)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def append_history(self, row: dict[str, Any]) -> None:
        table = LM.RankHistory.__table__
        with self.engine.begin() as conn:
            conn.execute(table.insert().values(row))

    def history_between(
        self,
        since_ms: int,
        until_ms: Optional[int] = None,
        puuids: Optional[Iterable[str]] = None,
    ) -> list[dict[str, Any]]:
        """History rows recorded in ``[since_ms, until_ms]``, oldest first."""
        table = LM.RankHistory.__table__
        stmt = select(table).where(table.c.recorded_at_ms >= since_ms)
        if until_ms is not None:
            stmt = stmt.where(table.c.recorded_at_ms <= until_ms)
        if puuids is not None:
            stmt = stmt.where(table.c.puuid.in_(list(puuids)))
        stmt = stmt.order_by(table.c.recorded_at_ms, table.c.history_id)
        with self.engine.connect() as conn:
            return [dict(r) for r in conn.execute(stmt).mappings().all()]

    # ------------------------------------------------------------------
    # Matches
    # ------------------------------------------------------------------

    def known_match_ids(self, match_ids: Iterable[str]) -> set[str]:
        """Subset of ``match_ids`` already in the match cache (one query)."""
        ids = list(dict.fromkeys(match_ids))
        if not ids:
            return set()
        table = LM.Match.__table__
        stmt = select(table.c.match_id).where(table.c.match_id.in_(ids))
        with self.engine.connect() as conn:
            return set(conn.execute(stmt).scalars().all())

    def get_matches(self, match_ids: Iterable[str]) -> dict[str, dict[str, Any]]:
        ids = list(dict.fromkeys(match_ids))
        if not ids:
            return {}
        table = LM.Match.__table__
        stmt = select(table).where(table.c.match_id.in_(ids))
        with self.engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return {r["match_id"]: dict(r) for r in rows}

    def upsert_match(self, row: dict[str, Any]) -> None:
        """Idempotent write of a cached match; the first fetch time is kept."""
        table = LM.Match.__table__
        stmt = self._insert(table).values(row)
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.match_id],
            set_={
                "data": stmt.excluded.data,
                "played_at_ms": func.coalesce(
                    stmt.excluded.played_at_ms, table.c.played_at_ms
                ),
            },
        )
        with self.engine.begin() as conn:
            conn.execute(stmt)

    def upsert_player_matches(self, rows: list[dict[str, Any]]) -> int:
        if not rows:
            return 0
        table = LM.PlayerMatch.__table__
        stmt = self._insert(table).values(rows)
        update_cols = ("win", "champ", "kills", "deaths", "assists", "played_at_ms")
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.puuid, table.c.match_id],
            set_={col: stmt.excluded[col] for col in update_cols},
        )
        with self.engine.begin() as conn:
            conn.execute(stmt)
        return len(rows)

    def pending_match_ids(
        self, puuid: str, max_attempts: int = DEFAULT_PENDING_MATCH_ATTEMPTS
    ) -> list[str]:
        """Match ids listed for ``puuid`` whose detail fetch has not succeeded yet."""
        table = LM.PendingMatch.__table__
        stmt = (
            select(table.c.match_id)
            .where(table.c.puuid == puuid, table.c.attempts < max_attempts)
            .order_by(table.c.first_failed_at_ms, table.c.match_id)
        )
        with self.engine.connect() as conn:
            return list(conn.execute(stmt).scalars().all())

    def add_pending_matches(
        self, puuid: str, match_ids: Iterable[str], failed_at_ms: int
    ) -> int:
        """Record failed detail fetches; a repeat failure bumps ``attempts``."""
        ids = list(dict.fromkeys(match_ids))
        if not ids:
            return 0
        table = LM.PendingMatch.__table__
        rows = [
            {
                "puuid": puuid,
                "match_id": match_id,
                "attempts": 1,
                "first_failed_at_ms": failed_at_ms,
            }
            for match_id in ids
        ]
        stmt = self._insert(table).values(rows)
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.puuid, table.c.match_id],
            set_={"attempts": table.c.attempts + 1},
        )
        with self.engine.begin() as conn:
            conn.execute(stmt)
        return len(ids)

    def clear_pending_matches(self, match_ids: Iterable[str]) -> None:
        """Drop pending entries for matches that are now cached, for every player."""
        ids = list(dict.fromkeys(match_ids))
        if not ids:
            return
        table = LM.PendingMatch.__table__
        with self.engine.begin() as conn:
            conn.execute(table.delete().where(table.c.match_id.in_(ids)))

    def has_player_match(self, puuid: str, match_id: str) -> bool:
        table = LM.PlayerMatch.__table__
        stmt = select(table.c.match_id).where(
            table.c.puuid == puuid, table.c.match_id == match_id
        )
        with self.engine.connect() as conn:
            return conn.execute(stmt).first() is not None

    def recent_player_matches(
        self, puuids: Iterable[str], limit: int
    ) -> dict[str, list[dict[str, Any]]]:
        """Up to ``limit`` participations per player, most recent first."""
        ids = list(puuids)
        if not ids or limit <= 0:
            return {}
        table = LM.PlayerMatch.__table__
        ranked = (
            select(
                table,
                func.row_number()
                .over(
                    partition_by=table.c.puuid,
                    order_by=(table.c.played_at_ms.desc(), table.c.match_id.desc()),
                )
                .label("rn"),
            )
            .where(table.c.puuid.in_(ids))
            .subquery()
        )
        stmt = (
            select(ranked)
            .where(ranked.c.rn <= limit)
            .order_by(ranked.c.puuid, ranked.c.rn)
        )
        out: dict[str, list[dict[str, Any]]] = {}
        with self.engine.connect() as conn:
            for r in conn.execute(stmt).mappings():
                row = dict(r)
                row.pop("rn", None)
                out.setdefault(row["puuid"], []).append(row)
        return out

    # ------------------------------------------------------------------
    # Milestones
    # ------------------------------------------------------------------

    def append_milestones(self, rows: list[dict[str, Any]]) -> int:
        if not rows:
            return 0
        table = LM.Milestone.__table__
        with self.engine.begin() as conn:
            conn.execute(table.insert(), rows)
        return len(rows)

    def milestones_since(self, since_ms: int) -> list[dict[str, Any]]:
        table = LM.Milestone.__table__
        stmt = (
            select(table)
            .where(table.c.detected_at_ms >= since_ms)
            .order_by(table.c.detected_at_ms, table.c.milestone_id)
        )
        with self.engine.connect() as conn:
            return [dict(r) for r in conn.execute(stmt).mappings().all()]
