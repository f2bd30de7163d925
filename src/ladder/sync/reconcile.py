"""
Reconciliation of freshly fetched state into the store.

All mutation of persisted state goes through here. Every write is an
upsert keyed by the natural key (puuid, match id, puuid + match id), so
re-running any step for the same input is safe.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from ladder.core.scoring import score
from ladder.core.time import Clock
from ladder.sql.store import SnapshotStore, player_score
from ladder.upstream.riot import ParsedMatch, Participation, Profile, RankEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntityUpdate:
    """Everything fetched for one entity in one cycle."""

    puuid: str
    game_name: str
    tag_line: str
    profile: Profile
    rank: Optional[RankEntry]
    in_game: bool

    @property
    def wins(self) -> int:
        return self.rank.wins if self.rank else 0

    @property
    def losses(self) -> int:
        return self.rank.losses if self.rank else 0

    @property
    def score(self) -> int:
        if self.rank is None:
            return score(None, None, None)
        return score(self.rank.tier, self.rank.division, self.rank.league_points)


@dataclass(frozen=True)
class ReconcileResult:
    puuid: str
    pre_score: Optional[int]
    post_score: int
    history_appended: bool


class Reconciler:
    def __init__(self, store: SnapshotStore, clock: Clock | None = None) -> None:
        self.store = store
        self.clock = clock or Clock()

    def reconcile_entity(
        self, update: EntityUpdate, previous: Optional[dict[str, Any]]
    ) -> ReconcileResult:
        """Replace the player row and append history if the score moved.

        ``previous`` is the row as it was before this cycle (None on first
        observation, in which case history is always started).
        """
        ts = self.clock.now_ms()
        rank = update.rank
        # Raises before anything is written if the rank cannot be scored
        post_score = update.score
        pre_score = player_score(previous) if previous is not None else None
        wins, losses = update.wins, update.losses
        if previous is not None and (
            wins < (previous.get("wins") or 0) or losses < (previous.get("losses") or 0)
        ):
            # Only a ranked season reset lowers the counters
            logger.warning(
                f"{update.game_name}#{update.tag_line}: counters reset "
                f"({previous.get('wins')}/{previous.get('losses')} -> {wins}/{losses})"
            )

        self.store.upsert_player(
            {
                "puuid": update.puuid,
                "game_name": update.game_name,
                "tag_line": update.tag_line,
                "profile_icon_id": update.profile.profile_icon_id,
                "summoner_level": update.profile.summoner_level,
                "tier": rank.tier if rank else None,
                "division": rank.division if rank else None,
                "league_points": rank.league_points if rank else 0,
                "wins": wins,
                "losses": losses,
                "in_game": update.in_game,
                "updated_at_ms": ts,
            }
        )

        appended = pre_score != post_score
        if appended:
            self.store.append_history(
                {
                    "puuid": update.puuid,
                    "tier": rank.tier if rank else None,
                    "division": rank.division if rank else None,
                    "league_points": rank.league_points if rank else 0,
                    "wins": wins,
                    "losses": losses,
                    "score": post_score,
                    "recorded_at_ms": ts,
                }
            )
            logger.debug(
                f"{update.game_name}#{update.tag_line}: score {pre_score} -> {post_score}"
            )
        return ReconcileResult(update.puuid, pre_score, post_score, appended)

    def store_match(self, match: ParsedMatch, tracked: set[str]) -> int:
        """Cache a match and record participation for every tracked player in it.

        Returns the number of participation rows written.
        """
        ts = self.clock.now_ms()
        self.store.upsert_match(
            {
                "match_id": match.match_id,
                "fetched_at_ms": ts,
                "played_at_ms": match.played_at_ms,
                "data": match.participant_map(),
            }
        )
        self.store.clear_pending_matches([match.match_id])
        played_at = match.played_at_ms if match.played_at_ms is not None else ts
        rows = [
            _participation_row(puuid, match.match_id, part, played_at)
            for puuid, part in match.participants.items()
            if puuid in tracked
        ]
        return self.store.upsert_player_matches(rows)

    def repair_participation(self, puuid: str, cached: dict[str, Any]) -> bool:
        """Write ``puuid``'s participation row from an already cached match.

        Returns False if the player is not a participant of that match.
        """
        part_data = (cached.get("data") or {}).get(puuid)
        if not part_data:
            return False
        played_at = cached.get("played_at_ms") or cached.get("fetched_at_ms")
        row = _participation_row(
            puuid, cached["match_id"], Participation.from_dict(part_data), played_at
        )
        self.store.upsert_player_matches([row])
        return True


def _participation_row(
    puuid: str, match_id: str, part: Participation, played_at_ms: int
) -> dict[str, Any]:
    return {
        "puuid": puuid,
        "match_id": match_id,
        "win": part.win,
        "champ": part.champ,
        "kills": part.kills,
        "deaths": part.deaths,
        "assists": part.assists,
        "played_at_ms": int(played_at_ms),
    }
