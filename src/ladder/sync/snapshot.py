"""Compose the leaderboard view from persisted state only."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from ladder.core.config import RosterEntry
from ladder.core.constants import DEFAULT_QUEUE_TYPE, DEFAULT_RECENT_MATCH_LIMIT
from ladder.sql.store import SnapshotStore, player_score


@dataclass
class SnapshotResponse:
    players: list[dict[str, Any]] = field(default_factory=list)
    updated_at_ms: Optional[int] = None
    cached: bool = False
    stale: bool = False
    concurrent: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "players": self.players,
            "updatedAt": self.updated_at_ms,
            "cached": self.cached,
            "stale": self.stale,
            "concurrent": self.concurrent,
        }


def _rank_data(row: dict[str, Any], queue_type: str) -> list[dict[str, Any]]:
    if not row.get("tier"):
        return []
    return [
        {
            "queueType": queue_type,
            "tier": row["tier"],
            "rank": row.get("division"),
            "leaguePoints": row.get("league_points") or 0,
            "wins": row.get("wins") or 0,
            "losses": row.get("losses") or 0,
        }
    ]


def _match_view(row: dict[str, Any]) -> dict[str, Any]:
    return {
        "win": row["win"],
        "champ": row["champ"],
        "k": row["kills"],
        "d": row["deaths"],
        "a": row["assists"],
    }


def _placeholder(seed: RosterEntry) -> dict[str, Any]:
    return {
        "puuid": seed.puuid,
        "gameName": seed.name,
        "tagLine": seed.tag,
        "profileIconId": None,
        "summonerLevel": None,
        "rankData": [],
        "inGame": False,
        "recentMatches": [],
        "error": True,
    }


def _riot_key(name: str, tag: str) -> tuple[str, str]:
    return (name.lower(), tag.lower())


class SnapshotReader:
    """Read-only view builder; never touches upstream or the build lock."""

    def __init__(
        self,
        store: SnapshotStore,
        roster: Iterable[RosterEntry] = (),
        *,
        recent_match_limit: int = DEFAULT_RECENT_MATCH_LIMIT,
        queue_type: str = DEFAULT_QUEUE_TYPE,
    ) -> None:
        self.store = store
        self.roster = list(roster)
        self.recent_match_limit = recent_match_limit
        self.queue_type = queue_type

    def compose(
        self,
        *,
        failed: Iterable[RosterEntry] = (),
        failed_puuids: Iterable[str] = (),
        cached: bool = False,
        stale: bool = False,
        concurrent: bool = False,
    ) -> SnapshotResponse:
        """Build the response.

        Players are sorted by score descending, ties by display name. Entries
        that failed in the producing cycle keep their persisted row flagged
        with ``error``; roster entries never persisted become placeholders at
        the end.
        """
        rows = self.store.load_players()
        rows.sort(key=lambda r: (-player_score(r), (r.get("game_name") or "").lower()))

        failed = list(failed)
        failed_ids = set(failed_puuids) | {s.puuid for s in failed if s.puuid}
        failed_keys = {_riot_key(s.name, s.tag) for s in failed}

        recent = self.store.recent_player_matches(
            [r["puuid"] for r in rows], self.recent_match_limit
        )

        players = []
        seen_ids: set[str] = set()
        seen_keys: set[tuple[str, str]] = set()
        for row in rows:
            key = _riot_key(row["game_name"], row["tag_line"])
            seen_ids.add(row["puuid"])
            seen_keys.add(key)
            # Stored most recent first; shown oldest first
            matches = list(reversed(recent.get(row["puuid"], [])))
            players.append(
                {
                    "puuid": row["puuid"],
                    "gameName": row["game_name"],
                    "tagLine": row["tag_line"],
                    "profileIconId": row.get("profile_icon_id"),
                    "summonerLevel": row.get("summoner_level"),
                    "rankData": _rank_data(row, self.queue_type),
                    "inGame": bool(row.get("in_game")),
                    "recentMatches": [_match_view(m) for m in matches],
                    "error": row["puuid"] in failed_ids or key in failed_keys,
                }
            )

        for seed in self.roster:
            if seed.puuid in seen_ids or _riot_key(seed.name, seed.tag) in seen_keys:
                continue
            players.append(_placeholder(seed))

        return SnapshotResponse(
            players=players,
            updated_at_ms=self.store.latest_update_ms(),
            cached=cached,
            stale=stale,
            concurrent=concurrent,
        )
