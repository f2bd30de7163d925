"""
Riot API endpoints and payload parsing.

Endpoint builders return ``EndpointSpec`` objects so call plans can be
inspected without a network; ``RiotClient`` executes them through an
``UpstreamGateway``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional
from urllib.parse import quote

from ladder.core.constants import (
    APEX_TIERS,
    DEFAULT_QUEUE_ID,
    DEFAULT_QUEUE_TYPE,
    DIVISION_ORDER,
    RIOT_PLATFORM_URL,
    RIOT_ROUTING_URL,
    TIER_ORDER,
)
from ladder.core.exceptions import UpstreamError
from ladder.upstream.api import EndpointSpec, UpstreamGateway

logger = logging.getLogger(__name__)


def _enc(value: str) -> str:
    return quote(value, safe="")


def account_by_riot_id(name: str, tag: str, routing_url: str = RIOT_ROUTING_URL) -> EndpointSpec:
    return EndpointSpec(
        routing_url,
        f"/riot/account/v1/accounts/by-riot-id/{_enc(name)}/{_enc(tag)}",
        label=f"account {name}#{tag}",
    )


def summoner_by_puuid(puuid: str, platform_url: str = RIOT_PLATFORM_URL) -> EndpointSpec:
    return EndpointSpec(
        platform_url,
        f"/lol/summoner/v4/summoners/by-puuid/{puuid}",
        label=f"summoner {puuid[:8]}",
    )


def league_entries_by_puuid(puuid: str, platform_url: str = RIOT_PLATFORM_URL) -> EndpointSpec:
    return EndpointSpec(
        platform_url,
        f"/lol/league/v4/entries/by-puuid/{puuid}",
        label=f"league entries {puuid[:8]}",
    )


def active_game_by_puuid(puuid: str, platform_url: str = RIOT_PLATFORM_URL) -> EndpointSpec:
    return EndpointSpec(
        platform_url,
        f"/lol/spectator/v5/active-games/by-summoner/{puuid}",
        label=f"active game {puuid[:8]}",
    )


def match_ids_by_puuid(
    puuid: str,
    count: int,
    queue: int = DEFAULT_QUEUE_ID,
    routing_url: str = RIOT_ROUTING_URL,
) -> EndpointSpec:
    return EndpointSpec(
        routing_url,
        f"/lol/match/v5/matches/by-puuid/{puuid}/ids",
        params={"start": 0, "count": int(count), "queue": int(queue)},
        label=f"match ids {puuid[:8]} (count={count})",
    )


def match_by_id(match_id: str, routing_url: str = RIOT_ROUTING_URL) -> EndpointSpec:
    return EndpointSpec(
        routing_url, f"/lol/match/v5/matches/{match_id}", label=f"match {match_id}"
    )


@dataclass(frozen=True)
class Account:
    puuid: str
    game_name: str
    tag_line: str


@dataclass(frozen=True)
class Profile:
    profile_icon_id: Optional[int]
    summoner_level: Optional[int]


@dataclass(frozen=True)
class RankEntry:
    queue_type: str
    tier: Optional[str]
    division: Optional[str]
    league_points: int
    wins: int
    losses: int

    @property
    def games(self) -> int:
        return self.wins + self.losses


@dataclass(frozen=True)
class Participation:
    win: bool
    champ: Optional[str]
    kills: int
    deaths: int
    assists: int

    def to_dict(self) -> dict[str, Any]:
        """Compact form stored in the match cache."""
        return {
            "win": self.win,
            "champ": self.champ,
            "k": self.kills,
            "d": self.deaths,
            "a": self.assists,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Participation:
        return cls(
            win=bool(data.get("win")),
            champ=data.get("champ"),
            kills=int(data.get("k") or 0),
            deaths=int(data.get("d") or 0),
            assists=int(data.get("a") or 0),
        )


@dataclass(frozen=True)
class ParsedMatch:
    match_id: str
    played_at_ms: Optional[int]
    participants: dict[str, Participation] = field(default_factory=dict)

    def participant_map(self) -> dict[str, dict[str, Any]]:
        return {puuid: p.to_dict() for puuid, p in self.participants.items()}


def pick_queue_entry(
    entries: list[dict] | None, queue_type: str = DEFAULT_QUEUE_TYPE
) -> Optional[RankEntry]:
    """Return the entry for ``queue_type`` from a league-entries payload, if any.

    Raises:
        UpstreamError: If the entry names an unknown tier or division, or a
            divisioned tier without a division.
    """
    for entry in entries or []:
        if entry.get("queueType") != queue_type:
            continue
        tier = (entry.get("tier") or "").upper() or None
        division = ((entry.get("rank") or "").upper() or None) if tier else None
        if tier in APEX_TIERS and division is None:
            division = "I"
        if tier is not None and tier not in TIER_ORDER:
            raise UpstreamError(f"Unknown tier in {queue_type} entry: {tier!r}")
        if tier is not None and division not in DIVISION_ORDER:
            raise UpstreamError(
                f"Invalid division for {tier} in {queue_type} entry: {division!r}"
            )
        return RankEntry(
            queue_type=queue_type,
            tier=tier,
            division=division,
            league_points=max(int(entry.get("leaguePoints") or 0), 0),
            wins=int(entry.get("wins") or 0),
            losses=int(entry.get("losses") or 0),
        )
    return None


def parse_match(payload: dict) -> ParsedMatch:
    """Reduce a match-v5 payload to per-participant outcome and counters.

    Raises:
        ValueError: If the payload has no participant list.
    """
    metadata = payload.get("metadata") or {}
    info = payload.get("info") or {}
    participants = info.get("participants")
    if not isinstance(participants, list):
        raise ValueError("Match payload has no participants")

    parsed: dict[str, Participation] = {}
    for part in participants:
        puuid = part.get("puuid")
        if not puuid:
            continue
        parsed[puuid] = Participation(
            win=bool(part.get("win")),
            champ=part.get("championName"),
            kills=int(part.get("kills") or 0),
            deaths=int(part.get("deaths") or 0),
            assists=int(part.get("assists") or 0),
        )

    start = info.get("gameStartTimestamp")
    return ParsedMatch(
        match_id=str(metadata.get("matchId") or ""),
        played_at_ms=int(start) if start is not None else None,
        participants=parsed,
    )


class RiotClient:
    """The six upstream operations the sync engine needs."""

    def __init__(
        self,
        gateway: UpstreamGateway,
        *,
        routing_url: str = RIOT_ROUTING_URL,
        platform_url: str = RIOT_PLATFORM_URL,
        queue_type: str = DEFAULT_QUEUE_TYPE,
        queue_id: int = DEFAULT_QUEUE_ID,
    ) -> None:
        self.gateway = gateway
        self.routing_url = routing_url
        self.platform_url = platform_url
        self.queue_type = queue_type
        self.queue_id = queue_id

    def resolve_account(self, name: str, tag: str) -> Account:
        data = self.gateway.fetch_required(
            account_by_riot_id(name, tag, self.routing_url)
        )
        if not data or not data.get("puuid"):
            raise UpstreamError(f"Account {name}#{tag} has no identifier")
        return Account(
            puuid=data["puuid"],
            game_name=data.get("gameName") or name,
            tag_line=data.get("tagLine") or tag,
        )

    def get_profile(self, puuid: str) -> Profile:
        data = self.gateway.fetch_required(summoner_by_puuid(puuid, self.platform_url))
        return Profile(
            profile_icon_id=data.get("profileIconId"),
            summoner_level=data.get("summonerLevel"),
        )

    def get_rank_entries(self, puuid: str) -> Optional[RankEntry]:
        """Current entry for the configured queue; None when unranked in it."""
        data = self.gateway.fetch_required(
            league_entries_by_puuid(puuid, self.platform_url)
        )
        return pick_queue_entry(data, self.queue_type)

    def get_live_game(self, puuid: str) -> bool:
        """Whether the player is in a live game; failures count as not live."""
        data = self.gateway.fetch_optional(
            active_game_by_puuid(puuid, self.platform_url)
        )
        return bool(data and data.get("gameId"))

    def list_match_ids(self, puuid: str, count: int) -> list[str]:
        data = self.gateway.fetch_required(
            match_ids_by_puuid(puuid, count, self.queue_id, self.routing_url)
        )
        return [str(match_id) for match_id in data or []]

    def get_match(self, match_id: str) -> ParsedMatch:
        data = self.gateway.fetch_required(match_by_id(match_id, self.routing_url))
        try:
            parsed = parse_match(data)
        except ValueError as e:
            raise UpstreamError(f"Match {match_id}: {e}") from e
        if not parsed.match_id:
            parsed = ParsedMatch(match_id, parsed.played_at_ms, parsed.participants)
        return parsed
