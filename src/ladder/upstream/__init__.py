"""Upstream access: throttled gateway and Riot API client."""

from __future__ import annotations

from ladder.upstream.api import EndpointSpec, Throttle, UpstreamGateway
from ladder.upstream.riot import (
    Account,
    ParsedMatch,
    Participation,
    Profile,
    RankEntry,
    RiotClient,
    parse_match,
    pick_queue_entry,
)

__all__ = [
    # Gateway
    "EndpointSpec",
    "Throttle",
    "UpstreamGateway",
    # Client
    "RiotClient",
    "Account",
    "Profile",
    "RankEntry",
    "Participation",
    "ParsedMatch",
    # Parsing
    "parse_match",
    "pick_queue_entry",
]
