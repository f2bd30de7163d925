"""
Per-entity fetch planning.

A ``FetchPlan`` is built from the roster seed and the previously persisted
row before any upstream call is made. It holds every "do we already have
this?" decision of a cycle, so the call volume for an entity can be checked
without a live upstream.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Iterable, Optional

from ladder.core.config import RosterEntry
from ladder.core.constants import DEFAULT_MATCH_LIST_MAX


@dataclass(frozen=True)
class FetchPlan:
    seed: RosterEntry
    puuid: Optional[str]
    previous_wins: Optional[int]
    previous_losses: Optional[int]
    match_list_max: int = DEFAULT_MATCH_LIST_MAX
    # Listed earlier, detail fetch still outstanding
    pending_match_ids: tuple[str, ...] = ()

    @property
    def resolve_identity(self) -> bool:
        """Identifiers are immutable, so resolution happens only once."""
        return self.puuid is None

    @property
    def first_observation(self) -> bool:
        return self.previous_wins is None or self.previous_losses is None

    @property
    def previous_games(self) -> Optional[int]:
        if self.first_observation:
            return None
        return self.previous_wins + self.previous_losses

    def games_since(self, wins: int, losses: int) -> Optional[int]:
        """Games played since the previous cycle; None on first observation."""
        if self.first_observation:
            return None
        return (wins + losses) - self.previous_games

    def needs_match_list(self, wins: int, losses: int) -> bool:
        """List match ids only when the counters show a new game."""
        delta = self.games_since(wins, losses)
        return delta is None or delta > 0

    def retry_pending(self, wins: int, losses: int) -> bool:
        """Fetch outstanding details directly when no listing happens this cycle."""
        return bool(self.pending_match_ids) and not self.needs_match_list(wins, losses)

    def with_pending(self, match_ids: Iterable[str]) -> FetchPlan:
        """Copy of the plan carrying match ids whose detail fetch failed earlier."""
        return replace(self, pending_match_ids=tuple(dict.fromkeys(match_ids)))

    @property
    def match_list_count(self) -> int:
        """Listing is one call whatever the count; a full window lets matches
        listed before the counters moved still be caught."""
        return self.match_list_max


def plan_fetch(
    seed: RosterEntry,
    previous: Optional[dict[str, Any]],
    *,
    match_list_max: int = DEFAULT_MATCH_LIST_MAX,
) -> FetchPlan:
    """Build the fetch plan for one roster entry.

    ``previous`` is the persisted player row matching the seed (by puuid or
    by name/tag), or None if the entry has never been resolved.
    """
    puuid = seed.puuid or (previous or {}).get("puuid")
    return FetchPlan(
        seed=seed,
        puuid=puuid,
        previous_wins=previous.get("wins") if previous else None,
        previous_losses=previous.get("losses") if previous else None,
        match_list_max=match_list_max,
    )


def select_unknown_matches(
    candidates: Iterable[str], known: set[str]
) -> list[str]:
    """Candidate ids missing from the match cache, in candidate order."""
    return [match_id for match_id in dict.fromkeys(candidates) if match_id not in known]
