"""
Milestone detection from score deltas.

Two passes per cycle:

1. ``detect_transition`` right after an entity is reconciled: promotion or
   demotion across a tier boundary.
2. ``detect_overtakes`` once after the whole roster: every ordered pair is
   compared against the same pre-cycle snapshot, so players who moved in the
   same cycle are judged consistently. The scan is quadratic in roster size,
   which is fine for tens of players.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ladder.core.scoring import is_ranked, tier_bucket, tier_name


class MilestoneKind(Enum):
    PROMOTED = "promoted"
    DEMOTED = "demoted"
    SURPASSED = "surpassed"


@dataclass(frozen=True)
class MilestoneEvent:
    kind: MilestoneKind
    actor: str
    target: Optional[str] = None
    from_tier: Optional[str] = None
    to_tier: Optional[str] = None
    actor_score: Optional[int] = None
    target_score: Optional[int] = None

    def to_row(self, detected_at_ms: int) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "actor_puuid": self.actor,
            "target_puuid": self.target,
            "from_tier": self.from_tier,
            "to_tier": self.to_tier,
            "actor_score": self.actor_score,
            "target_score": self.target_score,
            "detected_at_ms": detected_at_ms,
        }


def detect_transition(
    puuid: str, pre_score: Optional[int], post_score: int
) -> Optional[MilestoneEvent]:
    """Promotion/demotion for one entity; None on first observation or same tier."""
    if pre_score is None:
        return None

    pre_bucket = tier_bucket(pre_score)
    post_bucket = tier_bucket(post_score)

    if post_bucket > pre_bucket and is_ranked(post_score):
        kind = MilestoneKind.PROMOTED
    elif post_bucket < pre_bucket and is_ranked(pre_score):
        kind = MilestoneKind.DEMOTED
    else:
        return None

    return MilestoneEvent(
        kind=kind,
        actor=puuid,
        from_tier=tier_name(pre_bucket),
        to_tier=tier_name(post_bucket),
        actor_score=post_score,
    )


def detect_overtakes(
    pre_scores: dict[str, int], post_scores: dict[str, int]
) -> list[MilestoneEvent]:
    """Every (A, B) where A was at or below B before the cycle and is strictly above after.

    Only entities present in both snapshots are compared. Events come out in
    a deterministic order (by actor, then target).
    """
    ids = sorted(set(pre_scores) & set(post_scores))
    events: list[MilestoneEvent] = []
    for a in ids:
        post_a = post_scores[a]
        if not is_ranked(post_a):
            continue
        for b in ids:
            if a == b:
                continue
            if pre_scores[a] <= pre_scores[b] and post_a > post_scores[b]:
                events.append(
                    MilestoneEvent(
                        kind=MilestoneKind.SURPASSED,
                        actor=a,
                        target=b,
                        actor_score=post_a,
                        target_score=post_scores[b],
                    )
                )
    return events
