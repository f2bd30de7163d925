"""Rank scoring: maps tier/division/points to a single comparable integer."""

from __future__ import annotations

from typing import Optional

from ladder.core.constants import (
    APEX_TIERS,
    DIVISION_ORDER,
    DIVISION_SCALE,
    TIER_ORDER,
    TIER_SCALE,
    TIERS,
    UNRANKED_SCORE,
    UNRANKED_TIER_NAME,
)


def score(
    tier: Optional[str], division: Optional[str], points: Optional[int]
) -> int:
    """Return the total-order score for a rank.

    Unranked (``tier`` is None) maps to ``UNRANKED_SCORE``, which is lower
    than every ranked score. Apex tiers have no division, so whatever the
    upstream reports there is ignored and points may use the whole tier
    range. Points are clamped so that one division always outranks any
    amount of points in the division below, and one tier outranks any
    division/points combination in the tier below.

    Raises:
        ValueError: If the tier or division is not a known value.
    """
    if tier is None:
        return UNRANKED_SCORE

    tier_key = tier.upper()
    if tier_key not in TIER_ORDER:
        raise ValueError(f"Unknown tier: {tier!r}")

    lp = max(int(points or 0), 0)
    if tier_key in APEX_TIERS:
        return TIER_ORDER[tier_key] * TIER_SCALE + min(lp, TIER_SCALE - 1)

    div_key = (division or "").upper()
    if div_key not in DIVISION_ORDER:
        raise ValueError(f"Unknown division {division!r} for tier {tier_key}")

    return (
        TIER_ORDER[tier_key] * TIER_SCALE
        + DIVISION_ORDER[div_key] * DIVISION_SCALE
        + min(lp, DIVISION_SCALE - 1)
    )


def is_ranked(value: int) -> bool:
    return value > UNRANKED_SCORE


def tier_bucket(value: int) -> int:
    """Tier-level bucket of a score; -1 for unranked."""
    if not is_ranked(value):
        return -1
    return value // TIER_SCALE


def tier_name(bucket: int) -> str:
    if bucket < 0:
        return UNRANKED_TIER_NAME
    return TIERS[bucket]
