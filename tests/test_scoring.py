import pytest

from ladder.core.constants import DIVISIONS, TIERS
from ladder.core.scoring import is_ranked, score, tier_bucket, tier_name


def test_unranked_below_every_ranked_score():
    assert score(None, None, None) == -1
    assert score("IRON", "IV", 0) == 0
    assert score(None, None, None) < score("IRON", "IV", 0)
    assert not is_ranked(score(None, None, None))
    assert is_ranked(score("IRON", "IV", 0))


def test_known_values():
    assert score("GOLD", "II", 45) == 3 * 10000 + 2 * 1000 + 45
    assert score("gold", "ii", 45) == score("GOLD", "II", 45)
    assert score("MASTER", "I", 250) == 7 * 10000 + 250


def test_monotonic_over_tiers_and_divisions():
    ordered = []
    for tier in TIERS:
        if tier in ("MASTER", "GRANDMASTER", "CHALLENGER"):
            ordered.append(score(tier, "I", 0))
            ordered.append(score(tier, "I", 1500))
            continue
        for div in DIVISIONS:
            ordered.append(score(tier, div, 0))
            ordered.append(score(tier, div, 99))
    assert ordered == sorted(ordered)
    assert len(set(ordered)) == len(ordered)


def test_points_never_cross_a_division_or_tier():
    # Overflowing points stay below the next division
    assert score("SILVER", "IV", 5000) < score("SILVER", "III", 0)
    assert score("DIAMOND", "I", 999_999) < score("MASTER", "I", 0)
    assert score("GRANDMASTER", "I", 10**6) < score("CHALLENGER", "I", 0)
    assert score("SILVER", "IV", -20) == score("SILVER", "IV", 0)


def test_apex_ignores_division():
    assert score("CHALLENGER", "I", 100) == score("CHALLENGER", None, 100)


@pytest.mark.parametrize("tier,division", [("WOOD", "I"), ("GOLD", "V"), ("GOLD", None)])
def test_unknown_values_raise(tier, division):
    with pytest.raises(ValueError):
        score(tier, division, 0)


def test_tier_bucket_and_name():
    assert tier_bucket(-1) == -1
    assert tier_name(tier_bucket(-1)) == "UNRANKED"
    assert tier_name(tier_bucket(score("EMERALD", "III", 40))) == "EMERALD"
    assert tier_bucket(score("GOLD", "I", 99)) < tier_bucket(score("PLATINUM", "IV", 0))
