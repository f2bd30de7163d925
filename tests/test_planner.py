from ladder.core.config import RosterEntry
from ladder.sync.planner import plan_fetch, select_unknown_matches

SEED = RosterEntry("Alpha", "EUW")


def test_first_observation_resolves_and_lists():
    plan = plan_fetch(SEED, None, match_list_max=20)
    assert plan.resolve_identity
    assert plan.first_observation
    assert plan.needs_match_list(0, 0)
    assert plan.match_list_count == 20


def test_known_identifier_skips_resolution():
    plan = plan_fetch(RosterEntry("Alpha", "EUW", puuid="p1"), None)
    assert not plan.resolve_identity
    assert plan.puuid == "p1"

    previous = {"puuid": "p1", "wins": 3, "losses": 2}
    assert not plan_fetch(SEED, previous).resolve_identity


def test_match_list_only_when_counters_moved():
    previous = {"puuid": "p1", "wins": 10, "losses": 8}
    plan = plan_fetch(SEED, previous)
    assert plan.previous_games == 18
    assert not plan.needs_match_list(10, 8)
    assert plan.needs_match_list(11, 8)
    assert plan.needs_match_list(10, 9)
    assert plan.games_since(12, 9) == 3


def test_counter_reset_does_not_list_matches():
    plan = plan_fetch(SEED, {"puuid": "p1", "wins": 50, "losses": 40})
    assert plan.games_since(0, 0) == -90
    assert not plan.needs_match_list(0, 0)


def test_unknown_matches_keep_order_and_dedup():
    assert select_unknown_matches(["m3", "m2", "m3", "m1"], {"m2"}) == ["m3", "m1"]
    assert select_unknown_matches([], set()) == []


def test_pending_details_retried_only_without_listing():
    plan = plan_fetch(SEED, {"puuid": "p1", "wins": 10, "losses": 8})
    assert not plan.retry_pending(10, 8)

    plan = plan.with_pending(["m2", "m1", "m2"])
    assert plan.pending_match_ids == ("m2", "m1")
    assert plan.retry_pending(10, 8)
    # A listing this cycle covers the outstanding ids
    assert not plan.retry_pending(11, 8)
