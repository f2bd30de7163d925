import pytest

from ladder.core.time import Clock
from ladder.sync.reconcile import EntityUpdate, Reconciler
from ladder.upstream.riot import ParsedMatch, Participation, Profile, RankEntry


def _update(puuid="p1", tier="GOLD", division="II", lp=40, wins=10, losses=9, in_game=False):
    rank = RankEntry("RANKED_SOLO_5x5", tier, division, lp, wins, losses) if tier else None
    return EntityUpdate(
        puuid=puuid,
        game_name="Alpha",
        tag_line="EUW",
        profile=Profile(profile_icon_id=1, summoner_level=30),
        rank=rank,
        in_game=in_game,
    )


def test_first_observation_starts_history(store):
    rec = Reconciler(store, Clock(fixed_ms=1_000))
    result = rec.reconcile_entity(_update(), None)
    assert result.pre_score is None
    assert result.history_appended
    row = store.get_player("p1")
    assert row["tier"] == "GOLD" and row["updated_at_ms"] == 1_000
    assert len(store.history_between(0)) == 1


def test_history_only_on_score_change(store):
    clock = Clock(fixed_ms=1_000)
    rec = Reconciler(store, clock)
    rec.reconcile_entity(_update(), None)

    clock.advance(60_000)
    result = rec.reconcile_entity(_update(in_game=True), store.get_player("p1"))
    assert not result.history_appended
    # Non-score fields still replaced
    row = store.get_player("p1")
    assert row["in_game"] is True
    assert row["updated_at_ms"] == 61_000
    assert len(store.history_between(0)) == 1

    clock.advance(60_000)
    result = rec.reconcile_entity(_update(lp=58, wins=11), store.get_player("p1"))
    assert result.history_appended
    assert result.post_score - result.pre_score == 18
    history = store.history_between(0)
    assert [h["score"] for h in history] == [32040, 32058]


def test_unranked_entity(store):
    rec = Reconciler(store, Clock(fixed_ms=5))
    result = rec.reconcile_entity(_update(tier=None), None)
    assert result.post_score == -1
    row = store.get_player("p1")
    assert row["tier"] is None and row["division"] is None
    assert store.load_scores() == {"p1": -1}


def test_store_match_is_idempotent(store):
    rec = Reconciler(store, Clock(fixed_ms=100))
    match = ParsedMatch(
        "EUW1_1",
        50,
        {
            "p1": Participation(True, "Ahri", 5, 1, 9),
            "p2": Participation(False, "Zed", 2, 5, 1),
            "stranger": Participation(True, "Lux", 0, 0, 0),
        },
    )
    assert rec.store_match(match, {"p1", "p2"}) == 2
    assert rec.store_match(match, {"p1", "p2"}) == 2

    cached = store.get_matches(["EUW1_1"])["EUW1_1"]
    assert set(cached["data"]) == {"p1", "p2", "stranger"}
    assert cached["data"]["p1"] == {"win": True, "champ": "Ahri", "k": 5, "d": 1, "a": 9}
    recent = store.recent_player_matches(["p1", "p2", "stranger"], 10)
    assert len(recent["p1"]) == 1 and len(recent["p2"]) == 1
    assert "stranger" not in recent


def test_repair_participation_from_cache(store):
    rec = Reconciler(store, Clock(fixed_ms=100))
    match = ParsedMatch("EUW1_2", 70, {"p1": Participation(True, "Ahri", 1, 1, 1), "p3": Participation(False, "Jax", 4, 4, 4)})
    rec.store_match(match, {"p1"})
    assert not store.has_player_match("p3", "EUW1_2")

    cached = store.get_matches(["EUW1_2"])["EUW1_2"]
    assert rec.repair_participation("p3", cached)
    assert rec.repair_participation("p3", cached)
    assert store.has_player_match("p3", "EUW1_2")
    assert not rec.repair_participation("p9", cached)
    assert len(store.recent_player_matches(["p3"], 10)["p3"]) == 1


def test_unscorable_rank_writes_nothing(store):
    clock = Clock(fixed_ms=1_000)
    rec = Reconciler(store, clock)
    rec.reconcile_entity(_update(), None)
    before = store.get_player("p1")

    clock.advance(60_000)
    with pytest.raises(ValueError):
        rec.reconcile_entity(_update(tier="ASCENDANT"), before)

    assert store.get_player("p1") == before
    assert len(store.history_between(0)) == 1
