from fakes import match_payload
from ladder.core.config import RosterEntry
from ladder.core.time import Clock
from ladder.sync.backfill import backfill_matches


def test_backfill_fetches_unknown_and_repairs(riot, client, store):
    riot.add_player("Alpha", "EUW", "p1")
    riot.add_player("Bravo", "EUW", "p2")
    riot.add_match(match_payload("M1", 10, [("p1", True, "Ahri", 1, 1, 1), ("p2", False, "Zed", 2, 2, 2)]))
    riot.add_match(match_payload("M2", 20, [("p2", True, "Zed", 3, 0, 9)]))

    roster = [RosterEntry("Alpha", "EUW"), RosterEntry("Bravo", "EUW")]
    log = backfill_matches(client, store, roster, count=25, clock=Clock(fixed_ms=99), progress=False)

    assert [e.puuid for e in log] == ["p1", "p2"]
    assert riot.count("/matches/M1") == 1
    assert riot.count("/matches/M2") == 1
    assert log[0].fetched == 1
    assert log[1].fetched == 1 and log[1].listed == 2
    recent = store.recent_player_matches(["p1", "p2"], 10)
    assert {m["match_id"] for m in recent["p2"]} == {"M1", "M2"}

    riot.calls.clear()
    again = backfill_matches(client, store, roster, clock=Clock(fixed_ms=100), progress=False)
    assert riot.count("/matches/M") == 0
    assert sum(e.fetched + e.repaired for e in again) == 0


def test_backfill_repairs_rows_for_cached_matches(riot, client, store):
    riot.add_player("Alpha", "EUW", "p1")
    riot.add_match(match_payload("M1", 10, [("p1", True, "Ahri", 1, 1, 1), ("p9", False, "Zed", 2, 2, 2)]))
    backfill_matches(client, store, [RosterEntry("Alpha", "EUW")], progress=False)

    riot.add_player("Late", "EUW", "p9")
    log = backfill_matches(client, store, [RosterEntry("Late", "EUW", puuid="p9")], progress=False)
    assert log[0].repaired == 1 and log[0].fetched == 0
    assert riot.count("/accounts/by-riot-id/Late") == 0


def test_backfill_isolates_failures(riot, client, store):
    riot.add_player("Alpha", "EUW", "p1")
    riot.add_match(match_payload("M1", 10, [("p1", True, "Ahri", 1, 1, 1)]))
    riot.failures["/matches/M1"] = 500

    log = backfill_matches(
        client, store, [RosterEntry("Ghost", "EUW"), RosterEntry("Alpha", "EUW")], progress=False
    )
    assert log[0].error is not None
    assert log[1].error is None and log[1].failed == 1
