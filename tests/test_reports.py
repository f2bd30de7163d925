import pytest

from ladder.core.constants import MS_PER_DAY, MS_PER_MINUTE
from ladder.reports import standings_delta, weekly_summary

NOW = 1_700_000_000_000


def _player(puuid, name, tier=None, division=None, lp=0):
    return {
        "puuid": puuid,
        "game_name": name,
        "tag_line": "EUW",
        "profile_icon_id": 1,
        "summoner_level": 1,
        "tier": tier,
        "division": division,
        "league_points": lp,
        "wins": 0,
        "losses": 0,
        "in_game": False,
        "updated_at_ms": NOW,
    }


def _history(puuid, score, at):
    return {
        "puuid": puuid,
        "tier": "GOLD",
        "division": "I",
        "league_points": 0,
        "wins": 0,
        "losses": 0,
        "score": score,
        "recorded_at_ms": at,
    }


def _pm(puuid, match_id, win, at):
    return {
        "puuid": puuid,
        "match_id": match_id,
        "win": win,
        "champ": "Ahri",
        "kills": 0,
        "deaths": 0,
        "assists": 0,
        "played_at_ms": at,
    }


@pytest.fixture
def ladder_rows(store):
    store.upsert_player(_player("p1", "Alpha", "GOLD", "II", 40))
    store.upsert_player(_player("p2", "Bravo", "GOLD", "I", 20))
    store.upsert_player(_player("p3", "Charlie"))
    return store


def test_weekly_summary(engine, ladder_rows):
    store = ladder_rows
    store.append_history(_history("p1", 31_000, NOW - 8 * MS_PER_DAY))
    store.append_history(_history("p1", 31_500, NOW - 6 * MS_PER_DAY))
    store.append_history(_history("p1", 32_000, NOW - 1 * MS_PER_DAY))
    store.upsert_player_matches(
        [
            _pm("p1", "old", True, NOW - 9 * MS_PER_DAY),
            _pm("p1", "m1", True, NOW - 3 * MS_PER_DAY),
            _pm("p1", "m2", True, NOW - 2 * MS_PER_DAY),
            _pm("p1", "m3", False, NOW - 1 * MS_PER_DAY),
            _pm("p2", "m3", False, NOW - 1 * MS_PER_DAY),
        ]
    )

    rows = weekly_summary(engine, now_ms=NOW, days=7).to_dicts()

    assert [r["puuid"] for r in rows] == ["p1", "p2", "p3"]
    alpha, bravo, charlie = rows
    assert alpha["lp_gain"] == 32_040 - 31_500
    assert (alpha["games_played"], alpha["week_wins"], alpha["week_losses"]) == (3, 2, 1)
    assert alpha["week_wr"] == 67
    assert bravo["lp_gain"] == 0 and bravo["week_wr"] == 0
    assert charlie["games_played"] == 0 and charlie["week_wr"] is None


def test_weekly_summary_empty(engine):
    df = weekly_summary(engine, now_ms=NOW)
    assert df.height == 0
    assert "lp_gain" in df.columns


def test_standings_delta(engine, ladder_rows):
    store = ladder_rows
    store.append_history(_history("p1", 10, NOW - 70 * MS_PER_MINUTE))
    store.append_history(_history("p1", 34_000, NOW - 60 * MS_PER_MINUTE))
    store.append_history(_history("p2", 33_000, NOW - 50 * MS_PER_MINUTE))
    # Outside the window
    store.append_history(_history("p3", 99_000, NOW - 10 * MS_PER_MINUTE))

    rows = {r["puuid"]: r for r in standings_delta(engine, now_ms=NOW).to_dicts()}

    assert rows["p2"]["position"] == 1 and rows["p2"]["delta"] == 1
    assert rows["p1"]["position"] == 2 and rows["p1"]["delta"] == -1
    assert rows["p3"]["previous_position"] is None and rows["p3"]["delta"] is None


def test_standings_delta_zero_without_window_history(engine, ladder_rows):
    rows = standings_delta(engine, now_ms=NOW).to_dicts()
    assert [r["position"] for r in rows] == [1, 2, 3]
    assert all(r["delta"] == 0 for r in rows)
