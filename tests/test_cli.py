import json

from ladder.cli import db_init, report
from ladder.sql import SnapshotStore, create_engine


def test_db_init_then_report_on_sqlite(tmp_path, capsys):
    url = f"sqlite:///{tmp_path / 'ladder.db'}"
    assert db_init.main(["--db-url", url]) == 0
    assert "Initialized" in capsys.readouterr().out

    engine = create_engine(url)
    SnapshotStore(engine).upsert_player(
        {
            "puuid": "p1",
            "game_name": "Alpha",
            "tag_line": "EUW",
            "tier": "GOLD",
            "division": "I",
            "league_points": 10,
            "wins": 1,
            "losses": 0,
            "in_game": False,
            "updated_at_ms": 1,
        }
    )
    engine.dispose()

    assert report.main(["standings", "--db-url", url, "--json"]) == 0
    rows = json.loads(capsys.readouterr().out)
    assert rows == [
        {
            "puuid": "p1",
            "game_name": "Alpha",
            "tag_line": "EUW",
            "position": 1,
            "previous_position": None,
            "delta": 0,
        }
    ]


def test_db_init_rejects_bad_schema(monkeypatch):
    monkeypatch.setenv("LADDER_DATABASE_URL", "postgresql://u@localhost/db")
    assert db_init.main(["--schema", "bad-name;"]) == 2


def test_sync_once_json(tmp_path, monkeypatch, capsys):
    from fakes import FakeRiot, make_client, match_payload

    import ladder.cli.sync as sync_cli

    riot = FakeRiot()
    riot.add_player("Alpha", "EUW", "p1", "GOLD", "I", 10, wins=3, losses=2)
    riot.add_player("Bravo", "EUW", "p2")
    riot.add_match(match_payload("M1", 5, [("p1", True, "Ahri", 1, 2, 3)]))
    monkeypatch.setattr(sync_cli, "build_client", lambda config: make_client(riot))

    roster = tmp_path / "roster.json"
    roster.write_text(json.dumps([{"name": "Alpha", "tag": "EUW"}, {"name": "Bravo", "tag": "EUW"}]))
    url = f"sqlite:///{tmp_path / 'ladder.db'}"

    assert sync_cli.main(["--once", "--json", "--roster", str(roster), "--db-url", url]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["cached"] is False
    assert [p["gameName"] for p in payload["players"]] == ["Alpha", "Bravo"]
    assert payload["players"][0]["recentMatches"] == [{"win": True, "champ": "Ahri", "k": 1, "d": 2, "a": 3}]

    # Second trigger inside the freshness window is served from the store
    riot.calls.clear()
    assert sync_cli.main(["--once", "--json", "--roster", str(roster), "--db-url", url]) == 0
    assert json.loads(capsys.readouterr().out)["cached"] is True
    assert riot.calls == []
