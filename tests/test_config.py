import json

import pytest

from ladder.core.config import RosterEntry, SyncConfig, load_api_key, load_roster
from ladder.core.exceptions import ConfigError


def test_load_roster_list_and_dedup(tmp_path):
    path = tmp_path / "roster.json"
    path.write_text(
        json.dumps(
            [
                {"name": "Alpha", "tag": "EUW"},
                {"name": "Bravo", "tag": "EUW", "puuid": "p2"},
                {"name": "alpha", "tag": "euw"},
            ]
        )
    )
    roster = load_roster(path)
    assert roster == [RosterEntry("Alpha", "EUW"), RosterEntry("Bravo", "EUW", "p2")]
    assert roster[0].riot_id == "Alpha#EUW"


def test_load_roster_players_object(tmp_path):
    path = tmp_path / "roster.json"
    path.write_text(json.dumps({"players": [{"name": "Alpha", "tag": "EUW"}]}))
    assert len(load_roster(path)) == 1


@pytest.mark.parametrize("content", ["not json", json.dumps([{"name": "NoTag"}]), json.dumps("x")])
def test_load_roster_invalid(tmp_path, content):
    path = tmp_path / "roster.json"
    path.write_text(content)
    with pytest.raises(ConfigError):
        load_roster(path)


def test_sync_config_from_env(monkeypatch):
    monkeypatch.setenv("LADDER_FRESHNESS_MINUTES", "10")
    monkeypatch.setenv("LADDER_MATCH_LIST_MAX", "5")
    monkeypatch.setenv("LADDER_PLATFORM_URL", "https://na1.api.riotgames.com")
    config = SyncConfig.from_env([RosterEntry("Alpha", "EUW")])
    assert config.freshness_minutes == 10.0
    assert config.freshness_ms == 600_000
    assert config.match_list_max == 5
    assert config.platform_url == "https://na1.api.riotgames.com"
    assert config.recent_match_limit == 10

    monkeypatch.setenv("LADDER_MATCH_LIST_MAX", "many")
    with pytest.raises(ConfigError):
        SyncConfig.from_env()


def test_load_api_key_env_and_dotenv(monkeypatch, tmp_path):
    monkeypatch.setenv("RIOT_API_KEY", " RGAPI-env ")
    assert load_api_key() == "RGAPI-env"

    monkeypatch.delenv("RIOT_API_KEY")
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ConfigError):
        load_api_key()
    (tmp_path / ".env").write_text('# comment\nRIOT_API_KEY="RGAPI-file"\n')
    assert load_api_key() == "RGAPI-file"
