import logging

import pytest

import ladder.core.sentry as sentry_mod
from ladder.core.sentry import _parse_float_env, init_sentry


def test_parse_float_env_clamps(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SENTRY_TRACES_SAMPLE_RATE", "2.0")
    assert _parse_float_env("SENTRY_TRACES_SAMPLE_RATE", 0.0) == 1.0
    monkeypatch.setenv("SENTRY_TRACES_SAMPLE_RATE", "-0.5")
    assert _parse_float_env("SENTRY_TRACES_SAMPLE_RATE", 0.0) == 0.0
    monkeypatch.setenv("SENTRY_TRACES_SAMPLE_RATE", "nope")
    assert _parse_float_env("SENTRY_TRACES_SAMPLE_RATE", 0.1) == 0.1


def test_init_sentry_no_dsn(monkeypatch: pytest.MonkeyPatch) -> None:
    for k in ("SENTRY_DSN", "LADDER_SENTRY_DSN"):
        monkeypatch.delenv(k, raising=False)
    assert init_sentry(context="test_cli") is False


def test_init_sentry_invalid_dsn(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SENTRY_DSN", "not-a-valid-dsn")
    assert init_sentry(context="test_cli") is False


class _FakeSentry:
    def __init__(self, record: dict):
        self.record = record

    def init(self, **kwargs):
        self.record.update(kwargs)

    def set_tag(self, k, v):
        self.record.setdefault("tags", {})[k] = v


def test_init_sentry_success_and_order(monkeypatch: pytest.MonkeyPatch, caplog):
    caplog.set_level(logging.INFO, logger="ladder.core.sentry")
    record: dict = {}
    monkeypatch.setattr(sentry_mod, "sentry_sdk", _FakeSentry(record))

    # First env in the provided list wins
    monkeypatch.setenv("PRIMARY_DSN", "https://abc@host/project")
    monkeypatch.setenv("SECONDARY_DSN", "https://def@host/project")
    monkeypatch.setenv("SENTRY_ENV", "staging")
    initialized = init_sentry(
        context="ladder_sync",
        release="r1",
        dsn_envs=["PRIMARY_DSN", "SECONDARY_DSN"],
    )
    assert initialized is True
    assert record["dsn"] == "https://abc@host/project"
    assert record["release"] == "r1"
    assert record["environment"] == "staging"
    assert record["tags"] == {"service": "ladder_sync"}
    assert any("Sentry initialized" in m for m in caplog.messages)
