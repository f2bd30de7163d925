from __future__ import annotations

import logging

import pytest

from fakes import FakeRiot, make_client
from ladder.sql import SnapshotStore, create_all, create_engine
from ladder.upstream import RiotClient


@pytest.fixture
def engine():
    eng = create_engine("sqlite://")
    create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def store(engine) -> SnapshotStore:
    return SnapshotStore(engine)


@pytest.fixture
def riot() -> FakeRiot:
    return FakeRiot()


@pytest.fixture
def client(riot) -> RiotClient:
    return make_client(riot)


@pytest.fixture(autouse=True)
def _reset_ladder_logger():
    # CLI entry points configure the package logger; keep caplog working
    yield
    logger = logging.getLogger("ladder")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
