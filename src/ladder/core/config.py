"""Configuration dataclasses and loaders for the sync engine."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ladder.core.constants import (
    DEFAULT_BACKOFF_FACTOR,
    DEFAULT_CALL_DELAY_SECONDS,
    DEFAULT_FRESHNESS_MINUTES,
    DEFAULT_MATCH_LIST_MAX,
    DEFAULT_MAX_RETRIES,
    DEFAULT_PENDING_MATCH_ATTEMPTS,
    DEFAULT_QUEUE_ID,
    DEFAULT_QUEUE_TYPE,
    DEFAULT_RECENT_MATCH_LIMIT,
    DEFAULT_TIMEOUT,
    DEFAULT_WAIT_TIMEOUT_SECONDS,
    RIOT_PLATFORM_URL,
    RIOT_ROUTING_URL,
)
from ladder.core.exceptions import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RosterEntry:
    """One tracked identity as configured: display name and tag line.

    ``puuid`` may be given when the identifier is already known, which lets
    the planner skip identity resolution from the very first cycle.
    """

    name: str
    tag: str
    puuid: Optional[str] = None

    @property
    def riot_id(self) -> str:
        return f"{self.name}#{self.tag}"


@dataclass
class SyncConfig:
    """Settings for one engine instance."""

    roster: list[RosterEntry] = field(default_factory=list)

    # Build coordinator
    freshness_minutes: float = DEFAULT_FRESHNESS_MINUTES
    wait_timeout_seconds: float = DEFAULT_WAIT_TIMEOUT_SECONDS

    # Upstream
    routing_url: str = RIOT_ROUTING_URL
    platform_url: str = RIOT_PLATFORM_URL
    call_delay_seconds: float = DEFAULT_CALL_DELAY_SECONDS
    request_timeout: float = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR
    queue_type: str = DEFAULT_QUEUE_TYPE
    queue_id: int = DEFAULT_QUEUE_ID

    # Matches
    match_list_max: int = DEFAULT_MATCH_LIST_MAX
    recent_match_limit: int = DEFAULT_RECENT_MATCH_LIMIT
    pending_match_attempts: int = DEFAULT_PENDING_MATCH_ATTEMPTS

    @property
    def freshness_ms(self) -> int:
        return int(self.freshness_minutes * 60_000)

    @classmethod
    def from_env(cls, roster: Optional[list[RosterEntry]] = None) -> SyncConfig:
        """Build a config from ``LADDER_*`` environment variables."""
        config = cls(roster=list(roster or []))
        float_envs = {
            "LADDER_FRESHNESS_MINUTES": "freshness_minutes",
            "LADDER_WAIT_TIMEOUT_SECONDS": "wait_timeout_seconds",
            "LADDER_CALL_DELAY_SECONDS": "call_delay_seconds",
            "LADDER_REQUEST_TIMEOUT": "request_timeout",
        }
        int_envs = {
            "LADDER_MATCH_LIST_MAX": "match_list_max",
            "LADDER_RECENT_MATCH_LIMIT": "recent_match_limit",
            "LADDER_PENDING_MATCH_ATTEMPTS": "pending_match_attempts",
            "LADDER_QUEUE_ID": "queue_id",
        }
        str_envs = {
            "LADDER_ROUTING_URL": "routing_url",
            "LADDER_PLATFORM_URL": "platform_url",
            "LADDER_QUEUE_TYPE": "queue_type",
        }
        for env, attr in float_envs.items():
            raw = os.getenv(env)
            if raw:
                setattr(config, attr, _parse_number(env, raw, float))
        for env, attr in int_envs.items():
            raw = os.getenv(env)
            if raw:
                setattr(config, attr, _parse_number(env, raw, int))
        for env, attr in str_envs.items():
            raw = os.getenv(env)
            if raw:
                setattr(config, attr, raw.strip())
        return config


def _parse_number(name: str, raw: str, kind):
    try:
        return kind(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e


def load_roster(path: str | Path) -> list[RosterEntry]:
    """Load the roster from a JSON file.

    Accepts either a list of ``{"name", "tag", ["puuid"]}`` objects or an
    object with a ``"players"`` list of them. Order is preserved; it is the
    order entities are processed in each cycle.
    """
    roster_path = Path(path)
    try:
        with open(roster_path, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Could not read roster {roster_path}: {e}") from e

    if isinstance(payload, dict):
        payload = payload.get("players", [])
    if not isinstance(payload, list):
        raise ConfigError(f"Roster {roster_path} must be a list of players")

    roster: list[RosterEntry] = []
    seen: set[tuple[str, str]] = set()
    for item in payload:
        if not isinstance(item, dict) or not item.get("name") or not item.get("tag"):
            raise ConfigError(f"Invalid roster entry in {roster_path}: {item!r}")
        key = (item["name"].lower(), item["tag"].lower())
        if key in seen:
            logger.warning("Duplicate roster entry %s#%s ignored", *key)
            continue
        seen.add(key)
        roster.append(
            RosterEntry(name=item["name"], tag=item["tag"], puuid=item.get("puuid"))
        )
    logger.info(f"Loaded roster of {len(roster)} players from {roster_path}")
    return roster


def load_api_key(env_name: str = "RIOT_API_KEY") -> str:
    """Return the upstream credential from the environment or a local .env."""
    key = os.environ.get(env_name)
    if key:
        return key.strip()

    env_path = Path(os.getcwd()) / ".env"
    if env_path.exists():
        with open(env_path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                k, v = line.split("=", 1)
                v = v.strip().strip('"').strip("'")
                if k.strip() == env_name and v:
                    return v

    raise ConfigError(f"{env_name} not set. Set it in environment or .env file.")
