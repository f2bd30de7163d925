"""Core components: scoring, configuration and ambient helpers."""

from ladder.core.config import (
    RosterEntry,
    SyncConfig,
    load_api_key,
    load_roster,
)
from ladder.core.exceptions import (
    ConfigError,
    LadderError,
    SnapshotUnavailable,
    UpstreamError,
)
from ladder.core.logging import get_logger, log_timing, setup_logging
from ladder.core.scoring import is_ranked, score, tier_bucket, tier_name
from ladder.core.time import Clock, ms_to_iso, now_ms

__all__ = [
    # Scoring
    "score",
    "is_ranked",
    "tier_bucket",
    "tier_name",
    # Config
    "RosterEntry",
    "SyncConfig",
    "load_roster",
    "load_api_key",
    # Errors
    "LadderError",
    "ConfigError",
    "UpstreamError",
    "SnapshotUnavailable",
    # Logging
    "setup_logging",
    "get_logger",
    "log_timing",
    # Time
    "Clock",
    "now_ms",
    "ms_to_iso",
]
