"""Solo queue ladder: snapshot synchronization and milestone detection."""

from __future__ import annotations

from ladder.core import RosterEntry, SyncConfig, score
from ladder.core.constants import (
    DEFAULT_FRESHNESS_MINUTES,
    DEFAULT_MATCH_LIST_MAX,
    DEFAULT_RECENT_MATCH_LIMIT,
)
from ladder.sync import BuildCoordinator, SnapshotReader, SyncEngine
from ladder.upstream import RiotClient, UpstreamGateway

__version__ = "0.1.0"

__all__ = [
    # Core API
    "score",
    "RosterEntry",
    "SyncConfig",
    # Sync
    "SyncEngine",
    "BuildCoordinator",
    "SnapshotReader",
    # Upstream
    "UpstreamGateway",
    "RiotClient",
    # Essential constants
    "DEFAULT_FRESHNESS_MINUTES",
    "DEFAULT_MATCH_LIST_MAX",
    "DEFAULT_RECENT_MATCH_LIMIT",
    # Version
    "__version__",
]
