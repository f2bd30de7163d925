"""
Configuration constants for rank scoring, upstream access and snapshot sync.

This module centralizes the default parameters used by the scorer, the
upstream gateway and the sync engine so they stay consistent and are easy
to tune.
"""

# =============================================================================
# Rank Scoring
# =============================================================================

# Tier enumeration, lowest first
TIERS: tuple[str, ...] = (
    "IRON",
    "BRONZE",
    "SILVER",
    "GOLD",
    "PLATINUM",
    "EMERALD",
    "DIAMOND",
    "MASTER",
    "GRANDMASTER",
    "CHALLENGER",
)
TIER_ORDER: dict[str, int] = {tier: i for i, tier in enumerate(TIERS)}

# Tiers without divisions; upstream still reports "I" for them
APEX_TIERS: frozenset[str] = frozenset({"MASTER", "GRANDMASTER", "CHALLENGER"})

# Division enumeration, lowest first
DIVISIONS: tuple[str, ...] = ("IV", "III", "II", "I")
DIVISION_ORDER: dict[str, int] = {div: i for i, div in enumerate(DIVISIONS)}

TIER_SCALE: int = 10_000
DIVISION_SCALE: int = 1_000

UNRANKED_SCORE: int = -1
UNRANKED_TIER_NAME = "UNRANKED"

# =============================================================================
# Upstream (Riot API)
# =============================================================================

RIOT_ROUTING_URL = "https://europe.api.riotgames.com"
RIOT_PLATFORM_URL = "https://euw1.api.riotgames.com"
RIOT_TOKEN_HEADER = "X-Riot-Token"

# Ranked solo/duo
DEFAULT_QUEUE_TYPE = "RANKED_SOLO_5x5"
DEFAULT_QUEUE_ID = 420

# Request defaults
DEFAULT_TIMEOUT = 12.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_FACTOR = 2.0
DEFAULT_CALL_DELAY_SECONDS = 1.3

# =============================================================================
# Sync Engine
# =============================================================================

DEFAULT_FRESHNESS_MINUTES: float = 30.0
DEFAULT_WAIT_TIMEOUT_SECONDS: float = 60.0
DEFAULT_MATCH_LIST_MAX: int = 20
DEFAULT_RECENT_MATCH_LIMIT: int = 10
DEFAULT_BACKFILL_COUNT: int = 25
# Detail fetches of a listed match are retried this many times at most
DEFAULT_PENDING_MATCH_ATTEMPTS: int = 5

# =============================================================================
# Reports
# =============================================================================

DEFAULT_WEEKLY_DAYS: int = 7
# Standings are compared with the latest history row inside this window
# (minutes before now, oldest bound first).
DEFAULT_STANDINGS_WINDOW_MINUTES: tuple[int, int] = (75, 45)

MS_PER_MINUTE: int = 60_000
MS_PER_DAY: int = 86_400_000
