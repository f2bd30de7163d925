"""
One-shot match backfill for the roster.

Fills the match cache with each player's most recent queue matches and
writes any participation rows that are missing for matches another
player's sync already cached. Safe to re-run: nothing already cached is
fetched again and every write is an upsert.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from tqdm import tqdm

from ladder.core.config import RosterEntry
from ladder.core.constants import DEFAULT_BACKFILL_COUNT
from ladder.core.exceptions import UpstreamError
from ladder.core.time import Clock
from ladder.sql.store import SnapshotStore
from ladder.sync.planner import select_unknown_matches
from ladder.sync.reconcile import Reconciler
from ladder.upstream.riot import RiotClient

logger = logging.getLogger(__name__)


@dataclass
class BackfillEntry:
    player: str
    puuid: Optional[str] = None
    listed: int = 0
    fetched: int = 0
    repaired: int = 0
    failed: int = 0
    error: Optional[str] = None


def backfill_matches(
    client: RiotClient,
    store: SnapshotStore,
    roster: Iterable[RosterEntry],
    count: int = DEFAULT_BACKFILL_COUNT,
    *,
    clock: Clock | None = None,
    progress: bool = True,
) -> list[BackfillEntry]:
    """Backfill the last ``count`` queue matches for every roster entry."""
    reconciler = Reconciler(store, clock)
    roster = list(roster)
    tracked = store.tracked_puuids()
    log: list[BackfillEntry] = []

    for seed in tqdm(roster, desc="Backfilling players", disable=not progress):
        entry = BackfillEntry(player=seed.riot_id)
        log.append(entry)
        try:
            puuid = seed.puuid
            if puuid is None:
                row = store.find_player(seed.name, seed.tag)
                puuid = row["puuid"] if row else client.resolve_account(seed.name, seed.tag).puuid
            entry.puuid = puuid
            tracked.add(puuid)

            candidates = client.list_match_ids(puuid, count)
        except UpstreamError as e:
            logger.warning(f"[backfill] {seed.riot_id}: {e}")
            entry.error = str(e)
            continue

        entry.listed = len(candidates)
        known = store.known_match_ids(candidates)

        failed = []
        for match_id in select_unknown_matches(candidates, known):
            try:
                match = client.get_match(match_id)
            except (UpstreamError, ValueError) as e:
                logger.warning(f"[backfill] match {match_id}: {e}")
                entry.failed += 1
                failed.append(match_id)
                continue
            reconciler.store_match(match, tracked)
            entry.fetched += 1
        if failed:
            store.add_pending_matches(puuid, failed, reconciler.clock.now_ms())

        for match_id, cached in store.get_matches(known).items():
            if store.has_player_match(puuid, match_id):
                continue
            if reconciler.repair_participation(puuid, cached):
                entry.repaired += 1

        logger.info(
            f"[backfill] {seed.riot_id}: listed={entry.listed} fetched={entry.fetched} "
            f"repaired={entry.repaired} failed={entry.failed}"
        )

    return log
