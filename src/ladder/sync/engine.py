"""One synchronization cycle over the configured roster."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from ladder.core.config import RosterEntry, SyncConfig
from ladder.core.exceptions import UpstreamError
from ladder.core.logging import log_timing
from ladder.core.time import Clock
from ladder.sql.store import SnapshotStore
from ladder.sync.milestones import MilestoneEvent, detect_overtakes, detect_transition
from ladder.sync.planner import FetchPlan, plan_fetch, select_unknown_matches
from ladder.sync.reconcile import EntityUpdate, Reconciler
from ladder.upstream.riot import RiotClient

logger = logging.getLogger(__name__)


@dataclass
class EntityResult:
    """Outcome of syncing one roster entry."""

    seed: RosterEntry
    puuid: Optional[str] = None
    pre_score: Optional[int] = None
    post_score: Optional[int] = None
    history_appended: bool = False
    match_list_fetched: bool = False
    matches_fetched: int = 0
    match_failures: int = 0
    participations_written: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class CycleReport:
    started_at_ms: int
    finished_at_ms: Optional[int] = None
    results: list[EntityResult] = field(default_factory=list)
    milestones: list[MilestoneEvent] = field(default_factory=list)
    upstream_calls: int = 0

    @property
    def failures(self) -> list[EntityResult]:
        return [r for r in self.results if not r.ok]

    def summary(self) -> dict[str, Any]:
        return {
            "synced": sum(1 for r in self.results if r.ok),
            "failed": len(self.failures),
            "history_appended": sum(1 for r in self.results if r.history_appended),
            "matches_fetched": sum(r.matches_fetched for r in self.results),
            "match_failures": sum(r.match_failures for r in self.results),
            "milestones": len(self.milestones),
            "upstream_calls": self.upstream_calls,
        }


class SyncEngine:
    """
    Runs synchronization cycles.

    Entities are processed one at a time in roster order because the
    upstream rate budget, not CPU, is the constraint. A failure for one
    entity is recorded in the report and leaves its persisted row untouched;
    store failures abort the cycle.
    """

    def __init__(
        self,
        client: RiotClient,
        store: SnapshotStore,
        config: SyncConfig,
        clock: Clock | None = None,
    ) -> None:
        self.client = client
        self.store = store
        self.config = config
        self.clock = clock or Clock()
        self.reconciler = Reconciler(store, self.clock)

    def run_cycle(self) -> CycleReport:
        report = CycleReport(started_at_ms=self.clock.now_ms())
        calls_before = self.client.gateway.call_count

        with log_timing(logger, f"sync cycle over {len(self.config.roster)} players"):
            # Captured once, before any entity is touched
            pre_scores = self.store.load_scores()
            post_scores = dict(pre_scores)

            for seed in self.config.roster:
                result = self._sync_entity(seed, report)
                report.results.append(result)
                if result.ok:
                    post_scores[result.puuid] = result.post_score

            overtakes = detect_overtakes(pre_scores, post_scores)
            self._record_milestones(overtakes, report)

        report.finished_at_ms = self.clock.now_ms()
        report.upstream_calls = self.client.gateway.call_count - calls_before
        logger.info(f"Cycle complete: {report.summary()}")
        return report

    def _previous_row(self, seed: RosterEntry) -> Optional[dict[str, Any]]:
        if seed.puuid:
            return self.store.get_player(seed.puuid)
        return self.store.find_player(seed.name, seed.tag)

    def _sync_entity(self, seed: RosterEntry, report: CycleReport) -> EntityResult:
        result = EntityResult(seed=seed)
        try:
            previous = self._previous_row(seed)
            plan = plan_fetch(seed, previous, match_list_max=self.config.match_list_max)

            game_name, tag_line = seed.name, seed.tag
            if previous is not None:
                game_name, tag_line = previous["game_name"], previous["tag_line"]

            puuid = plan.puuid
            if plan.resolve_identity:
                account = self.client.resolve_account(seed.name, seed.tag)
                puuid = account.puuid
                game_name, tag_line = account.game_name, account.tag_line
                if previous is None:
                    # Known under an earlier riot id
                    previous = self.store.get_player(puuid)
                    plan = plan_fetch(
                        seed, previous, match_list_max=self.config.match_list_max
                    )
            result.puuid = puuid
            plan = plan.with_pending(
                self.store.pending_match_ids(puuid, self.config.pending_match_attempts)
            )

            profile = self.client.get_profile(puuid)
            rank = self.client.get_rank_entries(puuid)
            in_game = self.client.get_live_game(puuid)
            update = EntityUpdate(
                puuid=puuid,
                game_name=game_name,
                tag_line=tag_line,
                profile=profile,
                rank=rank,
                in_game=in_game,
            )

            if plan.needs_match_list(update.wins, update.losses):
                self._sync_matches(plan, puuid, result)
            elif plan.retry_pending(update.wins, update.losses):
                self._fetch_details(plan.pending_match_ids, puuid, result)

            reconciled = self.reconciler.reconcile_entity(update, previous)
        except (UpstreamError, ValueError) as e:
            logger.warning(f"[sync] {seed.riot_id}: {e}")
            result.error = str(e)
            return result

        result.pre_score = reconciled.pre_score
        result.post_score = reconciled.post_score
        result.history_appended = reconciled.history_appended

        transition = detect_transition(puuid, reconciled.pre_score, reconciled.post_score)
        if transition is not None:
            self._record_milestones([transition], report)
        return result

    def _sync_matches(self, plan: FetchPlan, puuid: str, result: EntityResult) -> None:
        """List recent matches, then resolve them along with any outstanding ids."""
        candidates = self.client.list_match_ids(puuid, plan.match_list_count)
        result.match_list_fetched = True
        self._fetch_details([*candidates, *plan.pending_match_ids], puuid, result)

    def _fetch_details(
        self, match_ids: Iterable[str], puuid: str, result: EntityResult
    ) -> None:
        """Fetch unknown match details and write participation rows.

        Ids whose fetch fails are queued for the next cycle; ids another
        player's sync already cached only get this player's row repaired.
        """
        match_ids = list(dict.fromkeys(match_ids))
        if not match_ids:
            return

        known = self.store.known_match_ids(match_ids)
        unknown = select_unknown_matches(match_ids, known)
        tracked = self.store.tracked_puuids() | {puuid}

        failed = []
        for match_id in unknown:
            try:
                match = self.client.get_match(match_id)
            except (UpstreamError, ValueError) as e:
                logger.warning(f"[sync] match {match_id}: {e}")
                result.match_failures += 1
                failed.append(match_id)
                continue
            result.participations_written += self.reconciler.store_match(match, tracked)
            result.matches_fetched += 1

        if failed:
            self.store.add_pending_matches(puuid, failed, self.clock.now_ms())
        if known:
            self.store.clear_pending_matches(known)

        for cached in self.store.get_matches(known).values():
            if self.reconciler.repair_participation(puuid, cached):
                result.participations_written += 1

    def _record_milestones(
        self, events: list[MilestoneEvent], report: CycleReport
    ) -> None:
        if not events:
            return
        ts = self.clock.now_ms()
        self.store.append_milestones([e.to_row(ts) for e in events])
        report.milestones.extend(events)
        for e in events:
            logger.info(
                f"Milestone {e.kind.value}: actor={e.actor} target={e.target} "
                f"{e.from_tier or ''}->{e.to_tier or ''}"
            )
