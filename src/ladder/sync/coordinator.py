"""Build coordination: freshness gate and single-flight cycle execution."""

from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from typing import Any, Callable, Optional

from ladder.core.exceptions import SnapshotUnavailable
from ladder.core.time import Clock, ms_to_iso
from ladder.sync.engine import CycleReport, SyncEngine
from ladder.sync.snapshot import SnapshotReader, SnapshotResponse

logger = logging.getLogger(__name__)


class BuildState(Enum):
    IDLE = "idle"
    RUNNING = "running"


class BuildCoordinator:
    """
    Serves snapshot requests and runs at most one sync cycle at a time.

    Handles:
    - Freshness checks against the last persisted update
    - A single in-flight cycle; concurrent callers wait, then read
    - Fallback to persisted state when a cycle fails
    """

    def __init__(
        self,
        engine: SyncEngine,
        reader: SnapshotReader,
        *,
        freshness_minutes: Optional[float] = None,
        wait_timeout_seconds: Optional[float] = None,
        clock: Clock | None = None,
    ):
        """
        Initialize the coordinator.

        Args:
            engine: Sync engine that runs one cycle
            reader: Snapshot reader over the same store
            freshness_minutes: Serve persisted state if updated within this window
                (defaults to the engine's config)
            wait_timeout_seconds: How long a concurrent caller waits for the
                running cycle (defaults to the engine's config)
            clock: Clock used for freshness checks
        """
        self.engine = engine
        self.reader = reader
        cfg = engine.config
        self.freshness_minutes = (
            cfg.freshness_minutes if freshness_minutes is None else freshness_minutes
        )
        self.wait_timeout_seconds = (
            cfg.wait_timeout_seconds
            if wait_timeout_seconds is None
            else wait_timeout_seconds
        )
        self.clock = clock or engine.clock

        self._cond = threading.Condition()
        self._state = BuildState.IDLE
        self.last_report: CycleReport | None = None
        self.last_error: str | None = None
        self.cycles_run = 0

    @property
    def state(self) -> BuildState:
        with self._cond:
            return self._state

    def is_fresh(self) -> bool:
        latest = self.reader.store.latest_update_ms()
        if latest is None:
            return False
        age_ms = self.clock.now_ms() - latest
        return age_ms < self.freshness_minutes * 60_000

    def trigger(self, force: bool = False) -> SnapshotResponse:
        """Return a snapshot, running a cycle if the persisted one is stale."""
        if not force and self.is_fresh():
            logger.debug("Snapshot fresh; serving persisted state")
            return self.reader.compose(cached=True)

        run = concurrent = False
        with self._cond:
            if self._state is BuildState.RUNNING:
                self._wait_for_running()
                concurrent = True
            elif force or not self.is_fresh():
                # Rechecked under the lock; a cycle may have finished since
                self._state = BuildState.RUNNING
                run = True

        if not run:
            return self.reader.compose(cached=True, concurrent=concurrent)

        try:
            return self._run_cycle()
        finally:
            with self._cond:
                self._state = BuildState.IDLE
                self._cond.notify_all()

    def _wait_for_running(self) -> None:
        # Called with the condition held
        logger.info("Cycle already running; waiting for it to finish")
        finished = self._cond.wait_for(
            lambda: self._state is BuildState.IDLE,
            timeout=self.wait_timeout_seconds,
        )
        if not finished:
            logger.warning(
                f"Running cycle did not finish within {self.wait_timeout_seconds}s"
            )

    def _run_cycle(self) -> SnapshotResponse:
        try:
            report = self.engine.run_cycle()
        except Exception as e:
            logger.error(f"Sync cycle failed: {e}", exc_info=True)
            self.last_error = str(e)
            if self.reader.store.latest_update_ms() is None:
                raise SnapshotUnavailable(
                    "Sync cycle failed and no persisted snapshot exists"
                ) from e
            return self.reader.compose(cached=True, stale=True)

        self.last_report = report
        self.last_error = None
        self.cycles_run += 1
        return self.reader.compose(
            failed=[r.seed for r in report.failures],
            failed_puuids=[r.puuid for r in report.failures if r.puuid],
            cached=False,
        )

    def run_continuous(
        self,
        interval_minutes: float = 30,
        max_cycles: int | None = None,
        force: bool = True,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Trigger cycles on a fixed interval.

        Args:
            interval_minutes: Minutes between cycle starts
            max_cycles: Maximum cycles to run (None for infinite)
            force: Bypass the freshness gate on every trigger
            sleep: Sleep function (injectable for tests)
        """
        logger.info(
            f"Starting continuous sync with {interval_minutes} minute intervals"
        )

        cycles = 0
        while max_cycles is None or cycles < max_cycles:
            try:
                cycle_start = time.time()
                response = self.trigger(force=force)
                cycle_duration = time.time() - cycle_start

                logger.info(
                    f"Cycle {cycles + 1} completed in {cycle_duration:.1f}s: "
                    f"players={len(response.players)} cached={response.cached} "
                    f"stale={response.stale}"
                )
                cycles += 1

                if max_cycles is None or cycles < max_cycles:
                    sleep_seconds = max(0, interval_minutes * 60 - cycle_duration)
                    if sleep_seconds > 0:
                        logger.info(f"Sleeping {sleep_seconds:.0f}s until next cycle")
                        sleep(sleep_seconds)

            except KeyboardInterrupt:
                logger.info("Interrupted by user")
                break
            except Exception as e:
                logger.error(f"Error in cycle {cycles + 1}: {e}", exc_info=True)
                cycles += 1
                if max_cycles is None or cycles < max_cycles:
                    sleep(60)

        logger.info(f"Continuous sync stopped after {cycles} cycles")

    def status(self) -> dict[str, Any]:
        """
        Get current coordinator status.

        Returns:
            Status information
        """
        latest = self.reader.store.latest_update_ms()
        report = self.last_report
        return {
            "state": self.state.value,
            "fresh": self.is_fresh(),
            "updated_at_ms": latest,
            "updated_at": ms_to_iso(latest),
            "cycles_run": self.cycles_run,
            "last_error": self.last_error,
            "last_cycle": report.summary() if report else None,
            "roster_size": len(self.engine.config.roster),
        }
