"""Snapshot synchronization: planning, reconciliation, milestones and coordination."""

from __future__ import annotations

from ladder.sync.backfill import BackfillEntry, backfill_matches
from ladder.sync.coordinator import BuildCoordinator, BuildState
from ladder.sync.engine import CycleReport, EntityResult, SyncEngine
from ladder.sync.milestones import (
    MilestoneEvent,
    MilestoneKind,
    detect_overtakes,
    detect_transition,
)
from ladder.sync.planner import FetchPlan, plan_fetch, select_unknown_matches
from ladder.sync.reconcile import EntityUpdate, ReconcileResult, Reconciler
from ladder.sync.snapshot import SnapshotReader, SnapshotResponse

__all__ = [
    # Engine
    "SyncEngine",
    "CycleReport",
    "EntityResult",
    # Coordination
    "BuildCoordinator",
    "BuildState",
    "SnapshotReader",
    "SnapshotResponse",
    # Planning
    "FetchPlan",
    "plan_fetch",
    "select_unknown_matches",
    # Reconciliation
    "Reconciler",
    "EntityUpdate",
    "ReconcileResult",
    # Milestones
    "MilestoneKind",
    "MilestoneEvent",
    "detect_transition",
    "detect_overtakes",
    # Backfill
    "backfill_matches",
    "BackfillEntry",
]
