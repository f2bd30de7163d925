"""Wall-clock helpers; timestamps are epoch milliseconds throughout."""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Clock:
    """Clock abstraction for timestamping persisted rows.

    Allows injection of a fixed time for testing.
    """

    fixed_ms: int | None = None

    def now_ms(self) -> int:
        return self.fixed_ms if self.fixed_ms is not None else now_ms()

    def advance(self, ms: int) -> None:
        """Move a fixed clock forward; no-op for the wall clock."""
        if self.fixed_ms is not None:
            self.fixed_ms += ms


def ms_to_iso(value: int | None) -> str | None:
    if value is None:
        return None
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc).isoformat()
