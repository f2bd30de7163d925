"""Exception hierarchy for the ladder package."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ladder.upstream.api import EndpointSpec


class LadderError(Exception):
    """Base class for all ladder errors."""


class ConfigError(LadderError):
    """Missing credential, unreadable roster or invalid setting."""


class UpstreamError(LadderError):
    """A required upstream call failed (non-2xx, transport error or bad body)."""

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        spec: Optional["EndpointSpec"] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.spec = spec

    @property
    def is_not_found(self) -> bool:
        return self.status == 404


class SnapshotUnavailable(LadderError):
    """No persisted state exists to answer a snapshot request."""
