"""
HTTP gateway to the rate-limited upstream.

All calls go through one ``UpstreamGateway`` which spaces consecutive
requests by a fixed minimum delay and exposes two fetch semantics:

- ``fetch_required``: the result must exist; anything else raises
  ``UpstreamError``.
- ``fetch_optional``: a missing or failed result is a valid outcome and is
  returned as ``None``.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import requests

from ladder.core.constants import (
    DEFAULT_BACKOFF_FACTOR,
    DEFAULT_CALL_DELAY_SECONDS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
    RIOT_TOKEN_HEADER,
)
from ladder.core.exceptions import ConfigError, UpstreamError

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})


@dataclass(frozen=True)
class EndpointSpec:
    """One upstream request: where to send it and how to describe it in logs."""

    base_url: str
    path: str
    params: dict[str, Any] = field(default_factory=dict)
    label: str = ""

    @property
    def url(self) -> str:
        return f"{self.base_url.rstrip('/')}{self.path}"

    def __str__(self) -> str:
        return self.label or self.path


class Throttle:
    """Enforces a minimum delay between consecutive calls."""

    def __init__(
        self,
        min_interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_call: Optional[float] = None
        self._lock = threading.Lock()

    def wait(self) -> None:
        with self._lock:
            if self._last_call is not None:
                remaining = self.min_interval - (self._clock() - self._last_call)
                if remaining > 0:
                    self._sleep(remaining)
            self._last_call = self._clock()


class UpstreamGateway:
    """Throttled, authenticated JSON fetches against the upstream API."""

    def __init__(
        self,
        api_key: str,
        *,
        session: requests.Session | None = None,
        call_delay_seconds: float = DEFAULT_CALL_DELAY_SECONDS,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if not api_key:
            raise ConfigError("An upstream API key is required")
        self.session = session or requests.Session()
        self.session.headers.update(
            {RIOT_TOKEN_HEADER: api_key, "Accept": "application/json"}
        )
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.backoff_factor = backoff_factor
        self.throttle = Throttle(call_delay_seconds, clock=clock, sleep=sleep)
        self._sleep = sleep
        self.call_count = 0

    def fetch_required(self, spec: EndpointSpec) -> Any:
        """Fetch and decode ``spec``.

        Raises:
            UpstreamError: On a non-2xx status (after retries for 429/5xx),
                a transport failure or an undecodable body.
        """
        for attempt in range(self.max_retries):
            response = self._get(spec)
            status = response.status_code
            if 200 <= status < 300:
                try:
                    return response.json()
                except ValueError as e:
                    raise UpstreamError(
                        f"Invalid JSON from {spec}", status=status, spec=spec
                    ) from e

            if status in RETRYABLE_STATUSES and attempt < self.max_retries - 1:
                wait_time = self._retry_after(response, attempt)
                logger.warning(
                    f"{status} from {spec} (attempt {attempt + 1}), "
                    f"retrying in {wait_time:.1f}s"
                )
                self._sleep(wait_time)
                continue

            raise UpstreamError(f"HTTP {status} from {spec}", status=status, spec=spec)

        raise UpstreamError(f"Retries exhausted for {spec}", spec=spec)

    def fetch_optional(self, spec: EndpointSpec) -> Optional[Any]:
        """Fetch ``spec``, returning None when the result is absent or the call fails."""
        try:
            return self.fetch_required(spec)
        except UpstreamError as e:
            if e.is_not_found:
                logger.debug(f"{spec}: not found")
            else:
                logger.info(f"Optional call {spec} failed: {e}")
            return None

    def _get(self, spec: EndpointSpec) -> requests.Response:
        self.throttle.wait()
        self.call_count += 1
        try:
            return self.session.get(
                spec.url, params=spec.params or None, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise UpstreamError(f"Request to {spec} failed: {e}", spec=spec) from e

    def _retry_after(self, response: requests.Response, attempt: int) -> float:
        header = response.headers.get("Retry-After")
        if header:
            try:
                return max(float(header), 0.0)
            except ValueError:
                pass
        return self.backoff_factor ** attempt
