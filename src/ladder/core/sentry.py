from __future__ import annotations

"""
Sentry initialization for the ladder CLIs.

Environment variables (all optional):
- SENTRY_DSN / LADDER_SENTRY_DSN: DSN used to enable Sentry.
- SENTRY_ENV / SENTRY_ENVIRONMENT / ENV: environment name, default development.
- SENTRY_TRACES_SAMPLE_RATE / SENTRY_PROFILES_SAMPLE_RATE: floats in [0,1].
- SENTRY_DEBUG: truthy value (1/true/yes/on) enables SDK debug output.

Usage:
    from ladder.core.sentry import init_sentry
    init_sentry(context="ladder_sync")
"""

import logging
import os
from typing import Any, Iterable, Optional, Sequence
from urllib.parse import urlparse

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

_LOG = logging.getLogger("ladder.core.sentry")

DEFAULT_DSN_ENVS = ("SENTRY_DSN", "LADDER_SENTRY_DSN")


def _parse_float_env(name: str, default: float) -> float:
    """Parse a float env var, clamped into [0.0, 1.0]; `default` if unset or invalid."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        val = float(raw)
    except ValueError:
        _LOG.debug("Invalid float for %s: %r; using default=%s", name, raw, default)
        return default
    return min(max(val, 0.0), 1.0)


def _truthy_env(name: str) -> bool:
    return os.getenv(name, "").lower() in {"1", "true", "yes", "on"}


def _first_env(names: Iterable[str]) -> Optional[str]:
    for n in names:
        v = os.getenv(n)
        if v:
            return v
    return None


def _is_valid_dsn(dsn: str) -> bool:
    u = urlparse(dsn)
    return u.scheme in {"http", "https"} and bool(u.netloc)


def init_sentry(
    *,
    context: str,
    release: Optional[str] = None,
    dsn_envs: Optional[Iterable[str]] = None,
    extra_integrations: Optional[Sequence[Any]] = None,
) -> bool:
    """Initialize Sentry if a valid DSN is configured.

    ERROR-level log records become Sentry events; INFO and above are kept
    as breadcrumbs. Returns True if the SDK was initialized.
    """
    dsn_envs = list(dsn_envs) if dsn_envs is not None else list(DEFAULT_DSN_ENVS)
    dsn = _first_env(dsn_envs)
    if not dsn:
        _LOG.info("Sentry disabled: no DSN configured (checked envs=%s)", dsn_envs)
        return False
    dsn = dsn.strip().strip('"').strip("'")
    if not _is_valid_dsn(dsn):
        _LOG.info("Sentry disabled: DSN appears invalid; check secrets/env")
        return False

    env = (
        os.getenv("SENTRY_ENV")
        or os.getenv("SENTRY_ENVIRONMENT")
        or os.getenv("ENV")
        or "development"
    )
    traces = _parse_float_env("SENTRY_TRACES_SAMPLE_RATE", 0.0)
    profiles = _parse_float_env("SENTRY_PROFILES_SAMPLE_RATE", 0.0)

    integrations = [
        LoggingIntegration(level=logging.INFO, event_level=logging.ERROR)
    ]
    if extra_integrations:
        integrations.extend(extra_integrations)

    sentry_sdk.init(
        dsn=dsn,
        environment=env,
        release=release,
        integrations=integrations,
        traces_sample_rate=traces,
        profiles_sample_rate=profiles,
        debug=_truthy_env("SENTRY_DEBUG"),
    )
    sentry_sdk.set_tag("service", context)
    _LOG.info(
        "Sentry initialized: context=%s env=%s traces=%s profiles=%s",
        context,
        env,
        traces,
        profiles,
    )
    return True


__all__ = ["init_sentry", "_parse_float_env"]
