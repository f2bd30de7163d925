from __future__ import annotations

import logging
import os
from typing import Optional

from sqlalchemy import create_engine as _sa_create_engine
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from ladder.core.exceptions import ConfigError

from .constants import SCHEMA, is_valid_schema_name

logger = logging.getLogger(__name__)

Base = declarative_base()


def _build_url_from_env() -> str | None:
    """Construct a Postgres URL from component env vars.

    Recognized variables (LADDER_DB_* preferred, falls back to POSTGRES_*):
      - HOST, PORT (default 5432)
      - NAME (database name; default 'ladder')
      - USER, PASSWORD
      - SSLMODE (optional)
    """
    host = os.getenv("LADDER_DB_HOST") or os.getenv("POSTGRES_HOST")
    user = os.getenv("LADDER_DB_USER") or os.getenv("POSTGRES_USER")
    if not host or not user:
        return None
    port = os.getenv("LADDER_DB_PORT") or os.getenv("POSTGRES_PORT") or "5432"
    name = os.getenv("LADDER_DB_NAME") or os.getenv("POSTGRES_DB") or "ladder"
    password = (
        os.getenv("LADDER_DB_PASSWORD") or os.getenv("POSTGRES_PASSWORD") or ""
    )
    sslmode = os.getenv("LADDER_DB_SSLMODE") or os.getenv("POSTGRES_SSLMODE")

    auth = f"{user}:{password}" if password != "" else f"{user}"
    url = f"postgresql://{auth}@{host}:{port}/{name}"
    if sslmode:
        url = f"{url}?sslmode={sslmode}"
    return url


def resolve_database_url(url: Optional[str] = None) -> str:
    """Resolve the database URL.

    Resolution order:
    - explicit ``url`` arg
    - env ``LADDER_DATABASE_URL``
    - env ``DATABASE_URL``
    - component env vars (see ``_build_url_from_env``)
    """
    database_url = (
        url
        or os.getenv("LADDER_DATABASE_URL")
        or os.getenv("DATABASE_URL")
        or _build_url_from_env()
    )
    if not database_url:
        raise ConfigError(
            "No database URL provided. Set LADDER_DATABASE_URL or DATABASE_URL, "
            "or provide component env vars (LADDER_DB_HOST/USER/[PASSWORD]/[NAME]/[PORT]/[SSLMODE])."
        )
    return database_url


def create_engine(
    url: Optional[str] = None, *, echo: bool = False, schema: Optional[str] = None
) -> Engine:
    """Create a SQLAlchemy engine.

    SQLite has no schemas, so for ``sqlite`` URLs the ladder schema is
    translated away; in-memory SQLite shares one connection across threads.
    For PostgreSQL, ``schema`` places the tables in a schema other than
    ``LADDER_DB_SCHEMA``.
    """
    database_url = resolve_database_url(url)
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        engine = _sa_create_engine(database_url, echo=echo, **kwargs)
        return engine.execution_options(schema_translate_map={SCHEMA: None})

    engine = _sa_create_engine(database_url, echo=echo, pool_pre_ping=True)
    if schema and schema != SCHEMA:
        if not is_valid_schema_name(schema):
            raise ConfigError(f"Invalid schema name: {schema!r}")
        engine = engine.execution_options(schema_translate_map={SCHEMA: schema})
    return engine


def target_schema(engine: Engine) -> Optional[str]:
    """Schema the ladder tables live in for this engine (None on SQLite)."""
    translate = engine.get_execution_options().get("schema_translate_map") or {}
    return translate.get(SCHEMA, SCHEMA)


def ensure_schema(engine: Engine) -> None:
    """Create the ladder schema if it does not exist (idempotent)."""
    schema = target_schema(engine)
    if engine.dialect.name != "postgresql" or schema is None:
        return
    try:
        with engine.begin() as conn:
            conn.execute(text(f"CREATE SCHEMA IF NOT EXISTS {schema}"))
    except SQLAlchemyError as e:
        # App users may lack CREATE on the database; tables may still exist
        logger.warning(f"Could not create schema {schema}: {e}")


def create_all(engine: Engine) -> None:
    """Create all ladder tables (idempotent)."""
    from . import models  # noqa: F401 - ensure models are registered

    ensure_schema(engine)
    Base.metadata.create_all(engine)
