from __future__ import annotations

import os
import re

_SCHEMA_RE = re.compile(r"^[a-z_][a-z0-9_]*$")


def is_valid_schema_name(name: str) -> bool:
    # Identifier is interpolated into DDL, so only plain names are accepted
    return bool(_SCHEMA_RE.match(name))


def _default_schema() -> str:
    schema = os.getenv("LADDER_DB_SCHEMA", "ladder").strip().lower() or "ladder"
    if not is_valid_schema_name(schema):
        return "ladder"
    return schema


# Database schema used for ladder tables
SCHEMA: str = _default_schema()
