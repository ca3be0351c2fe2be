"""Configuration loading and validation.

This module is responsible for:

- Loading `.env` into the process environment (without overriding existing vars).
- Converting `CALLSPY_*` environment variables into a typed Pydantic model.
- Validating values and providing actionable error messages.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import TypeVar

import dotenv
from pydantic import BaseModel, Field, field_validator

_T = TypeVar("_T", int, float)

DEFAULT_TABLE = "spy_calls"
DEFAULT_REPR_LIMIT = 200
MIN_REPR_LIMIT = 8

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _get_optional_env(name: str) -> str | None:
    """Read an env var, treating empty values as unset."""
    value = os.getenv(name, "").strip()
    return value or None


def _get_env_number(name: str, default: _T, cast: type[_T]) -> _T:
    """Read an int/float env var with a default."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a {cast.__name__}. Got: {raw!r}") from exc


class CallSpyConfig(BaseModel):
    """Configuration for exporting recorded calls."""

    duckdb_path: Path | None = Field(default=None, description="DuckDB file for exported calls")
    table: str = Field(default=DEFAULT_TABLE, description="Table that receives exported calls")
    repr_limit: int = Field(default=DEFAULT_REPR_LIMIT, ge=MIN_REPR_LIMIT, description="Max length of stored reprs")

    @field_validator("table")
    def validate_table(cls, v: str) -> str:
        """Validate the table name is a plain SQL identifier."""
        if not _IDENTIFIER.match(v):
            raise ValueError(
                f"CALLSPY_DUCKDB_TABLE must be a plain identifier (letters, digits, underscores). Got: {v!r}"
            )
        return v


def load_config() -> CallSpyConfig:
    """Load callspy configuration from environment variables.

    Notes:
    - Calls `dotenv.load_dotenv()` so local `.env` values are visible to the process.
    - Raises `ValueError` when a variable is present but malformed.
    """
    dotenv.load_dotenv()

    path = _get_optional_env("CALLSPY_DUCKDB_PATH")
    return CallSpyConfig(
        duckdb_path=Path(path) if path else None,
        table=_get_optional_env("CALLSPY_DUCKDB_TABLE") or DEFAULT_TABLE,
        repr_limit=_get_env_number("CALLSPY_REPR_LIMIT", DEFAULT_REPR_LIMIT, int),
    )
