"""Call sinks (destinations for exported call rows)."""

from __future__ import annotations

import threading
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

import duckdb

from .config import DEFAULT_TABLE, CallSpyConfig
from .models import CallRow


class CallSink(Protocol):
    """A synchronous sink for exported call rows."""

    def write(self, row: CallRow) -> None:
        """Persist a single row."""

    def close(self) -> None:
        """Close any underlying resources."""


class InMemoryCallSink:
    """In-memory sink for tests and local debugging."""

    def __init__(self) -> None:
        """Create an empty in-memory sink."""
        self._lock = threading.Lock()
        self._rows: list[CallRow] = []

    def write(self, row: CallRow) -> None:
        """Append a row to the in-memory list (thread-safe)."""
        with self._lock:
            self._rows.append(row)

    def close(self) -> None:
        """Nothing to release; rows stay readable via `snapshot()`."""

    def snapshot(self) -> Sequence[CallRow]:
        """Return a point-in-time copy of all written rows."""
        with self._lock:
            return list(self._rows)


class DuckDBCallSink:
    """DuckDB sink for inspecting calls after a test session."""

    def __init__(self, *, path: str | Path, table: str = DEFAULT_TABLE) -> None:
        """Create (or open) a DuckDB-backed sink at the given path."""
        self._path = Path(path)
        self._table = table
        self._lock = threading.Lock()
        self._conn = duckdb.connect(str(self._path))
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        """Create the backing table if it does not exist yet."""
        create_sql = f"""
        create table if not exists {self._table} (
          logged_at timestamptz not null,
          spy_name varchar not null,
          call_index integer not null,
          kind varchar not null,
          receiver_repr varchar not null,
          arguments_repr varchar not null,
          keywords_repr varchar not null,
          outcome_repr varchar not null,
          error_type varchar
        )
        """
        with self._lock:
            self._conn.execute(create_sql)

    def write(self, row: CallRow) -> None:
        """Insert a single row into DuckDB."""
        insert_sql = f"""
        insert into {self._table}
        (logged_at, spy_name, call_index, kind, receiver_repr, arguments_repr, keywords_repr, outcome_repr, error_type)
        values (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """
        with self._lock:
            self._conn.execute(
                insert_sql,
                [
                    row.logged_at,
                    row.spy_name,
                    row.index,
                    row.kind,
                    row.receiver_repr,
                    row.arguments_repr,
                    row.keywords_repr,
                    row.outcome_repr,
                    row.error_type,
                ],
            )

    def close(self) -> None:
        """Close the underlying DuckDB connection."""
        with self._lock:
            self._conn.close()


def open_sink(config: CallSpyConfig) -> CallSink:
    """Open the sink described by `config` (DuckDB when a path is set, else in-memory)."""
    if config.duckdb_path is not None:
        return DuckDBCallSink(path=config.duckdb_path, table=config.table)
    return InMemoryCallSink()
