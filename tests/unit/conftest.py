from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _isolated_callspy_env(monkeypatch: pytest.MonkeyPatch):
    """Keep `CALLSPY_*` variables from the developer's shell out of unit tests."""
    for name in ("CALLSPY_DUCKDB_PATH", "CALLSPY_DUCKDB_TABLE", "CALLSPY_REPR_LIMIT"):
        monkeypatch.delenv(name, raising=False)
    yield
