"""Function-call recording wrappers ("spies") for unit tests.

This package provides:
- `spy()`: wrap an optional behavior in a callable that records every invocation.
- Immutable call records (returned or thrown) with receiver, arguments and outcome.
- Derived views over the log (first/last call, first/last returned or thrown call).
- Export of recorded calls to a sink (in-memory or DuckDB) for post-run inspection.
"""

from .config import CallSpyConfig, load_config
from .models import Call, CallRow, ReturnedCall, ThrownCall
from .recorder import BoundSpy, CallLog, Spy, spy
from .sinks import CallSink, DuckDBCallSink, InMemoryCallSink, open_sink

__all__ = [
    "BoundSpy",
    "Call",
    "CallLog",
    "CallRow",
    "CallSink",
    "CallSpyConfig",
    "DuckDBCallSink",
    "InMemoryCallSink",
    "ReturnedCall",
    "Spy",
    "ThrownCall",
    "load_config",
    "open_sink",
    "spy",
]
