"""
Run Correlation IDs for stream-diff

Every log line written during one schema or compare run carries the same
ID, so interleaved output from concurrent runs can be told apart.

Usage:
    with CorrelationContext() as run_id:
        StreamComparator(source1, source2, periodic, "id").compare()
"""

import logging
import uuid
from contextvars import ContextVar, Token
from typing import Optional

_run_id: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)


def get_correlation_id() -> Optional[str]:
    return _run_id.get()


class CorrelationContext:
    """Scope a run ID to a block; an ID is generated when none is given."""

    def __init__(self, correlation_id: Optional[str] = None):
        if correlation_id is not None and (not isinstance(correlation_id, str) or not correlation_id):
            raise ValueError("Correlation ID must be a non-empty string")

        self.correlation_id = correlation_id or str(uuid.uuid4())
        self._token: Optional[Token] = None

    def __enter__(self) -> str:
        self._token = _run_id.set(self.correlation_id)
        return self.correlation_id

    def __exit__(self, exc_type, exc_val, exc_tb):
        _run_id.reset(self._token)


def correlation_id_filter(record: logging.LogRecord) -> bool:
    """Stamp the current run ID (or "N/A" outside a run) on a log record."""
    record.correlation_id = get_correlation_id() or "N/A"
    return True
