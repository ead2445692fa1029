"""
Logging Setup for stream-diff

Human-readable console logging by default, structured JSON lines on request.
Both stamp the current correlation ID on every record.
"""

import json
import logging
from datetime import datetime, timezone

from src.utils.correlation import correlation_id_filter

EXTRA_FIELDS = ("source", "records_processed", "field", "mode", "duration")


class StructuredJSONFormatter(logging.Formatter):
    """JSON formatter with correlation ID support."""

    def format(self, record):
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'correlation_id': getattr(record, 'correlation_id', 'N/A'),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        for name in EXTRA_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def configure_logging(level: str = "INFO", json_output: bool = False) -> logging.Handler:
    """
    Configure the root logger with a single handler.

    Args:
        level: Log level name
        json_output: Emit structured JSON instead of console text

    Returns:
        The installed handler
    """
    handler = logging.StreamHandler()
    handler.addFilter(correlation_id_filter)

    if json_output:
        handler.setFormatter(StructuredJSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            '[%(asctime)s] %(levelname)s [%(correlation_id)s] %(name)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level.upper())

    return handler
