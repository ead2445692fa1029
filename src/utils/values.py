"""
Value Text Utility for stream-diff

Canonical textual form of record values. Type inference, pattern detection,
key extraction and field comparison all work on this form so that a value
read as a number from one source and as a string from another compare alike.
"""

import json
from typing import Any, Optional


def _whole_floats_as_int(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, dict):
        return {k: _whole_floats_as_int(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_whole_floats_as_int(v) for v in value]
    return value


def to_text(value: Any) -> Optional[str]:
    """
    Render a record value as canonical text.

    Whole-number floats render like integers, so 10.0 read from one source
    and 10 read from another produce the same text.

    Args:
        value: Any value found in a record

    Returns:
        None for null, "true"/"false" for booleans, compact sorted JSON
        for nested records and sequences, str() for everything else
    """
    if value is None:
        return None

    if isinstance(value, bool):
        return "true" if value else "false"

    if isinstance(value, str):
        return value

    if isinstance(value, (dict, list, tuple)):
        return json.dumps(_whole_floats_as_int(value), sort_keys=True, separators=(",", ":"), default=str)

    return str(_whole_floats_as_int(value))
