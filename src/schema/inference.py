"""
Type Inference for stream-diff

Classifies the sampled values of one field path. Numeric and date/time
checks run against each value's canonical text, so a field mixing 7 and "7"
is still numeric.
"""

import logging
import re
from datetime import datetime
from typing import Any, Iterable, Optional

from src.schema.models import FieldType
from src.utils.values import to_text

logger = logging.getLogger(__name__)

# Tried in order; a value is a date/time if any layout parses it.
DATETIME_LAYOUTS = (
    "%Y-%m-%dT%H:%M:%S%z",      # RFC3339
    "%Y-%m-%dT%H:%M:%S.%f%z",   # RFC3339 with fractional seconds
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d",
    "%m/%d/%Y",
)

# RFC3339 allows nanosecond precision; strptime's %f stops at microseconds.
_EXCESS_FRACTION = re.compile(r"(\.\d{6})\d+")

# strptime accepts unpadded fields and "+0200" offsets; the layouts do not.
_DATETIME_SHAPE = re.compile(
    r"\d{4}-\d{2}-\d{2}"
    r"(T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})| \d{2}:\d{2}:\d{2})?"
    r"|\d{2}/\d{2}/\d{4}"
)


def is_numeric_text(text: Optional[str]) -> bool:
    """Return True if text parses as a floating-point number."""
    if not text or text != text.strip() or "_" in text:
        return False

    try:
        float(text)
    except ValueError:
        return False

    return True


def is_datetime_text(text: Optional[str]) -> bool:
    """Return True if text matches one of DATETIME_LAYOUTS."""
    if not text or not _DATETIME_SHAPE.fullmatch(text):
        return False

    candidate = _EXCESS_FRACTION.sub(r"\1", text)
    for layout in DATETIME_LAYOUTS:
        try:
            datetime.strptime(candidate, layout)
            return True
        except ValueError:
            continue

    return False


def infer_type(values: Iterable[Any]) -> FieldType:
    """
    Infer the coarse type of a field from its sampled values.

    Precedence: object, array, numeric, datetime, string. A category only
    applies if every non-null value qualifies.

    Args:
        values: Observed values for one field path

    Returns:
        FieldType; UNKNOWN when there are no non-null values
    """
    is_object = is_array = is_numeric = is_datetime = True
    seen = 0

    for value in values:
        if value is None:
            continue
        seen += 1

        if not isinstance(value, dict):
            is_object = False
        if not isinstance(value, (list, tuple)):
            is_array = False

        text = to_text(value)
        if is_numeric and not is_numeric_text(text):
            is_numeric = False
        if is_datetime and not is_datetime_text(text):
            is_datetime = False

    if seen == 0:
        return FieldType.UNKNOWN
    if is_object:
        return FieldType.OBJECT
    if is_array:
        return FieldType.ARRAY
    if is_numeric:
        return FieldType.NUMERIC
    if is_datetime:
        return FieldType.DATETIME
    return FieldType.STRING
