"""
Record Comparer for stream-diff

Field-level comparison of two records that share a key. Values are compared
by their canonical text, so 42 and "42" are equal while a field present on
only one side always counts as a difference.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from src.comparison.models import MISSING, FieldDiff
from src.utils.values import to_text

logger = logging.getLogger(__name__)


class RecordComparer:
    """
    Compares records from two sources.

    Produces the list of differing top-level fields for a pair of records.
    """

    def __init__(self, ignore_fields: Optional[Iterable[str]] = None):
        """
        Args:
            ignore_fields: Top-level fields excluded from comparison
        """
        self.ignore_fields = frozenset(ignore_fields or ())
        logger.debug(f"Initialized RecordComparer (ignoring {sorted(self.ignore_fields)})")

    def compare_records(self, record1: Dict[str, Any], record2: Dict[str, Any]) -> List[FieldDiff]:
        """
        Compare two records over the union of their field names.

        Args:
            record1: Record from source1
            record2: Record from source2

        Returns:
            Differing fields sorted by name; empty if the records match
        """
        diffs = []

        for name in sorted(set(record1) | set(record2)):
            if name in self.ignore_fields:
                continue

            value1 = record1.get(name, MISSING)
            value2 = record2.get(name, MISSING)

            if value1 is MISSING or value2 is MISSING or not self.values_equal(value1, value2):
                diffs.append(FieldDiff(field=name, source1_value=value1, source2_value=value2))

        return diffs

    def is_identical(self, record1: Dict[str, Any], record2: Dict[str, Any]) -> bool:
        return not self.compare_records(record1, record2)

    @staticmethod
    def values_equal(value1: Any, value2: Any) -> bool:
        """
        Compare two present values.

        Two nulls are equal; null never equals a non-null value; anything
        else is equal when the canonical texts are equal.
        """
        if value1 is None and value2 is None:
            return True
        if value1 is None or value2 is None:
            return False

        return to_text(value1) == to_text(value2)


def extract_key(record: Dict[str, Any], key_field: str) -> Optional[str]:
    """
    Extract a record's key as canonical text.

    Args:
        record: Record
        key_field: Top-level field holding the key

    Returns:
        Key text, or None when the key field is unset, absent, null or empty
    """
    if not key_field or key_field not in record:
        return None

    return to_text(record[key_field]) or None
