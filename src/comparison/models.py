"""
Comparison Result Model for stream-diff
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List


class _Missing:
    """Marks the side of a FieldDiff where the field does not exist."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "MISSING"

    def __bool__(self):
        return False


MISSING = _Missing()


@dataclass(frozen=True)
class FieldDiff:
    field: str
    source1_value: Any = MISSING
    source2_value: Any = MISSING

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"field": self.field}
        if self.source1_value is not MISSING:
            data["source1_value"] = self.source1_value
        if self.source2_value is not MISSING:
            data["source2_value"] = self.source2_value
        return data


@dataclass(frozen=True)
class ComparisonResult:
    """
    Snapshot of a comparison, either periodic or final.

    keys_only_in_source1/2 are sorted; value_diffs is keyed in sorted order
    and each key's diffs are sorted by field.
    """

    timestamp: datetime
    records_processed: int
    source1_count: int
    source2_count: int
    matching_keys: int
    identical_rows: int
    keys_only_in_source1: List[str] = field(default_factory=list)
    keys_only_in_source2: List[str] = field(default_factory=list)
    value_diffs: Dict[str, List[FieldDiff]] = field(default_factory=dict)
    is_periodic: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "records_processed": self.records_processed,
            "source1_records": self.source1_count,
            "source2_records": self.source2_count,
            "matching_keys": self.matching_keys,
            "identical_rows": self.identical_rows,
            "keys_only_in_source1": list(self.keys_only_in_source1),
            "keys_only_in_source2": list(self.keys_only_in_source2),
            "value_diffs_by_key": {
                key: [diff.to_dict() for diff in diffs]
                for key, diffs in self.value_diffs.items()
            },
            "is_periodic_report": self.is_periodic,
        }
