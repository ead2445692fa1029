"""
Comparison Module for stream-diff

Key-aligned comparison of two record streams.

Main components:
- comparer: field-level record comparison
- stream: streaming comparator with periodic reporting
- report: YAML/JSON persistence of results

Usage:
    from src.comparison import StreamComparator, ReportWriter

    writer = ReportWriter("reports")
    comparator = StreamComparator(
        source1, source2, config.comparison.periodic, key_field="id",
        on_periodic=writer.periodic_callback()
    )
    writer.write_final(comparator.compare())
"""

from src.comparison.models import MISSING, ComparisonResult, FieldDiff
from src.comparison.comparer import RecordComparer, extract_key
from src.comparison.stream import CallbackError, StreamComparator, compare_streams
from src.comparison.report import ReportWriter

__all__ = [
    "MISSING",
    "ComparisonResult",
    "FieldDiff",
    "RecordComparer",
    "extract_key",
    "CallbackError",
    "StreamComparator",
    "compare_streams",
    "ReportWriter",
]
