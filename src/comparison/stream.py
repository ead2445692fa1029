"""
Stream Comparator for stream-diff

Drains two record sources, indexes records by key and reports which keys are
missing on either side and which shared keys carry different values.
Intermediate snapshots are handed to a callback whenever the configured time
or record interval elapses.

Sources are drained one after the other: while source1 is being read,
source2's index is still empty, so periodic snapshots taken in that phase
list every source1 key as only in source1.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Tuple

from src.comparison.comparer import RecordComparer, extract_key
from src.comparison.models import ComparisonResult
from src.sources.base import EndOfStream, ReadError, Record, RecordSource
from src.utils.config import PeriodicConfig

logger = logging.getLogger(__name__)

PeriodicCallback = Callable[[ComparisonResult], None]


class CallbackError(Exception):
    """Raised when the periodic report callback fails."""
    pass


class StreamComparator:
    """
    Compares two record streams by key with periodic reporting.

    Every distinct key read from either source stays in memory until the
    comparison finishes.
    """

    def __init__(
        self,
        source1: RecordSource,
        source2: RecordSource,
        periodic_config: Optional[PeriodicConfig],
        key_field: str,
        on_periodic: Optional[PeriodicCallback] = None,
        ignore_fields=None,
        source_labels: Tuple[str, str] = ("source1", "source2"),
        metrics=None
    ):
        """
        Args:
            source1: First record source
            source2: Second record source
            periodic_config: Periodic reporting thresholds (None disables)
            key_field: Top-level field identifying a record
            on_periodic: Called synchronously with each periodic result
            ignore_fields: Fields excluded from value comparison
            source_labels: Names used in errors and logs
            metrics: Optional ComparisonMetrics
        """
        self.source1 = source1
        self.source2 = source2
        self.periodic_config = periodic_config or PeriodicConfig()
        self.key_field = key_field
        self.on_periodic = on_periodic
        self.source_labels = source_labels
        self.metrics = metrics
        self.comparer = RecordComparer(ignore_fields)

        self.source1_records: Dict[str, Record] = {}
        self.source2_records: Dict[str, Record] = {}
        self.source1_count = 0
        self.source2_count = 0
        self.records_processed = 0

        self._last_report_time = 0.0
        self._last_report_records = 0
        self.periodic_reports = 0

        if not key_field:
            logger.warning("No key field configured; records will be counted but not matched")

    def compare(self) -> ComparisonResult:
        """
        Run the comparison to completion.

        Returns:
            Final ComparisonResult (is_periodic=False)

        Raises:
            ReadError: If either source fails; the message names the source
            CallbackError: If the periodic callback raises
        """
        start = time.monotonic()
        self._last_report_time = start
        self._last_report_records = 0

        logger.info(f"Starting comparison on key field '{self.key_field}'")

        try:
            self._drain(self.source1, self.source_labels[0], self.source1_records, first=True)
            self._drain(self.source2, self.source_labels[1], self.source2_records, first=False)
        except (ReadError, CallbackError):
            if self.metrics is not None:
                self.metrics.record_comparison("failure", time.monotonic() - start)
            raise

        result = self.build_result(is_periodic=False)
        duration = time.monotonic() - start

        logger.info(
            f"Comparison completed in {duration:.2f}s: {result.matching_keys} matching keys, "
            f"{result.identical_rows} identical, {len(result.value_diffs)} with diffs, "
            f"{len(result.keys_only_in_source1)} only in {self.source_labels[0]}, "
            f"{len(result.keys_only_in_source2)} only in {self.source_labels[1]}",
            extra={"records_processed": self.records_processed, "duration": duration}
        )

        if self.metrics is not None:
            self.metrics.record_comparison("success", duration, result, labels=self.source_labels)

        return result

    def _drain(self, source: RecordSource, label: str, index: Dict[str, Record], first: bool) -> None:
        while True:
            try:
                record = source.read()
            except EndOfStream:
                break
            except Exception as e:
                raise ReadError(f"Error reading from {label}: {e}", source=label) from e

            if first:
                self.source1_count += 1
            else:
                self.source2_count += 1
            self.records_processed += 1

            key = extract_key(record, self.key_field)
            if key is not None:
                index[key] = record

            if self.metrics is not None:
                self.metrics.record_read(label)

            if self.should_report_periodic():
                self._emit_periodic()

        logger.info(
            f"Finished reading {label}: {len(index)} distinct keys",
            extra={"source": label, "records_processed": self.records_processed}
        )

    def should_report_periodic(self) -> bool:
        """True when periodic reporting is due by time or by record count."""
        config = self.periodic_config
        if not config.enabled:
            return False

        if config.time_interval_seconds and config.time_interval_seconds > 0:
            if time.monotonic() - self._last_report_time >= config.time_interval_seconds:
                return True

        if config.record_interval and config.record_interval > 0:
            if self.records_processed - self._last_report_records >= config.record_interval:
                return True

        return False

    def _emit_periodic(self) -> None:
        if self.on_periodic is None:
            self._mark_reported()
            return

        result = self.build_result(is_periodic=True)

        try:
            self.on_periodic(result)
        except Exception as e:
            logger.error(f"Periodic report callback failed: {e}")
            raise CallbackError(f"Error in periodic diff callback: {e}") from e

        self.periodic_reports += 1
        self._mark_reported()

        if self.metrics is not None:
            self.metrics.record_periodic_report()

        logger.debug(
            f"Emitted periodic report #{self.periodic_reports}",
            extra={"records_processed": self.records_processed}
        )

    def _mark_reported(self) -> None:
        self._last_report_time = time.monotonic()
        self._last_report_records = self.records_processed

    def build_result(self, is_periodic: bool) -> ComparisonResult:
        """
        Snapshot the current state of both key indexes.

        Args:
            is_periodic: Whether this is an intermediate report

        Returns:
            ComparisonResult
        """
        keys1 = self.source1_records.keys()
        keys2 = self.source2_records.keys()

        matching_keys = 0
        identical_rows = 0
        value_diffs = {}

        for key in sorted(keys1 & keys2):
            matching_keys += 1
            diffs = self.comparer.compare_records(self.source1_records[key], self.source2_records[key])
            if diffs:
                value_diffs[key] = diffs
            else:
                identical_rows += 1

        return ComparisonResult(
            timestamp=datetime.now(timezone.utc),
            records_processed=self.records_processed,
            source1_count=self.source1_count,
            source2_count=self.source2_count,
            matching_keys=matching_keys,
            identical_rows=identical_rows,
            keys_only_in_source1=sorted(keys1 - keys2),
            keys_only_in_source2=sorted(keys2 - keys1),
            value_diffs=value_diffs,
            is_periodic=is_periodic,
        )


def compare_streams(
    source1: RecordSource,
    source2: RecordSource,
    periodic_config: Optional[PeriodicConfig],
    key_field: str,
    on_periodic: Optional[PeriodicCallback] = None
) -> ComparisonResult:
    """Run a one-off StreamComparator."""
    return StreamComparator(source1, source2, periodic_config, key_field, on_periodic).compare()
