"""
Unit tests for run correlation IDs.
"""

import logging
import uuid

import pytest

from src.comparison.stream import compare_streams
from src.sources.base import InMemorySource, ReadError
from src.utils.correlation import CorrelationContext, correlation_id_filter, get_correlation_id


class RecordingHandler(logging.Handler):
    """Keeps every record it handles, after the correlation filter ran."""

    def __init__(self):
        super().__init__(logging.DEBUG)
        self.records = []
        self.addFilter(correlation_id_filter)

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def handler(restore_root_logger):
    recording = RecordingHandler()
    restore_root_logger.addHandler(recording)
    restore_root_logger.setLevel(logging.DEBUG)
    return recording


def run_comparison(source1_records, source2_records):
    return compare_streams(InMemorySource(source1_records), InMemorySource(source2_records), None, "id")


class TestRunCorrelation:
    """Log lines of a comparison run carry that run's ID."""

    def test_comparison_lines_share_run_id(self, handler, source1_records, source2_records):
        with CorrelationContext("compare-1"):
            run_comparison(source1_records, source2_records)

        stream_records = [r for r in handler.records if r.name == "src.comparison.stream"]
        assert stream_records
        assert {r.correlation_id for r in stream_records} == {"compare-1"}

    def test_consecutive_runs_get_distinct_ids(self, handler, source1_records, source2_records):
        with CorrelationContext() as first:
            run_comparison(source1_records, source2_records)
        with CorrelationContext() as second:
            run_comparison(source1_records, source2_records)

        assert first != second
        assert str(uuid.UUID(first)) == first
        assert {r.correlation_id for r in handler.records} == {first, second}

    def test_lines_outside_a_run(self, handler, source1_records, source2_records):
        run_comparison(source1_records, source2_records)

        assert get_correlation_id() is None
        assert {r.correlation_id for r in handler.records} == {"N/A"}

    def test_failed_run_restores_outer_id(self):
        with CorrelationContext("schema-run"):
            with pytest.raises(ReadError):
                with CorrelationContext("compare-run"):
                    assert get_correlation_id() == "compare-run"
                    raise ReadError("truncated input", source="source1")
            assert get_correlation_id() == "schema-run"

        assert get_correlation_id() is None

    @pytest.mark.parametrize("bad_value", ["", 42])
    def test_rejects_invalid_ids(self, bad_value):
        with pytest.raises(ValueError, match="non-empty string"):
            CorrelationContext(bad_value)
