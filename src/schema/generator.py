"""
Schema Generator for stream-diff

Samples records from a source and assembles a Schema: every record is
flattened into one accumulator, then each field path is typed and handed to
the configured pattern detector.
"""

import logging
from typing import List, Optional

from src.patterndetection.detector import (
    DetectionError,
    DetectorFactory,
    InvalidPatternError,
    PatternDetector,
)
from src.schema.flattener import FieldValues, collect_field_values
from src.schema.inference import infer_type
from src.schema.models import Field, Schema
from src.sources.base import EndOfStream, Record, RecordSource
from src.utils.config import DEFAULT_SAMPLE_SIZE, PatternDetectionConfig

logger = logging.getLogger(__name__)


def sample_records(source: RecordSource, sample_size: int) -> List[Record]:
    """
    Read up to sample_size records, stopping early when the source ends.

    Raises:
        ReadError: If the source fails
    """
    records = []
    for _ in range(sample_size):
        try:
            records.append(source.read())
        except EndOfStream:
            break
    return records


class SchemaGenerator:
    """
    Infers a Schema from a bounded sample of a record source.

    Key identification is not attempted: the schema's key is whatever the
    caller passes as key_field, and max_key_size is left unset.
    """

    def __init__(
        self,
        sample_size: int = DEFAULT_SAMPLE_SIZE,
        pattern_config: Optional[PatternDetectionConfig] = None,
        detector: Optional[PatternDetector] = None,
        fail_on_invalid_pattern: bool = True,
        metrics=None
    ):
        """
        Args:
            sample_size: Records to sample; non-positive values use the default
            pattern_config: Pattern detection configuration
            detector: Ready-made detector; overrides pattern_config
            fail_on_invalid_pattern: Raise InvalidPatternError instead of
                degrading the field to no matchers
            metrics: Optional SchemaMetrics

        Raises:
            ConfigError: If the pattern detection configuration is unusable
        """
        self.sample_size = sample_size if sample_size and sample_size > 0 else DEFAULT_SAMPLE_SIZE
        self.detector = detector or DetectorFactory(pattern_config).create_detector()
        self.fail_on_invalid_pattern = fail_on_invalid_pattern
        self.metrics = metrics

    def generate(self, source: RecordSource, key_field: str = "") -> Schema:
        """
        Generate a schema for a source.

        Args:
            source: Record source to sample
            key_field: Field path to record as the schema key

        Returns:
            Schema; empty when the source yields no records

        Raises:
            ReadError: If the source fails while sampling
            InvalidPatternError: If a detector returns an invalid regex and
                fail_on_invalid_pattern is set
        """
        records = sample_records(source, self.sample_size)
        logger.info(f"Sampled {len(records)} records (limit {self.sample_size})")

        if not records:
            return Schema(fields={}, key=key_field)

        field_values: FieldValues = {}
        for record in records:
            collect_field_values(record, field_values)

        fields = {}
        for name in sorted(field_values):
            fields[name] = self._analyze_field(name, field_values[name])

        logger.info(f"Generated schema with {len(fields)} fields")
        return Schema(fields=fields, key=key_field)

    def _analyze_field(self, name: str, values: list) -> Field:
        field_type = infer_type(values)

        try:
            matchers = self.detector.detect_patterns(name, field_type, values)
        except InvalidPatternError as e:
            if self.fail_on_invalid_pattern:
                raise
            logger.warning(f"Ignoring invalid pattern for field {name}: {e}", extra={"field": name})
            self._record_failure()
            matchers = []
        except DetectionError as e:
            logger.warning(f"Failed to detect patterns for field {name}: {e}", extra={"field": name})
            self._record_failure()
            matchers = []

        if self.metrics is not None:
            self.metrics.record_field(field_type.value)

        return Field(type=field_type, matchers=list(matchers))

    def _record_failure(self) -> None:
        if self.metrics is not None:
            self.metrics.record_detection_failure(self.detector.mode)


def generate_schema(
    source: RecordSource,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
    pattern_config: Optional[PatternDetectionConfig] = None,
    key_field: str = ""
) -> Schema:
    """Generate a schema with a one-off SchemaGenerator."""
    return SchemaGenerator(sample_size, pattern_config).generate(source, key_field=key_field)
