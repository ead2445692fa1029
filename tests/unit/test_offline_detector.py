"""
Unit tests for offline pattern detection.
"""

import pytest

from src.patterndetection.offline import (
    EMAIL_PATTERN,
    IPV4_PATTERN,
    PHONE_PATTERN,
    URL_PATTERN,
    UUID_PATTERN,
    OfflineDetector,
)
from src.schema.models import FieldType, IsDateTimeMatcher, IsNumericMatcher, RegexMatcher


class TestOfflineDetector:
    """Test heuristic pattern detection."""

    @pytest.fixture
    def detector(self):
        return OfflineDetector()

    def test_emails(self, detector):
        values = ["ana@example.com", "ben@example.org", "cho@example.net"]

        matchers = detector.detect_patterns("email", FieldType.STRING, values)

        assert matchers == [RegexMatcher(EMAIL_PATTERN)]

    def test_emails_below_threshold(self, detector):
        values = ["ana@example.com", "ben@example.org", "not an email"]

        matchers = detector.detect_patterns("email", FieldType.STRING, values)

        assert not any(isinstance(m, RegexMatcher) for m in matchers)

    def test_threshold_is_inclusive(self, detector):
        values = ["a@example.com", "b@example.com", "c@example.com", "d@example.com", "nope"]

        assert detector.detect_email_pattern(values) == EMAIL_PATTERN

    def test_phone_numbers(self, detector):
        values = ["+14155552671", "(415) 555-2671", "415-555-2671", "4155552671"]

        matchers = detector.detect_patterns("phone", FieldType.STRING, values)

        assert matchers == [RegexMatcher(PHONE_PATTERN)]

    def test_short_numbers_are_not_phones(self, detector):
        values = ["12", "34", "56", "78"]

        assert detector.detect_phone_pattern(values) is None
        assert detector.detect_patterns("age", FieldType.NUMERIC, values) == [IsNumericMatcher()]

    def test_urls(self, detector):
        values = ["https://example.com/a", "http://example.org", "https://x.io/path?q=1"]

        assert detector.detect_patterns("homepage", FieldType.STRING, values) == [RegexMatcher(URL_PATTERN)]

    def test_ipv4(self, detector):
        values = ["10.0.0.1", "192.168.1.20", "8.8.8.8"]

        assert detector.detect_patterns("ip", FieldType.STRING, values) == [RegexMatcher(IPV4_PATTERN)]

    def test_uuid_case_insensitive(self, detector):
        values = [
            "123e4567-e89b-12d3-a456-426614174000",
            "6F9619FF-8B86-4D01-B42D-00CF4FC964FF",
            "550e8400-e29b-41d4-a716-446655440000",
        ]

        assert detector.detect_patterns("id", FieldType.STRING, values) == [RegexMatcher(UUID_PATTERN)]

    def test_email_checked_before_other_categories(self, detector):
        values = ["ana@example.com", "ben@example.org"]

        assert detector.detect_patterns("contact", FieldType.STRING, values)[0].pattern == EMAIL_PATTERN

    def test_type_fallback_for_datetime(self, detector):
        values = ["2024-01-15", "2024-01-16"]

        assert detector.detect_patterns("day", FieldType.DATETIME, values) == [IsDateTimeMatcher()]

    def test_plain_strings_get_no_matchers(self, detector):
        assert detector.detect_patterns("name", FieldType.STRING, ["Alice", "Bob"]) == []

    def test_no_values(self, detector):
        assert detector.detect_patterns("empty", FieldType.UNKNOWN, []) == []
        assert detector.detect_patterns("nulls", FieldType.UNKNOWN, [None]) == []

    def test_non_string_values_use_canonical_text(self, detector):
        values = [4155552671, 4155552672, 4155552673]

        assert detector.detect_patterns("phone", FieldType.NUMERIC, values) == [RegexMatcher(PHONE_PATTERN)]
