"""
Offline Pattern Detection for stream-diff

Heuristic detection of common value shapes. Categories are tried in a fixed
order and the first one matched by at least 80% of the sampled values wins.
"""

import logging
import re
from typing import List, Optional

from src.patterndetection.detector import PatternDetector, type_fallback
from src.schema.models import RegexMatcher
from src.utils.values import to_text

logger = logging.getLogger(__name__)

MATCH_THRESHOLD = 0.8
MIN_PHONE_LENGTH = 7

EMAIL_PATTERN = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
PHONE_PATTERN = r"^\+?[1-9]\d{1,14}$|^\(\d{3}\)\s\d{3}-\d{4}$|^\d{3}-\d{3}-\d{4}$"
URL_PATTERN = r"^https?://[^\s/$.?#].[^\s]*$"
IPV4_PATTERN = r"^\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}$"
UUID_PATTERN = r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$"

_EMAIL = re.compile(EMAIL_PATTERN)
# Also accepts bare 10-15 digit strings when counting matches.
_PHONE = re.compile(PHONE_PATTERN + r"|^\d{10,15}$")
_URL = re.compile(URL_PATTERN)
_IPV4 = re.compile(IPV4_PATTERN)
_UUID = re.compile(UUID_PATTERN)


def _match_ratio(regex: re.Pattern, values: List[str]) -> float:
    matches = sum(1 for v in values if regex.match(v))
    return matches / len(values)


class OfflineDetector(PatternDetector):
    """Built-in detection of emails, phone numbers, URLs, IPv4 addresses and UUIDs."""

    mode = "offline"

    def detect_patterns(self, field_name, field_type, values):
        texts = [to_text(v) for v in values if v is not None]
        if not texts:
            return []

        for detect in (
            self.detect_email_pattern,
            self.detect_phone_pattern,
            self.detect_url_pattern,
            self.detect_ip_pattern,
            self.detect_uuid_pattern,
        ):
            pattern = detect(texts)
            if pattern:
                logger.debug(f"Field {field_name}: detected pattern via {detect.__name__}")
                return [RegexMatcher(pattern)]

        return type_fallback(field_type)

    def detect_email_pattern(self, values: List[str]) -> Optional[str]:
        if _match_ratio(_EMAIL, values) >= MATCH_THRESHOLD:
            return EMAIL_PATTERN
        return None

    def detect_phone_pattern(self, values: List[str]) -> Optional[str]:
        # Short numeric codes (ages, small IDs) must not count as phone numbers.
        long_values = [v for v in values if len(v) >= MIN_PHONE_LENGTH]
        matches = sum(1 for v in long_values if _PHONE.match(v))

        if matches / len(values) < MATCH_THRESHOLD:
            return None
        if len(long_values) / len(values) <= 0.5:
            return None
        return PHONE_PATTERN

    def detect_url_pattern(self, values: List[str]) -> Optional[str]:
        if _match_ratio(_URL, values) >= MATCH_THRESHOLD:
            return URL_PATTERN
        return None

    def detect_ip_pattern(self, values: List[str]) -> Optional[str]:
        if _match_ratio(_IPV4, values) >= MATCH_THRESHOLD:
            return IPV4_PATTERN
        return None

    def detect_uuid_pattern(self, values: List[str]) -> Optional[str]:
        if _match_ratio(_UUID, [v.lower() for v in values]) >= MATCH_THRESHOLD:
            return UUID_PATTERN
        return None
