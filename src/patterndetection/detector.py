"""
Pattern Detector Interface for stream-diff

Detectors propose matchers for a field from its sampled values. The factory
picks the disabled, offline or online variant from configuration and fails
before any data is read when that configuration is unusable.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence

from src.schema.models import FieldType, IsDateTimeMatcher, IsNumericMatcher, Matcher
from src.utils.config import ConfigError, PatternDetectionConfig, resolve_api_key

logger = logging.getLogger(__name__)


class DetectionError(Exception):
    """Raised when a detector cannot produce matchers for a field."""
    pass


class TransportError(DetectionError):
    """Raised when the text-generation provider cannot be reached or answers badly."""
    pass


class InvalidPatternError(Exception):
    """Raised when a detector is handed a regex that does not compile."""

    def __init__(self, field_name: str, pattern: str, reason: str):
        super().__init__(f"Invalid regex pattern for field '{field_name}': {pattern!r} ({reason})")
        self.field_name = field_name
        self.pattern = pattern


def type_fallback(field_type: FieldType) -> List[Matcher]:
    """Matchers implied by the field type alone."""
    if field_type == FieldType.NUMERIC:
        return [IsNumericMatcher()]
    if field_type == FieldType.DATETIME:
        return [IsDateTimeMatcher()]
    return []


class PatternDetector(ABC):
    """Proposes matchers for a field."""

    mode = "disabled"

    @abstractmethod
    def detect_patterns(
        self,
        field_name: str,
        field_type: FieldType,
        values: Sequence[Any]
    ) -> List[Matcher]:
        """
        Detect value patterns for one field.

        Args:
            field_name: Field path
            field_type: Inferred type of the field
            values: Sampled values

        Returns:
            Zero or more matchers

        Raises:
            DetectionError: If detection fails
        """


class NoOpDetector(PatternDetector):
    """Detector used when pattern detection is disabled."""

    def detect_patterns(self, field_name, field_type, values):
        return []


class DetectorFactory:
    """Builds the detector selected by a PatternDetectionConfig."""

    def __init__(self, config: Optional[PatternDetectionConfig] = None, provider=None, vault_client=None):
        """
        Args:
            config: Pattern detection configuration; None disables detection
            provider: Text-generation provider for online mode; built from
                the config when omitted
            vault_client: VaultClient used to resolve an API key from Vault
        """
        self.config = config
        self.provider = provider
        self.vault_client = vault_client

    def create_detector(self) -> PatternDetector:
        """
        Create the configured detector.

        Returns:
            PatternDetector

        Raises:
            ConfigError: If the mode is unsupported, or online mode lacks
                credentials or names an unknown provider
        """
        from src.patterndetection.offline import OfflineDetector
        from src.patterndetection.online import OnlineDetector, create_provider

        if self.config is None or not self.config.enabled or self.config.mode == "disabled":
            logger.debug("Pattern detection disabled")
            return NoOpDetector()

        mode = self.config.mode
        if mode == "offline":
            logger.info("Using offline pattern detection")
            return OfflineDetector()

        if mode == "online":
            provider = self.provider
            if provider is None:
                online_api = self.config.online_api
                if online_api is None:
                    raise ConfigError("Online API configuration is required for online pattern detection")

                api_key = resolve_api_key(online_api, vault_client=self.vault_client)
                if not api_key:
                    raise ConfigError("API key is required for online pattern detection")

                provider = create_provider(online_api, api_key)

            logger.info(f"Using online pattern detection via {type(provider).__name__}")
            return OnlineDetector(provider)

        raise ConfigError(f"Unsupported pattern detection mode: {mode}")


def create_detector(config: Optional[PatternDetectionConfig] = None, provider=None) -> PatternDetector:
    """Shorthand for DetectorFactory(config, provider).create_detector()."""
    return DetectorFactory(config, provider=provider).create_detector()
