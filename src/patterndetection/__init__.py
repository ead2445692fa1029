"""
Pattern Detection Module for stream-diff

Proposes validation matchers for schema fields.

Main components:
- detector: detector interface, factory and error types
- offline: built-in heuristics (email, phone, URL, IPv4, UUID)
- online: AI-assisted detection through a text-generation provider

Usage:
    from src.patterndetection import DetectorFactory

    detector = DetectorFactory(config.pattern_detection).create_detector()
    matchers = detector.detect_patterns("email", FieldType.STRING, values)
"""

from src.patterndetection.detector import (
    DetectionError,
    DetectorFactory,
    InvalidPatternError,
    NoOpDetector,
    PatternDetector,
    TransportError,
    create_detector,
)
from src.patterndetection.offline import OfflineDetector
from src.patterndetection.online import (
    AnthropicProvider,
    OnlineDetector,
    TextGenerationProvider,
)

__all__ = [
    "DetectionError",
    "DetectorFactory",
    "InvalidPatternError",
    "NoOpDetector",
    "PatternDetector",
    "TransportError",
    "create_detector",
    "OfflineDetector",
    "AnthropicProvider",
    "OnlineDetector",
    "TextGenerationProvider",
]
