"""
Schema Inference Module for stream-diff

Infers the structure of a record source from a bounded sample.

Main components:
- flattener: nested records -> field path value table
- inference: coarse type per field path
- generator: sampling and schema assembly

Usage:
    from src.schema.generator import SchemaGenerator

    generator = SchemaGenerator(sample_size=500, pattern_config=config.pattern_detection)
    schema = generator.generate(source, key_field="id")
"""

from src.schema.models import (
    Field,
    FieldType,
    IsDateTimeMatcher,
    IsNumericMatcher,
    Matcher,
    RegexMatcher,
    Schema,
)
from src.schema.flattener import collect_field_values
from src.schema.inference import infer_type

__all__ = [
    "Field",
    "FieldType",
    "IsDateTimeMatcher",
    "IsNumericMatcher",
    "Matcher",
    "RegexMatcher",
    "Schema",
    "collect_field_values",
    "infer_type",
]
