"""
Schema Data Model for stream-diff

Field types, matchers and the Schema produced by sampling a source.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class FieldType(str, Enum):
    """Coarse type of a field path."""
    NUMERIC = "numeric"
    STRING = "string"
    DATETIME = "datetime"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class RegexMatcher:
    """Values are expected to match a regular expression."""
    pattern: str

    def to_dict(self) -> Dict[str, Any]:
        return {"regex": self.pattern}


@dataclass(frozen=True)
class IsNumericMatcher:
    """Values are expected to parse as numbers."""

    def to_dict(self) -> Dict[str, Any]:
        return {"isNumeric": True}


@dataclass(frozen=True)
class IsDateTimeMatcher:
    """Values are expected to parse as date/time values."""

    def to_dict(self) -> Dict[str, Any]:
        return {"isDateTime": True}


Matcher = Union[RegexMatcher, IsNumericMatcher, IsDateTimeMatcher]


@dataclass(frozen=True)
class Field:
    type: FieldType
    matchers: List[Matcher] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "matchers": [m.to_dict() for m in self.matchers],
        }


@dataclass(frozen=True)
class Schema:
    """
    Structural description of a record source.

    Attributes:
        fields: Field path -> Field
        key: Field path identifying a record; empty when undetermined
        max_key_size: Optional bound on key length; never inferred
    """

    fields: Dict[str, Field] = field(default_factory=dict)
    key: str = ""
    max_key_size: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"key": self.key}
        if self.max_key_size is not None:
            data["max_key_size"] = self.max_key_size
        data["fields"] = {path: self.fields[path].to_dict() for path in sorted(self.fields)}
        return data
