"""
Field Flattener for stream-diff

Walks nested records breadth-first and collects every observed value under
its dotted field path. Array elements share a single "[]" path segment.
"""

from collections import deque
from typing import Any, Dict, List

FieldValues = Dict[str, List[Any]]


def collect_field_values(data: Any, field_values: FieldValues) -> None:
    """
    Flatten a value into the field_values accumulator.

    Nulls are skipped. Records and sequences are recorded under their own
    path before their children are visited. The root value itself (empty
    path) is never recorded.

    Args:
        data: Record or value to flatten
        field_values: Accumulator mapping field path -> observed values

    Example:
        >>> values = {}
        >>> collect_field_values({"user": {"name": "Jules"}, "tags": ["x"]}, values)
        >>> sorted(values)
        ['tags', 'tags[]', 'user', 'user.name']
    """
    queue = deque([(data, "")])

    while queue:
        value, prefix = queue.popleft()

        if value is None:
            continue

        if prefix:
            field_values.setdefault(prefix, []).append(value)

        if isinstance(value, dict):
            for key, child in value.items():
                queue.append((child, f"{prefix}.{key}" if prefix else key))
        elif isinstance(value, (list, tuple)):
            array_path = f"{prefix}[]"
            for element in value:
                queue.append((element, array_path))
