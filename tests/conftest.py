"""
Pytest configuration and shared fixtures.

Provides sample records and helpers for writing
temporary JSON-lines and CSV files.
"""

import csv
import json
import logging

import pytest


def write_jsonl(path, records):
    """Write records as one JSON object per line."""
    with open(path, "w", encoding="utf-8") as f:
        for record in records:
            f.write(json.dumps(record) + "\n")
    return path


def write_csv(path, header, rows, delimiter=","):
    """Write a header row followed by data rows."""
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f, delimiter=delimiter)
        writer.writerow(header)
        writer.writerows(rows)
    return path


@pytest.fixture
def user_records():
    """Five user records with numeric ids, emails and mixed date formats."""
    return [
        {"user_id": "1", "email": "ana@example.com", "last_login": "2024-01-15T10:30:00Z"},
        {"user_id": "2", "email": "ben@example.org", "last_login": "2024-01-16 08:00:00"},
        {"user_id": "3", "email": "cho@example.net", "last_login": "2024-01-17"},
        {"user_id": "4", "email": "dev@example.com", "last_login": "01/18/2024"},
        {"user_id": "5", "email": "eli@example.com", "last_login": "2024-01-19T12:00:00.123456+02:00"},
    ]


@pytest.fixture
def source1_records():
    return [
        {"id": 1, "name": "Alice", "status": "active"},
        {"id": 2, "name": "Bob", "status": "active"},
        {"id": 3, "name": "Carol", "status": "inactive"},
    ]


@pytest.fixture
def source2_records():
    return [
        {"id": 1, "name": "Alice", "status": "inactive"},
        {"id": 2, "name": "Bob", "status": "active"},
        {"id": 4, "name": "Dan", "status": "active"},
    ]


@pytest.fixture
def restore_root_logger():
    """Put the root logger's handlers and level back after a test reconfigures it."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
