"""
Record Sources for stream-diff

Usage:
    from src.sources import open_source

    with open_source(config.source1) as source:
        for record in source:
            ...
"""

from src.sources.base import EndOfStream, InMemorySource, ReadError, Record, RecordSource
from src.sources.files import CSVSource, JSONLinesSource, decode_embedded_json
from src.utils.config import ConfigError, SourceConfig


def open_source(config: SourceConfig) -> RecordSource:
    """
    Open the source described by a SourceConfig.

    Raises:
        ConfigError: If the source type is unsupported
        ReadError: If the file cannot be opened
    """
    source_type = config.type.lower()
    parser = config.parser_config

    if source_type in ("json", "jsonl"):
        return JSONLinesSource(config.path, json_in_string=parser.json_in_string)
    if source_type == "csv":
        return CSVSource(config.path, json_in_string=parser.json_in_string, delimiter=parser.delimiter)

    raise ConfigError(f"Unsupported source type: {config.type} (supported: csv, json)")


__all__ = [
    "EndOfStream",
    "InMemorySource",
    "ReadError",
    "Record",
    "RecordSource",
    "CSVSource",
    "JSONLinesSource",
    "decode_embedded_json",
    "open_source",
]
