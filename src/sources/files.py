"""
File-backed Record Sources for stream-diff

Line-delimited JSON and delimited-text readers. Both can optionally decode
string values that carry embedded JSON documents.
"""

import csv
import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from src.sources.base import EndOfStream, ReadError, Record, RecordSource

logger = logging.getLogger(__name__)


def decode_embedded_json(value: Any) -> Any:
    """
    Recursively decode a string that holds JSON.

    Strings that do not parse are returned unchanged. A string that decodes
    to another string is decoded again; string values of a decoded object
    are decoded in turn.

    Args:
        value: Candidate value

    Returns:
        Decoded value or the original value
    """
    if not isinstance(value, str) or value == "":
        return value

    try:
        decoded = json.loads(value)
    except ValueError:
        return value

    if isinstance(decoded, str):
        return decode_embedded_json(decoded)

    if isinstance(decoded, dict):
        return {k: decode_embedded_json(v) for k, v in decoded.items()}

    return decoded


class JSONLinesSource(RecordSource):
    """Reads one JSON object per line."""

    name = "json"

    def __init__(self, path: Union[str, Path], json_in_string: bool = False):
        """
        Open a JSON-lines file.

        Args:
            path: File path
            json_in_string: Decode string values that contain JSON

        Raises:
            ReadError: If the file cannot be opened
        """
        self.path = Path(path)
        self.json_in_string = json_in_string
        self._line_number = 0

        try:
            self._file = open(self.path, "r", encoding="utf-8")
        except OSError as e:
            raise ReadError(f"Failed to open json file {self.path}: {e}", source=str(self.path)) from e

        logger.debug(f"Opened JSON-lines source {self.path}")

    def read(self) -> Record:
        while True:
            try:
                line = self._file.readline()
            except (OSError, ValueError) as e:
                raise ReadError(f"Failed to read {self.path}: {e}", source=str(self.path)) from e

            if line == "":
                raise EndOfStream()

            self._line_number += 1
            if line.strip():
                break

        try:
            record = json.loads(line)
        except ValueError as e:
            raise ReadError(
                f"Invalid JSON in {self.path} at line {self._line_number}: {e}",
                source=str(self.path)
            ) from e

        if not isinstance(record, dict):
            raise ReadError(
                f"Line {self._line_number} of {self.path} is not a JSON object",
                source=str(self.path)
            )

        if self.json_in_string:
            record = {k: decode_embedded_json(v) for k, v in record.items()}

        return record

    def close(self) -> None:
        self._file.close()


class CSVSource(RecordSource):
    """Reads rows of a delimited text file with a header row."""

    name = "csv"

    def __init__(
        self,
        path: Union[str, Path],
        json_in_string: bool = False,
        delimiter: str = ","
    ):
        """
        Open a CSV file and read its header.

        Args:
            path: File path
            json_in_string: Decode cells that contain JSON
            delimiter: Field delimiter

        Raises:
            ReadError: If the file cannot be opened or has no header
        """
        self.path = Path(path)
        self.json_in_string = json_in_string
        self._header: Optional[list] = None

        try:
            self._file = open(self.path, "r", encoding="utf-8", newline="")
        except OSError as e:
            raise ReadError(f"Failed to open csv file {self.path}: {e}", source=str(self.path)) from e

        self._reader = csv.reader(self._file, delimiter=delimiter)

        try:
            self._header = next(self._reader)
        except StopIteration:
            self._file.close()
            raise ReadError(f"csv file {self.path} is empty", source=str(self.path))
        except csv.Error as e:
            self._file.close()
            raise ReadError(f"Failed to read header from csv file {self.path}: {e}", source=str(self.path)) from e

        logger.debug(f"Opened CSV source {self.path} with columns {self._header}")

    def read(self) -> Record:
        try:
            row = next(self._reader)
        except StopIteration:
            raise EndOfStream()
        except csv.Error as e:
            raise ReadError(
                f"Failed to parse {self.path} at line {self._reader.line_num}: {e}",
                source=str(self.path)
            ) from e

        record = {}
        for column, cell in zip(self._header, row):
            record[column] = decode_embedded_json(cell) if self.json_in_string else cell

        return record

    def close(self) -> None:
        self._file.close()
