"""
Record Source Contract for stream-diff

Every source hands out one record per read() call and signals exhaustion
with EndOfStream. Failures while reading surface as ReadError.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Iterator, List

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class EndOfStream(Exception):
    """Raised by read() when a source has no more records."""
    pass


class ReadError(Exception):
    """Raised when a source fails to produce a record."""

    def __init__(self, message: str, source: str = ""):
        super().__init__(message)
        self.source = source


class RecordSource(ABC):
    """Base class for record sources."""

    name: str = "source"

    @abstractmethod
    def read(self) -> Record:
        """
        Read the next record.

        Returns:
            The next record

        Raises:
            EndOfStream: When the source is exhausted
            ReadError: When the record cannot be read or decoded
        """

    def close(self) -> None:
        """Release any underlying resources."""

    def __iter__(self) -> Iterator[Record]:
        while True:
            try:
                yield self.read()
            except EndOfStream:
                return

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class InMemorySource(RecordSource):
    """Serves records from a list. Used for tests and small fixtures."""

    name = "memory"

    def __init__(self, records: Iterable[Record]):
        self._records: List[Record] = list(records)
        self._index = 0
        logger.debug(f"Initialized InMemorySource with {len(self._records)} records")

    def read(self) -> Record:
        if self._index >= len(self._records):
            raise EndOfStream()

        record = self._records[self._index]
        self._index += 1
        return record
