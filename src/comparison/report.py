"""
Report Writer for stream-diff

Persists schemas, periodic snapshots and the final comparison result as
YAML or JSON files.
"""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Union

import yaml

from src.comparison.models import ComparisonResult
from src.schema.models import Schema

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("yaml", "json")


def render(data: Dict[str, Any], fmt: str = "yaml") -> str:
    """
    Render a report structure as text.

    Raises:
        ValueError: If the format is unsupported
    """
    if fmt == "yaml":
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
    if fmt == "json":
        return json.dumps(data, indent=2, default=str)

    raise ValueError(f"Unsupported output format: {fmt} (supported: {', '.join(SUPPORTED_FORMATS)})")


class ReportWriter:
    """Writes report files into one output directory."""

    def __init__(self, output_dir: Union[str, Path], fmt: str = "yaml"):
        """
        Args:
            output_dir: Directory for report files (created if missing)
            fmt: "yaml" or "json"

        Raises:
            ValueError: If the format is unsupported
        """
        if fmt not in SUPPORTED_FORMATS:
            raise ValueError(f"Unsupported output format: {fmt} (supported: {', '.join(SUPPORTED_FORMATS)})")

        self.output_dir = Path(output_dir)
        self.fmt = fmt
        self.periodic_count = 0

        self.output_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Report directory: {self.output_dir}")

    def _write(self, name: str, data: Dict[str, Any]) -> Path:
        path = self.output_dir / f"{name}.{self.fmt}"
        with open(path, "w", encoding="utf-8") as f:
            f.write(render(data, self.fmt))
        return path

    def write_schema(self, schema: Schema, label: str) -> Path:
        path = self._write(f"schema_{label}", schema.to_dict())
        logger.info(f"Schema for {label} written to {path}")
        return path

    def write_periodic(self, result: ComparisonResult) -> Path:
        self.periodic_count += 1
        path = self._write(f"periodic_report_{self.periodic_count}", result.to_dict())
        logger.info(f"Periodic report written to {path}")
        return path

    def write_final(self, result: ComparisonResult) -> Path:
        path = self._write("comparison_report", result.to_dict())
        logger.info(f"Final report written to {path}")
        return path

    def periodic_callback(self) -> Callable[[ComparisonResult], None]:
        """Callback for StreamComparator that writes each periodic result."""
        def callback(result: ComparisonResult) -> None:
            self.write_periodic(result)
        return callback
