#!/usr/bin/env python3
"""
stream-diff Command Line Tool

Infers schemas for two record sources and compares them by key, with
support for:
- Offline (regex heuristic) and online (LLM) pattern detection
- Periodic intermediate reports by time or record count
- YAML or JSON reports
- Prometheus Pushgateway metrics

Usage:
    ./scripts/stream_diff.py schema config.yaml
    ./scripts/stream_diff.py schema config.yaml --source source1 --sample-size 500
    ./scripts/stream_diff.py compare config.yaml --key-field id
    ./scripts/stream_diff.py compare config.yaml --schema --format json --output-dir out
    ./scripts/stream_diff.py --json-logs compare config.yaml
"""

import sys
import argparse
import logging
from pathlib import Path
from typing import Dict, Optional

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.comparison import ReportWriter, StreamComparator
from src.monitoring import ComparisonMetrics, SchemaMetrics, push_metrics
from src.schema.generator import SchemaGenerator
from src.sources import open_source
from src.utils.config import StreamDiffConfig, load_config
from src.utils.correlation import CorrelationContext
from src.utils.logging_config import configure_logging

logger = logging.getLogger("stream_diff")

SOURCE_LABELS = ("source1", "source2")


class StreamDiffTool:
    """Runs schema generation and comparisons for one configuration."""

    def __init__(self, config: StreamDiffConfig, output_dir: Optional[str] = None, fmt: Optional[str] = None):
        """
        Args:
            config: Loaded run configuration
            output_dir: Overrides report.output_dir
            fmt: Overrides report.format
        """
        self.config = config
        self.writer = ReportWriter(output_dir or config.report.output_dir, fmt or config.report.format)

        self.comparison_metrics = None
        self.schema_metrics = None
        if config.metrics.enabled:
            self.comparison_metrics = ComparisonMetrics()
            self.schema_metrics = SchemaMetrics(self.comparison_metrics.registry)

        logger.info("StreamDiffTool initialized")

    def generate_schemas(self, labels=SOURCE_LABELS, sample_size: Optional[int] = None, key_field: str = "") -> Dict[str, Path]:
        """
        Generate and write a schema for each requested source.

        Returns:
            Mapping of source label to written schema path
        """
        generator = SchemaGenerator(
            sample_size=sample_size or self.config.sampler.sample_size,
            pattern_config=self.config.pattern_detection,
            metrics=self.schema_metrics
        )

        written = {}
        for label in labels:
            source_config = getattr(self.config, label)
            logger.info(f"Generating schema for {label} ({source_config.path})", extra={"source": label})

            with open_source(source_config) as source:
                schema = generator.generate(source, key_field=key_field)

            written[label] = self.writer.write_schema(schema, label)

        return written

    def compare(self, key_field: Optional[str] = None) -> Path:
        """
        Compare source1 and source2, writing periodic and final reports.

        Returns:
            Path of the final report
        """
        comparison = self.config.comparison
        key_field = key_field or comparison.key_field

        with open_source(self.config.source1) as source1, open_source(self.config.source2) as source2:
            comparator = StreamComparator(
                source1,
                source2,
                comparison.periodic,
                key_field,
                on_periodic=self.writer.periodic_callback(),
                ignore_fields=comparison.ignore_fields,
                source_labels=SOURCE_LABELS,
                metrics=self.comparison_metrics
            )
            result = comparator.compare()

        return self.writer.write_final(result)

    def push_metrics(self) -> None:
        settings = self.config.metrics
        if self.comparison_metrics is None or not settings.pushgateway_url:
            return
        push_metrics(self.comparison_metrics.registry, settings.pushgateway_url, settings.job_name)


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Schema inference and key-based comparison of two record streams",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Schema command
    schema_parser = subparsers.add_parser("schema", help="Generate schemas")
    schema_parser.add_argument("config", help="Path to YAML run configuration")
    schema_parser.add_argument("--source", choices=["source1", "source2", "both"], default="both")
    schema_parser.add_argument("--sample-size", type=int, help="Records to sample per source")
    schema_parser.add_argument("--output-dir", help="Report directory")
    schema_parser.add_argument("--format", choices=["yaml", "json"], help="Report format")

    # Compare command
    compare_parser = subparsers.add_parser("compare", help="Compare two sources by key")
    compare_parser.add_argument("config", help="Path to YAML run configuration")
    compare_parser.add_argument("--key-field", help="Key field (overrides comparison.key_field)")
    compare_parser.add_argument("--output-dir", help="Report directory")
    compare_parser.add_argument("--format", choices=["yaml", "json"], help="Report format")
    compare_parser.add_argument("--schema", action="store_true", help="Write schemas before comparing")

    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    parser.add_argument("--json-logs", action="store_true", help="Structured JSON logs")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = load_config(args.config)
    except Exception as e:
        configure_logging("DEBUG" if args.verbose else "INFO", json_output=args.json_logs)
        logger.error(f"Error: {e}", exc_info=args.verbose)
        return 1

    configure_logging(
        "DEBUG" if args.verbose else config.logging.level,
        json_output=args.json_logs or config.logging.json
    )

    with CorrelationContext() as run_id:
        logger.info(f"Starting {args.command} run {run_id}")
        try:
            tool = StreamDiffTool(config, output_dir=args.output_dir, fmt=args.format)

            if args.command == "schema":
                labels = SOURCE_LABELS if args.source == "both" else (args.source,)
                tool.generate_schemas(labels, sample_size=args.sample_size, key_field=config.comparison.key_field)

            elif args.command == "compare":
                key_field = args.key_field or config.comparison.key_field
                if args.schema:
                    tool.generate_schemas(key_field=key_field)
                report_path = tool.compare(key_field)
                print(report_path)

            tool.push_metrics()
            return 0

        except Exception as e:
            logger.error(f"Error: {e}", exc_info=args.verbose)
            return 1


if __name__ == "__main__":
    sys.exit(main())
