"""
Monitoring Module for stream-diff

Prometheus metrics for comparison runs and schema inference.

Usage:
    from src.monitoring import ComparisonMetrics

    metrics = ComparisonMetrics()
    comparator = StreamComparator(source1, source2, periodic, "id", metrics=metrics)
    comparator.compare()
    push_metrics(metrics.registry, "localhost:9091", "stream_diff")
"""

from src.monitoring.metrics import ComparisonMetrics, SchemaMetrics, push_metrics

__all__ = [
    "ComparisonMetrics",
    "SchemaMetrics",
    "push_metrics",
]
