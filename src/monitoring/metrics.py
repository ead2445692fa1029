"""
Prometheus Metrics for stream-diff

Counters and gauges for comparison runs and schema inference. Each metrics
object registers into its own CollectorRegistry unless one is supplied, so
several runs in one process never collide.
"""

import logging
from typing import Dict, Optional, Tuple

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, push_to_gateway

logger = logging.getLogger(__name__)

NAMESPACE = "stream_diff"


class ComparisonMetrics:
    """Prometheus metrics for stream comparisons."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()

        self.records_read_total = Counter(
            f'{NAMESPACE}_records_read_total',
            'Records read by the comparator',
            ['source'],
            registry=self.registry
        )

        self.periodic_reports_total = Counter(
            f'{NAMESPACE}_periodic_reports_total',
            'Periodic comparison reports emitted',
            registry=self.registry
        )

        self.comparisons_total = Counter(
            f'{NAMESPACE}_comparisons_total',
            'Completed comparison runs',
            ['status'],
            registry=self.registry
        )

        self.comparison_duration_seconds = Histogram(
            f'{NAMESPACE}_comparison_duration_seconds',
            'Duration of comparison runs in seconds',
            buckets=[1, 5, 10, 30, 60, 120, 300, 600, 1800, 3600],
            registry=self.registry
        )

        self.matching_keys = Gauge(
            f'{NAMESPACE}_matching_keys',
            'Keys present in both sources in the last result',
            registry=self.registry
        )

        self.keys_tracked = Gauge(
            f'{NAMESPACE}_keys_tracked',
            'Distinct keys held per source in the last result',
            ['source'],
            registry=self.registry
        )

        self.keys_only_in_source = Gauge(
            f'{NAMESPACE}_keys_only_in_source',
            'Keys present in only one source in the last result',
            ['source'],
            registry=self.registry
        )

        self.value_diffs = Gauge(
            f'{NAMESPACE}_value_diff_keys',
            'Shared keys whose records differ in the last result',
            registry=self.registry
        )

    def record_read(self, source: str) -> None:
        self.records_read_total.labels(source=source).inc()

    def record_periodic_report(self) -> None:
        self.periodic_reports_total.inc()

    def record_comparison(
        self,
        status: str,
        duration_seconds: float,
        result=None,
        labels: Tuple[str, str] = ("source1", "source2")
    ) -> None:
        """
        Record a finished comparison run.

        Args:
            status: "success" or "failure"
            duration_seconds: Wall-clock duration
            result: Final ComparisonResult, when the run succeeded
            labels: Source labels of the run, as used by record_read
        """
        self.comparisons_total.labels(status=status).inc()
        self.comparison_duration_seconds.observe(duration_seconds)

        if result is not None:
            first, second = labels
            self.matching_keys.set(result.matching_keys)
            self.keys_tracked.labels(source=first).set(result.matching_keys + len(result.keys_only_in_source1))
            self.keys_tracked.labels(source=second).set(result.matching_keys + len(result.keys_only_in_source2))
            self.keys_only_in_source.labels(source=first).set(len(result.keys_only_in_source1))
            self.keys_only_in_source.labels(source=second).set(len(result.keys_only_in_source2))
            self.value_diffs.set(len(result.value_diffs))

        logger.debug(f"Recorded comparison metrics: status={status}, duration={duration_seconds:.3f}s")


class SchemaMetrics:
    """Prometheus metrics for schema inference."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()

        self.fields_inferred_total = Counter(
            f'{NAMESPACE}_fields_inferred_total',
            'Schema fields inferred, by type',
            ['type'],
            registry=self.registry
        )

        self.detection_failures_total = Counter(
            f'{NAMESPACE}_pattern_detection_failures_total',
            'Fields whose pattern detection failed',
            ['detector'],
            registry=self.registry
        )

    def record_field(self, field_type: str) -> None:
        self.fields_inferred_total.labels(type=field_type).inc()

    def record_detection_failure(self, detector: str) -> None:
        self.detection_failures_total.labels(detector=detector).inc()


def push_metrics(
    registry: CollectorRegistry,
    gateway_url: str,
    job_name: str,
    grouping_key: Optional[Dict[str, str]] = None
) -> None:
    """
    Push a registry to a Prometheus Pushgateway.

    Raises:
        Exception: If the push fails
    """
    try:
        push_to_gateway(gateway_url, job=job_name, registry=registry, grouping_key=grouping_key or {})
        logger.info(f"Pushed metrics to gateway: {gateway_url}")
    except Exception as e:
        logger.error(f"Failed to push metrics to gateway: {e}")
        raise
