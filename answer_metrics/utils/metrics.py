"""
Prometheus Metrics Collector

Lightweight in-process metrics for the projection engine.
Generates Prometheus text exposition format (text/plain; version=0.0.4).
"""
import time
import threading
from typing import Dict, List, Optional
from dataclasses import dataclass, field


@dataclass
class MetricValue:
    """Single metric value with optional labels."""
    value: float
    labels: Dict[str, str] = field(default_factory=dict)


class _LabeledMetric:
    """Shared label bookkeeping for all metric types."""

    kind = "untyped"

    def __init__(self, name: str, description: str, labels: Optional[List[str]] = None):
        self.name = name
        self.description = description
        self.label_names = labels or []
        self._values: Dict[tuple, object] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _label_key(labels: Dict[str, str]) -> tuple:
        """Create hashable key from labels."""
        return tuple(sorted((k, str(v)) for k, v in labels.items()))


class Counter(_LabeledMetric):
    """
    Prometheus Counter metric.

    Monotonic: query counts, rows returned, chunk failures, anomalies.
    """

    kind = "counter"

    def inc(self, amount: float = 1.0, **labels: str) -> None:
        """Increment counter by amount."""
        key = self._label_key(labels)
        with self._lock:
            self._values[key] = self._values.get(key, 0.0) + amount

    def value(self, **labels: str) -> float:
        """Current value for one label combination (0 if never incremented)."""
        with self._lock:
            return self._values.get(self._label_key(labels), 0.0)

    def collect(self) -> List[MetricValue]:
        with self._lock:
            return [MetricValue(value=v, labels=dict(k)) for k, v in self._values.items()]


class Histogram(_LabeledMetric):
    """
    Prometheus Histogram metric.

    Used for query wall time.
    """

    kind = "histogram"

    # Read latencies against a remote PostgREST endpoint (in seconds)
    DEFAULT_BUCKETS = (0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)

    def __init__(
        self,
        name: str,
        description: str,
        labels: Optional[List[str]] = None,
        buckets: Optional[tuple] = None
    ):
        super().__init__(name, description, labels)
        self.buckets = buckets or self.DEFAULT_BUCKETS

    def observe(self, value: float, **labels: str) -> None:
        """Record an observation."""
        key = self._label_key(labels)
        with self._lock:
            data = self._values.setdefault(key, {
                "buckets": {b: 0 for b in self.buckets},
                "sum": 0.0,
                "count": 0,
            })
            data["sum"] += value
            data["count"] += 1
            for bucket in self.buckets:
                if value <= bucket:
                    data["buckets"][bucket] += 1

    def collect(self) -> List[MetricValue]:
        """Collect bucket, sum and count values."""
        result = []
        with self._lock:
            for key, data in self._values.items():
                base_labels = dict(key)
                for bucket in sorted(self.buckets):
                    result.append(MetricValue(
                        value=data["buckets"][bucket],
                        labels={**base_labels, "le": str(bucket)}
                    ))
                result.append(MetricValue(value=data["count"], labels={**base_labels, "le": "+Inf"}))
                result.append(MetricValue(value=data["sum"], labels={**base_labels, "_metric": "sum"}))
                result.append(MetricValue(value=data["count"], labels={**base_labels, "_metric": "count"}))
        return result


class Timer:
    """Context manager for timing code blocks."""

    def __init__(self, histogram: Histogram, **labels: str):
        self.histogram = histogram
        self.labels = labels
        self.start_time: Optional[float] = None
        self.elapsed_ms: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args) -> None:
        if self.start_time is not None:
            duration = time.perf_counter() - self.start_time
            self.elapsed_ms = duration * 1000
            self.histogram.observe(duration, **self.labels)


class MetricsRegistry:
    """
    Central registry for all engine metrics.

    Provides singleton access and Prometheus text format export.
    """

    _instance: Optional["MetricsRegistry"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "MetricsRegistry":
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._metrics: Dict[str, Counter | Histogram] = {}
        self._initialized = True
        self._setup_metrics()

    def _setup_metrics(self) -> None:
        """Initialize all engine metrics."""

        # ============================================
        # QUERY METRICS
        # ============================================
        self.queries_total = self.counter(
            "am_queries_total",
            "Projection queries by type and outcome",
            ["query_type", "status"]
        )

        self.query_duration = self.histogram(
            "am_query_duration_seconds",
            "Projection query wall time in seconds",
            ["query_type"]
        )

        self.rows_returned = self.counter(
            "am_rows_returned_total",
            "Flattened rows produced by projection type",
            ["query_type"]
        )

        # ============================================
        # BATCHING METRICS
        # ============================================
        self.chunks_fetched = self.counter(
            "am_chunks_fetched_total",
            "Chunk reads completed by the batched fetcher"
        )

        self.chunk_failures = self.counter(
            "am_chunk_failures_total",
            "Chunk reads that failed and aborted their request"
        )

        # ============================================
        # DATA QUALITY METRICS
        # ============================================
        self.shape_anomalies = self.counter(
            "am_shape_anomalies_total",
            "To-one relations that arrived with more than one element",
            ["relation"]
        )

    def counter(self, name: str, description: str, labels: Optional[List[str]] = None) -> Counter:
        """Create and register a counter."""
        metric = Counter(name, description, labels)
        self._metrics[name] = metric
        return metric

    def histogram(
        self,
        name: str,
        description: str,
        labels: Optional[List[str]] = None,
        buckets: Optional[tuple] = None
    ) -> Histogram:
        """Create and register a histogram."""
        metric = Histogram(name, description, labels, buckets)
        self._metrics[name] = metric
        return metric

    def track_query(self, query_type: str, success: bool, rows: int) -> None:
        """Record outcome and row count of one projection call."""
        self.queries_total.inc(query_type=query_type, status="success" if success else "error")
        if success:
            self.rows_returned.inc(rows, query_type=query_type)

    def export(self) -> str:
        """
        Export all metrics in Prometheus text exposition format.

        Format specification:
        https://prometheus.io/docs/instrumenting/exposition_formats/
        """
        lines = []

        for name, metric in self._metrics.items():
            lines.append(f"# HELP {name} {metric.description}")
            lines.append(f"# TYPE {name} {metric.kind}")

            for mv in metric.collect():
                labels = dict(mv.labels)
                metric_name = name
                if isinstance(metric, Histogram):
                    if "_metric" in labels:
                        metric_name = f"{name}_{labels.pop('_metric')}"
                    elif "le" in labels:
                        metric_name = f"{name}_bucket"
                lines.append(f"{metric_name}{self._format_labels(labels)} {mv.value}")

            lines.append("")

        return "\n".join(lines)

    def _format_labels(self, labels: Dict[str, str]) -> str:
        """Format labels as Prometheus label string."""
        if not labels:
            return ""

        parts = [f'{k}="{v}"' for k, v in sorted(labels.items())]
        return "{" + ",".join(parts) + "}"

    def reset(self) -> None:
        """Reset all metrics. Useful for testing."""
        self._metrics.clear()
        self._setup_metrics()


# Global metrics instance
metrics = MetricsRegistry()
