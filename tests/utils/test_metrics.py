"""
Tests for Prometheus metrics collection.
"""
import pytest
from answer_metrics.utils.metrics import (
    MetricsRegistry,
    Counter,
    Histogram,
    Timer,
    metrics,
)


class TestCounter:
    """Tests for Counter metric type."""

    def test_counter_increment(self):
        counter = Counter("test_counter", "Test counter")
        counter.inc()
        counter.inc(5)

        values = counter.collect()
        assert len(values) == 1
        assert values[0].value == 6

    def test_counter_with_labels(self):
        """Counter tracks separate values per label combination."""
        counter = Counter("test_counter", "Test counter", ["status"])
        counter.inc(1, status="success")
        counter.inc(2, status="error")
        counter.inc(1, status="success")

        assert counter.value(status="success") == 2
        assert counter.value(status="error") == 2
        assert counter.value(status="missing") == 0


class TestHistogram:

    def test_histogram_observe(self):
        """Histogram records cumulative bucket counts."""
        histogram = Histogram("test_histogram", "Test histogram", buckets=(0.1, 0.5, 1.0))
        for value in (0.05, 0.3, 0.8, 2.0):
            histogram.observe(value)

        values = histogram.collect()
        by_le = {v.labels["le"]: v.value for v in values if "le" in v.labels}

        assert by_le == {"0.1": 1, "0.5": 2, "1.0": 3, "+Inf": 4}

        sum_value = next(v for v in values if v.labels.get("_metric") == "sum")
        assert sum_value.value == pytest.approx(3.15)


class TestTimer:

    def test_timer_records_duration(self):
        histogram = Histogram("test_duration", "Test duration")

        with Timer(histogram, query_type="brand_metrics") as timer:
            pass

        count_value = next(v for v in histogram.collect() if v.labels.get("_metric") == "count")
        assert count_value.value == 1
        assert count_value.labels["query_type"] == "brand_metrics"
        assert timer.elapsed_ms >= 0


class TestMetricsRegistry:
    """Tests for MetricsRegistry singleton."""

    def test_registry_is_singleton(self):
        assert MetricsRegistry() is MetricsRegistry()

    def test_registry_has_engine_metrics(self):
        registry = MetricsRegistry()

        for name in ("queries_total", "query_duration", "rows_returned",
                     "chunks_fetched", "chunk_failures", "shape_anomalies"):
            assert hasattr(registry, name), f"Missing metric: {name}"

    def test_track_query(self):
        registry = MetricsRegistry()

        registry.track_query("brand_metrics", True, 12)
        registry.track_query("brand_metrics", False, 0)

        assert registry.queries_total.value(query_type="brand_metrics", status="success") == 1
        assert registry.queries_total.value(query_type="brand_metrics", status="error") == 1
        assert registry.rows_returned.value(query_type="brand_metrics") == 12

    def test_export_prometheus_format(self):
        registry = MetricsRegistry()
        registry.queries_total.inc(query_type="competitor_metrics", status="success")
        registry.query_duration.observe(0.2, query_type="competitor_metrics")

        output = registry.export()

        assert "# TYPE am_queries_total counter" in output
        assert 'am_queries_total{query_type="competitor_metrics",status="success"} 1' in output
        assert "# TYPE am_query_duration_seconds histogram" in output
        assert 'am_query_duration_seconds_bucket{le="0.25",query_type="competitor_metrics"} 1' in output
        assert 'am_query_duration_seconds_count{query_type="competitor_metrics"} 1' in output

    def test_reset_clears_metrics(self):
        metrics.chunk_failures.inc()
        metrics.reset()
        assert metrics.chunk_failures.collect() == []
