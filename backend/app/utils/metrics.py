"""Prometheus metrics for document ingestion and upstream model calls."""

from prometheus_client import Counter, Histogram

# Ingestion metrics
documents_ingested_total = Counter(
    "documents_ingested_total",
    "Total documents ingested",
    ["mime", "extraction"],
)

# Upstream call metrics
upstream_latency_ms = Histogram(
    "upstream_latency_ms",
    "Upstream model call latency in milliseconds",
    ["service", "outcome"],
    buckets=[100, 250, 500, 1000, 2500, 5000, 10000, 30000, 60000, 120000],
)

upstream_errors_total = Counter(
    "upstream_errors_total",
    "Total upstream model call errors",
    ["service", "reason"],
)


class PrometheusUpstreamMetrics:
    """Prometheus-based upstream call metrics implementation."""

    def record_latency(self, service: str, outcome: str, latency_ms: float) -> None:
        """Record upstream call latency."""
        upstream_latency_ms.labels(service=service, outcome=outcome).observe(latency_ms)

    def inc_error(self, service: str, reason: str) -> None:
        """Increment error counter."""
        upstream_errors_total.labels(service=service, reason=reason).inc()
