"""
Prometheus metrics for fedipost services.

Each collector owns its registry, so several service instances (as in tests)
can coexist in one process without duplicate-timeseries errors.
"""

from typing import Any, Dict, Optional, Sequence, Tuple

from prometheus_client import Counter, Histogram, Info, CollectorRegistry, generate_latest

# name -> (type, help, label names)
MetricSpec = Tuple[type, str, Sequence[str]]

COMMON_METRICS: Dict[str, MetricSpec] = {
    "http_requests_total": (Counter, "Total HTTP requests", ("method", "endpoint", "status_code")),
    "http_request_duration_seconds": (Histogram, "HTTP request duration in seconds", ("method", "endpoint")),
    "health_check_total": (Counter, "Total health check requests", ("status",)),
    "errors_total": (Counter, "Total errors", ("error_type", "service")),
    "business_events_total": (Counter, "Total business events", ("event_type", "service")),
}

POSTS_METRICS: Dict[str, MetricSpec] = {
    "cache_requests_total": (Counter, "Cache lookups by entry type and outcome", ("cache", "result")),
    "cache_writes_total": (Counter, "Cache sets and invalidations by outcome", ("operation", "result")),
    "store_operations_total": (Counter, "Durable store operations", ("operation", "status")),
    "store_operation_duration_seconds": (
        Histogram, "Durable store operation duration in seconds", ("operation",)
    ),
    "posts_created_total": (Counter, "Total posts created", ()),
}

SERVICE_METRICS: Dict[str, Dict[str, MetricSpec]] = {
    "posts": POSTS_METRICS,
}


class MetricsCollector:
    """Centralized metrics collector for services."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry or CollectorRegistry()
        self._metrics: Dict[str, Any] = {}

        info = Info("service_info", "Service information", registry=self.registry)
        info.info({"service": service_name, "version": "1.0.0"})

        self._register(COMMON_METRICS)
        self._register(SERVICE_METRICS.get(service_name, {}))

    def _register(self, specs: Dict[str, MetricSpec]) -> None:
        for name, (metric_type, documentation, labels) in specs.items():
            self._metrics[name] = metric_type(name, documentation, labels, registry=self.registry)

    def export(self) -> bytes:
        """Render the registry in the Prometheus text format."""
        return generate_latest(self.registry)

    def record_http_request(self, method: str, endpoint: str, status_code: int, duration: float):
        self._metrics["http_requests_total"].labels(
            method=method, endpoint=endpoint, status_code=str(status_code)
        ).inc()
        self._metrics["http_request_duration_seconds"].labels(method=method, endpoint=endpoint).observe(duration)

    def record_health_check(self, status: str):
        self._metrics["health_check_total"].labels(status=status).inc()

    def record_error(self, error_type: str):
        self._metrics["errors_total"].labels(error_type=error_type, service=self.service_name).inc()

    def record_business_event(self, event_type: str):
        self._metrics["business_events_total"].labels(event_type=event_type, service=self.service_name).inc()

    def increment_counter(self, metric_name: str, **labels):
        """Increment a registered counter; unknown names are ignored."""
        metric = self._metrics.get(metric_name)
        if metric is None:
            return
        (metric.labels(**labels) if labels else metric).inc()

    def observe_histogram(self, metric_name: str, value: float, **labels):
        """Observe a registered histogram; unknown names are ignored."""
        metric = self._metrics.get(metric_name)
        if metric is None:
            return
        (metric.labels(**labels) if labels else metric).observe(value)


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)
