"""Prometheus metric definitions for the gateway."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "route", "method", "status_code"],
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration seconds",
    ["service", "route", "method"],
)
provider_calls_total = Counter(
    "provider_calls_total",
    "Upstream provider calls by operation and outcome",
    ["service", "operation", "outcome"],
)
provider_latency_seconds = Histogram(
    "provider_latency_seconds",
    "Upstream provider call latency seconds",
    ["service", "operation"],
)
webhook_events_total = Counter(
    "webhook_events_total",
    "Inbound webhook deliveries by verification outcome",
    ["service", "outcome"],
)
fallback_requests_total = Counter(
    "fallback_requests_total",
    "Requests delegated to the fallback handler",
    ["service", "outcome"],
)
gateway_errors_total = Counter(
    "gateway_errors_total",
    "Error responses emitted by the dispatcher",
    ["service", "kind", "status_code"],
)


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")
