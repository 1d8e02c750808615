"""Prometheus metric definitions for gateway traffic."""

from prometheus_client import Counter, Histogram


gateway_requests_total = Counter(
    "heidelpay_gateway_requests_total",
    "Total gateway HTTP requests",
    ["operation", "method", "status_code"],
)
gateway_request_duration_seconds = Histogram(
    "heidelpay_gateway_request_duration_seconds",
    "Gateway HTTP request duration seconds",
    ["operation", "method"],
)
gateway_errors_total = Counter(
    "heidelpay_gateway_errors_total",
    "Gateway calls that ended in an error",
    ["operation", "error_type"],
)
# Creations triggered by authorize/charge when given objects instead of ids.
resolutions_total = Counter(
    "heidelpay_resolutions_total",
    "Resources created while resolving authorize/charge arguments",
    ["kind"],
)
