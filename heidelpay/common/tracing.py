"""OpenTelemetry helpers: one span per gateway call."""

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor


tracer = trace.get_tracer("heidelpay")

# Installed at most once per process, however many clients are built.
_provider: TracerProvider | None = None


def setup_tracing(service_name: str, endpoint: str) -> TracerProvider:
    """Create and register a tracer provider with OTLP HTTP exporter.

    Later calls return the provider installed by the first one.
    """

    global _provider
    if _provider is not None:
        return _provider
    resource = Resource.create({"service.name": service_name})
    provider = TracerProvider(resource=resource)
    exporter = OTLPSpanExporter(endpoint=endpoint)
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    _provider = provider
    return provider
