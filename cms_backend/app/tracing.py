"""Configuration du tracing OpenTelemetry pour l'observabilité.

Le provider n'est installé que si `OTLP_ENDPOINT` est configuré ; sinon le tracer global reste le
tracer no-op d'OpenTelemetry.
"""

from __future__ import annotations

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from cms_backend.core.settings import Settings

tracer = trace.get_tracer("cms_backend")


def setup_tracing(settings: Settings) -> bool:
    """Configure l'export OTLP ; retourne True si le tracing est actif."""
    if not settings.OTLP_ENDPOINT:
        return False

    provider = TracerProvider(resource=Resource.create({SERVICE_NAME: settings.APP_NAME}))
    provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.OTLP_ENDPOINT, insecure=True))
    )
    trace.set_tracer_provider(provider)
    return True
