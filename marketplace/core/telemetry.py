"""OpenTelemetry tracing for the marketplace API.

Spans carry the service version and the ``marketplace`` namespace; the health
probe is excluded so load balancer polling does not flood the exporter.
"""

from __future__ import annotations

import logging

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from opentelemetry.semconv.resource import ResourceAttributes

from marketplace.core.config import settings

logger = logging.getLogger(__name__)

SERVICE_NAMESPACE = "marketplace"
EXCLUDED_URLS = "/health"


def parse_otlp_headers(value: str) -> dict[str, str]:
    """Parse ``key=value,key2=value2`` exporter headers; malformed items are skipped."""
    headers: dict[str, str] = {}
    for item in (value or "").split(","):
        key, sep, val = item.strip().partition("=")
        if sep and key.strip():
            headers[key.strip()] = val.strip()
    return headers


def build_resource() -> Resource:
    return Resource.create(
        {
            ResourceAttributes.SERVICE_NAME: settings.OTEL_SERVICE_NAME,
            ResourceAttributes.SERVICE_NAMESPACE: SERVICE_NAMESPACE,
            ResourceAttributes.SERVICE_VERSION: settings.VERSION,
            ResourceAttributes.DEPLOYMENT_ENVIRONMENT: settings.ENV,
        }
    )


def configure_telemetry(app, engine) -> bool:
    """
    Instrument the app and the engine when tracing is enabled.

    Returns whether tracing was installed.
    """
    if not settings.OTEL_ENABLED or not settings.OTEL_EXPORTER_OTLP_ENDPOINT:
        return False

    try:
        provider = TracerProvider(
            resource=build_resource(),
            sampler=ParentBased(TraceIdRatioBased(settings.OTEL_SAMPLE_RATE)),
        )
        provider.add_span_processor(
            BatchSpanProcessor(
                OTLPSpanExporter(
                    endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT,
                    headers=parse_otlp_headers(settings.OTEL_EXPORTER_OTLP_HEADERS),
                )
            )
        )
        trace.set_tracer_provider(provider)

        FastAPIInstrumentor.instrument_app(
            app, tracer_provider=provider, excluded_urls=EXCLUDED_URLS
        )
        SQLAlchemyInstrumentor().instrument(engine=engine, tracer_provider=provider)
    except Exception:
        logger.exception("Failed to initialize OpenTelemetry tracing")
        return False

    logger.info("OpenTelemetry tracing enabled for %s", settings.OTEL_SERVICE_NAME)
    return True
