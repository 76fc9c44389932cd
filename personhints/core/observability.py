"""Logging and OpenTelemetry initialization helpers."""

from __future__ import annotations

import logging
from typing import Optional

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SpanExporter

from personhints.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)
_TRACING_INITIALIZED = False

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None, *, config: Optional[Settings] = None) -> None:
    """Apply the configured log level to the package logger hierarchy."""

    config = config or default_settings
    chosen = (level or config.LOG_LEVEL).upper()
    logging.basicConfig(level=chosen, format=LOG_FORMAT)
    logging.getLogger("personhints").setLevel(chosen)


def setup_tracing(config: Optional[Settings] = None) -> None:
    """Install an SDK tracer provider once, if tracing is enabled."""

    global _TRACING_INITIALIZED
    config = config or default_settings
    if _TRACING_INITIALIZED or not config.TRACING_ENABLED:
        return

    resource = Resource.create(
        {
            "service.name": config.SERVICE_NAME,
            "service.version": config.SERVICE_VERSION,
        }
    )

    provider = TracerProvider(resource=resource)
    exporter = _select_exporter(config)
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    _TRACING_INITIALIZED = True
    logger.info("OpenTelemetry tracing initialized with %s exporter", exporter.__class__.__name__)


def _select_exporter(config: Settings) -> SpanExporter:
    if config.OTEL_EXPORTER_OTLP_ENDPOINT:
        return OTLPSpanExporter(endpoint=str(config.OTEL_EXPORTER_OTLP_ENDPOINT))
    return ConsoleSpanExporter()


__all__ = ["configure_logging", "setup_tracing"]
