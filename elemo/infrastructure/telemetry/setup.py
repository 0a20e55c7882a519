# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""OpenTelemetry setup.

Installs an SDK tracer provider exporting spans over OTLP/gRPC. Services
take their tracer from ``get_tracer`` through the ``with_tracer`` option;
without setup the global provider hands out no-op tracers.
"""

import logging

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from elemo import __version__
from elemo.core.config.settings import OTelSettings

logger = logging.getLogger(__name__)


def setup_telemetry(settings: OTelSettings) -> bool:
    """Setup OpenTelemetry tracing.

    Args:
        settings: OpenTelemetry settings.

    Returns:
        True if an exporting tracer provider was installed, False if
        telemetry is disabled or setup failed.

    Example:
        setup_telemetry(get_settings().otel)
        tracer = get_tracer("elemo")
    """
    if not settings.enabled:
        logger.info("Telemetry disabled, services will use the no-op tracer")
        return False

    try:
        resource = Resource.create({SERVICE_NAME: settings.service_name})
        provider = TracerProvider(resource=resource)
        exporter = OTLPSpanExporter(
            endpoint=settings.exporter_otlp_endpoint,
            insecure=settings.exporter_otlp_endpoint.startswith("http://"),
        )
        provider.add_span_processor(BatchSpanProcessor(exporter))
        trace.set_tracer_provider(provider)
    except Exception as e:
        logger.error("Failed to setup OpenTelemetry: %s", e)
        return False

    logger.info(
        "OpenTelemetry configured: service=%s, endpoint=%s",
        settings.service_name,
        settings.exporter_otlp_endpoint,
    )
    return True


def get_tracer(name: str = "elemo") -> trace.Tracer:
    """Return a tracer from the global tracer provider."""
    return trace.get_tracer(name, __version__)
