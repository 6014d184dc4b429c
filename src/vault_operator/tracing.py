"""OpenTelemetry tracing for reconciliations and Vault bootstrap steps."""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Any, Iterator

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Span, Tracer

logger = logging.getLogger(__name__)

ATTRIBUTE_PREFIX = "vault_operator"

_tracer: Tracer | None = None


def tracing_enabled() -> bool:
    return os.getenv("OTEL_TRACES_ENABLED", "false").lower() == "true"


def initialize_tracing(service_name: str = "vault-operator") -> None:
    """Install an OTLP-exporting tracer provider.

    Spans are only produced when ``OTEL_TRACES_ENABLED=true``.
    ``OTEL_SERVICE_NAME``, ``OTEL_SERVICE_VERSION`` and
    ``OTEL_EXPORTER_OTLP_ENDPOINT`` (default ``http://localhost:4317``)
    override the exported identity and the collector.
    """
    global _tracer

    if not tracing_enabled():
        logger.debug("Tracing disabled")
        return

    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4317")
    provider = TracerProvider(
        resource=Resource.create(
            {
                SERVICE_NAME: os.getenv("OTEL_SERVICE_NAME", service_name),
                SERVICE_VERSION: os.getenv("OTEL_SERVICE_VERSION", "unknown"),
            }
        )
    )
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))
    trace.set_tracer_provider(provider)

    _tracer = trace.get_tracer(__name__)
    logger.info(f"Exporting reconcile traces to {endpoint}")


def get_tracer() -> Tracer | None:
    return _tracer


@contextmanager
def trace_span(
    name: str,
    kind: str | None = None,
    attributes: dict[str, Any] | None = None,
) -> Iterator[Span | None]:
    """Run the enclosed block inside a span; a no-op until tracing is initialized.

    Args:
        name: Span name, e.g. ``reconcile_policy`` or ``vault_unseal``
        kind: Desired-state kind the span belongs to
        attributes: Extra attributes, prefixed with ``vault_operator.``

    Yields:
        The active span, or None when tracing is off
    """
    tracer = get_tracer()
    if tracer is None:
        yield None
        return

    attrs = {f"{ATTRIBUTE_PREFIX}.{key}": value for key, value in (attributes or {}).items()}
    if kind:
        attrs[f"{ATTRIBUTE_PREFIX}.kind"] = kind

    with tracer.start_as_current_span(name, attributes=attrs, record_exception=True) as span:
        yield span


def set_span_status(ok: bool, description: str | None = None) -> None:
    """Mark the current span as succeeded or failed."""
    span = trace.get_current_span()
    if not span.is_recording():
        return
    if ok:
        span.set_status(trace.Status(trace.StatusCode.OK))
    else:
        span.set_status(trace.Status(trace.StatusCode.ERROR, description))
