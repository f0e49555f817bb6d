"""
actionseal observability (OpenTelemetry)

Every invocation runs in an `actionseal.invoke` span tagged with the action
id. References turned away before the action runs add an
`actionseal.rejected` event whose `actionseal.reason` is one of
`integrity`, `malformed` or `unknown_action`.

Exporting is enabled via environment variables:
- ACTIONSEAL_OTEL_ENABLED=true
- ACTIONSEAL_OTEL_SERVICE_NAME=actionseal
- ACTIONSEAL_OTEL_EXPORTER=console|otlp
- ACTIONSEAL_OTEL_OTLP_ENDPOINT=https://... (only if exporter=otlp)

Without them spans go to the API's no-op tracer.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import TYPE_CHECKING, Dict, Iterator, Optional, Union

from opentelemetry import trace

from .errors import IntegrityError, MalformedPayloadError, UnknownActionError

if TYPE_CHECKING:
    from .registry import ActionRegistry

logger = logging.getLogger(__name__)

_tracer = trace.get_tracer("actionseal")
_configured = False

REJECTION_REASONS = (
    (IntegrityError, "integrity"),
    (MalformedPayloadError, "malformed"),
    (UnknownActionError, "unknown_action"),
)


def _bool_env(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def rejection_reason(exc: BaseException) -> Optional[str]:
    for error_type, reason in REJECTION_REASONS:
        if isinstance(exc, error_type):
            return reason
    return None


def record_rejection(span, action_id: str, exc: BaseException) -> Optional[str]:
    """Add an `actionseal.rejected` event when exc is a pre-invocation rejection."""
    reason = rejection_reason(exc)
    if reason is not None:
        span.add_event(
            "actionseal.rejected",
            {"actionseal.action_id": action_id, "actionseal.reason": reason},
        )
    return reason


@contextmanager
def invocation_span(action_id: str) -> Iterator:
    with _tracer.start_as_current_span("actionseal.invoke") as span:
        span.set_attribute("actionseal.action_id", action_id)
        try:
            yield span
        except Exception as exc:
            record_rejection(span, action_id, exc)
            raise


def resource_attributes(registry: Optional["ActionRegistry"] = None) -> Dict[str, Union[str, int]]:
    attributes: Dict[str, Union[str, int]] = {
        "service.name": os.environ.get("ACTIONSEAL_OTEL_SERVICE_NAME", "actionseal"),
    }
    if registry is not None:
        attributes["actionseal.action_count"] = len(registry.ids())
    return attributes


def configure_observability(registry: Optional["ActionRegistry"] = None) -> bool:
    global _configured
    if not _bool_env("ACTIONSEAL_OTEL_ENABLED", False):
        return False
    if _configured:
        return True

    exporter = os.environ.get("ACTIONSEAL_OTEL_EXPORTER", "console").lower()

    try:
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
    except ImportError:
        logger.warning("ACTIONSEAL_OTEL_ENABLED is set but opentelemetry-sdk is not installed")
        return False

    provider = TracerProvider(resource=Resource.create(resource_attributes(registry)))

    if exporter == "otlp":
        try:
            from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
        except ImportError:
            logger.warning("OTLP exporter not installed, falling back to console")
            provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
        else:
            endpoint = os.environ.get("ACTIONSEAL_OTEL_OTLP_ENDPOINT")
            span_exporter = OTLPSpanExporter(endpoint=endpoint) if endpoint else OTLPSpanExporter()
            provider.add_span_processor(BatchSpanProcessor(span_exporter))
    else:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    _configured = True
    return True


def instrument_app(app) -> bool:
    if not _bool_env("ACTIONSEAL_OTEL_ENABLED", False):
        return False
    try:
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
    except ImportError:
        logger.warning("opentelemetry-instrumentation-fastapi is not installed")
        return False

    FastAPIInstrumentor.instrument_app(app)
    return True
