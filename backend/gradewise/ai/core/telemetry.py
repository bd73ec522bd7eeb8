"""
Gradewise - Telemetry Module
OpenTelemetry spans for LLM calls and grading pipeline stages
"""
import logging
from contextlib import contextmanager
from typing import Optional

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from gradewise.core.config import settings

logger = logging.getLogger(__name__)

TRACER_NAME = "gradewise.ai"

_initialized = False


def init_telemetry() -> None:
    """
    Install a tracer provider with an OTLP exporter.
    Call this once at application startup. Without it, spans are no-ops.
    """
    global _initialized

    if _initialized or not settings.TELEMETRY_ENABLED:
        return

    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor

    resource = Resource.create({
        "service.name": settings.OTEL_SERVICE_NAME,
        "service.version": settings.APP_VERSION,
        "deployment.environment": settings.ENVIRONMENT,
    })

    provider = TracerProvider(resource=resource)
    provider.add_span_processor(BatchSpanProcessor(
        OTLPSpanExporter(endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT, insecure=True)
    ))
    trace.set_tracer_provider(provider)
    _initialized = True

    logger.info(
        "Telemetry initialized with service %s, endpoint %s",
        settings.OTEL_SERVICE_NAME,
        settings.OTEL_EXPORTER_OTLP_ENDPOINT,
    )


def get_tracer() -> trace.Tracer:
    """Get the module tracer (a proxy until a provider is installed)."""
    return trace.get_tracer(TRACER_NAME, settings.APP_VERSION)


@contextmanager
def stage_span(name: str, attributes: Optional[dict] = None):
    """
    Context manager for a named pipeline/adapter span.

    Usage:
        with stage_span("ocr", {"answer.id": 12}) as span:
            ...
    """
    tracer = get_tracer()
    with tracer.start_as_current_span(name) as span:
        if attributes:
            for key, value in attributes.items():
                span.set_attribute(key, str(value) if value is not None else "")

        try:
            yield span
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise


def trace_llm_call(
    model: str,
    prompt_tokens: int = 0,
    completion_tokens: int = 0,
    total_tokens: int = 0,
):
    """
    Record LLM token usage on the current span.
    """
    span = trace.get_current_span()
    if span:
        span.set_attribute("llm.model", model)
        span.set_attribute("llm.tokens.prompt", prompt_tokens)
        span.set_attribute("llm.tokens.completion", completion_tokens)
        span.set_attribute("llm.tokens.total", total_tokens)
