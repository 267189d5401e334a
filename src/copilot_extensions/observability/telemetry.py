import logging
from contextlib import contextmanager
from typing import Any, ContextManager, Dict, Optional

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
)
from opentelemetry.trace import Status, StatusCode

logger = logging.getLogger("copilot_extensions.telemetry")

# ------------------------------------------------------------------------------
# OpenTelemetry (SAFE, SINGLE INIT)
# ------------------------------------------------------------------------------

_OTEL_CONFIGURED = False


def _otlp_url(endpoint: str, path: str) -> str:
    if "://" not in endpoint:
        endpoint = f"http://{endpoint}"
    if not endpoint.endswith(path):
        endpoint = endpoint.rstrip("/") + path
    return endpoint


def configure_opentelemetry(
    service_name: str = "copilot-extensions",
    otlp_endpoint: Optional[str] = None,
):
    """
    Configure OpenTelemetry exactly once.
    Without an OTLP endpoint spans go to the console and metrics are not exported.
    """

    global _OTEL_CONFIGURED
    if _OTEL_CONFIGURED:
        logger.debug("OpenTelemetry already configured, skipping re-init")
        return

    logger.info("Configuring OpenTelemetry")

    resource = Resource.create({"service.name": service_name})

    # ------------------------
    # Traces
    # ------------------------

    tracer_provider = TracerProvider(resource=resource)

    if otlp_endpoint:
        endpoint = _otlp_url(otlp_endpoint, "/v1/traces")
        logger.info("Using OTLP HTTP trace exporter -> %s", endpoint)
        span_processor = BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint))
    else:
        logger.warning("No OTLP endpoint set, using ConsoleSpanExporter")
        span_processor = SimpleSpanProcessor(ConsoleSpanExporter())

    tracer_provider.add_span_processor(span_processor)
    trace.set_tracer_provider(tracer_provider)

    # ------------------------
    # Metrics
    # ------------------------

    readers = []
    if otlp_endpoint:
        readers.append(
            PeriodicExportingMetricReader(
                OTLPMetricExporter(endpoint=_otlp_url(otlp_endpoint, "/v1/metrics"))
            )
        )
    metrics.set_meter_provider(MeterProvider(resource=resource, metric_readers=readers))

    _OTEL_CONFIGURED = True


def shutdown_opentelemetry():
    """Flush and shut down the providers on application shutdown."""
    for provider in (trace.get_tracer_provider(), metrics.get_meter_provider()):
        try:
            if hasattr(provider, "shutdown"):
                logger.info("Shutting down OpenTelemetry provider (flush)")
                provider.shutdown()
        except Exception as e:
            logger.exception(f"Failed to shutdown OpenTelemetry cleanly: {e}")


# ------------------------------------------------------------------------------
# Tracer Wrapper
# ------------------------------------------------------------------------------

class Tracer:
    def __init__(self, name: str = "copilot_extensions"):
        self._tracer = trace.get_tracer(name)

    @contextmanager
    def start_span(
        self,
        name: str,
        attributes: Dict[str, Any] | None = None,
    ) -> ContextManager[trace.Span]:
        with self._tracer.start_as_current_span(
            name,
            attributes=attributes or {},
        ) as span:
            yield span

    @staticmethod
    def mark_error(span: trace.Span, message: str) -> None:
        span.set_status(Status(StatusCode.ERROR, message))


# ------------------------------------------------------------------------------
# Metrics Wrapper
# ------------------------------------------------------------------------------

class Metrics:
    def __init__(self, name: str = "copilot_extensions"):
        self._meter = metrics.get_meter(name)
        self._counters = {}

    def increment_counter(
        self,
        name: str,
        value: int = 1,
        tags: Dict[str, str] | None = None,
    ):
        if name not in self._counters:
            self._counters[name] = self._meter.create_counter(name)
        self._counters[name].add(value, attributes=tags)


# ------------------------------------------------------------------------------
# Global instances
# ------------------------------------------------------------------------------

global_tracer = Tracer()
global_metrics = Metrics()
