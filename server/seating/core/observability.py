"""Observability setup for OpenTelemetry, metrics, and structured logging."""

import logging

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_client import CollectorRegistry, Counter, Gauge, generate_latest
import structlog

from .. import __version__
from .config import settings

# Prometheus metrics
REGISTRY = CollectorRegistry()

RESERVATIONS_CONFIRMED = Counter(
    'reservations_confirmed_total',
    'Total reservations confirmed, including waitlist promotions',
    ['table_id'],
    registry=REGISTRY
)

RESERVATIONS_CANCELLED = Counter(
    'reservations_cancelled_total',
    'Total confirmed reservations cancelled',
    ['table_id'],
    registry=REGISTRY
)

WAITLIST_JOINED = Counter(
    'waitlist_joined_total',
    'Total customers added to a table waitlist',
    ['table_id'],
    registry=REGISTRY
)

WAITLIST_PROMOTIONS = Counter(
    'waitlist_promotions_total',
    'Total waitlisted customers promoted to a confirmed reservation',
    ['table_id'],
    registry=REGISTRY
)

UPSTREAM_FAILURES = Counter(
    'availability_upstream_failures_total',
    'Availability store calls that failed or timed out',
    ['operation'],
    registry=REGISTRY
)

WAITLIST_LENGTH = Gauge(
    'waitlist_length',
    'Current number of customers waiting for a table',
    ['table_id'],
    registry=REGISTRY
)

RECONCILIATIONS_PENDING = Gauge(
    'reconciliations_pending',
    'Cancelled reservations whose table release is not yet written upstream',
    registry=REGISTRY
)


def setup_structured_logging():
    """Configure structured logging with structlog."""

    def add_trace_context(logger, method_name, event_dict):
        """Add trace context to log events."""
        span = trace.get_current_span()
        if span and span.is_recording():
            ctx = span.get_span_context()
            event_dict['trace_id'] = format(ctx.trace_id, '032x')
            event_dict['span_id'] = format(ctx.span_id, '016x')
        return event_dict

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_trace_context,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level)
        ),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _service_resource(app_name: str) -> Resource:
    return Resource.create({
        "service.name": app_name,
        "service.version": __version__,
        "environment": settings.environment,
    })


def setup_tracing(app_name: str):
    """Setup OpenTelemetry tracing."""
    provider = TracerProvider(resource=_service_resource(app_name))

    if settings.otlp_endpoint:
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otlp_endpoint))
        )

    trace.set_tracer_provider(provider)


def setup_metrics(app_name: str):
    """Setup OpenTelemetry metrics."""
    if settings.otlp_endpoint:
        reader = PeriodicExportingMetricReader(
            exporter=OTLPMetricExporter(endpoint=settings.otlp_endpoint),
            export_interval_millis=60000,
        )
        metrics.set_meter_provider(
            MeterProvider(resource=_service_resource(app_name), metric_readers=[reader])
        )


def instrument_fastapi(app):
    """Instrument FastAPI with OpenTelemetry."""
    FastAPIInstrumentor.instrument_app(app)


class MetricsCollector:
    """Collector for reservation business metrics."""

    @staticmethod
    def record_reservation_confirmed(table_id: str):
        RESERVATIONS_CONFIRMED.labels(table_id=table_id).inc()

    @staticmethod
    def record_reservation_cancelled(table_id: str):
        RESERVATIONS_CANCELLED.labels(table_id=table_id).inc()

    @staticmethod
    def record_waitlist_joined(table_id: str):
        WAITLIST_JOINED.labels(table_id=table_id).inc()

    @staticmethod
    def record_promotion(table_id: str):
        """Record a waitlist promotion; the promoted booking also counts as confirmed."""
        WAITLIST_PROMOTIONS.labels(table_id=table_id).inc()
        RESERVATIONS_CONFIRMED.labels(table_id=table_id).inc()

    @staticmethod
    def record_upstream_failure(operation: str):
        UPSTREAM_FAILURES.labels(operation=operation).inc()

    @staticmethod
    def set_waitlist_length(table_id: str, count: int):
        WAITLIST_LENGTH.labels(table_id=table_id).set(count)

    @staticmethod
    def set_reconciliations_pending(count: int):
        RECONCILIATIONS_PENDING.set(count)


def get_prometheus_metrics():
    """Get Prometheus metrics for the /metrics endpoint."""
    return generate_latest(REGISTRY)


# Global metrics collector instance
metrics_collector = MetricsCollector()


class StructuredLogger:
    """Structured logger with business context."""

    def __init__(self, logger):
        self.logger = logger

    def info(self, message: str, **kwargs):
        self.logger.info(message, **kwargs)

    def error(self, message: str, **kwargs):
        self.logger.error(message, **kwargs)

    def with_context(self, **kwargs) -> "StructuredLogger":
        """Return a logger with extra context bound to every event."""
        return StructuredLogger(self.logger.bind(**kwargs))


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance."""
    return StructuredLogger(structlog.get_logger(name))
