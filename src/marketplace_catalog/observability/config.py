"""OpenTelemetry and logging setup for the catalog service."""

import logging
import os
from typing import Any

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from pythonjsonlogger import jsonlogger

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_NAME = "marketplace-catalog"
DEFAULT_OTLP_ENDPOINT = "http://localhost:4318"
DEFAULT_METRIC_INTERVAL_MS = 60000

# Per-request client logs drown out catalog logs at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def _otlp_endpoint(signal: str) -> str:
    base = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", DEFAULT_OTLP_ENDPOINT).rstrip("/")
    return f"{base}/v1/{signal}"


def get_service_resource() -> Resource:
    """Build the resource describing this catalog deployment.

    Returns:
        Resource with service name, environment and catalog timezone
    """
    return Resource.create(
        {
            "service.name": os.getenv("OTEL_SERVICE_NAME", DEFAULT_SERVICE_NAME),
            "deployment.environment": os.getenv("ENVIRONMENT", "development"),
            "catalog.timezone": os.getenv("CATALOG_TIMEZONE", "Asia/Kuala_Lumpur"),
        }
    )


def build_tracer_provider(resource: Resource, export: bool) -> TracerProvider:
    """Create a tracer provider, batching spans to OTLP when export is on."""
    provider = TracerProvider(resource=resource)
    if export:
        endpoint = _otlp_endpoint("traces")
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))
        logger.info(f"Exporting catalog traces to {endpoint}")
    return provider


def build_meter_provider(resource: Resource, export: bool) -> MeterProvider:
    """Create a meter provider, pushing periodically to OTLP when export is on."""
    if not export:
        return MeterProvider(resource=resource)

    endpoint = _otlp_endpoint("metrics")
    interval = int(os.getenv("CATALOG_METRIC_INTERVAL_MS", str(DEFAULT_METRIC_INTERVAL_MS)))
    reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=endpoint), export_interval_millis=interval
    )
    logger.info(f"Exporting catalog metrics to {endpoint} every {interval}ms")
    return MeterProvider(resource=resource, metric_readers=[reader])


def setup_observability(app: Any = None, enable_exporters: bool = True) -> None:
    """Install tracer and meter providers and instrument outgoing catalog reads.

    Exporters are never enabled when ENVIRONMENT=test.

    Args:
        app: FastAPI catalog app to instrument, if any
        enable_exporters: Whether spans and metrics leave the process
    """
    export = enable_exporters and os.getenv("ENVIRONMENT", "development") != "test"
    resource = get_service_resource()

    trace.set_tracer_provider(build_tracer_provider(resource, export))
    metrics.set_meter_provider(build_meter_provider(resource, export))

    HTTPXClientInstrumentor().instrument()

    if app is not None:
        FastAPIInstrumentor.instrument_app(app, excluded_urls="health")

    logger.info(f"Catalog observability ready (exporters={'on' if export else 'off'})")


def configure_logging(log_level: str = "INFO") -> None:
    """Send JSON log lines to stderr at the requested level.

    LOG_LEVEL in the environment takes precedence over the argument.

    Args:
        log_level: Logging level name
    """
    level_name = os.getenv("LOG_LEVEL", log_level).upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(
        jsonlogger.JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s",
            rename_fields={"levelname": "level", "name": "logger"},
            timestamp=True,
        )
    )

    root_logger = logging.getLogger()
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logger.info(f"Catalog logging configured at {level_name}")
