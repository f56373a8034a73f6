"""OpenTelemetry instrumentation and logging setup."""

from marketplace_catalog.observability.config import configure_logging, setup_observability
from marketplace_catalog.observability.decorators import traced

__all__ = ["setup_observability", "configure_logging", "traced"]
