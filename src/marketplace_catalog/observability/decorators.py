"""OpenTelemetry tracing decorators."""

import asyncio
import functools
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Span

F = TypeVar("F", bound=Callable[..., Any])


@contextmanager
def _outcome_span(
    tracer: trace.Tracer, name: str, func_name: str, service_name: str
) -> Iterator[Span]:
    """Open a span and mark it with the outcome of the wrapped call."""
    with tracer.start_as_current_span(name) as span:
        span.set_attribute("service.name", service_name)
        if name != func_name:
            span.set_attribute("function.name", func_name)

        try:
            yield span
        except Exception as e:
            span.set_attribute("success", False)
            span.set_attribute("error.type", type(e).__name__)
            span.set_attribute("error.message", str(e))
            span.record_exception(e)
            raise

        span.set_attribute("success", True)


def _record_result(span: Span, result: Any) -> None:
    # Collections report their size; a None result usually means a degraded load
    if isinstance(result, list | tuple):
        span.set_attribute("result.count", len(result))
    elif result is None:
        span.set_attribute("result.empty", True)


def traced(span_name: str | None = None, service_name: str = "catalog-svc") -> Callable[[F], F]:
    """Decorator to add OpenTelemetry tracing to a function.

    Creates a span per call, records failures on it and annotates the size of
    list results. Sync and async functions are supported.

    Args:
        span_name: Name for the span (defaults to function name if not provided)
        service_name: Service name for span attributes

    Returns:
        Decorated function with tracing

    Example:
        @traced("load_catalog_snapshot", service_name="catalog-svc")
        async def get_snapshot() -> CatalogSnapshot | None:
            ...
    """

    def decorator(func: F) -> F:
        name = span_name or func.__name__
        tracer = trace.get_tracer(service_name)

        if asyncio.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with _outcome_span(tracer, name, func.__name__, service_name) as span:
                    result = await func(*args, **kwargs)
                    _record_result(span, result)
                    return result

            return async_wrapper  # type: ignore

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with _outcome_span(tracer, name, func.__name__, service_name) as span:
                result = func(*args, **kwargs)
                _record_result(span, result)
                return result

        return sync_wrapper  # type: ignore

    return decorator
