"""Custom metrics for the catalog service."""

from opentelemetry import metrics

meter = metrics.get_meter("catalog-svc")

compose_counter = meter.create_counter(
    name="catalog_compose_total",
    description="Total number of catalog views composed",
    unit="1",
)

admitted_items_histogram = meter.create_histogram(
    name="catalog_admitted_items",
    description="Number of items surviving the eligibility filters per view",
    unit="1",
)

excluded_items_histogram = meter.create_histogram(
    name="catalog_excluded_items",
    description="Number of items removed by the eligibility filters per view",
    unit="1",
)

source_fetch_duration = meter.create_histogram(
    name="catalog_source_fetch_duration_seconds",
    description="Duration of catalog store requests by table",
    unit="s",
)

source_fetch_failures = meter.create_counter(
    name="catalog_source_fetch_failure_total",
    description="Total number of failed catalog store requests by table",
    unit="1",
)

snapshot_cache_lookups = meter.create_counter(
    name="catalog_snapshot_cache_lookups_total",
    description="Snapshot cache lookups by result (hit or miss)",
    unit="1",
)

catalog_change_events = meter.create_counter(
    name="catalog_change_events_total",
    description="Catalog change notifications received by table",
    unit="1",
)


def record_compose(total_items: int, admitted_items: int, near_me: bool) -> None:
    """Record one composed catalog view.

    Args:
        total_items: Items in the snapshot
        admitted_items: Items returned to the viewer
        near_me: Whether the proximity filter was requested
    """
    attributes = {"near_me": near_me}
    compose_counter.add(1, attributes)
    admitted_items_histogram.record(admitted_items, attributes)
    excluded_items_histogram.record(max(0, total_items - admitted_items), attributes)


def record_source_fetch(table: str, duration_seconds: float, success: bool) -> None:
    """Record a catalog store request.

    Args:
        table: Table that was queried
        duration_seconds: Duration in seconds
        success: Whether the request succeeded
    """
    source_fetch_duration.record(duration_seconds, {"table": table, "success": success})
    if not success:
        source_fetch_failures.add(1, {"table": table})


def record_cache_lookup(hit: bool) -> None:
    snapshot_cache_lookups.add(1, {"result": "hit" if hit else "miss"})


def record_catalog_change(table: str) -> None:
    catalog_change_events.add(1, {"table": table})
