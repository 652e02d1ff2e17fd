"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Write outcomes
event_writes = Counter(
    'event_writes_total',
    'Event writes by outcome',
    ['result']  # committed, invalid, conflict
)

booking_writes = Counter(
    'booking_writes_total',
    'Booking writes by outcome',
    ['result']  # committed, invalid, missing_event
)

# Referenced-event existence check made by the booking hook
event_lookup_latency = Histogram(
    'event_lookup_latency_seconds',
    'Latency of the referenced-event existence lookup',
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25]
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set/invalidate, hit/miss/error
)


def metrics_endpoint() -> Response:
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_event_write(result: str):
    """Result: committed, invalid, conflict"""
    event_writes.labels(result=result).inc()


def record_booking_write(result: str):
    """Result: committed, invalid, missing_event"""
    booking_writes.labels(result=result).inc()


def record_cache_operation(operation: str, result: str):
    cache_operations.labels(operation=operation, result=result).inc()
