"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Request decision metrics
request_decisions = Counter(
    'event_request_decisions_total',
    'Guest request decisions',
    ['result']  # accepted, refused_capacity, rejected
)

accept_latency = Histogram(
    'event_request_accept_latency_seconds',
    'Guest request acceptance latency',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

accept_retries = Counter(
    'event_request_accept_retries_total',
    'Acceptance retries due to event version conflicts'
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['key', 'result']  # hit/miss
)

# Sweeper metrics
sweep_runs = Counter(
    'event_sweep_runs_total',
    'Lifecycle sweep executions',
    ['trigger']  # scheduled, manual
)

events_closed = Counter(
    'events_closed_total',
    'Events closed by the lifecycle sweeper'
)

# Survey metrics
survey_publishes = Counter(
    'survey_publishes_total',
    'Survey updates published to subscribers',
    ['reason']  # answer, next_question
)


def metrics_endpoint() -> Response:
    """
    Prometheus metrics endpoint.

    Usage:
        @app.get("/metrics")
        def metrics():
            return metrics_endpoint()
    """
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


# Convenience functions for instrumentation
def record_request_decision(result: str):
    """Record request decision. Result: accepted, refused_capacity, rejected"""
    request_decisions.labels(result=result).inc()


def record_cache_operation(key: str, hit: bool):
    """Record cache lookup."""
    result = "hit" if hit else "miss"
    cache_operations.labels(key=key, result=result).inc()


def record_sweep(trigger: str, closed: int):
    sweep_runs.labels(trigger=trigger).inc()
    events_closed.inc(closed)
