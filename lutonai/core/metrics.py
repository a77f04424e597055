"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Event registration metrics
registration_attempts = Counter(
    'registration_attempts_total',
    'Event registration attempts',
    ['result']  # confirmed, waitlisted, rejected
)

registration_latency = Histogram(
    'registration_latency_seconds',
    'Event registration request latency',
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)

# Access guard
last_admin_rejections = Counter(
    'last_admin_rejections_total',
    'User mutations rejected because they would remove the last admin',
    ['operation']  # delete, update
)

# Rate limiting
rate_limit_decisions = Counter(
    'rate_limit_decisions_total',
    'Rate limiter decisions',
    ['scope', 'result']  # allowed, limited, bypassed
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)

redis_connection_errors = Counter(
    'redis_connection_errors_total',
    'Redis connection errors'
)

# Side effects
uploads = Counter(
    'uploads_total',
    'Stored file uploads',
    ['result']  # stored, rejected, deleted, delete_failed
)

emails_sent = Counter(
    'emails_sent_total',
    'Outgoing e-mail',
    ['template', 'result']  # sent, failed, skipped
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_registration_attempt(result: str):
    """Record registration outcome. Result: confirmed, waitlisted, rejected"""
    registration_attempts.labels(result=result).inc()


def record_rate_limit(scope: str, result: str):
    rate_limit_decisions.labels(scope=scope, result=result).inc()


def record_cache_operation(operation: str, hit: bool):
    """Record cache operation."""
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()


def record_upload(result: str):
    uploads.labels(result=result).inc()


def record_email(template: str, result: str):
    emails_sent.labels(template=template, result=result).inc()
