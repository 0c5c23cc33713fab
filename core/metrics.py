"""
Prometheus Metrics for the Contact Relay

Exposes metrics for:
- Rate limiter admissions, rejections and evictions
- Contact submission outcomes
- Email dispatch latency
"""

from prometheus_client import (
    Counter, Histogram,
    CollectorRegistry, generate_latest,
    CONTENT_TYPE_LATEST
)

REGISTRY = CollectorRegistry()

# ============================================================================
# Rate Limiter Metrics
# ============================================================================

RATE_LIMIT_ADMITTED_TOTAL = Counter(
    'contact_rate_limit_admitted_total',
    'Total requests admitted by the rate limiter',
    registry=REGISTRY
)

RATE_LIMIT_REJECTED_TOTAL = Counter(
    'contact_rate_limit_rejected_total',
    'Total requests rejected by the rate limiter',
    registry=REGISTRY
)

RATE_LIMIT_EVICTIONS_TOTAL = Counter(
    'contact_rate_limit_evictions_total',
    'Client windows evicted to keep the limiter bounded',
    registry=REGISTRY
)

# ============================================================================
# Submission Metrics
# ============================================================================

CONTACT_SUBMISSIONS_TOTAL = Counter(
    'contact_submissions_total',
    'Contact submissions by outcome',
    ['outcome'],
    registry=REGISTRY
)

DISPATCH_LATENCY_SECONDS = Histogram(
    'contact_dispatch_latency_seconds',
    'Time spent handing a message to the email provider',
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
    registry=REGISTRY
)


def get_metrics_text() -> str:
    """Get all metrics in Prometheus text format"""
    return generate_latest(REGISTRY).decode('utf-8')


def get_metrics_content_type() -> str:
    """Get content type for Prometheus metrics"""
    return CONTENT_TYPE_LATEST
