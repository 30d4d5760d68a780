"""
Prometheus metrics configuration
"""
from prometheus_client import (CONTENT_TYPE_LATEST, Counter, Histogram,
                               generate_latest)

# ============================================================================
# HTTP Request Metrics
# ============================================================================

http_requests_total = Counter(
    'budget_http_requests_total',
    'Total number of HTTP requests',
    ['method', 'endpoint', 'status_code']
)

http_request_duration_seconds = Histogram(
    'budget_http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)

# ============================================================================
# LLM Request Metrics
# ============================================================================

llm_requests_total = Counter(
    'budget_llm_requests_total',
    'Total number of LLM requests',
    ['model', 'status']
)

llm_request_duration_seconds = Histogram(
    'budget_llm_request_duration_seconds',
    'LLM request duration in seconds',
    ['model'],
    buckets=(0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0)
)

# ============================================================================
# Budget Store Metrics
# ============================================================================

budget_writes_total = Counter(
    'budget_writes_total',
    'Budget write attempts',
    ['status']  # status: 'stored', 'rejected'
)

budget_simulations_total = Counter(
    'budget_simulations_total',
    'Budget simulations',
    ['status']  # status: 'ok', 'no_budget'
)


def get_metrics() -> bytes:
    """Render all metrics in Prometheus text format"""
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
