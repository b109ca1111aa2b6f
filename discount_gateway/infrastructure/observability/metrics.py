"""Prometheus metrics for recommendation mix, import quality and decisions"""

from prometheus_client import Counter, Histogram

# Recommendation metrics
recommendation_counter = Counter(
    "discount_recommendation_total",
    "Recommendations computed",
    ["action"],  # TAKE | HOLD | BORROW
)

# Import metrics
import_rows_counter = Counter(
    "discount_import_rows_total",
    "CSV rows processed by import",
    ["outcome"],  # imported | skipped
)

malformed_terms_counter = Counter(
    "discount_malformed_terms_total",
    "Payment terms strings rejected by the parser",
)

# Decision metrics
decision_counter = Counter(
    "discount_decision_total",
    "User decisions recorded",
    ["action"],  # APPROVE_TAKE | APPROVE_HOLD | APPROVE_BORROW | DISMISS
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_recommendation(action: str) -> None:
    recommendation_counter.labels(action=action).inc()


def record_import(imported: int, skipped: int) -> None:
    """Record import row outcomes for data-quality monitoring"""
    import_rows_counter.labels(outcome="imported").inc(imported)
    import_rows_counter.labels(outcome="skipped").inc(skipped)
