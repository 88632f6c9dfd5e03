# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Prometheus metrics for the customer service."""
from prometheus_client import Counter, Gauge, Histogram

# ── HTTP Metrics (used by middleware) ──
REQUEST_COUNT = Counter(
    "customer_http_requests_total", "Total HTTP requests", ["method", "endpoint", "status"]
)
REQUEST_LATENCY = Histogram(
    "customer_http_request_duration_seconds", "HTTP request latency", ["method", "endpoint"]
)
HTTP_ERRORS = Counter(
    "customer_http_errors_total", "Total HTTP errors", ["method", "endpoint", "status"]
)

# ── Business Metrics (updated by service layer only) ──
CUSTOMER_WRITES = Counter(
    "customer_writes_total", "Customer writes that reached storage", ["operation"]
)
VALIDATION_ERRORS = Counter(
    "customer_validation_errors_total", "Rejected writes by offending field", ["field"]
)
CUSTOMERS_TOTAL = Gauge(
    "customers_total", "Current number of stored customers"
)
CATEGORY_REPORTS = Counter(
    "customer_category_reports_total", "Category percentage reports generated"
)
