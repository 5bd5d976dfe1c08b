"""Prometheus metrics for risk verdicts, location anomalies and suggestions"""

from prometheus_client import Counter, Histogram

# Classification metrics
scan_counter = Counter(
    "upi_sentinel_scans_total",
    "Payment addresses classified",
    ["level"],  # safe | moderate | risky
)

parse_failure_counter = Counter(
    "upi_sentinel_parse_failures_total",
    "Scanned strings that were not valid payment addresses",
)

risk_score_histogram = Histogram(
    "upi_sentinel_risk_score",
    "Distribution of address risk scores",
    buckets=[0, 10, 20, 30, 40, 50, 60, 80, 100],
)

# Location metrics
location_anomaly_counter = Counter(
    "upi_sentinel_location_anomalies_total",
    "Location anomalies raised for scans",
    ["anomaly"],  # unusual_location | fraud_alert | outside_safe_zone
)

# Suggestion metrics
suggestion_counter = Counter(
    "upi_sentinel_suggestions_total",
    "Smart suggestions emitted",
    ["kind"],
)


def record_assessment(level: str, score: int) -> None:
    """Count the verdict and observe its score"""
    scan_counter.labels(level=level).inc()
    risk_score_histogram.observe(score)


def record_parse_failure() -> None:
    parse_failure_counter.inc()


def record_location_anomaly(anomaly: str) -> None:
    location_anomaly_counter.labels(anomaly=anomaly).inc()


def record_suggestion(kind: str) -> None:
    suggestion_counter.labels(kind=kind).inc()
