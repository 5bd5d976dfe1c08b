"""
Scan assessment flow used by the dashboard.

The domain modules are pure; this module sequences them for one scan event
and is the only place that logs and records metrics. Call `setup_logging`
from `upi_sentinel.infrastructure.observability.logging` once at startup.

Flow for a scan:
1. assess_scan: parse the QR payload, classify the address
2. assess_location: record where the scan happened, check anomalies
   (independent of 1, may run concurrently)
3. caller persists the scan
4. suggest_after_scan: mine the updated history for suggestions
"""

import logging
import time
from dataclasses import dataclass
from typing import Collection, Iterable, List, Mapping, Optional, Sequence, Tuple

from upi_sentinel.config import Settings, settings
from upi_sentinel.domain.address_parser import parse_payment_uri
from upi_sentinel.domain.geo import check_fraud_alerts, is_unusual_location, record_location
from upi_sentinel.domain.models import (
    Coordinate,
    FraudAlert,
    LocationRecord,
    ParsedAddress,
    ParseFailure,
    Preferences,
    RiskResult,
    SafeZone,
    ScanRecord,
    Suggestion,
    TravelMode,
    UnusualLocationResult,
)
from upi_sentinel.domain.risk_classifier import classify
from upi_sentinel.domain.suggestions import generate_suggestions
from upi_sentinel.infrastructure.observability.logging import log_assessment, log_location_anomaly
from upi_sentinel.infrastructure.observability.metrics import (
    record_assessment,
    record_location_anomaly,
    record_parse_failure,
    record_suggestion,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanAssessment:
    address: ParsedAddress
    risk: RiskResult


@dataclass(frozen=True)
class LocationAssessment:
    record: LocationRecord
    anomaly: UnusualLocationResult
    fraud_alerts: Tuple[FraudAlert, ...]
    exit_alert: bool  # outside every zone while an alert-on-exit zone is enabled


def assess_scan(raw: str, config: Settings | None = None) -> ScanAssessment | ParseFailure:
    """Parse and classify a scanned payload; a ParseFailure short-circuits classification"""
    cfg = config or settings
    start_time = time.perf_counter()

    parsed = parse_payment_uri(raw)
    if isinstance(parsed, ParseFailure):
        if cfg.metrics_enabled:
            record_parse_failure()
        logger.warning(f"Scan rejected: {parsed.reason}", extra={"step": "parse_failed"})
        return parsed

    risk = classify(parsed, cfg)

    duration_ms = (time.perf_counter() - start_time) * 1000
    if cfg.metrics_enabled:
        record_assessment(risk.level.value, risk.score)
    log_assessment(parsed.identifier, risk.level.value, risk.score, duration_ms)

    return ScanAssessment(address=parsed, risk=risk)


def assess_location(
    scan_id: str,
    location: Optional[Coordinate],
    merchant_name: Optional[str],
    zones: Iterable[SafeZone],
    history: Sequence[LocationRecord],
    travel_mode: TravelMode | None = None,
    fraud_alerts: Iterable[FraudAlert] = (),
    config: Settings | None = None,
) -> Optional[LocationAssessment]:
    """
    Evaluate where a scan happened.

    `location` is None when the device could not provide one (permission
    denied, no sensor); evaluation is skipped and None returned.
    `history` is the location history before this scan.
    """
    if location is None:
        logger.info("No location available, skipping anomaly checks", extra={"scan_id": scan_id})
        return None

    cfg = config or settings
    zones = list(zones)

    record = record_location(scan_id, location, merchant_name, zones)
    anomaly = is_unusual_location(location, history, travel_mode, cfg)
    matches = tuple(check_fraud_alerts(location, fraud_alerts))
    exit_alert = not record.in_safe_zone and any(z.enabled and z.alert_on_exit for z in zones)

    if anomaly.unusual:
        log_location_anomaly(scan_id, "unusual_location", distance_km=anomaly.distance_km)
        if cfg.metrics_enabled:
            record_location_anomaly("unusual_location")
    if matches:
        log_location_anomaly(scan_id, "fraud_alert", alert_ids=[a.id for a in matches])
        if cfg.metrics_enabled:
            record_location_anomaly("fraud_alert")
    if exit_alert:
        log_location_anomaly(scan_id, "outside_safe_zone")
        if cfg.metrics_enabled:
            record_location_anomaly("outside_safe_zone")

    return LocationAssessment(record=record, anomaly=anomaly, fraud_alerts=matches, exit_alert=exit_alert)


def suggest_after_scan(
    current_scan: ScanRecord,
    history: Sequence[ScanRecord],
    merchant_scan_counts: Mapping[str, int],
    favorites: Collection[str],
    preferences: Preferences,
    config: Settings | None = None,
) -> List[Suggestion]:
    """Suggestions for a scan that has already been persisted into `history`"""
    cfg = config or settings
    suggestions = generate_suggestions(
        current_scan, history, merchant_scan_counts, favorites, preferences, cfg
    )

    if cfg.metrics_enabled:
        for suggestion in suggestions:
            record_suggestion(suggestion.kind.value)
    logger.info(
        "Suggestions generated",
        extra={
            "step": "suggestions",
            "identifier": current_scan.identifier,
            "suggestion_ids": [s.id for s in suggestions],
        },
    )
    return suggestions
