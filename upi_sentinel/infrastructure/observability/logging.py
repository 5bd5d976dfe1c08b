"""Structured JSON logging for scan assessments"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger.json import JsonFormatter

from upi_sentinel.config import settings

logger = logging.getLogger("upi_sentinel")


class CustomJsonFormatter(JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str | None = None) -> None:
    """Configure structured JSON logging, defaulting to the configured log level"""
    root = logging.getLogger()
    root.setLevel(level or settings.log_level)

    # Remove existing handlers
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    root.addHandler(handler)


def log_assessment(identifier: str, level: str, score: int, duration_ms: float) -> None:
    """Log structured classification outcome"""
    logger.info(
        "Scan assessed",
        extra={
            "step": "scan_assessed",
            "identifier": identifier,
            "risk_level": level,
            "risk_score": score,
            "duration_ms": duration_ms,
        },
    )


def log_location_anomaly(
    scan_id: str,
    anomaly: str,
    distance_km: Optional[float] = None,
    alert_ids: Optional[list] = None,
) -> None:
    logger.warning(
        "Location anomaly detected",
        extra={
            "step": "location_anomaly",
            "scan_id": scan_id,
            "anomaly": anomaly,
            "distance_km": distance_km,
            "alert_ids": alert_ids or [],
        },
    )
