"""Configuration management using Pydantic Settings"""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Risk thresholds and service options loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_prefix="UPI_SENTINEL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Address classification
    trusted_handles: List[str] = Field(
        default_factory=lambda: [
            "okaxis", "okhdfcbank", "okicici", "oksbi", "pl", "ybl", "axl", "ibl", "paytm",
        ]
    )
    suspicious_keywords: List[str] = Field(
        default_factory=lambda: [
            "support", "refund", "cashback", "offer", "kyc", "verify", "lottery", "winner",
            "customer", "service", "help", "bank-support", "paytm-kyc",
        ]
    )
    moderate_score_threshold: int = 30
    risky_score_threshold: int = 60

    # Amount rules (currency units, not paise)
    new_merchant_amount_threshold: float = 1000
    unusual_amount_threshold: float = 10000
    unusual_amount_multiplier: float = 2.0

    # Suggestion windows
    favorite_trigger_count: int = 3
    safety_streak_window: int = 10
    diversification_min_scans: int = 20
    diversification_max_merchants: int = 5
    active_user_min_scans: int = 50
    active_user_window: int = 30
    active_user_max_days: float = 7.0

    # Location
    travel_alert_threshold_km: float = 100.0
    default_unusual_distance_km: float = 10.0
    location_history_window: int = 50
    default_safe_zone_radius_m: float = 500.0

    # Service
    service_name: str = "upi-sentinel"
    log_level: str = "INFO"
    metrics_enabled: bool = True


settings = Settings()
