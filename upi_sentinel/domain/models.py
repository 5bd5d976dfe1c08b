"""Domain models - immutable dataclasses representing scans, locations and verdicts"""

from dataclasses import InitVar, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from upi_sentinel.domain.exceptions import (
    InvalidCoordinateError,
    InvalidSafeZoneError,
    InvalidScanRecordError,
)

UNKNOWN_PAYEE = "Unknown"


class RiskLevel(str, Enum):
    SAFE = "safe"
    MODERATE = "moderate"
    RISKY = "risky"

    @classmethod
    def from_score(cls, score: int, moderate_threshold: int = 30, risky_threshold: int = 60) -> "RiskLevel":
        """Map a 0-100 score onto the three-tier level (<30 safe, 30-59 moderate, >=60 risky)"""
        if score >= risky_threshold:
            return cls.RISKY
        if score >= moderate_threshold:
            return cls.MODERATE
        return cls.SAFE


class ScanStatus(str, Enum):
    SAFE = "safe"
    WARNING = "warning"
    RISKY = "risky"


class ZoneKind(str, Enum):
    HOME = "home"
    WORK = "work"
    CUSTOM = "custom"


class AlertSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SuggestionKind(str, Enum):
    """One member per suggestion rule"""

    FAVORITE_CANDIDATE = "favorite_candidate"
    NEW_MERCHANT_HIGH_AMOUNT = "new_merchant_high_amount"
    UNUSUAL_AMOUNT = "unusual_amount"
    SAFETY_STREAK = "safety_streak"
    REPEATED_RISK = "repeated_risk"
    DIVERSIFY_MERCHANTS = "diversify_merchants"
    ACTIVE_USER = "active_user"

    @property
    def category(self) -> str:
        """Display category the dashboard uses to pick an icon and colour"""
        return _SUGGESTION_CATEGORIES[self]


_SUGGESTION_CATEGORIES = {
    SuggestionKind.FAVORITE_CANDIDATE: "add_to_favorites",
    SuggestionKind.NEW_MERCHANT_HIGH_AMOUNT: "security_warning",
    SuggestionKind.UNUSUAL_AMOUNT: "amount_warning",
    SuggestionKind.SAFETY_STREAK: "performance_insight",
    SuggestionKind.REPEATED_RISK: "security_warning",
    SuggestionKind.DIVERSIFY_MERCHANTS: "behavior_tip",
    SuggestionKind.ACTIVE_USER: "performance_insight",
}


@dataclass(frozen=True)
class ParsedAddress:
    """Payment address extracted from a scanned upi:// string"""

    identifier: str  # lower-cased user@handle
    raw_input: str
    display_name: str = UNKNOWN_PAYEE
    merchant_code: Optional[str] = None
    transaction_ref: Optional[str] = None


@dataclass(frozen=True)
class ParseFailure:
    """Scanned string is not a usable payment address"""

    raw_input: str
    reason: str


@dataclass(frozen=True)
class RiskResult:
    """
    Output of address classification.

    `level` is derived from the clamped score at construction and cannot be
    passed in, so a result whose level disagrees with its score cannot exist.
    """

    score: int
    reasons: Tuple[str, ...] = ()
    moderate_threshold: InitVar[int] = 30
    risky_threshold: InitVar[int] = 60
    level: RiskLevel = field(init=False)

    def __post_init__(self, moderate_threshold: int, risky_threshold: int) -> None:
        clamped = max(0, min(int(self.score), 100))
        object.__setattr__(self, "score", clamped)
        object.__setattr__(self, "reasons", tuple(self.reasons))
        object.__setattr__(
            self, "level", RiskLevel.from_score(clamped, moderate_threshold, risky_threshold)
        )


@dataclass(frozen=True)
class Coordinate:
    """Location sample in degrees"""

    latitude: float
    longitude: float
    captured_at: datetime
    accuracy: Optional[float] = None  # meters

    def __post_init__(self) -> None:
        if not -90 <= self.latitude <= 90:
            raise InvalidCoordinateError(f"Latitude out of range: {self.latitude}")
        if not -180 <= self.longitude <= 180:
            raise InvalidCoordinateError(f"Longitude out of range: {self.longitude}")


@dataclass(frozen=True)
class SafeZone:
    """User-defined geofence considered low-risk"""

    id: str
    name: str
    kind: ZoneKind
    center: Coordinate
    radius_meters: float
    enabled: bool = True
    alert_on_exit: Optional[bool] = None  # None -> True for home/work

    def __post_init__(self) -> None:
        if self.radius_meters <= 0:
            raise InvalidSafeZoneError(f"Safe zone radius must be positive, got {self.radius_meters}")
        if self.alert_on_exit is None:
            object.__setattr__(self, "alert_on_exit", self.kind in (ZoneKind.HOME, ZoneKind.WORK))


@dataclass(frozen=True)
class LocationRecord:
    """Where a scan happened and whether it was inside a safe zone"""

    scan_id: str
    location: Coordinate
    in_safe_zone: bool
    merchant_name: Optional[str] = None
    matched_zone_name: Optional[str] = None


@dataclass(frozen=True)
class TravelMode:
    enabled: bool = False
    home_region: str = ""
    current_region: Optional[str] = None
    alert_threshold_km: Optional[float] = None  # None -> Settings.travel_alert_threshold_km


@dataclass(frozen=True)
class FraudAlert:
    """Community-reported fraud hotspot"""

    id: str
    location: Coordinate
    radius_meters: float
    report_count: int
    last_reported: datetime
    fraud_type: str
    severity: AlertSeverity


@dataclass(frozen=True)
class UnusualLocationResult:
    unusual: bool
    reason: Optional[str] = None
    distance_km: Optional[float] = None


@dataclass(frozen=True)
class LocationStats:
    total_scans: int
    in_safe_zone: int
    outside_safe_zone: int
    unique_locations: int


@dataclass(frozen=True)
class ScanRecord:
    """Persisted scan event, read-only to the core"""

    identifier: str
    status: ScanStatus
    timestamp: datetime
    merchant_name: Optional[str] = None
    amount: Optional[float] = None

    def __post_init__(self) -> None:
        if self.amount is not None and self.amount <= 0:
            raise InvalidScanRecordError(f"Scan amount must be positive, got {self.amount}")


@dataclass(frozen=True)
class Preferences:
    """User toggles consulted by the suggestion engine"""

    enable_smart_suggestions: bool = True
    favorite_threshold: Optional[int] = None  # None -> Settings.favorite_trigger_count


@dataclass(frozen=True)
class Suggestion:
    id: str
    kind: SuggestionKind
    title: str
    message: str
    dismissible: bool
    priority: int

    @property
    def category(self) -> str:
        return self.kind.category
