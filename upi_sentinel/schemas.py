"""Pydantic schemas the presentation layer serialises"""

from typing import List, Optional

from pydantic import BaseModel, Field

from upi_sentinel.assessment import LocationAssessment, ScanAssessment
from upi_sentinel.domain.models import ParseFailure, RiskLevel, Suggestion, SuggestionKind


class RiskResultSchema(BaseModel):
    score: int = Field(..., ge=0, le=100)
    level: RiskLevel
    reasons: List[str]


class ScanAssessmentResponse(BaseModel):
    """Verdict for a scanned payment address"""

    valid: bool = True
    identifier: str
    display_name: str
    merchant_code: Optional[str] = None
    transaction_ref: Optional[str] = None
    risk: RiskResultSchema

    @classmethod
    def from_assessment(cls, assessment: ScanAssessment) -> "ScanAssessmentResponse":
        address, risk = assessment.address, assessment.risk
        return cls(
            identifier=address.identifier,
            display_name=address.display_name,
            merchant_code=address.merchant_code,
            transaction_ref=address.transaction_ref,
            risk=RiskResultSchema(score=risk.score, level=risk.level, reasons=list(risk.reasons)),
        )


class ParseFailureResponse(BaseModel):
    """Scanned string was not a payment address"""

    valid: bool = False
    reason: str

    @classmethod
    def from_failure(cls, failure: ParseFailure) -> "ParseFailureResponse":
        return cls(reason=failure.reason)


class LocationAssessmentResponse(BaseModel):
    scan_id: str
    in_safe_zone: bool
    matched_zone_name: Optional[str] = None
    unusual: bool
    unusual_reason: Optional[str] = None
    distance_km: Optional[float] = None
    fraud_alert_ids: List[str] = Field(default_factory=list)
    exit_alert: bool = False

    @classmethod
    def from_assessment(cls, assessment: LocationAssessment) -> "LocationAssessmentResponse":
        return cls(
            scan_id=assessment.record.scan_id,
            in_safe_zone=assessment.record.in_safe_zone,
            matched_zone_name=assessment.record.matched_zone_name,
            unusual=assessment.anomaly.unusual,
            unusual_reason=assessment.anomaly.reason,
            distance_km=assessment.anomaly.distance_km,
            fraud_alert_ids=[alert.id for alert in assessment.fraud_alerts],
            exit_alert=assessment.exit_alert,
        )


class SuggestionSchema(BaseModel):
    """Single smart suggestion"""

    id: str
    kind: SuggestionKind
    category: str
    title: str
    message: str
    dismissible: bool
    priority: int

    @classmethod
    def from_suggestion(cls, suggestion: Suggestion) -> "SuggestionSchema":
        return cls(
            id=suggestion.id,
            kind=suggestion.kind,
            category=suggestion.category,
            title=suggestion.title,
            message=suggestion.message,
            dismissible=suggestion.dismissible,
            priority=suggestion.priority,
        )


class SuggestionsResponse(BaseModel):
    suggestions: List[SuggestionSchema]
