"""Heuristic risk classifier - scores a parsed payment address for fraud signals"""

import re
from typing import List, Sequence, Tuple

from upi_sentinel.config import Settings, settings
from upi_sentinel.domain.models import UNKNOWN_PAYEE, ParsedAddress, RiskResult

MISSING_HANDLE_PENALTY = 100
UNCOMMON_HANDLE_PENALTY = 30
KEYWORD_PENALTY = 60
LONG_IDENTIFIER_PENALTY = 20
MISSING_NAME_PENALTY = 20

LONG_IDENTIFIER_LENGTH = 20
MOBILE_NUMBER_PATTERN = re.compile(r"[0-9]{10}")

ScoreStep = Tuple[int, List[str]]


def split_identifier(identifier: str) -> Tuple[str, str]:
    """Split user@handle; handle is empty when there is no '@'"""
    user, _, handle = identifier.partition("@")
    return user, handle


def score_handle(handle: str, trusted_handles: Sequence[str]) -> ScoreStep:
    """
    Bank handle check.

    A missing handle is a format violation and dominates the score; an
    unknown handle is suspicious but common enough for small PSPs.
    """
    if not handle:
        return MISSING_HANDLE_PENALTY, ["Invalid format: Missing bank handle"]
    if handle not in trusted_handles:
        return UNCOMMON_HANDLE_PENALTY, [f"Uncommon bank handle: @{handle}"]
    return 0, [f"Verified bank handle: @{handle}"]


def score_keywords(user: str, suspicious_keywords: Sequence[str]) -> ScoreStep:
    """Social-engineering keywords: flat penalty regardless of how many match"""
    found = [kw for kw in suspicious_keywords if kw in user]
    if not found:
        return 0, []
    return KEYWORD_PENALTY, [
        f'Suspicious keywords found: "{", ".join(found)}"',
        "Potential impersonation scan",
    ]


def score_identifier_shape(user: str) -> ScoreStep:
    # Ten digits is a mobile-linked P2P address, the most common legitimate shape
    if MOBILE_NUMBER_PATTERN.fullmatch(user):
        return 0, ["Linked to Mobile Number (P2P)"]
    if len(user) > LONG_IDENTIFIER_LENGTH:
        return LONG_IDENTIFIER_PENALTY, ["Unusually long VPA identifier"]
    return 0, []


def score_metadata(display_name: str) -> ScoreStep:
    if not display_name or display_name == UNKNOWN_PAYEE:
        return MISSING_NAME_PENALTY, ["Missing Payee Name"]
    return 0, []


def classify(address: ParsedAddress, config: Settings | None = None) -> RiskResult:
    """
    Score a parsed address from 0 (safe) to 100 (high risk).

    Steps run in a fixed order so `reasons` is reproducible:
    1. Bank handle (missing +100, uncommon +30, trusted records a positive note)
    2. Suspicious keywords in the user part (+60 flat)
    3. Identifier shape (mobile number positive note, >20 chars +20)
    4. Missing payee name (+20)

    The sum is clamped to [0, 100] and the level derived from it.
    """
    cfg = config or settings
    user, handle = split_identifier(address.identifier)

    steps = [
        score_handle(handle, cfg.trusted_handles),
        score_keywords(user, cfg.suspicious_keywords),
        score_identifier_shape(user),
        score_metadata(address.display_name),
    ]

    score = sum(points for points, _ in steps)
    reasons = [reason for _, step_reasons in steps for reason in step_reasons]

    return RiskResult(
        score=score,
        reasons=tuple(reasons),
        moderate_threshold=cfg.moderate_score_threshold,
        risky_threshold=cfg.risky_score_threshold,
    )
