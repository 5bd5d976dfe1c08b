"""Smart suggestions mined from scan history"""

from dataclasses import dataclass
from typing import Callable, Collection, List, Mapping, Optional, Sequence

from upi_sentinel.config import Settings, settings
from upi_sentinel.domain.models import (
    Preferences,
    ScanRecord,
    ScanStatus,
    Suggestion,
    SuggestionKind,
)
from upi_sentinel.utils.date_utils import days_between, newest_first


@dataclass(frozen=True)
class SuggestionContext:
    """Inputs shared by every rule for one evaluation"""

    current_scan: ScanRecord
    history: Sequence[ScanRecord]
    merchant_scan_counts: Mapping[str, int]
    favorites: Collection[str]
    preferences: Preferences
    config: Settings

    @property
    def scan_count(self) -> int:
        return self.merchant_scan_counts.get(self.current_scan.identifier, 0)

    @property
    def merchant_label(self) -> str:
        return self.current_scan.merchant_name or "this merchant"

    def recent(self, limit: int) -> List[ScanRecord]:
        return newest_first(self.history, lambda s: s.timestamp, limit)


Rule = Callable[[SuggestionContext], Optional[Suggestion]]


def favorite_candidate(ctx: SuggestionContext) -> Optional[Suggestion]:
    scan = ctx.current_scan
    threshold = ctx.preferences.favorite_threshold
    if threshold is None:
        threshold = ctx.config.favorite_trigger_count

    if ctx.scan_count < threshold or scan.identifier in ctx.favorites or scan.status != ScanStatus.SAFE:
        return None
    return Suggestion(
        id=f"fav-{scan.identifier}",
        kind=SuggestionKind.FAVORITE_CANDIDATE,
        title="Add to Favorites?",
        message=f"You've scanned {ctx.merchant_label} {ctx.scan_count} times. Add to favorites for quick access?",
        dismissible=True,
        priority=8,
    )


def new_merchant_high_amount(ctx: SuggestionContext) -> Optional[Suggestion]:
    amount = ctx.current_scan.amount
    if ctx.scan_count != 0 or amount is None or amount <= ctx.config.new_merchant_amount_threshold:
        return None
    return Suggestion(
        id=f"new-merchant-{ctx.current_scan.identifier}",
        kind=SuggestionKind.NEW_MERCHANT_HIGH_AMOUNT,
        title="New Merchant Alert",
        message=(
            f"This is your first time scanning {ctx.merchant_label}. "
            "Verify identity before large transactions."
        ),
        dismissible=True,
        priority=9,
    )


def unusual_amount(ctx: SuggestionContext) -> Optional[Suggestion]:
    """
    Large payment well above what this merchant usually gets.

    The baseline averages earlier scans of the same identifier that recorded
    an amount before the current one; the current scan and anything
    stamped after it are excluded. No baseline, no warning.
    """
    scan = ctx.current_scan
    if scan.amount is None or scan.amount <= ctx.config.unusual_amount_threshold:
        return None

    prior_amounts = [
        s.amount
        for s in ctx.history
        if s.identifier == scan.identifier and s.amount is not None and s.timestamp < scan.timestamp
    ]
    if not prior_amounts:
        return None

    average = sum(prior_amounts) / len(prior_amounts)
    if scan.amount <= average * ctx.config.unusual_amount_multiplier:
        return None
    return Suggestion(
        id=f"high-amount-{scan.identifier}",
        kind=SuggestionKind.UNUSUAL_AMOUNT,
        title="Unusual Amount",
        message=(
            f"This amount (₹{scan.amount:,.2f}) is significantly higher than your usual "
            "transactions with this merchant."
        ),
        dismissible=True,
        priority=10,
    )


def safety_streak(ctx: SuggestionContext) -> Optional[Suggestion]:
    window = ctx.config.safety_streak_window
    if len(ctx.history) < window:
        return None
    if any(s.status != ScanStatus.SAFE for s in ctx.recent(window)):
        return None
    return Suggestion(
        id="safety-streak",
        kind=SuggestionKind.SAFETY_STREAK,
        title="Perfect Safety Streak!",
        message=f"Your last {window} scans were all safe. Great job staying secure!",
        dismissible=True,
        priority=5,
    )


def repeated_risk(ctx: SuggestionContext) -> Optional[Suggestion]:
    scan = ctx.current_scan
    if scan.status != ScanStatus.RISKY:
        return None
    risky_count = sum(
        1 for s in ctx.history if s.identifier == scan.identifier and s.status == ScanStatus.RISKY
    )
    if risky_count <= 1:
        return None
    return Suggestion(
        id=f"risky-repeat-{scan.identifier}",
        kind=SuggestionKind.REPEATED_RISK,
        title="Repeated Risk Detection",
        message=f"This merchant has been flagged as risky {risky_count} times. Consider blocking or reporting.",
        dismissible=False,
        priority=10,
    )


def diversify_merchants(ctx: SuggestionContext) -> Optional[Suggestion]:
    merchants = sum(1 for count in ctx.merchant_scan_counts.values() if count > 0)
    if len(ctx.history) < ctx.config.diversification_min_scans:
        return None
    if merchants >= ctx.config.diversification_max_merchants:
        return None
    return Suggestion(
        id="tip-diversify",
        kind=SuggestionKind.DIVERSIFY_MERCHANTS,
        title="Security Tip",
        message=(
            "You scan the same few merchants frequently. Consider verifying new merchants "
            "carefully to maintain security."
        ),
        dismissible=True,
        priority=3,
    )


def active_user(ctx: SuggestionContext) -> Optional[Suggestion]:
    if len(ctx.history) < ctx.config.active_user_min_scans:
        return None
    recent = ctx.recent(ctx.config.active_user_window)
    if not recent:
        return None
    span_days = days_between(recent[-1].timestamp, recent[0].timestamp)
    if span_days >= ctx.config.active_user_max_days:
        return None
    return Suggestion(
        id="tip-active-user",
        kind=SuggestionKind.ACTIVE_USER,
        title="Active User!",
        message=f"You've made {len(recent)} scans in the last week. You're staying vigilant!",
        dismissible=True,
        priority=4,
    )


# Evaluation order; ties in priority keep this order
RULES: List[Rule] = [
    favorite_candidate,
    new_merchant_high_amount,
    unusual_amount,
    safety_streak,
    repeated_risk,
    diversify_merchants,
    active_user,
]


def generate_suggestions(
    current_scan: ScanRecord,
    history: Sequence[ScanRecord],
    merchant_scan_counts: Mapping[str, int],
    favorites: Collection[str],
    preferences: Preferences,
    config: Settings | None = None,
) -> List[Suggestion]:
    """
    Evaluate every rule against the history and return what fired, most urgent first.

    `history` and `merchant_scan_counts` must already include `current_scan`.
    Returns nothing when smart suggestions are switched off. Dismissals are
    the caller's concern: filter by `Suggestion.id` before display.
    """
    if not preferences.enable_smart_suggestions:
        return []

    ctx = SuggestionContext(
        current_scan=current_scan,
        history=history,
        merchant_scan_counts=merchant_scan_counts,
        favorites=favorites,
        preferences=preferences,
        config=config or settings,
    )

    suggestions = [s for s in (rule(ctx) for rule in RULES) if s is not None]

    # sorted() is stable, reverse=True included
    return sorted(suggestions, key=lambda s: s.priority, reverse=True)
