"""Parsing of scanned upi:// payment strings"""

from typing import Dict, List, Optional
from urllib.parse import parse_qs, urlsplit

from upi_sentinel.domain.models import UNKNOWN_PAYEE, ParsedAddress, ParseFailure

PAYMENT_SCHEME = "upi://"


def _first(params: Dict[str, List[str]], key: str) -> Optional[str]:
    values = params.get(key)
    return values[0] if values else None


def parse_payment_uri(raw: str) -> ParsedAddress | ParseFailure:
    """
    Parse a raw QR payload such as ``upi://pay?pa=shop@oksbi&pn=Shop``.

    Recognised query parameters:
    - pa: payee address (required, lower-cased, must hold exactly one "@")
    - pn: payee name (defaults to "Unknown")
    - mc: merchant category code
    - tr: transaction reference

    Never raises: anything that is not a well-formed payment URI comes back
    as a ParseFailure so the caller can stop before classification.
    """
    if not raw.startswith(PAYMENT_SCHEME):
        return ParseFailure(raw_input=raw, reason="Not a UPI payment address")

    try:
        query = urlsplit(raw).query
        # errors="strict" turns broken percent-encoding into a UnicodeDecodeError (a ValueError)
        params = parse_qs(query, keep_blank_values=True, errors="strict")
    except ValueError as e:
        return ParseFailure(raw_input=raw, reason=f"Malformed payment URI: {e}")

    payee = _first(params, "pa")
    if not payee:
        return ParseFailure(raw_input=raw, reason="Missing payee address (pa)")

    identifier = payee.lower()
    if identifier.count("@") != 1:
        return ParseFailure(raw_input=raw, reason=f"Payee address must contain exactly one '@': {identifier}")

    return ParsedAddress(
        identifier=identifier,
        raw_input=raw,
        display_name=_first(params, "pn") or UNKNOWN_PAYEE,
        merchant_code=_first(params, "mc") or None,
        transaction_ref=_first(params, "tr") or None,
    )
