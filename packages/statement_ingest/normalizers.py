"""Field normalizers shared by every ingestor.

- :func:`parse_amount` turns a locale-formatted money token into a signed
  :class:`~decimal.Decimal` (``0`` on failure; callers decide whether that zero
  was real, see :func:`is_zero_literal`).
- :func:`normalize_date` always returns an ISO ``YYYY-MM-DD`` string, falling
  back to today when nothing parses.
- :func:`extract_merchant` is a best-effort label heuristic.
- :func:`classify_type` maps an explicit debit/credit marker column.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation

from dateutil import parser as date_parser

from .models import TransactionType

# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------

_AMOUNT_STRIP_RE = re.compile(r"[$£€¥,\s()]")

# Literals that legitimately normalize to zero.
ZERO_LITERALS: frozenset[str] = frozenset({"0", "0.00"})


def parse_amount(value: str | None) -> Decimal:
    """Parse ``value`` into a signed Decimal.

    Currency symbols, thousands separators, whitespace and parentheses are
    stripped. When the original contains both ``(`` and ``)`` the result is
    forced negative regardless of any explicit sign. Empty or unparseable input
    yields ``Decimal("0")``.
    """

    if value is None or not value.strip():
        return Decimal("0")
    cleaned = _AMOUNT_STRIP_RE.sub("", value)
    parenthesized = "(" in value and ")" in value
    try:
        d = Decimal(cleaned)
    except InvalidOperation:
        return Decimal("0")
    if not d.is_finite():
        return Decimal("0")
    return -abs(d) if parenthesized else d


def is_zero_literal(raw: str, *, accepted: frozenset[str] = ZERO_LITERALS) -> bool:
    return raw.strip() in accepted


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

_ISO_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
# A/B/C with a slash or dash separator (same on both sides); year has 2 or 4 digits.
_NUMERIC_RE = re.compile(r"^(\d{1,2})([/-])(\d{1,2})\2(\d{4}|\d{2})$")


def _construct_directly(s: str) -> date | None:
    # Ambiguous numeric triples are left to the explicit month/day rules.
    if _NUMERIC_RE.match(s):
        return None
    try:
        return date.fromisoformat(s)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(s).date()
    except ValueError:
        pass
    today = date.today()
    try:
        return date_parser.parse(s, default=datetime.combine(today.replace(day=1), time())).date()
    except (date_parser.ParserError, ValueError, OverflowError):
        return None


def _expand_year(raw: str, today: date) -> int:
    year = int(raw)
    if len(raw) == 2:
        # Current century, not a pivot: "99" becomes 2099 in the 2000s.
        year += (today.year // 100) * 100
    return year


def _disambiguate(s: str, today: date) -> date | None:
    m = _ISO_RE.match(s)
    if m:
        year, month, day = (int(g) for g in m.groups())
    else:
        m = _NUMERIC_RE.match(s)
        if not m:
            return None
        first, _sep, second, year_raw = m.groups()
        a, b = int(first), int(second)
        if a > 12:
            day, month = a, b
        else:
            # Covers both "second > 12" and the ambiguous default (US MM/DD).
            month, day = a, b
        year = _expand_year(year_raw, today)
    try:
        return date(year, month, day)
    except ValueError:
        return None


def normalize_date(value: str | None, *, today: date | None = None) -> str:
    """Return ``value`` as ``YYYY-MM-DD``; never raises.

    Order: direct construction (ISO and named-month formats), then explicit
    ``YYYY-MM-DD`` / ``A/B/C`` disambiguation (``A > 12`` means DD/MM, otherwise
    MM/DD), then today's date.
    """

    today = today or date.today()
    s = (value or "").strip()
    if not s:
        return today.isoformat()
    parsed = _construct_directly(s) or _disambiguate(s, today)
    return (parsed or today).isoformat()


# ---------------------------------------------------------------------------
# Merchant
# ---------------------------------------------------------------------------

_TXN_PREFIX_RE = re.compile(
    r"^(?:POS|ATM|ACH|CHECK|TRANSFER|PAYMENT|DEPOSIT)\s+", re.IGNORECASE
)
_MASKED_CARD_RE = re.compile(r"\d{4}\*+\d{4}")
_LONG_DATE_RE = re.compile(r"\d{2}/\d{2}/\d{4}")
_SHORT_DATE_RE = re.compile(r"\d{2}/\d{2}")
_WS_RE = re.compile(r"\s+")


def extract_merchant(description: str | None) -> str | None:
    """Guess a short merchant label (up to three words) from a description.

    Heuristic only: deterministic for identical input, not guaranteed correct.
    Returns ``None`` when the first remaining token has two characters or fewer.
    """

    if not description:
        return None
    cleaned = _TXN_PREFIX_RE.sub("", description)
    cleaned = _MASKED_CARD_RE.sub("", cleaned)
    cleaned = _LONG_DATE_RE.sub("", cleaned)
    cleaned = _SHORT_DATE_RE.sub("", cleaned)
    cleaned = _WS_RE.sub(" ", cleaned).strip()
    parts = cleaned.split()
    if parts and len(parts[0]) > 2:
        return " ".join(parts[:3])
    return None


# ---------------------------------------------------------------------------
# Debit/credit marker
# ---------------------------------------------------------------------------


def classify_type(value: str | None) -> TransactionType | None:
    s = (value or "").strip().lower()
    if not s:
        return None
    if "credit" in s or "cr" in s:
        return TransactionType.CREDIT
    if "debit" in s or "dr" in s:
        return TransactionType.DEBIT
    return None


__all__ = [
    "ZERO_LITERALS",
    "parse_amount",
    "is_zero_literal",
    "normalize_date",
    "extract_merchant",
    "classify_type",
]
