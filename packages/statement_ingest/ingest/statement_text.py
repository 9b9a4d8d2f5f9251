"""Statement table ingestor: extracted document text to :class:`ParsedFileResult`.

Candidate lines are picked by a leading date (``MM/DD/YYYY`` or
``YYYY-MM-DD``). When a document has none, a table heuristic picks lines with
at least three fields separated by runs of two or more spaces.

Each candidate is run through an ordered list of :class:`LineGrammar` entries;
the first grammar whose regex matches *and* whose amount normalizes cleanly
wins. Grammars carry their own role mapping so a new bank layout is one more
entry in the list, not another branch.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from ..errors import NoTransactionsError
from ..logging_setup import get_logger
from ..models import ParsedFileResult, RawTransaction
from ..normalizers import extract_merchant, is_zero_literal, normalize_date, parse_amount
from .utils import build_parsed_result

_logger = get_logger("statement_ingest.ingest.statement_text")

# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

_US_DATE = r"\d{1,2}/\d{1,2}/\d{4}"
_ISO_DATE = r"\d{4}-\d{1,2}-\d{1,2}"
_MONTH = r"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)[a-z]*\.?"
_NAMED_DATE = rf"(?:\d{{1,2}} {_MONTH},? \d{{4}}|{_MONTH} \d{{1,2}},? \d{{4}})"
# Optional parentheses and sign, optional "$", grouped thousands or plain digits, up to 2 decimals.
_AMOUNT = r"\(?[-+]?\$?(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d{1,2})?\)?"

_LEADING_DATE_RE = re.compile(rf"^(?:{_US_DATE}|{_ISO_DATE})")
_FIELD_SPLIT_RE = re.compile(r"\s{2,}")
_WS_RE = re.compile(r"\s+")
_DIGIT_RE = re.compile(r"\d")
_HEADER_WORDS: tuple[str, ...] = ("total", "balance", "date")

# The statement path accepts only a fully spelled-out zero.
_STATEMENT_ZERO_LITERALS: frozenset[str] = frozenset({"0.00"})


# ---------------------------------------------------------------------------
# Grammars
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class LineGrammar:
    """One line layout: a full-match regex plus the role of each capture group."""

    name: str
    pattern: re.Pattern[str]
    roles: tuple[str, ...]

    def match(self, line: str) -> dict[str, str] | None:
        m = self.pattern.match(line)
        if m is None:
            return None
        return {role: value for role, value in zip(self.roles, m.groups()) if value is not None}


def _grammar(name: str, source: str, *roles: str) -> LineGrammar:
    return LineGrammar(name=name, pattern=re.compile(source, re.IGNORECASE), roles=roles)


DEFAULT_GRAMMARS: tuple[LineGrammar, ...] = (
    _grammar(
        "date_desc_amount_balance",
        rf"^({_US_DATE})\s+(.+?)\s+({_AMOUNT})\s+({_AMOUNT})$",
        "date",
        "description",
        "amount",
        "balance",
    ),
    _grammar(
        "date_desc_amount",
        rf"^({_US_DATE})\s+(.+?)\s+({_AMOUNT})$",
        "date",
        "description",
        "amount",
    ),
    _grammar(
        "date_amount_desc",
        rf"^({_US_DATE})\s+({_AMOUNT})\s+(.+)$",
        "date",
        "amount",
        "description",
    ),
    _grammar(
        "iso_date_desc_amount",
        rf"^({_ISO_DATE})\s+(.+?)\s+({_AMOUNT})(?:\s+({_AMOUNT}))?$",
        "date",
        "description",
        "amount",
        "balance",
    ),
    _grammar(
        "named_date_desc_amount",
        rf"^({_NAMED_DATE})\s+(.+?)\s+({_AMOUNT})(?:\s+({_AMOUNT}))?$",
        "date",
        "description",
        "amount",
        "balance",
    ),
)


# ---------------------------------------------------------------------------
# Candidate selection
# ---------------------------------------------------------------------------


def _numbered_lines(text: str) -> list[tuple[int, str]]:
    """Non-empty trimmed lines with their 1-based position in ``text``."""

    out: list[tuple[int, str]] = []
    for number, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if stripped:
            out.append((number, stripped))
    return out


def _looks_like_table_row(line: str) -> bool:
    fields = [f for f in _FIELD_SPLIT_RE.split(line) if f]
    lowered = line.lower()
    return (
        len(fields) >= 3
        and any(_DIGIT_RE.search(f) for f in fields)
        and any("." in f or "," in f for f in fields)
        and not any(word in lowered for word in _HEADER_WORDS)
    )


def select_candidate_lines(text: str) -> list[tuple[int, str]]:
    lines = _numbered_lines(text)
    candidates = [(n, line) for n, line in lines if _LEADING_DATE_RE.match(line)]
    if candidates:
        return candidates
    _logger.info("statement_text:no_dated_lines lines=%d; trying table heuristic", len(lines))
    return [(n, line) for n, line in lines if _looks_like_table_row(line)]


# ---------------------------------------------------------------------------
# Line parsing
# ---------------------------------------------------------------------------


def parse_line(
    line: str, grammars: Sequence[LineGrammar] = DEFAULT_GRAMMARS
) -> RawTransaction | None:
    """Parse one statement line, or return ``None`` when no grammar fits.

    A grammar whose amount normalizes to zero from anything other than
    ``"0.00"`` counts as a mismatch and the next grammar is tried.
    """

    normalized = _WS_RE.sub(" ", line).strip()
    for grammar in grammars:
        fields = grammar.match(normalized)
        if fields is None:
            continue
        amount_raw = fields.get("amount", "")
        amount = parse_amount(amount_raw)
        if amount == 0 and not is_zero_literal(amount_raw, accepted=_STATEMENT_ZERO_LITERALS):
            continue
        description = fields.get("description", "").strip()
        if not description:
            continue

        balance = None
        balance_raw = fields.get("balance")
        if balance_raw:
            parsed_balance = parse_amount(balance_raw)
            if parsed_balance != 0:
                balance = parsed_balance

        return RawTransaction(
            date=normalize_date(fields.get("date")),
            description=description,
            amount=amount,
            balance=balance,
            merchant=extract_merchant(description),
        )
    return None


def parse_statement_text(
    text: str,
    *,
    filename: str,
    grammars: Sequence[LineGrammar] = DEFAULT_GRAMMARS,
) -> ParsedFileResult:
    """Parse extracted statement ``text``.

    Line errors read ``"Line N: Could not parse transaction line: <line>"``
    with ``N`` the 1-based line number in ``text``.

    Raises :class:`NoTransactionsError` when no line parses.
    """

    transactions: list[RawTransaction] = []
    errors: list[str] = []
    for number, line in select_candidate_lines(text):
        tx = parse_line(line, grammars)
        if tx is None:
            errors.append(f"Line {number}: Could not parse transaction line: {line}")
        else:
            transactions.append(tx)

    if not transactions:
        raise NoTransactionsError("No valid transactions found in PDF", filename=filename)

    _logger.info(
        "statement_text:done file=%s rows=%d errors=%d", filename, len(transactions), len(errors)
    )
    return build_parsed_result(transactions, errors, filename=filename)


__all__ = [
    "LineGrammar",
    "DEFAULT_GRAMMARS",
    "select_candidate_lines",
    "parse_line",
    "parse_statement_text",
]
