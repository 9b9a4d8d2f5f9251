"""Column schema detection for bank CSV exports.

Headers are normalized (lowercase, non-alphanumerics to ``_``), the bank is
guessed from identifying substrings, and each canonical field is resolved to
a column position by bidirectional substring match against that bank's
synonym list. Tables are module-level constants and never mutated.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

NOT_FOUND = -1

REQUIRED_FIELDS: tuple[str, ...] = ("date", "description", "amount")
OPTIONAL_FIELDS: tuple[str, ...] = ("balance", "reference", "type")

GENERIC = "generic"

# Synonyms are listed in priority order; the first synonym that matches any
# header wins, not the first header that matches any synonym.
COLUMN_MAPPINGS: Mapping[str, Mapping[str, tuple[str, ...]]] = MappingProxyType(
    {
        GENERIC: MappingProxyType(
            {
                "date": ("date", "transaction_date", "trans_date", "posting_date"),
                "description": (
                    "description",
                    "detail",
                    "memo",
                    "particulars",
                    "transaction_details",
                ),
                "amount": ("amount", "debit", "credit", "transaction_amount", "value"),
                "balance": ("balance", "running_balance", "account_balance"),
                "reference": ("reference", "ref", "transaction_id", "cheque_no"),
                "type": ("type", "transaction_type", "dr_cr"),
            }
        ),
        "chase": MappingProxyType(
            {
                "date": ("transaction_date",),
                "description": ("description",),
                "amount": ("amount",),
                "balance": ("balance",),
                "type": ("type",),
            }
        ),
        "bankofamerica": MappingProxyType(
            {
                "date": ("date",),
                "description": ("description",),
                "amount": ("amount",),
                "balance": ("running_bal",),
            }
        ),
        "wells_fargo": MappingProxyType(
            {
                "date": ("date",),
                "description": ("description",),
                "amount": ("amount",),
            }
        ),
    }
)

# (identifying substring in a normalized header, mapping key), checked in order.
BANK_MARKERS: tuple[tuple[str, str], ...] = (
    ("chase", "chase"),
    ("bank_of_america", "bankofamerica"),
    ("wells_fargo", "wells_fargo"),
)

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")
_MULTI_UNDERSCORE_RE = re.compile(r"_+")


def normalize_header(name: str) -> str:
    s = _NON_ALNUM_RE.sub("_", name.lower())
    s = _MULTI_UNDERSCORE_RE.sub("_", s)
    return s.strip("_")


def detect_bank_format(headers: Sequence[str]) -> str:
    normalized = [normalize_header(h) for h in headers]
    for marker, key in BANK_MARKERS:
        if any(marker in h for h in normalized):
            return key
    return GENERIC


def find_column_index(headers: Sequence[str], candidates: Sequence[str]) -> int:
    """Return the position of the first header matching a candidate, else ``NOT_FOUND``.

    A header matches when its normalized form contains the normalized
    candidate or is contained by it. Headers that normalize to the empty
    string never match.
    """

    normalized = [normalize_header(h) for h in headers]
    for candidate in candidates:
        name = normalize_header(candidate)
        if not name:
            continue
        for index, header in enumerate(normalized):
            if header and (name in header or header in name):
                return index
    return NOT_FOUND


@dataclass(frozen=True, slots=True)
class ColumnSchema:
    bank: str
    headers: tuple[str, ...]
    positions: Mapping[str, int]

    def index_of(self, field: str) -> int:
        return self.positions.get(field, NOT_FOUND)

    def has(self, field: str) -> bool:
        return self.index_of(field) != NOT_FOUND

    @property
    def missing_required(self) -> tuple[str, ...]:
        return tuple(f for f in REQUIRED_FIELDS if not self.has(f))


def detect_schema(headers: Sequence[str]) -> ColumnSchema:
    """Resolve canonical fields to column positions for ``headers``.

    Never raises; callers check :attr:`ColumnSchema.missing_required`.
    """

    bank = detect_bank_format(headers)
    table = COLUMN_MAPPINGS[bank]
    positions = {
        field: find_column_index(headers, table.get(field, ()))
        for field in (*REQUIRED_FIELDS, *OPTIONAL_FIELDS)
    }
    return ColumnSchema(bank=bank, headers=tuple(headers), positions=MappingProxyType(positions))


__all__ = [
    "NOT_FOUND",
    "REQUIRED_FIELDS",
    "OPTIONAL_FIELDS",
    "GENERIC",
    "COLUMN_MAPPINGS",
    "BANK_MARKERS",
    "ColumnSchema",
    "normalize_header",
    "detect_bank_format",
    "find_column_index",
    "detect_schema",
]
