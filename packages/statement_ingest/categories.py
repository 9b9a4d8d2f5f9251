"""Canonical category catalogue and name helpers.

The catalogue is the allow-list for remote classification, the seed data for
``fin_categories`` and the source of icon/color metadata in reports. It is an
immutable tuple; order is display order (expenses first, then income).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum


class CategoryKind(StrEnum):
    INCOME = "income"
    EXPENSE = "expense"


@dataclass(frozen=True, slots=True)
class Category:
    code: str
    name: str
    kind: CategoryKind
    icon: str
    color: str


CATALOGUE: tuple[Category, ...] = (
    Category("food_dining", "Food & Dining", CategoryKind.EXPENSE, "🍕", "#FF6B6B"),
    Category("transport", "Transport", CategoryKind.EXPENSE, "🚗", "#4ECDC4"),
    Category("entertainment", "Entertainment", CategoryKind.EXPENSE, "🎬", "#45B7D1"),
    Category("shopping", "Shopping", CategoryKind.EXPENSE, "🛍️", "#96CEB4"),
    Category("bills_utilities", "Bills & Utilities", CategoryKind.EXPENSE, "⚡", "#FECA57"),
    Category("healthcare", "Healthcare", CategoryKind.EXPENSE, "🏥", "#FF9FF3"),
    Category("education", "Education", CategoryKind.EXPENSE, "📚", "#54A0FF"),
    Category("travel", "Travel", CategoryKind.EXPENSE, "✈️", "#5F27CD"),
    Category("personal_care", "Personal Care", CategoryKind.EXPENSE, "💄", "#00D2D3"),
    Category("home_garden", "Home & Garden", CategoryKind.EXPENSE, "🏠", "#FF9F43"),
    Category("insurance", "Insurance", CategoryKind.EXPENSE, "🛡️", "#A55EEA"),
    Category("taxes", "Taxes", CategoryKind.EXPENSE, "📋", "#26DE81"),
    Category("gifts_donations", "Gifts & Donations", CategoryKind.EXPENSE, "🎁", "#FD79A8"),
    Category("business", "Business", CategoryKind.EXPENSE, "💼", "#6C5CE7"),
    Category("other_expenses", "Other Expenses", CategoryKind.EXPENSE, "💸", "#A0A0A0"),
    Category("salary", "Salary", CategoryKind.INCOME, "💰", "#00B894"),
    Category("freelance", "Freelance", CategoryKind.INCOME, "💻", "#00CEC9"),
    Category("investment", "Investment", CategoryKind.INCOME, "📈", "#81ECEC"),
    Category("business_income", "Business Income", CategoryKind.INCOME, "🏢", "#55A3FF"),
    Category("other_income", "Other Income", CategoryKind.INCOME, "💵", "#FDCB6E"),
)

OTHER_EXPENSES = "Other Expenses"
OTHER_INCOME = "Other Income"

_BY_NAME: dict[str, Category] = {c.name: c for c in CATALOGUE}
_BY_CODE: dict[str, Category] = {c.code: c for c in CATALOGUE}


def category_names() -> list[str]:
    return [c.name for c in CATALOGUE]


def get_category(name: str) -> Category | None:
    return _BY_NAME.get(normalize_name(name))


def code_for(name: str) -> str | None:
    """Map a display name to its stable code (``"Food & Dining"`` -> ``"food_dining"``)."""

    category = get_category(name)
    return category.code if category is not None else None


def by_code(code: str) -> Category | None:
    return _BY_CODE.get(code)


def default_for_amount(amount: Decimal) -> str:
    """Fallback category name chosen by sign; zero counts as income."""

    return OTHER_INCOME if amount >= 0 else OTHER_EXPENSES


# ---------------------------
# Name normalization/validation
# ---------------------------

_ALLOWED_RE = re.compile(r"^[A-Za-z0-9 &\-/]+$")


def normalize_name(name: str) -> str:
    """Trim and collapse internal whitespace; case is preserved."""

    return " ".join(name.strip().split())


@dataclass(frozen=True, slots=True)
class NameValidation:
    ok: bool
    reason: str | None = None


def validate_name(name: str, *, min_len: int = 1, max_len: int = 64) -> NameValidation:
    """Validate a manually entered category name.

    Rules
    -----
    - Trim whitespace; enforce length bounds 1..64.
    - Allowed characters: letters, numbers, spaces, and ``& - /``.
    """

    n = normalize_name(name)
    if len(n) < min_len:
        return NameValidation(False, "Name cannot be empty")
    if len(n) > max_len:
        return NameValidation(False, f"Name must be at most {max_len} characters")
    if not _ALLOWED_RE.match(n):
        return NameValidation(False, "Only letters, numbers, spaces, and & - / are allowed")
    return NameValidation(True, None)


__all__ = [
    "CategoryKind",
    "Category",
    "CATALOGUE",
    "OTHER_EXPENSES",
    "OTHER_INCOME",
    "category_names",
    "get_category",
    "code_for",
    "by_code",
    "default_for_amount",
    "normalize_name",
    "NameValidation",
    "validate_name",
]
