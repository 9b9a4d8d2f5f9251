"""Deterministic keyword rules for categorization.

``RULES`` is an ordered tuple: a description matching keywords from several
rules always resolves to the earliest rule. Matching is a case-insensitive
substring test, so short keywords (``"bp"``, ``"att"``, ``"gas"``) also match
inside longer words; the order of the table decides those collisions.
"""

from __future__ import annotations

from dataclasses import dataclass

from .categories import OTHER_EXPENSES
from .models import CategoryResult, CategorySource

RULE_CONFIDENCE = 0.8
DEFAULT_CONFIDENCE = 0.3
SUGGESTION_STEP = 0.3
SUGGESTION_CAP = 0.9
SUGGESTION_LIMIT = 3


@dataclass(frozen=True, slots=True)
class KeywordRule:
    rule_id: str
    category: str
    subcategory: str | None
    keywords: tuple[str, ...]

    def score(self, lowered: str) -> int:
        """Count of keywords present in an already-lowercased description."""

        return sum(1 for kw in self.keywords if kw in lowered)

    def matches(self, lowered: str) -> bool:
        return any(kw in lowered for kw in self.keywords)


def _rule(rule_id: str, category: str, subcategory: str | None, *keywords: str) -> KeywordRule:
    return KeywordRule(rule_id, category, subcategory, tuple(k.lower() for k in keywords))


RULES: tuple[KeywordRule, ...] = (
    _rule("food_dining", "Food & Dining", "Restaurants",
          "restaurant", "mcdonald", "burger", "pizza", "starbucks", "coffee", "cafe",
          "diner", "food", "grubhub", "doordash", "ubereats"),
    _rule("groceries", "Food & Dining", "Groceries",
          "grocery", "supermarket", "walmart", "target", "kroger", "safeway",
          "whole foods", "trader joe"),
    _rule("gas_fuel", "Transport", "Gas & Fuel",
          "gas", "fuel", "shell", "exxon", "chevron", "bp", "mobil", "station"),
    _rule("parking_tolls", "Transport", "Parking & Tolls",
          "parking", "toll", "meter", "garage"),
    _rule("public_transport", "Transport", "Public Transportation",
          "metro", "subway", "bus", "train", "uber", "lyft", "taxi", "transit"),
    _rule("entertainment", "Entertainment", None,
          "movie", "theater", "cinema", "netflix", "spotify", "hulu", "disney", "gaming",
          "concert", "tickets"),
    _rule("shopping_general", "Shopping", None,
          "amazon", "ebay", "store", "retail", "shop", "purchase", "buy"),
    _rule("utilities_electric", "Bills & Utilities", "Electricity",
          "electric", "power", "utility", "pge", "edison"),
    _rule("utilities_gas", "Bills & Utilities", "Gas",
          "gas company", "natural gas"),
    _rule("utilities_water", "Bills & Utilities", "Water",
          "water", "sewer"),
    _rule("utilities_phone", "Bills & Utilities", "Phone",
          "verizon", "att", "t-mobile", "sprint", "phone", "cellular", "wireless"),
    _rule("utilities_internet", "Bills & Utilities", "Internet",
          "comcast", "xfinity", "internet", "broadband", "wifi"),
    _rule("healthcare_medical", "Healthcare", "Medical",
          "doctor", "hospital", "clinic", "medical", "pharmacy", "cvs", "walgreens"),
    _rule("healthcare_dental", "Healthcare", "Dental",
          "dental", "dentist", "orthodont"),
    _rule("education", "Education", None,
          "school", "university", "college", "tuition", "education", "course", "textbook"),
    _rule("travel_accommodation", "Travel", "Accommodation",
          "hotel", "motel", "airbnb", "booking", "expedia", "lodging"),
    _rule("travel_transport", "Travel", "Transportation",
          "airline", "flight", "airport", "rental car", "hertz", "avis"),
    _rule("personal_care", "Personal Care", None,
          "salon", "spa", "haircut", "barber", "cosmetic", "beauty"),
    _rule("home_garden", "Home & Garden", None,
          "home depot", "lowes", "hardware", "garden", "furniture", "appliance"),
    _rule("insurance_auto", "Insurance", "Auto",
          "auto insurance", "car insurance", "geico", "state farm", "progressive"),
    _rule("insurance_health", "Insurance", "Health",
          "health insurance", "medical insurance"),
    _rule("insurance_home", "Insurance", "Home",
          "home insurance", "homeowner", "property insurance"),
    _rule("salary_income", "Salary", None,
          "salary", "paycheck", "wages", "payroll", "direct deposit", "employer"),
    _rule("freelance_income", "Freelance", None,
          "freelance", "contractor", "consulting", "gig", "upwork", "fiverr"),
    _rule("investment_income", "Investment", None,
          "dividend", "interest", "investment", "stock", "bond", "mutual fund", "etf"),
    _rule("business_income", "Business Income", None,
          "business", "revenue", "sales", "client payment"),
    _rule("atm_fees", "Other Expenses", "ATM Fees",
          "atm fee", "withdrawal fee", "foreign transaction"),
    _rule("rent_housing", "Home & Garden", "Rent",
          "rent", "lease", "housing", "apartment", "mortgage"),
)  # fmt: skip


def categorize_with_rules(
    description: str, rules: tuple[KeywordRule, ...] = RULES
) -> CategoryResult:
    """First matching rule wins; no match yields ``Other Expenses`` at 0.3."""

    lowered = description.lower()
    for rule in rules:
        if rule.matches(lowered):
            return CategoryResult(
                category=rule.category,
                subcategory=rule.subcategory,
                confidence=RULE_CONFIDENCE,
                source=CategorySource.RULES,
            )
    return CategoryResult(
        category=OTHER_EXPENSES, confidence=DEFAULT_CONFIDENCE, source=CategorySource.RULES
    )


def suggest_categories(
    description: str,
    *,
    limit: int = SUGGESTION_LIMIT,
    rules: tuple[KeywordRule, ...] = RULES,
) -> list[CategoryResult]:
    """Rank rules by keyword hits for manual override.

    Confidence is ``min(0.9, hits * 0.3)``; ties keep table order.
    """

    lowered = description.lower()
    scored: list[CategoryResult] = []
    for rule in rules:
        hits = rule.score(lowered)
        if hits > 0:
            scored.append(
                CategoryResult(
                    category=rule.category,
                    subcategory=rule.subcategory,
                    confidence=min(SUGGESTION_CAP, round(hits * SUGGESTION_STEP, 2)),
                    source=CategorySource.RULES,
                )
            )
    # sorted() is stable, so equal confidences keep declaration order.
    return sorted(scored, key=lambda r: r.confidence, reverse=True)[:limit]


__all__ = [
    "RULE_CONFIDENCE",
    "DEFAULT_CONFIDENCE",
    "KeywordRule",
    "RULES",
    "categorize_with_rules",
    "suggest_categories",
]
