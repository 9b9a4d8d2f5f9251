"""Spending analytics over categorized transactions.

Pure functions; callers load transactions however they like (a fresh batch or
rows read back from the database). Income is any amount >= 0, expenses are
negative amounts reported as absolute values.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import StrEnum

from .categories import CategoryKind, get_category
from .models import CategorizedTransaction

_ZERO = Decimal("0")


@dataclass(frozen=True, slots=True)
class PeriodTotals:
    """Income/expense roll-up for one month (``YYYY-MM``) or one day (``YYYY-MM-DD``)."""

    period: str
    total_income: Decimal
    total_expenses: Decimal
    net_income: Decimal
    transaction_count: int


@dataclass(frozen=True, slots=True)
class CategorySpending:
    category: str
    amount: Decimal
    transaction_count: int
    kind: CategoryKind
    icon: str | None
    color: str | None


class Level(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Trend(StrEnum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


@dataclass(frozen=True, slots=True)
class BudgetRecommendation:
    category: str
    current_spending: Decimal
    recommended_budget: int
    confidence: Level
    risk_level: Level
    trend: Trend
    reasoning: str
    icon: str | None = None
    color: str | None = None

    @property
    def potential_savings(self) -> Decimal:
        return self.current_spending - self.recommended_budget


# ---------------------------------------------------------------------------
# Roll-ups
# ---------------------------------------------------------------------------


def _roll_up(txs: Sequence[CategorizedTransaction], key_len: int) -> dict[str, list[Decimal]]:
    buckets: dict[str, list[Decimal]] = {}
    for tx in txs:
        buckets.setdefault(tx.date[:key_len], []).append(tx.amount)
    return buckets


def _totals(period: str, amounts: Sequence[Decimal]) -> PeriodTotals:
    income = sum((a for a in amounts if a >= 0), _ZERO)
    expenses = sum((-a for a in amounts if a < 0), _ZERO)
    return PeriodTotals(
        period=period,
        total_income=income,
        total_expenses=expenses,
        net_income=income - expenses,
        transaction_count=len(amounts),
    )


def monthly_spending(txs: Sequence[CategorizedTransaction]) -> list[PeriodTotals]:
    """Per-month totals in ascending month order."""

    buckets = _roll_up(txs, 7)
    return [_totals(month, buckets[month]) for month in sorted(buckets)]


def daily_spending(
    txs: Sequence[CategorizedTransaction], start: date, end: date
) -> list[PeriodTotals]:
    """One entry per day in ``[start, end]``; days without transactions are zero-filled."""

    if end < start:
        raise ValueError("end must not be before start")
    buckets = _roll_up(txs, 10)
    out: list[PeriodTotals] = []
    day = start
    while day <= end:
        key = day.isoformat()
        out.append(_totals(key, buckets.get(key, ())))
        day += timedelta(days=1)
    return out


def category_spending(txs: Sequence[CategorizedTransaction]) -> list[CategorySpending]:
    """Absolute amount per category, largest first.

    Categories outside the catalogue are reported as expenses without icon/color.
    """

    amounts: dict[str, Decimal] = {}
    counts: dict[str, int] = {}
    for tx in txs:
        amounts[tx.category] = amounts.get(tx.category, _ZERO) + abs(tx.amount)
        counts[tx.category] = counts.get(tx.category, 0) + 1

    rows: list[CategorySpending] = []
    for name, amount in amounts.items():
        meta = get_category(name)
        rows.append(
            CategorySpending(
                category=name,
                amount=amount,
                transaction_count=counts[name],
                kind=meta.kind if meta is not None else CategoryKind.EXPENSE,
                icon=meta.icon if meta is not None else None,
                color=meta.color if meta is not None else None,
            )
        )
    return sorted(rows, key=lambda r: r.amount, reverse=True)


# ---------------------------------------------------------------------------
# Budget recommendations
# ---------------------------------------------------------------------------


def _pct(value: str) -> Decimal:
    return Decimal(value) / 100


def _recommend_one(
    category: str, monthly_avg: Decimal, income: Decimal, percent: Decimal
) -> tuple[Decimal, Level, Level, str]:
    """Return ``(budget, confidence, risk, reasoning)`` for one category."""

    match category.lower():
        case "food & dining":
            if percent > 15:
                return (income * _pct("15"), Level.HIGH, Level.HIGH,
                        "Food spending exceeds recommended 15% of income. "
                        "Consider meal planning and cooking more at home.")
            if percent < 10:
                return (income * _pct("12"), Level.HIGH, Level.LOW,
                        "Current food spending is efficient. Budget allows for occasional dining out.")
            return (monthly_avg * Decimal("1.05"), Level.HIGH, Level.LOW,
                    "Food spending is reasonable. Budget includes 5% buffer for variety.")
        case "transport":
            if percent > 20:
                return (income * _pct("18"), Level.HIGH, Level.HIGH,
                        "Transportation costs are high. "
                        "Consider carpooling, public transit, or remote work options.")
            return (monthly_avg * Decimal("1.1"), Level.MEDIUM, Level.LOW,
                    "Transportation spending is manageable. "
                    "Budget includes buffer for fuel price changes.")
        case "entertainment":
            if percent > 5:
                return (income * _pct("5"), Level.HIGH, Level.MEDIUM,
                        "Entertainment spending is high. "
                        "Consider free activities and home entertainment options.")
            return (monthly_avg * Decimal("1.2"), Level.MEDIUM, Level.LOW,
                    "Entertainment budget allows for leisure activities while maintaining balance.")
        case "bills & utilities":
            return (monthly_avg * Decimal("1.15"), Level.HIGH, Level.LOW,
                    "Utilities are fairly fixed costs. Budget includes 15% seasonal buffer.")
        case "healthcare":
            return (monthly_avg * Decimal("1.5"), Level.MEDIUM, Level.MEDIUM,
                    "Healthcare costs can be unpredictable. "
                    "Budget includes buffer for unexpected expenses.")
        case "shopping":
            if percent > 10:
                return (income * _pct("8"), Level.HIGH, Level.HIGH,
                        "Shopping spending is high. Focus on needs vs. wants "
                        "and consider a cooling-off period for purchases.")
            return (monthly_avg * Decimal("0.9"), Level.MEDIUM, Level.MEDIUM,
                    "Shopping budget encourages mindful spending "
                    "while allowing for necessary purchases.")
        case _:
            return (monthly_avg * Decimal("1.1"), Level.LOW, Level.LOW,
                    "Budget based on current spending pattern with 10% buffer "
                    f"for {category.lower()}.")


def _trend(percent: Decimal) -> Trend:
    if percent > 15:
        return Trend.INCREASING
    if percent < 5:
        return Trend.DECREASING
    return Trend.STABLE


def recommend_budgets(
    monthly: Sequence[PeriodTotals], categories: Sequence[CategorySpending]
) -> list[BudgetRecommendation]:
    """Suggest a monthly budget per expense category, biggest potential savings first.

    Spending is averaged over ``len(monthly)`` months. Percentages are of the
    average monthly income; with no recorded income, total category spending
    stands in as the base.
    """

    expenses = [c for c in categories if c.kind is CategoryKind.EXPENSE]
    if not expenses:
        return []
    months = max(len(monthly), 1)
    income = sum((m.total_income for m in monthly), _ZERO) / months
    if income <= 0:
        income = sum((c.amount for c in expenses), _ZERO) / months

    recs: list[BudgetRecommendation] = []
    for cat in expenses:
        monthly_avg = cat.amount / months
        percent = (monthly_avg / income * 100) if income > 0 else _ZERO
        budget, confidence, risk, reasoning = _recommend_one(
            cat.category, monthly_avg, income, percent
        )
        recs.append(
            BudgetRecommendation(
                category=cat.category,
                current_spending=monthly_avg,
                recommended_budget=int(budget.quantize(Decimal("1"), rounding=ROUND_HALF_UP)),
                confidence=confidence,
                risk_level=risk,
                trend=_trend(percent),
                reasoning=reasoning,
                icon=cat.icon,
                color=cat.color,
            )
        )
    return sorted(recs, key=lambda r: r.potential_savings, reverse=True)


# ---------------------------------------------------------------------------
# Text rendering
# ---------------------------------------------------------------------------


def _fmt(amount: Decimal) -> str:
    return f"{amount:,.2f}"


def render_trends_table(txs: Sequence[CategorizedTransaction]) -> str:
    """Category x month table of absolute spending with a total column.

    Rows follow :func:`category_spending` order.
    """

    if not txs:
        return "(no transactions)"
    months = sorted({tx.date[:7] for tx in txs})
    cells: dict[tuple[str, str], Decimal] = {}
    for tx in txs:
        key = (tx.category, tx.date[:7])
        cells[key] = cells.get(key, _ZERO) + abs(tx.amount)

    header = ["Category", *months, "Total"]
    body: list[list[str]] = []
    for row in category_spending(txs):
        body.append(
            [
                row.category,
                *(_fmt(cells.get((row.category, m), _ZERO)) for m in months),
                _fmt(row.amount),
            ]
        )

    widths = [max(len(r[i]) for r in [header, *body]) for i in range(len(header))]

    def _line(cols: Sequence[str]) -> str:
        first = cols[0].ljust(widths[0])
        rest = (c.rjust(w) for c, w in zip(cols[1:], widths[1:]))
        return "  ".join([first, *rest]).rstrip()

    sep = "  ".join("-" * w for w in widths)
    return "\n".join([_line(header), sep, *(_line(r) for r in body)])


__all__ = [
    "PeriodTotals",
    "CategorySpending",
    "Level",
    "Trend",
    "BudgetRecommendation",
    "monthly_spending",
    "daily_spending",
    "category_spending",
    "recommend_budgets",
    "render_trends_table",
]
