"""Interactive review of low-confidence category assignments.

:func:`review_categorized` walks the items below a confidence threshold, shows
the keyword-rule suggestions, and asks a selector for the final category. The
selector is injectable; the default one prompts in the terminal.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from prompt_toolkit import PromptSession

from .categories import category_names
from .categorize import apply_manual_category
from .logging_setup import get_logger
from .models import CategorizedTransaction, CategoryResult
from .rules import suggest_categories
from .term_ui import format_suggestions, select_category

DEFAULT_THRESHOLD = 0.5

_logger = get_logger("statement_ingest.review")

# Returns the chosen category name, or None to keep the current assignment.
type Selector = Callable[[CategorizedTransaction, Sequence[CategoryResult]], str | None]


def needs_review(item: CategorizedTransaction, threshold: float = DEFAULT_THRESHOLD) -> bool:
    return item.confidence < threshold


def prompt_selector(
    categories: Sequence[str] | None = None,
    *,
    session: PromptSession | None = None,
    echo: Callable[[str], None] = print,
) -> Selector:
    """Build a terminal selector that pre-fills the top suggestion (or the current category)."""

    names = list(categories) if categories is not None else category_names()

    def _select(item: CategorizedTransaction, suggestions: Sequence[CategoryResult]) -> str | None:
        echo("")
        echo(f"{item.date}  {item.amount}  {item.description}")
        echo(
            f"  current: {item.category} ({item.category_source}, {item.confidence:.2f})"
        )
        echo("  suggestions:")
        echo(format_suggestions(suggestions))
        default = suggestions[0].category if suggestions else item.category
        if default not in names:
            default = item.category if item.category in names else names[0]
        return select_category(names, default=default, session=session)

    return _select


def _subcategory_for(choice: str, suggestions: Sequence[CategoryResult]) -> str | None:
    for s in suggestions:
        if s.category == choice:
            return s.subcategory
    return None


def review_categorized(
    items: Sequence[CategorizedTransaction],
    *,
    select: Selector | None = None,
    threshold: float = DEFAULT_THRESHOLD,
) -> list[CategorizedTransaction]:
    """Return a new list where reviewed items carry the chosen category.

    Items at or above ``threshold`` pass through untouched. A reviewed item
    becomes ``manual`` at confidence 1.0 whenever the selector returns a
    name; the subcategory comes from the matching suggestion, if any.
    """

    selector = select or prompt_selector()
    out: list[CategorizedTransaction] = []
    reviewed = 0
    for item in items:
        if not needs_review(item, threshold):
            out.append(item)
            continue
        suggestions = suggest_categories(item.description)
        choice = selector(item, suggestions)
        if choice is None or not choice.strip():
            out.append(item)
            continue
        out.append(apply_manual_category(item, choice, _subcategory_for(choice, suggestions)))
        reviewed += 1
    _logger.info("review:done total=%d overridden=%d", len(items), reviewed)
    return out


__all__ = [
    "DEFAULT_THRESHOLD",
    "Selector",
    "needs_review",
    "prompt_selector",
    "review_categorized",
]
