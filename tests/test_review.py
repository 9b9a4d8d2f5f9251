from decimal import Decimal

from prompt_toolkit import PromptSession
from prompt_toolkit.input import create_pipe_input
from prompt_toolkit.output import DummyOutput

from statement_ingest.models import CategorizedTransaction, CategorySource, RawTransaction
from statement_ingest.review import needs_review, prompt_selector, review_categorized


def _ct(description: str, category: str, confidence: float) -> CategorizedTransaction:
    return CategorizedTransaction(
        transaction=RawTransaction(
            date="2024-01-10", description=description, amount=Decimal("-20.00")
        ),
        category=category,
        confidence=confidence,
        category_source=CategorySource.RULES,
    )


def test_needs_review_threshold():
    assert needs_review(_ct("x", "Other Expenses", 0.3))
    assert not needs_review(_ct("x", "Shopping", 0.8))
    assert not needs_review(_ct("x", "Shopping", 0.5))
    assert needs_review(_ct("x", "Shopping", 0.8), threshold=0.9)


def test_only_low_confidence_items_are_offered():
    confident = _ct("STARBUCKS", "Food & Dining", 0.8)
    unsure = _ct("XQZ 42", "Other Expenses", 0.3)
    seen: list[str] = []

    def select(item, suggestions):
        seen.append(item.description)
        return "Shopping"

    out = review_categorized([confident, unsure], select=select)

    assert seen == ["XQZ 42"]
    assert out[0] is confident
    assert out[1].category == "Shopping"
    assert out[1].category_source is CategorySource.MANUAL
    assert out[1].confidence == 1.0
    # input untouched
    assert unsure.category == "Other Expenses"


def test_subcategory_taken_from_matching_suggestion():
    item = _ct("SHELL GAS STATION", "Other Expenses", 0.3)

    def select(_item, suggestions):
        assert suggestions[0].category == "Transport"
        return "Transport"

    (out,) = review_categorized([item], select=select)
    assert (out.category, out.subcategory) == ("Transport", "Gas & Fuel")


def test_declined_selection_keeps_item():
    item = _ct("XQZ", "Other Expenses", 0.3)
    assert review_categorized([item], select=lambda *_: None) == [item]
    assert review_categorized([item], select=lambda *_: "  ") == [item]


def test_prompt_selector_prefills_top_suggestion():
    echoed: list[str] = []
    item = _ct("UBER TRIP 123", "Other Expenses", 0.3)
    with create_pipe_input() as pipe:
        sess = PromptSession(input=pipe, output=DummyOutput())
        pipe.send_text("\r")
        out = review_categorized(
            [item], select=prompt_selector(session=sess, echo=echoed.append)
        )

    assert out[0].category == "Transport"
    assert out[0].subcategory == "Public Transportation"
    assert any("UBER TRIP 123" in line for line in echoed)
    assert any("Transport / Public Transportation" in line for line in echoed)


def test_prompt_selector_falls_back_to_current_category():
    item = _ct("XQZ", "Entertainment", 0.2)
    with create_pipe_input() as pipe:
        sess = PromptSession(input=pipe, output=DummyOutput())
        pipe.send_text("\r")
        out = review_categorized([item], select=prompt_selector(session=sess, echo=lambda _s: None))

    # accepting the pre-filled current category still records a manual decision
    assert out[0].category == "Entertainment"
    assert out[0].category_source is CategorySource.MANUAL
