import asyncio
import json
from decimal import Decimal
from types import SimpleNamespace

import pytest

from statement_ingest import prompting
from statement_ingest.categories import category_names
from statement_ingest.categorize import categorize_transactions
from statement_ingest.classifier import (
    OpenAIClassifier,
    build_classifier,
    extract_response_json_mapping,
    parse_and_align_categories,
)
from statement_ingest.config import IngestSettings
from statement_ingest.errors import ClassificationError
from statement_ingest.models import CategorySource, RawTransaction
from tests.helpers.classifier_stub import AsyncOpenAIStub, extract_items

ALLOWED = ["Food & Dining", "Transport", "Salary", "Other Expenses"]


def _decide(item):
    d = item["description"].lower()
    if "uber" in d:
        return "Transport"
    if "payroll" in d:
        return "Salary"
    return "Food & Dining"


# ---- OpenAIClassifier ---------------------------------------------------------


def test_classify_sends_one_strict_request_and_aligns_labels():
    stub = AsyncOpenAIStub(_decide)
    clf = OpenAIClassifier(model="gpt-test", client=stub)  # type: ignore[arg-type]

    labels = asyncio.run(clf.classify(["Uber trip", "PAYROLL ACME", "Cafe Luna"]))

    assert labels == ["Transport", "Salary", "Food & Dining"]
    assert len(stub.calls) == 1
    call = stub.calls[0]
    assert call["model"] == "gpt-test"
    fmt = call["text"]["format"]
    assert fmt["type"] == "json_schema"
    assert fmt["name"] == "transaction_categories"
    assert fmt["strict"] is True
    enum = fmt["schema"]["properties"]["results"]["items"]["properties"]["category"]["enum"]
    assert enum == category_names()
    assert [it["idx"] for it in extract_items(call["input"])] == [0, 1, 2]


def test_classify_empty_input_makes_no_call():
    stub = AsyncOpenAIStub(_decide)
    clf = OpenAIClassifier(model="gpt-test", client=stub)  # type: ignore[arg-type]
    assert asyncio.run(clf.classify([])) == []
    assert stub.calls == []


def test_classify_invalid_json_raises():
    stub = AsyncOpenAIStub(raw="not json")
    clf = OpenAIClassifier(model="gpt-test", client=stub)  # type: ignore[arg-type]
    with pytest.raises(ClassificationError, match="not valid JSON"):
        asyncio.run(clf.classify(["a"]))


def test_out_of_catalogue_label_degrades_to_rules():
    stub = AsyncOpenAIStub(lambda _item: "Pets")
    clf = OpenAIClassifier(model="gpt-test", client=stub)  # type: ignore[arg-type]
    txs = [RawTransaction(date="2024-01-01", description="SHELL OIL", amount=Decimal("-30"))]

    (out,) = asyncio.run(categorize_transactions(txs, classifier=clf))

    assert out.category_source is CategorySource.RULES
    assert out.category == "Transport"


def test_end_to_end_ai_categorization():
    stub = AsyncOpenAIStub(_decide)
    clf = OpenAIClassifier(model="gpt-test", client=stub)  # type: ignore[arg-type]
    txs = [
        RawTransaction(date="2024-01-01", description="UBER *TRIP", amount=Decimal("-12.00")),
        RawTransaction(date="2024-01-02", description="Payroll", amount=Decimal("100.00")),
    ]
    out = asyncio.run(categorize_transactions(txs, classifier=clf))

    assert [(c.category, c.category_source) for c in out] == [
        ("Transport", CategorySource.AI),
        ("Salary", CategorySource.AI),
    ]


# ---- Response parsing -----------------------------------------------------------


def test_parse_and_align_reorders_by_idx():
    body = {
        "results": [
            {"idx": 2, "category": "Salary"},
            {"idx": 0, "category": "Transport"},
            {"idx": 1, "category": " Food & Dining "},
        ]
    }
    assert parse_and_align_categories(body, num_items=3, allowed_categories=ALLOWED) == [
        "Transport",
        "Food & Dining",
        "Salary",
    ]


@pytest.mark.parametrize(
    "body, match",
    [
        ({"results": [{"idx": 0, "category": "Transport"}]}, "expected 2 results"),
        (
            {"results": [{"idx": 0, "category": "Transport"}, {"idx": 0, "category": "Salary"}]},
            "duplicate idx",
        ),
        (
            {"results": [{"idx": 0, "category": "Transport"}, {"idx": 5, "category": "Salary"}]},
            "out of range",
        ),
        (
            {"results": [{"idx": 0, "category": "Transport"}, {"idx": 1, "category": "Pets"}]},
            "Invalid category value",
        ),
        (
            {"results": [{"idx": 0, "category": "Transport"}, {"idx": 1, "category": "  "}]},
            "blank category",
        ),
        ({"results": "nope"}, "validation error"),
        ({}, "validation error"),
    ],
)
def test_parse_and_align_rejects_bad_bodies(body, match):
    with pytest.raises(ClassificationError, match=match):
        parse_and_align_categories(body, num_items=2, allowed_categories=ALLOWED)


def test_extract_mapping_prefers_output_text():
    resp = SimpleNamespace(output_text=json.dumps({"results": []}))
    assert extract_response_json_mapping(resp) == {"results": []}


def test_extract_mapping_falls_back_to_output_content():
    content = SimpleNamespace(text=json.dumps({"results": [1]}))
    resp = SimpleNamespace(output_text="", output=[SimpleNamespace(content=[content])])
    assert extract_response_json_mapping(resp) == {"results": [1]}


@pytest.mark.parametrize(
    "resp",
    [
        SimpleNamespace(output_text=None, output=[]),
        SimpleNamespace(output_text="[1, 2]"),
    ],
)
def test_extract_mapping_rejects_unusable_shapes(resp):
    with pytest.raises(ClassificationError):
        extract_response_json_mapping(resp)


# ---- Prompting / factory ----------------------------------------------------------


def test_user_content_embeds_items_between_markers():
    items_json = prompting.serialize_descriptions(["a", "b"])
    content = prompting.build_user_content(items_json, ALLOWED)
    assert "  - Food & Dining" in content
    assert extract_items(content) == [
        {"idx": 0, "description": "a"},
        {"idx": 1, "description": "b"},
    ]


def test_response_format_dedupes_and_requires_categories():
    fmt = prompting.build_response_format(["A", " A ", "B", ""])
    enum = fmt["schema"]["properties"]["results"]["items"]["properties"]["category"]["enum"]
    assert enum == ["A", "B"]
    with pytest.raises(ValueError):
        prompting.build_response_format(["", "  "])


def test_build_classifier_requires_key_and_flag():
    assert build_classifier(IngestSettings()) is None
    assert build_classifier(IngestSettings(openai_api_key="sk-x", ai_enabled=False)) is None
    assert isinstance(build_classifier(IngestSettings(openai_api_key="sk-x")), OpenAIClassifier)
