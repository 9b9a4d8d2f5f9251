"""Prompt construction for remote transaction classification.

This module builds:
- A deterministic JSON serialization of the descriptions to classify, each
  tagged with a batch-relative ``idx``.
- The system and user prompts.
- The strict ``text.format`` (JSON Schema) object for the OpenAI Responses
  API, with the category enum taken from the catalogue.
"""

from __future__ import annotations

import json
from collections.abc import Sequence

from openai.types.responses.response_format_text_json_schema_config_param import (
    ResponseFormatTextJSONSchemaConfigParam,
)

BEGIN_MARKER = "BEGIN_TRANSACTIONS_JSON"
END_MARKER = "END_TRANSACTIONS_JSON"


def serialize_descriptions(descriptions: Sequence[str]) -> str:
    """Serialize descriptions to a JSON array of ``{"idx", "description"}`` objects."""

    return json.dumps(
        [{"idx": i, "description": d} for i, d in enumerate(descriptions)],
        ensure_ascii=False,
    )


def build_system_instructions() -> str:
    return (
        "You categorize bank statement transactions for a personal finance app. "
        "Choose exactly one category per transaction from the provided list. "
        "Never invent categories. Output JSON only that conforms to the specified schema."
    )


def build_user_content(items_json: str, categories: Sequence[str]) -> str:
    """Embed the category list and the transactions block.

    The transactions JSON sits between ``BEGIN_TRANSACTIONS_JSON`` and
    ``END_TRANSACTIONS_JSON`` lines so it can be located verbatim.
    """

    category_lines = "\n".join(f"  - {name}" for name in categories)
    return (
        "Categories:\n"
        f"{category_lines}\n\n"
        "Guidance:\n"
        "- Inflows such as payroll or dividends belong to an income category.\n"
        "- Use the most specific category that fits; use Other Expenses or Other Income "
        "only when nothing else fits.\n"
        "- Return one result per transaction, echoing its idx.\n\n"
        f"{BEGIN_MARKER}\n{items_json}\n{END_MARKER}"
    )


def build_response_format(categories: Sequence[str]) -> ResponseFormatTextJSONSchemaConfigParam:
    """Return the strict JSON Schema format object.

    Schema shape::

        {"results": [{"idx": int, "category": <enum of categories>}]}
    """

    names: list[str] = [c for c in dict.fromkeys(n.strip() for n in categories) if c]
    if not names:
        raise ValueError("categories must contain at least one non-blank name")

    result: ResponseFormatTextJSONSchemaConfigParam = {
        "type": "json_schema",
        "name": "transaction_categories",
        "schema": {
            "type": "object",
            "properties": {
                "results": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "idx": {"type": "integer"},
                            "category": {"type": "string", "enum": names},
                        },
                        "required": ["idx", "category"],
                        "additionalProperties": False,
                    },
                }
            },
            "required": ["results"],
            "additionalProperties": False,
        },
        "strict": True,
    }
    return result


__all__ = [
    "BEGIN_MARKER",
    "END_MARKER",
    "serialize_descriptions",
    "build_system_instructions",
    "build_user_content",
    "build_response_format",
]
