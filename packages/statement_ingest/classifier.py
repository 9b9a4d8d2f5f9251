"""Remote classification collaborator backed by the OpenAI Responses API.

Public API:
    - :class:`Classifier` (protocol)
    - :class:`OpenAIClassifier`
    - :func:`parse_and_align_categories`
    - :func:`build_classifier`

One request per batch, no retries: any failure surfaces as an exception and
the categorization engine degrades to keyword rules.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from openai import AsyncOpenAI
from openai.types.responses import ResponseTextConfigParam
from pydantic import BaseModel, ConfigDict, ValidationError

from . import prompting
from .categories import category_names
from .config import IngestSettings
from .errors import ClassificationError
from .logging_setup import get_logger

_logger = get_logger("statement_ingest.classifier")


class Classifier(Protocol):
    async def classify(self, descriptions: Sequence[str]) -> list[str]:
        """Return one category label per description, in input order."""
        ...


# ---------------------------------------------------------------------------
# Response parsing and alignment
# ---------------------------------------------------------------------------


class _ResultItem(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    idx: int
    category: str


class _ResponseBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    results: list[_ResultItem]


def extract_response_json_mapping(resp: Any) -> Mapping[str, Any]:
    """Decode the JSON mapping from a Responses SDK result.

    Prefers ``resp.output_text``; falls back to ``resp.output[0].content[0].text``.
    """

    text: str | None = getattr(resp, "output_text", None)
    if not text:
        try:
            first = resp.output[0] if getattr(resp, "output", None) else None
            content = getattr(first, "content", None)
            if content:
                txt_obj = getattr(content[0], "text", None)
                if isinstance(txt_obj, str):
                    text = txt_obj
                else:
                    maybe_val = getattr(txt_obj, "value", None)
                    if isinstance(maybe_val, str):
                        text = maybe_val
        except (AttributeError, IndexError, TypeError):
            text = None
    if not text or not isinstance(text, str):
        raise ClassificationError("Unexpected Responses API shape; unable to locate text output")

    try:
        decoded = json.loads(text)
    except json.JSONDecodeError as e:
        raise ClassificationError("Model output was not valid JSON") from e
    if not isinstance(decoded, Mapping):
        raise ClassificationError("Model output must be a JSON object at top level")
    return decoded


def parse_and_align_categories(
    body: Mapping[str, Any],
    *,
    num_items: int,
    allowed_categories: Sequence[str],
) -> list[str]:
    """Return labels aligned by ``idx``.

    ``results`` must hold exactly ``num_items`` entries covering every idx in
    ``0..num_items-1`` once, each with a non-blank category from
    ``allowed_categories``. Anything else raises :class:`ClassificationError`.
    """

    try:
        parsed = _ResponseBody.model_validate(body)
    except ValidationError as e:
        raise ClassificationError(f"Invalid response: {e.error_count()} validation error(s)") from e

    if len(parsed.results) != num_items:
        raise ClassificationError(
            f"Invalid response: expected {num_items} results, got {len(parsed.results)}"
        )

    allowed_set = set(allowed_categories)
    by_idx: list[str | None] = [None] * num_items
    for item in parsed.results:
        if item.idx < 0 or item.idx >= num_items:
            raise ClassificationError(f"Invalid response: 'idx' out of range: {item.idx}")
        if by_idx[item.idx] is not None:
            raise ClassificationError(f"Invalid response: duplicate idx {item.idx}")
        if not item.category:
            raise ClassificationError(f"Invalid response: blank category for idx {item.idx}")
        if item.category not in allowed_set:
            raise ClassificationError(f"Invalid category value: {item.category!r}")
        by_idx[item.idx] = item.category

    missing = [i for i, v in enumerate(by_idx) if v is None]
    if missing:
        raise ClassificationError(f"Invalid response: missing indices {missing}")
    return [c for c in by_idx if c is not None]


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


def _create_client(api_key: str | None = None) -> AsyncOpenAI:
    return AsyncOpenAI(api_key=api_key) if api_key else AsyncOpenAI()


class OpenAIClassifier:
    """Classify descriptions with a single strict-schema Responses call."""

    def __init__(
        self,
        *,
        model: str,
        api_key: str | None = None,
        categories: Sequence[str] | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._model = model
        self._api_key = api_key
        self._categories = list(categories) if categories is not None else category_names()
        self._client = client

    async def classify(self, descriptions: Sequence[str]) -> list[str]:
        if not descriptions:
            return []
        client = self._client or _create_client(self._api_key)
        items_json = prompting.serialize_descriptions(descriptions)
        text_cfg: ResponseTextConfigParam = {
            "format": prompting.build_response_format(self._categories)
        }
        _logger.info("classifier:request model=%s items=%d", self._model, len(descriptions))
        resp = await client.responses.create(
            model=self._model,
            instructions=prompting.build_system_instructions(),
            input=prompting.build_user_content(items_json, self._categories),
            text=text_cfg,
        )
        body = extract_response_json_mapping(resp)
        labels = parse_and_align_categories(
            body, num_items=len(descriptions), allowed_categories=self._categories
        )
        _logger.info("classifier:ok items=%d", len(labels))
        return labels


def build_classifier(settings: IngestSettings) -> Classifier | None:
    """Return an :class:`OpenAIClassifier` when the AI path is enabled and keyed."""

    if not settings.ai_available:
        return None
    return OpenAIClassifier(model=settings.openai_model, api_key=settings.openai_api_key)


__all__ = [
    "Classifier",
    "OpenAIClassifier",
    "extract_response_json_mapping",
    "parse_and_align_categories",
    "build_classifier",
]
