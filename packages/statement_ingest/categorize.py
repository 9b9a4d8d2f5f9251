"""Categorization engine.

Public API:
    - :func:`categorize_transactions`
    - :func:`apply_manual_category`

The remote classifier is tried once per batch. Its labels are adopted only
when it returns exactly one non-blank label per transaction; any exception or
shape mismatch degrades the whole batch to keyword rules. Degradation is
logged at WARNING and is never raised to the caller.
"""

from __future__ import annotations

import dataclasses

from .categories import normalize_name, validate_name
from .classifier import Classifier
from .logging_setup import get_logger
from .models import (
    CategorizedTransaction,
    CategoryResult,
    CategorySource,
    Transactions,
)
from .rules import categorize_with_rules

AI_CONFIDENCE: float = 0.9
MANUAL_CONFIDENCE: float = 1.0

_logger = get_logger("statement_ingest.categorize")


def _with_rules(transactions: Transactions) -> list[CategorizedTransaction]:
    return [
        CategorizedTransaction.from_result(tx, categorize_with_rules(tx.description))
        for tx in transactions
    ]


def _labels_usable(labels: object, expected: int) -> bool:
    if not isinstance(labels, list) or len(labels) != expected:
        return False
    return all(isinstance(label, str) and label.strip() for label in labels)


async def categorize_transactions(
    transactions: Transactions,
    *,
    classifier: Classifier | None = None,
) -> list[CategorizedTransaction]:
    """Return a new categorized record per transaction, in input order.

    ``classifier=None`` means the remote path is unavailable and rules are
    used directly. Never raises for classifier problems.
    """

    txs = list(transactions)
    if not txs:
        return []
    if classifier is None:
        _logger.debug("categorize:rules_only count=%d", len(txs))
        return _with_rules(txs)

    try:
        labels = await classifier.classify([tx.description for tx in txs])
    except Exception as e:  # noqa: BLE001 - any remote failure degrades to rules
        _logger.warning(
            "categorize:fallback reason=%s detail=%s count=%d", type(e).__name__, e, len(txs)
        )
        return _with_rules(txs)

    if not _labels_usable(labels, len(txs)):
        got = len(labels) if isinstance(labels, list) else type(labels).__name__
        _logger.warning(
            "categorize:fallback reason=count_mismatch expected=%d got=%s", len(txs), got
        )
        return _with_rules(txs)

    _logger.info("categorize:ai count=%d", len(txs))
    return [
        CategorizedTransaction.from_result(
            tx,
            CategoryResult(
                category=label.strip(), confidence=AI_CONFIDENCE, source=CategorySource.AI
            ),
        )
        for tx, label in zip(txs, labels, strict=True)
    ]


def apply_manual_category(
    item: CategorizedTransaction,
    category: str,
    subcategory: str | None = None,
) -> CategorizedTransaction:
    """Return a copy of ``item`` reassigned by a person (confidence 1.0, ``manual``).

    Raises ``ValueError`` when ``category`` fails name validation.
    """

    check = validate_name(category)
    if not check.ok:
        raise ValueError(f"Invalid category name {category!r}: {check.reason}")
    sub = normalize_name(subcategory) if subcategory and subcategory.strip() else None
    return dataclasses.replace(
        item,
        category=normalize_name(category),
        subcategory=sub,
        confidence=MANUAL_CONFIDENCE,
        category_source=CategorySource.MANUAL,
    )


__all__ = ["AI_CONFIDENCE", "MANUAL_CONFIDENCE", "categorize_transactions", "apply_manual_category"]
