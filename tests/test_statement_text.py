import re
import textwrap
from decimal import Decimal

import pytest

from statement_ingest.errors import NoTransactionsError
from statement_ingest.ingest import parse_statement_text
from statement_ingest.ingest.statement_text import (
    DEFAULT_GRAMMARS,
    LineGrammar,
    parse_line,
    select_candidate_lines,
)


def _dedent(s: str) -> str:
    return textwrap.dedent(s).lstrip("\n")


STATEMENT = _dedent(
    """
    ACME BANK STATEMENT
    Date        Description              Amount      Balance
    01/15/2024  GROCERY STORE PURCHASE   -45.67      1,234.56
    01/16/2024  PAYROLL DEPOSIT          2,500.00
    01/17/2024  PENDING
    01/18/2024  MONTHLY FEE WAIVED       0.00
    01/19/2024  REVERSAL                 0
    """
)


def test_parse_statement_text_lines_and_errors():
    result = parse_statement_text(STATEMENT, filename="jan.pdf")

    assert [t.description for t in result.transactions] == [
        "GROCERY STORE PURCHASE",
        "PAYROLL DEPOSIT",
        "MONTHLY FEE WAIVED",
    ]
    groceries, payroll, fee = result.transactions
    assert groceries.date == "2024-01-15"
    assert groceries.amount == Decimal("-45.67")
    assert groceries.balance == Decimal("1234.56")
    assert payroll.amount == Decimal("2500.00")
    assert payroll.balance is None
    assert fee.amount == Decimal("0.00")

    assert result.errors == (
        "Line 5: Could not parse transaction line: 01/17/2024  PENDING",
        "Line 7: Could not parse transaction line: 01/19/2024  REVERSAL                 0",
    )


def test_error_line_format():
    result = parse_statement_text(STATEMENT, filename="jan.pdf")
    for err in result.errors:
        assert re.match(r"^Line \d+: Could not parse transaction line: ", err)


def test_aggregates_use_absolute_amounts():
    result = parse_statement_text(STATEMENT, filename="jan.pdf")
    assert result.total_amount == Decimal("2545.67")
    assert (result.date_range.start, result.date_range.end) == ("2024-01-15", "2024-01-18")
    assert result.metadata.row_count == 3


def test_iso_dated_lines_with_optional_balance():
    text = "2024-02-01 Coffee Bar -3.80 96.20\n2024-02-02 Bookshop (12.00)\n"
    result = parse_statement_text(text, filename="iso.pdf")

    a, b = result.transactions
    assert (a.date, a.amount, a.balance) == ("2024-02-01", Decimal("-3.80"), Decimal("96.20"))
    assert (b.date, b.amount, b.balance) == ("2024-02-02", Decimal("-12.00"), None)


def test_amount_before_description_layout():
    tx = parse_line("03/05/2024 -19.99 STREAMING SERVICE")
    assert tx is not None
    assert tx.amount == Decimal("-19.99")
    assert tx.description == "STREAMING SERVICE"


def test_table_heuristic_when_no_dated_lines():
    text = _dedent(
        """
        Posted        Details          Debit
        Jan 15 2024   COFFEE SHOP      4.50
        Totals carried forward  1.00  2.00
        """
    )
    lines = select_candidate_lines(text)
    # header has no digits; the totals line is excluded by keyword
    assert lines == [(2, "Jan 15 2024   COFFEE SHOP      4.50")]

    result = parse_statement_text(text, filename="named.pdf")
    (tx,) = result.transactions
    assert tx.date == "2024-01-15"
    assert tx.description == "COFFEE SHOP"
    assert tx.amount == Decimal("4.50")


def test_no_parsable_lines_raises():
    with pytest.raises(NoTransactionsError, match="No valid transactions found in PDF"):
        parse_statement_text("Nothing to see here\nat all\n", filename="empty.pdf")


def test_custom_grammar_list_extends_layouts():
    euro = LineGrammar(
        name="dd_mm_yyyy_dot",
        pattern=re.compile(r"^(\d{2}\.\d{2}\.\d{4}) (.+?) (-?\d+\.\d{2})$"),
        roles=("date", "description", "amount"),
    )
    # A dotted date is not a leading-date candidate, so the table heuristic picks it up.
    text = "15.01.2024   Bakery Lane   -2.40\n"
    result = parse_statement_text(text, filename="eu.pdf", grammars=(*DEFAULT_GRAMMARS, euro))

    (tx,) = result.transactions
    assert tx.description == "Bakery Lane"
    assert tx.amount == Decimal("-2.40")
