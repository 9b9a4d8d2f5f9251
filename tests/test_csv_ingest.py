# ruff: noqa: E501
import textwrap
from decimal import Decimal

import pytest

from statement_ingest.errors import CsvParseError, MissingColumnsError, NoTransactionsError
from statement_ingest.ingest import parse_csv
from statement_ingest.ingest.csv_ingest import read_rows
from statement_ingest.models import TransactionType


def _dedent(s: str) -> str:
    return textwrap.dedent(s).lstrip("\n")


MIXED_CSV = _dedent(
    """
    Date,Description,Amount,Balance
    01/15/2024,STARBUCKS COFFEE 123,-4.50,995.50
    01/16/2024,PAYROLL ACME CORP,"2,000.00","2,995.50"
    ,MISSING DATE,-1.00,
    01/18/2024,BAD AMOUNT,abc,
    01/19/2024,MONTHLY FEE WAIVED,0.00,
    """
)


def test_parse_csv_accepts_good_rows_and_reports_bad_ones():
    result = parse_csv(MIXED_CSV, filename="bank.csv")

    assert [t.description for t in result.transactions] == [
        "STARBUCKS COFFEE 123",
        "PAYROLL ACME CORP",
        "MONTHLY FEE WAIVED",
    ]
    assert result.errors == (
        "Row 4: Missing required data (date, description, or amount)",
        'Row 5: Could not parse amount "abc"',
    )

    first, second, third = result.transactions
    assert first.date == "2024-01-15"
    assert first.amount == Decimal("-4.50")
    assert first.balance == Decimal("995.50")
    assert first.merchant == "STARBUCKS COFFEE 123"
    assert second.amount == Decimal("2000.00")
    assert third.amount == Decimal("0.00")
    assert third.balance is None


def test_parse_csv_aggregates():
    result = parse_csv(MIXED_CSV, filename="bank.csv")

    assert result.total_amount == Decimal("2004.50")
    assert result.date_range.start == "2024-01-15"
    assert result.date_range.end == "2024-01-19"
    assert result.metadata.row_count == len(result.transactions) == 3
    assert result.metadata.original_filename == "bank.csv"
    # accepted + skipped == data rows
    assert len(result.transactions) + len(result.errors) == 5


def test_optional_type_and_reference_columns():
    text = _dedent(
        """
        Transaction Date,Details,Debit,Type,Reference
        2024-02-01,Coffee Shop,-3.25,DR,REF-001
        2024-02-02,Refund,10.00,CR,
        """
    )
    result = parse_csv(text, filename="x.csv")

    a, b = result.transactions
    assert a.type is TransactionType.DEBIT
    assert a.reference == "REF-001"
    assert b.type is TransactionType.CREDIT
    assert b.reference is None


def test_semicolon_delimited_file():
    text = "Date;Description;Amount\n2024-03-01;Rent payment;-1200.00\n2024-03-02;Salary;3000.00\n"
    result = parse_csv(text, filename="semi.csv")

    assert [t.amount for t in result.transactions] == [Decimal("-1200.00"), Decimal("3000.00")]


def test_blank_lines_do_not_shift_row_numbers():
    text = "Date,Description,Amount\n\n01/02/2024,Ok row,-1.00\n\n01/03/2024,Bad row,oops\n"
    result = parse_csv(text, filename="blank.csv")

    assert result.errors == ('Row 3: Could not parse amount "oops"',)


def test_missing_columns_raises_with_headers():
    with pytest.raises(MissingColumnsError) as ei:
        parse_csv("Foo,Bar\n1,2\n", filename="bad.csv")

    err = ei.value
    assert err.missing == ("date", "description", "amount")
    assert err.headers == ("Foo", "Bar")
    assert err.filename == "bad.csv"
    assert str(err).startswith(
        "Required columns not found. Expected columns containing: date, description, and amount"
    )
    assert "Found headers: Foo, Bar" in str(err)


def test_header_only_file_has_no_data():
    with pytest.raises(CsvParseError, match="No data found in CSV file"):
        parse_csv("Date,Description,Amount\n", filename="empty.csv")


def test_all_rows_rejected_raises():
    text = "Date,Description,Amount\n01/02/2024,Thing,n/a\n,Other,-1\n"
    with pytest.raises(NoTransactionsError, match="No valid transactions found in the file"):
        parse_csv(text, filename="none.csv")


def test_malformed_quoting_falls_back_to_positional_split():
    text = 'Date,Description,Amount\n01/15/2024,"Coffee"x,-4.50\n'
    result = parse_csv(text, filename="quotes.csv")

    assert len(result.transactions) == 1
    assert result.transactions[0].amount == Decimal("-4.50")
    assert result.transactions[0].description == 'Coffee"x'


def test_read_rows_trims_cells_and_drops_blank_rows():
    rows = read_rows("a , b ,c\n\n   \n , , \n1,2,3\n")
    assert rows == [["a", "b", "c"], ["", "", ""], ["1", "2", "3"]]


def test_rows_of_empty_cells_are_reported_and_counted():
    text = "Date,Description,Amount\n01/02/2024,A,-1.00\n,,\n01/03/2024,B,oops\n"
    result = parse_csv(text, filename="empty_cells.csv")

    assert len(result.transactions) == 1
    assert result.errors == (
        "Row 3: Missing required data (date, description, or amount)",
        'Row 4: Could not parse amount "oops"',
    )


def test_empty_amount_in_fifth_data_row_is_reported_as_row_six():
    lines = ["Date,Description,Amount"]
    for day in range(1, 11):
        amount = "" if day == 5 else f"-{day}.00"
        lines.append(f"01/{day:02d}/2024,PURCHASE {day},{amount}")
    result = parse_csv("\n".join(lines) + "\n", filename="ten.csv")

    assert len(result.transactions) == 9
    assert result.metadata.row_count == 9
    assert result.errors == ("Row 6: Missing required data (date, description, or amount)",)
