"""CSV ingestor: bank export text to :class:`ParsedFileResult`.

Rows are read positionally (``csv.reader``), the header row goes through
schema detection, and each data row is normalized independently. Bad rows
become ``"Row N: ..."`` strings where ``N`` is the 1-based row number counting
the header as row 1 (blank lines are not counted). Whole-file problems raise
an :class:`~statement_ingest.errors.IngestError` subclass.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Sequence

from ..errors import CsvParseError, MissingColumnsError, NoTransactionsError
from ..logging_setup import get_logger
from ..models import ParsedFileResult, RawTransaction
from ..normalizers import (
    classify_type,
    extract_merchant,
    is_zero_literal,
    normalize_date,
    parse_amount,
)
from .schema import ColumnSchema, detect_schema
from .utils import build_parsed_result

_logger = get_logger("statement_ingest.ingest.csv")

_SNIFF_DELIMITERS = ";\t|"

type Row = list[str]


def _guess_delimiter(text: str) -> str:
    first_line = text.split("\n", 1)[0]
    if "," in first_line:
        return ","
    try:
        return csv.Sniffer().sniff(text[:4096], delimiters=_SNIFF_DELIMITERS).delimiter
    except csv.Error:
        return ","


def _clean(rows: Sequence[Sequence[str]]) -> list[Row]:
    """Trim cells and drop blank lines.

    A blank line is one the reader yields as no cells or a single empty cell;
    rows like ``,,`` are kept so they surface as row errors.
    """

    out: list[Row] = []
    for row in rows:
        cells = [c.strip() for c in row]
        if len(cells) > 1 or (cells and cells[0]):
            out.append(cells)
    return out


def _read_rows_structured(text: str, delimiter: str) -> list[Row]:
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter, strict=True)
    return _clean(list(reader))


def _read_rows_positional(text: str, delimiter: str) -> list[Row]:
    """Lenient fallback: split each physical line on the delimiter.

    Quotes are stripped per cell and embedded delimiters are not honored.
    """

    rows: list[Row] = []
    for line in text.replace("\x00", "").splitlines():
        rows.append([cell.strip().strip('"').strip() for cell in line.split(delimiter)])
    return _clean(rows)


def read_rows(text: str) -> list[Row]:
    """Return non-blank, trimmed rows (header first).

    Raises :class:`CsvParseError` when structured reading fails and the
    positional fallback yields nothing either.
    """

    delimiter = _guess_delimiter(text)
    try:
        return _read_rows_structured(text, delimiter)
    except csv.Error as e:
        _logger.warning("csv_ingest:structured_failed error=%s; retrying positional", e)
        rows = _read_rows_positional(text, delimiter)
        if not rows:
            raise CsvParseError(f"Failed to parse CSV file: {e}") from e
        return rows


def _cell(row: Row, index: int) -> str:
    return row[index] if 0 <= index < len(row) else ""


def _parse_row(row: Row, schema: ColumnSchema, row_no: int) -> RawTransaction | str:
    """Return a transaction, or the row error message."""

    date_raw = _cell(row, schema.index_of("date"))
    description = _cell(row, schema.index_of("description"))
    amount_raw = _cell(row, schema.index_of("amount"))

    if not date_raw or not description or not amount_raw:
        return f"Row {row_no}: Missing required data (date, description, or amount)"

    amount = parse_amount(amount_raw)
    if amount == 0 and not is_zero_literal(amount_raw):
        return f'Row {row_no}: Could not parse amount "{amount_raw}"'

    balance = None
    if schema.has("balance"):
        balance_raw = _cell(row, schema.index_of("balance"))
        if balance_raw:
            balance = parse_amount(balance_raw)

    tx_type = None
    if schema.has("type"):
        tx_type = classify_type(_cell(row, schema.index_of("type")))

    reference = None
    if schema.has("reference"):
        reference = _cell(row, schema.index_of("reference")) or None

    return RawTransaction(
        date=normalize_date(date_raw),
        description=description,
        amount=amount,
        balance=balance,
        merchant=extract_merchant(description),
        type=tx_type,
        reference=reference,
    )


def parse_csv(text: str, *, filename: str) -> ParsedFileResult:
    """Parse CSV ``text`` into transactions plus row-level errors.

    Raises
    ------
    CsvParseError
        Both parse strategies failed, or the file has no data rows.
    MissingColumnsError
        ``date``, ``description`` or ``amount`` could not be located.
    NoTransactionsError
        Every data row was skipped.
    """

    rows = read_rows(text)
    if len(rows) < 2:
        raise CsvParseError("No data found in CSV file", filename=filename)

    headers, data = rows[0], rows[1:]
    schema = detect_schema(headers)
    if schema.missing_required:
        raise MissingColumnsError(headers, missing=schema.missing_required, filename=filename)
    _logger.debug(
        "csv_ingest:schema file=%s bank=%s positions=%s", filename, schema.bank, dict(schema.positions)
    )

    transactions: list[RawTransaction] = []
    errors: list[str] = []
    for index, row in enumerate(data):
        parsed = _parse_row(row, schema, index + 2)
        if isinstance(parsed, str):
            errors.append(parsed)
        else:
            transactions.append(parsed)

    if not transactions:
        raise NoTransactionsError("No valid transactions found in the file", filename=filename)

    _logger.info(
        "csv_ingest:done file=%s rows=%d errors=%d", filename, len(transactions), len(errors)
    )
    return build_parsed_result(transactions, errors, filename=filename)


__all__ = ["read_rows", "parse_csv"]
