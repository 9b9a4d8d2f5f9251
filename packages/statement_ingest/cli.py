# ruff: noqa: I001
"""CLI for the ``statement_ingest`` package.

This module exposes callable command handlers (``cmd_ingest``, ``cmd_report``,
...) and a Typer-based console interface over them. Environment variables
(``OPENAI_API_KEY``, ``DATABASE_URL``, ``STATEMENT_INGEST_*``) are loaded from
a local ``.env`` using ``python-dotenv`` in the root callback. Business logic
lives in :mod:`statement_ingest.orchestrator` and related modules.
"""

from __future__ import annotations

import asyncio
import os
import sys
from collections.abc import Sequence
from pathlib import Path

import typer
from dotenv import load_dotenv

from .logging_setup import configure_logging
from .models import BatchResult, CategorizedTransaction, FileStatus, UploadedFile


# ---- Small module-level helpers used by CLI commands -------------------------


def _err(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)


def _read_uploads(paths: Sequence[Path]) -> list[UploadedFile]:
    """Read files into memory; raises ``OSError`` for unreadable paths."""

    return [UploadedFile(filename=p.name, content=p.read_bytes()) for p in paths]


def _run_batch(
    paths: Sequence[Path],
    *,
    no_ai: bool,
    database_url: str | None,
    persist: bool,
) -> BatchResult:
    from .classifier import build_classifier
    from .config import load_settings
    from .orchestrator import ingest_batch

    settings = load_settings()
    classifier = None if no_ai else build_classifier(settings)
    sink = None
    url = database_url or settings.database_url
    if persist and url:
        from .persistence import SqlTransactionSink

        sink = SqlTransactionSink(url)
    uploads = _read_uploads(paths)
    return asyncio.run(
        ingest_batch(uploads, classifier=classifier, sink=sink, settings=settings)
    )


def _load_batch(
    paths: Sequence[Path],
    *,
    no_ai: bool,
    database_url: str | None = None,
    persist: bool = True,
) -> BatchResult | None:
    """Run a batch, printing an error and returning ``None`` on setup failures."""

    try:
        return _run_batch(paths, no_ai=no_ai, database_url=database_url, persist=persist)
    except FileNotFoundError as e:
        _err(f"File not found: {e.filename}")
    except PermissionError as e:
        _err(f"Permission denied: {e.filename}")
    except ValueError as e:
        _err(str(e))
    return None


def _print_outcomes(result: BatchResult) -> None:
    for f in result.files:
        if f.status is FileStatus.FAILED:
            print(f"[{f.status}] {f.filename}: {f.error}")
            continue
        print(
            f"[{f.status}] {f.filename}: {f.transaction_count} transactions, "
            f"{len(f.row_errors)} row errors"
        )
        for row_error in f.row_errors:
            print(f"    {row_error}")
        if f.error:
            print(f"    {f.error}")


def _print_summary(result: BatchResult) -> None:
    span = (
        f"{result.date_range.start}..{result.date_range.end}"
        if result.date_range is not None
        else "-"
    )
    print(
        f"Total: {len(result.files)} files, {len(result.transactions)} transactions, "
        f"amount {result.total_amount:,.2f}, dates {span}"
    )
    if result.category_counts:
        counts = ", ".join(f"{k}={v}" for k, v in sorted(result.category_counts.items()))
        print(f"Categories: {counts}")


def _all_failed(result: BatchResult) -> bool:
    return all(f.status is FileStatus.FAILED for f in result.files)


# ---- Command handlers --------------------------------------------------------


def cmd_ingest(
    paths: Sequence[Path],
    *,
    no_ai: bool = False,
    database_url: str | None = None,
    as_json: bool = False,
) -> int:
    """Ingest files and print per-file outcomes plus a batch summary.

    Returns ``1`` when every file failed, ``0`` otherwise.
    """

    result = _load_batch(paths, no_ai=no_ai, database_url=database_url)
    if result is None:
        return 1

    if as_json:
        from .models import BatchReport

        print(BatchReport.from_result(result).model_dump_json(indent=2))
    else:
        _print_outcomes(result)
        _print_summary(result)
    return 1 if _all_failed(result) else 0


def cmd_suggest(description: str) -> int:
    from .rules import categorize_with_rules, suggest_categories
    from .term_ui import format_suggestions

    best = categorize_with_rules(description)
    print(f"Rule match: {best.category} ({best.confidence:.2f})")
    print("Suggestions:")
    print(format_suggestions(suggest_categories(description)))
    return 0


def cmd_report(paths: Sequence[Path], *, no_ai: bool = False) -> int:
    """Ingest files (no persistence) and print spending trends and budget advice."""

    from .reports import category_spending, monthly_spending, recommend_budgets
    from .reports import render_trends_table

    result = _load_batch(paths, no_ai=no_ai, persist=False)
    if result is None:
        return 1
    _print_outcomes(result)
    if not result.transactions:
        return 1

    txs = list(result.transactions)
    print()
    print(render_trends_table(txs))

    monthly = monthly_spending(txs)
    print()
    print("Monthly:")
    for m in monthly:
        print(
            f"  {m.period}  income {m.total_income:,.2f}  expenses {m.total_expenses:,.2f}  "
            f"net {m.net_income:,.2f}  ({m.transaction_count} tx)"
        )

    recs = recommend_budgets(monthly, category_spending(txs))
    if recs:
        print()
        print("Budget recommendations (monthly):")
        for r in recs:
            print(
                f"  {r.category}: current {r.current_spending:,.2f} -> {r.recommended_budget} "
                f"[{r.risk_level} risk, {r.confidence} confidence, {r.trend}]"
            )
            print(f"    {r.reasoning}")
    return 0


def _split_by_file(result: BatchResult) -> list[tuple[str, list[CategorizedTransaction]]]:
    """Re-slice the flat transaction tuple into per-file chunks (files keep input order)."""

    out: list[tuple[str, list[CategorizedTransaction]]] = []
    pos = 0
    for f in result.files:
        if f.transaction_count:
            out.append((f.filename, list(result.transactions[pos : pos + f.transaction_count])))
            pos += f.transaction_count
    return out


def cmd_review(
    paths: Sequence[Path],
    *,
    no_ai: bool = False,
    threshold: float = 0.5,
    database_url: str | None = None,
) -> int:
    """Ingest files, review low-confidence categories interactively, optionally save."""

    from .errors import PersistenceError
    from .review import review_categorized

    # Saved after review, not during ingestion.
    result = _load_batch(paths, no_ai=no_ai, persist=False)
    if result is None:
        return 1
    _print_outcomes(result)
    database_url = database_url or os.getenv("DATABASE_URL")

    saved = 0
    try:
        for filename, chunk in _split_by_file(result):
            reviewed = review_categorized(chunk, threshold=threshold)
            for item in reviewed:
                print(f"{item.date}\t{item.amount}\t{item.category}\t{item.category_source}")
            if database_url:
                from .persistence import SqlTransactionSink

                asyncio.run(SqlTransactionSink(database_url).save(reviewed, file_source=filename))
                saved += len(reviewed)
    except (KeyboardInterrupt, EOFError):
        _err("review aborted")
        return 1
    except PersistenceError as e:
        _err(f"persistence failed: {e}")
        return 1
    if database_url:
        print(f"Saved {saved} transactions")
    return 0


def cmd_init_db(database_url: str | None) -> int:
    from .persistence import init_database

    url = database_url or os.getenv("DATABASE_URL")
    if not url:
        _err("DATABASE_URL is not set; pass --database-url")
        return 1
    try:
        added = init_database(url)
    except Exception as e:  # noqa: BLE001 - surface any driver/DDL failure
        _err(f"init-db failed: {e}")
        return 1
    print(f"Database ready ({added} categories seeded)")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Ingest bank statement CSV/PDF files: parse, categorize (OpenAI with keyword "
        "fallback), persist and report. Loads .env from the working directory."
    ),
)

_FILES_ARG = typer.Argument(..., help="CSV or PDF statement files", dir_okay=False)
_NO_AI_OPT = typer.Option(False, "--no-ai", help="Skip the remote classifier; use keyword rules.")
_DB_URL_OPT = typer.Option(None, help="Override DATABASE_URL (falls back to env var).")


def _exit(code: int) -> None:
    if code:
        raise typer.Exit(code)


@app.command("ingest")
def ingest_cmd(
    files: list[Path] = _FILES_ARG,
    no_ai: bool = _NO_AI_OPT,
    database_url: str | None = _DB_URL_OPT,
    as_json: bool = typer.Option(False, "--json", help="Print the batch report as JSON."),
) -> None:
    """Parse, categorize and (with a database URL) persist statement files."""

    _exit(cmd_ingest(files, no_ai=no_ai, database_url=database_url, as_json=as_json))


@app.command("suggest")
def suggest_cmd(description: str = typer.Argument(..., help="Transaction description")) -> None:
    """Show the keyword-rule category and top suggestions for a description."""

    _exit(cmd_suggest(description))


@app.command("report")
def report_cmd(files: list[Path] = _FILES_ARG, no_ai: bool = _NO_AI_OPT) -> None:
    """Print a category x month trends table, monthly totals and budget advice."""

    _exit(cmd_report(files, no_ai=no_ai))


@app.command("review")
def review_cmd(
    files: list[Path] = _FILES_ARG,
    no_ai: bool = _NO_AI_OPT,
    threshold: float = typer.Option(0.5, min=0.0, max=1.0, help="Review items below this confidence."),
    database_url: str | None = _DB_URL_OPT,
) -> None:
    """Interactively override low-confidence categories."""

    _exit(cmd_review(files, no_ai=no_ai, threshold=threshold, database_url=database_url))


@app.command("init-db")
def init_db_cmd(database_url: str | None = _DB_URL_OPT) -> None:
    """Create tables and seed the category catalogue."""

    _exit(cmd_init_db(database_url))


@app.callback(invoke_without_command=True)
def _root(ctx: typer.Context) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    app()
