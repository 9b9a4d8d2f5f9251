import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from statement_ingest.cli import app
from tests.helpers.db import bootstrap_sqlite_db, count_transactions, load_transactions

runner = CliRunner()

CSV_TEXT = (
    "Date,Description,Amount\n"
    "01/15/2024,STARBUCKS 123,-4.50\n"
    "01/20/2024,PAYROLL ACME,3000.00\n"
    "02/02/2024,SHELL OIL,-40.00\n"
    "02/03/2024,BROKEN,??\n"
)


@pytest.fixture
def csv_file(tmp_path: Path) -> Path:
    p = tmp_path / "bank.csv"
    p.write_text(CSV_TEXT, encoding="utf-8")
    return p


def test_ingest_prints_outcomes_and_summary(csv_file):
    result = runner.invoke(app, ["ingest", str(csv_file), "--no-ai"])

    assert result.exit_code == 0, result.output
    assert "[processed] bank.csv: 3 transactions, 1 row errors" in result.output
    assert 'Row 5: Could not parse amount "??"' in result.output
    assert "Total: 1 files, 3 transactions, amount 3,044.50, dates 2024-01-15..2024-02-02" in (
        result.output
    )
    assert "Food & Dining=1" in result.output


def test_ingest_json_report(csv_file):
    result = runner.invoke(app, ["ingest", str(csv_file), "--no-ai", "--json"])

    assert result.exit_code == 0
    report = json.loads(result.stdout)
    assert report["files"][0]["status"] == "processed"
    assert report["date_range"] == {"start": "2024-01-15", "end": "2024-02-02"}
    assert [t["category"] for t in report["transactions"]] == [
        "Food & Dining",
        "Salary",
        "Transport",
    ]
    assert report["transactions"][0]["category_source"] == "rules"


def test_ingest_exits_nonzero_when_every_file_fails(tmp_path: Path):
    notes = tmp_path / "notes.txt"
    notes.write_text("hello", encoding="utf-8")

    result = runner.invoke(app, ["ingest", str(notes), "--no-ai"])

    assert result.exit_code == 1
    assert "[failed] notes.txt: Unsupported file type: txt" in result.output


def test_ingest_missing_file_is_an_error(tmp_path: Path):
    result = runner.invoke(app, ["ingest", str(tmp_path / "nope.csv"), "--no-ai"])
    assert result.exit_code == 1


def test_ingest_persists_with_database_url(csv_file, tmp_path: Path):
    url = bootstrap_sqlite_db(tmp_path / "cli.db")

    result = runner.invoke(app, ["ingest", str(csv_file), "--no-ai", "--database-url", url])

    assert result.exit_code == 0, result.output
    assert count_transactions(url) == 3


def test_ingest_reads_database_url_from_env(csv_file, tmp_path: Path, monkeypatch):
    url = bootstrap_sqlite_db(tmp_path / "env.db")
    monkeypatch.setenv("DATABASE_URL", url)

    result = runner.invoke(app, ["ingest", str(csv_file), "--no-ai"])

    assert result.exit_code == 0, result.output
    assert count_transactions(url) == 3


def test_invalid_settings_are_reported(csv_file, monkeypatch):
    monkeypatch.setenv("STATEMENT_INGEST_MAX_FILE_MB", "lots")
    result = runner.invoke(app, ["ingest", str(csv_file), "--no-ai"])
    assert result.exit_code == 1


def test_suggest_command():
    result = runner.invoke(app, ["suggest", "SHELL GAS STATION"])

    assert result.exit_code == 0
    assert "Rule match: Transport (0.80)" in result.output
    assert "Transport / Gas & Fuel (0.90)" in result.output


def test_report_command(csv_file):
    result = runner.invoke(app, ["report", str(csv_file), "--no-ai"])

    assert result.exit_code == 0, result.output
    assert "2024-01" in result.output and "2024-02" in result.output
    assert "Monthly:" in result.output
    assert "Budget recommendations (monthly):" in result.output


def test_review_without_low_confidence_items_saves(csv_file, tmp_path: Path):
    url = bootstrap_sqlite_db(tmp_path / "review.db")

    result = runner.invoke(
        app,
        ["review", str(csv_file), "--no-ai", "--threshold", "0", "--database-url", url],
    )

    assert result.exit_code == 0, result.output
    assert "Saved 3 transactions" in result.output
    assert {r.file_source for r in load_transactions(url)} == {"bank.csv"}


def test_init_db_command(tmp_path: Path):
    url = f"sqlite+pysqlite:///{tmp_path / 'fresh.db'}"

    first = runner.invoke(app, ["init-db", "--database-url", url])
    second = runner.invoke(app, ["init-db", "--database-url", url])

    assert first.exit_code == 0, first.output
    assert "Database ready (20 categories seeded)" in first.output
    assert "Database ready (0 categories seeded)" in second.output


def test_init_db_requires_url():
    result = runner.invoke(app, ["init-db"])
    assert result.exit_code == 1
