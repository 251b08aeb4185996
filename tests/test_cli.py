from __future__ import annotations

from typer.testing import CliRunner

from fraud_monitor.cli import app

from tests.helpers.feeds import ACCOUNTS_CSV, write_feeds

runner = CliRunner()


def test_run_command_writes_reports(tmp_path, database_url):
    acct_path, txn_path = write_feeds(tmp_path / "in")
    amount_path = tmp_path / "amount.txt"
    geo_path = tmp_path / "geo.txt"

    result = runner.invoke(
        app,
        [
            "run",
            str(acct_path),
            str(txn_path),
            "--amount-report",
            str(amount_path),
            "--geographic-report",
            str(geo_path),
            "--database-url",
            database_url,
        ],
    )

    assert result.exit_code == 0, result.output
    assert "1 amount findings" in result.output
    assert "1 geographic findings" in result.output
    assert "T0002" in amount_path.read_text(encoding="utf-8")
    assert "New York" in geo_path.read_text(encoding="utf-8")


def test_ingest_then_check(tmp_path, database_url):
    acct_path, txn_path = write_feeds(tmp_path / "in")

    ingest = runner.invoke(
        app, ["ingest", str(acct_path), str(txn_path), "--database-url", database_url]
    )
    assert ingest.exit_code == 0, ingest.output
    assert "Ingested 2 accounts and 4 transactions." in ingest.output

    amount_path = tmp_path / "amount.txt"
    check = runner.invoke(
        app,
        [
            "check",
            "--amount-report",
            str(amount_path),
            "--geographic-report",
            str(tmp_path / "geo.txt"),
            "--database-url",
            database_url,
            "--multiplier",
            "50",
        ],
    )
    assert check.exit_code == 0, check.output
    # 301 is not above 50 * 10, so only the geographic finding remains.
    assert "0 amount findings" in check.output
    assert len(amount_path.read_text(encoding="utf-8").splitlines()) == 1


def test_run_command_reports_parse_errors(tmp_path, database_url):
    acct_path, txn_path = write_feeds(
        tmp_path / "in", accounts=ACCOUNTS_CSV.replace("07/04/1985", "1985-07-04")
    )
    amount_path = tmp_path / "amount.txt"

    result = runner.invoke(
        app,
        [
            "run",
            str(acct_path),
            str(txn_path),
            "--amount-report",
            str(amount_path),
            "--geographic-report",
            str(tmp_path / "geo.txt"),
            "--database-url",
            database_url,
        ],
    )

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "column=dob" in result.output
    assert not amount_path.exists()


def test_invalid_rule_configuration(tmp_path, database_url):
    result = runner.invoke(
        app, ["check", "--database-url", database_url, "--min-threshold", "0"]
    )
    assert result.exit_code == 1
    assert "invalid rule configuration" in result.output


def test_seed_regions(database_url):
    result = runner.invoke(app, ["seed-regions", "--database-url", database_url])
    assert result.exit_code == 0, result.output
    assert "Stored 56 region names." in result.output
