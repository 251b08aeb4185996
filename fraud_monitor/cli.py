"""CLI for the ``fraud_monitor`` package.

Typer-based console interface. Environment variables (``DATABASE_URL``,
``FRAUD_MONITOR_LOG_LEVEL`` and the rule thresholds) are loaded from a local
``.env`` using ``python-dotenv`` before delegating to :mod:`fraud_monitor.api`.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from pydantic import ValidationError

from .errors import FraudMonitorError
from .logging_setup import configure_logging, get_logger
from .rules import FraudRuleConfig

_logger = get_logger("fraud_monitor.cli")

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Load account and transaction feeds, then flag amount anomalies and "
        "geographic mismatches. Loads DATABASE_URL from a local .env."
    ),
)

DatabaseUrlOption = Annotated[
    str | None,
    typer.Option("--database-url", help="Override DATABASE_URL (falls back to env var)."),
]
AccountsArg = Annotated[
    Path, typer.Argument(exists=True, dir_okay=False, readable=True, help="Account feed file.")
]
TransactionsArg = Annotated[
    Path, typer.Argument(exists=True, dir_okay=False, readable=True, help="Transaction feed file.")
]
AmountReportOption = Annotated[
    Path, typer.Option("--amount-report", help="Output path for the amount fraud report.")
]
GeographicReportOption = Annotated[
    Path, typer.Option("--geographic-report", help="Output path for the geographic fraud report.")
]


def _fail(message: str) -> typer.Exit:
    print(f"Error: {message}", file=sys.stderr)
    return typer.Exit(code=1)


def _rule_config(
    min_threshold: str | None, multiplier: str | None
) -> FraudRuleConfig:
    base = FraudRuleConfig.from_env()
    updates: dict[str, str] = {}
    if min_threshold is not None:
        updates["min_transaction_threshold"] = min_threshold
    if multiplier is not None:
        updates["threshold_multiplier"] = multiplier
    if not updates:
        return base
    return FraudRuleConfig.model_validate(base.model_dump() | updates)


@app.callback()
def _root(
    log_level: Annotated[
        str | None, typer.Option("--log-level", help="Logging level (default: env or INFO).")
    ] = None,
) -> None:
    load_dotenv(override=False)
    configure_logging(log_level)


@app.command("ingest")
def ingest_cmd(
    accounts: AccountsArg,
    transactions: TransactionsArg,
    database_url: DatabaseUrlOption = None,
) -> None:
    """Normalize both feeds and store them, replacing any previous load."""

    from .api import ingest_feeds
    from .persistence import ensure_schema, storage_scope

    try:
        ensure_schema(database_url=database_url)
        with storage_scope(database_url=database_url) as session:
            summary = ingest_feeds(session, accounts, transactions)
    except (FraudMonitorError, RuntimeError) as e:
        raise _fail(f"ingest failed: {e}") from e
    print(f"Ingested {summary.accounts} accounts and {summary.transactions} transactions.")


@app.command("check")
def check_cmd(
    amount_report: AmountReportOption = Path("amount_fraud.txt"),
    geographic_report: GeographicReportOption = Path("state_fraud.txt"),
    database_url: DatabaseUrlOption = None,
    min_threshold: Annotated[
        str | None, typer.Option("--min-threshold", help="Rule 1 minimum charge amount.")
    ] = None,
    multiplier: Annotated[
        str | None, typer.Option("--multiplier", help="Rule 1 EMA multiplier.")
    ] = None,
) -> None:
    """Run both fraud rules over the stored feeds and write the reports."""

    from .api import run_fraud_check
    from .persistence import storage_scope
    from .reports import write_reports

    try:
        config = _rule_config(min_threshold, multiplier)
    except ValidationError as e:
        raise _fail(f"invalid rule configuration: {e}") from e

    try:
        with storage_scope(database_url=database_url) as session:
            sink = run_fraud_check(session, config)
        write_reports(sink, amount_report, geographic_report)
    except (FraudMonitorError, RuntimeError, OSError) as e:
        raise _fail(f"fraud check failed: {e}") from e
    print(
        f"{len(sink.amount)} amount findings -> {amount_report}; "
        f"{len(sink.geographic)} geographic findings -> {geographic_report}"
    )


@app.command("run")
def run_cmd(
    accounts: AccountsArg,
    transactions: TransactionsArg,
    amount_report: AmountReportOption = Path("amount_fraud.txt"),
    geographic_report: GeographicReportOption = Path("state_fraud.txt"),
    database_url: DatabaseUrlOption = None,
    min_threshold: Annotated[
        str | None, typer.Option("--min-threshold", help="Rule 1 minimum charge amount.")
    ] = None,
    multiplier: Annotated[
        str | None, typer.Option("--multiplier", help="Rule 1 EMA multiplier.")
    ] = None,
) -> None:
    """Ingest both feeds and run the fraud check in one go."""

    from .api import run

    try:
        config = _rule_config(min_threshold, multiplier)
    except ValidationError as e:
        raise _fail(f"invalid rule configuration: {e}") from e

    try:
        sink = run(
            accounts,
            transactions,
            amount_report,
            geographic_report,
            database_url=database_url,
            config=config,
        )
    except (FraudMonitorError, RuntimeError, OSError) as e:
        _logger.error("run aborted: %s", e)
        raise _fail(str(e)) from e
    print(
        f"{len(sink.amount)} amount findings -> {amount_report}; "
        f"{len(sink.geographic)} geographic findings -> {geographic_report}"
    )


@app.command("seed-regions")
def seed_regions_cmd(database_url: DatabaseUrlOption = None) -> None:
    """Store the built-in region code table in ``fm_state_names``."""

    from .persistence import ensure_schema, seed_state_names, storage_scope
    from .regions import RegionTable

    try:
        ensure_schema(database_url=database_url)
        with storage_scope(database_url=database_url) as session:
            n = seed_state_names(session, RegionTable.default())
    except (FraudMonitorError, RuntimeError) as e:
        raise _fail(f"seeding regions failed: {e}") from e
    print(f"Stored {n} region names.")


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
