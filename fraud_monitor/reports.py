"""Fixed-width plain-text fraud reports, one line per finding.

Every column is left-aligned in a 32-character cell. Amounts print as
``$1234.56``.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal
from os import PathLike
from pathlib import Path

from .findings import AmountFinding, FindingSink, GeographicFinding
from .logging_setup import get_logger

_logger = get_logger("fraud_monitor.reports")

FIELD_WIDTH = 32

AMOUNT_REPORT_COLUMNS: tuple[str, ...] = (
    "Name",
    "Account Number",
    "Transaction Number",
    "Merchant",
    "Transaction Amount",
)
GEOGRAPHIC_REPORT_COLUMNS: tuple[str, ...] = (
    "Name",
    "Account Number",
    "Transaction Number",
    "Expected Location",
    "Actual Location",
)


def _fmt_amount(d: Decimal) -> str:
    return f"${d.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP):.2f}"


def _line(cells: Sequence[str | None]) -> str:
    return "".join(f"{c or '':<{FIELD_WIDTH}}" for c in cells).rstrip()


def render_amount_report(findings: Iterable[AmountFinding]) -> str:
    lines = [_line(AMOUNT_REPORT_COLUMNS)]
    for f in findings:
        lines.append(
            _line(
                (
                    f.name,
                    f.account_number,
                    f.transaction_number,
                    f.merchant_name,
                    _fmt_amount(f.amount),
                )
            )
        )
    return "\n".join(lines) + "\n"


def render_geographic_report(findings: Iterable[GeographicFinding]) -> str:
    lines = [_line(GEOGRAPHIC_REPORT_COLUMNS)]
    for f in findings:
        lines.append(
            _line(
                (
                    f.name,
                    f.account_number,
                    f.transaction_number,
                    f.expected_location,
                    f.actual_location,
                )
            )
        )
    return "\n".join(lines) + "\n"


def write_reports(
    sink: FindingSink,
    amount_path: str | PathLike[str],
    geographic_path: str | PathLike[str],
) -> None:
    """Write both reports, or neither.

    Both are rendered in memory and written to temporary siblings first; the
    final paths are only replaced once both writes have succeeded.
    """

    targets = [
        (Path(amount_path), render_amount_report(sink.amount)),
        (Path(geographic_path), render_geographic_report(sink.geographic)),
    ]
    staged: list[tuple[Path, Path]] = []
    try:
        for final, text in targets:
            tmp = final.with_name(final.name + ".tmp")
            tmp.write_text(text, encoding="utf-8")
            staged.append((tmp, final))
    except OSError:
        for tmp, _ in staged:
            tmp.unlink(missing_ok=True)
        raise
    for tmp, final in staged:
        os.replace(tmp, final)
    _logger.info(
        "wrote reports: %s (%d findings), %s (%d findings)",
        amount_path,
        len(sink.amount),
        geographic_path,
        len(sink.geographic),
    )


__all__ = [
    "AMOUNT_REPORT_COLUMNS",
    "FIELD_WIDTH",
    "GEOGRAPHIC_REPORT_COLUMNS",
    "render_amount_report",
    "render_geographic_report",
    "write_reports",
]
