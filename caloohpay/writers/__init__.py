"""Writers for on-call payment reports."""

from caloohpay.writers.payment_report_writer import (
    REPORT_COLUMNS,
    build_payment_report,
    format_report_rows,
    write_payment_report,
)

__all__ = [
    "REPORT_COLUMNS",
    "build_payment_report",
    "format_report_rows",
    "write_payment_report",
]
