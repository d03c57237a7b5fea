"""Payment report writer for auditable on-call payment records.

This module turns auditable payment records into a pandas DataFrame with one
row per on-call user, and writes the combined report of one or more
schedules to a CSV file.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from caloohpay.calculators.payment_calculator import OnCallCompensation

logger = logging.getLogger(__name__)

REPORT_COLUMNS = ["User", "TotalComp", "Mon-Thu", "Fri-Sun"]


def build_payment_report(
    records: Dict[str, OnCallCompensation], schedule_name: Optional[str] = None
) -> pd.DataFrame:
    """Build a payment report DataFrame from auditable payment records.

    Args:
        records: Auditable payment records keyed by user id
        schedule_name: Optional schedule name, added as a leading "Schedule" column

    Returns:
        DataFrame with columns User, TotalComp, Mon-Thu, Fri-Sun, one row per
        user in record order

    Example:
        >>> from caloohpay.calculators.payment_calculator import (
        ...     get_auditable_on_call_payment_records,
        ... )
        >>> from caloohpay.models.on_call_user import OnCallUser
        >>> records = get_auditable_on_call_payment_records(
        ...     [OnCallUser(id="1PF7DNAV", name="YW Oncall")]
        ... )
        >>> report = build_payment_report(records)
        >>> report.columns.tolist()
        ['User', 'TotalComp', 'Mon-Thu', 'Fri-Sun']
        >>> report.loc[0, "TotalComp"]
        Decimal('0')
    """
    rows = [
        {
            "User": record.on_call_user.name,
            "TotalComp": record.total_compensation,
            "Mon-Thu": record.total_ooh_weekdays,
            "Fri-Sun": record.total_ooh_weekend_days,
        }
        for record in records.values()
    ]
    df = pd.DataFrame(rows, columns=REPORT_COLUMNS)

    if schedule_name is not None:
        df.insert(0, "Schedule", schedule_name)

    return df


def format_report_rows(df: pd.DataFrame) -> List[List[str]]:
    """Convert a payment report DataFrame into printable table rows.

    Args:
        df: DataFrame built by build_payment_report

    Returns:
        List of rows (User, TotalComp, Mon-Thu, Fri-Sun) as strings
    """
    return [
        [str(row[column]) for column in REPORT_COLUMNS] for _, row in df.iterrows()
    ]


def write_payment_report(
    reports: List[pd.DataFrame], output_file: Union[str, Path]
) -> Path:
    """Write one or more payment reports to a single CSV file.

    Args:
        reports: Report DataFrames, typically one per schedule
        output_file: Destination path; parent directories are created

    Returns:
        Path of the written file
    """
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if reports:
        combined = pd.concat(reports, ignore_index=True)
    else:
        combined = pd.DataFrame(columns=["Schedule"] + REPORT_COLUMNS)

    combined.to_csv(output_path, index=False)
    logger.info(f"Wrote {len(combined)} payment row(s) to {output_path}")

    return output_path
