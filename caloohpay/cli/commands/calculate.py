"""Calculate on-call payments command."""

import datetime as dt
import logging
import os
import shutil
import sys
from pathlib import Path
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import click
import requests
from pydantic import ValidationError

from caloohpay.aggregators.on_call_user_aggregator import (
    extract_on_call_users_from_final_schedule,
)
from caloohpay.calculators.payment_calculator import (
    get_auditable_on_call_payment_records,
)
from caloohpay.cli.error_handlers import (
    ConfigurationError,
    handle_cli_error,
    with_error_handling,
)
from caloohpay.cli.utils.formatters import (
    format_error,
    format_info,
    format_success,
    format_table,
)
from caloohpay.config.logging_config import LoggingConfig, configure_logging
from caloohpay.config.settings import get_config
from caloohpay.services.pagerduty_service import (
    PagerDutyService,
    ScheduleResponseError,
)
from caloohpay.services.retry_handler import RetryExhaustedException, RetryHandler
from caloohpay.utils.logging_utils import log_context
from caloohpay.writers.payment_report_writer import (
    REPORT_COLUMNS,
    build_payment_report,
    format_report_rows,
    write_payment_report,
)

logger = logging.getLogger(__name__)

LOCALTIME_PATH = Path("/etc/localtime")

# Failures that only affect the rota being fetched; the others still run
ROTA_ERRORS = (
    requests.HTTPError,
    requests.ConnectionError,
    requests.Timeout,
    RetryExhaustedException,
    ScheduleResponseError,
)


def parse_rota_ids(rota_ids: str) -> List[str]:
    """Split a comma-separated list of rota ids, dropping blanks.

    Example:
        >>> parse_rota_ids("PQRSTUV, PSTUVQR,,")
        ['PQRSTUV', 'PSTUVQR']
    """
    return [rota_id.strip() for rota_id in rota_ids.split(",") if rota_id.strip()]


def resolve_time_zone(time_zone_id: Optional[str]) -> dt.tzinfo:
    """Return the tzinfo for an IANA zone id, or the local zone if None.

    Raises:
        ValueError: If the zone id is unknown
    """
    if time_zone_id is None:
        return dt.datetime.now().astimezone().tzinfo  # type: ignore[return-value]

    try:
        return ZoneInfo(time_zone_id)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown time zone: {time_zone_id}") from e


def _is_known_zone(name: str) -> bool:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def local_time_zone_id() -> Optional[str]:
    """Return the IANA name of the machine's time zone, if it can be found.

    TZ is checked first, then the target of the /etc/localtime symlink.
    Returns None when neither names a known zone.
    """
    candidates = [os.environ.get("TZ", "").lstrip(":")]
    if LOCALTIME_PATH.is_symlink():
        target = str(LOCALTIME_PATH.resolve())
        if "zoneinfo/" in target:
            candidates.append(target.split("zoneinfo/", 1)[1])

    for candidate in candidates:
        if candidate and _is_known_zone(candidate):
            return candidate
    return None


def _localize(naive: dt.datetime, tz: dt.tzinfo) -> dt.datetime:
    if isinstance(tz, ZoneInfo):
        return naive.replace(tzinfo=tz)
    # Fixed-offset local zone: let astimezone() pick the offset in effect
    return naive.astimezone()


def first_day_of_previous_month(today: dt.date, tz: dt.tzinfo) -> dt.datetime:
    """Start of the default reporting period: 00:00 on the 1st of last month.

    Example:
        >>> first_day_of_previous_month(dt.date(2024, 1, 15), ZoneInfo("UTC"))
        datetime.datetime(2023, 12, 1, 0, 0, tzinfo=zoneinfo.ZoneInfo(key='UTC'))
    """
    if today.month == 1:
        year, month = today.year - 1, 12
    else:
        year, month = today.year, today.month - 1
    return _localize(dt.datetime(year, month, 1), tz)


def first_day_of_current_month(today: dt.date, tz: dt.tzinfo) -> dt.datetime:
    """End of the default reporting period: 10:00 on the 1st of this month."""
    return _localize(dt.datetime(today.year, today.month, 1, 10), tz)


def _parse_iso_datetime(ctx, param, value: Optional[str]) -> Optional[dt.datetime]:
    """Click callback validating an ISO 8601 --since/--until value."""
    if value is None:
        return None
    try:
        return dt.datetime.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"Invalid date format for {param.name}: {value}")


def _validate_time_zone(ctx, param, value: Optional[str]) -> Optional[str]:
    """Click callback validating --time-zone-id."""
    if value is None:
        return None
    try:
        resolve_time_zone(value)
    except ValueError as e:
        raise click.BadParameter(str(e))
    return value


@click.command(name="calculate")
@click.option(
    "--rota-ids",
    "-r",
    required=True,
    type=str,
    help=(
        "1 schedule id or multiple schedule ids separated by comma, "
        "e.g. R1234567,R7654321"
    ),
)
@click.option(
    "--time-zone-id",
    "-t",
    type=str,
    default=None,
    callback=_validate_time_zone,
    help="IANA time zone id of the schedule (default: local time zone)",
)
@click.option(
    "--since",
    "-s",
    type=str,
    default=None,
    callback=_parse_iso_datetime,
    help=(
        "Start of the schedule period (inclusive) in ISO 8601 format, "
        "e.g. 2024-08-01T00:00:00+01:00 "
        "(default: the first day of the previous month)"
    ),
)
@click.option(
    "--until",
    "-u",
    type=str,
    default=None,
    callback=_parse_iso_datetime,
    help=(
        "End of the schedule period in ISO 8601 format "
        "(default: the first day of this month, 10am)"
    ),
)
@click.option(
    "--key",
    "-k",
    type=str,
    default=None,
    help="PagerDuty API token, overrides the API_TOKEN environment variable",
)
@click.option(
    "--output-file",
    "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path of a CSV file to write the on-call payments table to",
)
@click.option("--debug", is_flag=True, help="Show debug logs and full stack traces")
def calculate_payments(
    rota_ids: str,
    time_zone_id: Optional[str],
    since: Optional[dt.datetime],
    until: Optional[dt.datetime],
    key: Optional[str],
    output_file: Optional[str],
    debug: bool,
):
    """Calculate out-of-hours on-call payments for PagerDuty rotas.

    OOH days Monday to Thursday are paid at the weekday rate and Friday to
    Sunday at the weekend rate.

    A rota that cannot be fetched is reported and skipped. The command then
    exits with the code of the first failure.

    Example:
        caloohpay calculate -r "PQRSTUV,PSTUVQR"
        caloohpay calculate -r PQRSTUV \
            -s 2024-08-01T00:00:00+01:00 -u 2024-09-01T10:00:00+01:00
    """
    with with_error_handling(debug):
        try:
            settings = get_config()
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration: {e}",
                recovery_hint="Check the values in your environment or .env file",
            ) from e

        try:
            logging_config = LoggingConfig(
                level="DEBUG" if debug or settings.debug else settings.log_level
            )
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid logging configuration: {e}",
                recovery_hint="Check the LOG_* values in your environment",
            ) from e
        configure_logging(logging_config)

        api_token = key or settings.api_token
        if not api_token:
            raise ConfigurationError(
                "API_TOKEN not defined",
                recovery_hint=(
                    "Set API_TOKEN in your environment or .env file, or pass --key. "
                    "Create a token under My Profile -> User Settings -> API Access"
                ),
            )

        time_zone_id = time_zone_id or local_time_zone_id()
        tz = resolve_time_zone(time_zone_id)
        today = dt.datetime.now(tz).date()
        since = since or first_day_of_previous_month(today, tz)
        until = until or first_day_of_current_month(today, tz)

        service = PagerDutyService(
            api_token=api_token,
            base_url=settings.pagerduty_api_url,
            timeout=settings.request_timeout,
            retry_handler=RetryHandler(
                max_retries=settings.max_retries, base_delay=settings.retry_delay
            ),
        )
        rates = settings.get_payment_rates()
        separator = "-" * shutil.get_terminal_size((80, 20)).columns

        click.echo(
            format_info(
                f"Calculating on-call payments from {since.isoformat()} "
                f"to {until.isoformat()}"
            )
        )

        reports = []
        exit_codes = []
        for rota_id in parse_rota_ids(rota_ids):
            click.echo(separator)
            try:
                with log_context(rota_id=rota_id):
                    schedule = service.get_schedule(
                        rota_id, since=since, until=until, time_zone=time_zone_id
                    )
                    on_call_users = extract_on_call_users_from_final_schedule(
                        schedule.final_schedule
                    )
                    records = get_auditable_on_call_payment_records(
                        on_call_users.values(), rates=rates
                    )
                    report = build_payment_report(
                        records, schedule_name=schedule.name
                    )
            except ROTA_ERRORS as e:
                logger.error(f"Failed to calculate payments for rota {rota_id}: {e}")
                click.echo(format_error(f"Skipping rota {rota_id}"), err=True)
                exit_codes.append(handle_cli_error(e, debug))
                continue

            click.echo(f"Schedule name: {schedule.name}")
            click.echo(f"Schedule URL: {schedule.html_url}")
            click.echo(format_table(REPORT_COLUMNS, format_report_rows(report)))
            reports.append(report)

        if output_file and reports:
            written = write_payment_report(reports, output_file)
            click.echo(format_success(f"On-call payments written to {written}"))

        if exit_codes:
            click.echo(
                format_error(
                    f"{len(exit_codes)} of {len(exit_codes) + len(reports)} "
                    "rotas failed"
                ),
                err=True,
            )
            # The first failure decides the exit code
            sys.exit(exit_codes[0])
