"""Unit tests for the calculate command."""

import datetime as dt
import logging
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pandas as pd
import pytest
import requests
from click.testing import CliRunner

from caloohpay.cli.commands.calculate import (
    calculate_payments,
    first_day_of_current_month,
    first_day_of_previous_month,
    local_time_zone_id,
    parse_rota_ids,
    resolve_time_zone,
)
from caloohpay.config.logging_config import JSONFormatter, reset_logging
from caloohpay.models.schedule import Schedule
from caloohpay.services.pagerduty_service import ScheduleResponseError

SINCE = "2024-08-01T00:00:00+01:00"
UNTIL = "2024-09-01T10:00:00+01:00"


class TestParseRotaIds:
    """Test splitting of --rota-ids."""

    def test_single_id(self):
        """Test a single rota id."""
        assert parse_rota_ids("PQRSTUV") == ["PQRSTUV"]

    def test_multiple_ids_with_spaces_and_blanks(self):
        """Test whitespace and empty items are dropped."""
        assert parse_rota_ids(" PQRSTUV , PSTUVQR,,") == ["PQRSTUV", "PSTUVQR"]


class TestDefaultPeriod:
    """Test the default reporting period."""

    def test_resolve_named_time_zone(self):
        """Test an IANA zone id resolves to a ZoneInfo."""
        assert resolve_time_zone("Europe/London") == ZoneInfo("Europe/London")

    def test_resolve_unknown_time_zone(self):
        """Test unknown zone ids raise ValueError."""
        with pytest.raises(ValueError, match="Unknown time zone: Mars/Olympus"):
            resolve_time_zone("Mars/Olympus")

    def test_resolve_local_time_zone(self):
        """Test no zone id resolves to the local zone."""
        assert resolve_time_zone(None) is not None

    def test_first_day_of_previous_month(self):
        """Test the period starts at midnight on the 1st of last month."""
        london = ZoneInfo("Europe/London")

        start = first_day_of_previous_month(dt.date(2024, 9, 15), london)

        assert start == dt.datetime(2024, 8, 1, tzinfo=london)
        assert start.utcoffset() == dt.timedelta(hours=1)

    def test_first_day_of_previous_month_in_january(self):
        """Test January rolls back to December of the previous year."""
        utc = ZoneInfo("UTC")

        start = first_day_of_previous_month(dt.date(2024, 1, 31), utc)

        assert start == dt.datetime(2023, 12, 1, tzinfo=utc)

    def test_first_day_of_current_month(self):
        """Test the period ends at 10am on the 1st of this month."""
        london = ZoneInfo("Europe/London")

        end = first_day_of_current_month(dt.date(2024, 9, 15), london)

        assert end == dt.datetime(2024, 9, 1, 10, tzinfo=london)

    def test_local_time_zone_is_aware(self):
        """Test defaults in the local zone are timezone-aware."""
        local = resolve_time_zone(None)

        start = first_day_of_previous_month(dt.date(2024, 9, 15), local)

        assert start.tzinfo is not None
        assert (start.year, start.month, start.day, start.hour) == (2024, 8, 1, 0)


class TestLocalTimeZoneId:
    """Test detection of the machine's IANA time zone."""

    @pytest.fixture
    def no_localtime(self, tmp_path):
        """Point /etc/localtime at a missing file."""
        with patch(
            "caloohpay.cli.commands.calculate.LOCALTIME_PATH", tmp_path / "missing"
        ):
            yield

    def test_tz_environment_variable(self, monkeypatch, no_localtime):
        """Test TZ names the zone, with or without a leading colon."""
        monkeypatch.setenv("TZ", ":Europe/Paris")

        assert local_time_zone_id() == "Europe/Paris"

    def test_localtime_symlink(self, monkeypatch, tmp_path):
        """Test the zone is read from the /etc/localtime symlink target."""
        monkeypatch.delenv("TZ", raising=False)
        zone_file = tmp_path / "zoneinfo" / "Europe" / "Berlin"
        zone_file.parent.mkdir(parents=True)
        zone_file.write_bytes(b"")
        localtime = tmp_path / "localtime"
        localtime.symlink_to(zone_file)

        with patch("caloohpay.cli.commands.calculate.LOCALTIME_PATH", localtime):
            assert local_time_zone_id() == "Europe/Berlin"

    def test_unknown_zone(self, monkeypatch, no_localtime):
        """Test None is returned when no known zone can be found."""
        monkeypatch.setenv("TZ", "Mars/Olympus")

        assert local_time_zone_id() is None


class TestCalculateCommand:
    """Test the calculate command end to end with a mocked PagerDuty API."""

    @pytest.fixture
    def runner(self):
        """Create a Click CLI test runner."""
        return CliRunner()

    @pytest.fixture
    def schedule(self, sample_schedule_payload):
        """Parsed sample schedule."""
        return Schedule.model_validate(sample_schedule_payload["schedule"])

    @pytest.fixture
    def mock_service_cls(self, schedule):
        """Patch the PagerDuty service used by the command."""
        with patch(
            "caloohpay.cli.commands.calculate.PagerDutyService"
        ) as mock_cls:
            mock_cls.return_value.get_schedule.return_value = schedule
            yield mock_cls

    @pytest.fixture
    def mock_configure_logging(self):
        """Keep the command from replacing the root logging handlers."""
        with patch(
            "caloohpay.cli.commands.calculate.configure_logging"
        ) as mock_configure:
            yield mock_configure

    def test_prints_payment_table(
        self, runner, mock_env, mock_service_cls, mock_configure_logging
    ):
        """Test the payments of each user are printed per schedule."""
        result = runner.invoke(
            calculate_payments, ["-r", "PQRSTUV", "-s", SINCE, "-u", UNTIL]
        )

        assert result.exit_code == 0, result.output
        assert "Calculating on-call payments from" in result.output
        assert "Schedule name: Platform Primary" in result.output
        assert (
            "Schedule URL: https://example.pagerduty.com/schedules/PQRSTUV"
            in result.output
        )
        assert "| User      | TotalComp | Mon-Thu | Fri-Sun |" in result.output
        assert "| YW Oncall |       575 |       4 |       5 |" in result.output
        assert "| SK Oncall |       525 |       6 |       3 |" in result.output

    def test_service_is_configured_from_settings(
        self, runner, mock_env, monkeypatch, mock_service_cls, mock_configure_logging
    ):
        """Test the service uses the configured token, URL and retries."""
        monkeypatch.setenv("TZ", "Europe/London")

        runner.invoke(calculate_payments, ["-r", "PQRSTUV", "-s", SINCE, "-u", UNTIL])

        kwargs = mock_service_cls.call_args.kwargs
        assert kwargs["api_token"] == "test-api-token"
        assert kwargs["base_url"] == "https://api.pagerduty.test"
        assert kwargs["retry_handler"].max_retries == 0

        mock_service_cls.return_value.get_schedule.assert_called_once_with(
            "PQRSTUV",
            since=dt.datetime.fromisoformat(SINCE),
            until=dt.datetime.fromisoformat(UNTIL),
            time_zone="Europe/London",
        )

    def test_multiple_rotas(
        self, runner, mock_env, mock_service_cls, mock_configure_logging
    ):
        """Test every rota id is fetched in order."""
        result = runner.invoke(
            calculate_payments, ["-r", "PQRSTUV,PSTUVQR", "-s", SINCE, "-u", UNTIL]
        )

        assert result.exit_code == 0, result.output
        calls = mock_service_cls.return_value.get_schedule.call_args_list
        assert [c.args[0] for c in calls] == ["PQRSTUV", "PSTUVQR"]
        assert result.output.count("Schedule name: Platform Primary") == 2

    def test_key_overrides_environment(
        self, runner, clean_env, mock_service_cls, mock_configure_logging
    ):
        """Test --key is used when API_TOKEN is not set."""
        result = runner.invoke(
            calculate_payments,
            ["-r", "PQRSTUV", "-s", SINCE, "-u", UNTIL, "-k", "u+cli-token"],
        )

        assert result.exit_code == 0, result.output
        assert mock_service_cls.call_args.kwargs["api_token"] == "u+cli-token"

    def test_missing_token(
        self, runner, clean_env, mock_service_cls, mock_configure_logging
    ):
        """Test a missing API token exits with 1."""
        result = runner.invoke(calculate_payments, ["-r", "PQRSTUV"])

        assert result.exit_code == 1
        assert "API_TOKEN not defined" in result.output
        mock_service_cls.return_value.get_schedule.assert_not_called()

    def test_invalid_configuration(
        self, runner, clean_env, monkeypatch, mock_service_cls, mock_configure_logging
    ):
        """Test invalid settings exit with 1."""
        monkeypatch.setenv("LOG_LEVEL", "CHATTY")

        result = runner.invoke(calculate_payments, ["-r", "PQRSTUV", "-k", "token"])

        assert result.exit_code == 1
        assert "Configuration Error" in result.output

    def test_output_file(
        self, runner, mock_env, mock_service_cls, mock_configure_logging, tmp_path
    ):
        """Test the payments are written to CSV."""
        output_file = tmp_path / "out" / "payments.csv"

        result = runner.invoke(
            calculate_payments,
            ["-r", "PQRSTUV", "-s", SINCE, "-u", UNTIL, "-o", str(output_file)],
        )

        assert result.exit_code == 0, result.output
        assert "On-call payments written to" in result.output
        df = pd.read_csv(output_file)
        assert df.to_dict("records") == [
            {
                "Schedule": "Platform Primary",
                "User": "YW Oncall",
                "TotalComp": 575,
                "Mon-Thu": 4,
                "Fri-Sun": 5,
            },
            {
                "Schedule": "Platform Primary",
                "User": "SK Oncall",
                "TotalComp": 525,
                "Mon-Thu": 6,
                "Fri-Sun": 3,
            },
        ]

    def test_default_period_in_time_zone(
        self, runner, mock_env, mock_service_cls, mock_configure_logging
    ):
        """Test the previous month is used when no dates are given."""
        result = runner.invoke(
            calculate_payments, ["-r", "PQRSTUV", "-t", "Europe/London"]
        )

        assert result.exit_code == 0, result.output
        kwargs = mock_service_cls.return_value.get_schedule.call_args.kwargs
        since, until = kwargs["since"], kwargs["until"]
        assert kwargs["time_zone"] == "Europe/London"
        assert since.tzinfo == ZoneInfo("Europe/London")
        assert (since.day, since.hour) == (1, 0)
        assert (until.day, until.hour) == (1, 10)
        assert since < until

    def test_invalid_since(self, runner, mock_env, mock_configure_logging):
        """Test an unparseable date is a usage error."""
        result = runner.invoke(
            calculate_payments, ["-r", "PQRSTUV", "-s", "01/08/2024"]
        )

        assert result.exit_code == 2
        assert "Invalid date format for since: 01/08/2024" in result.output

    def test_invalid_time_zone(self, runner, mock_env, mock_configure_logging):
        """Test an unknown time zone is a usage error."""
        result = runner.invoke(
            calculate_payments, ["-r", "PQRSTUV", "-t", "Mars/Olympus"]
        )

        assert result.exit_code == 2
        assert "Unknown time zone: Mars/Olympus" in result.output

    def test_rota_ids_required(self, runner, mock_env):
        """Test --rota-ids is mandatory."""
        result = runner.invoke(calculate_payments, [])

        assert result.exit_code == 2
        assert "--rota-ids" in result.output

    def test_schedule_not_found(
        self, runner, mock_env, mock_service_cls, mock_configure_logging
    ):
        """Test a 404 from PagerDuty exits with 7."""
        response = requests.Response()
        response.status_code = 404
        mock_service_cls.return_value.get_schedule.side_effect = requests.HTTPError(
            "404 Error", response=response
        )

        result = runner.invoke(
            calculate_payments, ["-r", "MISSING", "-s", SINCE, "-u", UNTIL]
        )

        assert result.exit_code == 7
        assert "Schedule Not Found" in result.output

    def test_debug_flag_enables_debug_logging(
        self, runner, clean_env, mock_service_cls, mock_configure_logging
    ):
        """Test --debug switches logging to DEBUG."""
        runner.invoke(
            calculate_payments,
            ["-r", "PQRSTUV", "-s", SINCE, "-u", UNTIL, "-k", "token", "--debug"],
        )

        config = mock_configure_logging.call_args.args[0]
        assert config.level == "DEBUG"

    def test_default_log_level(
        self, runner, clean_env, mock_service_cls, mock_configure_logging
    ):
        """Test logging stays at WARNING without --debug."""
        runner.invoke(
            calculate_payments, ["-r", "PQRSTUV", "-s", SINCE, "-u", UNTIL, "-k", "t"]
        )

        config = mock_configure_logging.call_args.args[0]
        assert config.level == "WARNING"

    def test_local_time_zone_is_sent(
        self, runner, mock_env, monkeypatch, mock_service_cls, mock_configure_logging
    ):
        """Test the local zone name is sent when --time-zone-id is omitted."""
        monkeypatch.setenv("TZ", "America/New_York")

        result = runner.invoke(calculate_payments, ["-r", "PQRSTUV"])

        assert result.exit_code == 0, result.output
        kwargs = mock_service_cls.return_value.get_schedule.call_args.kwargs
        assert kwargs["time_zone"] == "America/New_York"
        assert kwargs["since"].tzinfo == ZoneInfo("America/New_York")

    def test_failed_rota_does_not_stop_later_rotas(
        self, runner, mock_env, mock_service_cls, mock_configure_logging, tmp_path
    ):
        """Test a rota returning 404 is skipped and the next one is reported."""
        response = requests.Response()
        response.status_code = 404
        schedule = mock_service_cls.return_value.get_schedule.return_value
        mock_service_cls.return_value.get_schedule.side_effect = [
            requests.HTTPError("404 Error", response=response),
            schedule,
        ]
        output_file = tmp_path / "payments.csv"

        result = runner.invoke(
            calculate_payments,
            [
                "-r",
                "MISSING,PQRSTUV",
                "-s",
                SINCE,
                "-u",
                UNTIL,
                "-o",
                str(output_file),
            ],
        )

        assert result.exit_code == 7
        assert mock_service_cls.return_value.get_schedule.call_count == 2
        assert "Schedule Not Found" in result.output
        assert "Skipping rota MISSING" in result.output
        assert "1 of 2 rotas failed" in result.output
        assert "| YW Oncall |       575 |       4 |       5 |" in result.output
        assert pd.read_csv(output_file)["User"].tolist() == ["YW Oncall", "SK Oncall"]

    def test_first_failure_decides_exit_code(
        self, runner, mock_env, mock_service_cls, mock_configure_logging
    ):
        """Test the exit code comes from the first failing rota."""
        response = requests.Response()
        response.status_code = 403
        mock_service_cls.return_value.get_schedule.side_effect = [
            requests.HTTPError("403 Error", response=response),
            requests.ConnectionError("refused"),
        ]

        result = runner.invoke(
            calculate_payments, ["-r", "PQRSTUV,PSTUVQR", "-s", SINCE, "-u", UNTIL]
        )

        assert result.exit_code == 6
        assert "2 of 2 rotas failed" in result.output

    def test_unusable_schedule_response(
        self, runner, mock_env, mock_service_cls, mock_configure_logging
    ):
        """Test a response missing schedule fields exits with 2."""
        mock_service_cls.return_value.get_schedule.side_effect = ScheduleResponseError(
            "Unexpected response for schedule PQRSTUV: missing 'final_schedule'"
        )

        result = runner.invoke(
            calculate_payments, ["-r", "PQRSTUV", "-s", SINCE, "-u", UNTIL]
        )

        assert result.exit_code == 2
        assert "API Error" in result.output
        assert "Unexpected response for schedule PQRSTUV" in result.output

    def test_log_format_from_environment(
        self, runner, clean_env, monkeypatch, mock_service_cls
    ):
        """Test LOG_FORMAT=json gives JSON handlers even with --debug."""
        monkeypatch.setenv("LOG_FORMAT", "json")

        try:
            result = runner.invoke(
                calculate_payments,
                ["-r", "PQRSTUV", "-s", SINCE, "-u", UNTIL, "-k", "t", "--debug"],
            )

            assert result.exit_code == 0, result.output
            root_logger = logging.getLogger()
            assert root_logger.level == logging.DEBUG
            assert root_logger.handlers
            assert all(
                isinstance(h.formatter, JSONFormatter) for h in root_logger.handlers
            )
        finally:
            reset_logging()

    def test_invalid_log_format(
        self, runner, clean_env, monkeypatch, mock_service_cls, mock_configure_logging
    ):
        """Test an unknown LOG_FORMAT is a configuration error."""
        monkeypatch.setenv("LOG_FORMAT", "xml")

        result = runner.invoke(calculate_payments, ["-r", "PQRSTUV", "-k", "t"])

        assert result.exit_code == 1
        assert "Invalid logging configuration" in result.output
