"""
Global pytest configuration and fixtures.
"""
import datetime as dt
from typing import Any, Dict, List

import pytest

from caloohpay.config import CalOohPayConfig, reload_config
from caloohpay.models.on_call_period import OnCallPeriod
from caloohpay.models.on_call_user import OnCallUser

UTC_PLUS_ONE = dt.timezone(dt.timedelta(hours=1))

CONFIG_ENV_VARS = [
    "API_TOKEN",
    "PAGERDUTY_API_URL",
    "REQUEST_TIMEOUT",
    "WEEKDAY_RATE",
    "WEEKEND_RATE",
    "ENVIRONMENT",
    "DEBUG",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FILE",
    "LOG_CONSOLE",
    "LOG_FILE_ENABLED",
    "LOG_MAX_FILE_SIZE",
    "LOG_BACKUP_COUNT",
    "MAX_RETRIES",
    "RETRY_DELAY",
]


def period(since: str, until: str) -> OnCallPeriod:
    """Build an OnCallPeriod from two ISO 8601 strings."""
    return OnCallPeriod(
        since=dt.datetime.fromisoformat(since), until=dt.datetime.fromisoformat(until)
    )


@pytest.fixture
def tz() -> dt.timezone:
    """The UTC+01:00 offset used by the reference scenarios."""
    return UTC_PLUS_ONE


@pytest.fixture(scope="session")
def test_env_vars() -> Dict[str, str]:
    """Test environment variables for configuration."""
    return {
        'API_TOKEN': 'test-api-token',
        'PAGERDUTY_API_URL': 'https://api.pagerduty.test',
        'ENVIRONMENT': 'testing',
        'DEBUG': 'true',
        'LOG_LEVEL': 'DEBUG',
        'MAX_RETRIES': '0',
        'RETRY_DELAY': '0',
    }


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Remove configuration variables and run away from any local .env file."""
    for key in CONFIG_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)

    import caloohpay.config.settings
    caloohpay.config.settings._config = None

    yield

    caloohpay.config.settings._config = None


@pytest.fixture
def mock_env(test_env_vars, clean_env, monkeypatch):
    """Mock environment variables for testing."""
    for key, value in test_env_vars.items():
        monkeypatch.setenv(key, value)

    yield test_env_vars


@pytest.fixture
def test_config(mock_env) -> CalOohPayConfig:
    """Test configuration instance."""
    return reload_config()


@pytest.fixture
def reference_on_call_users() -> List[OnCallUser]:
    """Four users covering August 2024 between them."""
    return [
        OnCallUser(
            id="1PF7DNAV",
            name="YW Oncall",
            on_call_periods=[
                period("2024-08-01T00:00:00+01:00", "2024-08-06T10:00:00+01:00"),
                period("2024-08-28T10:00:00+01:00", "2024-09-01T00:00:00+01:00"),
            ],
        ),
        OnCallUser(
            id="PGO3DTM",
            name="SK Oncall",
            on_call_periods=[
                period("2024-08-06T10:00:00+01:00", "2024-08-15T10:00:00+01:00"),
                period("2024-08-16T10:00:00+01:00", "2024-08-21T10:00:00+01:00"),
            ],
        ),
        OnCallUser(
            id="PINI77A",
            name="EG Oncall",
            on_call_periods=[
                period("2024-08-15T00:00:00+01:00", "2024-08-16T10:00:00+01:00"),
            ],
        ),
        OnCallUser(
            id="PJXZDBT",
            name="CE Oncall",
            on_call_periods=[
                period("2024-08-21T10:00:00+01:00", "2024-08-28T10:00:00+01:00"),
            ],
        ),
    ]


@pytest.fixture
def sample_schedule_payload() -> Dict[str, Any]:
    """A trimmed PagerDuty /schedules/{id} response body."""
    return {
        "schedule": {
            "id": "PQRSTUV",
            "type": "schedule",
            "name": "Platform Primary",
            "html_url": "https://example.pagerduty.com/schedules/PQRSTUV",
            "time_zone": "Europe/London",
            "final_schedule": {
                "name": "Final Schedule",
                "rendered_coverage_percentage": 100.0,
                "rendered_schedule_entries": [
                    {
                        "start": "2024-08-01T00:00:00+01:00",
                        "end": "2024-08-06T10:00:00+01:00",
                        "user": {
                            "id": "1PF7DNAV",
                            "type": "user_reference",
                            "summary": "YW Oncall",
                        },
                    },
                    {
                        "start": "2024-08-06T10:00:00+01:00",
                        "end": "2024-08-15T10:00:00+01:00",
                        "user": {
                            "id": "PGO3DTM",
                            "type": "user_reference",
                            "summary": "SK Oncall",
                        },
                    },
                    {
                        "start": "2024-08-28T10:00:00+01:00",
                        "end": "2024-09-01T00:00:00+01:00",
                        "user": {
                            "id": "1PF7DNAV",
                            "type": "user_reference",
                            "summary": "YW Oncall",
                        },
                    },
                ],
            },
        }
    }


# Pytest configuration for different test types
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line(
        "markers", "api: mark test as exercising the PagerDuty API client"
    )


def pytest_collection_modifyitems(config, items):
    """Add markers based on test location."""
    for item in items:
        if "tests/unit/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)

        if "pagerduty" in str(item.fspath):
            item.add_marker(pytest.mark.api)
