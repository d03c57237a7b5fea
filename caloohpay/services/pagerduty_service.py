"""
PagerDuty schedule service with token authentication and retry handling.
"""

import datetime as dt
import logging
from typing import Any, Dict, Optional, Union

import requests
from pydantic import ValidationError

from caloohpay.models.schedule import Schedule
from caloohpay.services.retry_handler import RetryHandler
from caloohpay.utils.logging_utils import log_context, sanitize_sensitive_data

logger = logging.getLogger(__name__)

PAGERDUTY_ACCEPT_HEADER = "application/vnd.pagerduty+json;version=2"


class ScheduleResponseError(Exception):
    """Raised when a PagerDuty response cannot be parsed into a Schedule."""

    pass


class PagerDutyService:
    """
    PagerDuty REST API client for reading rendered on-call schedules.

    Features:
    - API token authentication
    - Automatic retry with exponential backoff on transient failures
    - Validation of the schedule payload into pydantic models
    """

    def __init__(
        self,
        api_token: str,
        base_url: str = "https://api.pagerduty.com",
        timeout: float = 30.0,
        retry_handler: Optional[RetryHandler] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the PagerDuty service.

        Args:
            api_token: PagerDuty REST API token
            base_url: API base URL
            timeout: Per-request timeout in seconds
            retry_handler: Custom retry handler instance
            session: Custom requests session (mainly for testing)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_handler = retry_handler or RetryHandler()
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Token token={api_token}",
                "Accept": PAGERDUTY_ACCEPT_HEADER,
                "Content-Type": "application/json",
            }
        )

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Perform a GET request, retrying transient failures.

        Raises:
            requests.HTTPError: If the API answers with a non-retryable error
            RetryExhaustedException: If transient failures persist
        """
        url = f"{self.base_url}{path}"

        def _get_operation():
            response = self._session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()

        logger.debug(f"GET {url} params={sanitize_sensitive_data(params)}")
        return self.retry_handler.execute_with_retry(_get_operation)

    def get_schedule(
        self,
        schedule_id: str,
        since: Union[str, dt.datetime],
        until: Union[str, dt.datetime],
        time_zone: Optional[str] = None,
    ) -> Schedule:
        """
        Fetch a schedule rendered for the given time window.

        Args:
            schedule_id: PagerDuty schedule (rota) id
            since: Start of the window (ISO 8601 string or datetime)
            until: End of the window (ISO 8601 string or datetime)
            time_zone: Time zone to render the schedule in

        Returns:
            Parsed Schedule including its final rendered entries

        Raises:
            requests.HTTPError: If the API request fails
            ScheduleResponseError: If the response has no valid schedule
        """
        params: Dict[str, Any] = {
            "overflow": "false",
            "since": since.isoformat() if isinstance(since, dt.datetime) else since,
            "until": until.isoformat() if isinstance(until, dt.datetime) else until,
        }
        if time_zone:
            params["time_zone"] = time_zone

        with log_context(rota_id=schedule_id):
            payload = self._get(f"/schedules/{schedule_id}", params)

            try:
                schedule = Schedule.model_validate(payload["schedule"])
            except (KeyError, TypeError, ValidationError) as e:
                raise ScheduleResponseError(
                    f"Unexpected response for schedule {schedule_id}: {e}"
                ) from e

            entries = schedule.final_schedule.rendered_schedule_entries or []
            logger.info(
                f"Fetched schedule '{schedule.name}' with "
                f"{len(entries)} rendered entry(ies)"
            )
            return schedule
