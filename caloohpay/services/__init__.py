"""Services for talking to PagerDuty."""

from caloohpay.services.pagerduty_service import (
    PagerDutyService,
    ScheduleResponseError,
)
from caloohpay.services.retry_handler import (
    RetryExhaustedException,
    RetryHandler,
    is_retryable_error,
)

__all__ = [
    "PagerDutyService",
    "ScheduleResponseError",
    "RetryExhaustedException",
    "RetryHandler",
    "is_retryable_error",
]
