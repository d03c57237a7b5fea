"""Data models for CalOohPay.

This package contains Pydantic models for all business entities:
- BaseDataModel: Base class for domain models
- ApiDataModel: Base class for models parsed from API payloads
- OnCallPeriod: One contiguous on-call period
- OnCallUser: A person covering a rota and their on-call periods
- Schedule, FinalSchedule, ScheduleEntry, ScheduleUser: PagerDuty schedule payload
"""

from caloohpay.models.base import ApiDataModel, BaseDataModel
from caloohpay.models.on_call_period import OnCallPeriod
from caloohpay.models.on_call_user import OnCallUser
from caloohpay.models.schedule import (
    FinalSchedule,
    Schedule,
    ScheduleEntry,
    ScheduleUser,
)

__all__ = [
    "ApiDataModel",
    "BaseDataModel",
    "OnCallPeriod",
    "OnCallUser",
    "FinalSchedule",
    "Schedule",
    "ScheduleEntry",
    "ScheduleUser",
]
