"""PagerDuty schedule data models.

This module defines the models parsed from the PagerDuty ``/schedules/{id}``
response. Only the fields CalOohPay needs are declared; everything else in
the payload is ignored.
"""

import datetime as dt
from typing import List, Optional

from pydantic import Field

from caloohpay.models.base import ApiDataModel


class ScheduleUser(ApiDataModel):
    """Reference to the user assigned to a schedule entry.

    Attributes:
        id: PagerDuty user id
        summary: Display name of the user
    """

    id: str = Field(..., description="PagerDuty user id")
    summary: str = Field("", description="Display name of the user")


class ScheduleEntry(ApiDataModel):
    """A single rendered schedule entry.

    Attributes:
        start: Start of the entry, with the schedule's UTC offset
        end: End of the entry, with the schedule's UTC offset
        user: Assigned user, or None for an unassigned entry

    Example:
        >>> entry = ScheduleEntry.model_validate(
        ...     {
        ...         "start": "2024-08-01T00:00:00+01:00",
        ...         "end": "2024-08-06T10:00:00+01:00",
        ...         "user": {"id": "1PF7DNAV", "summary": "YW Oncall"},
        ...     }
        ... )
        >>> entry.user.id
        '1PF7DNAV'
    """

    start: dt.datetime = Field(..., description="Start of the entry")
    end: dt.datetime = Field(..., description="End of the entry")
    user: Optional[ScheduleUser] = Field(None, description="Assigned user")


class FinalSchedule(ApiDataModel):
    """The final schedule layer, after overrides have been applied."""

    name: Optional[str] = None
    rendered_schedule_entries: Optional[List[ScheduleEntry]] = None


class Schedule(ApiDataModel):
    """A PagerDuty schedule (rota) rendered for a time window.

    Attributes:
        id: Schedule id
        name: Schedule name
        html_url: Link to the schedule in the PagerDuty web UI
        time_zone: Time zone the schedule was rendered in
        final_schedule: The final rendered layer
    """

    id: str = Field(..., description="Schedule id")
    name: str = Field("", description="Schedule name")
    html_url: str = Field("", description="Schedule URL")
    time_zone: Optional[str] = Field(None, description="Rendering time zone")
    final_schedule: FinalSchedule = Field(default_factory=FinalSchedule)
