"""On-call user aggregator for rendered schedule entries.

This module groups the rendered entries of a PagerDuty schedule by the user
they are assigned to, producing one OnCallUser per distinct user with one
OnCallPeriod per entry.
"""

import logging
from typing import Dict, Iterable

from caloohpay.models.on_call_period import OnCallPeriod
from caloohpay.models.on_call_user import OnCallUser
from caloohpay.models.schedule import FinalSchedule, ScheduleEntry
from caloohpay.utils.logging_utils import log_function_call

logger = logging.getLogger(__name__)


def get_on_call_user_from_schedule_entry(schedule_entry: ScheduleEntry) -> OnCallUser:
    """Build a single-period OnCallUser from a schedule entry.

    Entries without an assigned user map to an empty id and name, so
    unassigned coverage is kept together rather than dropped.

    Args:
        schedule_entry: Rendered schedule entry

    Returns:
        OnCallUser holding one period spanning the entry
    """
    on_call_period = OnCallPeriod(since=schedule_entry.start, until=schedule_entry.end)
    user = schedule_entry.user

    return OnCallUser(
        id=user.id if user else "",
        name=user.summary if user else "",
        on_call_periods=[on_call_period],
    )


@log_function_call
def extract_on_call_users_from_schedule_entries(
    schedule_entries: Iterable[ScheduleEntry],
) -> Dict[str, OnCallUser]:
    """Group schedule entries into on-call users keyed by user id.

    Entries for a user already seen are appended to that user's periods in
    arrival order. Periods are never merged or de-duplicated.

    Args:
        schedule_entries: Rendered schedule entries in arrival order

    Returns:
        Dictionary mapping user id to OnCallUser, in first-seen order

    Example:
        >>> entries = [
        ...     ScheduleEntry.model_validate(
        ...         {
        ...             "start": "2024-08-15T00:00:00+01:00",
        ...             "end": "2024-08-16T10:00:00+01:00",
        ...             "user": {"id": "PINI77A", "summary": "EG Oncall"},
        ...         }
        ...     )
        ... ]
        >>> users = extract_on_call_users_from_schedule_entries(entries)
        >>> users["PINI77A"].get_total_ooh_weekdays()
        1
    """
    on_call_users: Dict[str, OnCallUser] = {}
    entry_count = 0

    for schedule_entry in schedule_entries:
        entry_count += 1
        on_call_user = get_on_call_user_from_schedule_entry(schedule_entry)

        if on_call_user.id in on_call_users:
            on_call_users[on_call_user.id].add_on_call_periods(
                on_call_user.on_call_periods
            )
        else:
            on_call_users[on_call_user.id] = on_call_user

    if "" in on_call_users:
        logger.warning(
            f"{len(on_call_users[''].on_call_periods)} schedule entry(ies) "
            f"have no assigned user"
        )

    logger.info(
        f"Extracted {len(on_call_users)} on-call user(s) "
        f"from {entry_count} schedule entry(ies)"
    )
    return on_call_users


def extract_on_call_users_from_final_schedule(
    final_schedule: FinalSchedule,
) -> Dict[str, OnCallUser]:
    """Group the rendered entries of a final schedule into on-call users.

    Args:
        final_schedule: Final schedule layer from a PagerDuty schedule

    Returns:
        Dictionary mapping user id to OnCallUser (empty if nothing rendered)
    """
    if not final_schedule.rendered_schedule_entries:
        logger.info("Final schedule has no rendered schedule entries")
        return {}

    return extract_on_call_users_from_schedule_entries(
        final_schedule.rendered_schedule_entries
    )
