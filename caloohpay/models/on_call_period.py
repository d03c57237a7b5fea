"""On-call period data model.

This module defines the OnCallPeriod model which represents one contiguous
span of time during which a single person is on call.
"""

import datetime as dt
from functools import cached_property

from pydantic import ConfigDict, Field, computed_field

from caloohpay.models.base import BaseDataModel
from caloohpay.utils.date_utils import count_ooh_days


class OnCallPeriod(BaseDataModel):
    """Represents a single on-call period.

    The number of OOH weekdays (Mon-Thu) and weekend days (Fri-Sun) is
    derived from the calendar dates of ``since`` and ``until``, each in its
    own UTC offset. Periods are immutable, and the derived counts are
    computed once on first access.

    No ordering is enforced between ``since`` and ``until``: a period that
    ends before it starts simply covers zero days.

    Attributes:
        since: Start of the on-call period (offset-aware)
        until: End of the on-call period (offset-aware)
        number_of_ooh_weekdays: Calendar dates covered falling Mon-Thu
        number_of_ooh_weekend_days: Calendar dates covered falling Fri-Sun

    Example:
        >>> tz = dt.timezone(dt.timedelta(hours=1))
        >>> period = OnCallPeriod(
        ...     since=dt.datetime(2024, 8, 1, 0, 0, tzinfo=tz),
        ...     until=dt.datetime(2024, 8, 12, 10, 0, tzinfo=tz),
        ... )
        >>> period.number_of_ooh_weekdays
        5
        >>> period.number_of_ooh_weekend_days
        6
    """

    model_config = ConfigDict(frozen=True, validate_assignment=False)

    since: dt.datetime = Field(..., description="Start of the on-call period")
    until: dt.datetime = Field(..., description="End of the on-call period")

    @computed_field  # type: ignore[prop-decorator]
    @cached_property
    def number_of_ooh_weekdays(self) -> int:
        """Number of OOH weekdays (Monday to Thursday) in the period."""
        return count_ooh_days(self.since, self.until)[0]

    @computed_field  # type: ignore[prop-decorator]
    @cached_property
    def number_of_ooh_weekend_days(self) -> int:
        """Number of OOH weekend days (Friday to Sunday) in the period."""
        return count_ooh_days(self.since, self.until)[1]

    def __str__(self) -> str:
        return (
            f"{self.since.isoformat()} -> {self.until.isoformat()} "
            f"(Mon-Thu: {self.number_of_ooh_weekdays}, "
            f"Fri-Sun: {self.number_of_ooh_weekend_days})"
        )
