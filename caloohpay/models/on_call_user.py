"""On-call user data model.

This module defines the OnCallUser model which groups every on-call period
covered by one person on a rota.
"""

from typing import Iterable, List

from pydantic import Field

from caloohpay.models.base import BaseDataModel
from caloohpay.models.on_call_period import OnCallPeriod


class OnCallUser(BaseDataModel):
    """Represents a person covering a rota and their on-call periods.

    Periods are kept in arrival order. Overlapping or duplicated periods are
    never merged, so a day covered by two periods is counted twice.

    Attributes:
        id: Opaque identifier used as the aggregation key (may be empty)
        name: Display name, not used in any calculation
        on_call_periods: Ordered list of the user's on-call periods

    Example:
        >>> import datetime as dt
        >>> tz = dt.timezone(dt.timedelta(hours=1))
        >>> user = OnCallUser(
        ...     id="PGO3DTM",
        ...     name="SK Oncall",
        ...     on_call_periods=[
        ...         OnCallPeriod(
        ...             since=dt.datetime(2024, 8, 6, 10, 0, tzinfo=tz),
        ...             until=dt.datetime(2024, 8, 15, 10, 0, tzinfo=tz),
        ...         )
        ...     ],
        ... )
        >>> user.get_total_ooh_weekdays()
        6
    """

    id: str = Field(..., description="Unique identifier of the user")
    name: str = Field(..., description="Display name of the user")
    on_call_periods: List[OnCallPeriod] = Field(
        default_factory=list, description="On-call periods in arrival order"
    )

    def add_on_call_periods(self, on_call_periods: Iterable[OnCallPeriod]) -> None:
        """Append on-call periods to this user.

        No validation, de-duplication or merging of overlapping periods is
        performed.

        Args:
            on_call_periods: Periods to append, in arrival order
        """
        self.on_call_periods.extend(on_call_periods)

    def get_total_ooh_weekdays(self) -> int:
        """Return the number of OOH weekdays (Mon-Thu) across all periods."""
        return sum(period.number_of_ooh_weekdays for period in self.on_call_periods)

    def get_total_ooh_weekend_days(self) -> int:
        """Return the number of OOH weekend days (Fri-Sun) across all periods."""
        return sum(
            period.number_of_ooh_weekend_days for period in self.on_call_periods
        )
