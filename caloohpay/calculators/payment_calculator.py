"""On-call payment calculator.

This module implements the compensation calculations for on-call users:
- Payment for a single on-call user
- Payments for many on-call users, keyed by user id
- Auditable payment records pairing each user with their total

Rates are passed explicitly as a PaymentRates value; DEFAULT_PAYMENT_RATES
holds the standard rates of 50 per OOH weekday and 75 per OOH weekend day.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable

from pydantic import ConfigDict, Field

from caloohpay.models.base import BaseDataModel
from caloohpay.models.on_call_user import OnCallUser

logger = logging.getLogger(__name__)

WEEKDAY_RATE = Decimal("50")
WEEKEND_RATE = Decimal("75")


class PaymentRates(BaseDataModel):
    """Compensation paid per classified OOH day.

    Attributes:
        weekday_rate: Amount paid per OOH weekday (Monday to Thursday)
        weekend_rate: Amount paid per OOH weekend day (Friday to Sunday)

    Example:
        >>> PaymentRates().weekend_rate
        Decimal('75')
        >>> PaymentRates(weekday_rate=Decimal("60")).weekday_rate
        Decimal('60')
    """

    model_config = ConfigDict(frozen=True, validate_assignment=False)

    weekday_rate: Decimal = Field(WEEKDAY_RATE, ge=0, description="Mon-Thu rate")
    weekend_rate: Decimal = Field(WEEKEND_RATE, ge=0, description="Fri-Sun rate")


DEFAULT_PAYMENT_RATES = PaymentRates()


@dataclass
class OnCallCompensation:
    """Auditable payment record for one on-call user.

    The record holds a reference to the user rather than a copy, and the
    total is recomputed from the user's current periods on every access.

    Attributes:
        on_call_user: The user the record belongs to
        rates: Rates used to price the user's OOH days

    Example:
        >>> record = OnCallCompensation(OnCallUser(id="1", name="John Doe"))
        >>> record.total_compensation
        Decimal('0')
    """

    on_call_user: OnCallUser
    rates: PaymentRates = field(default=DEFAULT_PAYMENT_RATES)

    @property
    def total_compensation(self) -> Decimal:
        """Total compensation for the user at the record's rates."""
        return calculate_on_call_payment(self.on_call_user, rates=self.rates)

    @property
    def total_ooh_weekdays(self) -> int:
        """Number of OOH weekdays (Mon-Thu) behind the total."""
        return self.on_call_user.get_total_ooh_weekdays()

    @property
    def total_ooh_weekend_days(self) -> int:
        """Number of OOH weekend days (Fri-Sun) behind the total."""
        return self.on_call_user.get_total_ooh_weekend_days()


def calculate_on_call_payment(
    on_call_user: OnCallUser, rates: PaymentRates = DEFAULT_PAYMENT_RATES
) -> Decimal:
    """Calculate the on-call payment for a single user.

    Args:
        on_call_user: User whose periods are priced
        rates: Rates per OOH weekday and weekend day

    Returns:
        weekdays × weekday_rate + weekend days × weekend_rate

    Example:
        >>> import datetime as dt
        >>> from caloohpay.models.on_call_period import OnCallPeriod
        >>> tz = dt.timezone(dt.timedelta(hours=1))
        >>> user = OnCallUser(
        ...     id="1",
        ...     name="John Doe",
        ...     on_call_periods=[
        ...         OnCallPeriod(
        ...             since=dt.datetime(2024, 8, 1, 0, 0, tzinfo=tz),
        ...             until=dt.datetime(2024, 8, 12, 10, 0, tzinfo=tz),
        ...         )
        ...     ],
        ... )
        >>> calculate_on_call_payment(user)
        Decimal('700')
    """
    return (
        on_call_user.get_total_ooh_weekdays() * rates.weekday_rate
        + on_call_user.get_total_ooh_weekend_days() * rates.weekend_rate
    )


def calculate_on_call_payments(
    on_call_users: Iterable[OnCallUser], rates: PaymentRates = DEFAULT_PAYMENT_RATES
) -> Dict[str, Decimal]:
    """Calculate on-call payments for many users.

    User ids are expected to be unique. When they are not, the last user
    with a given id wins; merge such users with add_on_call_periods first.

    Args:
        on_call_users: Users to price
        rates: Rates per OOH weekday and weekend day

    Returns:
        Dictionary mapping user id to payment
    """
    payments: Dict[str, Decimal] = {}

    for on_call_user in on_call_users:
        if on_call_user.id in payments:
            logger.warning(
                f"Duplicate on-call user id '{on_call_user.id}', "
                f"keeping the last payment calculated"
            )
        payments[on_call_user.id] = calculate_on_call_payment(on_call_user, rates)

    return payments


def get_auditable_on_call_payment_records(
    on_call_users: Iterable[OnCallUser], rates: PaymentRates = DEFAULT_PAYMENT_RATES
) -> Dict[str, OnCallCompensation]:
    """Build auditable payment records for many users.

    Each record exposes the user (and so the OOH weekday and weekend day
    counts) together with the total compensation, so a report can print
    all of them from one structure. Duplicate ids follow the same
    last-write-wins rule as calculate_on_call_payments.

    Args:
        on_call_users: Users to build records for
        rates: Rates per OOH weekday and weekend day

    Returns:
        Dictionary mapping user id to OnCallCompensation
    """
    records: Dict[str, OnCallCompensation] = {}

    for on_call_user in on_call_users:
        if on_call_user.id in records:
            logger.warning(
                f"Duplicate on-call user id '{on_call_user.id}', "
                f"keeping the last payment record"
            )
        records[on_call_user.id] = OnCallCompensation(on_call_user, rates)

    logger.debug(f"Built {len(records)} auditable on-call payment record(s)")
    return records


class OnCallPaymentsCalculator:
    """Calculator bound to a fixed set of payment rates.

    Example:
        >>> calculator = OnCallPaymentsCalculator()
        >>> calculator.calculate_on_call_payments([])
        {}
    """

    def __init__(self, rates: PaymentRates = DEFAULT_PAYMENT_RATES):
        """Initialize the calculator.

        Args:
            rates: Rates per OOH weekday and weekend day
        """
        self.rates = rates

    def calculate_on_call_payment(self, on_call_user: OnCallUser) -> Decimal:
        """Calculate the payment for a single user at the bound rates."""
        return calculate_on_call_payment(on_call_user, self.rates)

    def calculate_on_call_payments(
        self, on_call_users: Iterable[OnCallUser]
    ) -> Dict[str, Decimal]:
        """Calculate payments for many users at the bound rates."""
        return calculate_on_call_payments(on_call_users, self.rates)

    def get_auditable_on_call_payment_records(
        self, on_call_users: Iterable[OnCallUser]
    ) -> Dict[str, OnCallCompensation]:
        """Build auditable payment records at the bound rates."""
        return get_auditable_on_call_payment_records(on_call_users, self.rates)
