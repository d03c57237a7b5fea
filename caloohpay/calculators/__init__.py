"""Calculator modules for CalOohPay."""

from caloohpay.calculators.payment_calculator import (
    DEFAULT_PAYMENT_RATES,
    WEEKDAY_RATE,
    WEEKEND_RATE,
    OnCallCompensation,
    OnCallPaymentsCalculator,
    PaymentRates,
    calculate_on_call_payment,
    calculate_on_call_payments,
    get_auditable_on_call_payment_records,
)

__all__ = [
    "DEFAULT_PAYMENT_RATES",
    "WEEKDAY_RATE",
    "WEEKEND_RATE",
    "OnCallCompensation",
    "OnCallPaymentsCalculator",
    "PaymentRates",
    "calculate_on_call_payment",
    "calculate_on_call_payments",
    "get_auditable_on_call_payment_records",
]
