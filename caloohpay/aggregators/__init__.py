"""Aggregators module for grouping schedule data into on-call users.

This module provides functionality to turn rendered schedule entries into
OnCallUser objects ready for payment calculation.
"""

from caloohpay.aggregators.on_call_user_aggregator import (
    extract_on_call_users_from_final_schedule,
    extract_on_call_users_from_schedule_entries,
    get_on_call_user_from_schedule_entry,
)

__all__ = [
    "extract_on_call_users_from_final_schedule",
    "extract_on_call_users_from_schedule_entries",
    "get_on_call_user_from_schedule_entry",
]
