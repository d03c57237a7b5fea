"""Shared utilities for CalOohPay."""
