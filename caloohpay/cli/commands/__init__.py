"""CLI commands."""

from caloohpay.cli.commands.calculate import calculate_payments

__all__ = ["calculate_payments"]
