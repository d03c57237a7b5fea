"""CalOohPay CLI.

This module provides the command-line interface for calculating
out-of-hours on-call payments from PagerDuty schedules.
"""

import click

from caloohpay import __version__
from caloohpay.cli.commands.calculate import calculate_payments


@click.group(
    help="CalOohPay CLI - Calculate out-of-hours on-call payments for PagerDuty rotas"
)
@click.version_option(version=__version__)
def cli():
    """CalOohPay CLI main entry point."""
    pass


cli.add_command(calculate_payments)


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
