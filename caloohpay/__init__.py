"""CalOohPay - out-of-hours on-call payment calculator for PagerDuty rotas."""

__version__ = "1.0.0"
