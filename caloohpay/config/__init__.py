"""
Configuration module for CalOohPay.
"""
from .settings import CalOohPayConfig, get_config, load_config, reload_config

__all__ = [
    'CalOohPayConfig',
    'get_config',
    'load_config',
    'reload_config'
]
