"""Configuration management package.

Provides centralized configuration access with defaults, file loading,
and environment variable overrides.
"""

from sms_sender.config.config_manager import ConfigManager
from sms_sender.config.config_models import (
    Config,
    SerialConfig,
    SmsConfig,
    LoggingConfig,
    LogLevel
)
from sms_sender.config.config_schema import ConfigSchema
from sms_sender.config.defaults import get_default_config

__all__ = [
    'ConfigManager',
    'ConfigSchema',
    'Config',
    'SerialConfig',
    'SmsConfig',
    'LoggingConfig',
    'LogLevel',
    'get_default_config',
]
