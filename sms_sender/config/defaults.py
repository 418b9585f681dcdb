"""Default configuration values for zero-config operation.

The application runs without any configuration file; these values match
what the modem expects out of the box.
"""

from sms_sender.config.config_models import (
    Config,
    SerialConfig,
    SmsConfig,
    LoggingConfig,
    LogLevel
)


def get_default_config() -> Config:
    """Get default configuration with sensible values for zero-config operation.

    Default Values:
        - Serial: 115200 baud, 500ms settle time, wait forever for replies
        - SMS: no default country code, random concatenation reference
        - Logging: disabled; INFO level to console once enabled
    """
    return Config(
        serial=SerialConfig(
            default_baud=115200,
            settle_time_ms=500,  # modems need a moment after the port opens
            response_timeout=0,  # 0 = block until the modem answers
            read_timeout_ms=100
        ),
        sms=SmsConfig(
            default_country_code=None,
            concatenation_reference=None
        ),
        logging=LoggingConfig(
            enabled=False,
            level=LogLevel.INFO,
            log_to_file=False,
            log_to_console=True,
            log_file_path=None,  # ~/.sms-sender/logs/comm_{timestamp}.log when enabled
            max_file_size_mb=10,
            backup_count=5
        )
    )
