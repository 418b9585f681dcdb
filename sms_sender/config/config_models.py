"""Configuration data models for the PDU SMS sender.

This module defines immutable configuration dataclasses with sensible defaults
for zero-config operation. All dataclasses are frozen for immutability.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional, Dict, Any


class LogLevel(Enum):
    """Logging level."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass(frozen=True)
class SerialConfig:
    """Serial link and AT transport configuration.

    Attributes:
        default_baud: Baud rate used to open the port
        settle_time_ms: Pause after opening the port before the first command
        response_timeout: Seconds to wait for each reply; 0 waits forever
        read_timeout_ms: Poll interval of the background reader thread
    """
    default_baud: int = 115200
    settle_time_ms: int = 500
    response_timeout: int = 0
    read_timeout_ms: int = 100

    @property
    def settle_time(self) -> float:
        return self.settle_time_ms / 1000.0

    @property
    def read_timeout(self) -> float:
        return self.read_timeout_ms / 1000.0

    @property
    def response_timeout_seconds(self) -> Optional[float]:
        """Response timeout for the transport, None meaning no timeout."""
        return float(self.response_timeout) if self.response_timeout > 0 else None


@dataclass(frozen=True)
class SmsConfig:
    """Message building configuration.

    Attributes:
        default_country_code: Prefixed to numbers given without one (CLI only)
        concatenation_reference: Fixed reference for long messages; None picks
            a random one per message
    """
    default_country_code: Optional[int] = None
    concatenation_reference: Optional[int] = None


@dataclass(frozen=True)
class LoggingConfig:
    """Communication logging configuration."""
    enabled: bool = False
    level: LogLevel = LogLevel.INFO
    log_to_file: bool = False
    log_to_console: bool = True
    log_file_path: Optional[str] = None
    max_file_size_mb: int = 10
    backup_count: int = 5


@dataclass(frozen=True)
class Config:
    """Complete configuration object with all sections."""
    serial: SerialConfig = field(default_factory=SerialConfig)
    sms: SmsConfig = field(default_factory=SmsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Dictionary representation with nested sections and enum values
            replaced by their plain values.
        """
        def convert_value(obj: Any) -> Any:
            if isinstance(obj, Enum):
                return obj.value
            elif isinstance(obj, list):
                return [convert_value(item) for item in obj]
            elif isinstance(obj, dict):
                return {k: convert_value(v) for k, v in obj.items()}
            return obj

        return convert_value(asdict(self))
