"""Communication logger for the modem link.

CommunicationLogger is injected into SerialHandler and SmsTransport and
records every command, reply classification, port event and transport state
change. Entries go to an in-memory ring buffer, to stderr and, optionally,
to a rotating log file.
"""

from datetime import datetime
from collections import deque
from pathlib import Path
from threading import Lock
from typing import Optional, List, Dict, Any, Union
import sys

from sms_sender.logging.log_models import LogEntry
from sms_sender.logging.file_handler import FileHandler
from sms_sender.config.config_models import LogLevel, LoggingConfig

DEFAULT_LOG_DIR = Path.home() / ".sms-sender" / "logs"
BUFFER_SIZE = 1000


class CommunicationLogger:
    """Level-filtered logger with buffer, console and file destinations.

    Attributes:
        log_level: Minimum level recorded (DEBUG, INFO, WARNING, ERROR)
        enable_file: Whether entries are written to a file
        enable_console: Whether entries are printed to stderr
        log_file_path: Path of the log file (if file logging enabled)

    Example:
        >>> logger = CommunicationLogger(log_level=LogLevel.DEBUG)
        >>> logger.log_command(port="/dev/ttyUSB0", command="AT+CMGF=0")
        >>> logger.log_response(port="/dev/ttyUSB0", response="OK",
        ...                     status="success", execution_time=0.02)
        >>> logger.close()
    """

    _LEVEL_PRIORITY = {
        "DEBUG": 0,
        "INFO": 1,
        "WARNING": 2,
        "ERROR": 3
    }

    # Reply classifications that are not failures
    _SUCCESS_STATUSES = ("success", "prompt", "submitted")

    def __init__(
        self,
        log_level: Union[LogLevel, str] = LogLevel.INFO,
        enable_file: bool = False,
        enable_console: bool = True,
        log_file_path: Optional[str] = None,
        max_file_size_mb: int = 10,
        backup_count: int = 5
    ):
        """Initialize destinations and level.

        Args:
            log_level: Minimum level recorded (default: INFO)
            enable_file: Write entries to log_file_path
            enable_console: Print entries to stderr
            log_file_path: Path to log file (required if enable_file=True)
            max_file_size_mb: Size before rotation
            backup_count: Rotated files kept

        Raises:
            ValueError: enable_file is set without a log_file_path
        """
        self.log_level = log_level.value if isinstance(log_level, LogLevel) else log_level
        self.enable_file = enable_file
        self.enable_console = enable_console
        self.log_file_path = log_file_path

        self._lock = Lock()
        self._buffer: deque = deque(maxlen=BUFFER_SIZE)

        self._file_handler: Optional[FileHandler] = None
        if self.enable_file:
            if not log_file_path:
                raise ValueError("log_file_path required when enable_file=True")
            try:
                self._file_handler = FileHandler(
                    log_file_path=log_file_path,
                    max_size_mb=max_file_size_mb,
                    backup_count=backup_count
                )
            except OSError as e:
                print(f"WARNING: Failed to initialize file logging: {e}", file=sys.stderr)
                self._file_handler = None

    @classmethod
    def from_config(cls, config: LoggingConfig) -> 'CommunicationLogger':
        """Build a logger from the logging configuration section.

        When file logging is requested without a path, a timestamped file
        under ~/.sms-sender/logs is used.
        """
        log_file_path = config.log_file_path
        if config.log_to_file and not log_file_path:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            log_file_path = str(DEFAULT_LOG_DIR / f"comm_{timestamp}.log")

        return cls(
            log_level=config.level,
            enable_file=config.log_to_file,
            enable_console=config.log_to_console,
            log_file_path=log_file_path,
            max_file_size_mb=config.max_file_size_mb,
            backup_count=config.backup_count
        )

    def log(self, entry: LogEntry) -> None:
        """Record an entry on every enabled destination if its level passes."""
        if not self._should_log(entry.level):
            return

        with self._lock:
            self._buffer.append(entry)

            if self._file_handler:
                self._file_handler.write(entry)

            if self.enable_console:
                self._write_to_console(entry)

    def _should_log(self, entry_level: str) -> bool:
        entry_priority = self._LEVEL_PRIORITY.get(entry_level, 0)
        current_priority = self._LEVEL_PRIORITY.get(self.log_level, 0)
        return entry_priority >= current_priority

    def _write_to_console(self, entry: LogEntry) -> None:
        try:
            print(entry.to_string(), file=sys.stderr)
        except (OSError, ValueError):
            # stderr closed or detached
            pass

    def log_command(self, port: str, command: str, source: str = "SmsTransport") -> None:
        """Record a command written to the modem."""
        self.log(LogEntry(
            timestamp=datetime.now(),
            level="INFO",
            source=source,
            message="Sending command",
            port=port,
            command=command
        ))

    def log_response(
        self,
        port: str,
        response: str,
        status: str,
        execution_time: float,
        command: Optional[str] = None
    ) -> None:
        """Record a classified reply.

        The entry level follows the status: success, prompt and submitted are
        INFO, error is ERROR and anything else (timeout, cancelled) WARNING.
        """
        if status in self._SUCCESS_STATUSES:
            level = "INFO"
        elif status == "error":
            level = "ERROR"
        else:
            level = "WARNING"

        self.log(LogEntry(
            timestamp=datetime.now(),
            level=level,
            source="SmsTransport",
            message="Received response",
            port=port,
            command=command,
            response=response,
            status=status,
            execution_time=execution_time
        ))

    def log_port_event(
        self,
        event: str,
        port: str,
        details: Optional[Dict[str, Any]] = None,
        level: str = "INFO"
    ) -> None:
        """Record a serial port event such as "Port opened"."""
        self.log(LogEntry(
            timestamp=datetime.now(),
            level=level,
            source="SerialHandler",
            message=event,
            port=port,
            details=details
        ))

    def log_state_change(self, port: str, old_state: str, new_state: str) -> None:
        """Record a transport state transition."""
        self.log(LogEntry(
            timestamp=datetime.now(),
            level="INFO",
            source="SmsTransport",
            message=f"State {old_state} -> {new_state}",
            port=port,
            state=new_state
        ))

    def log_trace(
        self,
        source: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        port: Optional[str] = None
    ) -> None:
        """Record a DEBUG trace (raw chunks, intermediate classifications)."""
        self.log(LogEntry(
            timestamp=datetime.now(),
            level="DEBUG",
            source=source,
            message=message,
            details=details,
            port=port
        ))

    def log_error(
        self,
        source: str,
        error: str,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        self.log(LogEntry(
            timestamp=datetime.now(),
            level="ERROR",
            source=source,
            message="Error occurred",
            error=error,
            details=details
        ))

    def set_level(self, level: Union[LogLevel, str]) -> None:
        self.log_level = level.value if isinstance(level, LogLevel) else level

    def get_entries(self, limit: Optional[int] = None) -> List[LogEntry]:
        """Return buffered entries, oldest first; ``limit`` keeps the newest."""
        with self._lock:
            entries = list(self._buffer)
            if limit:
                entries = entries[-limit:]
            return entries

    def clear_buffer(self) -> None:
        """Empty the in-memory buffer. File output is unaffected."""
        with self._lock:
            self._buffer.clear()

    def flush(self) -> None:
        if self._file_handler:
            self._file_handler.flush()

    def close(self) -> None:
        """Close the log file, if any."""
        if self._file_handler:
            self._file_handler.close()
            self._file_handler = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
