"""Log entry model for the communication logger.

A LogEntry records one event on the modem link: a command written, a reply
classified, a port opened or closed, a transport state change, or an error.
"""

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Dict, Any, Optional
import json


@dataclass(frozen=True)
class LogEntry:
    """Immutable record of a single link event.

    Attributes:
        timestamp: When the event occurred
        level: DEBUG, INFO, WARNING or ERROR
        source: Component that produced the entry (SerialHandler, SmsTransport)
        message: Human-readable description
        details: Additional structured data
        port: Serial port name
        command: Command written, if any
        response: Reply text, if any
        status: Reply classification (ResponseStatus value)
        execution_time: Seconds from write to classification
        state: Transport state after a state change
        error: Error description

    Example:
        >>> entry = LogEntry(
        ...     timestamp=datetime(2026, 1, 12, 10, 30, 15, 234000),
        ...     level="INFO",
        ...     source="SmsTransport",
        ...     message="Sending command",
        ...     port="/dev/ttyUSB0",
        ...     command="AT+CMGF=0"
        ... )
        >>> entry.to_string()
        '2026-01-12 10:30:15.234 | INFO    | SmsTransport    | Sending command | PORT: /dev/ttyUSB0 | CMD: AT+CMGF=0'
    """

    timestamp: datetime
    level: str
    source: str
    message: str
    details: Optional[Dict[str, Any]] = None

    port: Optional[str] = None
    command: Optional[str] = None
    response: Optional[str] = None
    status: Optional[str] = None
    execution_time: Optional[float] = None
    state: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary with an ISO 8601 timestamp."""
        data = asdict(self)
        data['timestamp'] = self.timestamp.isoformat()
        return data

    def to_string(self) -> str:
        """Format as "YYYY-MM-DD HH:MM:SS.mmm | LEVEL | SOURCE | MESSAGE [| extras]"."""
        timestamp_str = self.timestamp.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        parts = [timestamp_str, f"{self.level:7}", f"{self.source:15}", self.message]

        if self.port:
            parts.append(f"PORT: {self.port}")
        if self.command:
            parts.append(f"CMD: {self.command}")
        if self.response:
            parts.append(f"RESP: {self.response!r}")
        if self.status:
            parts.append(f"STATUS: {self.status}")
        if self.state:
            parts.append(f"STATE: {self.state}")
        if self.execution_time is not None:
            parts.append(f"TIME: {self.execution_time:.3f}s")
        if self.error:
            parts.append(f"ERROR: {self.error}")

        return " | ".join(parts)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LogEntry':
        """Create a LogEntry from a dictionary produced by to_dict().

        Raises:
            KeyError: A required field (timestamp, level, source, message) is missing
        """
        timestamp = data['timestamp']
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)

        return cls(
            timestamp=timestamp,
            level=data['level'],
            source=data['source'],
            message=data['message'],
            details=data.get('details'),
            port=data.get('port'),
            command=data.get('command'),
            response=data.get('response'),
            status=data.get('status'),
            execution_time=data.get('execution_time'),
            state=data.get('state'),
            error=data.get('error')
        )

    @classmethod
    def from_json(cls, json_str: str) -> 'LogEntry':
        return cls.from_dict(json.loads(json_str))
