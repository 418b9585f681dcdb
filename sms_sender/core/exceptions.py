"""Custom exception hierarchy for the PDU SMS sender.

This module defines every error raised by the PDU codec and the AT transport,
grouped into input validation errors, serial/protocol errors and internal
invariant violations.
"""

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from sms_sender.core.command_response import CommandResponse


class SmsSenderError(Exception):
    """Base exception for all SMS sender errors.

    All custom exceptions inherit from this base class to allow
    catching all tool-specific errors with a single except clause.
    """
    pass


class MessageValidationError(SmsSenderError, ValueError):
    """Caller supplied a number or text that cannot be encoded.

    Raised eagerly while building a PduMessage, before any I/O happens.
    """
    pass


class MissingTextError(MessageValidationError):
    """Message text is None (or blank where blank text is not allowed)."""

    def __init__(self, message: str = "A text must be specified"):
        super().__init__(message)


class TextTooLongError(MessageValidationError):
    """Text exceeds the limit of the requested message kind.

    Attributes:
        length: Actual text length in characters
        limit: Maximum allowed length in characters
    """

    def __init__(self, length: int, limit: int, message: Optional[str] = None):
        """Initialize TextTooLongError.

        Args:
            length: Actual text length
            limit: Maximum allowed length
            message: Optional override of the default description
        """
        super().__init__(message or f"Text length cannot be greater than {limit}")
        self.length = length
        self.limit = limit

    def __str__(self) -> str:
        """Format error message with length context."""
        return f"{super().__str__()} (length: {self.length}, limit: {self.limit})"


class TextTooShortError(MessageValidationError):
    """Text is short enough to fit in a single message and cannot be split."""
    pass


class InvalidCharacterError(MessageValidationError):
    """Text contains a character outside the GSM-7 default alphabet.

    Attributes:
        character: The offending character
        position: Zero-based index of the character in the text
    """

    def __init__(self, character: str, position: int):
        super().__init__(f"An invalid character was found: {character!r}")
        self.character = character
        self.position = position

    def __str__(self) -> str:
        return f"{super().__str__()} (position: {self.position})"


class InvalidNumberError(MessageValidationError):
    """Destination number is not a usable international number.

    Attributes:
        number: The rejected number as supplied by the caller
    """

    def __init__(self, message: str, number: object):
        super().__init__(message)
        self.number = number

    def __str__(self) -> str:
        return f"{super().__str__()} (number: {self.number!r})"


class InvalidPortError(SmsSenderError, ValueError):
    """Serial port identifier is missing or malformed.

    Attributes:
        port: The rejected port identifier
    """

    def __init__(self, port: object):
        super().__init__("A port name must be specified")
        self.port = port


class MessageKindError(SmsSenderError, AttributeError):
    """Concatenation-only field requested on a simple message."""
    pass


class InvariantViolationError(SmsSenderError, AssertionError):
    """Internal state that the public constructors make unreachable.

    Seeing this exception means there is a bug in the codec, not in the
    caller's input.
    """
    pass


class SerialPortError(SmsSenderError):
    """Serial port communication error.

    Raised when serial port operations fail (open, read, write).
    Captures port identifier and underlying OS error for diagnostics.

    Attributes:
        port: Serial port identifier (e.g., '/dev/ttyUSB0', 'COM3')
        os_error: Original exception from pyserial or OS (if available)
    """

    def __init__(self, message: str, port: str, os_error: Optional[Exception] = None):
        """Initialize SerialPortError.

        Args:
            message: Human-readable error description
            port: Serial port identifier
            os_error: Original exception from pyserial/OS
        """
        super().__init__(message)
        self.port = port
        self.os_error = os_error

    def __str__(self) -> str:
        """Format error message with port context."""
        base_msg = super().__str__()
        if self.os_error:
            return f"{base_msg} (port: {self.port}, cause: {self.os_error})"
        return f"{base_msg} (port: {self.port})"


class SerialPortBusyError(SerialPortError):
    """Port is already in use by another process."""
    pass


class ConnectionTimeoutError(SerialPortError):
    """Serial port could not be opened within the driver's timeout."""
    pass


class ATCommandError(SmsSenderError):
    """Modem answered an AT command with an error marker.

    The whole send operation is aborted when this is raised; messages
    queued after the failing one are never attempted.

    Attributes:
        command: AT command string (or PDU) that failed
        response: CommandResponse with the raw reply and parsed error code
    """

    def __init__(self, message: str, command: str, response: 'CommandResponse'):
        """Initialize ATCommandError.

        Args:
            message: Human-readable error description
            command: AT command string that failed
            response: CommandResponse with error details
        """
        super().__init__(message)
        self.command = command
        self.response = response

    def __str__(self) -> str:
        """Format error message with command context."""
        base_msg = super().__str__()
        detail = f"command: {self.command}, status: {self.response.status.value}"
        if self.response.error_code:
            detail += f", code: {self.response.error_code}"
        return f"{base_msg} ({detail})"


class ResponseTimeoutError(SmsSenderError):
    """No recognizable reply arrived within the configured response timeout.

    Attributes:
        command: Command that was waiting for a reply
        timeout: Timeout in seconds that elapsed
        partial_response: Text received before giving up
    """

    def __init__(self, command: str, timeout: float, partial_response: str = ""):
        super().__init__(f"No response after {timeout:.2f}s")
        self.command = command
        self.timeout = timeout
        self.partial_response = partial_response

    def __str__(self) -> str:
        return f"{super().__str__()} (command: {self.command})"


class SendCancelledError(SmsSenderError):
    """Send operation was cancelled while waiting for the modem.

    Attributes:
        command: Command that was waiting for a reply when cancelled
    """

    def __init__(self, command: str):
        super().__init__(f"Send cancelled while waiting for reply to {command}")
        self.command = command
