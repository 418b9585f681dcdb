"""Core transport components.

This package provides the serial I/O layer, the AT command transport that
submits PDU messages, reply classification and the exception hierarchy.
"""

from sms_sender.core.exceptions import (
    SmsSenderError,
    MessageValidationError,
    MissingTextError,
    TextTooLongError,
    TextTooShortError,
    InvalidCharacterError,
    InvalidNumberError,
    InvalidPortError,
    MessageKindError,
    InvariantViolationError,
    SerialPortError,
    SerialPortBusyError,
    ConnectionTimeoutError,
    ATCommandError,
    ResponseTimeoutError,
    SendCancelledError
)
from sms_sender.core.command_response import CommandResponse, ResponseStatus, classify_response
from sms_sender.core.serial_handler import SerialHandler
from sms_sender.core.at_transport import SmsTransport, TransportState

__all__ = [
    'CommandResponse',
    'ResponseStatus',
    'classify_response',
    'SerialHandler',
    'SmsTransport',
    'TransportState',
    'SmsSenderError',
    'MessageValidationError',
    'MissingTextError',
    'TextTooLongError',
    'TextTooShortError',
    'InvalidCharacterError',
    'InvalidNumberError',
    'InvalidPortError',
    'MessageKindError',
    'InvariantViolationError',
    'SerialPortError',
    'SerialPortBusyError',
    'ConnectionTimeoutError',
    'ATCommandError',
    'ResponseTimeoutError',
    'SendCancelledError',
]
