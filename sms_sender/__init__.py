"""PDU SMS Sender - GSM-7 PDU encoding and AT command submission.

This package provides:
- GSM-7 septet packing and SMS-SUBMIT PDU construction
- Splitting of long texts into concatenated parts
- Submission of PDUs through an AT modem on a serial port
"""

# Core must load before the codec; the codec imports core.exceptions
from sms_sender.core import (
    CommandResponse,
    ResponseStatus,
    SerialHandler,
    SmsTransport,
    TransportState,
    SmsSenderError,
    MessageValidationError,
    SerialPortError,
    ATCommandError,
    ResponseTimeoutError,
    SendCancelledError,
)

from sms_sender.pdu import (
    PduMessage,
    HeaderKind,
    ConcatenationInfo,
    split_concatenated,
    build_messages,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "CommandResponse",
    "ResponseStatus",
    "SerialHandler",
    "SmsTransport",
    "TransportState",
    # Codec
    "PduMessage",
    "HeaderKind",
    "ConcatenationInfo",
    "split_concatenated",
    "build_messages",
    # Exceptions
    "SmsSenderError",
    "MessageValidationError",
    "SerialPortError",
    "ATCommandError",
    "ResponseTimeoutError",
    "SendCancelledError",
]
