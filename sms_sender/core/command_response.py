"""AT command response data model and classification.

This module defines the immutable CommandResponse dataclass, the
ResponseStatus enum and the substring classifier used after every write.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple
import re
import time


class ResponseStatus(Enum):
    """Classification of a modem reply.

    - SUCCESS: generic acknowledgement (``OK``)
    - PROMPT: modem is ready for message content (``>``)
    - SUBMITTED: message accepted for delivery (``+CMGS:``)
    - ERROR: any reply containing ``ERROR``
    - INCOMPLETE: none of the above yet; keep waiting
    """
    SUCCESS = "success"
    PROMPT = "prompt"
    SUBMITTED = "submitted"
    ERROR = "error"
    INCOMPLETE = "incomplete"


ERROR_MARKER = "ERROR"

# Marker each expected status is recognized by
STATUS_MARKERS: Dict[ResponseStatus, str] = {
    ResponseStatus.SUCCESS: "OK",
    ResponseStatus.PROMPT: ">",
    ResponseStatus.SUBMITTED: "+CMGS:",
}

_ERROR_CODE_PATTERN = re.compile(r'\+(CMS|CME) ERROR:\s*(\S+)', re.IGNORECASE)
_MESSAGE_REFERENCE_PATTERN = re.compile(r'\+CMGS:\s*(\d+)', re.IGNORECASE)


def classify_response(response: str, expected: ResponseStatus) -> ResponseStatus:
    """Classify accumulated reply text for the step expecting ``expected``.

    An error marker anywhere wins; otherwise the expected step's marker is
    searched for. Matching is case-insensitive.

    Args:
        response: All text received for the current step so far
        expected: Status the current step is waiting for

    Returns:
        ERROR, ``expected`` or INCOMPLETE

    Example:
        >>> classify_response("\\r\\n> ", ResponseStatus.PROMPT)
        <ResponseStatus.PROMPT: 'prompt'>
        >>> classify_response("+CMS ERROR: 500", ResponseStatus.PROMPT)
        <ResponseStatus.ERROR: 'error'>
    """
    if expected not in STATUS_MARKERS:
        raise ValueError(f"No marker is defined for {expected}")

    text = response.upper()
    if ERROR_MARKER in text:
        return ResponseStatus.ERROR
    if STATUS_MARKERS[expected] in text:
        return expected
    return ResponseStatus.INCOMPLETE


def parse_error(response: str) -> Tuple[Optional[str], str]:
    """Extract the error code and description from an error reply.

    Returns:
        (code, message); code is None for a bare ``ERROR``
    """
    match = _ERROR_CODE_PATTERN.search(response)
    if match:
        kind, code = match.group(1).upper(), match.group(2)
        return code, f"{kind} Error: {code}"
    return None, "Generic ERROR response"


def parse_message_reference(response: str) -> Optional[int]:
    """Extract the reference the modem assigned in a ``+CMGS: <mr>`` reply."""
    match = _MESSAGE_REFERENCE_PATTERN.search(response)
    return int(match.group(1)) if match else None


def split_lines(response: str) -> List[str]:
    """Split raw reply text into stripped, non-blank lines."""
    return [line.strip() for line in response.splitlines() if line.strip()]


@dataclass(frozen=True)
class CommandResponse:
    """Immutable record of one command/reply exchange.

    Attributes:
        command: AT command sent (PDU hex for content submissions)
        raw_response: Non-blank reply lines
        status: Final classification
        execution_time: Seconds from write to classification
        error_code: Code from +CMS ERROR / +CME ERROR (if any)
        error_message: Human-readable error description (if any)
        modem_reference: Reference from a +CMGS reply (if any)
        timestamp: Unix timestamp when the response was created
    """

    command: str
    raw_response: List[str]
    status: ResponseStatus
    execution_time: float
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    modem_reference: Optional[int] = None
    timestamp: float = field(default_factory=time.time)

    @classmethod
    def from_reply(cls,
                   command: str,
                   response: str,
                   status: ResponseStatus,
                   execution_time: float) -> 'CommandResponse':
        """Build a CommandResponse from accumulated reply text."""
        error_code = None
        error_message = None
        if status == ResponseStatus.ERROR:
            error_code, error_message = parse_error(response)

        return cls(
            command=command,
            raw_response=split_lines(response),
            status=status,
            execution_time=execution_time,
            error_code=error_code,
            error_message=error_message,
            modem_reference=parse_message_reference(response)
        )

    def get_response_text(self) -> str:
        """Join response lines into single string."""
        return '\n'.join(self.raw_response)

    def is_successful(self) -> bool:
        """Check if the exchange ended without an error."""
        return self.status not in (ResponseStatus.ERROR, ResponseStatus.INCOMPLETE)

    def __str__(self) -> str:
        """Format response for display."""
        if self.status == ResponseStatus.ERROR:
            error_info = f" ({self.error_code}: {self.error_message})" if self.error_code else ""
            return f"[{self.status.value}] {self.command}{error_info} ({self.execution_time:.3f}s)"
        return (f"[{self.status.value}] {self.command} -> "
                f"{len(self.raw_response)} lines ({self.execution_time:.3f}s)")
