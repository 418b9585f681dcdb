"""SMS-SUBMIT PDU message model.

This module defines the immutable PduMessage value and the helpers that turn
a destination number and text into one or more wire-ready messages. Texts
longer than a single SMS are split into concatenated parts carrying an 8-bit
reference user data header (IEI 0x00).

Example:
    >>> message = PduMessage.simple("13052345678", "Hello World!")
    >>> message.to_pdu()[:22]
    '0001000B913150325476F8'
    >>> message.length
    24
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Optional
import logging
import random

from sms_sender.core.exceptions import (
    InvariantViolationError,
    MessageKindError,
    MessageValidationError,
    MissingTextError,
    TextTooLongError,
    TextTooShortError,
)
from sms_sender.pdu import gsm7
from sms_sender.pdu.number import Number, encode_number, normalize_number

logger = logging.getLogger(__name__)

MAX_SMS_TEXT_LENGTH = 160
MAX_CONCATENATED_TEXT_LENGTH = 153
MAX_CONCATENATED_PARTS = 255
MAX_REFERENCE_NUMBER = 255

PDU_HEADER_SIMPLE = 0x01
PDU_HEADER_WITH_USER_DATA_HEADER = 0x41  # SMS-SUBMIT with UDHI set

DEFAULT_SMSC_LENGTH = 0x00  # use the SMSC stored in the modem
DEFAULT_MESSAGE_REFERENCE = 0x00
DEFAULT_PROTOCOL_IDENTIFIER = 0x00
DEFAULT_DATA_CODING_SCHEME = 0x00  # GSM-7 default alphabet

# UDHL=05, IEI=00 (concatenated, 8-bit reference), IEDL=03
CONCATENATION_HEADER_PREFIX = "050003"

# 6 header octets plus the fill bit occupy 7 septets of user data
USER_DATA_HEADER_SEPTETS = 7


class HeaderKind(Enum):
    """Kind of SMS-SUBMIT message.

    - SIMPLE: single message, no user data header
    - CONCATENATED_PART: one part of a long message, with user data header
    """
    SIMPLE = "simple"
    CONCATENATED_PART = "concatenated_part"


@dataclass(frozen=True)
class ConcatenationInfo:
    """Concatenation header values of one message part.

    Attributes:
        reference: Reference number shared by all parts of one long message
        part_number: 1-based index of this part
        total_parts: Number of parts of the long message
    """
    reference: int
    part_number: int
    total_parts: int

    def __post_init__(self):
        if not 0 <= self.reference <= MAX_REFERENCE_NUMBER:
            raise MessageValidationError(
                f"Reference number must be in range 0-{MAX_REFERENCE_NUMBER}, "
                f"got {self.reference}"
            )
        if not 1 <= self.total_parts <= MAX_CONCATENATED_PARTS:
            raise MessageValidationError(
                f"Total parts must be in range 1-{MAX_CONCATENATED_PARTS}, "
                f"got {self.total_parts}"
            )
        if not 1 <= self.part_number <= self.total_parts:
            raise MessageValidationError(
                f"Part number must be in range 1-{self.total_parts}, "
                f"got {self.part_number}"
            )

    def to_hex(self) -> str:
        """Render the complete 6-octet user data header."""
        return (f"{CONCATENATION_HEADER_PREFIX}{self.reference:02X}"
                f"{self.total_parts:02X}{self.part_number:02X}")


@dataclass(frozen=True)
class PduMessage:
    """Immutable, wire-ready SMS-SUBMIT message.

    Every field is validated and encoded at construction, so a PduMessage
    that exists can always be serialized. Prefer the ``simple`` and
    ``concatenated_part`` constructors; direct construction runs the same
    checks.

    Attributes:
        number: Destination digits including country code
        text: Message text (GSM-7 default alphabet only)
        kind: HeaderKind of the message
        concatenation: Part metadata, present only for CONCATENATED_PART
        message_reference: TP-MR byte (0, or part_number - 1 for parts)
        encoded_number: Destination address field as hex
        encoded_text: Packed user data (without header) as hex

    Raises:
        MissingTextError: text is None
        TextTooLongError: text exceeds the limit of its kind
        InvalidCharacterError: text has a character outside GSM-7
        InvalidNumberError: number is not a valid digit string
        MessageValidationError: kind and concatenation data disagree
    """

    number: str
    text: str
    kind: HeaderKind = HeaderKind.SIMPLE
    concatenation: Optional[ConcatenationInfo] = None
    smsc_length: int = field(default=DEFAULT_SMSC_LENGTH, init=False)
    protocol_identifier: int = field(default=DEFAULT_PROTOCOL_IDENTIFIER, init=False)
    data_coding_scheme: int = field(default=DEFAULT_DATA_CODING_SCHEME, init=False)
    message_reference: int = field(default=DEFAULT_MESSAGE_REFERENCE, init=False)
    encoded_number: str = field(default="", init=False, repr=False)
    encoded_text: str = field(default="", init=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, 'number', normalize_number(self.number))
        object.__setattr__(self, 'encoded_number', encode_number(self.number))

        if self.text is None:
            raise MissingTextError()
        if not isinstance(self.kind, HeaderKind):
            raise MessageValidationError(f"Unknown message kind: {self.kind!r}")

        if self.kind is HeaderKind.SIMPLE:
            if self.concatenation is not None:
                raise MessageValidationError(
                    "Simple messages cannot carry concatenation data"
                )
            self._check_length(MAX_SMS_TEXT_LENGTH)
            encoded_text = gsm7.encode_text(self.text)
            message_reference = DEFAULT_MESSAGE_REFERENCE
        elif self.kind is HeaderKind.CONCATENATED_PART:
            if self.concatenation is None:
                raise MessageValidationError(
                    "Concatenated parts require concatenation data"
                )
            self._check_length(MAX_CONCATENATED_TEXT_LENGTH)
            encoded_text = gsm7.encode_text_with_padding(self.text)
            # Each part of the same long message needs its own TP-MR
            message_reference = (
                DEFAULT_MESSAGE_REFERENCE + self.concatenation.part_number - 1
            ) & 0xFF
        else:
            raise InvariantViolationError(f"Invalid PDU header kind: {self.kind!r}")

        object.__setattr__(self, 'encoded_text', encoded_text)
        object.__setattr__(self, 'message_reference', message_reference)

    def _check_length(self, limit: int) -> None:
        if len(self.text) > limit:
            raise TextTooLongError(len(self.text), limit)

    @classmethod
    def simple(cls, number: Number, text: str) -> 'PduMessage':
        """Build a single message of at most 160 characters."""
        return cls(number=number, text=text, kind=HeaderKind.SIMPLE)

    @classmethod
    def concatenated_part(cls,
                          number: Number,
                          text: str,
                          reference: int,
                          part_number: int,
                          total_parts: int) -> 'PduMessage':
        """Build one part (at most 153 characters) of a long message."""
        return cls(
            number=number,
            text=text,
            kind=HeaderKind.CONCATENATED_PART,
            concatenation=ConcatenationInfo(reference, part_number, total_parts)
        )

    @property
    def is_concatenated(self) -> bool:
        return self.kind is HeaderKind.CONCATENATED_PART

    def _require_concatenation(self) -> ConcatenationInfo:
        if self.concatenation is None:
            raise MessageKindError(
                "Concatenation fields are only available on concatenated parts"
            )
        return self.concatenation

    @property
    def reference_number(self) -> int:
        """Concatenation reference number (parts only)."""
        return self._require_concatenation().reference

    @property
    def part_number(self) -> int:
        """1-based part index (parts only)."""
        return self._require_concatenation().part_number

    @property
    def total_parts(self) -> int:
        """Total part count of the long message (parts only)."""
        return self._require_concatenation().total_parts

    @property
    def pdu_header(self) -> int:
        """First octet of the SMS-SUBMIT TPDU."""
        if self.is_concatenated:
            return PDU_HEADER_WITH_USER_DATA_HEADER
        return PDU_HEADER_SIMPLE

    @property
    def user_data_length(self) -> int:
        """TP-UDL in septets, including the header septets for parts."""
        if self.is_concatenated:
            return USER_DATA_HEADER_SEPTETS + len(self.text)
        return len(self.text)

    @property
    def length(self) -> int:
        """Octet count announced with AT+CMGS (excludes the SMSC field)."""
        return len(self.to_pdu()) // 2 - 1

    def to_pdu(self) -> str:
        """Serialize to the uppercase hex string written to the modem.

        Layout: SMSC length, PDU header, message reference, destination
        address, protocol identifier, data coding scheme, user data length,
        [concatenation header], packed text.
        """
        prefix = (
            f"{self.smsc_length:02X}"
            f"{self.pdu_header:02X}"
            f"{self.message_reference:02X}"
            f"{self.encoded_number}"
            f"{self.protocol_identifier:02X}"
            f"{self.data_coding_scheme:02X}"
            f"{self.user_data_length:02X}"
        )
        if self.kind is HeaderKind.SIMPLE:
            return prefix + self.encoded_text
        if self.kind is HeaderKind.CONCATENATED_PART:
            return prefix + self._require_concatenation().to_hex() + self.encoded_text
        raise InvariantViolationError(f"Invalid PDU header kind: {self.kind!r}")

    def __str__(self) -> str:
        return self.to_pdu()


def part_count(text_length: int) -> int:
    """Number of concatenated parts needed for a text of the given length."""
    return -(-text_length // MAX_CONCATENATED_TEXT_LENGTH)


def split_concatenated(number: Number,
                       text: str,
                       reference: Optional[int] = None) -> Iterator[PduMessage]:
    """Split a long text into concatenated parts.

    All validation happens before the iterator is returned, so a bad
    character anywhere in the text is reported before the first part is
    sent. Parts are produced lazily, in order.

    Args:
        number: Destination number including country code
        text: Text longer than 160 characters
        reference: Shared reference number; random 0-255 when omitted

    Returns:
        Iterator over PduMessage parts numbered 1..total

    Raises:
        MissingTextError: text is None
        TextTooShortError: text fits in a single message
        TextTooLongError: text needs more than 255 parts
        InvalidCharacterError: text has a character outside GSM-7
        InvalidNumberError: number is not a valid digit string
        MessageValidationError: reference is outside 0-255
    """
    if text is None:
        raise MissingTextError()
    if len(text) <= MAX_SMS_TEXT_LENGTH:
        raise TextTooShortError(
            f"The text length must be longer than {MAX_SMS_TEXT_LENGTH}"
        )
    total_parts = part_count(len(text))
    if total_parts > MAX_CONCATENATED_PARTS:
        raise TextTooLongError(
            len(text),
            MAX_CONCATENATED_PARTS * MAX_CONCATENATED_TEXT_LENGTH,
            "The text length is too big"
        )
    gsm7.validate_text(text)
    number = normalize_number(number)

    if reference is None:
        reference = random.randint(0, MAX_REFERENCE_NUMBER)
    elif not 0 <= reference <= MAX_REFERENCE_NUMBER:
        raise MessageValidationError(
            f"Reference number must be in range 0-{MAX_REFERENCE_NUMBER}, got {reference}"
        )

    logger.debug("Splitting %d characters into %d parts (reference %d)",
                 len(text), total_parts, reference)
    return _generate_parts(number, text, reference, total_parts)


def _generate_parts(number: str,
                    text: str,
                    reference: int,
                    total_parts: int) -> Iterator[PduMessage]:
    for index, start in enumerate(range(0, len(text), MAX_CONCATENATED_TEXT_LENGTH), 1):
        yield PduMessage.concatenated_part(
            number,
            text[start:start + MAX_CONCATENATED_TEXT_LENGTH],
            reference,
            index,
            total_parts
        )


def build_messages(number: Number,
                   text: str,
                   reference: Optional[int] = None) -> Iterable[PduMessage]:
    """Build the messages needed to deliver text.

    Texts of up to 160 characters become one simple message; longer texts
    become concatenated parts (see split_concatenated).
    """
    if text is None:
        raise MissingTextError()
    if len(text) <= MAX_SMS_TEXT_LENGTH:
        return [PduMessage.simple(number, text)]
    return split_concatenated(number, text, reference)
