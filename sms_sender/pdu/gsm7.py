"""GSM 03.38 default alphabet and 7-bit packing.

Converts text to septets (7-bit alphabet indices) and packs them into an
octet stream for the TP-User-Data field of an SMS-SUBMIT PDU. Packing and
unpacking are pure functions over sequences; nothing is mutated in place.
"""

from typing import List, Sequence
import logging

from sms_sender.core.exceptions import InvalidCharacterError, MissingTextError

logger = logging.getLogger(__name__)

# Index in this string is the septet value. Position 27 is the escape
# symbol; the extension table it introduces is not supported.
GSM7_ALPHABET = (
    "@£$¥èéùìòÇ\nØø\rÅåΔ_ΦΓΛΩΠΨΣΘΞ\x1bÆæßÉ !\"#¤%&'()*+,-./0123456789:;<=>?"
    "¡ABCDEFGHIJKLMNOPQRSTUVWXYZÄÖÑÜ§¿abcdefghijklmnopqrstuvwxyzäöñüà"
)

_SEPTET_BY_CHAR = {char: index for index, char in enumerate(GSM7_ALPHABET)}

SEPTET_MASK = 0x7F


def to_septets(text: str) -> List[int]:
    """Map text to GSM-7 alphabet indices.

    Args:
        text: Message text

    Returns:
        One septet value (0-127) per character

    Raises:
        MissingTextError: text is None
        InvalidCharacterError: a character is not in the default alphabet

    Example:
        >>> to_septets("@A")
        [0, 65]
    """
    if text is None:
        raise MissingTextError()

    septets = []
    for position, char in enumerate(text):
        septet = _SEPTET_BY_CHAR.get(char)
        if septet is None:
            raise InvalidCharacterError(char, position)
        septets.append(septet)
    return septets


def validate_text(text: str) -> None:
    """Raise if text cannot be represented in the GSM-7 default alphabet."""
    to_septets(text)


def from_septets(septets: Sequence[int]) -> str:
    """Map GSM-7 alphabet indices back to text."""
    return "".join(GSM7_ALPHABET[septet & SEPTET_MASK] for septet in septets)


def pack_septets(septets: Sequence[int], padding_bits: int = 0) -> bytes:
    """Pack 7-bit values into octets.

    Septet ``i`` starts at bit ``padding_bits + 7 * i`` of a little-endian bit
    stream, so octet ``k`` holds the low bits of one septet and the high bits
    of the previous one. Leading padding bits are zero.

    Args:
        septets: Septet values (only the low 7 bits are used)
        padding_bits: Fill bits placed before the first septet (0-6)

    Returns:
        ``ceil((padding_bits + 7 * len(septets)) / 8)`` octets; an empty
        sequence packs to no octets

    Example:
        >>> pack_septets(to_septets("hello")).hex().upper()
        'E8329BFD06'
    """
    if not 0 <= padding_bits < 7:
        raise ValueError(f"padding_bits must be in range 0-6, got {padding_bits}")

    octets = bytearray()
    accumulator = 0
    bit_count = padding_bits
    for septet in septets:
        accumulator |= (septet & SEPTET_MASK) << bit_count
        bit_count += 7
        while bit_count >= 8:
            octets.append(accumulator & 0xFF)
            accumulator >>= 8
            bit_count -= 8
    if bit_count > 0 and septets:
        octets.append(accumulator & 0xFF)
    return bytes(octets)


def unpack_septets(data: bytes, count: int, padding_bits: int = 0) -> List[int]:
    """Reverse of pack_septets.

    Args:
        data: Packed octets
        count: Number of septets to extract (the user-data length)
        padding_bits: Fill bits to skip before the first septet

    Returns:
        ``count`` septet values

    Raises:
        ValueError: data is too short to hold ``count`` septets
    """
    needed = padding_bits + 7 * count
    if count and needed > 8 * len(data):
        raise ValueError(
            f"{len(data)} octets cannot hold {count} septets "
            f"with {padding_bits} padding bits"
        )
    stream = int.from_bytes(data, "little")
    return [
        (stream >> (padding_bits + 7 * index)) & SEPTET_MASK
        for index in range(count)
    ]


def encode_text(text: str) -> str:
    """Encode text as packed GSM-7, rendered as uppercase hex."""
    return pack_septets(to_septets(text)).hex().upper()


def encode_text_with_padding(text: str) -> str:
    """Encode text packed after a single fill bit.

    Used behind the 6-octet concatenation header: 48 header bits plus one
    fill bit make the text start on a septet boundary.
    """
    return pack_septets(to_septets(text), padding_bits=1).hex().upper()


def decode_text(encoded: str, count: int, padding_bits: int = 0) -> str:
    """Decode hex-encoded packed GSM-7 back to text.

    Args:
        encoded: Hex string produced by encode_text / encode_text_with_padding
        count: Number of characters encoded
        padding_bits: 1 for text that followed a concatenation header

    Returns:
        Decoded text
    """
    septets = unpack_septets(bytes.fromhex(encoded), count, padding_bits)
    logger.debug("Decoded %d septets from %d hex digits", count, len(encoded))
    return from_septets(septets)
