"""Destination address encoding for SMS-SUBMIT PDUs.

Numbers are always sent as international numbers (type-of-address 0x91)
in semi-octet ("reverse nibble") order.
"""

from typing import Optional, Union

from sms_sender.core.exceptions import InvalidNumberError

INTERNATIONAL_NUMBER_TYPE = "91"

# GSM 03.40 allows at most 20 digits in an address field
MAX_NUMBER_DIGITS = 20

FILLER_NIBBLE = "F"

Number = Union[int, str]


def normalize_number(number: Number) -> str:
    """Return the digits of a number that already includes its country code.

    A leading ``+`` is accepted and dropped. Anything else that is not an
    ASCII digit is rejected.

    Raises:
        InvalidNumberError: number is empty, negative, non-numeric or too long
    """
    if number is None or isinstance(number, bool):
        raise InvalidNumberError("A number must be specified", number)

    if isinstance(number, int):
        if number < 0:
            raise InvalidNumberError("Number cannot be negative", number)
        digits = str(number)
    elif isinstance(number, str):
        digits = number.strip()
        if digits.startswith("+"):
            digits = digits[1:]
    else:
        raise InvalidNumberError(
            f"Number must be int or str, got {type(number).__name__}", number
        )

    if not digits:
        raise InvalidNumberError("A number must be specified", number)
    if not (digits.isascii() and digits.isdigit()):
        raise InvalidNumberError("Number must contain only digits", number)
    if len(digits) > MAX_NUMBER_DIGITS:
        raise InvalidNumberError(
            f"Number cannot have more than {MAX_NUMBER_DIGITS} digits", number
        )
    return digits


def compose_number(country_code: Number, local_number: Number) -> str:
    """Prefix a local number with its country code.

    Example:
        >>> compose_number(1, 3052345678)
        '13052345678'
    """
    return normalize_number(
        normalize_number(country_code) + normalize_number(local_number)
    )


def swap_nibbles(digits: str) -> str:
    """Swap every adjacent pair of characters ("1234" -> "2143")."""
    return "".join(digits[i + 1] + digits[i] for i in range(0, len(digits), 2))


def encode_number(number: Number) -> str:
    """Encode a destination address field.

    Format: two hex digits with the digit count, the international number
    indicator ``91``, then the digits in swapped pairs, padded with ``F``
    when the count is odd.

    Example:
        >>> encode_number(13052345678)
        '0B913150325476F8'
    """
    digits = normalize_number(number)
    padded = digits + FILLER_NIBBLE if len(digits) % 2 else digits
    return f"{len(digits):02X}{INTERNATIONAL_NUMBER_TYPE}{swap_nibbles(padded)}"


def decode_number(encoded: str, expected_type: Optional[str] = INTERNATIONAL_NUMBER_TYPE) -> str:
    """Decode an address field produced by encode_number.

    Args:
        encoded: Hex address field (length, type, swapped digits)
        expected_type: Type-of-address to insist on, or None to accept any

    Returns:
        The original digit string

    Raises:
        ValueError: field is truncated or has an unexpected type
    """
    encoded = encoded.upper()
    if len(encoded) < 4:
        raise ValueError(f"Address field too short: {encoded!r}")

    digit_count = int(encoded[:2], 16)
    address_type = encoded[2:4]
    if expected_type is not None and address_type != expected_type:
        raise ValueError(f"Unexpected type of address {address_type}")

    field_length = digit_count + digit_count % 2
    swapped = encoded[4:4 + field_length]
    if len(swapped) != field_length:
        raise ValueError(f"Address field truncated: {encoded!r}")

    return swap_nibbles(swapped)[:digit_count]
