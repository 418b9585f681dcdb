"""PDU codec: GSM-7 packing, address encoding and SMS-SUBMIT messages.

Pure, stateless transformations with no I/O.
"""

from sms_sender.pdu.gsm7 import (
    GSM7_ALPHABET,
    to_septets,
    pack_septets,
    unpack_septets,
    encode_text,
    encode_text_with_padding,
    decode_text,
)
from sms_sender.pdu.number import (
    normalize_number,
    compose_number,
    encode_number,
    decode_number,
)
from sms_sender.pdu.message import (
    HeaderKind,
    ConcatenationInfo,
    PduMessage,
    split_concatenated,
    build_messages,
    MAX_SMS_TEXT_LENGTH,
    MAX_CONCATENATED_TEXT_LENGTH,
    MAX_CONCATENATED_PARTS,
)

__all__ = [
    'GSM7_ALPHABET',
    'to_septets',
    'pack_septets',
    'unpack_septets',
    'encode_text',
    'encode_text_with_padding',
    'decode_text',
    'normalize_number',
    'compose_number',
    'encode_number',
    'decode_number',
    'HeaderKind',
    'ConcatenationInfo',
    'PduMessage',
    'split_concatenated',
    'build_messages',
    'MAX_SMS_TEXT_LENGTH',
    'MAX_CONCATENATED_TEXT_LENGTH',
    'MAX_CONCATENATED_PARTS',
]
