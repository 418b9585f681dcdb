"""Unit tests for PduMessage construction, serialization and splitting."""

import dataclasses

import pytest

from sms_sender.pdu.message import (
    HeaderKind,
    ConcatenationInfo,
    PduMessage,
    split_concatenated,
    build_messages,
    part_count,
    MAX_SMS_TEXT_LENGTH,
    MAX_CONCATENATED_TEXT_LENGTH
)
from sms_sender.pdu.gsm7 import decode_text
from sms_sender.pdu.number import decode_number
from sms_sender.core.exceptions import (
    MessageValidationError,
    MissingTextError,
    TextTooLongError,
    TextTooShortError,
    InvalidCharacterError,
    InvalidNumberError,
    MessageKindError
)

NUMBER = 13052345678
HELLO_PDU = "0001000B913150325476F800000CC8329BFD065DDF72363904"


class TestSimpleMessage:
    """Test single (non-concatenated) messages."""

    def test_hello_world_pdu(self):
        message = PduMessage.simple(NUMBER, "Hello World!")

        assert message.to_pdu() == HELLO_PDU
        assert str(message) == HELLO_PDU

    def test_hello_world_fields(self):
        message = PduMessage.simple(NUMBER, "Hello World!")

        assert message.number == "13052345678"
        assert message.kind is HeaderKind.SIMPLE
        assert message.concatenation is None
        assert message.pdu_header == 0x01
        assert message.message_reference == 0
        assert message.user_data_length == 12
        assert message.encoded_number == "0B913150325476F8"
        assert message.length == 24

    def test_number_field_follows_header_octets(self):
        pdu = PduMessage.simple(NUMBER, "Hello World!").to_pdu()

        assert pdu[6:10] == "0B91"
        assert decode_number(pdu[6:22]) == "13052345678"

    def test_user_data_decodes_to_text(self):
        message = PduMessage.simple(NUMBER, "Hello World!")
        assert decode_text(message.encoded_text, message.user_data_length) == "Hello World!"

    def test_length_excludes_smsc_octet(self):
        message = PduMessage.simple(NUMBER, "hi")
        assert message.length == len(message.to_pdu()) // 2 - 1

    def test_160_characters_accepted(self):
        message = PduMessage.simple(NUMBER, "a" * 160)

        assert message.user_data_length == 160
        assert message.to_pdu()[26:28] == "A0"

    def test_161_characters_rejected(self):
        with pytest.raises(TextTooLongError) as exc_info:
            PduMessage.simple(NUMBER, "a" * 161)

        assert exc_info.value.length == 161
        assert exc_info.value.limit == 160

    def test_empty_text_allowed(self):
        message = PduMessage.simple(NUMBER, "")

        assert message.user_data_length == 0
        assert message.to_pdu().endswith("000000")

    def test_none_text_rejected(self):
        with pytest.raises(MissingTextError):
            PduMessage.simple(NUMBER, None)

    def test_cjk_text_rejected(self):
        with pytest.raises(InvalidCharacterError):
            PduMessage.simple(NUMBER, "你好")

    def test_bad_number_rejected(self):
        with pytest.raises(InvalidNumberError):
            PduMessage.simple("not-a-number", "hi")

    def test_concatenation_fields_unavailable(self):
        message = PduMessage.simple(NUMBER, "hi")

        with pytest.raises(MessageKindError):
            _ = message.reference_number
        with pytest.raises(MessageKindError):
            _ = message.part_number
        with pytest.raises(AttributeError):
            _ = message.total_parts

    def test_simple_with_concatenation_rejected(self):
        with pytest.raises(MessageValidationError):
            PduMessage(NUMBER, "hi", HeaderKind.SIMPLE, ConcatenationInfo(1, 1, 2))

    def test_unknown_kind_rejected(self):
        with pytest.raises(MessageValidationError):
            PduMessage(NUMBER, "hi", kind="simple")

    def test_message_is_immutable(self):
        message = PduMessage.simple(NUMBER, "hi")

        with pytest.raises(dataclasses.FrozenInstanceError):
            message.text = "changed"

    def test_equal_inputs_give_equal_messages(self):
        assert PduMessage.simple(NUMBER, "hi") == PduMessage.simple("+13052345678", "hi")


class TestConcatenatedPart:
    """Test concatenated message parts."""

    def test_part_layout(self):
        part = PduMessage.concatenated_part(NUMBER, "a" * 8, 0x2A, 2, 2)

        assert part.to_pdu() == (
            "00" "41" "01" "0B913150325476F8" "00" "00" "0F"
            "0500032A0202" "C2E170381C0E8701"
        )
        assert part.length == 27

    def test_part_fields(self):
        part = PduMessage.concatenated_part(NUMBER, "a" * 153, 7, 1, 3)

        assert part.is_concatenated
        assert part.pdu_header == 0x41
        assert part.message_reference == 0
        assert part.reference_number == 7
        assert part.part_number == 1
        assert part.total_parts == 3
        assert part.user_data_length == 160
        assert part.length == 153

    def test_message_reference_follows_part_number(self):
        part = PduMessage.concatenated_part(NUMBER, "x", 1, 5, 9)
        assert part.message_reference == 4

    def test_padded_text_decodes(self):
        part = PduMessage.concatenated_part(NUMBER, "Hello World!", 1, 1, 2)
        assert decode_text(part.encoded_text, 12, padding_bits=1) == "Hello World!"

    def test_154_characters_rejected(self):
        with pytest.raises(TextTooLongError) as exc_info:
            PduMessage.concatenated_part(NUMBER, "a" * 154, 1, 1, 2)

        assert exc_info.value.limit == 153

    def test_part_without_concatenation_rejected(self):
        with pytest.raises(MessageValidationError):
            PduMessage(NUMBER, "hi", HeaderKind.CONCATENATED_PART)

    @pytest.mark.parametrize("reference,part,total", [
        (-1, 1, 2),
        (256, 1, 2),
        (1, 0, 2),
        (1, 3, 2),
        (1, 1, 0),
        (1, 1, 256),
    ])
    def test_invalid_concatenation_info(self, reference, part, total):
        with pytest.raises(MessageValidationError):
            ConcatenationInfo(reference, part, total)

    def test_concatenation_header_hex(self):
        assert ConcatenationInfo(255, 3, 10).to_hex() == "050003FF0A03"


class TestSplitConcatenated:
    """Test split_concatenated() and build_messages()."""

    def test_161_characters_split_153_and_8(self):
        parts = list(split_concatenated(NUMBER, "a" * 161, reference=0x2A))

        assert [len(p.text) for p in parts] == [153, 8]
        assert [p.part_number for p in parts] == [1, 2]
        assert {p.total_parts for p in parts} == {2}
        assert parts[0].to_pdu()[26:40] == "A00500032A0201"
        assert parts[1].to_pdu()[26:40] == "0F0500032A0202"
        assert [p.length for p in parts] == [153, 27]

    @pytest.mark.parametrize("length", [161, 306, 307, 459, 1000])
    def test_split_properties(self, length):
        text = "".join(chr(ord("a") + i % 26) for i in range(length))
        parts = list(split_concatenated(NUMBER, text))

        assert len(parts) == part_count(length) == -(-length // 153)
        assert all(len(p.text) <= MAX_CONCATENATED_TEXT_LENGTH for p in parts)
        assert "".join(p.text for p in parts) == text
        assert len({p.reference_number for p in parts}) == 1
        assert [p.part_number for p in parts] == list(range(1, len(parts) + 1))

    def test_random_reference_in_range(self):
        parts = list(split_concatenated(NUMBER, "a" * 200))
        assert 0 <= parts[0].reference_number <= 255

    def test_parts_are_generated_lazily(self):
        parts = split_concatenated(NUMBER, "a" * 400, reference=1)

        assert next(parts).part_number == 1
        assert next(parts).part_number == 2

    def test_invalid_character_reported_before_first_part(self):
        text = "a" * 300 + "€"

        with pytest.raises(InvalidCharacterError) as exc_info:
            split_concatenated(NUMBER, text)

        assert exc_info.value.position == 300

    def test_short_text_rejected(self):
        with pytest.raises(TextTooShortError):
            split_concatenated(NUMBER, "a" * MAX_SMS_TEXT_LENGTH)

    def test_none_text_rejected(self):
        with pytest.raises(MissingTextError):
            split_concatenated(NUMBER, None)

    def test_too_many_parts_rejected(self):
        split_concatenated(NUMBER, "a" * (255 * 153), reference=1)

        with pytest.raises(TextTooLongError):
            split_concatenated(NUMBER, "a" * (255 * 153 + 1))

    def test_bad_reference_rejected(self):
        with pytest.raises(MessageValidationError):
            split_concatenated(NUMBER, "a" * 200, reference=300)

    def test_bad_number_rejected_eagerly(self):
        with pytest.raises(InvalidNumberError):
            split_concatenated("", "a" * 200)

    def test_build_messages_simple(self):
        messages = build_messages(NUMBER, "Hello World!")

        assert len(messages) == 1
        assert messages[0].to_pdu() == HELLO_PDU

    def test_build_messages_boundary(self):
        assert list(build_messages(NUMBER, "a" * 160))[0].kind is HeaderKind.SIMPLE
        assert len(list(build_messages(NUMBER, "a" * 161, reference=3))) == 2

    def test_build_messages_none_text(self):
        with pytest.raises(MissingTextError):
            build_messages(NUMBER, None)
