"""Unit tests for reply classification and CommandResponse."""

import dataclasses

import pytest

from sms_sender.core.command_response import (
    CommandResponse,
    ResponseStatus,
    classify_response,
    parse_error,
    parse_message_reference,
    split_lines
)


class TestClassifyResponse:
    """Test classify_response()."""

    @pytest.mark.parametrize("text,expected,result", [
        ("\r\nOK\r\n", ResponseStatus.SUCCESS, ResponseStatus.SUCCESS),
        ("ok", ResponseStatus.SUCCESS, ResponseStatus.SUCCESS),
        ("\r\n> ", ResponseStatus.PROMPT, ResponseStatus.PROMPT),
        ("\r\n+CMGS: 12\r\n\r\nOK\r\n", ResponseStatus.SUBMITTED, ResponseStatus.SUBMITTED),
        ("+cmgs: 3", ResponseStatus.SUBMITTED, ResponseStatus.SUBMITTED),
        ("\r\nERROR\r\n", ResponseStatus.SUCCESS, ResponseStatus.ERROR),
        ("+CMS ERROR: 500", ResponseStatus.PROMPT, ResponseStatus.ERROR),
        ("error", ResponseStatus.SUBMITTED, ResponseStatus.ERROR),
        ("", ResponseStatus.SUCCESS, ResponseStatus.INCOMPLETE),
        ("\r\n", ResponseStatus.PROMPT, ResponseStatus.INCOMPLETE),
        ("O", ResponseStatus.SUCCESS, ResponseStatus.INCOMPLETE),
    ])
    def test_classification(self, text, expected, result):
        assert classify_response(text, expected) is result

    def test_only_expected_marker_counts(self):
        assert classify_response("OK", ResponseStatus.PROMPT) is ResponseStatus.INCOMPLETE
        assert classify_response("> ", ResponseStatus.SUCCESS) is ResponseStatus.INCOMPLETE

    def test_error_wins_over_expected_marker(self):
        assert classify_response("OK\r\nERROR", ResponseStatus.SUCCESS) is ResponseStatus.ERROR

    @pytest.mark.parametrize("status", [ResponseStatus.ERROR, ResponseStatus.INCOMPLETE])
    def test_expected_without_marker_raises(self, status):
        with pytest.raises(ValueError):
            classify_response("OK", status)


class TestParsing:
    """Test reply parsing helpers."""

    def test_parse_cms_error(self):
        assert parse_error("\r\n+CMS ERROR: 500\r\n") == ("500", "CMS Error: 500")

    def test_parse_cme_error(self):
        assert parse_error("+cme error: 10") == ("10", "CME Error: 10")

    def test_parse_generic_error(self):
        assert parse_error("ERROR") == (None, "Generic ERROR response")

    def test_parse_message_reference(self):
        assert parse_message_reference("\r\n+CMGS: 17\r\n\r\nOK") == 17

    def test_parse_message_reference_missing(self):
        assert parse_message_reference("OK") is None

    def test_split_lines(self):
        assert split_lines("\r\n+CMGS: 17\r\n\r\nOK\r\n") == ["+CMGS: 17", "OK"]


class TestCommandResponse:
    """Test the CommandResponse dataclass."""

    def test_from_reply_submitted(self):
        response = CommandResponse.from_reply(
            "0001000B91", "\r\n+CMGS: 17\r\n\r\nOK\r\n", ResponseStatus.SUBMITTED, 0.25
        )

        assert response.raw_response == ["+CMGS: 17", "OK"]
        assert response.modem_reference == 17
        assert response.error_code is None
        assert response.is_successful()
        assert response.get_response_text() == "+CMGS: 17\nOK"

    def test_from_reply_error(self):
        response = CommandResponse.from_reply(
            "AT+CMGS=24", "+CMS ERROR: 304", ResponseStatus.ERROR, 0.1
        )

        assert response.error_code == "304"
        assert response.error_message == "CMS Error: 304"
        assert not response.is_successful()

    def test_prompt_is_successful(self):
        response = CommandResponse.from_reply("AT+CMGS=24", "\r\n> ", ResponseStatus.PROMPT, 0.01)

        assert response.is_successful()
        assert response.raw_response == [">"]

    def test_str_success(self):
        response = CommandResponse.from_reply("AT+CMGF=0", "OK", ResponseStatus.SUCCESS, 0.0123)
        assert str(response) == "[success] AT+CMGF=0 -> 1 lines (0.012s)"

    def test_str_error(self):
        response = CommandResponse.from_reply(
            "AT+CMGF=0", "+CME ERROR: 3", ResponseStatus.ERROR, 0.5
        )
        assert str(response) == "[error] AT+CMGF=0 (3: CME Error: 3) (0.500s)"

    def test_immutable(self):
        response = CommandResponse("AT", ["OK"], ResponseStatus.SUCCESS, 0.1)

        with pytest.raises(dataclasses.FrozenInstanceError):
            response.status = ResponseStatus.ERROR

    def test_timestamp_set(self):
        response = CommandResponse("AT", ["OK"], ResponseStatus.SUCCESS, 0.1)
        assert response.timestamp > 0
