"""Unit tests for the LogEntry model."""

import dataclasses
import json
from datetime import datetime

import pytest

from sms_sender.logging.log_models import LogEntry

TIMESTAMP = datetime(2026, 1, 12, 10, 30, 15, 234567)


class TestLogEntry:
    """Test LogEntry formatting and serialization."""

    def test_minimal_to_string(self):
        entry = LogEntry(timestamp=TIMESTAMP, level="INFO", source="SerialHandler",
                         message="Port opened")

        assert entry.to_string() == (
            "2026-01-12 10:30:15.234 | INFO    | SerialHandler   | Port opened"
        )

    def test_to_string_with_details(self):
        entry = LogEntry(
            timestamp=TIMESTAMP,
            level="ERROR",
            source="SmsTransport",
            message="Received response",
            port="COM3",
            command="AT+CMGS=24",
            response="+CMS ERROR: 500",
            status="error",
            execution_time=0.1234,
            error="rejected"
        )
        text = entry.to_string()

        assert "| PORT: COM3" in text
        assert "| CMD: AT+CMGS=24" in text
        assert "| RESP: '+CMS ERROR: 500'" in text
        assert "| STATUS: error" in text
        assert "| TIME: 0.123s" in text
        assert "| ERROR: rejected" in text

    def test_to_string_with_state(self):
        entry = LogEntry(timestamp=TIMESTAMP, level="INFO", source="SmsTransport",
                         message="State closed -> opening", state="opening")
        assert entry.to_string().endswith("| STATE: opening")

    def test_to_dict(self):
        entry = LogEntry(timestamp=TIMESTAMP, level="INFO", source="SmsTransport",
                         message="Sending command", command="AT+CMGF=0")
        data = entry.to_dict()

        assert data["timestamp"] == "2026-01-12T10:30:15.234567"
        assert data["command"] == "AT+CMGF=0"
        assert data["state"] is None

    def test_dict_round_trip(self):
        entry = LogEntry(timestamp=TIMESTAMP, level="DEBUG", source="SmsTransport",
                         message="Classified reply", details={"status": "prompt"})

        assert LogEntry.from_dict(entry.to_dict()) == entry

    def test_json_round_trip(self):
        entry = LogEntry(timestamp=TIMESTAMP, level="WARNING", source="SmsTransport",
                         message="Received response", status="timeout", execution_time=5.0)

        assert json.loads(entry.to_json())["status"] == "timeout"
        assert LogEntry.from_json(entry.to_json()) == entry

    def test_from_dict_missing_field(self):
        with pytest.raises(KeyError):
            LogEntry.from_dict({"timestamp": TIMESTAMP.isoformat(), "level": "INFO"})

    def test_immutable(self):
        entry = LogEntry(timestamp=TIMESTAMP, level="INFO", source="x", message="y")

        with pytest.raises(dataclasses.FrozenInstanceError):
            entry.level = "ERROR"
