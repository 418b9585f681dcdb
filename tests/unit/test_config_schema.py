"""Unit tests for configuration schema validation."""

import pytest

from sms_sender.config.config_schema import ConfigSchema
from sms_sender.config.defaults import get_default_config


class TestValidateConfig:
    """Test ConfigSchema.validate_config()."""

    def test_defaults_are_valid(self):
        assert ConfigSchema.validate_config(get_default_config().to_dict()) == (True, [])

    def test_empty_config_is_valid(self):
        assert ConfigSchema.validate_config({}) == (True, [])

    def test_invalid_baud_rate(self):
        is_valid, errors = ConfigSchema.validate_config({"serial": {"default_baud": 12345}})

        assert not is_valid
        assert len(errors) == 1
        assert "Section 'serial', field 'default_baud': Expected one of" in errors[0]
        assert "got 12345" in errors[0]

    def test_wrong_type(self):
        is_valid, errors = ConfigSchema.validate_config({"serial": {"settle_time_ms": "fast"}})

        assert not is_valid
        assert "Expected type integer, got str" in errors[0]

    @pytest.mark.parametrize("value,fragment", [
        (-1, "must be >= 0"),
        (256, "must be <= 255"),
    ])
    def test_reference_range(self, value, fragment):
        is_valid, errors = ConfigSchema.validate_config({"sms": {"concatenation_reference": value}})

        assert not is_valid
        assert fragment in errors[0]

    def test_null_reference_allowed(self):
        assert ConfigSchema.validate_config({"sms": {"concatenation_reference": None}})[0]

    def test_unknown_field_rejected_in_strict_mode(self):
        is_valid, errors = ConfigSchema.validate_config({"serial": {"retries": 3}})

        assert not is_valid
        assert "Unknown fields ['retries']" in errors[0]

    def test_unknown_field_allowed_in_permissive_mode(self):
        assert ConfigSchema.validate_config({"serial": {"retries": 3}}, strict=False) == (True, [])

    def test_unknown_section_rejected(self):
        is_valid, errors = ConfigSchema.validate_config({"plugins": {}})

        assert not is_valid
        assert "Section 'root'" in errors[0]

    def test_log_to_file_requires_enabled(self):
        is_valid, errors = ConfigSchema.validate_config(
            {"logging": {"enabled": False, "log_to_file": True}}
        )

        assert not is_valid
        assert "requires logging to be enabled" in errors[0]

    def test_bad_log_path(self):
        is_valid, errors = ConfigSchema.validate_config({"logging": {"log_file_path": "  "}})

        assert not is_valid
        assert "log_file_path" in errors[0]

    def test_multiple_errors_reported(self):
        is_valid, errors = ConfigSchema.validate_config({
            "serial": {"default_baud": 1, "settle_time_ms": -5}
        })

        assert not is_valid
        assert len(errors) == 2


class TestHelpers:
    """Test standalone validators."""

    @pytest.mark.parametrize("baud,expected", [(115200, True), (9600, True), (12345, False)])
    def test_validate_baud_rate(self, baud, expected):
        assert ConfigSchema.validate_baud_rate(baud) is expected

    @pytest.mark.parametrize("path,expected", [
        ("./logs/comm.log", True),
        ("~/comm.log", True),
        ("", False),
        ("bad\npath", False),
        (None, False),
    ])
    def test_validate_path(self, path, expected):
        assert ConfigSchema.validate_path(path) is expected

    def test_schema_sections(self):
        schema = ConfigSchema.get_schema()
        assert set(schema["properties"]) == {"serial", "sms", "logging"}
