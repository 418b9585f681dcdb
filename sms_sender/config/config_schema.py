"""JSON Schema validation for the PDU SMS sender configuration.

Provides the schema definition and validation logic with readable error
messages.
"""

from typing import List, Tuple, Dict, Any
import copy

import jsonschema
from jsonschema import Draft7Validator


class ConfigSchema:
    """Configuration schema validator using JSON Schema Draft 7.

    Example:
        >>> is_valid, errors = ConfigSchema.validate_config(config_dict)
        >>> if not is_valid:
        >>>     for error in errors:
        >>>         print(error)
    """

    # Valid baud rates for serial communication
    VALID_BAUD_RATES = [9600, 19200, 38400, 57600, 115200, 230400, 460800, 921600]

    @staticmethod
    def get_schema() -> Dict[str, Any]:
        """Get JSON Schema Draft 7 for configuration validation."""
        return {
            "$schema": "http://json-schema.org/draft-07/schema#",
            "title": "PDU SMS Sender Configuration",
            "type": "object",
            "properties": {
                "serial": {
                    "type": "object",
                    "description": "Serial link and AT transport settings",
                    "properties": {
                        "default_baud": {
                            "type": "integer",
                            "description": "Baud rate used to open the port",
                            "enum": ConfigSchema.VALID_BAUD_RATES
                        },
                        "settle_time_ms": {
                            "type": "integer",
                            "description": "Pause after opening the port in milliseconds",
                            "minimum": 0,
                            "maximum": 10000
                        },
                        "response_timeout": {
                            "type": "integer",
                            "description": "Seconds to wait for each modem reply (0 = forever)",
                            "minimum": 0,
                            "maximum": 3600
                        },
                        "read_timeout_ms": {
                            "type": "integer",
                            "description": "Reader thread poll interval in milliseconds",
                            "minimum": 10,
                            "maximum": 5000
                        }
                    },
                    "additionalProperties": False
                },
                "sms": {
                    "type": "object",
                    "description": "Message building settings",
                    "properties": {
                        "default_country_code": {
                            "type": ["integer", "null"],
                            "description": "Country code prefixed to local numbers",
                            "minimum": 1,
                            "maximum": 999
                        },
                        "concatenation_reference": {
                            "type": ["integer", "null"],
                            "description": "Fixed reference number for long messages",
                            "minimum": 0,
                            "maximum": 255
                        }
                    },
                    "additionalProperties": False
                },
                "logging": {
                    "type": "object",
                    "description": "Communication logging settings",
                    "properties": {
                        "enabled": {
                            "type": "boolean",
                            "description": "Enable communication logging"
                        },
                        "level": {
                            "type": "string",
                            "description": "Logging level",
                            "enum": ["DEBUG", "INFO", "WARNING", "ERROR"]
                        },
                        "log_to_file": {
                            "type": "boolean",
                            "description": "Enable logging to file"
                        },
                        "log_to_console": {
                            "type": "boolean",
                            "description": "Enable logging to console"
                        },
                        "log_file_path": {
                            "type": ["string", "null"],
                            "description": "Path to log file"
                        },
                        "max_file_size_mb": {
                            "type": "integer",
                            "description": "Maximum log file size in megabytes",
                            "minimum": 1,
                            "maximum": 1000
                        },
                        "backup_count": {
                            "type": "integer",
                            "description": "Number of backup log files to keep",
                            "minimum": 0,
                            "maximum": 100
                        }
                    },
                    "additionalProperties": False
                }
            },
            "additionalProperties": False
        }

    @staticmethod
    def validate_config(config: Dict[str, Any], strict: bool = True) -> Tuple[bool, List[str]]:
        """Validate configuration dictionary against schema.

        Args:
            config: Configuration dictionary to validate.
            strict: If True, reject unknown fields.

        Returns:
            Tuple of (is_valid, error_messages).

        Example:
            >>> ConfigSchema.validate_config({"serial": {"default_baud": 9600}})
            (True, [])
        """
        schema = ConfigSchema.get_schema()
        if not strict:
            schema = ConfigSchema._make_permissive(schema)

        validator = Draft7Validator(schema)
        errors = [
            ConfigSchema._format_error(error)
            for error in sorted(validator.iter_errors(config), key=lambda e: [str(p) for p in e.path])
        ]
        errors.extend(ConfigSchema._custom_validation(config))
        return len(errors) == 0, errors

    @staticmethod
    def _make_permissive(schema: Dict[str, Any]) -> Dict[str, Any]:
        """Return a copy of the schema that allows unknown fields."""
        permissive_schema = copy.deepcopy(schema)

        def remove_additional_properties(obj):
            if isinstance(obj, dict):
                obj.pop("additionalProperties", None)
                for value in obj.values():
                    remove_additional_properties(value)

        remove_additional_properties(permissive_schema)
        return permissive_schema

    @staticmethod
    def _format_error(error: jsonschema.exceptions.ValidationError) -> str:
        """Format validation error with section, field and expected value.

        Example:
            "Section 'serial', field 'default_baud': Expected one of [9600, ...],
             got 12345. Example: default_baud: 9600"
        """
        path_parts = list(error.path)
        if len(path_parts) == 0:
            section, field = "root", "configuration"
        elif len(path_parts) == 1:
            section, field = path_parts[0], "section"
        else:
            section = path_parts[0]
            field = ".".join(str(p) for p in path_parts[1:])

        if error.validator == "type":
            return (f"Section '{section}', field '{field}': Expected type "
                    f"{error.validator_value}, got {type(error.instance).__name__} "
                    f"(value: {error.instance})")
        elif error.validator == "enum":
            expected_values = error.validator_value
            example_value = expected_values[0] if expected_values else "N/A"
            return (f"Section '{section}', field '{field}': Expected one of "
                    f"{expected_values}, got {error.instance}. "
                    f"Example: {field}: {example_value}")
        elif error.validator == "minimum":
            return (f"Section '{section}', field '{field}': Value must be >= "
                    f"{error.validator_value}, got {error.instance}")
        elif error.validator == "maximum":
            return (f"Section '{section}', field '{field}': Value must be <= "
                    f"{error.validator_value}, got {error.instance}")
        elif error.validator == "additionalProperties":
            extra_props = sorted(
                set(error.instance.keys()) - set(error.schema.get('properties', {}).keys())
            )
            return (f"Section '{section}': Unknown fields {extra_props} not allowed. "
                    f"Remove unknown fields or use permissive validation mode.")
        return f"Section '{section}', field '{field}': {error.message}"

    @staticmethod
    def _custom_validation(config: Dict[str, Any]) -> List[str]:
        """Checks that JSON schema cannot express."""
        errors = []

        logging_section = config.get("logging")
        if isinstance(logging_section, dict):
            path = logging_section.get("log_file_path")
            if path is not None and not ConfigSchema.validate_path(path):
                errors.append(
                    f"Section 'logging', field 'log_file_path': Path '{path}' "
                    f"contains invalid characters. Example: log_file_path: './logs/comm.log'"
                )
            if logging_section.get("log_to_file") and logging_section.get("enabled") is False:
                errors.append(
                    "Section 'logging', field 'log_to_file': File logging requires "
                    "logging to be enabled. Example: enabled: true"
                )

        return errors

    @staticmethod
    def validate_baud_rate(baud: int) -> bool:
        """Validate baud rate is a standard serial communication rate."""
        return baud in ConfigSchema.VALID_BAUD_RATES

    @staticmethod
    def validate_path(path: str) -> bool:
        """Reject empty paths and paths with control characters.

        Example:
            >>> ConfigSchema.validate_path("./logs/comm.log")
            True
            >>> ConfigSchema.validate_path("")
            False
        """
        if not isinstance(path, str) or not path.strip():
            return False
        return not any(char in path for char in ('\0', '\r', '\n'))
