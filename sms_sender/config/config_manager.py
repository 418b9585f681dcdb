"""Configuration manager for the PDU SMS sender.

Provides singleton access to application configuration with support for
defaults, YAML file loading, and environment variable overrides.
"""

from pathlib import Path
from typing import Optional, Dict, Any, List
from copy import deepcopy
import os

import yaml

from sms_sender.config.config_models import (
    Config,
    SerialConfig,
    SmsConfig,
    LoggingConfig,
    LogLevel
)
from sms_sender.config.defaults import get_default_config
from sms_sender.config.config_schema import ConfigSchema

ENV_PREFIX = "SMS_SENDER_"


class ConfigManager:
    """Singleton configuration manager.

    Provides centralized access to validated configuration with layered loading:
    1. Load defaults
    2. Load from file (if exists)
    3. Apply environment variable overrides
    4. Validate configuration against JSON schema
    5. Return validated Config object
    """

    _instance: Optional['ConfigManager'] = None
    _config: Optional[Config] = None
    _config_source: Dict[str, str] = {}
    _config_path: Optional[Path] = None

    def __init__(self):
        """Private constructor. Use instance() or initialize() class methods."""
        if ConfigManager._instance is not None:
            raise RuntimeError("Use ConfigManager.instance() instead of constructor")

    @classmethod
    def instance(cls) -> 'ConfigManager':
        """Get singleton instance of ConfigManager.

        Raises:
            RuntimeError: If not yet initialized.
        """
        if cls._instance is None:
            raise RuntimeError("ConfigManager not initialized. Call initialize() first.")
        return cls._instance

    @classmethod
    def initialize(cls,
                   config_path: Optional[Path] = None,
                   skip_validation: bool = False) -> 'ConfigManager':
        """Initialize ConfigManager with configuration.

        Args:
            config_path: Optional path to a YAML file. If None, searches default paths.
            skip_validation: Skip schema validation.

        Returns:
            ConfigManager: Initialized singleton instance.

        Raises:
            ValueError: Configuration fails schema validation.
            yaml.YAMLError: An explicitly given file is not valid YAML.
        """
        if cls._instance is None:
            cls._instance = cls.__new__(cls)

        instance = cls._instance
        instance._config_source = {}
        instance._config_path = None

        # Step 1: defaults
        config_dict = get_default_config().to_dict()
        instance._mark_source(config_dict, "default")

        # Step 2: file
        explicit_path = config_path is not None
        if config_path is None:
            config_path = cls._search_config_paths()

        if config_path is not None:
            config_path = Path(config_path).expanduser()
            if config_path.exists():
                try:
                    file_config = cls._load_from_file(config_path)
                except (OSError, yaml.YAMLError) as e:
                    if explicit_path:
                        raise
                    print(f"Warning: Failed to load config from {config_path}: {e}")
                    print("Using defaults only")
                else:
                    config_dict = cls._merge_configs(config_dict, file_config)
                    instance._mark_source(file_config, "file")
                    instance._config_path = config_path
            elif explicit_path:
                raise FileNotFoundError(f"Configuration file not found: {config_path}")

        # Step 3: environment
        env_overrides = cls._apply_env_overrides()
        if env_overrides:
            config_dict = cls._merge_configs(config_dict, env_overrides)
            instance._mark_source(env_overrides, "env")

        # Step 4: validation
        if not skip_validation:
            is_valid, validation_errors = ConfigSchema.validate_config(config_dict)
            if not is_valid:
                error_msg = "Configuration validation failed:\n" + "\n".join(
                    f"  - {error}" for error in validation_errors
                )
                raise ValueError(error_msg)

        # Step 5: Config object
        instance._config = cls._dict_to_config(config_dict)
        return instance

    @staticmethod
    def _search_config_paths() -> Optional[Path]:
        """Search for a config file in standard locations.

        Search order:
            1. ./sms-sender.yaml (current directory)
            2. ~/.sms-sender/config.yaml (user home directory)
        """
        search_paths = [
            Path("./sms-sender.yaml"),
            Path.home() / ".sms-sender" / "config.yaml"
        ]

        for path in search_paths:
            if path.exists() and path.is_file():
                return path

        return None

    @staticmethod
    def _load_from_file(path: Path) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        with open(path, 'r', encoding='utf-8') as f:
            config_dict = yaml.safe_load(f)

        if config_dict is None:
            config_dict = {}
        if not isinstance(config_dict, dict):
            raise yaml.YAMLError(f"Top level of {path} must be a mapping")

        return config_dict

    @staticmethod
    def _apply_env_overrides() -> Dict[str, Any]:
        """Collect environment variable overrides.

        Environment variables use format: SMS_SENDER_SECTION_KEY
        Examples:
            SMS_SENDER_SERIAL_DEFAULT_BAUD=9600
            SMS_SENDER_SERIAL_RESPONSE_TIMEOUT=30
            SMS_SENDER_LOGGING_ENABLED=true
        """
        overrides: Dict[str, Dict[str, Any]] = {}

        for env_name, env_value in os.environ.items():
            if not env_name.startswith(ENV_PREFIX):
                continue

            # SMS_SENDER_SERIAL_DEFAULT_BAUD -> ["serial", "default_baud"]
            parts = env_name[len(ENV_PREFIX):].lower().split('_', 1)
            if len(parts) != 2:
                continue

            section, key = parts
            overrides.setdefault(section, {})[key] = ConfigManager._parse_env_value(env_value)

        return overrides

    @staticmethod
    def _parse_env_value(value: str) -> Any:
        """Parse environment variable value to bool, int, None or str."""
        lowered = value.strip().lower()
        if lowered in ('true', 'yes', 'on'):
            return True
        if lowered in ('false', 'no', 'off'):
            return False
        if lowered in ('', 'none', 'null'):
            return None

        try:
            return int(lowered)
        except ValueError:
            return value

    @staticmethod
    def _merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Merge two configuration dictionaries (override takes precedence)."""
        merged = deepcopy(base)

        for section, section_values in override.items():
            if isinstance(section_values, dict) and isinstance(merged.get(section), dict):
                merged[section].update(section_values)
            else:
                merged[section] = section_values

        return merged

    def _mark_source(self, config: Dict[str, Any], source: str):
        """Record which layer ("default", "file", "env") set each value."""
        for section, section_values in config.items():
            if isinstance(section_values, dict):
                for key in section_values.keys():
                    self._config_source[f"{section}.{key}"] = source

    @staticmethod
    def _dict_to_config(config_dict: Dict[str, Any]) -> Config:
        """Convert configuration dictionary to Config object."""
        defaults = get_default_config()

        serial_dict = config_dict.get('serial', {})
        serial = SerialConfig(
            default_baud=serial_dict.get('default_baud', defaults.serial.default_baud),
            settle_time_ms=serial_dict.get('settle_time_ms', defaults.serial.settle_time_ms),
            response_timeout=serial_dict.get('response_timeout', defaults.serial.response_timeout),
            read_timeout_ms=serial_dict.get('read_timeout_ms', defaults.serial.read_timeout_ms)
        )

        sms_dict = config_dict.get('sms', {})
        sms = SmsConfig(
            default_country_code=sms_dict.get('default_country_code'),
            concatenation_reference=sms_dict.get('concatenation_reference')
        )

        log_dict = config_dict.get('logging', {})
        level = log_dict.get('level', defaults.logging.level)
        logging = LoggingConfig(
            enabled=log_dict.get('enabled', defaults.logging.enabled),
            level=level if isinstance(level, LogLevel) else LogLevel(str(level).upper()),
            log_to_file=log_dict.get('log_to_file', defaults.logging.log_to_file),
            log_to_console=log_dict.get('log_to_console', defaults.logging.log_to_console),
            log_file_path=log_dict.get('log_file_path'),
            max_file_size_mb=log_dict.get('max_file_size_mb', defaults.logging.max_file_size_mb),
            backup_count=log_dict.get('backup_count', defaults.logging.backup_count)
        )

        return Config(serial=serial, sms=sms, logging=logging)

    def get_config(self) -> Config:
        """Get current configuration object.

        Raises:
            RuntimeError: If configuration not loaded.
        """
        if self._config is None:
            raise RuntimeError("Configuration not loaded. Call initialize() first.")
        return self._config

    def get_source(self, key: str) -> Optional[str]:
        """Return which layer set a value, e.g. get_source("serial.default_baud")."""
        return self._config_source.get(key)

    def get_config_path(self) -> Optional[Path]:
        """Path of the loaded configuration file, if any."""
        return self._config_path

    def reload(self, config_path: Optional[Path] = None) -> bool:
        """Reload configuration from file and environment.

        Returns:
            True if reload successful, False if the new configuration was
            rejected (the previous configuration stays active).
        """
        if config_path is None:
            config_path = self._config_path

        old_config = self._config
        old_source = self._config_source.copy()
        old_config_path = self._config_path

        try:
            ConfigManager.initialize(config_path)
            return True
        except (OSError, ValueError, yaml.YAMLError) as e:
            print(f"Error reloading configuration: {e}")
            print("Rolling back to previous configuration")
            self._config = old_config
            self._config_source = old_source
            self._config_path = old_config_path
            return False

    def validate(self) -> List[str]:
        """Validate the active configuration, returning error messages."""
        _, errors = ConfigSchema.validate_config(self.get_config().to_dict())
        return errors

    @classmethod
    def reset(cls):
        """Reset singleton instance (for testing)."""
        cls._instance = None
        cls._config = None
        cls._config_path = None
        cls._config_source = {}
