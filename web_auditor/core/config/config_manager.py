"""Configuration manager for WebAuditor."""

import os
import yaml
from typing import Dict, Any, Optional, List
from pathlib import Path

from ..exceptions import ConfigFileNotFoundError, ConfigFileFormatError


class ConfigManager:
    """Loads layered YAML configuration for a scan."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager.

        Args:
            config_path: Optional path to custom configuration file
        """
        self.config_path = config_path
        self.config: Dict[str, Any] = {}
        self.base_dir = Path(__file__).parent.parent.parent.parent
        self._load_configuration()

    def _load_configuration(self) -> None:
        """Load configuration from multiple sources in order of priority."""
        default_config = self._load_config_file(self.base_dir / "config" / "default.yml")
        if default_config:
            self.config.update(default_config)

        env = os.getenv('WEB_AUDITOR_ENV', 'development')
        env_config = self._load_config_file(self.base_dir / "config" / f"{env}.yml")
        if env_config:
            self._deep_merge(self.config, env_config)

        if self.config_path:
            path = Path(self.config_path)
            if not path.exists():
                raise ConfigFileNotFoundError(str(path))
            user_config = self._load_config_file(path)
            if user_config:
                self._deep_merge(self.config, user_config)

        self._load_environment_variables()

    def _load_config_file(self, file_path: Path) -> Optional[Dict[str, Any]]:
        """Load configuration from YAML file.

        Args:
            file_path: Path to configuration file

        Returns:
            Configuration dictionary or None if file doesn't exist
        """
        if not file_path.exists():
            return None

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigFileFormatError(str(file_path), str(e))

    def _deep_merge(self, base: Dict[str, Any], update: Dict[str, Any]) -> None:
        for key, value in update.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _load_environment_variables(self) -> None:
        """Load configuration overrides from environment variables."""
        env_mappings = {
            'WEB_AUDITOR_URL': ('scan', 'url'),
            'WEB_AUDITOR_LOG_LEVEL': ('logging', 'level'),
            'WEB_AUDITOR_EXCLUDE_BINARIES': ('scan', 'exclude_binaries'),
            'WEB_AUDITOR_HTTP_PRECISION': ('scan', 'http_precision'),
            'WEB_AUDITOR_LOGS_DIR': ('system', 'logs_dir'),
        }

        for env_var, config_path in env_mappings.items():
            value = os.getenv(env_var)
            if value:
                self._set_nested_value(self.config, config_path, self._convert_env_value(value))

    def _set_nested_value(self, config: Dict[str, Any], path: tuple, value: Any) -> None:
        current = config
        for key in path[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]
        current[path[-1]] = value

    def _convert_env_value(self, value: str) -> Any:
        """Convert environment variable string to bool, int, float or str."""
        if value.lower() in ('true', 'false'):
            return value.lower() == 'true'

        try:
            if '.' in value:
                return float(value)
            return int(value)
        except ValueError:
            return value

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dot-separated key.

        Args:
            key: Dot-separated configuration key (e.g., 'scan.url')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split('.')
        current = self.config

        for k in keys:
            if isinstance(current, dict) and k in current:
                current = current[k]
            else:
                return default

        return current

    def set(self, key: str, value: Any) -> None:
        keys = key.split('.')
        current = self.config

        for k in keys[:-1]:
            if k not in current:
                current[k] = {}
            current = current[k]

        current[keys[-1]] = value

    def get_section(self, section: str) -> Dict[str, Any]:
        return self.config.get(section, {})

    def reload(self) -> None:
        """Reload configuration from all sources."""
        self.config = {}
        self._load_configuration()

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        from .config_validator import ConfigValidator
        validator = ConfigValidator(self.config)
        return validator.validate()

    def to_dict(self) -> Dict[str, Any]:
        return self.config.copy()
