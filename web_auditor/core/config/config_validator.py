"""Configuration validator for WebAuditor."""

import re
from typing import Dict, Any, List
from urllib.parse import urlparse


class ConfigValidator:
    """Validates scan configuration before an orchestrator is built from it."""

    COMPONENT_KINDS = ('modules', 'plugins', 'reports')
    LISTING_FILTERS = ('lsmod', 'lsplug', 'lsrep')

    def __init__(self, config: Dict[str, Any]):
        """Initialize validator with configuration.

        Args:
            config: Configuration dictionary to validate
        """
        self.config = config
        self.errors: List[str] = []

    def validate(self) -> List[str]:
        """Validate complete configuration.

        Returns:
            List of validation error messages
        """
        self.errors = []

        self._validate_scan_config()
        self._validate_components_config()
        self._validate_listing_config()
        self._validate_logging_config()

        return self.errors

    def _validate_scan_config(self) -> None:
        """Validate scan configuration section."""
        scan = self.config.get('scan') or {}

        url = scan.get('url')
        if url is not None and not self._validate_url_format(url):
            self.errors.append(f"scan.url must be an absolute http(s) URL: {url}")

        restrict_paths = scan.get('restrict_paths', [])
        if not isinstance(restrict_paths, list):
            self.errors.append("scan.restrict_paths must be a list")
        elif restrict_paths and not url:
            relative = [p for p in restrict_paths if not self._validate_url_format(str(p))]
            if relative:
                self.errors.append("scan.url is required to resolve relative restrict_paths")

        for flag in ('exclude_binaries', 'only_positives'):
            if flag in scan and not isinstance(scan[flag], bool):
                self.errors.append(f"scan.{flag} must be a boolean")

        redundant = scan.get('redundant', {})
        if not isinstance(redundant, dict):
            self.errors.append("scan.redundant must be a mapping of pattern to count")
        else:
            for pattern, count in redundant.items():
                if not self._validate_regex(pattern):
                    self.errors.append(f"Invalid redundancy pattern: {pattern}")
                if not isinstance(count, int) or count < 0:
                    self.errors.append(f"Redundancy count for {pattern} must be a non-negative integer")

        precision = scan.get('http_precision', 2)
        if not isinstance(precision, int) or precision <= 0:
            self.errors.append("scan.http_precision must be a positive integer")

        interval = scan.get('pause_poll_interval', 1.0)
        if not isinstance(interval, (int, float)) or interval <= 0:
            self.errors.append("scan.pause_poll_interval must be a positive number")

    def _validate_url_format(self, url: str) -> bool:
        parsed = urlparse(url)
        return parsed.scheme in ('http', 'https') and bool(parsed.netloc)

    def _validate_regex(self, pattern: str) -> bool:
        try:
            re.compile(pattern)
            return True
        except (re.error, TypeError):
            return False

    def _validate_components_config(self) -> None:
        """Validate component sources for modules, plugins and reports."""
        components = self.config.get('components') or {}

        for kind in self.COMPONENT_KINDS:
            section = components.get(kind) or {}
            if not isinstance(section, dict):
                self.errors.append(f"components.{kind} must be a mapping")
                continue

            directory = section.get('directory')
            if directory is not None and not isinstance(directory, str):
                self.errors.append(f"components.{kind}.directory must be a string")

            manifest = section.get('manifest', {})
            if not isinstance(manifest, dict):
                self.errors.append(f"components.{kind}.manifest must be a mapping")
            else:
                for name, target in manifest.items():
                    if not isinstance(target, str) or ':' not in target:
                        self.errors.append(
                            f"components.{kind}.manifest.{name} must look like 'package.module:Class'"
                        )

            load = section.get('load', [])
            if not isinstance(load, list):
                self.errors.append(f"components.{kind}.load must be a list of names")

            options = section.get('options', {})
            if not isinstance(options, dict):
                self.errors.append(f"components.{kind}.options must be a mapping")

    def _validate_listing_config(self) -> None:
        """Validate listing filter regular expressions."""
        listing = self.config.get('listing') or {}

        for key in self.LISTING_FILTERS:
            patterns = listing.get(key, [])
            if not isinstance(patterns, list):
                self.errors.append(f"listing.{key} must be a list")
                continue
            for pattern in patterns:
                if not self._validate_regex(pattern):
                    self.errors.append(f"Invalid listing.{key} pattern: {pattern}")

    def _validate_logging_config(self) -> None:
        """Validate logging configuration section."""
        logging_config = self.config.get('logging') or {}

        level = logging_config.get('level', 'INFO')
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if level not in valid_levels:
            self.errors.append(f"logging.level must be one of: {valid_levels}")

        if 'file_rotation' in logging_config and not isinstance(logging_config['file_rotation'], bool):
            self.errors.append("logging.file_rotation must be a boolean")

        max_size = logging_config.get('max_file_size', '10MB')
        if not isinstance(max_size, str) or not self._validate_size_format(max_size):
            self.errors.append("logging.max_file_size must be a valid size string (e.g., '10MB')")

        backup_count = logging_config.get('backup_count', 5)
        if not isinstance(backup_count, int) or backup_count < 0:
            self.errors.append("logging.backup_count must be a non-negative integer")

    def _validate_size_format(self, size: str) -> bool:
        if not size:
            return False

        # Longer units first to avoid partial matches
        for unit in ['GB', 'MB', 'KB', 'B']:
            if size.upper().endswith(unit):
                number_part = size[:-len(unit)]
                try:
                    float(number_part)
                    return True
                except ValueError:
                    return False

        return False

    def is_valid(self) -> bool:
        return not self.validate()
