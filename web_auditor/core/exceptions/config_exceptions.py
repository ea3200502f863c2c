"""Configuration-related exception classes."""

from typing import List, Optional
from .base_exceptions import WebAuditorError


class ConfigurationError(WebAuditorError):
    """Exception raised for configuration-related errors."""

    def __init__(self, message: str, config_section: Optional[str] = None,
                 config_key: Optional[str] = None, **kwargs):
        """Initialize configuration error.

        Args:
            message: Error message
            config_section: Configuration section where error occurred
            config_key: Configuration key that caused the error
            **kwargs: Additional arguments for base class
        """
        details = kwargs.get('details', {})
        if config_section:
            details['config_section'] = config_section
        if config_key:
            details['config_key'] = config_key

        kwargs['details'] = details
        kwargs['error_code'] = kwargs.get('error_code', 'CONFIG_ERROR')

        super().__init__(message, **kwargs)

        self.config_section = config_section
        self.config_key = config_key


class ConfigValidationError(ConfigurationError):
    """Exception raised when configuration validation fails."""

    def __init__(self, validation_errors: List[str], **kwargs):
        message = f"Configuration validation failed with {len(validation_errors)} errors"

        details = kwargs.get('details', {})
        details['validation_errors'] = validation_errors

        kwargs['details'] = details
        kwargs['error_code'] = 'CONFIG_VALIDATION_ERROR'
        kwargs['suggestion'] = 'Check the scan, components and listing sections'

        super().__init__(message, **kwargs)

        self.validation_errors = validation_errors


class ConfigFileNotFoundError(ConfigurationError):
    """Exception raised when a configuration file is not found."""

    def __init__(self, file_path: str, **kwargs):
        message = f"Configuration file not found: {file_path}"

        details = kwargs.get('details', {})
        details['file_path'] = file_path

        kwargs['details'] = details
        kwargs['error_code'] = 'CONFIG_FILE_NOT_FOUND'
        kwargs['suggestion'] = f'Create configuration file at {file_path} or specify valid path'

        super().__init__(message, **kwargs)

        self.file_path = file_path


class ConfigFileFormatError(ConfigurationError):
    """Exception raised when a configuration file is not valid YAML."""

    def __init__(self, file_path: str, format_error: str, **kwargs):
        message = f"Invalid configuration file format in {file_path}: {format_error}"

        details = kwargs.get('details', {})
        details.update({
            'file_path': file_path,
            'format_error': format_error
        })

        kwargs['details'] = details
        kwargs['error_code'] = 'CONFIG_FORMAT_ERROR'
        kwargs['suggestion'] = 'Check YAML syntax and structure in configuration file'

        super().__init__(message, **kwargs)

        self.file_path = file_path
        self.format_error = format_error
