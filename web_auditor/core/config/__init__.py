"""Configuration management module for WebAuditor."""

from .config_manager import ConfigManager
from .config_validator import ConfigValidator
from .options import ScanOptions

__all__ = ['ConfigManager', 'ConfigValidator', 'ScanOptions']
