"""Logging framework for WebAuditor."""

from .logger_manager import LoggerManager, ROOT_LOGGER, FAULTS_LOGGER
from .structured_formatter import StructuredFormatter

__all__ = ['LoggerManager', 'StructuredFormatter', 'ROOT_LOGGER', 'FAULTS_LOGGER']
