"""Logger manager for centralized logging configuration."""

import logging
import logging.handlers
from pathlib import Path
from typing import Dict, Any

from .structured_formatter import StructuredFormatter


ROOT_LOGGER = 'web_auditor'
FAULTS_LOGGER = 'web_auditor.faults'


class LoggerManager:
    """Configures the ``web_auditor`` logger tree for a scan process."""

    def __init__(self, config: Dict[str, Any]):
        """Initialize logger manager with configuration.

        Args:
            config: Configuration dictionary containing logging settings
        """
        self.config = config
        self.logging_config = config.get('logging', {})
        self.loggers: Dict[str, logging.Logger] = {}
        self._setup_logging()

    def _setup_logging(self) -> None:
        """Set up logging configuration based on config."""
        root_logger = logging.getLogger(ROOT_LOGGER)
        root_logger.setLevel(self._get_log_level())
        root_logger.handlers.clear()

        self._add_console_handler(root_logger)

        if self.logging_config.get('to_file', False):
            logs_dir = Path(self.config.get('system', {}).get('logs_dir', 'logs'))
            logs_dir.mkdir(parents=True, exist_ok=True)
            self._add_file_handler(root_logger, logs_dir)
            self._add_faults_handler(logs_dir)

        self.loggers['root'] = root_logger

    def _get_log_level(self) -> int:
        level_name = str(self.logging_config.get('level', 'INFO')).upper()
        return getattr(logging, level_name, logging.INFO)

    def _add_console_handler(self, logger: logging.Logger) -> None:
        console_handler = logging.StreamHandler()

        if self.logging_config.get('structured_console', False):
            console_handler.setFormatter(StructuredFormatter())
        else:
            format_str = self.logging_config.get(
                'format',
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            console_handler.setFormatter(logging.Formatter(format_str))

        console_handler.setLevel(self._get_log_level())
        logger.addHandler(console_handler)

    def _add_file_handler(self, logger: logging.Logger, logs_dir: Path) -> None:
        """Add rotating file handler to logger.

        Args:
            logger: Logger to add handler to
            logs_dir: Directory for log files
        """
        log_file = logs_dir / 'web_auditor.log'

        if self.logging_config.get('file_rotation', True):
            max_bytes = self._parse_size(self.logging_config.get('max_file_size', '10MB'))
            backup_count = self.logging_config.get('backup_count', 5)

            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding='utf-8'
            )
        else:
            file_handler = logging.FileHandler(log_file, encoding='utf-8')

        file_handler.setFormatter(StructuredFormatter())
        file_handler.setLevel(self._get_log_level())

        logger.addHandler(file_handler)

    def _add_faults_handler(self, logs_dir: Path) -> None:
        """Add a dedicated log for module and stage faults.

        The faults logger still propagates, so faults also show on the console.
        """
        faults_logger = logging.getLogger(FAULTS_LOGGER)
        faults_logger.setLevel(logging.WARNING)

        faults_handler = logging.handlers.RotatingFileHandler(
            logs_dir / 'faults.log',
            maxBytes=self._parse_size(self.logging_config.get('max_file_size', '10MB')),
            backupCount=self.logging_config.get('backup_count', 5),
            encoding='utf-8'
        )
        faults_handler.setFormatter(StructuredFormatter())
        faults_logger.addHandler(faults_handler)

        self.loggers['faults'] = faults_logger

    def _parse_size(self, size_str: str) -> int:
        """Parse size string (e.g. '10MB') to bytes, defaulting to 10MB."""
        size_str = size_str.upper()
        # Longest suffix first so 'MB' is not read as 'B'
        multipliers = [
            ('GB', 1024 * 1024 * 1024),
            ('MB', 1024 * 1024),
            ('KB', 1024),
            ('B', 1),
        ]

        for unit, multiplier in multipliers:
            if size_str.endswith(unit):
                number_str = size_str[:-len(unit)]
                try:
                    return int(float(number_str) * multiplier)
                except ValueError:
                    break

        return 10 * 1024 * 1024

    def get_logger(self, name: str) -> logging.Logger:
        """Get a child logger of the ``web_auditor`` tree."""
        if name in self.loggers:
            return self.loggers[name]

        logger = logging.getLogger(f'{ROOT_LOGGER}.{name}')
        self.loggers[name] = logger
        return logger

    def set_level(self, level: str) -> None:
        log_level = getattr(logging, level.upper(), logging.INFO)

        for logger in self.loggers.values():
            logger.setLevel(log_level)
            for handler in logger.handlers:
                handler.setLevel(log_level)

    def shutdown(self) -> None:
        """Close and detach all handlers this manager installed."""
        for logger in self.loggers.values():
            for handler in logger.handlers[:]:
                handler.close()
                logger.removeHandler(handler)
