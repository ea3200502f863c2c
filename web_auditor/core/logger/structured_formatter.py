"""Structured formatter for JSON logging."""

import json
import logging
from datetime import datetime
from typing import Dict, Any


class StructuredFormatter(logging.Formatter):
    """Outputs one JSON object per record.

    Scan context passed through ``extra`` (phase, url, scan_module, stage) is
    lifted into a ``scan`` object; any other extra fields land under ``extra``.
    LogRecord reserves ``module`` for the source file, hence ``scan_module``.
    """

    SCAN_FIELDS = {'phase': 'phase', 'url': 'url', 'scan_module': 'module', 'stage': 'stage'}

    # Attributes every LogRecord carries
    STANDARD_FIELDS = {
        'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
        'module', 'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
        'thread', 'threadName', 'processName', 'process', 'getMessage',
        'exc_info', 'exc_text', 'stack_info', 'taskName', 'message'
    }

    def __init__(self, include_extra: bool = True):
        super().__init__()
        self.include_extra = include_extra

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log string
        """
        log_data = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'function': record.funcName,
            'line': record.lineno,
        }

        scan_context = {
            name: record.__dict__[attr]
            for attr, name in self.SCAN_FIELDS.items()
            if attr in record.__dict__
        }
        if scan_context:
            log_data['scan'] = {k: self._serializable(v) for k, v in scan_context.items()}

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        if self.include_extra:
            extra_fields = self._extract_extra_fields(record)
            if extra_fields:
                log_data['extra'] = extra_fields

        log_data['thread'] = record.threadName

        try:
            return json.dumps(log_data, ensure_ascii=False, separators=(',', ':'))
        except (TypeError, ValueError) as e:
            return f"LOG_SERIALIZATION_ERROR: {str(e)} - Original message: {record.getMessage()}"

    def _serializable(self, value: Any) -> Any:
        try:
            json.dumps(value)
            return value
        except (TypeError, ValueError):
            return str(value)

    def _extract_extra_fields(self, record: logging.LogRecord) -> Dict[str, Any]:
        skip = self.STANDARD_FIELDS | set(self.SCAN_FIELDS)

        extra_fields = {}
        for key, value in record.__dict__.items():
            if key not in skip and not key.startswith('_'):
                extra_fields[key] = self._serializable(value)

        return extra_fields
