"""WebAuditor - Web Application Vulnerability Scan Orchestrator

Drives a web application audit from discovery to reporting: crawl the
target (or a restricted list of paths), fetch pages, run every check module
against each page, run the deferred timing-channel checks, and hand the
results to the configured reports.

This package provides:
- Scan orchestrator with pause/resume, progress and statistics
- Registries for check modules, plugins and reports
- Layered YAML configuration and structured logging

IMPORTANT: This tool is intended for authorized security testing only.
Ensure you have proper authorization before scanning any targets.
"""

__version__ = "1.0.0"
__author__ = "WebAuditor Development Team"
__description__ = "Web Application Vulnerability Scan Orchestrator"
__license__ = "MIT"

from .core import ScanOrchestrator, ComponentManager
from .core.exceptions import WebAuditorException, WebAuditorError

__all__ = [
    'ScanOrchestrator',
    'ComponentManager',
    'WebAuditorException',
    'WebAuditorError',
    '__version__'
]
