"""Exception classes for WebAuditor."""

from .base_exceptions import (
    WebAuditorException, WebAuditorError, WebAuditorCriticalError
)
from .config_exceptions import (
    ConfigurationError, ConfigValidationError, ConfigFileNotFoundError,
    ConfigFileFormatError
)
from .scan_exceptions import (
    ScanError, ModuleFault, FetchFailure, ComponentNotFoundError,
    ComponentLoadError, ScanPhaseError, FatalScanError
)

__all__ = [
    'WebAuditorException', 'WebAuditorError', 'WebAuditorCriticalError',
    'ConfigurationError', 'ConfigValidationError', 'ConfigFileNotFoundError',
    'ConfigFileFormatError',
    'ScanError', 'ModuleFault', 'FetchFailure', 'ComponentNotFoundError',
    'ComponentLoadError', 'ScanPhaseError', 'FatalScanError'
]
