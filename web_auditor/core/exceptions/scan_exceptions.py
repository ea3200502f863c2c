"""Scan-related exception classes."""

from typing import Optional
from .base_exceptions import WebAuditorError, WebAuditorCriticalError


class ScanError(WebAuditorError):
    """Base class for scan-related errors."""

    def __init__(self, message: str, url: Optional[str] = None,
                 stage: Optional[str] = None, **kwargs):
        """Initialize scan error.

        Args:
            message: Error message
            url: URL that was being processed
            stage: Lifecycle stage in which the error occurred
            **kwargs: Additional arguments for base class
        """
        details = kwargs.get('details', {})
        if url:
            details['url'] = url
        if stage:
            details['stage'] = stage

        kwargs['details'] = details
        kwargs['error_code'] = kwargs.get('error_code', 'SCAN_ERROR')

        super().__init__(message, **kwargs)

        self.url = url
        self.stage = stage


class ModuleFault(ScanError):
    """A check module raised while running against a page."""

    def __init__(self, module: str, url: Optional[str] = None,
                 cause: Optional[BaseException] = None, **kwargs):
        """Initialize module fault.

        Args:
            module: Name of the module that failed
            url: URL of the page the module was run against
            cause: Original exception raised by the module
            **kwargs: Additional arguments for base class
        """
        message = f"Error in module '{module}'"
        if url:
            message += f" while auditing {url}"
        if cause is not None:
            message += f": {cause}"

        details = kwargs.get('details', {})
        details['module'] = module
        if cause is not None:
            details['cause'] = repr(cause)

        kwargs['details'] = details
        kwargs['error_code'] = 'MODULE_FAULT'

        super().__init__(message, url=url, stage='auditing', **kwargs)

        self.module = module
        self.cause = cause


class FetchFailure(ScanError):
    """A URL could not be materialized into a page."""

    def __init__(self, url: str, reason: Optional[str] = None, **kwargs):
        message = f"Failed to fetch {url}"
        if reason:
            message += f": {reason}"

        kwargs['error_code'] = 'FETCH_FAILURE'

        super().__init__(message, url=url, stage='auditing', **kwargs)

        self.reason = reason


class ComponentNotFoundError(ScanError):
    """Requested component is not available in its registry."""

    def __init__(self, kind: str, name: str, **kwargs):
        message = f"Unknown {kind} component: {name}"

        details = kwargs.get('details', {})
        details.update({'kind': kind, 'name': name})

        kwargs['details'] = details
        kwargs['error_code'] = 'COMPONENT_NOT_FOUND'
        kwargs['suggestion'] = f'Check the {kind} directory or manifest configuration'

        super().__init__(message, **kwargs)

        self.kind = kind
        self.name = name


class ComponentLoadError(ScanError):
    """A component source could not be imported."""

    def __init__(self, kind: str, source: str, reason: str, **kwargs):
        message = f"Failed to load {kind} component from {source}: {reason}"

        details = kwargs.get('details', {})
        details.update({'kind': kind, 'source': source, 'reason': reason})

        kwargs['details'] = details
        kwargs['error_code'] = 'COMPONENT_LOAD_ERROR'

        super().__init__(message, **kwargs)

        self.kind = kind
        self.source = source
        self.reason = reason


class ScanPhaseError(ScanError):
    """Lifecycle phases only move forwards."""

    def __init__(self, current: str, requested: str, **kwargs):
        message = f"Cannot move from {current} back to {requested}"

        details = kwargs.get('details', {})
        details.update({'current': current, 'requested': requested})

        kwargs['details'] = details
        kwargs['error_code'] = 'SCAN_PHASE_ERROR'
        kwargs['suggestion'] = 'Call reset() before running another scan'

        super().__init__(message, stage=current, **kwargs)

        self.current = current
        self.requested = requested


class FatalScanError(WebAuditorCriticalError):
    """Process-exit-class condition.

    Propagates through every fault barrier and skips clean up.
    """

    def __init__(self, message: str, **kwargs):
        kwargs['error_code'] = kwargs.get('error_code', 'FATAL_SCAN_ERROR')
        super().__init__(message, **kwargs)
