"""Tests for exception classes."""

import pytest

from web_auditor.core.exceptions import (
    WebAuditorException, WebAuditorError, WebAuditorCriticalError,
    ConfigurationError, ConfigValidationError, ConfigFileNotFoundError,
    ConfigFileFormatError, ScanError, ModuleFault, FetchFailure,
    ComponentNotFoundError, ComponentLoadError, ScanPhaseError, FatalScanError
)


class TestBaseExceptions:
    """Test cases for base exception classes."""

    def test_exception_basic(self):
        """Test basic WebAuditorException functionality."""
        exc = WebAuditorException("Test message")

        assert str(exc) == "Test message"
        assert exc.message == "Test message"
        assert exc.error_code is None
        assert exc.details == {}
        assert exc.suggestion is None

    def test_exception_with_all_params(self):
        """Test WebAuditorException with all parameters."""
        exc = WebAuditorException(
            "Test message",
            error_code="TEST_ERROR",
            details={'key': 'value'},
            suggestion="Try again"
        )

        assert exc.error_code == "TEST_ERROR"
        assert exc.details == {'key': 'value'}
        assert str(exc) == "Test message. Suggestion: Try again"

    def test_to_dict(self):
        """Test exception serialization to dictionary."""
        exc = WebAuditorException("Test message", error_code="TEST_ERROR", details={'n': 1})

        assert exc.to_dict() == {
            'exception_type': 'WebAuditorException',
            'message': 'Test message',
            'error_code': 'TEST_ERROR',
            'details': {'n': 1},
            'suggestion': None
        }


class TestConfigExceptions:
    """Test cases for configuration exceptions."""

    def test_configuration_error(self):
        exc = ConfigurationError("Bad value", config_section="scan", config_key="url")

        assert exc.error_code == "CONFIG_ERROR"
        assert exc.details == {'config_section': 'scan', 'config_key': 'url'}
        assert exc.config_section == "scan"

    def test_config_validation_error(self):
        exc = ConfigValidationError(["error1", "error2"])

        assert exc.message == "Configuration validation failed with 2 errors"
        assert exc.validation_errors == ["error1", "error2"]
        assert exc.details['validation_errors'] == ["error1", "error2"]

    def test_config_file_errors(self):
        not_found = ConfigFileNotFoundError("/etc/web_auditor.yml")
        bad_format = ConfigFileFormatError("/etc/web_auditor.yml", "mapping values are not allowed")

        assert not_found.file_path == "/etc/web_auditor.yml"
        assert "not found" in not_found.message
        assert bad_format.error_code == "CONFIG_FORMAT_ERROR"
        assert bad_format.details['format_error'] == "mapping values are not allowed"


class TestScanExceptions:
    """Test cases for scan exceptions."""

    def test_scan_error(self):
        exc = ScanError("Crawl failed", url="http://a/", stage="crawling")

        assert exc.error_code == "SCAN_ERROR"
        assert exc.details == {'url': 'http://a/', 'stage': 'crawling'}

    def test_module_fault(self):
        """Test module faults describe module, page and cause."""
        cause = KeyError('token')
        exc = ModuleFault("xss", url="http://a/search", cause=cause)

        assert exc.message == "Error in module 'xss' while auditing http://a/search: 'token'"
        assert exc.module == "xss"
        assert exc.cause is cause
        assert exc.stage == "auditing"
        assert exc.details['cause'] == "KeyError('token')"
        assert exc.error_code == "MODULE_FAULT"

    def test_fetch_failure(self):
        exc = FetchFailure("http://a/", "connection refused")

        assert exc.message == "Failed to fetch http://a/: connection refused"
        assert exc.reason == "connection refused"
        assert exc.url == "http://a/"

    def test_component_errors(self):
        not_found = ComponentNotFoundError("modules", "xss")
        load_error = ComponentLoadError("reports", "reports/html.py", "SyntaxError")

        assert not_found.message == "Unknown modules component: xss"
        assert not_found.suggestion
        assert load_error.details == {
            'kind': 'reports', 'source': 'reports/html.py', 'reason': 'SyntaxError'
        }

    def test_scan_phase_error(self):
        exc = ScanPhaseError("done", "preparing")

        assert exc.message == "Cannot move from done back to preparing"
        assert exc.stage == "done"
        assert exc.details == {'current': 'done', 'requested': 'preparing', 'stage': 'done'}
        assert 'reset()' in exc.suggestion

    def test_exception_chaining(self):
        """Test exception chaining and context preservation."""
        with pytest.raises(ComponentLoadError) as exc_info:
            try:
                raise ImportError("No module named 'checks'")
            except ImportError as e:
                raise ComponentLoadError("modules", "checks:Xss", str(e)) from e

        assert isinstance(exc_info.value.__cause__, ImportError)


class TestExceptionHierarchy:
    """Test exception hierarchy and relationships."""

    def test_recoverable_errors(self):
        """Test everything the orchestrator may survive is a WebAuditorError."""
        for exc in [
            ConfigurationError("config error"),
            ScanError("scan error"),
            ModuleFault("xss"),
            FetchFailure("http://a/"),
            ComponentNotFoundError("plugins", "proxy"),
        ]:
            assert isinstance(exc, WebAuditorError)
            assert not isinstance(exc, WebAuditorCriticalError)

    def test_fatal_is_critical(self):
        exc = FatalScanError("Out of disk space")

        assert isinstance(exc, WebAuditorCriticalError)
        assert isinstance(exc, WebAuditorException)
        assert not isinstance(exc, WebAuditorError)
        assert exc.error_code == "FATAL_SCAN_ERROR"

    def test_exception_suggestions(self):
        """Test that exceptions provide helpful suggestions."""
        for exc in [
            ConfigValidationError(["error1"]),
            ConfigFileNotFoundError("config.yml"),
            ComponentNotFoundError("modules", "xss"),
        ]:
            assert exc.suggestion
