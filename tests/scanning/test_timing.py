"""Tests for deferred timing operations and shared collaborator state."""

import pytest
from unittest.mock import Mock

from web_auditor.core.exceptions import FatalScanError
from web_auditor.core.scanning import ElementFilter, SharedCollaborators, TimingAttackRegistry


class TestTimingAttackRegistry:
    """Test cases for TimingAttackRegistry."""

    def test_add_operation_counts(self):
        """Test registration updates modules and counters."""
        registry = TimingAttackRegistry()
        registry.add_operation('blind_sqli', lambda: None, 'http://a/1')
        registry.add_operation('blind_sqli', lambda: None, 'http://a/2')
        registry.add_operation('os_cmd', lambda: None)

        assert registry.has_operations()
        assert registry.timing_modules == {'blind_sqli', 'os_cmd'}
        assert registry.total_operations == 3
        assert registry.pending_operations == 3
        assert registry.running is False

    def test_run_in_order_with_listeners_and_harvest(self):
        """Test operations run in order, each announced and then harvested."""
        events = []
        registry = TimingAttackRegistry()
        registry.add_operation('m', lambda: events.append('op1'), 'http://a/1')
        registry.add_operation('m', lambda: events.append('op2'), 'http://a/2')
        registry.on_timing_attacks(lambda op: events.append(f'listen:{op.url}'))

        executed = registry.run(harvest=lambda: events.append('harvest'))

        assert executed == 2
        assert events == [
            'listen:http://a/1', 'op1', 'harvest',
            'listen:http://a/2', 'op2', 'harvest'
        ]
        assert registry.pending_operations == 0
        assert registry.total_operations == 2
        assert registry.running is True
        assert not registry.has_operations()

    def test_pending_decrements_per_operation(self):
        """Test pending count is observable between operations."""
        registry = TimingAttackRegistry()
        seen = []
        for _ in range(3):
            registry.add_operation('m', lambda: seen.append(registry.pending_operations))

        registry.run()

        assert seen == [3, 2, 1]

    def test_failing_operation_is_isolated(self):
        """Test one failing operation does not stop the batch."""
        registry = TimingAttackRegistry()
        second = Mock()
        registry.add_operation('m', Mock(side_effect=RuntimeError("timeout")))
        registry.add_operation('m', second)

        registry.run()

        second.assert_called_once()
        assert registry.pending_operations == 0

    def test_fatal_error_propagates(self):
        registry = TimingAttackRegistry()
        registry.add_operation('m', Mock(side_effect=FatalScanError("abort")))

        with pytest.raises(FatalScanError):
            registry.run()

    def test_reset(self):
        """Test reset clears operations, listeners and counters."""
        registry = TimingAttackRegistry()
        listener = Mock()
        registry.add_operation('m', lambda: None)
        registry.on_timing_attacks(listener)
        registry.run()

        registry.reset()
        registry.add_operation('n', lambda: None)
        registry.reset()
        registry.run()

        assert listener.call_count == 1
        assert registry.timing_modules == set()
        assert registry.total_operations == 0
        assert registry.pending_operations == 0
        assert registry.running is True

        registry.reset()
        assert registry.running is False


class TestElementFilter:
    """Test cases for ElementFilter."""

    def test_mark_seen_once(self):
        element_filter = ElementFilter()

        assert element_filter.mark_seen('form:search') is True
        assert element_filter.mark_seen('form:search') is False
        assert element_filter.seen('form:search')
        assert len(element_filter) == 1

    def test_reset(self):
        element_filter = ElementFilter()
        element_filter.mark_seen('form:search')

        element_filter.reset()

        assert not element_filter.seen('form:search')


class TestSharedCollaborators:
    """Test cases for SharedCollaborators."""

    def test_defaults(self):
        shared = SharedCollaborators(Mock())

        assert isinstance(shared.timing, TimingAttackRegistry)
        assert isinstance(shared.element_filter, ElementFilter)

    def test_reset_order(self):
        """Test the transport resets before timing and element state."""
        manager = Mock()
        shared = SharedCollaborators(manager.http, manager.timing, manager.element_filter)

        shared.reset()

        assert [c[0] for c in manager.mock_calls] == [
            'http.reset', 'timing.reset', 'element_filter.reset'
        ]
