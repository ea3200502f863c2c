"""Deferred timing-channel operations.

Timing checks infer a condition from response latency, so running them while
the regular checks flood the target would skew their measurements. Modules
register their timing operations here while auditing; the orchestrator runs
them as one batch once the regular checks are done.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Set

from ..exceptions import FatalScanError


logger = logging.getLogger('web_auditor.timing')


@dataclass
class TimingOperation:
    """One deferred timing check."""
    module: str
    operation: Callable[[], None]
    url: str = ''


class TimingAttackRegistry:
    """Process-shared registry of deferred timing operations and counters."""

    def __init__(self):
        self._lock = threading.RLock()
        self._operations: List[TimingOperation] = []
        self._listeners: List[Callable[[TimingOperation], None]] = []
        self.timing_modules: Set[str] = set()
        self.total_operations = 0
        self.pending_operations = 0
        # stays set once the batch starts, until reset
        self.running = False

    def add_operation(self, module: str, operation: Callable[[], None], url: str = '') -> None:
        """Defer ``operation`` registered by ``module`` until the timing batch."""
        with self._lock:
            self._operations.append(TimingOperation(module, operation, url))
            self.timing_modules.add(module)
            self.total_operations += 1
            self.pending_operations += 1

    def has_operations(self) -> bool:
        with self._lock:
            return bool(self._operations)

    def on_timing_attacks(self, callback: Callable[[TimingOperation], None]) -> None:
        """Call ``callback`` with each operation right before it runs."""
        with self._lock:
            self._listeners.append(callback)

    def run(self, harvest: Optional[Callable[[], None]] = None) -> int:
        """Execute every queued operation in registration order.

        Args:
            harvest: Called after each operation so its requests resolve
                before the next one is measured

        Returns:
            Number of operations executed
        """
        with self._lock:
            self.running = True
            operations, self._operations = self._operations, []
            listeners = list(self._listeners)

        logger.info(f"Running {len(operations)} timing operations")

        for op in operations:
            for listener in listeners:
                listener(op)

            try:
                op.operation()
            except FatalScanError:
                raise
            except Exception as e:
                logger.error(
                    f"Timing operation from {op.module} failed: {e}",
                    extra={'scan_module': op.module, 'url': op.url}
                )

            with self._lock:
                self.pending_operations -= 1

            if harvest:
                harvest()

        return len(operations)

    def reset(self) -> None:
        with self._lock:
            self._operations = []
            self._listeners = []
            self.timing_modules = set()
            self.total_operations = 0
            self.pending_operations = 0
            self.running = False
