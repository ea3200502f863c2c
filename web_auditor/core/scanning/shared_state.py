"""Process-wide collaborator state and its reset."""

import logging
import threading
from typing import Optional, Set

from .collaborators import HTTPTransport
from .timing import TimingAttackRegistry


logger = logging.getLogger('web_auditor.shared_state')


class ElementFilter:
    """Remembers which page elements have already been audited.

    Elements shared by many pages (a site-wide search form, say) are audited
    once per scan rather than once per page.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._seen: Set[str] = set()

    def mark_seen(self, element_id: str) -> bool:
        """Record ``element_id``; returns True the first time it is seen."""
        with self._lock:
            if element_id in self._seen:
                return False
            self._seen.add(element_id)
            return True

    def seen(self, element_id: str) -> bool:
        with self._lock:
            return element_id in self._seen

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)

    def reset(self) -> None:
        with self._lock:
            self._seen.clear()


class SharedCollaborators:
    """State shared by every orchestrator in a process.

    Only one scan may be active per process while these are shared. Call
    ``reset`` before a new orchestrator reuses them.
    """

    def __init__(self, http: HTTPTransport,
                 timing: Optional[TimingAttackRegistry] = None,
                 element_filter: Optional[ElementFilter] = None):
        self.http = http
        self.timing = timing or TimingAttackRegistry()
        self.element_filter = element_filter or ElementFilter()

    def reset(self) -> None:
        # Transport first: timing counters are measured against its state
        self.http.reset()
        self.timing.reset()
        self.element_filter.reset()
        logger.debug("Shared collaborator state reset")
