"""Check modules and their schedule."""

import logging
import threading
from abc import abstractmethod
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING

from ..component_manager import Component, ComponentManager
from .data_structures import Issue, Page, ScanSeverity

if TYPE_CHECKING:
    from .orchestrator import ScanOrchestrator


class AuditModule(Component):
    """One vulnerability check, instantiated per page.

    Subclasses implement ``run`` and report findings through
    ``register_issue``. Checks that measure response latency hand their work
    to ``audit_timing`` so it runs after the regular checks.
    """

    def __init__(self, page: Page, orchestrator: 'ScanOrchestrator', shortname: Optional[str] = None):
        self.page = page
        self.orchestrator = orchestrator
        self.shortname = shortname or type(self).__name__
        self.issues: List[Issue] = []
        self.logger = logging.getLogger(f'web_auditor.modules.{self.shortname}')

    @property
    def http(self):
        return self.orchestrator.http

    def prepare(self) -> None:
        pass

    @abstractmethod
    def run(self) -> None:
        """Audit ``self.page``."""

    def clean_up(self) -> None:
        pass

    def register_issue(self, name: str, severity: ScanSeverity = ScanSeverity.INFO,
                       description: str = '', elements: Optional[List[str]] = None,
                       evidence: Optional[Dict[str, Any]] = None,
                       url: Optional[str] = None) -> Issue:
        issue = Issue(
            name=name,
            url=url or self.page.url,
            module=self.shortname,
            severity=severity,
            description=description,
            elements=list(elements or []),
            evidence=dict(evidence or {})
        )
        self.issues.append(issue)
        return issue

    def audit_timing(self, operation: Callable[[], None], url: Optional[str] = None) -> None:
        """Defer a latency-based check until the timing batch."""
        self.orchestrator.shared.timing.add_operation(
            self.shortname, operation, url or self.page.url
        )

    def skip_element(self, element_id: str) -> bool:
        """True if this module already audited ``element_id`` on another page."""
        key = f"{self.shortname}:{element_id}"
        return not self.orchestrator.shared.element_filter.mark_seen(key)


class ModuleManager(ComponentManager):
    """Registry and scheduler of check modules."""

    kind = 'modules'
    base_class = AuditModule

    def __init__(self, orchestrator: 'ScanOrchestrator'):
        super().__init__()
        self.orchestrator = orchestrator
        self._results: List[Issue] = []
        self._results_lock = threading.Lock()

    def schedule(self) -> List[str]:
        """Names of the loaded modules in execution order.

        Higher ``priority`` runs first; load order breaks ties. Read fresh on
        every call so enabling or disabling a module applies from the next page.
        """
        indexed = list(enumerate(self.items()))
        indexed.sort(key=lambda pair: (-pair[1][1].info().get('priority', 0), pair[0]))
        return [name for _, (name, _mod) in indexed]

    def run_one(self, name: str, page: Page) -> List[Issue]:
        """Run the module registered as ``name`` against ``page``.

        Issues are accumulated into ``results``. Exceptions raised by the
        module propagate to the caller.
        """
        instance = self[name](page, self.orchestrator, shortname=name)
        instance.prepare()
        instance.run()
        instance.clean_up()

        with self._results_lock:
            self._results.extend(instance.issues)
        return instance.issues

    def results(self) -> List[Issue]:
        with self._results_lock:
            return list(self._results)

    def clear_results(self) -> None:
        with self._results_lock:
            self._results.clear()
