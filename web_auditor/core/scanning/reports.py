"""Reports generated from a finished scan."""

import logging
from abc import abstractmethod
from typing import Any, Dict, List, Optional

from ..component_manager import Component, ComponentManager
from ..config.options import ScanOptions
from ..exceptions import FatalScanError
from .data_structures import ScanSnapshot


class Report(Component):
    """Consumes a scan snapshot."""

    def __init__(self, snapshot: ScanSnapshot, options: Dict[str, Any],
                 shortname: Optional[str] = None):
        self.snapshot = snapshot
        self.options = options
        self.shortname = shortname or type(self).__name__
        self.logger = logging.getLogger(f'web_auditor.reports.{self.shortname}')

    @abstractmethod
    def run(self) -> None:
        """Generate the report."""


class ReportManager(ComponentManager):
    kind = 'reports'
    base_class = Report

    def __init__(self, options: ScanOptions):
        super().__init__()
        self.options = options

    def run(self, snapshot: ScanSnapshot) -> List[str]:
        """Run every loaded report; one failing report does not stop the rest.

        Returns:
            Names of the reports that completed
        """
        completed = []
        for name, report_cls in self.items():
            try:
                report_cls(
                    snapshot, self.options.component_options('reports', name), shortname=name
                ).run()
                completed.append(name)
            except FatalScanError:
                raise
            except Exception as e:
                self.logger.error(f"Report {name} failed: {e}", exc_info=True)
        return completed
