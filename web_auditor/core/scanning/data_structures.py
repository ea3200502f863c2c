"""Core data structures for the scan orchestrator."""

import copy
from datetime import datetime
from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field
from enum import Enum

from ..exceptions import ScanPhaseError


class ScanPhase(Enum):
    """Lifecycle phases, in the order a scan moves through them.

    "paused" is reported by the orchestrator's status but is never a phase.
    """
    READY = "ready"
    PREPARING = "preparing"
    CRAWLING = "crawling"
    AUDITING = "auditing"
    CLEANUP = "cleanup"
    DONE = "done"

    @property
    def order(self) -> int:
        return list(ScanPhase).index(self)


class ScanSeverity(Enum):
    """Issue severity enumeration."""
    INFO = "info"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class ScanState:
    """Mutable lifecycle state of one orchestrator."""
    phase: ScanPhase = ScanPhase.READY
    running: bool = False
    start_time: Optional[datetime] = None
    finish_time: Optional[datetime] = None
    elapsed: Optional[float] = None

    def advance(self, phase: ScanPhase) -> None:
        """Move to ``phase``; phases never move backwards."""
        if phase.order < self.phase.order:
            raise ScanPhaseError(self.phase.value, phase.value)
        self.phase = phase

    def to_dict(self) -> Dict[str, Any]:
        return {
            'phase': self.phase.value,
            'running': self.running,
            'start_time': self.start_time.isoformat() if self.start_time else None,
            'finish_time': self.finish_time.isoformat() if self.finish_time else None,
            'elapsed': self.elapsed
        }


@dataclass
class Page:
    """A fetched unit of work."""
    url: str
    code: int = 200
    is_text: bool = True
    body: str = ''
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class Issue:
    """A finding registered by a check module."""
    name: str
    url: str
    module: str
    severity: ScanSeverity = ScanSeverity.INFO
    description: str = ''
    elements: List[str] = field(default_factory=list)
    evidence: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'url': self.url,
            'module': self.module,
            'severity': self.severity.value,
            'description': self.description,
            'elements': list(self.elements),
            'evidence': copy.deepcopy(self.evidence)
        }


@dataclass
class StageFault:
    """A recoverable fault caught by a lifecycle barrier or module isolation."""
    stage: str
    error: str
    exception_type: str
    module: Optional[str] = None
    url: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_exception(cls, stage: str, exc: BaseException,
                       module: Optional[str] = None,
                       url: Optional[str] = None) -> 'StageFault':
        return cls(
            stage=stage,
            error=str(exc),
            exception_type=type(exc).__name__,
            module=module,
            url=url
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'stage': self.stage,
            'error': self.error,
            'exception_type': self.exception_type,
            'module': self.module,
            'url': self.url,
            'timestamp': self.timestamp.isoformat()
        }


@dataclass
class ScanSnapshot:
    """Serializable result of a scan, consumed by reports."""
    version: str
    revision: str
    options: Dict[str, Any]
    sitemap: List[str]
    issues: List[Issue] = field(default_factory=list)
    plugins: Dict[str, Any] = field(default_factory=dict)
    start_time: Optional[datetime] = None
    finish_time: Optional[datetime] = None
    delta_time: Optional[float] = None

    def issues_by_severity(self, severity: ScanSeverity) -> List[Issue]:
        return [issue for issue in self.issues if issue.severity == severity]

    def to_dict(self) -> Dict[str, Any]:
        """Convert snapshot to plain data.

        Returns:
            Dictionary representation of the snapshot
        """
        return {
            'version': self.version,
            'revision': self.revision,
            'options': copy.deepcopy(self.options),
            'sitemap': list(self.sitemap),
            'issues': [issue.to_dict() for issue in self.issues],
            'plugins': copy.deepcopy(self.plugins),
            'start_time': self.start_time.isoformat() if self.start_time else None,
            'finish_time': self.finish_time.isoformat() if self.finish_time else None,
            'delta_time': self.delta_time
        }
