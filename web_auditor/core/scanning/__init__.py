"""Scan orchestration modules for WebAuditor."""

from .orchestrator import ScanOrchestrator
from .data_structures import (
    ScanPhase, ScanSeverity, ScanState,
    Page, Issue, StageFault, ScanSnapshot
)
from .collaborators import (
    HTTPTransport, Spider, PageFactory, Session, Trainer,
    NullSession, StaticSpider
)
from .modules import AuditModule, ModuleManager
from .plugins import Plugin, PluginManager
from .reports import Report, ReportManager
from .pause_gate import PauseGate
from .progress import ProgressTracker
from .queues import AuditQueue, SurfaceMap
from .shared_state import ElementFilter, SharedCollaborators
from .timing import TimingAttackRegistry, TimingOperation

__all__ = [
    'ScanOrchestrator',
    'ScanPhase', 'ScanSeverity', 'ScanState',
    'Page', 'Issue', 'StageFault', 'ScanSnapshot',
    'HTTPTransport', 'Spider', 'PageFactory', 'Session', 'Trainer',
    'NullSession', 'StaticSpider',
    'AuditModule', 'ModuleManager',
    'Plugin', 'PluginManager',
    'Report', 'ReportManager',
    'PauseGate', 'ProgressTracker',
    'AuditQueue', 'SurfaceMap',
    'ElementFilter', 'SharedCollaborators',
    'TimingAttackRegistry', 'TimingOperation'
]
