"""Core framework components for the WebAuditor system."""

from .component_manager import Component, ComponentManager
from .scanning import ScanOrchestrator

__all__ = ['Component', 'ComponentManager', 'ScanOrchestrator']
