"""Scan options built from configuration."""

import copy
from dataclasses import dataclass, field, fields
from typing import Dict, List, Any, Optional


@dataclass
class ScanOptions:
    """Options consumed by the scan orchestrator and its components.

    The orchestrator keeps the same instance across resets and switches
    ``only_positives`` off during clean up.
    """
    url: Optional[str] = None
    restrict_paths: List[str] = field(default_factory=list)
    exclude_binaries: bool = False
    only_positives: bool = False
    # pattern -> remaining count; mutated by redundancy filtering during a scan
    redundant: Dict[str, int] = field(default_factory=dict)
    http_precision: int = 2
    pause_poll_interval: float = 1.0

    modules: List[str] = field(default_factory=lambda: ['*'])
    plugins: List[str] = field(default_factory=list)
    reports: List[str] = field(default_factory=list)
    components: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    lsmod: List[str] = field(default_factory=list)
    lsplug: List[str] = field(default_factory=list)
    lsrep: List[str] = field(default_factory=list)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'ScanOptions':
        """Build options from a configuration dictionary.

        Args:
            config: Configuration as loaded by ConfigManager

        Returns:
            ScanOptions instance
        """
        scan = config.get('scan', {}) or {}
        components = config.get('components', {}) or {}
        listing = config.get('listing', {}) or {}

        return cls(
            url=scan.get('url'),
            restrict_paths=list(scan.get('restrict_paths', []) or []),
            exclude_binaries=scan.get('exclude_binaries', False),
            only_positives=scan.get('only_positives', False),
            redundant=dict(scan.get('redundant', {}) or {}),
            http_precision=scan.get('http_precision', 2),
            pause_poll_interval=scan.get('pause_poll_interval', 1.0),
            modules=list((components.get('modules') or {}).get('load', ['*'])),
            plugins=list((components.get('plugins') or {}).get('load', [])),
            reports=list((components.get('reports') or {}).get('load', [])),
            components=copy.deepcopy(components),
            lsmod=list(listing.get('lsmod', [])),
            lsplug=list(listing.get('lsplug', [])),
            lsrep=list(listing.get('lsrep', [])),
        )

    def component_options(self, kind: str, name: str) -> Dict[str, Any]:
        """Per-component options from ``components.<kind>.options.<name>``."""
        section = self.components.get(kind) or {}
        return dict((section.get('options') or {}).get(name) or {})

    def to_dict(self) -> Dict[str, Any]:
        """Deep copy of the options as plain data."""
        return {f.name: copy.deepcopy(getattr(self, f.name)) for f in fields(self)}
