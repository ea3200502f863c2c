"""Plugins running alongside the scan."""

import logging
import threading
from abc import abstractmethod
from typing import Any, Dict, Optional, TYPE_CHECKING

from ..component_manager import Component, ComponentManager
from ..exceptions import FatalScanError

if TYPE_CHECKING:
    from .orchestrator import ScanOrchestrator


class Plugin(Component):
    """Extends a scan with behaviour that runs in its own thread."""

    def __init__(self, orchestrator: 'ScanOrchestrator', options: Dict[str, Any],
                 shortname: Optional[str] = None):
        self.orchestrator = orchestrator
        self.options = options
        self.shortname = shortname or type(self).__name__
        self.logger = logging.getLogger(f'web_auditor.plugins.{self.shortname}')

    def prepare(self) -> None:
        pass

    @abstractmethod
    def run(self) -> None:
        """Plugin body."""

    def clean_up(self) -> None:
        pass

    def register_results(self, results: Any) -> None:
        self.orchestrator.plugins.register_results(self.shortname, results)


class PluginManager(ComponentManager):
    """Starts loaded plugins in threads and waits for them on demand."""

    kind = 'plugins'
    base_class = Plugin

    def __init__(self, orchestrator: 'ScanOrchestrator'):
        super().__init__()
        self.orchestrator = orchestrator
        self._threads: Dict[str, threading.Thread] = {}
        self._results: Dict[str, Any] = {}
        self._fatal: Optional[FatalScanError] = None

    def run(self) -> None:
        """Start every loaded plugin without waiting for it."""
        for name, plugin_cls in self.items():
            thread = threading.Thread(
                target=self._run_plugin,
                args=(name, plugin_cls),
                name=f'plugin-{name}',
                daemon=True
            )
            with self._lock:
                self._threads[name] = thread
            thread.start()
            self.logger.info(f"Started plugin {name}")

    def _run_plugin(self, name: str, plugin_cls) -> None:
        options = self.orchestrator.options.component_options('plugins', name)
        try:
            plugin = plugin_cls(self.orchestrator, options, shortname=name)
            plugin.prepare()
            plugin.run()
            plugin.clean_up()
        except FatalScanError as e:
            # handed to whoever blocks on the plugins
            self.logger.critical(f"Plugin {name} raised a fatal error: {e}")
            with self._lock:
                if self._fatal is None:
                    self._fatal = e
        except Exception as e:
            self.logger.error(f"Plugin {name} failed: {e}", exc_info=True)

    def block(self) -> None:
        """Wait for every started plugin to finish.

        Raises:
            FatalScanError: The first fatal error raised by a plugin
        """
        with self._lock:
            threads = list(self._threads.values())

        for thread in threads:
            thread.join()

        with self._lock:
            self._threads.clear()
            fatal, self._fatal = self._fatal, None

        if fatal is not None:
            raise fatal

    def busy(self) -> bool:
        with self._lock:
            return any(thread.is_alive() for thread in self._threads.values())

    def register_results(self, name: str, results: Any) -> None:
        with self._lock:
            self._results[name] = results

    def results(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._results)

    def clear_results(self) -> None:
        with self._lock:
            self._results.clear()
