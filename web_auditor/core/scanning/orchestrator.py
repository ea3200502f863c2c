"""Scan orchestrator tying discovery, page fetching and checks together."""

import copy
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Dict, Hashable, List, Optional
from urllib.parse import urldefrag, urljoin

from ... import __version__
from ..config.config_validator import ConfigValidator
from ..config.options import ScanOptions
from ..exceptions import ConfigValidationError, FatalScanError, FetchFailure, ModuleFault
from ..logger import FAULTS_LOGGER
from .collaborators import NullSession, PageFactory, Session, Spider, StaticSpider, Trainer
from .data_structures import Page, ScanPhase, ScanSnapshot, ScanState, StageFault
from .modules import ModuleManager
from .pause_gate import PauseGate
from .plugins import PluginManager
from .progress import ProgressTracker
from .queues import AuditQueue, SurfaceMap
from .reports import ReportManager
from .shared_state import SharedCollaborators
from .timing import TimingOperation


REVISION = '0.3.0'


class ScanOrchestrator:
    """Runs one scan at a time and can be reset for reuse.

    Lifecycle: ``run`` calls ``prepare`` (start plugins), ``audit`` (crawl,
    drain the URL and page queues, run the deferred timing checks, drain
    again) and ``clean_up`` (stop the clock, wait for plugins), then hands a
    snapshot to the loaded reports.

    Recoverable faults are caught at the narrowest scope: a failing module is
    logged and the loop moves to the next module, a page that cannot be
    fetched is dropped, and anything escaping ``audit`` is caught so that
    clean up and reporting still happen. FatalScanError, SystemExit and
    KeyboardInterrupt are never caught.
    """

    def __init__(self, options: ScanOptions, shared: SharedCollaborators,
                 page_factory: PageFactory,
                 spider_factory: Optional[Callable[[ScanOptions], Spider]] = None,
                 trainer_factory: Optional[Callable[['ScanOrchestrator'], Trainer]] = None,
                 session: Optional[Session] = None):
        """Initialize orchestrator.

        Args:
            options: Scan options; kept across resets
            shared: Process-wide collaborator state (HTTP transport, timing
                registry, element filter)
            page_factory: Builds pages from URLs
            spider_factory: Builds a spider from the options, on construction
                and on every reset
            trainer_factory: Builds a trainer bound to this orchestrator, on
                construction and on every reset
            session: Login keeper checked after every harvest
        """
        self.options = options
        self.shared = shared
        self.http = shared.http
        self.page_factory = page_factory
        self.session = session or NullSession()

        self.logger = logging.getLogger('web_auditor.orchestrator')
        self.fault_logger = logging.getLogger(FAULTS_LOGGER)

        self._spider_factory = spider_factory or (lambda opts: StaticSpider())
        self._trainer_factory = trainer_factory or Trainer

        self.modules = ModuleManager(self)
        self.plugins = PluginManager(self)
        self.reports = ReportManager(options)
        for manager in (self.modules, self.plugins, self.reports):
            manager.configure(options.components.get(manager.kind))

        self.state = ScanState()
        self.pause_gate = PauseGate(options.pause_poll_interval)
        self.progress_tracker = ProgressTracker()

        self.url_queue: AuditQueue[str] = AuditQueue('url')
        self.page_queue: AuditQueue[Page] = AuditQueue('page')
        self.sitemap = SurfaceMap()
        self.auditmap = SurfaceMap()

        self.faults: List[StageFault] = []
        self.current_url = ''
        self._run_modules_listeners: List[Callable[[Page], None]] = []

        # Redundancy counters are consumed during the scan; snapshots report
        # the configured values.
        self._original_redundant = copy.deepcopy(options.redundant)

        self.spider: Spider = None
        self.trainer: Trainer = None
        self.reset_spider()
        self.reset_trainer()

    @classmethod
    def from_config(cls, config: Dict[str, Any], shared: SharedCollaborators,
                    page_factory: PageFactory, **kwargs) -> 'ScanOrchestrator':
        """Validate ``config``, build an orchestrator and load its components.

        Raises:
            ConfigValidationError: If the configuration is invalid
        """
        errors = ConfigValidator(config).validate()
        if errors:
            raise ConfigValidationError(errors)

        orchestrator = cls(ScanOptions.from_config(config), shared, page_factory, **kwargs)
        orchestrator.load_components()
        return orchestrator

    def load_components(self) -> None:
        """Load the modules, plugins and reports named in the options."""
        self.modules.load(self.options.modules)
        self.plugins.load(self.options.plugins)
        self.reports.load(self.options.reports)
        self.logger.info(
            f"Loaded {len(self.modules)} modules, {len(self.plugins)} plugins, "
            f"{len(self.reports)} reports"
        )

    # Lifecycle

    def run(self, finalize: Optional[Callable[[], None]] = None) -> bool:
        """Run the whole scan.

        Args:
            finalize: Called after clean up and before the reports run

        Returns:
            True once the scan reached ``done``

        Raises:
            ScanPhaseError: If a scan already ran and ``reset`` was not called
        """
        self.prepare()

        with self._fault_barrier('audit'):
            self.audit()

        self.clean_up()

        if finalize:
            with self._fault_barrier('finalize'):
                finalize()

        self.state.advance(ScanPhase.DONE)
        self.logger.info(f"Scan finished with {len(self.faults)} recovered faults")

        if not self.reports.empty():
            self.reports.run(self.snapshot())

        return True

    def prepare(self) -> None:
        """Start the clock and the plugins; must precede ``audit``."""
        self.state.advance(ScanPhase.PREPARING)
        self.state.running = True
        self.state.start_time = datetime.now()
        self.state.elapsed = None

        self.plugins.run()

    def audit(self) -> None:
        """Crawl, audit every page, then run the deferred timing checks."""
        self.pause_gate.wait_if_paused()

        self.state.advance(ScanPhase.CRAWLING)

        if self.options.restrict_paths:
            # No need to crawl when restricted to a list of paths
            self.options.restrict_paths = [self._to_absolute(p) for p in self.options.restrict_paths]
            self.sitemap.update(self.options.restrict_paths)
            for url in self.options.restrict_paths:
                self.push_url(url)
        else:
            self.spider.run(False, self._on_spider_discovery)

        self.state.advance(ScanPhase.AUDITING)
        self.drain_queues()

        with self._fault_barrier('timing'):
            if self.shared.timing.has_operations():
                self.logger.info("Running timing attacks")
                self.shared.timing.on_timing_attacks(self._on_timing_operation)
                self.shared.timing.run(harvest=self.harvest)

            # timing checks may have revealed new pages
            self.drain_queues()

    def clean_up(self) -> None:
        """Stop the clock and wait for the plugins to finish."""
        self.state.advance(ScanPhase.CLEANUP)

        self.state.finish_time = datetime.now()
        if self.state.start_time is None:
            self.state.start_time = self.state.finish_time
        self.state.elapsed = (self.state.finish_time - self.state.start_time).total_seconds()

        # reports expect every finding, not only positives
        self.options.only_positives = False

        self.state.running = False

        self.plugins.block()

    # Queues

    def drain_queues(self) -> None:
        """Turn queued URLs into pages and audit them until both queues are empty."""
        while not self.url_queue.empty():
            url = self.url_queue.pop()
            if url is None:
                break

            fetched = self._fetch_page(url)
            self.harvest()
            if not fetched:
                # attempted, so it counts towards progress
                self.logger.debug(f"No page materialized for {url}")
                self.sitemap.add(url)
                self.auditmap.add(url)

            self.drain_page_queue()
            self.harvest()

        # modules and the trainer may have queued pages after the last URL
        self.drain_page_queue()

    def drain_page_queue(self) -> None:
        """Audit queued pages; pages queued meanwhile are audited too."""
        while not self.page_queue.empty():
            page = self.page_queue.pop()
            if page is None:
                break
            self.run_modules_on(page)
            self.harvest()

    def push_url(self, url: str) -> None:
        """Queue a URL for fetching and record it in the site map."""
        url = self._to_absolute(url)
        self.url_queue.push(url)
        self.sitemap.add(url)

    def push_page(self, page: Page) -> None:
        """Queue a page for auditing and record it in the site map."""
        self.page_queue.push(page)
        self.sitemap.add(page.url)

    @property
    def url_queue_total_size(self) -> int:
        return self.url_queue.total_pushed

    @property
    def page_queue_total_size(self) -> int:
        return self.page_queue.total_pushed

    def _fetch_page(self, url: str) -> List[Page]:
        fetched: List[Page] = []

        def on_ready(page: Page) -> None:
            fetched.append(page)
            self.push_page(page)

        try:
            self.page_factory.fetch(url, self.options.http_precision, on_ready)
        except FetchFailure as e:
            self.logger.debug(str(e), extra={'url': url})
        except FatalScanError:
            raise
        except Exception as e:
            self._record_fault('fetch', e, url=url)

        return fetched

    def _on_spider_discovery(self, url: str) -> None:
        self.sitemap.update(self._to_absolute(u) for u in self.spider.sitemap)
        self.push_url(url)

    def _to_absolute(self, url: str) -> str:
        try:
            absolute, _ = urldefrag(urljoin(self.options.url or '', url.strip()))
        except (ValueError, TypeError, AttributeError):
            return url
        return absolute or url

    # Module execution

    def on_run_modules(self, callback: Callable[[Page], None]) -> None:
        """Call ``callback`` with each page right before its modules run."""
        self._run_modules_listeners.append(callback)

    def run_modules_on(self, page: Optional[Page]) -> None:
        """Run every scheduled module against ``page``."""
        if page is None:
            return

        schedule = self.modules.schedule()
        if not schedule:
            self.logger.warning(f"No modules scheduled, not auditing {page.url}")
            return

        # Recorded even if skipped below: it has been considered
        self.sitemap.add(page.url)
        self.auditmap.add(page.url)

        if self.options.exclude_binaries and not page.is_text:
            self.logger.info(f"Ignoring page due to non text-based content-type: {page.url}")
            return

        self.logger.info(f"Auditing: [HTTP: {page.code}] {page.url}")

        for listener in list(self._run_modules_listeners):
            try:
                listener(page)
            except FatalScanError:
                raise
            except Exception as e:
                self._record_fault('listener', e, url=page.url)

        self.current_url = page.url

        for name in schedule:
            self.pause_gate.wait_if_paused()
            self._run_module(name, page)

        self.harvest()

    def _run_module(self, name: str, page: Page) -> None:
        try:
            self.modules.run_one(name, page)
        except FatalScanError:
            raise
        except Exception as e:
            self._record_fault('module', ModuleFault(name, page.url, e), module=name, url=page.url)

    def harvest(self) -> None:
        """Resolve every queued HTTP request, then make sure we are still logged in."""
        self.logger.debug("Harvesting HTTP responses")
        self.http.run()
        self.session.ensure_logged_in()

    def _on_timing_operation(self, op: TimingOperation) -> None:
        if op.url:
            self.current_url = op.url

    # Faults

    @contextmanager
    def _fault_barrier(self, stage: str):
        try:
            yield
        except FatalScanError:
            raise
        except Exception as e:
            self._record_fault(stage, e)

    def _record_fault(self, stage: str, exc: BaseException,
                      module: Optional[str] = None, url: Optional[str] = None) -> None:
        self.faults.append(StageFault.from_exception(stage, exc, module=module, url=url))

        extra = {'stage': stage, 'phase': self.state.phase.value}
        if module:
            extra['scan_module'] = module
        if url:
            extra['url'] = url
        # ModuleFault wraps the traceback-carrying exception
        exc_info = getattr(exc, 'cause', None) or exc
        self.fault_logger.error(f"{stage} fault: {exc}", exc_info=exc_info, extra=extra)

    # Pause / status

    def pause(self, token: Optional[Hashable] = None) -> Hashable:
        """Pause at the next suspension point.

        Returns:
            Token to hand back to ``resume``
        """
        token = self.pause_gate.pause(token)
        self.spider.pause()
        self.logger.info("Pausing scan")
        return token

    def resume(self, token: Hashable) -> bool:
        """Withdraw the pause request made with ``token``.

        Returns:
            False if ``token`` held no pause request
        """
        if not self.pause_gate.resume(token):
            return False

        if not self.pause_gate.is_paused():
            self.spider.resume()
            self.logger.info("Resuming scan")
        return True

    def is_paused(self) -> bool:
        return self.pause_gate.is_paused()

    def is_running(self) -> bool:
        return self.state.running

    def status(self) -> str:
        if self.is_paused():
            return 'paused'
        return self.state.phase.value

    # Statistics

    def stats(self, refresh_time: bool = False, override_refresh: bool = False) -> Dict[str, Any]:
        """Current scan statistics.

        Args:
            refresh_time: Update the running time, unless every discovered
                page has been audited
            override_refresh: Update the running time regardless

        Returns:
            Dictionary of HTTP counters, map sizes, progress and ETA
        """
        now = datetime.now()
        if self.state.start_time is None:
            self.state.start_time = now

        sitemap_size = len(self.sitemap)
        auditmap_size = len(self.auditmap)

        if (not refresh_time or auditmap_size == sitemap_size) and not override_refresh:
            if self.state.elapsed is None:
                self.state.elapsed = (now - self.state.start_time).total_seconds()
        else:
            self.state.elapsed = (now - self.state.start_time).total_seconds()

        res_cnt = self.http.response_count
        avg = 0
        if res_cnt > 0 and self.state.elapsed:
            avg = int(res_cnt / self.state.elapsed)

        timing = self.shared.timing
        progress = self.progress_tracker.progress(
            auditmap_size=auditmap_size,
            sitemap_size=sitemap_size,
            redirect_count=len(self.spider.redirects),
            timing_modules=len(timing.timing_modules),
            timing_running=timing.running,
            timing_total=timing.total_operations,
            timing_pending=timing.pending_operations
        )

        return {
            'requests': self.http.request_count,
            'responses': res_cnt,
            'time_out_count': self.http.time_out_count,
            'time': self.state.elapsed,
            'avg': avg,
            'sitemap_size': sitemap_size,
            'auditmap_size': auditmap_size,
            'progress': progress,
            'curr_res_time': self.http.curr_res_time,
            'curr_res_cnt': self.http.curr_res_cnt,
            'curr_avg': self.http.curr_res_per_second,
            'average_res_time': self.http.average_res_time,
            'max_concurrency': self.http.max_concurrency,
            'current_page': self.current_url,
            'eta': self.progress_tracker.eta(progress, self.state.start_time, now)
        }

    # Results

    def snapshot(self) -> ScanSnapshot:
        """Results of the scan so far."""
        options = self.options.to_dict()
        options['redundant'] = copy.deepcopy(self._original_redundant)
        options['modules'] = self.modules.keys()

        return ScanSnapshot(
            version=__version__,
            revision=REVISION,
            options=options,
            sitemap=self.sitemap.sorted(),
            issues=copy.deepcopy(self.modules.results()),
            plugins=self.plugins.results(),
            start_time=self.state.start_time,
            finish_time=self.state.finish_time,
            delta_time=self.state.elapsed
        )

    @property
    def version(self) -> str:
        return __version__

    @property
    def revision(self) -> str:
        return REVISION

    # Component listings

    def list_modules(self) -> List[Dict[str, Any]]:
        return self.modules.listing(self.options.lsmod, 'mod_name')

    def list_plugins(self) -> List[Dict[str, Any]]:
        return self.plugins.listing(self.options.lsplug, 'plug_name')

    def list_reports(self) -> List[Dict[str, Any]]:
        return self.reports.listing(self.options.lsrep, 'rep_name')

    # Reset

    def reset_spider(self) -> None:
        self.spider = self._spider_factory(self.options)

    def reset_trainer(self) -> None:
        self.trainer = self._trainer_factory(self)

    def reset(self) -> None:
        """Reset everything so the orchestrator can run another scan.

        Update ``options`` first; they are kept.
        """
        # shared state first, the transport must be clean before the rest
        self.reset_shared()

        self.url_queue.clear()
        self.page_queue.clear()
        self.url_queue.reset_counter()
        self.page_queue.reset_counter()
        self.sitemap.clear()
        self.auditmap.clear()

        self._run_modules_listeners.clear()
        self.reset_trainer()
        self.reset_spider()

        self.modules.clear()
        self.modules.clear_results()
        self.reports.clear()
        self.plugins.clear()
        self.plugins.clear_results()

        self.pause_gate.clear()
        self.progress_tracker.reset()
        self.state = ScanState()
        self.faults = []
        self.current_url = ''
        self._original_redundant = copy.deepcopy(self.options.redundant)

    def reset_shared(self) -> None:
        """Reset the process-wide collaborator state."""
        self.shared.reset()
