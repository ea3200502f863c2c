"""Test configuration and utilities for WebAuditor test suite."""

import tempfile
import shutil
from pathlib import Path
from typing import Callable, Dict, Any, List, Optional
import pytest

from web_auditor.core.config import ScanOptions
from web_auditor.core.scanning import (
    AuditModule, HTTPTransport, Page, PageFactory, ScanOrchestrator,
    Session, SharedCollaborators, Spider
)


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def test_config() -> Dict[str, Any]:
    """Basic test configuration."""
    return {
        'system': {
            'logs_dir': 'logs'
        },
        'scan': {
            'url': 'http://testsite.local/',
            'restrict_paths': [],
            'exclude_binaries': False,
            'only_positives': False,
            'redundant': {'calendar': 5},
            'http_precision': 2,
            'pause_poll_interval': 0.01
        },
        'components': {
            'modules': {'directory': None, 'manifest': {}, 'load': ['*']},
            'plugins': {'directory': None, 'manifest': {}, 'load': [], 'options': {}},
            'reports': {'directory': None, 'manifest': {}, 'load': [], 'options': {}}
        },
        'listing': {
            'lsmod': [],
            'lsplug': [],
            'lsrep': []
        },
        'logging': {
            'level': 'ERROR',  # Reduce noise in tests
            'format': '%(message)s',
            'file_rotation': False,
            'max_file_size': '1MB',
            'backup_count': 1
        }
    }


@pytest.fixture
def config_file(temp_dir, test_config):
    """Create temporary configuration file."""
    import yaml

    config_file = temp_dir / 'test_config.yml'
    with open(config_file, 'w') as f:
        yaml.dump(test_config, f)

    return config_file


# Collaborator fakes

class FakeHTTP(HTTPTransport):
    """Transport that resolves nothing but records harvests and resets."""

    def __init__(self):
        self.runs = 0
        self.resets = 0
        self.events: List[str] = []
        self.request_count = 12
        self.response_count = 10
        self.time_out_count = 1
        self.curr_res_time = 0.5
        self.curr_res_cnt = 4
        self.curr_res_per_second = 8.0
        self.average_res_time = 0.2
        self.max_concurrency = 20

    def run(self) -> None:
        self.runs += 1

    def reset(self) -> None:
        self.resets += 1
        self.events.append('http.reset')
        self.request_count = 0
        self.response_count = 0
        self.time_out_count = 0


class FakeSpider(Spider):
    """Spider reporting a fixed list of discovered URLs."""

    def __init__(self, urls: Optional[List[str]] = None, redirects: Optional[List[str]] = None):
        self.urls = list(urls or [])
        self._redirects = list(redirects or [])
        self.run_calls = 0
        self.paused = 0
        self.resumed = 0

    def run(self, blocking: bool, on_discovered: Callable[[str], None]) -> None:
        self.run_calls += 1
        for url in self.urls:
            on_discovered(url)

    def pause(self) -> None:
        self.paused += 1

    def resume(self) -> None:
        self.resumed += 1

    @property
    def redirects(self) -> List[str]:
        return list(self._redirects)

    @property
    def sitemap(self) -> List[str]:
        return list(self.urls)


class FakePageFactory(PageFactory):
    """Builds pages synchronously; URLs listed in ``missing`` never materialize."""

    def __init__(self, missing: Optional[List[str]] = None, binary: Optional[List[str]] = None):
        self.missing = set(missing or [])
        self.binary = set(binary or [])
        self.fetched: List[str] = []

    def fetch(self, url: str, precision: int, on_ready: Callable[[Page], None]) -> None:
        self.fetched.append(url)
        if url in self.missing:
            return
        on_ready(Page(url=url, is_text=url not in self.binary))


class FakeSession(Session):
    def __init__(self):
        self.checks = 0

    def ensure_logged_in(self) -> None:
        self.checks += 1


def make_module(name: str, calls: List[tuple], priority: int = 0, fail_on: Optional[str] = None):
    """Build a module class that records its invocations into ``calls``."""

    def run(self):
        calls.append((self.shortname, self.page.url))
        if fail_on and self.page.url.endswith(fail_on):
            raise RuntimeError(f"{name} exploded")

    return type(name, (AuditModule,), {
        'INFO': {'name': name, 'priority': priority, 'author': [' Test Author ']},
        'run': run
    })


@pytest.fixture
def fake_http():
    return FakeHTTP()


@pytest.fixture
def shared(fake_http):
    return SharedCollaborators(fake_http)


@pytest.fixture
def page_factory():
    return FakePageFactory()


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def scan_options():
    return ScanOptions(url='http://testsite.local/', pause_poll_interval=0.01)


@pytest.fixture
def spider():
    return FakeSpider()


@pytest.fixture
def orchestrator(scan_options, shared, page_factory, session, spider):
    """Orchestrator wired with fakes; the same spider is rebuilt on reset."""
    return ScanOrchestrator(
        scan_options,
        shared,
        page_factory,
        spider_factory=lambda opts: spider,
        session=session
    )


@pytest.fixture
def module_factory():
    """Factory for recording module classes, see ``make_module``."""
    return make_module


@pytest.fixture
def orchestrator_factory(shared, session):
    """Build orchestrators with custom options, spider or page factory."""

    def build(options: Optional[ScanOptions] = None, spider: Optional[Spider] = None,
              page_factory: Optional[PageFactory] = None) -> ScanOrchestrator:
        options = options or ScanOptions(url='http://testsite.local/', pause_poll_interval=0.01)
        spider = spider or FakeSpider()
        return ScanOrchestrator(
            options,
            shared,
            page_factory or FakePageFactory(),
            spider_factory=lambda opts: spider,
            session=session
        )

    return build


@pytest.fixture
def spider_factory():
    return FakeSpider


@pytest.fixture
def page_factory_factory():
    return FakePageFactory
