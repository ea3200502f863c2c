"""Interfaces of the external collaborators driven by the orchestrator."""

from abc import ABC, abstractmethod
from typing import Callable, Iterable, List, Optional, TYPE_CHECKING

from .data_structures import Page

if TYPE_CHECKING:
    from .orchestrator import ScanOrchestrator


class HTTPTransport(ABC):
    """Concurrent HTTP client.

    Requests are queued by modules and pages; ``run`` blocks until every
    queued and in-flight request has completed and its callbacks have fired.
    """

    request_count: int = 0
    response_count: int = 0
    time_out_count: int = 0
    curr_res_time: float = 0.0
    curr_res_cnt: int = 0
    curr_res_per_second: float = 0.0
    average_res_time: float = 0.0
    max_concurrency: int = 0

    @abstractmethod
    def run(self) -> None:
        """Resolve all queued requests."""

    @abstractmethod
    def reset(self) -> None:
        """Clear queued requests and zero all counters."""


class Spider(ABC):
    """Crawler that discovers the application surface."""

    @abstractmethod
    def run(self, blocking: bool, on_discovered: Callable[[str], None]) -> None:
        """Crawl the target, calling ``on_discovered`` for each URL."""

    def pause(self) -> None:
        pass

    def resume(self) -> None:
        pass

    @property
    def redirects(self) -> List[str]:
        return []

    @property
    def sitemap(self) -> Iterable[str]:
        return []


class PageFactory(ABC):
    """Turns a URL into a Page asynchronously."""

    @abstractmethod
    def fetch(self, url: str, precision: int, on_ready: Callable[[Page], None]) -> None:
        """Queue the request for ``url``.

        ``on_ready`` fires once the response is harvested. It may never fire
        if the page cannot be built, and ``fetch`` may raise FetchFailure.
        """


class Session(ABC):
    """Keeps the scanner logged in to the target."""

    @abstractmethod
    def ensure_logged_in(self) -> None:
        """Re-authenticate if the session has been lost."""


class Trainer:
    """Discovers new page states from HTTP responses.

    Built against an orchestrator and feeds pages back through
    ``orchestrator.push_page`` as responses are harvested.
    """

    def __init__(self, orchestrator: 'ScanOrchestrator'):
        self.orchestrator = orchestrator

    def push(self, page: Page) -> None:
        self.orchestrator.push_page(page)


class NullSession(Session):
    """Session for targets that need no login."""

    def ensure_logged_in(self) -> None:
        return None


class StaticSpider(Spider):
    """Spider that reports a fixed list of URLs without crawling."""

    def __init__(self, urls: Optional[Iterable[str]] = None,
                 redirects: Optional[Iterable[str]] = None):
        self.urls = list(urls or [])
        self._redirects = list(redirects or [])

    def run(self, blocking: bool, on_discovered: Callable[[str], None]) -> None:
        for url in self.urls:
            on_discovered(url)

    @property
    def redirects(self) -> List[str]:
        return list(self._redirects)

    @property
    def sitemap(self) -> List[str]:
        return list(self.urls)
