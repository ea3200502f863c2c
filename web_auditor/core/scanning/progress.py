"""Progress percentage and ETA calculation."""

import logging
from datetime import datetime
from typing import Optional


logger = logging.getLogger('web_auditor.progress')


class ProgressTracker:
    """Computes scan progress across the regular and timing-channel phases.

    Progress of regular checks is audited pages over discovered pages, minus
    redirects (valid paths that are never audited). Progress of timing checks
    is completed timing operations over total operations. When timing checks
    exist, each phase accounts for half of the total.
    """

    UNKNOWN_ETA = '--:--:--'

    def __init__(self):
        self._last_progress: Optional[float] = None
        self._last_eta = self.UNKNOWN_ETA

    @staticmethod
    def progress(auditmap_size: int, sitemap_size: int, redirect_count: int = 0,
                 timing_modules: int = 0, timing_running: bool = False,
                 timing_total: int = 0, timing_pending: int = 0) -> float:
        """Calculate the progress percentage.

        Args:
            auditmap_size: Number of pages that went through the module loop
            sitemap_size: Number of discovered URLs
            redirect_count: Number of discovered URLs that are redirects
            timing_modules: Number of modules with deferred timing operations
            timing_running: Whether the timing phase has started
            timing_total: Total timing operations registered
            timing_pending: Timing operations not yet executed

        Returns:
            Percentage rounded to 2 decimals in [0, 100]; 0.0 on any
            arithmetic fault
        """
        try:
            effective_total = sitemap_size - redirect_count
            weight = 50 if timing_modules > 0 else 100

            progress = (float(auditmap_size) / effective_total) * weight

            if timing_running:
                called = timing_total - timing_pending
                progress += (float(called) / timing_total) * weight

            progress = round(progress, 2)
        except (ZeroDivisionError, TypeError, ValueError, OverflowError):
            return 0.0

        # guard against NaN/inf slipping through float division
        if progress != progress or progress in (float('inf'), float('-inf')):
            return 0.0

        return min(max(progress, 0.0), 100.0)

    def eta(self, progress: float, start_time: Optional[datetime],
            now: Optional[datetime] = None) -> str:
        """Estimated remaining time as ``HH:MM:SS``.

        The last estimate is reused while progress does not move.
        """
        if progress == self._last_progress:
            return self._last_eta

        self._last_progress = progress

        if not start_time or progress <= 0:
            self._last_eta = self.UNKNOWN_ETA
            return self._last_eta

        now = now or datetime.now()
        elapsed = (now - start_time).total_seconds()
        remaining = max(elapsed * 100 / progress - elapsed, 0)

        self._last_eta = self.format_duration(remaining)
        return self._last_eta

    @staticmethod
    def format_duration(seconds: float) -> str:
        seconds = int(seconds)
        hours, remainder = divmod(seconds, 3600)
        minutes, secs = divmod(remainder, 60)
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"

    def reset(self) -> None:
        self._last_progress = None
        self._last_eta = self.UNKNOWN_ETA
