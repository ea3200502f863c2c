"""Tests for progress and ETA calculation."""

from datetime import datetime, timedelta

import pytest

from web_auditor.core.scanning import ProgressTracker


class TestProgress:
    """Test cases for ProgressTracker.progress."""

    def test_nothing_audited(self):
        assert ProgressTracker.progress(auditmap_size=0, sitemap_size=10) == 0.0

    def test_everything_audited(self):
        assert ProgressTracker.progress(auditmap_size=10, sitemap_size=10) == 100.0

    def test_only_redirects(self):
        """Test an empty denominator yields 0.0 instead of raising."""
        assert ProgressTracker.progress(auditmap_size=0, sitemap_size=3, redirect_count=3) == 0.0

    def test_empty_scan(self):
        assert ProgressTracker.progress(auditmap_size=0, sitemap_size=0) == 0.0

    def test_redirects_excluded(self):
        assert ProgressTracker.progress(auditmap_size=2, sitemap_size=5, redirect_count=1) == 50.0

    def test_rounding(self):
        assert ProgressTracker.progress(auditmap_size=1, sitemap_size=3) == 33.33

    @pytest.mark.parametrize('pending, expected', [(4, 50.0), (2, 75.0), (0, 100.0)])
    def test_timing_phase(self, pending, expected):
        """Test timing operations account for the second half."""
        progress = ProgressTracker.progress(
            auditmap_size=8, sitemap_size=8, timing_modules=1,
            timing_running=True, timing_total=4, timing_pending=pending
        )

        assert progress == expected

    def test_timing_registered_not_running(self):
        """Test regular checks only reach half while timing checks wait."""
        progress = ProgressTracker.progress(
            auditmap_size=8, sitemap_size=8, timing_modules=2,
            timing_total=4, timing_pending=4
        )

        assert progress == 50.0

    def test_timing_running_without_operations(self):
        """Test a running timing phase with no operations yields 0.0."""
        progress = ProgressTracker.progress(
            auditmap_size=8, sitemap_size=8, timing_modules=1, timing_running=True
        )

        assert progress == 0.0

    def test_clamped(self):
        """Test progress never leaves the 0..100 range."""
        assert ProgressTracker.progress(auditmap_size=5, sitemap_size=4, redirect_count=2) == 100.0
        assert ProgressTracker.progress(auditmap_size=1, sitemap_size=1, redirect_count=2) == 0.0

    def test_bad_input(self):
        assert ProgressTracker.progress(auditmap_size=None, sitemap_size=4) == 0.0


class TestEta:
    """Test cases for ProgressTracker.eta."""

    def test_unknown_without_progress(self):
        tracker = ProgressTracker()

        assert tracker.eta(0.0, datetime.now()) == '--:--:--'
        tracker.reset()
        assert tracker.eta(10.0, None) == '--:--:--'

    def test_remaining_time(self):
        """Test remaining time is extrapolated from elapsed time."""
        tracker = ProgressTracker()
        now = datetime(2024, 1, 1, 12, 0, 0)
        start = now - timedelta(minutes=10)

        assert tracker.eta(25.0, start, now) == '00:30:00'

    def test_memoised_while_progress_unchanged(self):
        """Test the estimate is reused until progress moves."""
        tracker = ProgressTracker()
        now = datetime(2024, 1, 1, 12, 0, 0)
        start = now - timedelta(minutes=10)

        first = tracker.eta(50.0, start, now)
        later = tracker.eta(50.0, start, now + timedelta(hours=1))

        assert first == later == '00:10:00'
        assert tracker.eta(75.0, start, now + timedelta(minutes=5)) == '00:05:00'

    def test_format_duration(self):
        assert ProgressTracker.format_duration(3725.9) == '01:02:05'
