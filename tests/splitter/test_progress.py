"""Tests for split progress tracking."""

import logging
import threading

import pytest

from filesplitter.splitter.progress import ProgressTracker, format_duration


class TestProgressTracker:
    def test_initial_state(self):
        progress = ProgressTracker(total_bytes=1000).get_progress()

        assert progress["bytes_done"] == 0
        assert progress["parts_done"] == 0
        assert progress["remaining_bytes"] == 1000
        assert progress["percentage"] == 0

    def test_advance(self):
        tracker = ProgressTracker(total_bytes=1000)

        tracker.advance(250)
        tracker.advance(250)
        progress = tracker.get_progress()

        assert progress["bytes_done"] == 500
        assert progress["parts_done"] == 2
        assert progress["percentage"] == pytest.approx(50.0)

    def test_empty_job_is_complete(self):
        assert ProgressTracker(total_bytes=0).get_progress()["percentage"] == 100.0

    def test_concurrent_advance(self):
        tracker = ProgressTracker(total_bytes=8000, log_interval=0)

        def work():
            for _ in range(100):
                tracker.advance(10)

        threads = [threading.Thread(target=work) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert tracker.get_progress()["bytes_done"] == 8000
        assert tracker.get_progress()["parts_done"] == 800

    def test_logs_every_interval(self, caplog):
        tracker = ProgressTracker(total_bytes=100, log_interval=2)

        with caplog.at_level(logging.INFO, logger="filesplitter.splitter.progress"):
            for _ in range(4):
                tracker.advance(10)

        assert len([r for r in caplog.records if r.getMessage().startswith("Progress:")]) == 2

    def test_final_summary(self, caplog):
        tracker = ProgressTracker(total_bytes=10)
        tracker.advance(10)

        with caplog.at_level(logging.INFO, logger="filesplitter.splitter.progress"):
            tracker.log_final_summary()

        assert "Split complete: 1 parts, 10 bytes" in caplog.text


class TestFormatDuration:
    @pytest.mark.parametrize("seconds,expected", [
        (0, "0s"),
        (-5, "0s"),
        (0.5, "0s"),
        (45, "45s"),
        (60, "1m"),
        (3725, "1h 2m 5s"),
        (7200, "2h"),
    ])
    def test_format(self, seconds, expected):
        assert format_duration(seconds) == expected
