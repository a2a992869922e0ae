"""Tests for ProgressTracker."""

from __future__ import annotations

import time

import pytest

from gemrepo_packager.models.packaging import PackagingState
from gemrepo_packager.progress import ProgressTracker


class TestProgressTracker:
    def test_basic_flow(self):
        tracker = ProgressTracker()
        tracker.start(PackagingState.RESOLVING)
        tracker.complete(PackagingState.RESOLVING, detail="ruby/3.2.0")

        summary = tracker.get_summary()
        assert len(summary["phases"]) == 1
        assert summary["phases"][0]["phase"] == "resolve"
        assert summary["phases"][0]["status"] == "completed"
        assert summary["phases"][0]["detail"] == "ruby/3.2.0"

    def test_fail(self):
        tracker = ProgressTracker()
        tracker.start(PackagingState.PACKAGING)
        tracker.fail(PackagingState.PACKAGING, "disk full")

        summary = tracker.get_summary()
        assert summary["phases"][0]["status"] == "failed"
        assert summary["phases"][0]["error"] == "disk full"

    def test_skip(self):
        tracker = ProgressTracker()
        tracker.skip(PackagingState.PRUNING, "no prune targets")

        summary = tracker.get_summary()
        assert summary["phases"][0]["status"] == "skipped"
        assert summary["phases"][0]["duration"] is None

    def test_duration(self):
        tracker = ProgressTracker()
        tracker.start(PackagingState.PACKAGING)
        time.sleep(0.01)
        tracker.complete(PackagingState.PACKAGING)

        p = tracker.phases[0]
        assert p.duration is not None
        assert p.duration >= 0.01

    def test_callback(self):
        events = []
        tracker = ProgressTracker()
        tracker.callbacks.append(lambda p: events.append((p.phase, p.status)))

        tracker.start(PackagingState.PRUNING)
        tracker.complete(PackagingState.PRUNING)

        assert events == [
            (PackagingState.PRUNING, "running"),
            (PackagingState.PRUNING, "completed"),
        ]

    def test_failing_callback_does_not_break_tracking(self):
        tracker = ProgressTracker()

        def boom(record):
            raise ValueError("callback bug")

        tracker.callbacks.append(boom)
        tracker.start(PackagingState.RESOLVING)
        tracker.complete(PackagingState.RESOLVING)
        assert tracker.phases[0].status == "completed"

    def test_order_is_preserved(self):
        tracker = ProgressTracker()
        for state in (
            PackagingState.VALIDATING_INPUTS,
            PackagingState.RESOLVING,
            PackagingState.PRUNING,
        ):
            tracker.start(state)
            tracker.complete(state)

        assert [p["phase"] for p in tracker.get_summary()["phases"]] == [
            "validate",
            "resolve",
            "prune",
        ]

    def test_complete_unknown_phase_is_ignored(self):
        tracker = ProgressTracker()
        tracker.complete(PackagingState.DONE)
        assert tracker.phases == []

    def test_finish_done(self):
        tracker = ProgressTracker()
        tracker.start(PackagingState.CLEANING_UP)
        tracker.complete(PackagingState.CLEANING_UP)
        tracker.finish(PackagingState.DONE, detail="out.jar")

        last = tracker.get_summary()["phases"][-1]
        assert last == {
            "phase": "done",
            "status": "completed",
            "duration": None,
            "detail": "out.jar",
            "error": None,
        }

    def test_finish_failed(self):
        tracker = ProgressTracker()
        tracker.finish(PackagingState.FAILED, detail="stopped in resolve")
        assert tracker.phases[0].status == "failed"

    def test_finish_rejects_non_terminal_state(self):
        with pytest.raises(ValueError, match="not a terminal state"):
            ProgressTracker().finish(PackagingState.PRUNING)
