"""Phase tracking for the packaging pipeline."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

from gemrepo_packager.models.packaging import PackagingState

logger = logging.getLogger(__name__)

_TERMINAL_STATUS = {
    PackagingState.DONE: "completed",
    PackagingState.FAILED: "failed",
}


@dataclass
class PhaseRecord:
    phase: PackagingState
    status: str = "running"  # "running" | "completed" | "failed" | "skipped"
    start_time: float | None = None
    end_time: float | None = None
    detail: str = ""
    error: str | None = None

    @property
    def duration(self) -> float | None:
        if self.start_time is not None and self.end_time is not None:
            return round(self.end_time - self.start_time, 2)
        return None


class ProgressTracker:
    """Record every state the pipeline passes through, in order.

    A run ends with exactly one terminal record, DONE or FAILED.
    """

    def __init__(self) -> None:
        self.phases: list[PhaseRecord] = []
        self._by_phase: dict[PackagingState, PhaseRecord] = {}
        self.callbacks: list[Callable[[PhaseRecord], None]] = []

    def start(self, phase: PackagingState) -> None:
        self._append(PhaseRecord(phase=phase, start_time=time.monotonic()))

    def complete(self, phase: PackagingState, detail: str = "") -> None:
        record = self._by_phase.get(phase)
        if record:
            record.status = "completed"
            record.end_time = time.monotonic()
            record.detail = detail
            self._notify(record)

    def fail(self, phase: PackagingState, error: str) -> None:
        record = self._by_phase.get(phase)
        if record:
            record.status = "failed"
            record.end_time = time.monotonic()
            record.error = error
            self._notify(record)

    def skip(self, phase: PackagingState, reason: str) -> None:
        self._append(PhaseRecord(phase=phase, status="skipped", detail=reason))

    def finish(self, phase: PackagingState, detail: str = "") -> None:
        """Record the terminal state (DONE or FAILED)."""
        if phase not in _TERMINAL_STATUS:
            raise ValueError(f"{phase.value} is not a terminal state")
        self._append(PhaseRecord(phase=phase, status=_TERMINAL_STATUS[phase], detail=detail))

    def get_summary(self) -> dict[str, Any]:
        total_duration = sum(p.duration or 0 for p in self.phases)
        return {
            "phases": [
                {
                    "phase": p.phase.value,
                    "status": p.status,
                    "duration": p.duration,
                    "detail": p.detail,
                    "error": p.error,
                }
                for p in self.phases
            ],
            "total_duration": round(total_duration, 2),
        }

    def _append(self, record: PhaseRecord) -> None:
        self.phases.append(record)
        self._by_phase[record.phase] = record
        self._notify(record)

    def _notify(self, record: PhaseRecord) -> None:
        for cb in self.callbacks:
            try:
                cb(record)
            except Exception:
                logger.debug("Progress callback error for phase %s", record.phase.value, exc_info=True)
