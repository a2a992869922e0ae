"""Data models for the packaging pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class PackagingState(str, Enum):
    """Pipeline states. FAILED is reachable from every non-terminal state."""

    VALIDATING_INPUTS = "validate"
    RESOLVING = "resolve"
    PRUNING = "prune"
    PACKAGING = "package"
    CLEANING_UP = "cleanup"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ArchiveEntry:
    """A single record written to the archive."""

    name: str  # archive-relative, directories end with "/"
    is_dir: bool
    mtime: float  # source last-modified time (epoch seconds)
    size: int = 0


@dataclass
class ProjectInputs:
    """Validated manifest and lock file locations."""

    project_root: Path
    manifest: Path
    lock_file: Path


@dataclass
class PackagingOutput:
    """Orchestrator return value.

    ``resolved_root`` is kept for logs and diagnostics only: it names the
    scratch tree the archive was built from, which cleanup has removed.
    """

    artifact_path: Path
    resolved_root: Path
    entries: list[ArchiveEntry] = field(default_factory=list)
    pruned: list[str] = field(default_factory=list)

    @property
    def entry_count(self) -> int:
        return len(self.entries)
