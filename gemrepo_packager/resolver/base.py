"""Abstract interface for external dependency resolvers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

import structlog

from gemrepo_packager.exceptions import ResolutionError

log = structlog.get_logger("gemrepo_packager.resolver")


class DependencyResolver(ABC):
    """
    Turn a (manifest, lock file) pair into a materialized package tree.

    Subclasses implement :meth:`materialize`. Callers use :meth:`resolve`,
    which is the error boundary: whatever the concrete resolver raises is
    re-raised as a single ResolutionError with the original chained as
    ``__cause__``.
    """

    name: str = "abstract"

    def resolve(
        self,
        work_dir: str | Path,
        output_dir: str | Path,
        manifest: str | Path,
        lock_file: str | Path,
    ) -> Path:
        """Materialize the lock file under *output_dir* and return the tree root."""
        log.info(
            "resolver.started",
            resolver=self.name,
            manifest=str(manifest),
            output_dir=str(output_dir),
        )
        try:
            root = Path(
                self.materialize(Path(work_dir), Path(output_dir), Path(manifest), Path(lock_file))
            )
        except ResolutionError:
            raise
        except Exception as e:
            log.error("resolver.failed", resolver=self.name, error=str(e))
            raise ResolutionError(manifest, detail=f"{type(e).__name__}: {e}") from e

        if not root.is_dir():
            raise ResolutionError(manifest, detail=f"resolver returned missing tree [{root}]")
        log.info("resolver.completed", resolver=self.name, root=str(root))
        return root

    @abstractmethod
    def materialize(
        self,
        work_dir: Path,
        output_dir: Path,
        manifest: Path,
        lock_file: Path,
    ) -> Path:
        """Produce the resolved tree. Must not modify *manifest* or *lock_file*."""
        ...
