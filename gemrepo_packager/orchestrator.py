"""Packaging orchestrator — validate, resolve, prune, package, clean up."""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path

import structlog

# Ensure the built-in resolvers are registered before any lookup.
import gemrepo_packager.resolver.bundler  # noqa: F401
from gemrepo_packager.archive.packager import TreePackager
from gemrepo_packager.archive.writer import ArchiveWriter
from gemrepo_packager.config import PackagerConfig
from gemrepo_packager.exceptions import (
    ConfigurationError,
    EnvironmentSetupError,
    PackagerError,
    PackagingError,
)
from gemrepo_packager.models.packaging import (
    ArchiveEntry,
    PackagingOutput,
    PackagingState,
    ProjectInputs,
)
from gemrepo_packager.progress import PhaseRecord, ProgressTracker
from gemrepo_packager.pruner import prune_tree, remove_tree_quietly
from gemrepo_packager.resolver.base import DependencyResolver
from gemrepo_packager.resolver.registry import create_resolver

log = structlog.get_logger("gemrepo_packager.orchestrator")


class PackagingOrchestrator:
    """
    Drive one packaging run through its states:

    ValidatingInputs -> Resolving -> Pruning -> Packaging -> CleaningUp -> Done

    Any error moves the run to Failed and propagates unchanged. Once a
    scratch directory exists, CleaningUp runs on the failure path too, so
    the progress summary shows the failed stage, the cleanup, then FAILED.
    """

    def __init__(
        self,
        config: PackagerConfig,
        resolver: DependencyResolver | None = None,
    ) -> None:
        self.config = config
        self.resolver = resolver if resolver is not None else create_resolver(config)
        self.state = PackagingState.VALIDATING_INPUTS
        self.progress = self._new_progress()
        self._scratch_dirs: list[Path] = []

    def _new_progress(self) -> ProgressTracker:
        """Create a fresh ProgressTracker for each run."""
        tracker = ProgressTracker()
        tracker.callbacks.append(self._log_phase_callback)
        return tracker

    @staticmethod
    def _log_phase_callback(record: PhaseRecord) -> None:
        log.info(
            "packaging.phase",
            phase=record.phase.value,
            status=record.status,
            duration=record.duration,
            detail=record.detail or None,
        )

    def run(self) -> PackagingOutput:
        """Execute the full pipeline and return where the archive went."""
        with structlog.contextvars.bound_contextvars(artifact=self.config.artifact_name):
            return self._run()

    def _run(self) -> PackagingOutput:
        self.progress = self._new_progress()
        self._scratch_dirs = []

        with contextlib.ExitStack() as scratch:
            try:
                self._enter(PackagingState.VALIDATING_INPUTS)
                inputs = self.validate_inputs()
                self.progress.complete(self.state, detail=str(inputs.manifest))

                self._enter(PackagingState.RESOLVING)
                work_dir = self._acquire_scratch(scratch, "gemrepo-work-")
                output_dir = self._acquire_scratch(scratch, "gemrepo-repo-")
                resolved = self.resolver.resolve(
                    work_dir, output_dir, inputs.manifest, inputs.lock_file
                )
                self.progress.complete(self.state, detail=str(resolved))

                pruned = self._prune(resolved)

                self._enter(PackagingState.PACKAGING)
                entries = self.package(resolved, inputs.manifest)
                self.progress.complete(self.state, detail=f"{len(entries)} entries")

                self._release_scratch(scratch)
            except Exception as e:
                failed = self.state
                self.progress.fail(failed, str(e))
                log.error(
                    "packaging.failed",
                    stage=failed.value,
                    error=str(e),
                    expected=isinstance(e, PackagerError),
                )
                if failed is not PackagingState.CLEANING_UP and self._scratch_dirs:
                    self._release_scratch(scratch)
                self.state = PackagingState.FAILED
                self.progress.finish(PackagingState.FAILED, detail=f"stopped in {failed.value}")
                raise

        self.state = PackagingState.DONE
        artifact = self.config.artifact_path.absolute()
        self.progress.finish(PackagingState.DONE, detail=str(artifact))
        return PackagingOutput(
            artifact_path=artifact,
            resolved_root=resolved,
            entries=entries,
            pruned=pruned,
        )

    # ── phases ───────────────────────────────────────────────────────────

    def validate_inputs(self) -> ProjectInputs:
        """Locate the manifest and lock file directly under the project root."""
        try:
            root = self.config.project_root.resolve(strict=True)
        except (OSError, RuntimeError) as e:
            raise ConfigurationError(
                "Error trying to locate the project base directory "
                f"[{self.config.project_root}].",
                path=self.config.project_root,
            ) from e
        if not root.is_dir():
            raise ConfigurationError(
                f"The project root [{root}] is not a directory.", path=root
            )

        return ProjectInputs(
            project_root=root,
            manifest=self._locate_in_root(root, self.config.manifest_name),
            lock_file=self._locate_in_root(root, self.config.lock_file_name),
        )

    def package(self, resolved: Path, manifest: Path) -> list[ArchiveEntry]:
        """Write the pruned tree plus the manifest into the archive."""
        artifact = self.config.artifact_path.absolute()
        try:
            artifact.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PackagingError(artifact, str(e)) from e

        log.info("packaging.building", artifact=artifact.name)
        with ArchiveWriter(artifact) as writer:
            entries = TreePackager().package(resolved, writer)
            manifest_entry = writer.add_metadata(manifest)
            if manifest_entry is not None:
                entries.append(manifest_entry)
        return entries

    # ── helpers ──────────────────────────────────────────────────────────

    def _enter(self, state: PackagingState) -> None:
        self.state = state
        self.progress.start(state)

    def _prune(self, resolved: Path) -> list[str]:
        if not self.config.prune_targets:
            self.state = PackagingState.PRUNING
            self.progress.skip(self.state, "no prune targets configured")
            return []

        self._enter(PackagingState.PRUNING)
        pruned = prune_tree(resolved, self.config.prune_targets)
        self.progress.complete(self.state, detail=", ".join(pruned) or "nothing to prune")
        return pruned

    def _release_scratch(self, scratch: contextlib.ExitStack) -> None:
        """Run the CleaningUp state: remove every scratch directory created so far."""
        self._enter(PackagingState.CLEANING_UP)
        scratch.close()
        left = [p for p in self._scratch_dirs if p.exists() or p.is_symlink()]
        if left:
            detail = "left behind: " + ", ".join(str(p) for p in left)
        else:
            detail = f"removed {len(self._scratch_dirs)} scratch directories"
        self.progress.complete(self.state, detail=detail)

    @staticmethod
    def _locate_in_root(root: Path, file_name: str) -> Path:
        location = root / file_name
        if not location.is_file() or not os.access(location, os.R_OK):
            raise ConfigurationError.missing_file(file_name, root)
        return location

    def _acquire_scratch(self, stack: contextlib.ExitStack, prefix: str) -> Path:
        """Create a scratch directory whose removal is registered on *stack*."""
        parent = self.config.scratch_root
        try:
            if parent is not None:
                parent.mkdir(parents=True, exist_ok=True)
            path = Path(tempfile.mkdtemp(prefix=prefix, dir=parent)).resolve()
        except OSError as e:
            raise EnvironmentSetupError(parent or tempfile.gettempdir()) from e
        stack.callback(remove_tree_quietly, path)
        self._scratch_dirs.append(path)
        log.debug("packaging.scratch_created", path=str(path))
        return path


def package_gem_repository(
    config: PackagerConfig,
    resolver: DependencyResolver | None = None,
) -> PackagingOutput:
    """Convenience wrapper: build an orchestrator and run it once."""
    return PackagingOrchestrator(config, resolver=resolver).run()
