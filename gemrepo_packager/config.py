"""Packaging configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path

from gemrepo_packager.exceptions import ConfigurationError
from gemrepo_packager.pruner import DEFAULT_PRUNE_TARGETS

ARTIFACT_SUFFIX = "gemrepo"


@dataclass(frozen=True)
class PackagerConfig:
    """Everything one packaging run needs.

    ``project_root`` is where the manifest and lock file are looked up;
    ``output_directory``, ``artifact_id`` and ``version`` name the archive.
    """

    project_root: Path
    output_directory: Path
    artifact_id: str
    version: str
    manifest_name: str = "Gemfile"
    lock_file_name: str = "Gemfile.lock"
    archive_extension: str = "jar"
    prune_targets: tuple[str, ...] = DEFAULT_PRUNE_TARGETS
    resolver: str = "bundler"
    bundle_command: str = "bundle"
    gem_command: str = "gem"
    include_bundler: bool = False
    resolver_timeout: float | None = None  # seconds, None = wait forever
    scratch_root: Path | None = None  # parent of scratch dirs, None = system temp
    extra_env: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "project_root", Path(self.project_root))
        object.__setattr__(self, "output_directory", Path(self.output_directory))
        object.__setattr__(self, "prune_targets", tuple(self.prune_targets))
        if self.scratch_root is not None:
            object.__setattr__(self, "scratch_root", Path(self.scratch_root))

    @property
    def artifact_name(self) -> str:
        return f"{self.artifact_id}-{self.version}-{ARTIFACT_SUFFIX}.{self.archive_extension}"

    @property
    def artifact_path(self) -> Path:
        return self.output_directory / self.artifact_name

    def with_env_defaults(self) -> PackagerConfig:
        """Fill resolver settings from GEMREPO_* environment variables.

        Explicit non-default values win over the environment.
        """
        overrides: dict = {}
        bundle = os.environ.get("GEMREPO_BUNDLE_COMMAND")
        if bundle and self.bundle_command == "bundle":
            overrides["bundle_command"] = bundle
        gem = os.environ.get("GEMREPO_GEM_COMMAND")
        if gem and self.gem_command == "gem":
            overrides["gem_command"] = gem
        timeout = os.environ.get("GEMREPO_RESOLVER_TIMEOUT")
        if timeout and self.resolver_timeout is None:
            try:
                seconds = float(timeout)
            except ValueError as e:
                raise ConfigurationError(
                    f"GEMREPO_RESOLVER_TIMEOUT must be a number, got [{timeout}]"
                ) from e
            if not seconds > 0:
                raise ConfigurationError(
                    f"GEMREPO_RESOLVER_TIMEOUT must be positive, got [{timeout}]"
                )
            overrides["resolver_timeout"] = seconds
        scratch = os.environ.get("GEMREPO_SCRATCH_DIR")
        if scratch and self.scratch_root is None:
            overrides["scratch_root"] = Path(scratch)
        return replace(self, **overrides) if overrides else self
