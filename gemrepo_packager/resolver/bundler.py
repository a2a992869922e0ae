"""Bundler-backed resolver — drives ``bundle install`` as an external process.

Bundler installs into ``<BUNDLE_PATH>/<ruby_engine>/<ruby_version>``; that
directory (the one holding ``specifications/`` and ``gems/``) is the gem
repository handed back to the orchestrator.
"""

from __future__ import annotations

import os
import re
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from gemrepo_packager.resolver.base import DependencyResolver
from gemrepo_packager.resolver.registry import register_resolver

if TYPE_CHECKING:
    from gemrepo_packager.config import PackagerConfig

log = structlog.get_logger("gemrepo_packager.resolver")

# "BUNDLED WITH\n   2.4.10" at the end of Gemfile.lock
_BUNDLED_WITH_RE = re.compile(r"^BUNDLED WITH\s*\n\s+(\S+)", re.MULTILINE)

_STDERR_TAIL = 2000


def bundled_with(lock_file: Path) -> str | None:
    """Return the Bundler version recorded in *lock_file*, if any."""
    try:
        content = lock_file.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None
    m = _BUNDLED_WITH_RE.search(content)
    return m.group(1) if m else None


class BundlerResolver(DependencyResolver):
    """
    Materialize a Gemfile/Gemfile.lock pair with Bundler.

    All Bundler state (app config, user home, download cache) is pointed
    into the work directory, and frozen mode is on, so the project's
    Gemfile and Gemfile.lock are never rewritten. When the lock file is not
    the manifest's natural companion (``<manifest>.lock``) both are staged
    into the work directory first.
    """

    name = "bundler"

    def __init__(
        self,
        bundle_command: str = "bundle",
        gem_command: str = "gem",
        include_bundler: bool = False,
        timeout: float | None = None,
        extra_env: dict[str, str] | None = None,
    ) -> None:
        self.bundle_command = bundle_command
        self.gem_command = gem_command
        self.include_bundler = include_bundler
        self.timeout = timeout
        self.extra_env = dict(extra_env or {})

    @classmethod
    def from_config(cls, config: PackagerConfig) -> BundlerResolver:
        return cls(
            bundle_command=config.bundle_command,
            gem_command=config.gem_command,
            include_bundler=config.include_bundler,
            timeout=config.resolver_timeout,
            extra_env=config.extra_env,
        )

    def materialize(
        self,
        work_dir: Path,
        output_dir: Path,
        manifest: Path,
        lock_file: Path,
    ) -> Path:
        gemfile = self._stage_inputs(work_dir, manifest, lock_file)
        env = self.bundler_env(work_dir, output_dir, gemfile)

        self._run([*shlex.split(self.bundle_command), "install"], env=env, cwd=work_dir)

        repository = self._locate_repository(output_dir)
        if self.include_bundler:
            self._install_bundler(repository, lock_file, env, work_dir)
        return repository

    def bundler_env(self, work_dir: Path, output_dir: Path, gemfile: Path) -> dict[str, str]:
        """Environment overrides for the ``bundle install`` process."""
        env = {
            "BUNDLE_GEMFILE": str(gemfile),
            "BUNDLE_PATH": str(output_dir),
            "BUNDLE_APP_CONFIG": str(work_dir / ".bundle"),
            "BUNDLE_USER_HOME": str(work_dir / "bundle-home"),
            "BUNDLE_USER_CACHE": str(work_dir / "bundle-cache"),
            "BUNDLE_DISABLE_SHARED_GEMS": "true",
            "BUNDLE_FROZEN": "true",
        }
        env.update(self.extra_env)
        return env

    @staticmethod
    def _stage_inputs(work_dir: Path, manifest: Path, lock_file: Path) -> Path:
        """Return the Gemfile Bundler should read, staging copies if needed."""
        if lock_file.resolve() == manifest.resolve().with_name(manifest.name + ".lock"):
            return manifest

        staged = work_dir / "staged"
        staged.mkdir(parents=True, exist_ok=True)
        gemfile = staged / "Gemfile"
        shutil.copyfile(manifest, gemfile)
        shutil.copyfile(lock_file, staged / "Gemfile.lock")
        log.debug("resolver.inputs_staged", gemfile=str(gemfile))
        return gemfile

    @staticmethod
    def _locate_repository(output_dir: Path) -> Path:
        candidates = sorted(p.parent for p in output_dir.glob("*/*/specifications") if p.is_dir())
        if not candidates:
            raise RuntimeError(f"bundle install produced no gem repository under {output_dir}")
        if len(candidates) > 1:
            log.warning(
                "resolver.multiple_repositories",
                candidates=[str(c) for c in candidates],
                chosen=str(candidates[0]),
            )
        return candidates[0]

    def _install_bundler(self, repository: Path, lock_file: Path, env: dict[str, str], cwd: Path) -> None:
        """Install the bundler gem itself into the repository."""
        cmd = [
            *shlex.split(self.gem_command),
            "install",
            "bundler",
            "--install-dir",
            str(repository),
            "--no-document",
            "--force",
        ]
        version = bundled_with(lock_file)
        if version:
            cmd += ["--version", version]
        self._run(cmd, env=env, cwd=cwd)

    def _run(self, cmd: list[str], env: dict[str, str], cwd: Path) -> None:
        """Run a resolver command, raising RuntimeError on non-zero exit."""
        log.info("resolver.command", cmd=" ".join(cmd))
        result = subprocess.run(
            cmd,
            env={**os.environ, **env},
            cwd=str(cwd),
            capture_output=True,
            text=True,
            timeout=self.timeout,
        )
        if result.stdout:
            log.debug("resolver.stdout", output=result.stdout[-_STDERR_TAIL:])
        if result.returncode != 0:
            stderr = (result.stderr or result.stdout or "").strip()[-_STDERR_TAIL:]
            log.error("resolver.command_failed", returncode=result.returncode, stderr=stderr)
            raise RuntimeError(f"{cmd[0]} failed (exit {result.returncode}): {stderr}")


register_resolver(BundlerResolver.name, BundlerResolver.from_config)
