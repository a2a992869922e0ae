"""Test doubles for gemrepo_packager — use in unit and integration tests.

Usage::

    from gemrepo_packager.testing import FakeResolver

    resolver = FakeResolver()                              # gems read from the lock file
    resolver = FakeResolver(native={"statistics2"})        # add ext/ build output
    resolver = FakeResolver(unresolvable={"no_such_gem"})  # fail like bundler would
"""

from __future__ import annotations

import re
from pathlib import Path

from gemrepo_packager.resolver.base import DependencyResolver

# "    json_pure (1.5.0)" inside the GEM/specs section of Gemfile.lock
_LOCK_SPEC_RE = re.compile(r"^    (\S+) \(([^)\s]+)\)\s*$")

FAKE_RUBY_SCOPE = ("ruby", "3.2.0")


def parse_lock_specs(content: str) -> list[tuple[str, str]]:
    """Return (name, version) for every pinned spec in a Gemfile.lock."""
    specs: list[tuple[str, str]] = []
    in_specs = False
    for line in content.splitlines():
        if line.strip() == "specs:":
            in_specs = True
            continue
        if in_specs and line and not line.startswith(" "):
            in_specs = False
        if in_specs:
            m = _LOCK_SPEC_RE.match(line)
            if m:
                specs.append((m.group(1), m.group(2)))
    return specs


class FakeResolver(DependencyResolver):
    """Drop-in resolver that writes a canned Bundler-shaped tree.

    Parameters
    ----------
    native:
        Gem names that get native extension build output
        (``gems/<gem>/ext/``, ``extensions/<platform>/``).
    unresolvable:
        Gem names that make resolution fail.
    error:
        Exception raised from :meth:`materialize` instead of writing a tree.
    """

    name = "fake"

    def __init__(
        self,
        *,
        native: set[str] | None = None,
        unresolvable: set[str] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.native = native or set()
        self.unresolvable = unresolvable or set()
        self.error = error
        self.calls: list[tuple[Path, Path, Path, Path]] = []

    def materialize(
        self,
        work_dir: Path,
        output_dir: Path,
        manifest: Path,
        lock_file: Path,
    ) -> Path:
        self.calls.append((work_dir, output_dir, manifest, lock_file))
        if self.error is not None:
            raise self.error

        specs = parse_lock_specs(lock_file.read_text(encoding="utf-8"))
        missing = [name for name, _ in specs if name in self.unresolvable]
        if missing:
            raise RuntimeError(f"Could not find gem '{missing[0]}' in any of the sources")

        (work_dir / "downloads").mkdir(exist_ok=True)
        repo = output_dir.joinpath(*FAKE_RUBY_SCOPE)
        for sub in ("specifications", "gems", "bin", "cache", "doc", "extensions"):
            (repo / sub).mkdir(parents=True, exist_ok=True)

        for name, version in specs:
            full = f"{name}-{version}"
            (repo / "specifications" / f"{full}.gemspec").write_text(
                f"Gem::Specification.new do |s|\n  s.name = {name!r}\n  s.version = {version!r}\nend\n"
            )
            lib = repo / "gems" / full / "lib"
            lib.mkdir(parents=True, exist_ok=True)
            (lib / f"{name}.rb").write_text(f"module {name.title().replace('_', '')}; end\n")
            (repo / "cache" / f"{full}.gem").write_bytes(b"\x00gem-archive\x00" + full.encode())
            (repo / "bin" / name).write_text(f"#!/usr/bin/env ruby\nrequire '{name}'\n")
            (repo / "doc" / full / "ri").mkdir(parents=True, exist_ok=True)
            if name in self.native:
                ext = repo / "gems" / full / "ext" / name
                ext.mkdir(parents=True, exist_ok=True)
                (ext / "extconf.rb").write_text("require 'mkmf'\ncreate_makefile('x')\n")
                built = repo / "extensions" / "x86_64-linux" / "3.2.0" / full
                built.mkdir(parents=True, exist_ok=True)
                (built / "gem.build_complete").write_text("")
        return repo
