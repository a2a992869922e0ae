"""Shared pytest fixtures for gemrepo-packager tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from gemrepo_packager.config import PackagerConfig


def _write_gemfile(project_root: Path, gem_name: str, gem_version: str) -> None:
    """Write a Gemfile and Gemfile.lock pinning a single gem."""
    project_root.mkdir(parents=True, exist_ok=True)
    (project_root / "Gemfile").write_text(
        "source 'http://rubygems.org'\n" f"gem '{gem_name}', '{gem_version}'\n"
    )
    (project_root / "Gemfile.lock").write_text(
        "GEM\n"
        "  remote: http://rubygems.org/\n"
        "  specs:\n"
        f"    {gem_name} ({gem_version})\n"
        "\n"
        "PLATFORMS\n"
        "  ruby\n"
        "\n"
        "DEPENDENCIES\n"
        f"  {gem_name} (= {gem_version})\n"
    )


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def json_pure_project(project_root: Path) -> Path:
    _write_gemfile(project_root, "json_pure", "1.5.0")
    return project_root


@pytest.fixture
def scratch_root(tmp_path: Path) -> Path:
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    return scratch


@pytest.fixture
def make_config(project_root: Path, scratch_root: Path, tmp_path: Path):
    def _make(**overrides) -> PackagerConfig:
        values = {
            "project_root": project_root,
            "output_directory": tmp_path / "target",
            "artifact_id": "TestName",
            "version": "test-version",
            "scratch_root": scratch_root,
        }
        values.update(overrides)
        return PackagerConfig(**values)

    return _make


@pytest.fixture
def write_gemfile():
    return _write_gemfile
