"""Tests for prune_tree and remove_tree_quietly."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from unittest.mock import patch

from gemrepo_packager.pruner import DEFAULT_PRUNE_TARGETS, prune_tree, remove_tree_quietly


def _make_repo(root: Path) -> Path:
    for sub in ("bin", "cache", "doc", "gems", "specifications"):
        (root / sub).mkdir(parents=True)
        (root / sub / "marker").write_text(sub)
    return root


class TestPruneTree:
    def test_default_targets(self):
        assert DEFAULT_PRUNE_TARGETS == ("bin", "cache", "doc")

    def test_removes_default_targets(self, tmp_path: Path):
        repo = _make_repo(tmp_path / "repo")
        removed = prune_tree(repo)

        assert removed == ["bin", "cache", "doc"]
        assert sorted(p.name for p in repo.iterdir()) == ["gems", "specifications"]

    def test_missing_targets_are_ignored(self, tmp_path: Path):
        repo = tmp_path / "repo"
        (repo / "gems").mkdir(parents=True)
        assert prune_tree(repo) == []
        assert (repo / "gems").is_dir()

    def test_custom_targets(self, tmp_path: Path):
        repo = _make_repo(tmp_path / "repo")
        assert prune_tree(repo, ["doc"]) == ["doc"]
        assert (repo / "bin").is_dir()

    def test_failure_on_one_target_does_not_stop_others(self, tmp_path: Path, caplog):
        repo = _make_repo(tmp_path / "repo")
        real_rmtree = shutil.rmtree

        def flaky_rmtree(path, *args, **kwargs):
            if Path(path).name == "cache":
                raise PermissionError("read-only")
            return real_rmtree(path, *args, **kwargs)

        with patch("gemrepo_packager.pruner.shutil.rmtree", side_effect=flaky_rmtree):
            with caplog.at_level(logging.WARNING, logger="gemrepo_packager.pruner"):
                removed = prune_tree(repo)

        assert removed == ["bin", "doc"]
        assert (repo / "cache").is_dir()
        assert not (repo / "bin").exists()
        assert not (repo / "doc").exists()
        assert "Failed to delete directory recursively" in caplog.text


class TestRemoveTreeQuietly:
    def test_missing_path_counts_as_removed(self, tmp_path: Path):
        assert remove_tree_quietly(tmp_path / "nothing") is True

    def test_removes_file(self, tmp_path: Path):
        f = tmp_path / "f"
        f.write_text("x")
        assert remove_tree_quietly(f) is True
        assert not f.exists()

    def test_removes_link_without_touching_target(self, tmp_path: Path):
        target = tmp_path / "target"
        target.mkdir()
        (target / "keep").write_text("x")
        link = tmp_path / "link"
        link.symlink_to(target, target_is_directory=True)

        assert remove_tree_quietly(link) is True
        assert not link.is_symlink()
        assert (target / "keep").exists()

    def test_error_returns_false(self, tmp_path: Path):
        d = tmp_path / "d"
        d.mkdir()
        with patch("gemrepo_packager.pruner.shutil.rmtree", side_effect=OSError("busy")):
            assert remove_tree_quietly(d) is False
