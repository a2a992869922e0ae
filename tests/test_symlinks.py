"""Tests for is_symbolic_link — pure filesystem logic."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

from gemrepo_packager.archive.symlinks import is_symbolic_link


class TestRegularEntries:
    def test_regular_file(self, tmp_path: Path):
        f = tmp_path / "a.rb"
        f.write_text("puts 1")
        assert is_symbolic_link(f) is False

    def test_regular_directory(self, tmp_path: Path):
        d = tmp_path / "gems"
        d.mkdir()
        assert is_symbolic_link(d) is False

    def test_relative_path(self, tmp_path: Path, monkeypatch):
        (tmp_path / "lib").mkdir()
        monkeypatch.chdir(tmp_path)
        assert is_symbolic_link(Path("lib")) is False

    def test_entry_under_linked_parent_is_not_itself_a_link(self, tmp_path: Path):
        # Only the entry's own name is judged; a linked ancestor is canonicalized away
        real = tmp_path / "real"
        real.mkdir()
        (real / "file.txt").write_text("x")
        (tmp_path / "alias").symlink_to(real, target_is_directory=True)
        assert is_symbolic_link(tmp_path / "alias" / "file.txt") is False


class TestLinks:
    def test_link_to_file_with_other_name(self, tmp_path: Path):
        target = tmp_path / "target.rb"
        target.write_text("x")
        link = tmp_path / "link.rb"
        link.symlink_to(target)
        assert is_symbolic_link(link) is True

    def test_link_to_same_name_in_other_directory(self, tmp_path: Path):
        other = tmp_path / "other"
        other.mkdir()
        (other / "same.rb").write_text("x")
        here = tmp_path / "here"
        here.mkdir()
        link = here / "same.rb"
        link.symlink_to(other / "same.rb")
        assert is_symbolic_link(link) is True

    def test_link_to_directory(self, tmp_path: Path):
        real = tmp_path / "real"
        real.mkdir()
        link = tmp_path / "linked"
        link.symlink_to(real, target_is_directory=True)
        assert is_symbolic_link(link) is True

    def test_link_to_ancestor(self, tmp_path: Path):
        d = tmp_path / "gems"
        d.mkdir()
        loop = d / "up"
        loop.symlink_to(tmp_path, target_is_directory=True)
        assert is_symbolic_link(loop) is True

    def test_dangling_link(self, tmp_path: Path):
        link = tmp_path / "dangling"
        link.symlink_to(tmp_path / "does-not-exist")
        assert is_symbolic_link(link) is True

    def test_self_referencing_link(self, tmp_path: Path):
        link = tmp_path / "loop"
        link.symlink_to(link)
        assert is_symbolic_link(link) is True


class TestResolutionErrors:
    def test_missing_entry_is_treated_as_link(self, tmp_path: Path):
        assert is_symbolic_link(tmp_path / "gone") is True

    def test_oserror_is_treated_as_link(self, tmp_path: Path):
        f = tmp_path / "a"
        f.write_text("x")
        with patch.object(Path, "resolve", side_effect=PermissionError("denied")):
            assert is_symbolic_link(f) is True

    def test_runtime_error_is_treated_as_link(self, tmp_path: Path):
        f = tmp_path / "a"
        f.write_text("x")
        with patch.object(Path, "resolve", side_effect=RuntimeError("Symlink loop")):
            assert is_symbolic_link(f) is True
