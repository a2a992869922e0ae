"""Tree packager — deterministic depth-first walk of a directory into an archive."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from gemrepo_packager.archive.symlinks import is_symbolic_link
from gemrepo_packager.archive.writer import METADATA_PREFIX, ArchiveWriter
from gemrepo_packager.exceptions import PackagingError
from gemrepo_packager.models.packaging import ArchiveEntry

logger = logging.getLogger(__name__)

# Top-level name the writer uses for its own metadata
RESERVED_TOP_LEVEL = METADATA_PREFIX.rstrip("/")


class TreePackager:
    """
    Walk a source tree and feed every real file and directory to an ArchiveWriter.

    Children are visited in name order so the archive is reproducible for a
    given filesystem snapshot. Symbolic links are skipped together with
    whatever they point at; once links are excluded the tree has no cycles,
    so plain recursion is safe. A top-level META-INF in the tree is skipped
    because that namespace belongs to the archive metadata.
    """

    def __init__(self, is_link: Callable[[Path], bool] = is_symbolic_link) -> None:
        self._is_link = is_link
        self.skipped_links: list[str] = []
        self.skipped_reserved: list[str] = []

    def package(self, root: str | Path, writer: ArchiveWriter) -> list[ArchiveEntry]:
        """Add everything under *root* to *writer*, named relative to *root*."""
        root = Path(root)
        self.skipped_links = []
        self.skipped_reserved = []
        if not root.is_dir():
            raise PackagingError(writer.archive_path, f"source tree [{root}] is not a directory")

        entries: list[ArchiveEntry] = []
        self._add_children(root, "", writer, entries)
        if self.skipped_links:
            logger.info("Skipped %d symbolic link(s) under %s", len(self.skipped_links), root)
        return entries

    def _add_children(
        self,
        directory: Path,
        prefix: str,
        writer: ArchiveWriter,
        entries: list[ArchiveEntry],
    ) -> None:
        try:
            children = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as e:
            raise PackagingError(writer.archive_path, f"cannot list [{directory}]: {e}") from e

        for child in children:
            rel = prefix + child.name
            if not prefix and child.name == RESERVED_TOP_LEVEL:
                logger.warning("Skipping [%s] in %s: the name is reserved for archive metadata", rel, directory)
                self.skipped_reserved.append(rel)
                continue
            if self._is_link(child):
                logger.debug("Skipping symbolic link [%s]", rel)
                self.skipped_links.append(rel)
                continue

            entry = writer.add(child, rel)
            if entry is not None:
                entries.append(entry)

            if child.is_dir():
                self._add_children(child, rel + "/", writer, entries)
