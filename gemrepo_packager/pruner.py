"""Best-effort removal of resolver output that is not needed at runtime."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)

# Executable stubs, the downloaded .gem cache and generated rdoc/ri docs
DEFAULT_PRUNE_TARGETS: tuple[str, ...] = ("bin", "cache", "doc")


def remove_tree_quietly(path: str | Path) -> bool:
    """Recursively delete *path*, logging a warning instead of raising.

    Returns True if the path is gone afterwards.
    """
    path = Path(path)
    if not path.exists() and not path.is_symlink():
        return True
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except OSError as e:
        logger.warning("Failed to delete directory recursively: %s (%s)", path, e)
        return False
    return True


def prune_tree(root: str | Path, names: Iterable[str] = DEFAULT_PRUNE_TARGETS) -> list[str]:
    """Delete the named top-level subdirectories of *root*.

    A failure on one name is logged and does not affect the others.
    Returns the names that were present and removed.
    """
    root = Path(root)
    removed: list[str] = []
    for name in names:
        target = root / name
        if not target.exists():
            logger.debug("Prune target not present: %s", target)
            continue
        if remove_tree_quietly(target):
            removed.append(name)
    if removed:
        logger.info("Pruned %s from %s", ", ".join(removed), root)
    return removed
