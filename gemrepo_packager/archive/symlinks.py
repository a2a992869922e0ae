"""Symbolic link detection by comparing absolute and canonical paths."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def is_symbolic_link(path: str | Path) -> bool:
    """Return True if *path* is a symbolic link.

    The entry is a link when its canonical (fully dereferenced) path has a
    different final component than its absolute path, or when the canonical
    parent differs from the canonicalized absolute parent. Anything that
    cannot be resolved (dangling link, link loop, permission error) is
    reported as a link so the caller never descends into it.
    """
    absolute = Path(path).absolute()
    try:
        canonical = absolute.resolve(strict=True)
        canonical_parent = absolute.parent.resolve(strict=True)
    except (OSError, RuntimeError):
        # RuntimeError: symlink loop on interpreters before 3.13
        logger.debug("Could not canonicalize %s, treating as a link", absolute)
        return True

    return canonical.name != absolute.name or canonical.parent != canonical_parent
