"""Archive writer — appends file and directory entries to a JAR-compatible zip."""

from __future__ import annotations

import logging
import os
import shutil
import zipfile
from pathlib import Path

from gemrepo_packager.exceptions import PackagingError
from gemrepo_packager.models.packaging import ArchiveEntry

logger = logging.getLogger(__name__)

METADATA_PREFIX = "META-INF/"
JAR_MANIFEST_NAME = f"{METADATA_PREFIX}MANIFEST.MF"

# Generated entries get the earliest timestamp zip can represent
_GENERATED_DATE_TIME = (1980, 1, 1, 0, 0, 0)

_COPY_BUFSIZE = 64 * 1024


def _jar_manifest(created_by: str) -> bytes:
    return f"Manifest-Version: 1.0\r\nCreated-By: {created_by}\r\n\r\n".encode("utf-8")


class ArchiveWriter:
    """
    Write one archive, entry by entry.

    The writer owns the output stream. Content goes to ``<archive>.part``
    and is moved over ``archive_path`` only when the writer closes cleanly,
    so a failed run never leaves a truncated archive behind. Use it as a
    context manager::

        with ArchiveWriter(path) as writer:
            writer.add(some_file, "gems/foo-1.0/lib/foo.rb")
    """

    def __init__(
        self,
        archive_path: str | Path,
        *,
        created_by: str = "gemrepo-packager",
        compression: int = zipfile.ZIP_DEFLATED,
    ) -> None:
        self.archive_path = Path(archive_path)
        self.created_by = created_by
        self.compression = compression
        self.entries: list[ArchiveEntry] = []
        self._names: set[str] = set()
        self._zip: zipfile.ZipFile | None = None
        self._part_path = self.archive_path.with_name(self.archive_path.name + ".part")

    # ── lifecycle ────────────────────────────────────────────────────────

    def open(self) -> ArchiveWriter:
        try:
            self._zip = zipfile.ZipFile(self._part_path, "w", compression=self.compression)
            self._write_generated(METADATA_PREFIX, b"")
            self._write_generated(JAR_MANIFEST_NAME, _jar_manifest(self.created_by))
        except OSError as e:
            self.abort()
            raise PackagingError(self.archive_path, str(e)) from e
        return self

    def close(self) -> None:
        """Finish the archive and move it into place."""
        if self._zip is None:
            return
        try:
            self._zip.close()
            self._zip = None
            os.replace(self._part_path, self.archive_path)
        except OSError as e:
            self.abort()
            raise PackagingError(self.archive_path, str(e)) from e
        logger.info("Wrote %d entries to %s", len(self.entries), self.archive_path)

    def abort(self) -> None:
        """Close the stream and discard the partial archive."""
        if self._zip is not None:
            try:
                self._zip.close()
            except (OSError, ValueError):
                logger.debug("Error closing partial archive %s", self._part_path, exc_info=True)
            self._zip = None
        self._part_path.unlink(missing_ok=True)

    def __enter__(self) -> ArchiveWriter:
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
        else:
            self.abort()

    # ── entries ──────────────────────────────────────────────────────────

    def add(self, path: str | Path, arcname: str) -> ArchiveEntry | None:
        """Add *path* to the archive as *arcname*.

        Directories get a trailing ``/`` and no content; files are copied
        byte for byte. The entry timestamp is the source's mtime.

        Returns the written entry, or None when a directory entry with the
        same name already exists. A duplicate file name is an error.
        """
        if self._zip is None:
            raise PackagingError(self.archive_path, "archive is not open")

        path = Path(path)
        try:
            st = path.stat()
            is_dir = path.is_dir()
            name = arcname.strip("/") + ("/" if is_dir else "")
            if name in self._names:
                if is_dir:
                    logger.debug("Directory entry [%s] already present, skipping", name)
                    return None
                raise PackagingError.duplicate_entry(self.archive_path, name)

            logger.debug("Adding entry [%s] to the gem repository jar", name)
            info = zipfile.ZipInfo.from_file(path, name, strict_timestamps=False)
            if is_dir:
                self._zip.writestr(info, b"")
            else:
                info.compress_type = self.compression
                force_zip64 = info.file_size >= zipfile.ZIP64_LIMIT
                with path.open("rb") as src, self._zip.open(info, "w", force_zip64=force_zip64) as dest:
                    shutil.copyfileobj(src, dest, _COPY_BUFSIZE)
        except OSError as e:
            raise PackagingError(self.archive_path, f"{path}: {e}") from e

        entry = ArchiveEntry(
            name=name,
            is_dir=is_dir,
            mtime=st.st_mtime,
            size=0 if is_dir else st.st_size,
        )
        self._names.add(name)
        self.entries.append(entry)
        return entry

    def add_metadata(self, path: str | Path) -> ArchiveEntry | None:
        """Add a file under the reserved ``META-INF/`` namespace."""
        return self.add(path, METADATA_PREFIX + Path(path).name)

    def _write_generated(self, name: str, data: bytes) -> None:
        info = zipfile.ZipInfo(name, date_time=_GENERATED_DATE_TIME)
        if name.endswith("/"):
            info.external_attr = 0o40755 << 16 | 0x10
        else:
            info.compress_type = self.compression
            info.external_attr = 0o644 << 16
        self._zip.writestr(info, data)
        self._names.add(name)
