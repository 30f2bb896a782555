# SPDX-License-Identifier: MIT
"""Artifact cache for built libraries.

Entries live directly in the cache directory, one file or directory per
output name. An entry's modification time is its only freshness signal:
it is valid while it is strictly newer than every source file it was built
from. A stale entry is deleted by whoever notices it.

Entries are only ever created by renaming a fully written temporary
directory into place, so a reader sees either the complete entry or
nothing at all. No locking is needed between concurrent builds.
"""

from __future__ import annotations

import errno
import logging
import os
import shutil
import tempfile
from collections.abc import Iterable, Sequence
from pathlib import Path

from rtlib.core.errors import CacheError

logger = logging.getLogger(__name__)

# Errors from renaming over an existing entry that cannot be replaced in place.
_ENTRY_EXISTS = frozenset([errno.ENOTEMPTY, errno.EEXIST, errno.EISDIR, errno.ENOTDIR])


def newest_timestamp(paths: Iterable[Path | str]) -> int | None:
    """Return the newest modification time of all paths, in nanoseconds.

    Returns None for an empty list.

    Raises:
        OSError: If a path cannot be stat'ed.
    """
    newest: int | None = None
    for path in paths:
        mtime = os.stat(path).st_mtime_ns
        if newest is None or mtime > newest:
            newest = mtime
    return newest


class ArtifactCache:
    """A directory of cached build artifacts.

    Example:
        cache = ArtifactCache(Path.home() / ".cache" / "rtlib")
        path = cache.load("compiler-rt-armv7m-none-eabi", sources)
        if path is None:
            tmp = cache.make_temp_dir("compiler-rt-armv7m-none-eabi")
            ...  # build into tmp
            path = cache.store(tmp, "compiler-rt-armv7m-none-eabi", sources)

    Attributes:
        root: The cache directory. Created on first store.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def path(self, name: str) -> Path:
        """Location of the entry for an output name."""
        return self.root / name

    def load(self, name: str, sources: Sequence[Path | str]) -> Path | None:
        """Look up a cached artifact.

        Args:
            name: Output name of the artifact.
            sources: Files the artifact was built from.

        Returns:
            The path to the entry, or None if there is no entry or the entry
            was stale (in which case it has been removed).

        Raises:
            OSError: If the entry or a source file cannot be stat'ed, or a
                stale entry cannot be removed.
        """
        entry = self.path(name)
        try:
            entry_mtime = entry.stat().st_mtime_ns
        except FileNotFoundError:
            logger.debug("Cache miss: %s", name)
            return None

        source_mtime = newest_timestamp(sources)
        if source_mtime is None or entry_mtime > source_mtime:
            logger.info("Cache hit: %s", entry)
            return entry

        # An entry exactly as old as the newest source is stale too.
        logger.warning("Removing stale cache entry: %s", entry)
        _remove(entry)
        return None

    def store(
        self, tmp_path: Path | str, name: str, sources: Sequence[Path | str]
    ) -> Path:
        """Move a built artifact into the cache.

        The artifact must already be on the same filesystem as the cache
        directory (see make_temp_dir()). An existing entry with the same name
        is replaced.

        Args:
            tmp_path: File or directory holding the finished artifact.
            name: Output name to store it under.
            sources: Files the artifact was built from. Must not be empty.

        Returns:
            The path to the new entry.

        Raises:
            CacheError: If no source files were given.
            OSError: If the artifact cannot be moved into place.
        """
        if not sources:
            raise CacheError(f"cache: no source files for {name}")

        self.root.mkdir(parents=True, exist_ok=True)
        entry = self.path(name)
        try:
            os.replace(tmp_path, entry)
        except OSError as e:
            if e.errno not in _ENTRY_EXISTS:
                raise
            self._replace_entry(tmp_path, entry, name)

        logger.info("Stored %s in cache", entry)
        return entry

    def _replace_entry(self, tmp_path: Path | str, entry: Path, name: str) -> None:
        """Replace an existing directory entry.

        A directory cannot be renamed over a non-empty directory, so the old
        entry is moved aside first. Readers may briefly see no entry but
        never a partial one. Concurrent stores of the same name may move the
        entry aside or put a new one in place at any point; the last rename
        wins.
        """
        old = Path(tempfile.mkdtemp(dir=self.root, prefix=f"{name}.old"))
        try:
            attempt = 0
            while True:
                try:
                    os.replace(entry, old / f"{name}.{attempt}")
                except FileNotFoundError:
                    # Already moved aside by a concurrent store or load.
                    logger.debug("Cache entry vanished during store: %s", entry)
                try:
                    os.replace(tmp_path, entry)
                    return
                except OSError as e:
                    if e.errno not in _ENTRY_EXISTS:
                        raise
                attempt += 1
        finally:
            shutil.rmtree(old, ignore_errors=True)

    def make_temp_dir(self, name: str) -> Path:
        """Create a private temporary directory inside the cache directory.

        Artifacts built here can later be stored with a single rename.
        """
        self.root.mkdir(parents=True, exist_ok=True)
        return Path(tempfile.mkdtemp(dir=self.root, prefix=f"{name}.tmp"))

    def remove(self, name: str) -> bool:
        """Remove an entry. Returns False if there was none."""
        entry = self.path(name)
        if not entry.exists() and not entry.is_symlink():
            return False
        _remove(entry)
        return True

    def __repr__(self) -> str:
        return f"ArtifactCache({str(self.root)!r})"


def _remove(path: Path) -> None:
    """Delete a file or directory entry. An entry that is already gone is fine."""
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except FileNotFoundError:
        # Removed concurrently by another requester that also found it stale.
        logger.debug("Cache entry already removed: %s", path)
