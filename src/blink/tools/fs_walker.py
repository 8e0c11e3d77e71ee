"""
Filesystem walker for blink-search.

This module provides the built-in traversal used when fd is not available.
It walks a location root and yields the files or folders below it as paths
relative to the root, in a stable order.
"""

import os
import logging
from pathlib import Path
from typing import Dict, Iterator, List

from ..errors import TraversalError
from ..models.config import LocationMode


logger = logging.getLogger(__name__)

REPLACEMENT_CHARACTER = "\ufffd"


def normalize_path(raw: str) -> str:
    """
    Normalize one path emitted by a traversal tool.

    Strips surrounding whitespace, leading ``./`` or ``.\\`` and trailing
    separators, and replaces control characters so that every candidate fits
    on a single line of a cache file.

    Args:
        raw: Path as printed by the traversal tool

    Returns:
        Normalized path (empty if nothing is left)
    """
    path = raw.strip()
    while path.startswith("./") or path.startswith(".\\"):
        path = path[2:]
    if len(path) > 1:
        path = path.rstrip("/\\") or path[0]
    return "".join(REPLACEMENT_CHARACTER if ord(c) < 32 or 127 <= ord(c) < 160 else c for c in path)


class FSWalker:
    """
    Directory walker yielding candidate paths for a location.

    Hidden entries (names starting with a dot) are skipped unless
    ``include_hidden`` is set, matching fd's defaults.
    """

    def __init__(self, include_hidden: bool = False):
        """
        Initialize the filesystem walker.

        Args:
            include_hidden: Whether to descend into and yield hidden entries
        """
        self.include_hidden = include_hidden
        self._stats = {
            'entries_yielded': 0,
            'directories_traversed': 0,
            'errors': 0
        }

    def walk(self, root: str, mode: LocationMode) -> Iterator[str]:
        """
        Walk a location root.

        Args:
            root: Root directory of the location
            mode: Whether to yield files or folders

        Yields:
            Paths relative to ``root``, using ``/`` as separator

        Raises:
            TraversalError: If the root does not exist, is not a directory or cannot be read
        """
        root_path = Path(root).expanduser()
        self._check_root(root_path)
        self.reset_stats()

        logger.info(f"Walking directory tree: {root_path} ({mode.value})")

        for current_dir, subdirs, files in os.walk(root_path, onerror=self._on_error):
            current_path = Path(current_dir)
            self._stats['directories_traversed'] += 1

            subdirs[:] = sorted(d for d in subdirs if self._is_visible(d))

            if mode == LocationMode.FOLDERS:
                names = subdirs
            else:
                names = sorted(f for f in files if self._is_visible(f))

            for name in names:
                relative = (current_path / name).relative_to(root_path).as_posix()
                normalized = normalize_path(relative)
                if normalized:
                    self._stats['entries_yielded'] += 1
                    yield normalized

        logger.debug(f"Finished walking {root_path}: {self.get_stats()}")

    def _check_root(self, root_path: Path) -> None:
        """Fail fast when the root itself is unusable."""
        try:
            if not root_path.exists():
                raise TraversalError(str(root_path), "path does not exist")
            if not root_path.is_dir():
                raise TraversalError(str(root_path), "path is not a directory")
            with os.scandir(root_path):
                pass
        except OSError as e:
            raise TraversalError(str(root_path), str(e)) from e

    def _is_visible(self, name: str) -> bool:
        return self.include_hidden or not name.startswith('.')

    def _on_error(self, error: OSError) -> None:
        # Unreadable subdirectories are skipped, the root was checked up front
        logger.warning(f"Error walking directory {getattr(error, 'filename', '')}: {error}")
        self._stats['errors'] += 1

    def get_stats(self) -> Dict[str, int]:
        """
        Get statistics about the walking operations.

        Returns:
            Dictionary containing operation statistics
        """
        return self._stats.copy()

    def reset_stats(self) -> None:
        """Reset the statistics counters."""
        self._stats = {
            'entries_yielded': 0,
            'directories_traversed': 0,
            'errors': 0
        }


def walk_location(root: str, mode: LocationMode, include_hidden: bool = False) -> List[str]:
    """
    Convenience function returning all candidate paths of a root.

    Raises:
        TraversalError: If the root cannot be walked
    """
    return list(FSWalker(include_hidden=include_hidden).walk(root, mode))
