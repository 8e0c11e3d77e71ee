"""
Candidate path cache for blink-search.

Locations on slow or remote mounts can keep their candidate list in a cache
file. A cache hit is served verbatim without touching the location root;
entries are not checked against the live filesystem, so refreshing a stale
cache is left to the user (``--refresh``).

Cache files are plain newline-delimited paths relative to the location root.
They are always replaced atomically: the new list is written to a uniquely
named temporary file beside the cache and renamed over it, so an interrupted
run never leaves a truncated list behind. Concurrent writers are not
coordinated; the last rename wins.
"""

import os
import logging
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional

from ..errors import CacheWriteError, TraversalError
from ..models.config import LocationMode, LocationSpec
from ..models.session import CandidateSet
from ..tools.fs_walker import normalize_path


logger = logging.getLogger(__name__)


def read_cache_file(cache_path: Path) -> Optional[List[str]]:
    """
    Read a cache file.

    Args:
        cache_path: Cache file to read

    Returns:
        The cached paths in file order, or None when the file is missing,
        unreadable or holds no entries
    """
    try:
        with open(cache_path, 'r', encoding='utf-8', errors='replace', newline='') as f:
            content = f.read()
    except FileNotFoundError:
        return None
    except OSError as e:
        logger.warning(f"Cannot read cache file {cache_path}, regenerating: {e}")
        return None

    # Only \n separates entries, other line breaks are valid in file names
    paths = [line.rstrip("\r") for line in content.split("\n") if line.strip()]
    if not paths:
        logger.info(f"Cache file {cache_path} is empty, regenerating")
        return None
    return paths


def write_cache_file(cache_path: Path, paths: Iterable[str]) -> None:
    """
    Atomically replace a cache file.

    Args:
        cache_path: Cache file to write
        paths: Paths to store, one per line

    Raises:
        CacheWriteError: If the file cannot be written
    """
    temp_path = None
    try:
        cache_path.parent.mkdir(parents=True, exist_ok=True)
        temp_fd, temp_name = tempfile.mkstemp(
            prefix=f"{cache_path.name}.", suffix='.tmp', dir=cache_path.parent)
        temp_path = Path(temp_name)
        with os.fdopen(temp_fd, 'w', encoding='utf-8', newline='') as f:
            for path in paths:
                f.write(f"{path}\n")
            f.flush()
            os.fsync(f.fileno())
        temp_path.replace(cache_path)
    except OSError as e:
        raise CacheWriteError(f"Cannot write cache file {cache_path}: {e}") from e
    finally:
        # Only left behind when the write failed
        if temp_path is not None and temp_path.is_file():
            temp_path.unlink()


class PathCache:
    """
    Produces the candidate set of a location, from its cache file or fresh.

    Args:
        walker: Traversal capability with ``walk(root, mode) -> Iterable[str]``
    """

    def __init__(self, walker):
        self.walker = walker
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def get(self, spec: LocationSpec, force_refresh: bool = False) -> CandidateSet:
        """
        Get the candidate set of a location.

        Args:
            spec: Location to list
            force_refresh: Ignore an existing cache file and regenerate it

        Returns:
            CandidateSet for the location

        Raises:
            TraversalError: If a fresh list is needed and the traversal fails
        """
        cache_path = spec.cache_path()

        if cache_path is not None and not force_refresh:
            self.logger.info(f"Reading cache file: {cache_path}")
            cached = read_cache_file(cache_path)
            if cached is not None:
                return CandidateSet(location=spec.name, paths=cached, from_cache=True)

        paths = self.generate(spec)

        if cache_path is not None:
            try:
                write_cache_file(cache_path, paths)
                self.logger.info(f"Wrote {len(paths)} entries to cache file {cache_path}")
            except CacheWriteError as e:
                self.logger.warning(f"{e}; continuing without cache")

        return CandidateSet(location=spec.name, paths=paths, from_cache=False)

    def get_or_empty(self, spec: LocationSpec, force_refresh: bool = False) -> CandidateSet:
        """
        Like get(), but a traversal failure yields an empty fallback set.

        The fallback keeps an interactive session alive so the user can still
        switch to another location.
        """
        try:
            return self.get(spec, force_refresh=force_refresh)
        except TraversalError as e:
            self.logger.warning(f"Location '{spec.name}' is unavailable: {e}")
            return CandidateSet.empty(spec.name, error=str(e))

    def generate(self, spec: LocationSpec) -> List[str]:
        """
        Traverse a location and filter the result by its mode.

        Raises:
            TraversalError: If the traversal fails
        """
        self.logger.debug(f"Generating candidates for '{spec.name}' from {spec.path}")
        try:
            raw = list(self.walker.walk(spec.path, spec.mode))
        except TraversalError:
            raise
        except OSError as e:
            raise TraversalError(spec.path, str(e)) from e

        paths = [normalized for normalized in (normalize_path(p) for p in raw) if normalized]
        return self._filter_by_mode(spec, paths)

    def _filter_by_mode(self, spec: LocationSpec, paths: List[str]) -> List[str]:
        """Folder locations never offer plain files, whatever the traversal returned."""
        if spec.mode != LocationMode.FOLDERS:
            return paths

        root = Path(spec.path).expanduser()
        kept = [path for path in paths if not (root / path).is_file()]
        dropped = len(paths) - len(kept)
        if dropped:
            self.logger.debug(f"Dropped {dropped} plain files from folder location '{spec.name}'")
        return kept
