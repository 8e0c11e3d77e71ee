"""
fd-based traversal for blink-search.

Runs ``fd`` inside a location root and yields the NUL-separated paths it
prints, normalized the same way as the built-in walker.
"""

import os
import shutil
import subprocess
import logging
from typing import Iterator, List, Optional

from ..errors import TraversalError
from ..models.config import LocationMode
from .fs_walker import FSWalker, normalize_path


logger = logging.getLogger(__name__)

FD_EXECUTABLES = ('fd', 'fdfind')


def find_fd() -> Optional[str]:
    """Locate the fd executable (Debian ships it as ``fdfind``)."""
    for name in FD_EXECUTABLES:
        path = shutil.which(name)
        if path:
            return path
    return None


class FdWalker:
    """
    Traversal capability backed by fd.

    Attributes:
        executable: Path to the fd binary
        extra_flags: Additional flags from the ``fd_flags`` configuration key
    """

    def __init__(self, executable: str, extra_flags: Optional[List[str]] = None):
        self.executable = executable
        self.extra_flags = list(extra_flags or [])

    def build_command(self, mode: LocationMode) -> List[str]:
        type_flag = 'd' if mode == LocationMode.FOLDERS else 'f'
        return [
            self.executable, '.',
            '--print0',
            '--color=never',
            '--type', type_flag,
            *self.extra_flags
        ]

    def walk(self, root: str, mode: LocationMode) -> Iterator[str]:
        """
        List the files or folders below ``root`` with fd.

        Raises:
            TraversalError: If the root is not a directory or fd fails without output
        """
        root = os.path.expanduser(root)
        if not os.path.isdir(root):
            raise TraversalError(root, "path does not exist or is not a directory")

        command = self.build_command(mode)
        logger.debug(f"Executing: {command} in {root}")

        try:
            completed = subprocess.run(
                command,
                cwd=root,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=False
            )
        except OSError as e:
            raise TraversalError(root, f"cannot run fd: {e}") from e

        stderr = completed.stderr.decode('utf-8', errors='replace').strip()
        if completed.returncode != 0:
            if not completed.stdout:
                raise TraversalError(root, stderr or f"fd exited with code {completed.returncode}")
            logger.warning(f"fd exited with code {completed.returncode} for {root}, keeping partial output: {stderr}")

        for chunk in completed.stdout.split(b'\0'):
            normalized = normalize_path(chunk.decode('utf-8', errors='replace'))
            if normalized:
                yield normalized


def create_walker(fd_flags: Optional[List[str]] = None):
    """
    Pick the traversal capability: fd when installed, the built-in walker otherwise.
    """
    executable = find_fd()
    if executable:
        logger.debug(f"Using fd at {executable}")
        return FdWalker(executable, fd_flags)

    logger.info("fd not found on PATH, using the built-in walker")
    if fd_flags:
        logger.warning(f"Ignoring fd_flags without fd: {fd_flags}")
    flags = fd_flags or []
    return FSWalker(include_hidden='--hidden' in flags or '-H' in flags)
