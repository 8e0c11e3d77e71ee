"""
Open a selected path with the platform's file opener.
"""

import re
import sys
import subprocess
import logging
from typing import List, Optional

from ..errors import BlinkError


logger = logging.getLogger(__name__)


def to_platform_path(path: str, platform: Optional[str] = None) -> str:
    """
    Normalize separators for the opener.

    Mixed separators from cache files written on another system are unified
    and repeated separators collapsed. On Windows a leading separator is
    doubled again so that UNC shares (``\\\\nas\\share``) keep working.
    """
    platform = platform or sys.platform
    normalized = re.sub(r"/+", "/", path.strip().replace("\\", "/"))
    if platform == 'win32':
        if normalized.startswith('/'):
            normalized = '/' + normalized
        normalized = normalized.replace('/', '\\').rstrip('\\')
    return normalized


def open_command(path: str, platform: Optional[str] = None) -> List[str]:
    platform = platform or sys.platform
    target = to_platform_path(path, platform)
    if platform == 'win32':
        return ['explorer', target]
    if platform == 'darwin':
        return ['open', target]
    return ['xdg-open', target]


def open_path(path: str) -> None:
    """
    Open ``path`` in the file manager or default application without waiting.

    Raises:
        BlinkError: If the opener cannot be started
    """
    command = open_command(path)
    logger.debug(f"Executing: {command}")
    try:
        subprocess.Popen(command, stdin=subprocess.DEVNULL)
    except OSError as e:
        raise BlinkError(f"Cannot open {path}: {e}") from e
