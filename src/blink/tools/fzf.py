"""
fzf-based interactive selector for blink-search.

The selector owns the terminal while fzf runs. Candidates are written to
fzf's stdin; the chosen entry, or the key that ended the run, is read back
from its stdout using ``--expect``.
"""

import re
import sys
import shlex
import shutil
import subprocess
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from ..errors import SelectorError
from ..models.config import LocationRegistry
from ..models.session import CandidateSet, SelectionResult


logger = logging.getLogger(__name__)

SWITCH_KEY = 'tab'
EDIT_CONFIG_KEY = 'alt-c'
OPEN_KEY = 'ctrl-x'

EXIT_OK = 0
EXIT_NO_MATCH = 1
EXIT_ERROR = 2
EXIT_INTERRUPTED = 130


def location_to_id(name: str) -> str:
    """History file id of a location: alphanumerics only, lowercased."""
    return re.sub(r"[^a-zA-Z0-9]", "", name).lower()


def quote_command(parts: Sequence[str]) -> str:
    """
    Join a command for the shell fzf runs ``execute`` bindings in.

    fzf uses cmd.exe on Windows, which only understands double quotes, and
    ``$SHELL`` everywhere else.
    """
    if sys.platform == 'win32':
        return subprocess.list2cmdline(list(parts))
    return " ".join(shlex.quote(part) for part in parts)


def _unquote(item: str) -> str:
    item = item.strip()
    if len(item) >= 2 and item.startswith('"') and item.endswith('"'):
        return item[1:-1].replace("\\\\", "\\")
    return item


class FzfSelector:
    """
    Selector capability backed by fzf.

    Keys:
        tab: switch location (returns a switch request)
        alt-c: open the configuration file
        ctrl-x: open the highlighted entry without leaving fzf
    """

    def __init__(self, history_dir: Optional[Path] = None, extra_flags: Optional[List[str]] = None,
                 config_path: Optional[Path] = None, executable: Optional[str] = None):
        """
        Initialize the selector.

        Args:
            history_dir: Directory for fzf history files, no history when None
            extra_flags: Additional flags from the ``fzf_flags`` configuration key
            config_path: Configuration file passed on to the ctrl-x open command
            executable: fzf binary, looked up on PATH when None
        """
        self.history_dir = Path(history_dir) if history_dir else None
        self.extra_flags = list(extra_flags or [])
        self.config_path = config_path
        self.executable = executable or shutil.which('fzf') or 'fzf'
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def _history_flag(self, file_name: str) -> List[str]:
        if self.history_dir is None:
            return []
        return [f"--history={self.history_dir / file_name}"]

    def _open_binding(self, location: str) -> str:
        command = [sys.executable, '-m', 'blink']
        if self.config_path:
            command += ['--config', str(self.config_path)]
        return f"{OPEN_KEY}:execute({quote_command(command)} --open-path={{}} {quote_command([location])})"

    def build_select_command(self, location: str, label: str) -> List[str]:
        return [
            self.executable,
            '--scheme=path',
            *self._history_flag(f"history-{location_to_id(location)}.txt"),
            f"--header={label}",
            f"--expect={SWITCH_KEY},{EDIT_CONFIG_KEY}",
            f"--bind={self._open_binding(location)}",
            *self.extra_flags
        ]

    def build_menu_command(self, query: Optional[str] = None) -> List[str]:
        command = [
            self.executable,
            *self._history_flag("history-menu.txt"),
            f"--bind={SWITCH_KEY}:accept",
            '--header=Switch location',
        ]
        if query:
            command.append(f"--query={query}")
        return command + self.extra_flags

    def _run(self, command: List[str], lines: Sequence[str]) -> subprocess.CompletedProcess:
        """Run fzf with ``lines`` on stdin; stderr and the tty stay attached."""
        self.logger.debug(f"Executing: {command}")
        payload = "".join(f"{line}\n" for line in lines)
        try:
            completed = subprocess.run(
                command,
                input=payload,
                stdout=subprocess.PIPE,
                text=True,
                encoding='utf-8',
                errors='replace',
                check=False
            )
        except OSError as e:
            raise SelectorError(f"Cannot run fzf ({self.executable}): {e}") from e

        if completed.returncode == EXIT_ERROR:
            raise SelectorError(f"fzf exited with code {completed.returncode}")
        return completed

    def select(self, candidates: CandidateSet, label: str) -> SelectionResult:
        """
        Let the user pick one candidate.

        Args:
            candidates: Candidate paths of the active location
            label: Header describing the active location

        Returns:
            SelectionResult describing what the user did

        Raises:
            SelectorError: If fzf is missing or fails
        """
        completed = self._run(self.build_select_command(candidates.location, label), candidates.paths)

        if completed.returncode == EXIT_INTERRUPTED:
            return SelectionResult.cancelled()

        output = completed.stdout.split("\n")
        key = output[0].strip() if output else ""
        item = _unquote(output[1]) if len(output) > 1 else ""
        self.logger.debug(f"fzf returned {completed.returncode}, key={key!r}, item={item!r}")

        if key == SWITCH_KEY:
            return SelectionResult.switch()
        if key == EDIT_CONFIG_KEY:
            return SelectionResult.edit_config()
        if completed.returncode == EXIT_OK and item:
            return SelectionResult.accepted(item)
        return SelectionResult.cancelled()

    def choose_location(self, registry: LocationRegistry, query: Optional[str] = None) -> Optional[str]:
        """
        Show the location menu.

        Returns:
            Name of the chosen location, or None if the menu was aborted
        """
        completed = self._run(self.build_menu_command(query), registry.display_lines())
        if completed.returncode != EXIT_OK:
            return None

        location = registry.find_by_display_line(completed.stdout)
        if location is None:
            self.logger.warning(f"Menu returned an unknown entry: {completed.stdout.strip()!r}")
            return None
        return location.name
