"""
Interactive selection session for blink-search.

The session is an explicit state machine:

    IDLE -> SELECTING -> ACCEPTED | SWITCH_REQUESTED | CANCELLED
                 ^              |
                 +--------------+

A switch request re-resolves the location, fetches a fresh candidate set
and re-enters SELECTING. Nothing from the previous location is carried over.
The loop has no iteration cap; it ends when the user accepts or cancels.
"""

import logging
from pathlib import Path
from typing import List, Optional

from ..config.resolver import resolve_location
from ..errors import LocationError
from ..models.config import LocationRegistry, LocationSpec
from ..models.session import (
    CandidateSet,
    SelectionKind,
    SelectionResult,
    SessionResult,
    SessionState,
)
from .cache import PathCache


logger = logging.getLogger(__name__)


def location_label(location: LocationSpec, candidates: CandidateSet) -> str:
    """Header shown above the candidates of the active location."""
    label = f"{location.name} [{location.mode.value}] {location.path}"
    if candidates.is_fallback():
        label += f" (unavailable: {candidates.error})"
    elif candidates.from_cache:
        label += " (cached)"
    return label


class SelectionSession:
    """
    Drives the selector against the active location.

    Args:
        registry: Configured locations
        cache: PathCache producing candidate sets
        selector: Selector capability with ``select(candidates, label)`` and
            ``choose_location(registry)``
        config_path: Configuration file, returned when the user asks to edit it
    """

    def __init__(self, registry: LocationRegistry, cache: PathCache, selector,
                 config_path: Optional[Path] = None):
        self.registry = registry
        self.cache = cache
        self.selector = selector
        self.config_path = config_path
        self.state = SessionState.IDLE
        self.location: Optional[LocationSpec] = None
        self.candidates: Optional[CandidateSet] = None
        self._visited: List[str] = []
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def _transition(self, state: SessionState) -> None:
        self.logger.debug(f"Session state {self.state.value} -> {state.value}")
        self.state = state

    def _activate(self, location: LocationSpec, force_refresh: bool = False) -> None:
        """Make ``location`` active with a freshly fetched candidate set."""
        self.location = None
        self.candidates = None
        candidates = self.cache.get_or_empty(location, force_refresh=force_refresh)
        self.location = location
        self.candidates = candidates
        self._visited.append(location.name)
        self.logger.info(
            f"Active location '{location.name}': {len(candidates)} candidates"
            f"{' from cache' if candidates.from_cache else ''}"
        )

    def _finish(self, state: SessionState, path: Optional[str] = None,
                diagnostic: Optional[str] = None) -> SessionResult:
        self._transition(state)
        return SessionResult(
            state=state,
            path=path,
            location=self.location.name if self.location else None,
            diagnostic=diagnostic,
            visited=list(self._visited)
        )

    def run(self, token: Optional[str] = None, force_refresh: bool = False) -> SessionResult:
        """
        Run the session until the user accepts an entry or cancels.

        Args:
            token: Initial location name or abbreviation, None for the default
            force_refresh: Regenerate the initial location's cache

        Returns:
            SessionResult in state ACCEPTED (with the full path) or CANCELLED

        Raises:
            LocationError: If the initial token cannot be resolved
            SelectorError: If the selector cannot be run
        """
        if self.state != SessionState.IDLE:
            raise RuntimeError("A selection session can only be run once")

        self._activate(resolve_location(token, self.registry), force_refresh=force_refresh)
        self._transition(SessionState.SELECTING)

        while True:
            result = self.selector.select(self.candidates, location_label(self.location, self.candidates))

            if result.kind == SelectionKind.ACCEPTED:
                path = str(Path(self.location.path) / result.item)
                self.logger.info(f"Accepted: {path}")
                return self._finish(SessionState.ACCEPTED, path=path)

            if result.kind == SelectionKind.EDIT_CONFIG:
                if self.config_path is None:
                    self.logger.warning("Configuration file requested but no path is known")
                    continue
                return self._finish(SessionState.ACCEPTED, path=str(self.config_path))

            if result.kind == SelectionKind.CANCELLED:
                self.logger.info("Selection cancelled")
                return self._finish(SessionState.CANCELLED)

            self._transition(SessionState.SWITCH_REQUESTED)
            outcome = self._switch(result)
            if outcome is not None:
                return outcome
            self._transition(SessionState.SELECTING)

    def _switch(self, result: SelectionResult) -> Optional[SessionResult]:
        """
        Handle a switch request.

        Returns:
            None when the new location is active, a terminal result otherwise
        """
        name = result.location
        if name is None:
            name = self.selector.choose_location(self.registry)
            if name is None:
                self.logger.info("Location menu cancelled")
                return self._finish(SessionState.CANCELLED)

        try:
            location = resolve_location(name, self.registry)
        except LocationError as e:
            self.logger.error(f"Cannot switch to '{name}': {e}")
            return self._finish(SessionState.CANCELLED, diagnostic=str(e))

        self.logger.info(f"Selected location: {location.name}")
        self._activate(location)
        return None
