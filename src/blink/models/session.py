"""
Session data models for blink-search.

This module defines the candidate sets handed to the interactive selector,
the outcome reported back by the selector, and the final result of a
selection session.
"""

from typing import List, Optional, Tuple
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class SessionState(Enum):
    """States of the selection session state machine."""
    IDLE = "idle"
    SELECTING = "selecting"
    ACCEPTED = "accepted"
    SWITCH_REQUESTED = "switch_requested"
    CANCELLED = "cancelled"


class SelectionKind(Enum):
    """What the interactive selector returned."""
    ACCEPTED = "accepted"
    SWITCH_REQUESTED = "switch_requested"
    EDIT_CONFIG = "edit_config"
    CANCELLED = "cancelled"


class CandidateSet(BaseModel):
    """
    Ordered candidate paths for one location.

    A candidate set is never modified after creation; refreshing a location
    produces a new set.

    Attributes:
        location: Name of the location the candidates belong to
        paths: Candidate paths, relative to the location root
        from_cache: Whether the paths were read from the cache file
        error: Reason the set is an empty fallback, if traversal failed
    """

    model_config = ConfigDict(frozen=True)

    location: str = Field(..., description="Location name")
    paths: Tuple[str, ...] = Field(default_factory=tuple, description="Candidate paths")
    from_cache: bool = Field(False, description="Whether the paths came from the cache file")
    error: Optional[str] = Field(None, description="Traversal failure behind an empty fallback")

    @field_validator('paths', mode='before')
    @classmethod
    def validate_paths(cls, v) -> Tuple[str, ...]:
        """Freeze any iterable of paths into a tuple."""
        if v is None:
            return ()
        return tuple(v)

    @classmethod
    def empty(cls, location: str, error: Optional[str] = None) -> 'CandidateSet':
        return cls(location=location, paths=(), error=error)

    def is_fallback(self) -> bool:
        return self.error is not None

    def __len__(self) -> int:
        return len(self.paths)


class SelectionResult(BaseModel):
    """
    Outcome of one interactive selector run.

    Attributes:
        kind: What the user did
        item: The chosen candidate (ACCEPTED only)
        location: Location picked for a switch, None to show the location menu
    """

    kind: SelectionKind = Field(..., description="What the user did")
    item: Optional[str] = Field(None, description="Chosen candidate")
    location: Optional[str] = Field(None, description="Requested location")

    @model_validator(mode='after')
    def validate_result(self):
        """An accepted result must carry the chosen item."""
        if self.kind == SelectionKind.ACCEPTED and not self.item:
            raise ValueError("Accepted selection requires an item")
        return self

    @classmethod
    def accepted(cls, item: str) -> 'SelectionResult':
        return cls(kind=SelectionKind.ACCEPTED, item=item)

    @classmethod
    def switch(cls, location: Optional[str] = None) -> 'SelectionResult':
        return cls(kind=SelectionKind.SWITCH_REQUESTED, location=location)

    @classmethod
    def edit_config(cls) -> 'SelectionResult':
        return cls(kind=SelectionKind.EDIT_CONFIG)

    @classmethod
    def cancelled(cls) -> 'SelectionResult':
        return cls(kind=SelectionKind.CANCELLED)


class SessionResult(BaseModel):
    """
    Terminal outcome of a selection session.

    Attributes:
        state: ACCEPTED or CANCELLED
        path: Full path of the accepted entry
        location: Location active when the session ended
        diagnostic: Error message when the session was cancelled by a failure
        visited: Locations shown during the session, in order
    """

    state: SessionState = Field(..., description="Terminal session state")
    path: Optional[str] = Field(None, description="Accepted path")
    location: Optional[str] = Field(None, description="Active location at the end")
    diagnostic: Optional[str] = Field(None, description="Failure reported to the user")
    visited: List[str] = Field(default_factory=list, description="Locations shown")

    @field_validator('state')
    @classmethod
    def validate_state(cls, v: SessionState) -> SessionState:
        """Only terminal states can end a session."""
        if v not in (SessionState.ACCEPTED, SessionState.CANCELLED):
            raise ValueError(f"Session cannot end in state {v.value}")
        return v

    @property
    def accepted(self) -> bool:
        return self.state == SessionState.ACCEPTED

    @property
    def failed(self) -> bool:
        """Cancelled because of an error rather than by the user."""
        return self.state == SessionState.CANCELLED and self.diagnostic is not None
