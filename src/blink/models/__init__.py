"""
Data models for blink-search.

This module contains the location, registry and session data structures.
"""

from .config import BlinkConfig, LocationMode, LocationRegistry, LocationSpec
from .session import (
    CandidateSet,
    SelectionKind,
    SelectionResult,
    SessionResult,
    SessionState,
)

__all__ = [
    'BlinkConfig',
    'LocationMode',
    'LocationRegistry',
    'LocationSpec',
    'CandidateSet',
    'SelectionKind',
    'SelectionResult',
    'SessionResult',
    'SessionState',
]
