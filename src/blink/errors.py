"""
Exception hierarchy for blink-search.

Every failure the finder can report is a subclass of BlinkError so the CLI
can act as the single error boundary.
"""

from typing import List, Optional


class BlinkError(Exception):
    """Base class for all blink-search errors."""
    pass


class ConfigError(BlinkError):
    """Raised when the configuration file is unreadable or malformed."""
    pass


class LocationError(BlinkError):
    """Base class for failures while resolving a location token."""
    pass


class NoLocationsConfiguredError(LocationError):
    """Raised when the registry is empty and there is nothing to search."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path
        message = "No locations defined"
        if config_path:
            message += f". Define locations in {config_path}"
        super().__init__(message)


class UnknownLocationError(LocationError):
    """Raised when a token matches no configured location."""

    def __init__(self, token: str, known: Optional[List[str]] = None):
        self.token = token
        self.known = list(known or [])
        message = f"No location found for '{token}'"
        if self.known:
            message += f" (known: {', '.join(self.known)})"
        super().__init__(message)


class AmbiguousLocationError(LocationError):
    """Raised when a token abbreviates more than one location."""

    def __init__(self, token: str, matches: List[str]):
        self.token = token
        self.matches = list(matches)
        super().__init__(
            f"Location '{token}' is ambiguous, it matches: {', '.join(self.matches)}"
        )


class TraversalError(BlinkError):
    """Raised when candidate paths cannot be generated for a location."""

    def __init__(self, root: str, reason: str):
        self.root = root
        self.reason = reason
        super().__init__(f"Cannot list {root}: {reason}")


class CacheWriteError(BlinkError):
    """Raised when a cache file cannot be persisted."""
    pass


class SelectorError(BlinkError):
    """Raised when the interactive selector cannot be run or fails."""
    pass
