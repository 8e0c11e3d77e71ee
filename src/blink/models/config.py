"""
Configuration data models for blink-search.

This module defines the location records read from the configuration file,
the ordered registry built from them, and the top-level configuration object
holding extra flags for the external traversal and selection tools.
"""

from typing import Dict, Iterator, List, Optional, Any
from pathlib import Path
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator


class LocationMode(Enum):
    """What a location offers as candidates."""
    FILES = "files"
    FOLDERS = "folders"


class LocationSpec(BaseModel):
    """
    A named search root.

    Instances are immutable once loaded. Unknown keys in the configuration
    record are ignored so that newer config files still load.

    Attributes:
        name: Unique location name (the key in the configuration mapping)
        path: Root directory of the location, possibly a network share
        mode: Whether the location lists files or folders
        cache_file: Optional cache file, relative to ``path`` unless absolute
    """

    model_config = ConfigDict(frozen=True, extra='ignore')

    name: str = Field(..., min_length=1, description="Unique location name")
    path: str = Field(..., min_length=1, description="Root directory of the location")
    mode: LocationMode = Field(..., description="Files or folders")
    cache_file: Optional[str] = Field(None, description="Persisted candidate list")

    @field_validator('path')
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Reject blank paths and expand a leading ``~``."""
        if not v.strip():
            raise ValueError("Location path cannot be empty")
        v = v.strip()
        if v.startswith('~'):
            return str(Path(v).expanduser())
        return v

    @field_validator('mode', mode='before')
    @classmethod
    def validate_mode(cls, v) -> LocationMode:
        """Validate and convert mode to enum."""
        if isinstance(v, str):
            try:
                return LocationMode(v.strip().lower())
            except ValueError:
                raise ValueError(f"Invalid location mode: {v} (expected 'files' or 'folders')")
        return v

    @field_validator('cache_file', mode='before')
    @classmethod
    def validate_cache_file(cls, v) -> Optional[str]:
        """Treat a blank cache file the same as no cache file."""
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    def cache_path(self) -> Optional[Path]:
        """Absolute location of the cache file, or None when caching is off."""
        if not self.cache_file:
            return None
        cache = Path(self.cache_file).expanduser()
        if cache.is_absolute():
            return cache
        return Path(self.path) / cache

    def display_line(self) -> str:
        """Line shown in location listings and the switch menu."""
        return f"{self.name} ({self.path})"

    def __str__(self) -> str:
        return f"{self.name} [{self.mode.value}] {self.path}"


class LocationRegistry:
    """
    Ordered mapping of location name to LocationSpec.

    Iteration follows the order of the configuration file, and the first
    entry is the default location.
    """

    def __init__(self, locations: Optional[List[LocationSpec]] = None):
        self._locations: Dict[str, LocationSpec] = {}
        for location in locations or []:
            if location.name in self._locations:
                raise ValueError(f"Duplicate location name: {location.name}")
            self._locations[location.name] = location

    def names(self) -> List[str]:
        return list(self._locations)

    def get(self, name: str) -> Optional[LocationSpec]:
        return self._locations.get(name)

    def default(self) -> Optional[LocationSpec]:
        """The first configured location, or None for an empty registry."""
        for location in self._locations.values():
            return location
        return None

    def is_empty(self) -> bool:
        return not self._locations

    def find_by_display_line(self, line: str) -> Optional[LocationSpec]:
        """Map a menu line back to its location."""
        line = line.strip()
        for location in self._locations.values():
            if location.display_line() == line:
                return location
        return None

    def display_lines(self) -> List[str]:
        return [location.display_line() for location in self._locations.values()]

    def __iter__(self) -> Iterator[LocationSpec]:
        return iter(list(self._locations.values()))

    def __len__(self) -> int:
        return len(self._locations)

    def __contains__(self, name: object) -> bool:
        return name in self._locations

    def __repr__(self) -> str:
        return f"LocationRegistry({self.names()!r})"


class BlinkConfig(BaseModel):
    """
    Top-level configuration.

    Attributes:
        locations: Mapping of location name to location record, in file order
        fd_flags: Extra command-line flags passed to fd
        fzf_flags: Extra command-line flags passed to fzf
    """

    locations: Dict[str, LocationSpec] = Field(default_factory=dict, description="Configured locations")
    fd_flags: List[str] = Field(default_factory=list, description="Extra flags for fd")
    fzf_flags: List[str] = Field(default_factory=list, description="Extra flags for fzf")

    @field_validator('locations', mode='before')
    @classmethod
    def validate_locations(cls, v) -> Dict[str, Any]:
        """Attach each mapping key to its record as the location name."""
        if v is None:
            return {}
        if not isinstance(v, dict):
            raise ValueError("'locations' must be a mapping of name to location")

        records = {}
        for name, record in v.items():
            name = str(name)
            if isinstance(record, LocationSpec):
                records[name] = record
                continue
            if not isinstance(record, dict):
                raise ValueError(f"Location '{name}' must be a mapping with 'path' and 'mode'")
            records[name] = {**record, 'name': name}
        return records

    @field_validator('fd_flags', 'fzf_flags', mode='before')
    @classmethod
    def validate_flags(cls, v) -> List[str]:
        """Accept a missing value, a single string or a list of flags."""
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        if not isinstance(v, list):
            raise ValueError("Flags must be a list of strings")
        return [str(flag) for flag in v]

    def registry(self) -> LocationRegistry:
        """Build the ordered location registry."""
        return LocationRegistry(list(self.locations.values()))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the dictionary layout of the configuration file."""
        locations = {}
        for name, location in self.locations.items():
            record = {'path': location.path, 'mode': location.mode.value}
            if location.cache_file:
                record['cache_file'] = location.cache_file
            locations[name] = record

        data: Dict[str, Any] = {'locations': locations}
        if self.fd_flags:
            data['fd_flags'] = list(self.fd_flags)
        if self.fzf_flags:
            data['fzf_flags'] = list(self.fzf_flags)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BlinkConfig':
        """Create configuration from dictionary representation."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        return f"Locations: {len(self.locations)} | fd flags: {len(self.fd_flags)} | fzf flags: {len(self.fzf_flags)}"
