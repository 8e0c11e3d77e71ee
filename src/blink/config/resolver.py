"""
Location resolution for blink-search.

Turns the location token given on the command line (or picked from the
switch menu) into exactly one configured location. Matching is case
sensitive and runs in tiers; the first tier with any match decides:

1. exact name
2. name prefix
3. abbreviation: prefix of a name segment, then substring of the name

More than one match in the deciding tier is an error rather than a guess.
"""

import re
import logging
from typing import Callable, List, Optional

from ..errors import AmbiguousLocationError, NoLocationsConfiguredError, UnknownLocationError
from ..models.config import LocationRegistry, LocationSpec


logger = logging.getLogger(__name__)

_SEGMENT_SEPARATORS = re.compile(r"[-_.\s]+")


def _segments(name: str) -> List[str]:
    return [segment for segment in _SEGMENT_SEPARATORS.split(name) if segment]


def _matching(names: List[str], predicate: Callable[[str], bool]) -> List[str]:
    return [name for name in names if predicate(name)]


def find_matches(token: str, registry: LocationRegistry) -> List[str]:
    """
    Names matched by ``token`` in the first tier that matches anything.

    Args:
        token: Location name or abbreviation
        registry: Configured locations

    Returns:
        Matching names in registry order (empty if nothing matches)
    """
    names = registry.names()

    if token in registry:
        return [token]

    tiers = [
        lambda name: name.startswith(token),
        lambda name: any(segment.startswith(token) for segment in _segments(name)),
        lambda name: token in name,
    ]
    for predicate in tiers:
        matches = _matching(names, predicate)
        if matches:
            return matches

    return []


def resolve_location(token: Optional[str], registry: LocationRegistry,
                     config_path: Optional[str] = None) -> LocationSpec:
    """
    Resolve a location token against the registry.

    Args:
        token: Location name or unique abbreviation, None for the default location
        registry: Configured locations
        config_path: Configuration file, mentioned in the empty-registry error

    Returns:
        The selected LocationSpec

    Raises:
        NoLocationsConfiguredError: If the registry is empty
        AmbiguousLocationError: If the token abbreviates several locations
        UnknownLocationError: If the token matches nothing
    """
    if registry.is_empty():
        raise NoLocationsConfiguredError(config_path)

    if token is None:
        location = registry.default()
        logger.debug(f"No location given, using default '{location.name}'")
        return location

    matches = find_matches(token, registry)

    if not matches:
        raise UnknownLocationError(token, registry.names())

    if len(matches) > 1:
        raise AmbiguousLocationError(token, matches)

    location = registry.get(matches[0])
    if matches[0] != token:
        logger.debug(f"Resolved '{token}' to location '{location.name}'")
    return location
