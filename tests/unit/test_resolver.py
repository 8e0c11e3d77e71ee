"""
Unit tests for location resolution.
"""

import pytest

from blink.config.resolver import find_matches, resolve_location
from blink.errors import (
    AmbiguousLocationError,
    LocationError,
    NoLocationsConfiguredError,
    UnknownLocationError
)
from blink.models.config import LocationMode, LocationRegistry, LocationSpec


def make_registry(*names):
    return LocationRegistry([
        LocationSpec(name=name, path=f"/{name}", mode=LocationMode.FILES) for name in names
    ])


class TestResolveLocation:
    """Test cases for resolve_location."""

    def test_none_returns_first_location(self):
        registry = make_registry("zeta", "alpha", "docs")
        assert resolve_location(None, registry).name == "zeta"

    def test_single_location_default(self):
        """Scenario: one location, no token."""
        registry = LocationRegistry([LocationSpec(name="docs", path="/d", mode="files")])
        location = resolve_location(None, registry)
        assert location.name == "docs"
        assert location.path == "/d"

    def test_exact_match(self):
        registry = make_registry("docs", "music")
        assert resolve_location("music", registry).name == "music"

    def test_exact_match_wins_over_prefix(self):
        registry = make_registry("docs-archive", "doc", "docs")
        assert resolve_location("doc", registry).name == "doc"
        assert resolve_location("docs", registry).name == "docs"

    def test_unique_prefix(self):
        registry = make_registry("docs", "music")
        assert resolve_location("mu", registry).name == "music"

    def test_abbreviation_inside_name(self):
        """Scenario: 'nas' resolves local-nas-smb."""
        registry = make_registry("docs", "local-nas-smb")
        assert resolve_location("nas", registry).name == "local-nas-smb"

    def test_substring_match(self):
        registry = make_registry("docs", "homeserver")
        assert resolve_location("server", registry).name == "homeserver"

    def test_ambiguous_prefix(self):
        """Scenario: 'a' prefixes both a-one and a-two."""
        registry = make_registry("a-one", "a-two")

        with pytest.raises(AmbiguousLocationError) as exc_info:
            resolve_location("a", registry)

        assert exc_info.value.matches == ["a-one", "a-two"]
        assert "a-one" in str(exc_info.value)
        assert "a-two" in str(exc_info.value)

    def test_ambiguous_lists_exactly_the_matches(self):
        registry = make_registry("photos", "pro-one", "docs", "pro-two")

        with pytest.raises(AmbiguousLocationError) as exc_info:
            resolve_location("pro", registry)

        assert exc_info.value.matches == ["pro-one", "pro-two"]

    def test_prefix_tier_decides_before_abbreviation(self):
        registry = make_registry("nas", "local-nas-smb")
        assert resolve_location("na", registry).name == "nas"

    def test_unknown_location(self):
        registry = make_registry("docs", "music")

        with pytest.raises(UnknownLocationError) as exc_info:
            resolve_location("videos", registry)

        assert exc_info.value.token == "videos"
        assert exc_info.value.known == ["docs", "music"]

    def test_matching_is_case_sensitive(self):
        registry = make_registry("docs")

        with pytest.raises(UnknownLocationError):
            resolve_location("DOCS", registry)

    def test_empty_registry(self):
        with pytest.raises(NoLocationsConfiguredError):
            resolve_location(None, LocationRegistry())

    def test_empty_registry_with_token(self):
        with pytest.raises(NoLocationsConfiguredError) as exc_info:
            resolve_location("docs", LocationRegistry(), config_path="/cfg/blink.yml")

        assert "/cfg/blink.yml" in str(exc_info.value)

    def test_errors_share_base_class(self):
        for error in (NoLocationsConfiguredError, UnknownLocationError, AmbiguousLocationError):
            assert issubclass(error, LocationError)


class TestFindMatches:
    """Test cases for find_matches."""

    def test_no_matches(self):
        assert find_matches("zzz", make_registry("docs")) == []

    def test_matches_follow_registry_order(self):
        registry = make_registry("b-two", "a-one", "b-one")
        assert find_matches("b", registry) == ["b-two", "b-one"]

    def test_segment_separators(self):
        registry = make_registry("work_share", "home.media", "old stuff")
        assert find_matches("share", registry) == ["work_share"]
        assert find_matches("media", registry) == ["home.media"]
        assert find_matches("stuff", registry) == ["old stuff"]
