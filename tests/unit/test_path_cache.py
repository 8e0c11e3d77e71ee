"""
Unit tests for the candidate path cache.

Tests cache hits and misses, regeneration, atomic write-back, folder
filtering and traversal failure handling of PathCache.
"""

import os
import tempfile
import shutil
from pathlib import Path
from unittest.mock import patch
import pytest

from blink.errors import CacheWriteError, TraversalError
from blink.models.config import LocationMode, LocationSpec
from blink.session.cache import PathCache, read_cache_file, write_cache_file

from fakes import FakeWalker


class TestPathCache:
    """Test cases for PathCache.get."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()
        self.root = Path(self.temp_dir)
        self.walker = FakeWalker({self.temp_dir: ["b.txt", "a/c.txt", "a"]})
        self.cache = PathCache(self.walker)

    def teardown_method(self):
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def _spec(self, mode=LocationMode.FILES, cache_file=None, name="docs"):
        return LocationSpec(name=name, path=self.temp_dir, mode=mode, cache_file=cache_file)

    def test_without_cache_file_always_traverses(self):
        spec = self._spec()

        first = self.cache.get(spec)
        second = self.cache.get(spec)

        assert first.paths == ("b.txt", "a/c.txt", "a")
        assert first.from_cache is False
        assert second == first
        assert len(self.walker.calls) == 2
        assert self.walker.calls[0] == (self.temp_dir, LocationMode.FILES)

    def test_miss_writes_cache(self):
        spec = self._spec(cache_file=".blink/files.txt")

        candidates = self.cache.get(spec)

        cache_path = self.root / ".blink" / "files.txt"
        assert candidates.from_cache is False
        assert cache_path.read_text(encoding='utf-8') == "b.txt\na/c.txt\na\n"
        assert [p.name for p in (self.root / ".blink").iterdir()] == ["files.txt"]

    def test_hit_skips_traversal(self):
        spec = self._spec(cache_file="cache.txt")

        first = self.cache.get(spec)
        second = self.cache.get(spec)
        third = self.cache.get(spec)

        assert second.from_cache is True
        assert second.paths == first.paths
        assert third == second
        assert len(self.walker.calls) == 1

    def test_hit_is_not_validated(self):
        (self.root / "cache.txt").write_text("gone/file.txt\nother.txt\n", encoding='utf-8')
        spec = self._spec(cache_file="cache.txt")

        candidates = self.cache.get(spec)

        assert candidates.paths == ("gone/file.txt", "other.txt")
        assert self.walker.calls == []

    def test_empty_cache_file_is_a_miss(self):
        (self.root / "cache.txt").write_text("", encoding='utf-8')
        spec = self._spec(cache_file="cache.txt")

        candidates = self.cache.get(spec)

        assert candidates.from_cache is False
        assert len(candidates) == 3
        assert len(self.walker.calls) == 1
        assert (self.root / "cache.txt").read_text(encoding='utf-8') == "b.txt\na/c.txt\na\n"

    def test_blank_lines_only_is_a_miss(self):
        (self.root / "cache.txt").write_text("\n\n  \n", encoding='utf-8')
        assert self.cache.get(self._spec(cache_file="cache.txt")).from_cache is False

    @pytest.mark.parametrize("mode", [LocationMode.FILES, LocationMode.FOLDERS])
    def test_empty_and_missing_cache_behave_alike(self, mode):
        missing = self.cache.get(self._spec(mode=mode, cache_file="missing.txt"))
        (self.root / "empty.txt").write_text("", encoding='utf-8')
        empty = self.cache.get(self._spec(mode=mode, cache_file="empty.txt"))

        assert missing.paths == empty.paths
        assert missing.from_cache is empty.from_cache is False
        assert len(self.walker.calls) == 2

    def test_force_refresh(self):
        (self.root / "cache.txt").write_text("stale.txt\n", encoding='utf-8')
        spec = self._spec(cache_file="cache.txt")

        candidates = self.cache.get(spec, force_refresh=True)

        assert candidates.from_cache is False
        assert "stale.txt" not in candidates.paths
        assert (self.root / "cache.txt").read_text(encoding='utf-8') == "b.txt\na/c.txt\na\n"

    def test_absolute_cache_file(self):
        cache_path = self.root / "elsewhere" / "cache.txt"
        spec = self._spec(cache_file=str(cache_path))

        self.cache.get(spec)

        assert cache_path.exists()

    def test_folders_mode_drops_plain_files(self):
        (self.root / "sub").mkdir()
        (self.root / "file.txt").write_text("x")
        walker = FakeWalker({self.temp_dir: ["sub", "file.txt", "not-on-disk"]})
        spec = self._spec(mode=LocationMode.FOLDERS, cache_file="folders.txt")

        candidates = PathCache(walker).get(spec)

        assert candidates.paths == ("sub", "not-on-disk")
        assert (self.root / "folders.txt").read_text(encoding='utf-8') == "sub\nnot-on-disk\n"

    def test_files_mode_is_not_filtered(self):
        (self.root / "sub").mkdir()
        walker = FakeWalker({self.temp_dir: ["sub", "file.txt"]})

        candidates = PathCache(walker).get(self._spec())

        assert candidates.paths == ("sub", "file.txt")

    def test_generated_paths_are_normalized(self):
        walker = FakeWalker({self.temp_dir: ["./a.txt", "", "b/\n"]})

        candidates = PathCache(walker).get(self._spec())

        assert candidates.paths == ("a.txt", "b")

    def test_cache_write_failure_is_not_fatal(self):
        (self.root / "blocker").write_text("not a directory")
        spec = self._spec(cache_file="blocker/cache.txt")

        candidates = self.cache.get(spec)

        assert candidates.paths == ("b.txt", "a/c.txt", "a")
        assert candidates.from_cache is False

    def test_traversal_error_propagates(self):
        walker = FakeWalker(failing=[self.temp_dir])

        with pytest.raises(TraversalError):
            PathCache(walker).get(self._spec(cache_file="cache.txt"))

        assert not (self.root / "cache.txt").exists()

    def test_get_or_empty_falls_back(self):
        walker = FakeWalker(failing=[self.temp_dir])

        candidates = PathCache(walker).get_or_empty(self._spec())

        assert candidates.paths == ()
        assert candidates.is_fallback()
        assert "permission denied" in candidates.error

    def test_os_error_from_walker_becomes_traversal_error(self):
        class BrokenWalker:
            def walk(self, root, mode):
                raise PermissionError("denied")

        with pytest.raises(TraversalError, match="denied"):
            PathCache(BrokenWalker()).get(self._spec())

    def test_hit_matches_fresh_set_for_line_separator_names(self):
        walker = FakeWalker({self.temp_dir: ["report\u2028final.txt", "b.txt"]})
        cache = PathCache(walker)
        spec = self._spec(cache_file="cache.txt")

        fresh = cache.get(spec)
        cached = cache.get(spec)

        assert cached.from_cache is True
        assert cached.paths == fresh.paths == ("report\u2028final.txt", "b.txt")
        assert len(walker.calls) == 1

    def test_generate_ignores_cache(self):
        (self.root / "cache.txt").write_text("cached.txt\n", encoding='utf-8')

        paths = self.cache.generate(self._spec(cache_file="cache.txt"))

        assert paths == ["b.txt", "a/c.txt", "a"]
        assert (self.root / "cache.txt").read_text(encoding='utf-8') == "cached.txt\n"


class TestCacheFile:
    """Test cases for reading and writing cache files."""

    def setup_method(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.cache_path = self.temp_dir / "cache.txt"

    def teardown_method(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_round_trip(self):
        paths = ["z.txt", "dir with spaces/file.md", "Müller/Übersicht.pdf", "a\\windows\\path", "a.txt"]

        write_cache_file(self.cache_path, paths)

        assert read_cache_file(self.cache_path) == paths

    def test_round_trip_unicode_line_separators(self):
        paths = ["report\u2028final.txt", "para\u2029graph", "tab\x0bbed\x0cfeed", "a.txt"]

        write_cache_file(self.cache_path, paths)

        assert read_cache_file(self.cache_path) == paths

    def test_concurrent_temp_files_do_not_collide(self):
        stale = self.temp_dir / "cache.txt.tmp"
        stale.write_text("other writer\n", encoding='utf-8')

        write_cache_file(self.cache_path, ["a.txt"])

        assert stale.read_text(encoding='utf-8') == "other writer\n"
        assert read_cache_file(self.cache_path) == ["a.txt"]

    def test_read_missing(self):
        assert read_cache_file(self.cache_path) is None

    def test_read_windows_line_endings(self):
        self.cache_path.write_bytes(b"a.txt\r\nb.txt\r\n")
        assert read_cache_file(self.cache_path) == ["a.txt", "b.txt"]

    def test_failed_write_keeps_previous_cache(self):
        write_cache_file(self.cache_path, ["old.txt"])

        def broken_paths():
            yield "new.txt"
            raise OSError("disk full")

        with pytest.raises(CacheWriteError, match="disk full"):
            write_cache_file(self.cache_path, broken_paths())

        assert read_cache_file(self.cache_path) == ["old.txt"]
        assert [p.name for p in self.temp_dir.iterdir()] == ["cache.txt"]

    def test_failed_rename_keeps_previous_cache(self):
        write_cache_file(self.cache_path, ["old.txt"])

        with patch.object(Path, 'replace', side_effect=OSError("rename failed")):
            with pytest.raises(CacheWriteError):
                write_cache_file(self.cache_path, ["new.txt"])

        assert read_cache_file(self.cache_path) == ["old.txt"]
        assert [p.name for p in self.temp_dir.iterdir()] == ["cache.txt"]
