"""Tests for file collection and extension filtering."""

from pathlib import Path

import pytest

from tdlr.files import CollectedFile, FileFilter, collect_files, normalize_ext


@pytest.fixture
def tree(tmp_path):
    """A small directory tree with files created out of order."""
    for name in ("b.txt", "a.jpg", "sub/deeper/d.mp4", "sub/c.TXT"):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(name)
    return tmp_path


class TestNormalizeExt:
    def test_strips_dot_and_case(self):
        assert normalize_ext(" .JPG ") == "jpg"
        assert normalize_ext("mp4") == "mp4"


class TestFileFilter:
    def test_no_filters_match_everything(self):
        assert FileFilter().matches(Path("a.bin"))
        assert FileFilter().matches(Path("Makefile"))

    def test_include(self):
        file_filter = FileFilter(include=[".JPG", "png"])

        assert file_filter.matches(Path("a.jpg"))
        assert file_filter.matches(Path("b.PNG"))
        assert not file_filter.matches(Path("c.gif"))
        assert not file_filter.matches(Path("Makefile"))

    def test_exclude(self):
        file_filter = FileFilter(exclude=["tmp", "log"])

        assert file_filter.matches(Path("a.txt"))
        assert not file_filter.matches(Path("debug.LOG"))

    def test_include_and_exclude(self):
        file_filter = FileFilter(include=["jpg", "png"], exclude=["png"])

        assert file_filter.matches(Path("a.jpg"))
        assert not file_filter.matches(Path("a.png"))


class TestCollectFiles:
    def test_sorted_recursive_walk(self, tree):
        result = collect_files([tree], FileFilter())

        assert [f.path.relative_to(tree).as_posix() for f in result.files] == [
            "a.jpg",
            "b.txt",
            "sub/c.TXT",
            "sub/deeper/d.mp4",
        ]
        assert result.failed == 0

    def test_root_recorded_for_directory_arguments(self, tree):
        result = collect_files([tree], FileFilter())

        assert all(f.root == tree for f in result.files)

    def test_file_argument_has_no_root(self, tree):
        result = collect_files([tree / "a.jpg"], FileFilter())

        assert result.files == [CollectedFile(tree / "a.jpg")]

    def test_filter_applies_to_walk(self, tree):
        result = collect_files([str(tree)], FileFilter(include=["txt"]))

        assert [f.path.name for f in result.files] == ["b.txt", "c.TXT"]

    def test_filter_applies_to_file_arguments(self, tree):
        result = collect_files([tree / "a.jpg"], FileFilter(exclude=["jpg"]))

        assert result.files == []

    def test_missing_path_counts_as_failed(self, tree):
        result = collect_files([tree / "missing", tree / "b.txt"], FileFilter())

        assert result.failed == 1
        assert [f.path.name for f in result.files] == ["b.txt"]
