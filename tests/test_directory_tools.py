"""
Tests for the directory and grep tools.
"""

import os

import pytest

from tool_agent.tools import ToolError
from tool_agent.tools.directories import (
    create_directory,
    get_working_dir,
    list_files,
    list_files_recursive,
    remove_directory,
    search_file,
)
from tool_agent.tools.grep import grep_in_file, grep_in_files


@pytest.fixture
def tree(tmp_path, monkeypatch):
    """
    tmp/
      README.md
      src/
        main.py
        pkg/
          util.py
    """
    (tmp_path / "README.md").write_text("# demo\nTODO: write docs\n")
    (tmp_path / "src" / "pkg").mkdir(parents=True)
    (tmp_path / "src" / "main.py").write_text("import pkg\nprint('hello')\n")
    (tmp_path / "src" / "pkg" / "util.py").write_text("def hello():\n    return 'hello'\n")
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestListFiles:
    def test_sorted_with_dir_suffix(self, tree):
        assert list_files(".") == "README.md\nsrc/"

    def test_default_path(self, tree):
        assert list_files() == list_files(".")

    def test_not_a_directory(self, tree):
        with pytest.raises(ToolError, match="must be a directory"):
            list_files("README.md")

    def test_missing(self, tree):
        with pytest.raises(ToolError, match="not found"):
            list_files("nope")


class TestListFilesRecursive:
    def test_unlimited(self, tree):
        assert list_files_recursive(".").split("\n") == [
            "README.md",
            "src/",
            os.path.join("src", "main.py"),
            os.path.join("src", "pkg") + "/",
            os.path.join("src", "pkg", "util.py"),
        ]

    def test_depth_one(self, tree):
        assert list_files_recursive(".", max_depth=1) == "README.md\nsrc/"

    def test_subdirectory_root(self, tree):
        listing = list_files_recursive("src", max_depth=1).split("\n")
        assert listing == [os.path.join("src", "main.py"), os.path.join("src", "pkg") + "/"]


class TestSearchFile:
    def test_finds_by_basename(self, tree):
        assert search_file("util.py") == os.path.join("src", "pkg", "util.py")

    def test_no_match(self, tree):
        assert search_file("missing.py") == 'No file named "missing.py" found under .'

    def test_name_required(self, tree):
        with pytest.raises(ToolError, match="file_name is required"):
            search_file("  ")


class TestCreateRemoveDirectory:
    def test_create_nested(self, tree):
        assert create_directory("a/b") == "Created directory a/b"
        assert (tree / "a" / "b").is_dir()

    def test_create_existing(self, tree):
        assert "already exists" in create_directory("src")

    def test_create_over_file(self, tree):
        with pytest.raises(ToolError, match="not a directory"):
            create_directory("README.md")

    def test_remove_non_empty_requires_recursive(self, tree):
        with pytest.raises(ToolError, match="may not be empty"):
            remove_directory("src")
        assert (tree / "src").exists()

    def test_remove_recursive(self, tree):
        remove_directory("src", recursive=True)
        assert not (tree / "src").exists()

    def test_remove_empty(self, tree):
        (tree / "empty").mkdir()
        assert remove_directory("empty") == "Removed directory empty"


class TestGetWorkingDir:
    def test_returns_cwd(self, tree):
        assert os.path.realpath(get_working_dir()) == os.path.realpath(str(tree))


class TestGrepInFile:
    def test_line_numbers(self, tree):
        assert grep_in_file("src/main.py", "hello") == "2: print('hello')"

    def test_max_matches(self, tree):
        (tree / "many.txt").write_text("x\n" * 80)
        assert len(grep_in_file("many.txt", "x").split("\n")) == 50
        assert len(grep_in_file("many.txt", "x", max_matches=3).split("\n")) == 3

    def test_no_match(self, tree):
        assert grep_in_file("README.md", "zzz") == 'No matches for "zzz" in README.md'

    def test_missing_file(self, tree):
        with pytest.raises(ToolError, match="file not found"):
            grep_in_file("nope.txt", "x")


class TestGrepInFiles:
    def test_matches_across_tree(self, tree):
        lines = grep_in_files("hello").split("\n")
        assert lines == [
            os.path.join("src", "main.py") + ":2: print('hello')",
            os.path.join("src", "pkg", "util.py") + ":1: def hello():",
            os.path.join("src", "pkg", "util.py") + ":2:     return 'hello'",
        ]

    def test_glob_filters_basename(self, tree):
        assert grep_in_files("TODO", glob="*.py") == 'No matches for "TODO" under .'
        assert grep_in_files("TODO", glob="*.md") == "README.md:2: TODO: write docs"

    def test_max_results(self, tree):
        assert len(grep_in_files("hello", max_results=2).split("\n")) == 2

    def test_root_must_be_directory(self, tree):
        with pytest.raises(ToolError, match="must be a directory"):
            grep_in_files("x", root_path="README.md")
