"""Tests for file system traversal functionality."""

import logging
from pathlib import Path

import pytest

from cxxlint.traversal import (
    DEFAULT_IGNORE_DIRS,
    find_source_files,
    is_cpp_file,
    is_header_file,
    is_source_file,
    iter_source_files,
    should_ignore_directory,
)


class TestFileTypeChecks:
    """Test file type checking functions."""

    def test_is_cpp_file_recognizes_source_extensions(self):
        """is_cpp_file() returns True for every C++ source suffix."""
        assert is_cpp_file(Path("main.cpp"))
        assert is_cpp_file(Path("src/widget.cc"))
        assert is_cpp_file(Path("/absolute/path/file.cxx"))
        assert is_cpp_file(Path("legacy.c++"))

    def test_is_cpp_file_case_insensitive(self):
        """is_cpp_file() works with uppercase extensions."""
        assert is_cpp_file(Path("MAIN.CPP"))
        assert is_cpp_file(Path("file.Cc"))

    def test_is_cpp_file_rejects_other_files(self):
        """is_cpp_file() returns False for C sources, headers and non-code."""
        assert not is_cpp_file(Path("main.c"))
        assert not is_cpp_file(Path("widget.hpp"))
        assert not is_cpp_file(Path("README.md"))
        assert not is_cpp_file(Path("Makefile"))

    def test_is_header_file_recognizes_header_extensions(self):
        """is_header_file() returns True for .h, .hh, .hpp and .hxx."""
        assert is_header_file(Path("api.h"))
        assert is_header_file(Path("include/types.hh"))
        assert is_header_file(Path("widget.hpp"))
        assert is_header_file(Path("/absolute/path/api.hxx"))

    def test_is_header_file_rejects_non_header_files(self):
        """is_header_file() returns False for sources and non-code."""
        assert not is_header_file(Path("main.cpp"))
        assert not is_header_file(Path("README.txt"))

    def test_is_source_file_without_headers(self):
        """is_source_file() only accepts C++ sources when include_headers=False."""
        assert is_source_file(Path("main.cpp"), include_headers=False)
        assert not is_source_file(Path("widget.hpp"), include_headers=False)

    def test_is_source_file_with_headers(self):
        """is_source_file() accepts sources and headers when include_headers=True."""
        assert is_source_file(Path("main.cpp"), include_headers=True)
        assert is_source_file(Path("widget.hpp"), include_headers=True)
        assert not is_source_file(Path("main.c"), include_headers=True)


class TestDirectoryFiltering:
    """Test directory ignore logic."""

    def test_should_ignore_directory_recognizes_ignored_dirs(self):
        """Exact names in the ignore set are skipped."""
        ignore_set = {"build", "tests", "third_party"}
        assert should_ignore_directory(Path("build"), ignore_set)
        assert should_ignore_directory(Path("tests"), ignore_set)
        assert should_ignore_directory(Path("third_party"), ignore_set)

    def test_should_ignore_directory_allows_non_ignored_dirs(self):
        """Names outside the ignore set are walked."""
        ignore_set = {"build", "tests"}
        assert not should_ignore_directory(Path("src"), ignore_set)
        assert not should_ignore_directory(Path("include"), ignore_set)

    def test_should_ignore_directory_case_sensitive(self):
        """Exact-name matching is case-sensitive."""
        ignore_set = {"build"}
        assert should_ignore_directory(Path("build"), ignore_set)
        assert not should_ignore_directory(Path("Build"), ignore_set)

    def test_should_ignore_directory_matches_build_tree_globs(self):
        """CMake and Bazel build trees are pruned by pattern."""
        assert should_ignore_directory(Path("cmake-build-debug"), set())
        assert should_ignore_directory(Path("cmake-build-relwithdebinfo"), set())
        assert should_ignore_directory(Path("bazel-out"), set())
        assert not should_ignore_directory(Path("cmake"), set())
        assert not should_ignore_directory(Path("bazel-out"), set(), ignore_globs=())

    def test_default_ignore_dirs_includes_common_patterns(self):
        """The defaults cover build, dependency, test and VCS directories."""
        assert "build" in DEFAULT_IGNORE_DIRS
        assert "third_party" in DEFAULT_IGNORE_DIRS
        assert ".git" in DEFAULT_IGNORE_DIRS
        assert "tests" in DEFAULT_IGNORE_DIRS


class TestTraversal:
    """Test file traversal functions."""

    @pytest.fixture
    def temp_project(self, tmp_path):
        """Create a temporary project structure for testing."""
        # tmp_path/
        #   src/
        #     main.cpp
        #     widget.cc
        #     widget.hpp
        #   include/
        #     api.h
        #   build/
        #     generated.cpp (ignored)
        #   tests/
        #     test_main.cpp (ignored)
        #   README.md
        (tmp_path / "src").mkdir()
        (tmp_path / "include").mkdir()
        (tmp_path / "build").mkdir()
        (tmp_path / "tests").mkdir()

        (tmp_path / "src" / "main.cpp").write_text("int main() { return 0; }")
        (tmp_path / "src" / "widget.cc").write_text("void widget() {}")
        (tmp_path / "src" / "widget.hpp").write_text("#pragma once")
        (tmp_path / "include" / "api.h").write_text("#define API_VERSION 1")

        (tmp_path / "build" / "generated.cpp").write_text("// build artifact")
        (tmp_path / "tests" / "test_main.cpp").write_text("// test file")

        (tmp_path / "README.md").write_text("# Project")
        return tmp_path

    def test_find_source_files_collects_only_sources(self, temp_project):
        """Without headers only translation units are returned; build/ and tests/ are pruned."""
        cpp_files = find_source_files(temp_project)

        names = {f.name for f in cpp_files}
        assert names == {"main.cpp", "widget.cc"}
        assert all("build" not in f.parts for f in cpp_files)
        assert all("tests" not in f.parts for f in cpp_files)

    def test_find_source_files_with_headers(self, temp_project):
        """include_headers=True adds .h/.hpp files."""
        source_files = find_source_files(temp_project, include_headers=True)

        names = {f.name for f in source_files}
        assert names == {"main.cpp", "widget.cc", "widget.hpp", "api.h"}

    def test_filter_fn_narrows_to_headers(self, temp_project):
        """A filter on top of include_headers selects headers only."""
        header_files = find_source_files(temp_project, include_headers=True, filter_fn=is_header_file)

        names = {f.name for f in header_files}
        assert names == {"widget.hpp", "api.h"}

    def test_find_source_files_custom_ignore_dirs(self, temp_project):
        """find_source_files() respects custom ignore_dirs."""
        source_files = find_source_files(
            temp_project,
            include_headers=False,
            ignore_dirs={"build"},
        )

        names = {f.name for f in source_files}
        assert "test_main.cpp" in names
        assert "generated.cpp" not in names
        assert len(source_files) == 3

    def test_find_source_files_with_filter_function(self, temp_project):
        """filter_fn can reject files by name."""
        source_files = find_source_files(
            temp_project,
            filter_fn=lambda p: "main" in p.name,
        )

        assert [f.name for f in source_files] == ["main.cpp"]

    def test_find_source_files_empty_directory(self, tmp_path):
        """A directory without C++ files yields an empty list."""
        (tmp_path / "empty").mkdir()
        (tmp_path / "empty" / "README.txt").write_text("No C++ files here")

        assert find_source_files(tmp_path / "empty") == []

    def test_find_source_files_nonexistent_directory(self):
        """A missing root raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            find_source_files(Path("/nonexistent/directory"))

    def test_find_source_files_on_file_not_directory(self, tmp_path):
        """A file root raises NotADirectoryError."""
        file_path = tmp_path / "main.cpp"
        file_path.write_text("int main() {}")

        with pytest.raises(NotADirectoryError):
            find_source_files(file_path)

    def test_find_source_files_returns_sorted_results(self, temp_project):
        """Results are sorted by path."""
        files = find_source_files(temp_project, include_headers=True)
        assert files == sorted(files)

    def test_find_source_files_logs_progress(self, temp_project, caplog):
        """Start and completion of a traversal are logged at INFO."""
        with caplog.at_level(logging.INFO):
            find_source_files(temp_project)

        assert "Starting traversal" in caplog.text
        assert "Traversal complete" in caplog.text


class TestEdgeCases:
    """Test edge cases and error handling."""

    def test_nested_directories(self, tmp_path):
        """Files several levels down are found."""
        nested = tmp_path / "a" / "b" / "c" / "d"
        nested.mkdir(parents=True)
        (nested / "deep.cpp").write_text("void deep() {}")

        files = find_source_files(tmp_path)
        assert [f.name for f in files] == ["deep.cpp"]

    def test_empty_ignore_dirs_set(self, tmp_path):
        """An empty ignore set walks build/ and tests/ too."""
        (tmp_path / "build").mkdir()
        (tmp_path / "tests").mkdir()
        (tmp_path / "build" / "build.cpp").write_text("// build")
        (tmp_path / "tests" / "test.cpp").write_text("// test")

        source_files = find_source_files(tmp_path, ignore_dirs=set())

        assert {f.name for f in source_files} == {"build.cpp", "test.cpp"}

    def test_symlinks_skipped_by_default(self, tmp_path):
        """Symlinked directories are not followed unless asked."""
        real = tmp_path / "real"
        real.mkdir()
        (real / "a.cpp").write_text("int a;")
        link = tmp_path / "link"
        try:
            link.symlink_to(real, target_is_directory=True)
        except (OSError, NotImplementedError):
            pytest.skip("symlinks not supported here")

        files = find_source_files(tmp_path)
        assert [f.parent.name for f in files] == ["real"]

    def test_cmake_build_tree_pruned(self, tmp_path):
        """cmake-build-* directories are skipped even with a custom ignore set."""
        (tmp_path / "cmake-build-debug").mkdir()
        (tmp_path / "cmake-build-debug" / "moc_widget.cpp").write_text("// generated")
        (tmp_path / "widget.cpp").write_text("void widget() {}")

        files = find_source_files(tmp_path, ignore_dirs={"vendor"})
        assert [f.name for f in files] == ["widget.cpp"]

    def test_iter_source_files_walks_depth_first_in_name_order(self, tmp_path):
        """The lazy walk visits a directory's files, then its subdirectories by name."""
        (tmp_path / "b").mkdir()
        (tmp_path / "a").mkdir()
        (tmp_path / "b" / "y.cpp").write_text("int y;")
        (tmp_path / "a" / "x.cpp").write_text("int x;")
        (tmp_path / "top.cpp").write_text("int t;")

        names = [p.name for p in iter_source_files(tmp_path)]
        assert names == ["top.cpp", "x.cpp", "y.cpp"]
