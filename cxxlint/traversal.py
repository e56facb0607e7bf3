"""
Source discovery: find the C++ translation units (and optionally headers) under
a directory.

Build trees, vendored dependencies, test fixtures and VCS metadata are pruned by
directory name, either exactly (DEFAULT_IGNORE_DIRS) or by glob
(DEFAULT_IGNORE_GLOBS, e.g. CMake's `cmake-build-debug`). The CLI calls
find_source_files(); iter_source_files() yields the same files lazily in
directory order.

Typical usage:
    from pathlib import Path
    from cxxlint.traversal import find_source_files

    units = find_source_files(Path("./my_project"), include_headers=True)
"""

import fnmatch
import logging
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional

logger = logging.getLogger(__name__)

CPP_SOURCE_SUFFIXES: frozenset[str] = frozenset({".cpp", ".cc", ".cxx", ".c++"})
CPP_HEADER_SUFFIXES: frozenset[str] = frozenset({".h", ".hh", ".hpp", ".hxx"})

DEFAULT_IGNORE_DIRS: frozenset[str] = frozenset(
    {
        # build output
        "build", "Build", "out", "bin", "obj", "dist",
        # tests and their fixtures
        "tests", "test", "testing",
        # dependencies
        "third_party", "vendor", "external", "deps", "node_modules",
        # VCS and editors
        ".git", ".svn", ".hg", ".vscode", ".idea", ".vs", ".cache",
    }
)

# Generated per-configuration build trees.
DEFAULT_IGNORE_GLOBS: tuple[str, ...] = ("cmake-build-*", "bazel-*")


def is_cpp_file(path: Path) -> bool:
    """
    True for a C++ translation unit (.cpp, .cc, .cxx, .c++), any case.

    >>> is_cpp_file(Path("widget.CC"))
    True
    >>> is_cpp_file(Path("main.c"))
    False
    """
    return path.suffix.lower() in CPP_SOURCE_SUFFIXES


def is_header_file(path: Path) -> bool:
    """True for a C/C++ header (.h, .hh, .hpp, .hxx), any case."""
    return path.suffix.lower() in CPP_HEADER_SUFFIXES


def is_source_file(path: Path, include_headers: bool = False) -> bool:
    return is_cpp_file(path) or (include_headers and is_header_file(path))


def should_ignore_directory(
    dir_path: Path,
    ignore_dirs: Iterable[str],
    ignore_globs: Iterable[str] = DEFAULT_IGNORE_GLOBS,
) -> bool:
    """
    Check a directory's name (not its full path, case-sensitive) against the
    exact ignore names and the glob patterns.
    """
    name = dir_path.name
    if name in ignore_dirs:
        return True
    return any(fnmatch.fnmatchcase(name, pattern) for pattern in ignore_globs)


def iter_source_files(
    root: Path,
    include_headers: bool = False,
    ignore_dirs: Optional[Iterable[str]] = None,
    follow_symlinks: bool = False,
    filter_fn: Optional[Callable[[Path], bool]] = None,
) -> Iterator[Path]:
    """
    Yield the C++ files under root, depth first, entries of each directory in
    name order.

    Unreadable subdirectories are logged and skipped. root itself is never
    matched against the ignore lists.
    """
    ignored = frozenset(DEFAULT_IGNORE_DIRS if ignore_dirs is None else ignore_dirs)
    pending: list[Path] = [root]
    while pending:
        current = pending.pop()
        try:
            entries = sorted(current.iterdir())
        except PermissionError as e:
            logger.warning("Permission denied accessing directory %s: %s", current, e)
            continue
        except OSError as e:
            logger.warning("Error accessing directory %s: %s", current, e)
            continue

        subdirs: list[Path] = []
        for entry in entries:
            if entry.is_symlink() and not follow_symlinks:
                logger.debug("Skipping symlink: %s", entry)
                continue
            if entry.is_dir():
                if should_ignore_directory(entry, ignored):
                    logger.debug("Ignoring directory: %s", entry)
                else:
                    subdirs.append(entry)
            elif entry.is_file() and is_source_file(entry, include_headers=include_headers):
                if filter_fn is not None and not filter_fn(entry):
                    logger.debug("Filtered out by custom filter: %s", entry)
                    continue
                yield entry
        # Reversed so the stack pops subdirectories in name order.
        pending.extend(reversed(subdirs))


def find_source_files(
    root: Path,
    include_headers: bool = False,
    ignore_dirs: Optional[Iterable[str]] = None,
    follow_symlinks: bool = False,
    filter_fn: Optional[Callable[[Path], bool]] = None,
) -> list[Path]:
    """
    Collect the C++ files under root, sorted by path.

    Args:
        root: Directory to search; resolved to an absolute path first.
        include_headers: Also collect header files.
        ignore_dirs: Exact directory names to prune; DEFAULT_IGNORE_DIRS if None.
            The glob patterns in DEFAULT_IGNORE_GLOBS always apply.
        follow_symlinks: Descend into / collect symlinked entries.
        filter_fn: Extra predicate a file must satisfy.

    Raises:
        FileNotFoundError: If root does not exist.
        NotADirectoryError: If root is not a directory.
    """
    root = root.resolve()
    if not root.exists():
        logger.error("Root directory does not exist: %s", root)
        raise FileNotFoundError(f"Root directory does not exist: {root}")
    if not root.is_dir():
        logger.error("Root path is not a directory: %s", root)
        raise NotADirectoryError(f"Root path is not a directory: {root}")

    logger.info("Starting traversal from: %s (headers=%s)", root, include_headers)
    files = sorted(
        iter_source_files(
            root,
            include_headers=include_headers,
            ignore_dirs=ignore_dirs,
            follow_symlinks=follow_symlinks,
            filter_fn=filter_fn,
        )
    )
    logger.info("Traversal complete: found %d source file(s) in %s", len(files), root)
    return files
