# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import functools
import os
import pathlib
import re
from typing import Iterable, List, Optional, Union


def normalize_path(*path_parts: Union[str, pathlib.PurePath]) -> str:
    """
    Normalize one or more path parts into a single POSIX-style path string.

    Args:
        *path_parts: One or more path components, strings or PurePath objects.

    Returns:
        str: POSIX-style normalized path (e.g., 'C:/Program Files/App')
    """
    cleaned_parts = [str(p).replace("\\", "/") for p in path_parts]
    return pathlib.PurePosixPath(*cleaned_parts).as_posix()


def relative_posix_path(path: Union[str, os.PathLike], base_dir: Union[str, os.PathLike]) -> str:
    """Path of `path` relative to `base_dir`, using '/' as separator."""
    return normalize_path(os.path.relpath(os.fspath(path), os.fspath(base_dir)))


@functools.lru_cache(maxsize=1024)
def _compile_ant_pattern(pattern: str) -> "re.Pattern[str]":
    # a trailing '/' means everything below the folder
    if pattern.endswith("/"):
        pattern += "**"
    regex = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            regex.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("/**", i) and i + 3 == len(pattern):
            regex.append("(?:/.*)?")
            i += 3
        elif pattern.startswith("**", i):
            regex.append(".*")
            i += 2
        elif pattern[i] == "*":
            regex.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            regex.append("[^/]")
            i += 1
        else:
            regex.append(re.escape(pattern[i]))
            i += 1
    return re.compile("^" + "".join(regex) + "$")


def ant_match(pattern: str, path: str) -> bool:
    """Match a single Ant-style pattern ('**' spans folders, '*' and '?' stay within one
    folder) against a relative path."""
    return _compile_ant_pattern(normalize_separators(pattern)).match(normalize_separators(path)) is not None


def normalize_separators(path: str) -> str:
    return path.replace("\\", "/")


def split_patterns(patterns: Optional[str]) -> List[str]:
    if patterns is None:
        return []
    return [p.strip() for p in patterns.split(",") if p.strip()]


def matches(patterns: Optional[str], path: str) -> bool:
    """Check a path against a comma-separated list of Ant-style patterns.

    Args:
        patterns (Optional[str]): Comma-separated patterns; None matches every path.
        path (str): Relative path to check.

    Returns:
        bool: True if any of the patterns matches.
    """
    if patterns is None:
        return True
    return any(ant_match(pattern, path) for pattern in split_patterns(patterns))


def matches_any(patterns: Iterable[str], path: str) -> bool:
    return any(ant_match(pattern, path) for pattern in patterns)


def list_files(
    base_dir: Union[str, os.PathLike],
    includes: Optional[Iterable[str]] = None,
    excludes: Optional[Iterable[str]] = None,
) -> List[str]:
    """List the files below base_dir as sorted relative POSIX paths.

    Args:
        base_dir: Folder to walk.
        includes: Ant-style include patterns; defaults to everything.
        excludes: Ant-style exclude patterns.

    Returns:
        List[str]: Relative paths of the selected files.
    """
    include_list = list(includes) if includes else ["**/*"]
    exclude_list = list(excludes) if excludes else []
    result = []
    for root, _, files in os.walk(base_dir):
        for name in files:
            relative_path = relative_posix_path(os.path.join(root, name), base_dir)
            if not matches_any(include_list, relative_path):
                continue
            if matches_any(exclude_list, relative_path):
                continue
            result.append(relative_path)
    result.sort()
    return result
