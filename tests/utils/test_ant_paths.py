# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from pathlib import PurePosixPath

import pytest

from inventorykit.utils.paths import ant_match, list_files, matches, normalize_path, relative_posix_path


def test_normalize_path_windows_separators():
    """Backslashes of string parts become forward slashes."""
    assert normalize_path("C:\\Program Files\\App") == "C:/Program Files/App"


def test_normalize_path_parts():
    assert normalize_path(PurePosixPath("a/b"), "c") == "a/b/c"
    assert normalize_path() == "."


def test_relative_posix_path(tmp_path):
    assert relative_posix_path(tmp_path / "a" / "b.txt", tmp_path) == "a/b.txt"


@pytest.mark.parametrize(
    "pattern,path,expected",
    [
        ("**/*", "a.txt", True),
        ("**/*", "a/b/c.txt", True),
        ("*.jar", "lib/a.jar", False),
        ("**/*.jar", "lib/a.jar", True),
        ("**/*.jar", "a.jar", True),
        ("lib/**", "lib/x/y.so", True),
        ("lib/**", "lib", True),
        ("lib/", "lib/x.so", True),
        ("lib/*.so", "lib/x/y.so", False),
        ("a?c.txt", "abc.txt", True),
        ("a?c.txt", "a/c.txt", False),
        ("lib/**/*.so", "lib/y.so", True),
        ("foo[1].txt", "foo[1].txt", True),
        ("**\\*.txt", "a\\b.txt", True),
    ],
)
def test_ant_match(pattern, path, expected):
    """'**' spans folders while '*' and '?' stay within one path segment."""
    assert ant_match(pattern, path) is expected


def test_matches_comma_separated():
    """Any of the comma-separated patterns may match; None matches everything."""
    assert matches("**/*.txt, **/*.jar", "lib/a.jar")
    assert not matches("**/*.txt,**/*.so", "lib/a.jar")
    assert matches(None, "anything")


def test_list_files(tmp_path):
    """Files are listed relative and sorted; includes and excludes apply."""
    (tmp_path / "lib").mkdir()
    (tmp_path / "lib" / "b.jar").write_text("b")
    (tmp_path / "lib" / "a.jar").write_text("a")
    (tmp_path / "readme.txt").write_text("r")

    assert list_files(tmp_path) == ["lib/a.jar", "lib/b.jar", "readme.txt"]
    assert list_files(tmp_path, ["**/*.jar"]) == ["lib/a.jar", "lib/b.jar"]
    assert list_files(tmp_path, None, ["**/b.jar"]) == ["lib/a.jar", "readme.txt"]
