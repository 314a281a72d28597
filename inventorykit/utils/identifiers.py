# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import re
from typing import List, Optional

# Suffixes that follow the version in a file name but are not part of it. The second
# table is applied once more after the first, so "foo-1.0-api-runtime" loses both parts.
VERSION_ID_SUFFIXES = (
    "-tests",
    "-api",
    "-config",
    "-source",
    "-sources",
    "-bootstrap",
    "-mock",
    "-doc",
    "-runtime",
)
VERSION_ID_SECOND_PASS_SUFFIXES = ("-api", "-runtime")

# Applied in order until the string no longer changes
_FOLDER_NAME_COLLAPSE = (
    ("__", "_"),
    ("--", "-"),
    ("-_", "-"),
    ("_-", "-"),
    ("_(", "("),
    ("-)", ")"),
)


def has_text(value: Optional[str]) -> bool:
    return value is not None and value.strip() != ""


def normalize(value: Optional[str]) -> str:
    """Trimmed value, or an empty string for None/blank values."""
    if has_text(value):
        return value.strip()
    return ""


def extract_artifact_id(artifact_id: Optional[str], version: Optional[str]) -> Optional[str]:
    """Strip a trailing version (and its '-' or '_' delimiter) from an id.

    Args:
        artifact_id (Optional[str]): Id/file name of the artifact, e.g. 'commons-lang-2.6.jar'.
        version (Optional[str]): Version expected to be part of the id.

    Returns:
        Optional[str]: The id without version, or None if the version is not contained
        in the id or nothing remains after stripping.
    """
    if not has_text(artifact_id) or not has_text(version):
        return None
    index = artifact_id.rfind(version)
    if index == -1:
        return None
    stripped = artifact_id[:index]
    if stripped.endswith("-") or stripped.endswith("_"):
        stripped = stripped[:-1]
    if has_text(stripped):
        return stripped
    return None


def _strip_suffix_from_table(value: str, suffixes) -> str:
    for suffix in suffixes:
        if value.endswith(suffix):
            return value[: value.rfind("-")]
    return value


def derive_version_from_id(artifact_id: Optional[str]) -> Optional[str]:
    """Guess a version from a file name such as 'foo-bar-1.2.3-sources.jar'.

    Returns:
        Optional[str]: The guessed version; None if no id is given.
    """
    if artifact_id is None:
        return None
    version = artifact_id
    if version.find(".") > 0:
        version = version[: version.rfind(".")]

    version = _strip_suffix_from_table(version, VERSION_ID_SUFFIXES)
    version = _strip_suffix_from_table(version, VERSION_ID_SECOND_PASS_SUFFIXES)

    # drop leading name segments
    while version and version[0].isascii() and version[0].isalpha():
        index = version.find("-")
        if index == -1:
            break
        version = version[index + 1 :]

    index = version.find("/")
    if index > -1:
        version = version[:index]
    return version


def infer_classifier_from_id(artifact_id: Optional[str], version: Optional[str]) -> Optional[str]:
    """Classifier is the segment between '-<version>-' and the next '.'."""
    if artifact_id is None:
        return None
    version_index = artifact_id.find(f"-{version}-")
    if version_index < 0:
        return None
    classifier_and_type = artifact_id[version_index + len(f"{version}") + 2 :]
    index = classifier_and_type.find(".")
    if index != -1:
        classifier = classifier_and_type[:index].strip()
        if classifier:
            return classifier
    return None


def infer_type_from_id(artifact_id: Optional[str], version: Optional[str]) -> Optional[str]:
    """Derive the type (file extension) following '<version>[-<classifier>].' in the id.

    Falls back to whatever follows the last '.' of the id.
    """
    if artifact_id is None:
        return None
    # the classifier is looked up with the declared version only
    classifier = infer_classifier_from_id(artifact_id, version)
    if not has_text(version):
        version = derive_version_from_id(artifact_id)
    if classifier is None:
        version_classifier_part = f"{version}."
    else:
        version_classifier_part = f"{version}-{classifier}."

    index = artifact_id.rfind(version_classifier_part)
    if index != -1:
        return artifact_id[index + len(version_classifier_part) :]

    index = artifact_id.rfind(".")
    if index != -1:
        return artifact_id[index + 1 :]
    return None


def normalize_id(value: str) -> str:
    """Turn a license or component name into a file-system friendly folder name."""
    result = value.replace(" ", "-")
    result = result.replace("+", "")
    result = result.replace("!", "")
    result = result.replace("&", "and")
    result = result.replace(",", "-")
    for char in (":", ";", "/", "\\"):
        result = result.replace(char, "_")

    length = -1
    while length != len(result):
        length = len(result)
        for old, new in _FOLDER_NAME_COLLAPSE:
            result = result.replace(old, new)
    return result


def tokenize_license(
    license_expression: Optional[str], reorder: bool = True, comma_separator_only: bool = True
) -> List[str]:
    """Split a license expression into its distinct parts.

    Args:
        license_expression (Optional[str]): Expression such as 'Apache License 2.0, MIT License'.
        reorder (bool): Sort the result case-insensitively.
        comma_separator_only (bool): Split on ',' only; otherwise also on '|' and '+'.

    Returns:
        List[str]: The trimmed, de-duplicated license names.
    """
    if license_expression is None:
        return []
    separator = r"," if comma_separator_only else r"[,|+]"
    licenses: List[str] = []
    for part in re.split(separator, license_expression):
        part = part.strip()
        if not part:
            continue
        if (
            part.startswith("(")
            and part.endswith(")")
            and part.count("(") == 1
            and part.count(")") == 1
        ):
            part = part[1:-1]
        if part not in licenses:
            licenses.append(part)
    if reorder:
        licenses.sort(key=str.lower)
    return licenses


def split_comma_separated(value: Optional[str]) -> List[str]:
    if not has_text(value):
        return []
    return [v.strip() for v in value.split(",") if v.strip()]
