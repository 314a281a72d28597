# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from __future__ import annotations

import re
from typing import Iterable, List, Optional

from ._artifact import Artifact


class PatternArtifactFilter:
    """Select artifacts by `groupId:artifactId:version[:classifier]:type` patterns.

    Each ':'-separated pattern segment is either '*' (anything), a regular expression when
    it starts with '^', or a literal that must be equal.
    """

    def __init__(
        self,
        include_patterns: Optional[Iterable[str]] = None,
        exclude_patterns: Optional[Iterable[str]] = None,
    ):
        self.include_patterns: Optional[List[str]] = (
            list(include_patterns) if include_patterns is not None else None
        )
        self.exclude_patterns: Optional[List[str]] = (
            list(exclude_patterns) if exclude_patterns is not None else None
        )

    def add_include_pattern(self, *patterns: str) -> None:
        if self.include_patterns is None:
            self.include_patterns = []
        self.include_patterns.extend(patterns)

    def add_exclude_pattern(self, *patterns: str) -> None:
        if self.exclude_patterns is None:
            self.exclude_patterns = []
        self.exclude_patterns.extend(patterns)

    def filter(self, artifact: Optional[Artifact]) -> bool:
        if artifact is None:
            return False
        if self.include_patterns is None:
            return True

        representation = artifact.create_string_representation()
        if not any(self._matches(p, representation) for p in self.include_patterns):
            return False
        if self.exclude_patterns:
            return not any(self._matches(p, representation) for p in self.exclude_patterns)
        return True

    @staticmethod
    def _matches(pattern: str, representation: str) -> bool:
        elements = representation.split(":")
        for index, pattern_element in enumerate(pattern.split(":")):
            if pattern_element == "*":
                continue
            element = elements[index] if index < len(elements) else ""
            if pattern_element.startswith("^"):
                if re.fullmatch(pattern_element, element) is None:
                    return False
            elif pattern_element != element:
                return False
        return True
