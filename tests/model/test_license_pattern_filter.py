# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import pytest

from inventorykit.model import Artifact, PatternArtifactFilter


@pytest.fixture(name="artifact")
def fixture_artifact():
    # org.foo:foo:1.0:jar
    return Artifact(id="foo-1.0.jar", groupId="org.foo", version="1.0")


def test_no_include_patterns_accepts_everything(artifact):
    assert PatternArtifactFilter().filter(artifact)
    assert not PatternArtifactFilter().filter(None)


@pytest.mark.parametrize(
    "pattern,expected",
    [
        ("org.foo:*:*:*", True),
        ("org.bar:*:*:*", False),
        ("^org\\..*:foo", True),
        ("*:*:^1\\..*:jar", True),
        ("*:*:^2\\..*", False),
        ("*:*:*:war", False),
    ],
)
def test_include_pattern(artifact, pattern, expected):
    """Segments are '*', a regular expression starting with '^' or a literal."""
    assert PatternArtifactFilter([pattern]).filter(artifact) is expected


def test_exclude_pattern(artifact):
    artifact_filter = PatternArtifactFilter(["org.foo:*"])
    artifact_filter.add_exclude_pattern("*:*:1.0")
    assert not artifact_filter.filter(artifact)

    artifact.version = "2.0"
    artifact.id = "foo-2.0.jar"
    assert artifact_filter.filter(artifact)


def test_classifier_segment():
    artifact = Artifact(id="foo-1.0-sources.jar", groupId="org.foo", version="1.0")
    artifact_filter = PatternArtifactFilter()
    artifact_filter.add_include_pattern("*:*:*:sources:jar")
    assert artifact_filter.filter(artifact)
