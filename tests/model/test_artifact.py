# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import pytest

from inventorykit.model import (
    Artifact,
    ComponentPatternData,
    LicenseData,
    LicenseMetaData,
    VulnerabilityMetaData,
)


@pytest.fixture(name="commons_lang")
def fixture_commons_lang():
    return Artifact(id="commons-lang-2.6.jar", version="2.6", groupId="commons-lang")


def test_derive_artifact_id(commons_lang):
    """The version suffix and its delimiter are stripped from the id."""
    commons_lang.derive_artifact_id()
    assert commons_lang.artifactId == "commons-lang"


def test_derive_artifact_id_idempotent(commons_lang):
    commons_lang.derive_artifact_id()
    first = commons_lang.artifactId
    commons_lang.version = "9.9"
    commons_lang.derive_artifact_id()
    assert commons_lang.artifactId == first


def test_derive_artifact_id_falls_back_to_id():
    """Without the version in the id the full id is used."""
    artifact = Artifact(id="foo.jar", version="2.6")
    artifact.derive_artifact_id()
    assert artifact.artifactId == "foo.jar"
    assert Artifact.extract_artifact_id("foo.jar", "2.6") is None
    assert Artifact.extract_artifact_id("commons-lang-2.6.jar", "2.6") == "commons-lang"


def test_attribute_store_set_and_remove():
    """Setting an empty value removes the key."""
    artifact = Artifact()
    artifact.set("Custom", "value")
    artifact.set("License", "MIT")
    assert artifact.get("Custom") == "value"
    assert artifact.license == "MIT"

    artifact.set("Custom", "")
    artifact.set("License", None)
    assert "Custom" not in artifact.attributes
    assert artifact.get("License") is None
    assert artifact.get("Custom", "default") == "default"


def test_flag_attributes():
    artifact = Artifact()
    artifact.set("Verified", "X")
    artifact.set("Security Relevance", "true")
    assert artifact.verified
    assert artifact.get("Verified") == "X"
    assert artifact.is_true("Security Relevance")

    artifact.set("Verified", None)
    assert not artifact.verified
    assert "Verified" not in artifact.attribute_keys()


def test_projects_are_a_set():
    artifact = Artifact(id="a.jar")
    artifact.add_project("p1")
    artifact.add_project("p2")
    artifact.add_project("p1")
    assert artifact.projects == "p1, p2"
    assert artifact.get_projects() == {"p1", "p2"}


def test_merge_fills_blanks_only():
    """Non-blank values of the receiver survive; flags and projects accumulate."""
    target = Artifact(id="a-1.0.jar", version="1.0", license="MIT", projects="p1")
    source = Artifact(
        id="a-1.0.jar",
        version="1.0",
        license="Apache License 2.0",
        checksum="abc",
        verified=True,
        projects="p2",
    )
    source.set("Custom", "x")

    target.merge(source)

    assert target.license == "MIT"
    assert target.checksum == "abc"
    assert target.verified
    assert target.get_projects() == {"p1", "p2"}
    assert target.get("Custom") == "x"


def test_merge_keeps_compare_string_of_equal_artifacts():
    first = Artifact(id="foo-1.0.jar", version="1.0", checksum="abc", license="MIT")
    second = Artifact(id="foo-1.0.jar", version="1.0", checksum="abc", license="MIT", projects="p")
    expected = first.create_compare_string_representation()
    assert second.create_compare_string_representation() == expected

    first.merge(second)
    second.merge(first)

    assert first.create_compare_string_representation() == expected
    assert second.create_compare_string_representation() == expected


def test_derive_qualifier():
    assert Artifact(id="X", version="1.0").derive_qualifier() == "X--1.0"
    assert Artifact(component="C", checksum="abc").derive_qualifier() == "C-abc-"


def test_string_representation():
    """groupId:artifactId:version[:classifier]:type"""
    artifact = Artifact(id="foo-1.0-sources.jar", version="1.0", groupId="org.foo")
    assert artifact.create_string_representation() == "org.foo:foo:1.0:sources:jar"
    assert Artifact(id="README").create_string_representation() == ":README::"


def test_classification():
    assert Artifact(id="a", classification="internal").is_internal()
    assert not Artifact(id="a", classification="internal").is_enabled_for_distribution()
    assert Artifact(id="a", classification="banned, current").is_banned()
    assert Artifact(id="a", classification="current").is_enabled_for_distribution()


def test_validity_and_licenses():
    assert not Artifact().is_valid()
    assert Artifact(component="Foo").is_valid()
    assert Artifact(id="foo.jar").is_valid()
    assert Artifact(license="MIT License, Apache License 2.0").get_licenses() == [
        "Apache License 2.0",
        "MIT License",
    ]


def test_copy_includes_transient_fields():
    artifact = Artifact(id="a.jar", relevant=False, managed=False)
    artifact.set("Custom", "x")
    artifact.derive_artifact_id()
    duplicate = artifact.copy()
    duplicate.set("Custom", "y")

    assert duplicate.artifactId == "a.jar"
    assert not duplicate.relevant
    assert not duplicate.managed
    assert artifact.get("Custom") == "x"


def test_json_excludes_transient_fields():
    artifact = Artifact(id="a-1.0.jar", version="1.0", verified=True)
    artifact.derive_artifact_id()
    data = artifact.to_dict()
    assert "artifactId" not in data
    assert "relevant" not in data
    assert Artifact.from_dict(data).verified


def test_loaded_empty_values_are_removed():
    artifact = Artifact.from_json(
        '{"id": "a.jar", "version": "", "attributes": {"Remark": "", "Note": "n"}}'
    )
    assert artifact.version is None
    assert artifact.attribute_keys() == ["Id", "Note"]

    pattern = ComponentPatternData.from_dict({"includePattern": "**/*", "versionAnchor": ""})
    assert pattern.versionAnchor is None


def test_license_meta_data_qualifier_and_folders():
    wildcard = LicenseMetaData(component="Foo", version="*", license="MIT License")
    versioned = LicenseMetaData(component="Foo", version="1.0", license="MIT License")
    assert wildcard.derive_qualifier() == "Foo-MIT License"
    assert versioned.derive_qualifier() == "Foo-MIT License-1.0"

    assert LicenseMetaData.derive_license_folder_name("Apache License 2.0") == "Apache-License-2.0"
    assert LicenseMetaData.derive_component_folder_name("Foo Bar", "1.0") == "Foo-Bar-1.0"
    assert LicenseMetaData.derive_component_folder_name("Foo Bar") == "Foo-Bar"


def test_license_meta_data_effective_license():
    lmd = LicenseMetaData(component="Foo", version="1.0", license="A + B")
    assert lmd.derive_license_in_effect() == "A + B"
    lmd.set("License in Effect", "A")
    assert lmd.derive_license_in_effect() == "A"
    assert lmd.create_compare_string_representation() == "A + B/Foo/1.0/A/"


def test_license_data_merge():
    license_data = LicenseData(canonicalName="MIT License", spdxId="MIT")
    license_data.merge(LicenseData(canonicalName="MIT License", spdxId="X", osiApproved="true"))
    assert license_data.spdxId == "MIT"
    assert license_data.osiApproved == "true"
    assert license_data.derive_qualifier() == "MIT License-"


def test_component_pattern_validate():
    """A blank version anchor is a configuration error."""
    cpd = ComponentPatternData(
        includePattern="**/*", versionAnchorChecksum="*", componentPart="foo"
    )
    with pytest.raises(ValueError, match=r"\[Version Anchor\]"):
        cpd.validate("inventory.json")

    cpd.set("Version Anchor", "foo/VERSION")
    cpd.validate("inventory.json")
    assert cpd.derive_qualifier() == "**/*-foo/VERSION-*"


def test_vulnerability_status():
    vmd = VulnerabilityMetaData(name="CVE-2020-0001", status=" Void ")
    assert vmd.is_status("void")
    assert vmd.derive_qualifier() == "CVE-2020-0001"
