# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import pytest
from loguru import logger

from inventorykit.model import Artifact, Inventory, LicenseMetaData
from inventorykit.processors.validate import ValidateInventoryProcessor


@pytest.fixture(name="messages")
def fixture_messages():
    messages = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="WARNING")
    yield messages
    logger.remove(handler_id)


@pytest.fixture(name="lenient")
def fixture_lenient():
    return ValidateInventoryProcessor(
        {
            "validate.license.folders": "false",
            "validate.component.folders": "false",
            "failOnError": "false",
        }
    )


@pytest.fixture(name="folders")
def fixture_folders(tmp_path):
    licenses = tmp_path / "licenses"
    components = tmp_path / "components"
    (licenses / "MIT-License").mkdir(parents=True)
    (licenses / "MIT-License" / "LICENSE.txt").write_text("MIT")
    (components / "Foo-1.0").mkdir(parents=True)
    (components / "Foo-1.0" / "NOTICE.txt").write_text("notice")
    return {"licenses.path": str(licenses), "components.path": str(components)}


def complete_artifact(**kwargs) -> Artifact:
    values = {"id": "foo-1.0.jar", "component": "Foo", "version": "1.0", "license": "MIT License"}
    values.update(kwargs)
    return Artifact(**values)


def test_valid_inventory(folders, messages):
    ValidateInventoryProcessor(folders).process(Inventory(artifacts=[complete_artifact()]))
    assert messages == []


def test_missing_paths_are_configuration_errors():
    with pytest.raises(ValueError, match="licenses.path"):
        ValidateInventoryProcessor().process(Inventory())
    with pytest.raises(ValueError, match="components.path"):
        ValidateInventoryProcessor({"licenses.path": "/tmp"}).process(Inventory())


def test_missing_attributes_fail_at_end(messages):
    """Findings are numbered; the failure is raised after the full pass."""
    processor = ValidateInventoryProcessor(
        {"validate.license.folders": "false", "validate.component.folders": "false"}
    )
    with pytest.raises(RuntimeError, match="Validation error detected"):
        processor.process(Inventory(artifacts=[Artifact(id="bar.jar")]))

    assert messages[:2] == [
        "0001: Artifact 'bar.jar' without license.",
        "      Proposal: add license association.",
    ]
    assert "0003: Artifact 'bar.jar' without version." in messages


def test_banned_artifacts_need_no_license(lenient, messages):
    lenient.process(Inventory(artifacts=[Artifact(id="bad.jar", classification="banned")]))
    assert messages == []


def test_lenient_mode_only_warns(lenient, messages):
    lenient.process(Inventory(artifacts=[complete_artifact(license="A|B")]))
    assert messages[0] == "0001: Artifact 'foo-1.0.jar' associated license contains '|'."
    assert lenient.error


def test_duplicates_reported_once(lenient, messages):
    inventory = Inventory(
        artifacts=[complete_artifact(id="a.jar", checksum="x"), complete_artifact(id="a.jar", checksum="x")]
    )
    lenient.process(inventory)
    assert [m for m in messages if "Duplicate artifact" in m] == [
        "0001: Duplicate artifact detected: a.jar / a.jar."
    ]


def test_different_checksums_are_no_duplicates(lenient, messages):
    inventory = Inventory(
        artifacts=[complete_artifact(id="a.jar", checksum="x"), complete_artifact(id="a.jar", checksum="y")]
    )
    lenient.process(inventory)
    assert not any("Duplicate artifact" in m for m in messages)


def test_multiple_current(lenient, messages):
    inventory = Inventory(
        artifacts=[
            complete_artifact(groupId="org.foo", classification="current"),
            complete_artifact(id="foo-2.0.jar", version="2.0", groupId="org.foo", classification="current"),
        ]
    )
    lenient.process(inventory)
    assert len([m for m in messages if "Inconsistent classification" in m]) == 1


def test_license_notice_required(lenient, messages):
    lenient.process(Inventory(artifacts=[complete_artifact(license="A + B")]))
    assert any("requires a license notice" in m for m in messages)


def test_license_meta_data_checks(lenient, messages):
    inventory = Inventory(
        artifacts=[complete_artifact(license="A + B")],
        licenseMetaData=[
            LicenseMetaData(
                component="Foo",
                version="1.0",
                license="A + B",
                licenseInEffect="A, B",
                notice='<p>Unbalanced "quote with sofware',
                sourceCategory="other",
            ),
            LicenseMetaData(component="Bar", version="*", license="MIT", notice="<p>ok</p>"),
        ],
    )
    lenient.process(inventory)
    text = "\n".join(messages)

    assert "requires a license notice" not in text
    assert "License notice 'Bar/*/MIT' not used in inventory." in text
    assert "Source category 'other' not supported." in text
    assert "Effective license of 'Foo-A + B-1.0' contains ','." in text
    assert "number of '<p>' does not match number of '</p>'" in text
    assert "expected even count" in text
    assert "suspicious character sequence 'sofware'" in text


def test_non_unique_license_and_version_mismatch(lenient, messages):
    inventory = Inventory(
        artifacts=[
            complete_artifact(license="A"),
            complete_artifact(id="foo.jar", license="B", groupId="org.foo"),
        ]
    )
    lenient.process(inventory)
    text = "\n".join(messages)
    assert "does not have a unique license association: 'A' <> 'B'" in text
    assert "Version '1.0' not contained in 'foo.jar'" in text


def test_folder_findings(folders, messages, tmp_path):
    (tmp_path / "licenses" / "Old-License").mkdir()
    properties = dict(folders, failOnError="false")
    inventory = Inventory(artifacts=[complete_artifact(), complete_artifact(id="bar-2.0.jar", component="Bar", version="2.0")])

    ValidateInventoryProcessor(properties).process(inventory)
    text = "\n".join(messages)

    assert "License folder 'Old-License' does not match any artifact license" in text
    assert "Component folder 'Bar-2.0' does not exist." in text


def test_folders_created_and_deleted(folders, tmp_path):
    (tmp_path / "licenses" / "Old-License").mkdir()
    properties = dict(
        folders,
        failOnError="false",
        **{
            "create.license.folders": "true",
            "create.component.folders": "true",
            "delete.license.folders": "true",
        },
    )
    inventory = Inventory(artifacts=[complete_artifact(license="Apache License 2.0")])

    ValidateInventoryProcessor(properties).process(inventory)

    assert (tmp_path / "licenses" / "Apache-License-2.0").is_dir()
    assert not (tmp_path / "licenses" / "Old-License").exists()
    assert not (tmp_path / "licenses" / "MIT-License").exists()
