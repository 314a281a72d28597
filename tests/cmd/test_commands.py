# Copyright 2025 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import sys
from unittest.mock import Mock, patch

import pytest
from click.testing import CliRunner
from loguru import logger

from inventorykit import __version__
from inventorykit.__main__ import main
from inventorykit.configmanager import ConfigManager
from inventorykit.model import Artifact, Inventory, VulnerabilityMetaData


@pytest.fixture(autouse=True)
def restore_logger():
    yield
    # the CLI replaces the default sink with the runner's captured stderr
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture(name="runner")
def fixture_runner():
    return CliRunner()


@pytest.fixture(name="input_dir")
def fixture_input_dir(tmp_path):
    input_dir = tmp_path / "input"
    (input_dir / "lib").mkdir(parents=True)
    (input_dir / "lib" / "a-1.0.jar").write_bytes(b"a")
    (input_dir / "readme.txt").write_bytes(b"readme")
    return input_dir


def write_inventory_file(path, inventory: Inventory):
    path.write_text(inventory.to_json())
    return str(path)


def read_inventory_file(path) -> Inventory:
    return Inventory.from_json(path.read_text())


def test_version(runner):
    result = runner.invoke(main, ["version"])
    assert result.exit_code == 0
    assert result.output.strip() == __version__

    result = runner.invoke(main, ["--version"])
    assert result.output.strip() == __version__


def test_scan_json(runner, input_dir, tmp_path):
    """Files known to the reference inventory are reported with their location."""
    reference = write_inventory_file(
        tmp_path / "reference.json", Inventory(artifacts=[Artifact(id="a-1.0.jar", license="MIT")])
    )
    outfile = tmp_path / "scan.json"

    result = runner.invoke(
        main,
        ["scan", str(input_dir), str(outfile), "--reference", reference, "--scan_dir", str(tmp_path / "work")],
    )

    assert result.exit_code == 0, result.output
    inventory = read_inventory_file(outfile)
    assert sorted(a.id for a in inventory.artifacts) == ["a-1.0.jar", "readme.txt"]
    assert inventory.find_artifact_by_id("a-1.0.jar").projects == "lib/a-1.0.jar"


def test_scan_csv_with_temporary_scan_dir(runner, input_dir, tmp_path):
    outfile = tmp_path / "scan.csv"
    result = runner.invoke(
        main, ["scan", str(input_dir), str(outfile), "--exclude", "lib/**", "--output_format", "csv"]
    )

    assert result.exit_code == 0, result.output
    lines = outfile.read_text().splitlines()
    assert lines[0] == "Id,Component,Version,Group Id,Checksum,License,Classification,Projects"
    assert lines[1].startswith("readme.txt,,,,")
    assert len(lines) == 2


def test_unknown_output_format(runner, input_dir, tmp_path):
    result = runner.invoke(main, ["scan", str(input_dir), str(tmp_path / "out"), "--output_format", "xlsx"])
    assert result.exit_code == 1


def test_merge(runner, tmp_path):
    first = write_inventory_file(tmp_path / "first.json", Inventory(artifacts=[Artifact(id="a.jar", projects="p1")]))
    second = write_inventory_file(
        tmp_path / "second.json",
        Inventory(artifacts=[Artifact(id="a.jar", projects="p2"), Artifact(id="b.jar")]),
    )
    outfile = tmp_path / "merged.json"

    result = runner.invoke(main, ["merge", str(outfile), first, second])

    assert result.exit_code == 0, result.output
    merged = read_inventory_file(outfile)
    assert [a.id for a in merged.artifacts] == ["a.jar", "b.jar"]
    assert merged.artifacts[0].projects == "p1, p2"


def test_inherit(runner, tmp_path):
    local = write_inventory_file(
        tmp_path / "local.json", Inventory(artifacts=[Artifact(id="x.jar", version="1.0", license="local")])
    )
    parent = write_inventory_file(
        tmp_path / "parent.json",
        Inventory(
            artifacts=[
                Artifact(id="x.jar", version="1.0", license="parent"),
                Artifact(id="y.jar", version="2.0", license="parent"),
            ]
        ),
    )
    outfile = tmp_path / "out.json"

    result = runner.invoke(main, ["inherit", local, parent, str(outfile)])

    assert result.exit_code == 0, result.output
    inventory = read_inventory_file(outfile)
    assert [(a.id, a.license) for a in inventory.artifacts] == [("x.jar", "local"), ("y.jar", "parent")]


def test_validate(runner, tmp_path):
    valid = write_inventory_file(
        tmp_path / "valid.json",
        Inventory(artifacts=[Artifact(id="a-1.0.jar", component="A", version="1.0", license="MIT")]),
    )
    invalid = write_inventory_file(tmp_path / "invalid.json", Inventory(artifacts=[Artifact(id="a.jar")]))
    properties_file = tmp_path / "validate.properties"
    properties_file.write_text("validate.license.folders=false\n")
    options = ["--properties", str(properties_file), "-p", "validate.component.folders=false"]

    result = runner.invoke(main, ["validate", valid, *options])
    assert result.exit_code == 0, result.output
    assert "Validation completed." in result.output

    result = runner.invoke(main, ["validate", invalid, *options])
    assert result.exit_code == 1

    result = runner.invoke(main, ["validate", valid])
    assert result.exit_code == 1

    result = runner.invoke(main, ["validate", valid, "-p", "no-value"])
    assert result.exit_code == 2


def test_maven_groupid(runner, tmp_path):
    inventory = write_inventory_file(tmp_path / "in.json", Inventory(artifacts=[Artifact(id="foo-1.0.jar")]))
    outfile = tmp_path / "out.json"
    response = (
        '<response><result name="response" numFound="1">'
        '<doc><str name="g">org.foo</str></doc></result></response>'
    )

    with patch("inventorykit.processors.maven_central.requests.get") as mock_get:
        mock_get.return_value = Mock(status_code=200, text=response)
        result = runner.invoke(
            main, ["maven-groupid", inventory, str(outfile), "-p", "search.url=https://search.invalid/select"]
        )

    assert result.exit_code == 0, result.output
    assert mock_get.call_args.args[0] == "https://search.invalid/select"
    artifact = read_inventory_file(outfile).artifacts[0]
    assert artifact.groupId == "org.foo"
    assert artifact.version == "1.0"


def test_maven_version(runner, tmp_path):
    inventory = write_inventory_file(
        tmp_path / "in.json", Inventory(artifacts=[Artifact(id="foo-1.0.jar", version="1.0", groupId="org.foo")])
    )
    outfile = tmp_path / "out.json"

    with patch("inventorykit.processors.maven_central.requests.get") as mock_get:
        mock_get.return_value = Mock(status_code=404, text="")
        with patch("inventorykit.processors.maven_central.time.sleep"):
            result = runner.invoke(main, ["maven-version", inventory, str(outfile)])

    assert result.exit_code == 0, result.output
    assert read_inventory_file(outfile).artifacts[0].latestVersion == "n.a."


def test_stat(runner, tmp_path):
    inventory = write_inventory_file(
        tmp_path / "in.json",
        Inventory(
            artifacts=[Artifact(id="a.jar")],
            vulnerabilityMetaData={"default": [VulnerabilityMetaData(name="CVE-1", cvssUnmodifiedSeverityV3="high")]},
        ),
    )
    result = runner.invoke(main, ["stat", inventory])

    assert result.exit_code == 0, result.output
    assert "Number of artifacts: 1" in result.output
    assert "Number of vulnerabilities: 1" in result.output
    assert "In Review" in result.output


@pytest.fixture(name="isolated_config")
def fixture_isolated_config(tmp_path):
    ConfigManager.delete_instance("inventorykit")
    config_manager = ConfigManager(config_dir=tmp_path)
    yield config_manager
    ConfigManager.delete_instance("inventorykit")


def test_config(runner, isolated_config):
    result = runner.invoke(main, ["config", "scan.extract_prefix", "custom-"])
    assert result.output.strip() == "Configuration 'scan.extract_prefix' set to 'custom-'."
    assert isolated_config.get("scan", "extract_prefix") == "custom-"

    result = runner.invoke(main, ["config", "scan.extract_prefix"])
    assert result.output.strip() == "scan.extract_prefix = custom-"

    result = runner.invoke(main, ["config", "core.disable_plugins", "csv", "json"])
    assert isolated_config.get("core", "disable_plugins") == ["csv", "json"]

    result = runner.invoke(main, ["config", "core.unknown"])
    assert result.output.strip() == "Configuration 'core.unknown' not found."

    result = runner.invoke(main, ["config", "nodot"])
    assert result.exit_code == 1
    assert "section.option" in result.output
