"""
Tests for the command line.
"""

from __future__ import annotations

import json
import shutil
from pathlib import Path

import pytest
from click.testing import CliRunner

from openapi_to_code.cli_utils import reconstruct_command_line
from openapi_to_code.openapi_to_code import openapi_to_code

TEST_DATA = Path(__file__).parent / "test_data"

BROKEN_SPEC = """
openapi: 3.0.0
info:
  title: Broken
  version: "1"
paths:
  /pets/{id}:
    get:
      operationId: getPets
      responses: {}
components:
  schemas:
    Pet:
      type: object
      properties:
        owner:
          $ref: "#/components/schemas/Owner"
"""


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    shutil.copy(TEST_DATA / "petstore.yaml", tmp_path / "petstore.yaml")
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_generate_with_generator_flags(workdir):
    runner = CliRunner()
    result = runner.invoke(openapi_to_code, ["-s", "petstore.yaml", "-o", "out", "-g", "zod", "-g", "golang"])

    assert result.exit_code == 0, result.output
    assert (workdir / "out" / "schemas.ts").exists()
    assert (workdir / "out" / "types.go").exists()
    first_line = (workdir / "out" / "schemas.ts").read_text().splitlines()[0]
    assert first_line.startswith("// Generated by openapi_to_code v")
    assert "-g zod -g golang" in first_line


def test_generate_from_config(workdir):
    (workdir / ".openapi_to_code.yaml").write_text(
        "input:\n"
        "  source: petstore.yaml\n"
        "output: generated\n"
        "generations:\n"
        "  - generator: typescript\n"
        "    outputFile: api.ts\n"
        "hooks:\n"
        "  beforeGenerate: echo started > before.txt\n"
        "  afterGenerate: echo done > after.txt\n"
    )

    result = CliRunner().invoke(openapi_to_code, [])

    assert result.exit_code == 0, result.output
    assert "export interface Pet {" in (workdir / "generated" / "api.ts").read_text()
    assert (workdir / "before.txt").exists()
    assert (workdir / "after.txt").exists()


def test_build_errors_are_listed(workdir):
    (workdir / "broken.yaml").write_text(BROKEN_SPEC)

    result = CliRunner().invoke(openapi_to_code, ["-s", "broken.yaml", "-g", "typescript"])

    assert result.exit_code == 1
    assert "2 error(s) in broken.yaml" in result.output
    assert "Reference to undeclared schema 'Owner'" in result.output
    assert "Operation 'getPets' has no path parameter for placeholder '{id}'" in result.output
    assert not (workdir / "types.ts").exists()


def test_dump_ir(workdir):
    result = CliRunner().invoke(openapi_to_code, ["-s", "petstore.yaml", "--dump-ir", "ir/petstore.json"])

    assert result.exit_code == 0, result.output
    data = json.loads((workdir / "ir" / "petstore.json").read_text())
    assert data["metadata"]["title"] == "Petstore"
    assert [d["name"] for d in data["definitions"]][0] == "Pet"


def test_missing_document(workdir):
    result = CliRunner().invoke(openapi_to_code, ["-g", "zod"])

    assert result.exit_code == 2
    assert "No input document" in result.output


def test_nothing_to_generate(workdir):
    result = CliRunner().invoke(openapi_to_code, ["-s", "petstore.yaml"])

    assert result.exit_code == 2
    assert "Nothing to generate" in result.output


def test_unreadable_document(workdir):
    result = CliRunner().invoke(openapi_to_code, ["-s", "missing.yaml", "-g", "zod"])

    assert result.exit_code == 1
    assert "Cannot read" in result.output


def test_missing_explicit_config(workdir):
    result = CliRunner().invoke(openapi_to_code, ["-c", "nope.yaml"])

    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_failing_hook_aborts(workdir):
    (workdir / "config.yaml").write_text(
        "input:\n  source: petstore.yaml\ngenerations:\n  - generator: zod\nhooks:\n  before_generate: exit 3\n"
    )

    result = CliRunner().invoke(openapi_to_code, ["-c", "config.yaml"])

    assert result.exit_code == 1
    assert "before_generate hook failed with status 3" in result.output
    assert not (workdir / "schemas.ts").exists()


def test_reconstruct_command_line_without_context():
    """Without an active Click context only the command name is returned."""
    assert reconstruct_command_line(openapi_to_code) == "openapi_to_code"


def test_config_input_format_is_used(workdir):
    (workdir / "config.yaml").write_text(
        "input:\n  source: petstore.yaml\n  format: json\ngenerations:\n  - generator: zod\n"
    )

    result = CliRunner().invoke(openapi_to_code, ["-c", "config.yaml"])

    assert result.exit_code == 1
    assert "Cannot parse document" in result.output
