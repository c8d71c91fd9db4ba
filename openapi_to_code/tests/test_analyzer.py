"""
Tests for the document analyzer: metadata, error aggregation and the IR view.
"""

from __future__ import annotations

import dataclasses
import json
from pathlib import Path
from unittest import TestCase

import pytest

from openapi_to_code.loader import load_document
from openapi_to_code.pipeline.analyzer import DocumentAnalyzer, build_ir
from openapi_to_code.pipeline.errors import (
    DanglingReferenceError,
    IRBuildError,
    UnboundPathParameterError,
    UnsupportedSchemaShapeError,
)

TEST_DATA = Path(__file__).parent / "test_data"


class TestDocumentAnalyzer(TestCase):
    def setUp(self):
        self.document = load_document(TEST_DATA / "petstore.yaml")
        self.ir = DocumentAnalyzer().analyze(self.document)

    def test_metadata(self):
        metadata = self.ir.metadata
        self.assertEqual(metadata.title, "Petstore")
        self.assertEqual(metadata.version, "1.0.0")
        self.assertEqual(metadata.description, "A sample pet store")
        self.assertEqual(metadata.base_url, "https://petstore.example.com/v1")
        self.assertEqual(dict(metadata.extensions), {"x-audience": "public"})

    def test_document_level(self):
        self.assertEqual(self.ir.format, "openapi")
        self.assertEqual(self.ir.source_version, "3.0.3")
        self.assertEqual(dict(self.ir.extensions), {"x-generator-hints": {"strict": True}})

    def test_definitions_in_document_order(self):
        self.assertEqual(list(self.ir.definitions), ["Pet", "NewPet", "PetStatus", "Owner", "Error", "Metadata"])

    def test_ir_is_immutable(self):
        with self.assertRaises(dataclasses.FrozenInstanceError):
            self.ir.format = "other"
        with self.assertRaises(TypeError):
            self.ir.definitions["Extra"] = self.ir.lookup("Pet")

    def test_to_dict_is_json_serializable(self):
        data = self.ir.to_dict()
        text = json.dumps(data)

        self.assertIn('"name": "Pet"', text)
        self.assertEqual([d["name"] for d in data["definitions"]][:2], ["Pet", "NewPet"])
        self.assertEqual(data["operations"][0]["operation_id"], "listPets")
        self.assertEqual(data["operations"][0]["parameters"][0]["location"], "query")


def test_errors_of_both_passes_are_aggregated():
    document = {
        "openapi": "3.0.0",
        "info": {"title": "Broken", "version": "1"},
        "paths": {
            "/pets/{id}": {
                "get": {
                    "operationId": "getPets",
                    "responses": {
                        "200": {
                            "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Pet"}}}
                        }
                    },
                }
            }
        },
        "components": {"schemas": {"Pet": {"type": "object", "properties": {"owner": {"$ref": "#/components/schemas/Owner"}}}}},
    }

    with pytest.raises(IRBuildError) as exc_info:
        DocumentAnalyzer().analyze(document)

    errors = exc_info.value.errors
    assert [type(e) for e in errors] == [DanglingReferenceError, UnboundPathParameterError]
    message = str(exc_info.value)
    assert message.startswith("IR build failed with 2 errors:")
    assert "[#/components/schemas/Pet/properties/owner] Reference to undeclared schema 'Owner'" in message


def test_non_mapping_root():
    with pytest.raises(IRBuildError) as exc_info:
        DocumentAnalyzer().analyze(["not", "a", "document"])

    assert isinstance(exc_info.value.errors[0], UnsupportedSchemaShapeError)


def test_non_3x_version_warns(caplog):
    with caplog.at_level("WARNING"):
        ir = build_ir({"swagger": "2.0", "info": {"title": "Old", "version": "1"}})

    assert ir.definitions == {}
    assert ir.operations == ()
    assert "expected 3.x" in caplog.text


def test_fresh_state_per_document():
    """One analyzer instance can build several documents independently."""
    analyzer = DocumentAnalyzer()
    first = analyzer.analyze({"openapi": "3.0.0", "components": {"schemas": {"A": {"type": "string"}}}})
    second = analyzer.analyze({"openapi": "3.0.0", "components": {"schemas": {"B": {"type": "integer"}}}})

    assert list(first.definitions) == ["A"]
    assert list(second.definitions) == ["B"]


def test_reference_to_other_document_schema_is_dangling():
    analyzer = DocumentAnalyzer()
    analyzer.analyze({"openapi": "3.0.0", "components": {"schemas": {"A": {"type": "string"}}}})

    with pytest.raises(IRBuildError) as exc_info:
        analyzer.analyze({"openapi": "3.0.0", "components": {"schemas": {"B": {"$ref": "#/components/schemas/A"}}}})

    assert isinstance(exc_info.value.errors[0], DanglingReferenceError)
