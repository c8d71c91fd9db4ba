"""
Tests for operation extraction.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from openapi_to_code.loader import load_document
from openapi_to_code.pipeline.analyzer import DocumentAnalyzer
from openapi_to_code.pipeline.analyzer.ir_nodes import (
    ArrayType,
    HttpMethod,
    ParameterLocation,
    PrimitiveKind,
    PrimitiveType,
    ReferenceType,
)
from openapi_to_code.pipeline.analyzer.operations import choose_media_type, choose_success_status, path_placeholders
from openapi_to_code.pipeline.errors import (
    DanglingReferenceError,
    DuplicateOperationIdError,
    IRBuildError,
    UnboundPathParameterError,
)

TEST_DATA = Path(__file__).parent / "test_data"


def document_with(paths, components=None):
    return {
        "openapi": "3.0.3",
        "info": {"title": "T", "version": "1"},
        "paths": paths,
        "components": components or {},
    }


def operations_of(paths, components=None):
    return {op.operation_id: op for op in DocumentAnalyzer().analyze(document_with(paths, components)).operations}


def build_errors(paths, components=None):
    with pytest.raises(IRBuildError) as exc_info:
        DocumentAnalyzer().analyze(document_with(paths, components))
    return exc_info.value.errors


@pytest.fixture
def petstore_operations():
    ir = DocumentAnalyzer().analyze(load_document(TEST_DATA / "petstore.yaml"))
    return {op.operation_id: op for op in ir.operations}


def test_operations_in_document_order(petstore_operations):
    assert list(petstore_operations) == ["listPets", "createPet", "getPets", "deletePet"]


def test_list_pets(petstore_operations):
    op = petstore_operations["listPets"]

    assert op.method == HttpMethod.GET
    assert op.path == "/pets"
    assert op.tags == ("pets",)
    assert op.summary == "List all pets"
    assert [(p.name, p.location) for p in op.parameters] == [
        ("limit", ParameterLocation.QUERY),
        ("status", ParameterLocation.QUERY),
    ]
    limit = op.parameters[0]
    assert limit.type == PrimitiveType(PrimitiveKind.INTEGER, "int32")
    assert not limit.required
    assert limit.description == "How many items to return"
    assert op.parameters[1].type == ReferenceType("PetStatus")

    # Integer status keys as loaded from YAML
    assert op.response_status == "200"
    assert op.response == ArrayType(ReferenceType("Pet"))
    assert op.request_body is None


def test_request_body_prefers_json(petstore_operations):
    op = petstore_operations["createPet"]

    assert op.request_body == ReferenceType("NewPet")
    assert op.request_content_type == "application/json"
    assert op.request_body_required
    assert op.response_status == "201"
    assert op.response == ReferenceType("Pet")


def test_synthesized_operation_id(petstore_operations):
    op = petstore_operations["getPets"]

    assert op.path == "/pets/{petId}"
    assert op.parameters[0].name == "petId"
    assert op.parameters[0].location == ParameterLocation.PATH
    assert op.parameters[0].required


def test_response_without_content(petstore_operations):
    op = petstore_operations["deletePet"]

    assert op.deprecated
    assert op.response is None
    assert op.response_status == "204"


def test_unbound_path_parameter():
    errors = build_errors({"/pets/{id}": {"get": {"operationId": "getPets", "responses": {}}}})

    assert len(errors) == 1
    error = errors[0]
    assert isinstance(error, UnboundPathParameterError)
    assert error.operation == "getPets"
    assert error.placeholder == "id"


def test_path_parameters_are_always_required():
    ops = operations_of(
        {
            "/pets/{id}": {
                "get": {
                    "operationId": "getPet",
                    "parameters": [{"name": "id", "in": "path", "schema": {"type": "string"}}],
                }
            }
        }
    )

    assert ops["getPet"].parameters[0].required


def test_operation_parameters_override_path_parameters():
    ops = operations_of(
        {
            "/pets/{id}": {
                "parameters": [
                    {"name": "id", "in": "path", "required": True, "schema": {"type": "string"}},
                    {"name": "verbose", "in": "query", "schema": {"type": "boolean"}},
                ],
                "get": {
                    "operationId": "getPet",
                    "parameters": [
                        {"name": "fields", "in": "query", "schema": {"type": "string"}},
                        {"name": "id", "in": "path", "required": True, "schema": {"type": "integer"}},
                    ],
                },
            }
        }
    )

    params = ops["getPet"].parameters
    assert [p.name for p in params] == ["id", "verbose", "fields"]
    assert params[0].type == PrimitiveType(PrimitiveKind.INTEGER)


def test_same_name_different_location_kept():
    ops = operations_of(
        {
            "/items": {
                "get": {
                    "operationId": "listItems",
                    "parameters": [
                        {"name": "token", "in": "query", "schema": {"type": "string"}},
                        {"name": "token", "in": "header", "schema": {"type": "string"}},
                    ],
                }
            }
        }
    )

    assert [p.location for p in ops["listItems"].parameters] == [ParameterLocation.QUERY, ParameterLocation.HEADER]


def test_operation_id_collisions():
    ops = operations_of(
        {
            "/pets": {"get": {"responses": {}}},
            "/pets/{id}": {
                "parameters": [{"name": "id", "in": "path", "required": True, "schema": {"type": "string"}}],
                "get": {"responses": {}},
            },
            "/pets/{id}/": {
                "parameters": [{"name": "id", "in": "path", "required": True, "schema": {"type": "string"}}],
                "get": {"responses": {}},
            },
            "/": {"get": {"responses": {}}},
        }
    )

    assert list(ops) == ["getPets", "getPetsById", "getPetsById2", "getRoot"]


def test_explicit_ids_win_over_synthesized():
    ops = operations_of(
        {
            "/pets": {"get": {"responses": {}}},
            "/animals": {"get": {"operationId": "getPets", "responses": {}}},
        }
    )

    assert list(ops) == ["getPets2", "getPets"]
    assert ops["getPets"].path == "/animals"


def test_duplicate_operation_id():
    errors = build_errors(
        {
            "/a": {"get": {"operationId": "same"}},
            "/b": {"get": {"operationId": "same"}},
        }
    )

    assert len(errors) == 1
    assert isinstance(errors[0], DuplicateOperationIdError)
    assert errors[0].operation_id == "same"


def test_dangling_component_references():
    errors = build_errors(
        {
            "/a": {
                "post": {
                    "operationId": "createA",
                    "parameters": [{"$ref": "#/components/parameters/Missing"}],
                    "requestBody": {"$ref": "#/components/requestBodies/Gone"},
                    "responses": {"200": {"$ref": "#/components/responses/Nope"}},
                }
            }
        }
    )

    assert all(isinstance(e, DanglingReferenceError) for e in errors)
    assert [(e.kind, e.name) for e in errors] == [
        ("parameter", "Missing"),
        ("requestBody", "Gone"),
        ("response", "Nope"),
    ]


def test_parameter_content_schema():
    ops = operations_of(
        {
            "/search": {
                "get": {
                    "operationId": "search",
                    "parameters": [
                        {
                            "name": "filter",
                            "in": "query",
                            "content": {"application/json": {"schema": {"type": "object"}}},
                        }
                    ],
                }
            }
        }
    )

    assert ops["search"].parameters[0].type.fields == ()


def test_parameter_nullability():
    ops = operations_of(
        {
            "/search": {
                "get": {
                    "operationId": "search",
                    "parameters": [
                        {"name": "q", "in": "query", "required": True, "schema": {"type": "string", "nullable": True}},
                        {"name": "page", "in": "query", "schema": {"type": "integer"}},
                        {
                            "name": "filter",
                            "in": "query",
                            "content": {"application/json": {"schema": {"type": ["object", "null"]}}},
                        },
                    ],
                }
            }
        }
    )

    q, page, filter_ = ops["search"].parameters
    assert q.required and q.nullable
    assert not page.required and not page.nullable
    assert filter_.nullable


def test_path_item_ref_is_unsupported():
    errors = build_errors({"/a": {"$ref": "#/components/pathItems/A"}})

    assert len(errors) == 1
    assert "not supported" in errors[0].message


def test_unused_path_parameter_warns(caplog):
    with caplog.at_level("WARNING"):
        operations_of(
            {
                "/pets": {
                    "get": {
                        "operationId": "listPets",
                        "parameters": [{"name": "id", "in": "path", "schema": {"type": "string"}}],
                    }
                }
            }
        )

    assert "declares path parameter 'id'" in caplog.text


def test_choose_success_status():
    assert choose_success_status({"404": {}, "201": {}, "200": {}}) == "200"
    assert choose_success_status({"default": {}, "2XX": {}}) == "2XX"
    assert choose_success_status({200: {}}) == "200"
    assert choose_success_status({"404": {}}) is None


def test_choose_media_type():
    assert choose_media_type({"text/plain": {}, "application/json": {"schema": {}}}) == (
        "application/json",
        {"schema": {}},
    )
    assert choose_media_type({"text/plain": {"schema": {}}}) == ("text/plain", {"schema": {}})
    assert choose_media_type({}) is None


def test_path_placeholders():
    assert path_placeholders("/users/{userId}/pets/{petId}") == ["userId", "petId"]
    assert path_placeholders("/pets") == []
