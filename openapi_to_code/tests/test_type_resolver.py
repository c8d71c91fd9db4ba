"""
Tests for the type resolver case analysis.
"""

from __future__ import annotations

from unittest import TestCase

from openapi_to_code.pipeline.analyzer.ir_nodes import (
    ArrayType,
    EnumType,
    ObjectType,
    PrimitiveKind,
    PrimitiveType,
    ReferenceType,
    StringFormatKind,
    StringFormatType,
)
from openapi_to_code.pipeline.analyzer.reference_graph import ReferenceGraph
from openapi_to_code.pipeline.analyzer.type_resolver import TypeResolver, is_nullable, schema_ref_name
from openapi_to_code.pipeline.errors import DanglingReferenceError, UnsupportedSchemaShapeError


class TestTypeResolver(TestCase):
    def setUp(self):
        self.graph = ReferenceGraph()
        self.resolver = TypeResolver(self.graph)
        self.graph.bind(lambda name, node: self.resolver.resolve(node, f"#/components/schemas/{name}"))

    def declare(self, **schemas):
        for name, node in schemas.items():
            self.graph.declare(name, node)

    def resolve(self, node):
        return self.resolver.resolve(node, "#/test")

    def test_primitives(self):
        self.assertEqual(self.resolve({"type": "string"}), PrimitiveType(PrimitiveKind.STRING))
        self.assertEqual(self.resolve({"type": "boolean"}), PrimitiveType(PrimitiveKind.BOOLEAN))
        self.assertEqual(
            self.resolve({"type": "integer", "format": "int64"}),
            PrimitiveType(PrimitiveKind.INTEGER, "int64"),
        )
        self.assertEqual(
            self.resolve({"type": "number", "format": "double"}),
            PrimitiveType(PrimitiveKind.NUMBER, "double"),
        )

    def test_string_formats(self):
        self.assertEqual(
            self.resolve({"type": "string", "format": "date-time"}),
            StringFormatType(StringFormatKind.DATE_TIME),
        )
        self.assertEqual(self.resolve({"type": "string", "format": "uuid"}), StringFormatType(StringFormatKind.UUID))
        # Unknown formats stay on the plain string
        self.assertEqual(
            self.resolve({"type": "string", "format": "hostname"}),
            PrimitiveType(PrimitiveKind.STRING, "hostname"),
        )

    def test_untyped_falls_back_to_unknown(self):
        self.assertEqual(self.resolve({}), PrimitiveType(PrimitiveKind.UNKNOWN))
        self.assertEqual(self.resolve(None), PrimitiveType(PrimitiveKind.UNKNOWN))
        self.assertEqual(self.resolve({"type": "file"}), PrimitiveType(PrimitiveKind.UNKNOWN))
        self.assertEqual(self.resolver.errors, [])

    def test_array_without_items(self):
        self.assertEqual(self.resolve({"type": "array"}), ArrayType(PrimitiveType(PrimitiveKind.UNKNOWN)))

    def test_object_fields_keep_order_and_flags(self):
        result = self.resolve(
            {
                "type": "object",
                "required": ["b"],
                "properties": {
                    "b": {"type": "string", "nullable": True},
                    "a": {"type": "integer"},
                },
            }
        )

        self.assertIsInstance(result, ObjectType)
        self.assertEqual([f.name for f in result.fields], ["b", "a"])
        b, a = result.fields
        self.assertTrue(b.required)
        self.assertTrue(b.nullable)
        self.assertFalse(a.required)
        self.assertFalse(a.nullable)

    def test_properties_without_type_is_object(self):
        result = self.resolve({"properties": {"x": {"type": "string"}}})
        self.assertIsInstance(result, ObjectType)
        self.assertEqual(result.field_named("x").type, PrimitiveType(PrimitiveKind.STRING))

    def test_free_form_object(self):
        self.assertEqual(self.resolve({"type": "object", "additionalProperties": True}), ObjectType())

    def test_enum(self):
        result = self.resolve({"type": "string", "enum": ["b", "a", "b", None]})
        self.assertEqual(result, EnumType(("b", "a")))

    def test_non_string_enum_literals(self):
        result = self.resolve({"type": "integer", "enum": [1, 2, True]})
        self.assertEqual(result.variants, ("1", "2", "true"))

    def test_reference(self):
        self.declare(Pet={"type": "object"})
        self.assertEqual(self.resolve({"$ref": "#/components/schemas/Pet"}), ReferenceType("Pet"))
        self.assertEqual(self.graph.lookup("Pet"), ObjectType())

    def test_dangling_reference_is_recorded(self):
        result = self.resolver.resolve({"$ref": "#/components/schemas/Missing"}, "#/components/schemas/Pet/properties/x")

        self.assertEqual(result, ReferenceType("Missing"))
        self.assertEqual(len(self.resolver.errors), 1)
        error = self.resolver.errors[0]
        self.assertIsInstance(error, DanglingReferenceError)
        self.assertEqual(error.name, "Missing")
        self.assertEqual(error.schema_path, "#/components/schemas/Pet/properties/x")

    def test_external_reference_is_unsupported(self):
        result = self.resolve({"$ref": "other.yaml#/Pet"})

        self.assertEqual(result, PrimitiveType(PrimitiveKind.UNKNOWN))
        self.assertIsInstance(self.resolver.errors[0], UnsupportedSchemaShapeError)

    def test_one_of_reduces_to_first_branch(self):
        result = self.resolve({"oneOf": [{"type": "string"}, {"type": "integer"}]})

        self.assertEqual(result.kind, PrimitiveKind.STRING)
        self.assertEqual(result.alternatives, (PrimitiveType(PrimitiveKind.INTEGER),))

    def test_any_of_null_branch_is_dropped(self):
        node = {"anyOf": [{"type": "null"}, {"type": "string"}]}

        self.assertEqual(self.resolve(node), PrimitiveType(PrimitiveKind.STRING))
        self.assertTrue(is_nullable(node))

    def test_all_of_merges_fields(self):
        self.declare(
            Base={
                "type": "object",
                "required": ["id"],
                "properties": {"id": {"type": "integer"}, "tag": {"type": "string", "nullable": True}},
            }
        )
        result = self.resolve(
            {
                "allOf": [
                    {"$ref": "#/components/schemas/Base"},
                    {"type": "object", "required": ["tag"], "properties": {"tag": {"type": "string"}}},
                    {"description": "annotation only"},
                ]
            }
        )

        self.assertIsInstance(result, ObjectType)
        self.assertEqual([f.name for f in result.fields], ["id", "tag"])
        self.assertTrue(result.field_named("id").required)
        tag = result.field_named("tag")
        self.assertTrue(tag.required)
        self.assertFalse(tag.nullable)
        self.assertEqual(self.resolver.errors, [])

    def test_all_of_non_object_branch_is_unsupported(self):
        self.resolve({"allOf": [{"type": "string"}]})

        self.assertEqual(len(self.resolver.errors), 1)
        self.assertIsInstance(self.resolver.errors[0], UnsupportedSchemaShapeError)

    def test_all_of_cycle_is_unsupported(self):
        self.declare(
            A={"allOf": [{"$ref": "#/components/schemas/B"}, {"properties": {"a": {"type": "string"}}}]},
            B={"allOf": [{"$ref": "#/components/schemas/A"}, {"properties": {"b": {"type": "string"}}}]},
        )

        self.graph.resolve("A")

        self.assertEqual(len(self.resolver.errors), 1)
        self.assertIn("allOf cycle through 'A'", self.resolver.errors[0].message)

    def test_all_of_self_cycle_is_unsupported(self):
        self.declare(Loop={"allOf": [{"$ref": "#/components/schemas/Loop"}, {"properties": {"x": {"type": "string"}}}]})

        self.graph.resolve("Loop")

        self.assertEqual(len(self.resolver.errors), 1)
        self.assertIn("allOf cycle", self.resolver.errors[0].message)

    def test_all_of_through_in_progress_property_reference(self):
        self.declare(
            Base={"type": "object", "properties": {"child": {"$ref": "#/components/schemas/Derived"}}},
            Derived={"allOf": [{"$ref": "#/components/schemas/Base"}, {"properties": {"extra": {"type": "integer"}}}]},
        )

        self.graph.resolve("Base")

        self.assertEqual(self.resolver.errors, [])
        derived = self.graph.lookup("Derived")
        self.assertEqual([f.name for f in derived.fields], ["child", "extra"])
        self.assertEqual(derived.field_named("child").type, ReferenceType("Derived"))

    def test_all_of_through_alias_definition(self):
        self.declare(
            Base={"type": "object", "properties": {"id": {"type": "integer"}}},
            Alias={"description": "Same as Base", "allOf": [{"$ref": "#/components/schemas/Base"}]},
        )

        result = self.resolve(
            {"allOf": [{"$ref": "#/components/schemas/Alias"}, {"properties": {"name": {"type": "string"}}}]}
        )

        self.assertEqual(self.graph.lookup("Alias"), ReferenceType("Base"))
        self.assertEqual([f.name for f in result.fields], ["id", "name"])
        self.assertEqual(self.resolver.errors, [])

    def test_single_reference_all_of_stays_a_reference(self):
        self.declare(Pet={"type": "object", "properties": {"id": {"type": "integer"}}})
        node = {"nullable": True, "description": "Favourite pet", "allOf": [{"$ref": "#/components/schemas/Pet"}]}

        self.assertEqual(self.resolve(node), ReferenceType("Pet"))
        self.assertTrue(is_nullable(node))
        self.assertEqual(self.resolver.errors, [])

    def test_type_list_with_null(self):
        node = {"type": ["string", "null"]}

        self.assertEqual(self.resolve(node), PrimitiveType(PrimitiveKind.STRING))
        self.assertTrue(is_nullable(node))

    def test_field_raw_keeps_extensions(self):
        node = {"type": "string", "example": "Rex", "maxLength": 10, "x-go-name": "Label"}
        field_desc = self.resolver.resolve_field("name", node, True, "#/test/name")

        self.assertEqual(field_desc.raw, node)
        self.assertIsNot(field_desc.raw, node)


def test_schema_ref_name():
    assert schema_ref_name("#/components/schemas/Pet") == "Pet"
    assert schema_ref_name("#/components/schemas/a~1b") == "a/b"
    assert schema_ref_name("#/components/parameters/Limit") is None
    assert schema_ref_name("#/components/schemas/Pet/properties/id") is None
