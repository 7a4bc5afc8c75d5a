import pytest

from swaggler.generator.schema import (
    ArraySchema,
    ObjectSchema,
    RefSchema,
    ScalarSchema,
    SchemaRegistry,
    infer_schema,
    openapi_type,
)


def _count_registrations(value) -> int:
    """Number of schemas infer_schema should register for ``value``."""
    if isinstance(value, list):
        return 1 + _count_registrations(value[0]) if value else 0
    if isinstance(value, dict):
        total = 0
        for item in value.values():
            if isinstance(item, dict):
                total += 1 + _count_registrations(item)
            elif isinstance(item, list) and item:
                total += 1 + _count_registrations(item[0])
        return total
    return 0


class TestOpenapiType:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (1, "integer"),
            (1.5, "number"),
            (True, "boolean"),
            (False, "boolean"),
            ("x", "string"),
            (float("inf"), "string"),
            ([1], "array"),
            ({}, "object"),
        ],
    )
    def test_mapping(self, value, expected):
        assert openapi_type(value) == expected


class TestInferScalars:
    def test_null_is_nullable_string(self):
        schema = infer_schema(None, "P", SchemaRegistry())
        assert schema.to_openapi() == {"type": "string", "nullable": True}

    @pytest.mark.parametrize(
        "value,expected_type",
        [(5, "integer"), (2.5, "number"), (True, "boolean"), ("hi", "string")],
    )
    def test_scalar_carries_example(self, value, expected_type):
        schema = infer_schema(value, "P", SchemaRegistry())
        assert isinstance(schema, ScalarSchema)
        assert schema.to_openapi() == {"type": expected_type, "example": value}


class TestInferArrays:
    def test_empty_array_is_inline(self):
        registry = SchemaRegistry()
        schema = infer_schema([], "P", registry)
        assert schema.to_openapi() == {"type": "array", "items": {"type": "object", "properties": {}}}
        assert len(registry) == 0

    def test_first_item_is_registered(self):
        registry = SchemaRegistry()
        schema = infer_schema([{"id": 1}, {"other": "ignored"}], "P", registry)
        assert isinstance(schema, ArraySchema)
        assert schema.to_openapi() == {"type": "array", "items": {"$ref": "#/components/schemas/PItem"}}
        assert registry.to_openapi() == {
            "PItem": {"type": "object", "properties": {"id": {"type": "integer", "example": 1}}}
        }

    def test_scalar_items_are_registered(self):
        registry = SchemaRegistry()
        infer_schema(["a", "b"], "Tags", registry)
        assert registry.to_openapi() == {"TagsItem": {"type": "string", "example": "a"}}


class TestInferObjects:
    def test_properties(self):
        registry = SchemaRegistry()
        schema = infer_schema(
            {"user": {"name": "a"}, "tags": ["x"], "empty": [], "none": None, "count": 3},
            "P",
            registry,
        )
        assert isinstance(schema, ObjectSchema)
        assert isinstance(schema.properties["user"], RefSchema)
        assert schema.to_openapi() == {
            "type": "object",
            "properties": {
                "user": {"$ref": "#/components/schemas/PUser"},
                "tags": {"type": "array", "items": {"$ref": "#/components/schemas/PTagsItem"}},
                "empty": {"type": "array", "items": {"type": "object", "properties": {}}},
                "none": {"type": "string", "nullable": True},
                "count": {"type": "integer", "example": 3},
            },
        }
        assert registry.names() == ["PUser", "PTagsItem"]
        assert registry.get("PUser").to_openapi() == {
            "type": "object",
            "properties": {"name": {"type": "string", "example": "a"}},
        }

    def test_no_required_list(self):
        schema = infer_schema({"a": 1}, "P", SchemaRegistry()).to_openapi()
        assert "required" not in schema

    def test_nested_names_follow_property_path(self):
        registry = SchemaRegistry()
        infer_schema({"order": {"customer": {"address": {"city": "x"}}}}, "Get", registry)
        assert registry.names() == ["GetOrderCustomerAddress", "GetOrderCustomer", "GetOrder"]


class TestRegistryNaming:
    def test_case_collision_gets_suffix(self):
        registry = SchemaRegistry()
        schema = infer_schema({"foo": {"a": 1}, "Foo": {"b": 2}}, "P", registry).to_openapi()
        assert schema["properties"]["foo"] == {"$ref": "#/components/schemas/PFoo"}
        assert schema["properties"]["Foo"] == {"$ref": "#/components/schemas/PFoo2"}
        assert set(registry.to_openapi()["PFoo2"]["properties"]) == {"b"}

    def test_children_named_after_unique_parent(self):
        registry = SchemaRegistry()
        infer_schema({"a": {"b": {"c": 1}}, "A": {"b": {"c": 2}}}, "P", registry)
        assert sorted(registry.names()) == ["PA", "PA2", "PA2B", "PAB"]

    def test_claimed_names_are_avoided(self):
        registry = SchemaRegistry()
        assert registry.claim("XRequest") == "XRequest"
        schema = infer_schema({"request": {"id": 1}}, "X", registry).to_openapi()
        assert schema["properties"]["request"] == {"$ref": "#/components/schemas/XRequest2"}

    @pytest.mark.parametrize(
        "value",
        [
            {"a": {"b": {"c": 1}}, "A": {"b": {"c": 2}}, "aB": {"x": 1}, "items": [[{"k": 1}]], "itemsItem": {"z": 1}},
            [[[[{"a": [{"a": {"a": 1}}]}]]]],
            {"x": [{"x": [{"x": [{"x": {}}]}]}], "xItem": {"xItem": {"x": 1}}, "X": [1]},
        ],
    )
    def test_every_registration_gets_its_own_name(self, value):
        registry = SchemaRegistry()
        infer_schema(value, "P", registry)
        assert len(registry) == _count_registrations(value)
        assert len(set(registry.names())) == len(registry)


class TestDepthCap:
    @staticmethod
    def _nested(levels: int) -> dict:
        value: dict = {}
        for _ in range(levels):
            value = {"a": value}
        return value

    def test_cap_returns_empty_object(self):
        registry = SchemaRegistry()
        infer_schema(self._nested(20), "P", registry, max_depth=5)
        assert len(registry) == 6
        assert registry.to_openapi()["P" + "A" * 6] == {"type": "object", "properties": {}}

    def test_default_cap_allows_reasonable_nesting(self):
        registry = SchemaRegistry()
        infer_schema(self._nested(20), "P", registry)
        assert len(registry) == 20

    def test_pathological_nesting_terminates(self):
        registry = SchemaRegistry()
        infer_schema(self._nested(500), "P", registry)
        assert len(registry) == 101
