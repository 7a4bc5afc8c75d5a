"""Schema inference from example JSON values.

Schemas are built as a small tagged-variant tree (object, array, scalar,
reference) and rendered to plain OpenAPI mappings at the end. Nested
objects and array items are not inlined: each one is stored in a
SchemaRegistry under a name derived from its property path and referenced
with ``$ref``. The registry is passed explicitly through the recursion.
"""

import math
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

MAX_DEPTH = 100
REF_PREFIX = "#/components/schemas/"


class ScalarSchema(BaseModel):
    kind: Literal["scalar"] = "scalar"
    type: str
    example: Any = None
    nullable: bool = False

    def to_openapi(self) -> dict:
        node: dict[str, Any] = {"type": self.type}
        if self.nullable:
            node["nullable"] = True
        if self.example is not None:
            node["example"] = self.example
        return node


class RefSchema(BaseModel):
    kind: Literal["ref"] = "ref"
    name: str

    def to_openapi(self) -> dict:
        return {"$ref": f"{REF_PREFIX}{self.name}"}


class ArraySchema(BaseModel):
    kind: Literal["array"] = "array"
    items: "SchemaNode"

    def to_openapi(self) -> dict:
        return {"type": "array", "items": self.items.to_openapi()}


class ObjectSchema(BaseModel):
    kind: Literal["object"] = "object"
    properties: dict[str, "SchemaNode"] = Field(default_factory=dict)

    def to_openapi(self) -> dict:
        return {
            "type": "object",
            "properties": {key: prop.to_openapi() for key, prop in self.properties.items()},
        }


SchemaNode = Annotated[
    Union[ScalarSchema, RefSchema, ArraySchema, ObjectSchema],
    Field(discriminator="kind"),
]

ArraySchema.model_rebuild()
ObjectSchema.model_rebuild()


class SchemaRegistry:
    """Flat name -> schema map shared by one generation call.

    Names are claimed before the schema they stand for is inferred, so a
    nested schema's children are named after the final, unique parent name.
    """

    def __init__(self):
        self._schemas: dict[str, SchemaNode] = {}
        self._claimed: set[str] = set()

    def claim(self, name: str) -> str:
        """Reserve ``name`` (or ``name2``, ``name3``... if taken) and return it."""
        unique = name
        counter = 2
        while unique in self._claimed:
            unique = f"{name}{counter}"
            counter += 1
        self._claimed.add(unique)
        return unique

    def define(self, name: str, schema: SchemaNode) -> None:
        if name not in self._claimed:
            name = self.claim(name)
        self._schemas[name] = schema

    def get(self, name: str) -> SchemaNode | None:
        return self._schemas.get(name)

    def names(self) -> list[str]:
        return list(self._schemas)

    def __len__(self) -> int:
        return len(self._schemas)

    def to_openapi(self) -> dict[str, dict]:
        return {name: schema.to_openapi() for name, schema in self._schemas.items()}


def openapi_type(value: Any) -> str:
    """Map a Python value to its OpenAPI type name."""
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number" if math.isfinite(value) else "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return "string"


def infer_schema(
    value: Any,
    prefix: str,
    registry: SchemaRegistry,
    depth: int = 0,
    max_depth: int = MAX_DEPTH,
) -> SchemaNode:
    """Infer a schema for ``value``, registering nested schemas as needed.

    Only the first element of a non-empty list is inspected. Containers
    nested deeper than ``max_depth`` become empty object schemas.
    """
    if isinstance(value, (dict, list)) and depth > max_depth:
        return ObjectSchema()

    if value is None:
        # null says nothing about the real type
        return ScalarSchema(type="string", nullable=True)

    if isinstance(value, list):
        if not value:
            return ArraySchema(items=ObjectSchema())
        return ArraySchema(items=_register(value[0], f"{prefix}Item", registry, depth, max_depth))

    if isinstance(value, dict):
        properties: dict[str, SchemaNode] = {}
        for key, item in value.items():
            key = str(key)
            name = f"{prefix}{capitalize(key)}"
            if isinstance(item, dict):
                properties[key] = _register(item, name, registry, depth, max_depth)
            elif isinstance(item, list) and item:
                properties[key] = ArraySchema(
                    items=_register(item[0], f"{name}Item", registry, depth, max_depth)
                )
            else:
                properties[key] = infer_schema(item, name, registry, depth + 1, max_depth)
        return ObjectSchema(properties=properties)

    return ScalarSchema(type=openapi_type(value), example=value)


def capitalize(text: str) -> str:
    """Upper-case the first character only."""
    return text[:1].upper() + text[1:]


def _register(value: Any, name: str, registry: SchemaRegistry, depth: int, max_depth: int) -> RefSchema:
    unique = registry.claim(name)
    registry.define(unique, infer_schema(value, unique, registry, depth + 1, max_depth))
    return RefSchema(name=unique)
