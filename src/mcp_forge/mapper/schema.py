"""Convert resolved OpenAPI schemas into MCP tool properties.

Every schema is first classified into a ``SchemaKind``. Polymorphic
schemas (``oneOf``/``anyOf`` without a declared type) and schemas with no
type information are ``UNRESOLVED`` and surface to tools as plain strings.
"""

from enum import Enum
from typing import Any

from .models import MCPProperty


class SchemaKind(str, Enum):
    SCALAR = "scalar"
    OBJECT = "object"
    ARRAY = "array"
    ENUM = "enum"
    UNRESOLVED = "unresolved"


# OpenAPI type -> MCP input type. integer has no counterpart in the tool schema.
_TYPE_MAP: dict[str, str] = {
    "string": "string",
    "integer": "number",
    "number": "number",
    "boolean": "boolean",
    "array": "array",
    "object": "object",
}


def declared_type(schema: dict[str, Any]) -> str | None:
    """Return the declared OpenAPI type, picking the first non-null of a 3.1 type list."""
    t = schema.get("type")
    if isinstance(t, list):
        t = next((x for x in t if x != "null"), None)
    return t if isinstance(t, str) and t in _TYPE_MAP else None


def classify_schema(schema: dict[str, Any]) -> SchemaKind:
    t = declared_type(schema)
    if isinstance(schema.get("enum"), list) and schema["enum"]:
        return SchemaKind.ENUM
    if t == "object" or (t is None and "properties" in schema):
        return SchemaKind.OBJECT
    if t == "array" or (t is None and "items" in schema):
        return SchemaKind.ARRAY
    if t is not None:
        return SchemaKind.SCALAR
    return SchemaKind.UNRESOLVED


def map_schema_type(schema: dict[str, Any]) -> str:
    kind = classify_schema(schema)
    if kind is SchemaKind.OBJECT:
        return "object"
    if kind is SchemaKind.ARRAY:
        return "array"
    if kind is SchemaKind.UNRESOLVED:
        return "string"
    return _TYPE_MAP[declared_type(schema) or "string"]


def schema_to_property(schema: dict[str, Any], description: str | None = None) -> MCPProperty:
    """Build an MCPProperty from a resolved schema."""
    kind = classify_schema(schema)
    prop = MCPProperty(type=map_schema_type(schema))

    desc = description or schema.get("description")
    if desc:
        prop.description = str(desc)
    if kind is SchemaKind.ENUM:
        prop.enum = list(schema["enum"])
    if schema.get("default") is not None:
        prop.default = schema["default"]
    if isinstance(schema.get("minimum"), (int, float)):
        prop.minimum = schema["minimum"]
    if isinstance(schema.get("maximum"), (int, float)):
        prop.maximum = schema["maximum"]
    if isinstance(schema.get("format"), str):
        prop.format = schema["format"]

    if kind is SchemaKind.ARRAY and isinstance(schema.get("items"), dict):
        prop.items = schema_to_property(schema["items"])

    if kind is SchemaKind.OBJECT and isinstance(schema.get("properties"), dict):
        prop.properties = {
            str(name): schema_to_property(sub if isinstance(sub, dict) else {})
            for name, sub in schema["properties"].items()
        }
        if schema.get("required"):
            prop.required = list(schema["required"])

    return prop
