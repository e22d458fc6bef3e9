"""``$ref`` resolution and ``allOf`` flattening.

Resolution walks the document from any node, following local JSON
pointers (``#/components/schemas/Pet``). Each ref string is resolved at
most once per resolver: a placeholder is stored in the memo before
recursing, so a cyclic chain stops at the placeholder instead of looping.
Once the target is fully resolved the placeholder slot is overwritten.
"""

import copy
import logging
from typing import Any

logger = logging.getLogger(__name__)

MAX_REF_DEPTH = 50

# Keys whose values are schemas, or lists/maps of schemas.
_SCHEMA_KEYS = ("items", "additionalProperties", "not")
_SCHEMA_LIST_KEYS = ("oneOf", "anyOf")
_SCHEMA_MAP_KEYS = ("properties",)

# Scalar keys a non-object allOf branch may contribute.
_SCALAR_KEYS = (
    "type", "format", "enum", "default", "example", "nullable", "items",
    "minimum", "maximum", "minLength", "maxLength", "pattern",
)


def _unescape(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def follow_ref(root: Any, ref: str) -> Any:
    """Return the node a local JSON pointer points at, or None."""
    if not ref.startswith("#/"):
        return None
    node = root
    for token in ref[2:].split("/"):
        token = _unescape(token)
        if isinstance(node, dict):
            if token not in node:
                return None
            node = node[token]
        elif isinstance(node, list):
            try:
                node = node[int(token)]
            except (ValueError, IndexError):
                return None
        else:
            return None
    return node


def _circular_placeholder(ref: str) -> dict[str, Any]:
    return {"type": "object", "description": f"Circular reference to {ref}"}


def _strip_refs(node: Any) -> Any:
    """Drop any remaining ``$ref`` keys below the depth ceiling."""
    if isinstance(node, list):
        return [_strip_refs(item) for item in node]
    if isinstance(node, dict):
        return {k: _strip_refs(v) for k, v in node.items() if k != "$ref"}
    return node


class RefResolver:
    """Memoized, cycle-safe ``$ref`` resolver bound to one document."""

    def __init__(self, root: dict[str, Any]):
        self.root = root
        self.warnings: list[str] = []
        self._cache: dict[str, Any] = {}

    def resolve(self, node: Any, depth: int = 0) -> Any:
        """Return a copy of ``node`` with every reachable ``$ref`` replaced."""
        if depth > MAX_REF_DEPTH:
            self._warn(f"Maximum reference depth ({MAX_REF_DEPTH}) exceeded; nested schema truncated")
            return _strip_refs(node)

        if isinstance(node, list):
            return [self.resolve(item, depth + 1) for item in node]
        if not isinstance(node, dict):
            return node

        ref = node.get("$ref")
        if isinstance(ref, str):
            return self._resolve_ref(ref, depth)

        return {key: self.resolve(value, depth + 1) for key, value in node.items()}

    def _resolve_ref(self, ref: str, depth: int) -> Any:
        if ref in self._cache:
            return copy.deepcopy(self._cache[ref])

        target = follow_ref(self.root, ref)
        if target is None:
            self._warn(f"Unresolvable reference: {ref}")
            return {}

        self._cache[ref] = _circular_placeholder(ref)
        resolved = self.resolve(target, depth + 1)
        self._cache[ref] = resolved
        return copy.deepcopy(resolved)

    def _warn(self, message: str) -> None:
        if message not in self.warnings:
            logger.debug(message)
            self.warnings.append(message)


def flatten_all_of(schema: Any) -> Any:
    """Recursively merge every ``allOf`` into a single schema.

    Branches are merged left to right: ``properties`` are shallow merged
    (later branches win) and ``required`` lists are concatenated.
    """
    if not isinstance(schema, dict):
        return schema

    result = {}
    for key, value in schema.items():
        if key == "allOf":
            continue
        if key in _SCHEMA_KEYS:
            result[key] = flatten_all_of(value)
        elif key in _SCHEMA_LIST_KEYS and isinstance(value, list):
            result[key] = [flatten_all_of(item) for item in value]
        elif key in _SCHEMA_MAP_KEYS and isinstance(value, dict):
            result[key] = {name: flatten_all_of(sub) for name, sub in value.items()}
        else:
            result[key] = value

    branches = schema.get("allOf")
    if not isinstance(branches, list):
        return result

    properties: dict[str, Any] = dict(result.get("properties", {}))
    required: list[str] = list(result.get("required", []))
    has_properties = bool(properties)

    for branch in branches:
        branch = flatten_all_of(branch)
        if not isinstance(branch, dict):
            continue
        if "properties" in branch:
            properties.update(branch["properties"])
            has_properties = True
        for name in branch.get("required", []):
            if name not in required:
                required.append(name)
        for key in _SCALAR_KEYS:
            if key in branch and key not in result:
                result[key] = branch[key]
        if "description" in branch and "description" not in result:
            result["description"] = branch["description"]

    if has_properties or "type" not in result:
        result["type"] = "object"
    if has_properties:
        result["properties"] = properties
    if required:
        result["required"] = required
    return result
