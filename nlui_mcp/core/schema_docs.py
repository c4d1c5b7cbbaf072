"""
Schema Documentation
====================

Turns a JSON Schema into the text embedded in tool descriptions, inlining
$ref references so the calling model sees one self-contained schema.
"""

from typing import Any, Dict, FrozenSet, Optional
import json

from nlui_mcp.config.logging import get_logger

logger = get_logger(__name__)

_REF_PREFIXES = ("#/definitions/", "#/$defs/")


def _definitions(schema: Dict[str, Any]) -> Dict[str, Any]:
    defs: Dict[str, Any] = {}
    defs.update(schema.get("definitions") or {})
    defs.update(schema.get("$defs") or {})
    return defs


def _ref_name(ref: str) -> Optional[str]:
    for prefix in _REF_PREFIXES:
        if ref.startswith(prefix):
            return ref[len(prefix):]
    return None


def resolve_schema_references(
    schema: Any, definitions: Dict[str, Any], visited: FrozenSet[str] = frozenset()
) -> Any:
    """
    Recursively inline $ref references.

    A reference already being expanded on the current path is kept as a
    $ref so recursive types terminate.
    """
    if isinstance(schema, list):
        return [resolve_schema_references(item, definitions, visited) for item in schema]
    if not isinstance(schema, dict):
        return schema

    ref = schema.get("$ref")
    if isinstance(ref, str):
        name = _ref_name(ref)
        if name is None or name not in definitions:
            return schema
        if name in visited:
            return {"$ref": ref}
        return resolve_schema_references(definitions[name], definitions, visited | {name})

    return {
        key: resolve_schema_references(value, definitions, visited)
        for key, value in schema.items()
        if key not in ("definitions", "$defs")
    }


def format_schema_as_documentation(type_name: str, schema: Optional[Dict[str, Any]]) -> str:
    """
    Format a JSON Schema as documentation text.

    Args:
        type_name: Name of the documented type
        schema: JSON Schema, possibly with definitions/$defs

    Returns:
        Pretty-printed JSON of the resolved schema
    """
    if not schema:
        return json.dumps({"error": f"Schema for {type_name} not found"}, indent=2)

    try:
        definitions = _definitions(schema)
        if definitions:
            return json.dumps(resolve_schema_references(schema, definitions), indent=2)
        return json.dumps(schema, indent=2)
    except (RecursionError, TypeError, ValueError) as e:
        logger.warning("Failed to resolve schema", type_name=type_name, error=str(e))
        return json.dumps(schema, indent=2, default=str)
