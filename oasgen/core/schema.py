"""Shallow schema inference from observed JSON payloads.

Only structural facts that are evident from a single sample are recorded:
which top-level keys were present and the primitive type of their values.
Nested objects and arrays are typed but not descended into.
"""

import re
from typing import Any, Dict, Mapping, Optional

_INTEGER_RE = re.compile(r"^-?\d+$")
_NUMBER_RE = re.compile(r"^-?(\d+\.\d*|\.\d+|\d+)([eE][-+]?\d+)?$")


def json_type(value: Any) -> Optional[str]:
    """Return the Swagger primitive type name of a decoded JSON value."""
    # bool is a subclass of int, check it first
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, (list, tuple)):
        return "array"
    return None


def text_type(raw: str) -> str:
    """Guess the primitive type of a query string or header value."""
    if raw.lower() in ("true", "false"):
        return "boolean"
    if _INTEGER_RE.match(raw):
        return "integer"
    if _NUMBER_RE.match(raw):
        return "number"
    return "string"


def _typed(value: Any) -> Dict[str, Any]:
    type_name = json_type(value)
    return {"type": type_name} if type_name else {}


def shallow_schema(body: Any) -> Dict[str, Any]:
    """
    Build a shallow schema for a decoded JSON body.

    Example:
        >>> shallow_schema({"a": 1, "b": [1, 2]})
        {'type': 'object', 'properties': {'a': {'type': 'integer'}, 'b': {'type': 'array'}}}
    """
    if isinstance(body, Mapping):
        return {
            "type": "object",
            "properties": {str(key): _typed(value) for key, value in body.items()},
        }
    if isinstance(body, (list, tuple)):
        schema: Dict[str, Any] = {"type": "array"}
        items: Dict[str, Any] = {}
        for element in body:
            if isinstance(element, Mapping):
                merge_schema(items, shallow_schema(element))
            elif not items:
                items = _typed(element)
        if items:
            schema["items"] = items
        return schema
    return _typed(body)


def merge_schema(existing: Dict[str, Any], observed: Mapping[str, Any]) -> bool:
    """
    Fold an observed shallow schema into a recorded one, in place.

    Property keys are unioned. A property that is already recorded keeps its
    recorded type, and a recorded top-level type is never changed.

    Only Swagger ``properties`` are unioned. Keys this module never writes,
    such as a hand-written ``fields`` list, are kept as they are and are not
    updated from observed bodies.

    Returns:
        True if ``existing`` was modified
    """
    changed = False

    if "type" not in existing and "type" in observed:
        existing["type"] = observed["type"]
        changed = True

    if existing.get("type") != observed.get("type"):
        return changed

    observed_properties = observed.get("properties")
    if isinstance(observed_properties, Mapping):
        properties = existing.setdefault("properties", {})
        for key, value in observed_properties.items():
            if key not in properties:
                properties[key] = dict(value)
                changed = True

    observed_items = observed.get("items")
    if isinstance(observed_items, Mapping):
        items = existing.get("items")
        if not isinstance(items, dict):
            existing["items"] = dict(observed_items)
            changed = True
        elif merge_schema(items, observed_items):
            changed = True

    return changed
