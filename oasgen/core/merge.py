"""Deep merge and key ordering helpers for specification documents."""

import copy
from typing import Any, Dict, Mapping, Optional


def deep_merge(base: Optional[Mapping[str, Any]], *sources: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Merge mappings field by field, later sources taking precedence.

    Mappings are merged key by key recursively. Any other value, lists
    included, is replaced wholesale by the value from the source with higher
    precedence. Neither ``base`` nor the sources are modified.

    Args:
        base: Lowest-precedence document (None is treated as empty)
        *sources: Documents applied in order of increasing precedence

    Returns:
        A new merged document

    Example:
        >>> deep_merge({"a": {"x": 1, "y": [1]}}, {"a": {"y": [2]}})
        {'a': {'x': 1, 'y': [2]}}
    """
    result: Dict[str, Any] = copy.deepcopy(dict(base)) if base else {}
    for source in sources:
        if source:
            _merge_into(result, source)
    return result


def _merge_into(target: Dict[str, Any], source: Mapping[str, Any]) -> None:
    for key, value in source.items():
        current = target.get(key)
        if isinstance(value, Mapping) and isinstance(current, dict):
            _merge_into(current, value)
        elif isinstance(value, Mapping):
            target[key] = copy.deepcopy(dict(value))
        else:
            target[key] = copy.deepcopy(value)


def sort_object(value: Any) -> Any:
    """
    Return a copy of ``value`` with every mapping's keys sorted recursively.

    List order is preserved; lists are walked so mappings nested inside them
    are sorted too. Used to get stable, diff-friendly JSON output.
    """
    if isinstance(value, Mapping):
        return {key: sort_object(value[key]) for key in sorted(value, key=str)}
    if isinstance(value, (list, tuple)):
        return [sort_object(item) for item in value]
    return value
