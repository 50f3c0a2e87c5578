"""
Key-path resolution over message dictionaries.

A message dictionary is a tree keyed by string segments whose leaves are
strings. Keys are looked up in two phases:

1. Exact membership in the dictionary's own keys. This keeps dictionaries
   authored as flat maps (``{"common.ok": "OK"}``) working, and it always
   wins over phase 2.
2. If the key contains a ``.``, walk the tree segment by segment.

Only string leaves are ever returned; landing on a sub-tree, a missing
segment or a non-mapping intermediate value resolves to None.
"""

from collections.abc import Mapping
from typing import Any

PATH_SEPARATOR = "."

# locale messages: nested str -> (str | MessageTree)
MessageTree = dict[str, Any]


def get_by_path(obj: Mapping[str, Any], path: str) -> str | None:
    """Walk ``obj`` along a dotted ``path`` and return the string leaf.

    Example:
        >>> get_by_path({"common": {"buttons": {"submit": "Submit"}}}, "common.buttons.submit")
        'Submit'
        >>> get_by_path({"a": {"b": "v"}}, "a") is None
        True
    """
    current: Any = obj
    for segment in path.split(PATH_SEPARATOR):
        if not isinstance(current, Mapping):
            return None
        current = current.get(segment)

    if isinstance(current, str):
        return current
    return None


def has_path(obj: Mapping[str, Any], path: str) -> bool:
    """True when ``path`` resolves to a string leaf."""
    return get_by_path(obj, path) is not None


def find_message(messages: Mapping[str, Any], key: str) -> str | None:
    """Resolve ``key`` in one locale's dictionary (exact key first, then path)."""
    if key in messages:
        value = messages[key]
        if isinstance(value, str):
            return value

    if PATH_SEPARATOR in key:
        return get_by_path(messages, key)

    return None


def flatten_messages(obj: Mapping[str, Any], prefix: str = "") -> dict[str, str]:
    """Flatten a nested dictionary into dotted keys.

    Non-string, non-mapping leaves are dropped.

    Example:
        >>> flatten_messages({"a": {"b": "value"}, "c": "C"})
        {'a.b': 'value', 'c': 'C'}
    """
    result: dict[str, str] = {}
    for key, value in obj.items():
        full_key = f"{prefix}{PATH_SEPARATOR}{key}" if prefix else key
        if isinstance(value, str):
            result[full_key] = value
        elif isinstance(value, Mapping):
            result.update(flatten_messages(value, full_key))
    return result


def merge_messages(base: Mapping[str, Any], fragment: Mapping[str, Any]) -> MessageTree:
    """Additive recursive merge. Returns a new dictionary.

    Sub-trees present on both sides are merged; any other key from
    ``fragment`` overwrites the one in ``base``. Nothing is ever deleted.
    """
    result = dict(base)
    for key, value in fragment.items():
        current = result.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            result[key] = merge_messages(current, value)
        elif isinstance(value, Mapping):
            result[key] = merge_messages({}, value)
        else:
            result[key] = value
    return result
