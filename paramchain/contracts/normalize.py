"""
Params normalization - one way to read any input collection.

Operations accept their params in two shapes:
- a mapping: {"name": "Ann", "age": 37}
- a keyword list: [("name", "Ann"), ("age", 37)]

Everything that looks up, tests or merges params goes through here so both
shapes behave the same. Keys are unique; in a keyword list the first pair
with a given key wins.
"""

from collections.abc import Mapping
from typing import Any, Dict, Hashable, List, Tuple, Union

Params = Union[Mapping, List[Tuple[Hashable, Any]]]

_MISSING = object()


def is_keyword_list(value: Any) -> bool:
    """True for [] or a list whose first element is a (str, value) pair."""
    if not isinstance(value, list):
        return False
    if not value:
        return True
    head = value[0]
    return isinstance(head, tuple) and len(head) == 2 and isinstance(head[0], str)


def is_params(value: Any) -> bool:
    """True if value is an input collection (mapping or keyword list)."""
    return isinstance(value, Mapping) or is_keyword_list(value)


def _lookup(params: Any, name: Hashable, default: Any) -> Any:
    if isinstance(params, Mapping):
        return params.get(name, default)
    if isinstance(params, list):
        for item in params:
            if isinstance(item, tuple) and len(item) == 2 and item[0] == name:
                return item[1]
    return default


def get_param(params: Any, name: Hashable) -> Any:
    """
    Return the value stored under name, or None if it's absent.

    Examples:
        >>> get_param({"a": 1, "b": 2}, "a")
        1
        >>> get_param([("a", 1), ("b", 2)], "b")
        2
        >>> get_param({"a": 1}, "c") is None
        True
    """
    return _lookup(params, name, None)


def param_present(params: Any, name: Hashable) -> bool:
    """
    Check whether name was supplied at all.

    Presence is about the key, not the value: {"b": None} has "b".

    Examples:
        >>> param_present({"a": 1, "b": None}, "b")
        True
        >>> param_present([("a", 1)], "c")
        False
    """
    return _lookup(params, name, _MISSING) is not _MISSING


def to_params_map(params: Any) -> Dict[Hashable, Any]:
    """
    Copy any input collection into a plain dict.

    None becomes {}. For keyword lists the first occurrence of a key is kept.
    """
    if params is None:
        return {}
    if isinstance(params, Mapping):
        return dict(params)
    if isinstance(params, list):
        result: Dict[Hashable, Any] = {}
        for item in params:
            if not (isinstance(item, tuple) and len(item) == 2):
                raise TypeError(f"keyword list items must be (key, value) pairs, got {item!r}")
            key, value = item
            if key not in result:
                result[key] = value
        return result
    raise TypeError(f"params must be a mapping or a keyword list, got {type(params).__name__}")


def merge_params(params: Any, additional_params: Any) -> Dict[Hashable, Any]:
    """
    Merge additional params over params; additional params win on conflict.

    Both sides may be mappings or keyword lists. The result is always a dict.

    Examples:
        >>> merge_params({"x": 0, "y": 2}, {"x": 1})
        {'x': 1, 'y': 2}
        >>> merge_params([("x", 0)], [("z", 3)])
        {'x': 0, 'z': 3}
    """
    merged = to_params_map(params)
    merged.update(to_params_map(additional_params))
    return merged
