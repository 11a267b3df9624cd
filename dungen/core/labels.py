"""
Label Algebra
=============

Labels are the schema-free data attached to nodes and edges. A label is a
plain ``dict`` whose values are drawn from a small closed algebra:

    Value := dict[str, Value] | list[Value] | str | int | float | bool | None

Every operation here is total over that algebra, so structural matching,
deep merging and placeholder substitution never need reflection.

Usage:
    >>> is_subset({'type': 'path'}, {'type': 'path', 'cost': 2})
    True
    >>> deep_merge({'a': {'b': 0, 'c': 2}}, {'a': {'b': 1}})
    {'a': {'b': 1, 'c': 2}}
    >>> map_strings({'src': '$k', 'tags': ['$k']}, lambda s: 'node_0' if s == '$k' else s)
    {'src': 'node_0', 'tags': ['node_0']}
"""

import copy
from typing import Any, Callable, Dict, List, Mapping, Union

Scalar = Union[str, int, float, bool, None]
Value = Union[Dict[str, Any], List[Any], Scalar]
Label = Dict[str, Any]


def is_mapping(value: Any) -> bool:
    return isinstance(value, Mapping)


def _same_value(a: Value, b: Value) -> bool:
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    if is_mapping(a) and is_mapping(b):
        return a.keys() == b.keys() and all(_same_value(a[k], b[k]) for k in a)
    if isinstance(a, list) and isinstance(b, list):
        return len(a) == len(b) and all(_same_value(x, y) for x, y in zip(a, b))
    return a == b


def is_subset(pattern: Value, value: Value) -> bool:
    """
    Check whether ``pattern`` is a structural subset of ``value``.

    Mapping patterns require every key to be present in ``value`` with a
    recursively matching value; keys in ``value`` that the pattern does not
    mention are ignored. Any other pattern compares by value, with booleans
    kept apart from numbers (``True`` does not match ``1``).

    Args:
        pattern: Structural pattern (usually a partial label)
        value: Value to test

    Returns:
        True if every part of the pattern is found in the value
    """
    if not is_mapping(pattern):
        return _same_value(pattern, value)
    if not is_mapping(value):
        return False
    for key, sub_pattern in pattern.items():
        if key not in value:
            return False
        if not is_subset(sub_pattern, value[key]):
            return False
    return True


def deep_merge(target: Label, source: Mapping[str, Any]) -> Label:
    """
    Merge ``source`` into ``target`` in place and return ``target``.

    Mapping values are merged recursively into the matching mapping of
    ``target`` (created when missing or not a mapping). All other values
    overwrite the key. Values taken from ``source`` are deep-copied so the
    merged label never shares structure with the update spec.
    """
    for key, new_value in source.items():
        if is_mapping(new_value):
            current = target.get(key)
            if not is_mapping(current):
                current = {}
                target[key] = current
            deep_merge(current, new_value)
        else:
            target[key] = copy.deepcopy(new_value)
    return target


def map_strings(value: Value, fn: Callable[[str], str]) -> Value:
    """
    Return a copy of ``value`` with every string scalar replaced by ``fn(s)``.

    Mappings and sequences are traversed recursively; mapping keys are left
    untouched. Non-string scalars are returned as-is.
    """
    if isinstance(value, str):
        return fn(value)
    if is_mapping(value):
        return {key: map_strings(item, fn) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [map_strings(item, fn) for item in value]
    return value


def copy_label(label: Any) -> Label:
    """Deep-copy a label, treating ``None`` as an empty label."""
    if not label:
        return {}
    return copy.deepcopy(dict(label))
