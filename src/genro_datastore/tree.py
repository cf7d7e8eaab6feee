# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Path operations on plain nested value trees.

These functions implement the data model of a DataStore. They operate on
ordinary dicts and lists, addressed by dotted paths (see paths.py), and
never touch the filesystem.

Path resolution rules:
    - A path that is a literal top-level key of the tree is used directly,
      so a key stored as ``'a.b'`` shadows the nested path ``a -> b``.
    - Otherwise the path is split into segments and walked: mappings are
      indexed by key, sequences by a decimal segment ('items.0').
    - Reading a missing path never raises; it yields MISSING (or the given
      default) as soon as a step cannot be taken.

Example:
    >>> data = {}
    >>> set_value(data, 'config.database.port', 5432)
    >>> data
    {'config': {'database': {'port': 5432}}}
    >>> get_value(data, 'config.database.port')
    5432
    >>> has_value(data, 'config.cache')
    False
"""

from __future__ import annotations

from typing import Any

from .exceptions import InvalidPathError
from .node import NodeKind, is_mapping, is_sequence, kind_of
from .paths import join_path, split_path


class _Missing:
    """Marker for a path that does not resolve to a value."""

    __slots__ = ()

    def __repr__(self) -> str:
        return 'MISSING'

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


# ==================== Traversal ====================

def _step(node: Any, segment: str) -> Any:
    """Descend one level from node, or return MISSING."""
    kind = kind_of(node)
    if kind is NodeKind.MAPPING:
        return node.get(segment, MISSING)
    if kind is NodeKind.SEQUENCE:
        if segment.isascii() and segment.isdigit():
            index = int(segment)
            if index < len(node):
                return node[index]
        return MISSING
    return MISSING


def _walk(tree: Any, segments: list[str]) -> Any:
    current = tree
    for segment in segments:
        current = _step(current, segment)
        if current is MISSING:
            break
    return current


def _parent_and_label(tree: dict, path: str) -> tuple[Any, str]:
    """Resolve the container of the last segment of path."""
    segments = split_path(path)
    label = segments.pop()
    if not segments:
        return tree, label
    return get_value(tree, join_path(segments)), label


# ==================== Core API ====================

def get_value(tree: dict, path: str, default: Any = MISSING) -> Any:
    """Get the value at the given path.

    Args:
        tree: Root mapping.
        path: Dotted path. The empty path returns the tree itself.
        default: Returned when the path does not resolve.

    Returns:
        The stored value (by reference), or default.

    Raises:
        TypeError: If path is not a string.
    """
    segments = split_path(path)
    if path in tree:
        return tree[path]
    value = _walk(tree, segments)
    return default if value is MISSING else value


def set_value(tree: dict, path: str, value: Any) -> None:
    """Set value at path, creating intermediate mappings as needed.

    Any intermediate value that is missing or is not a mapping (a scalar,
    a list) is replaced by an empty dict before descending. The value is
    stored verbatim, without copying.

    Args:
        tree: Root mapping, modified in place.
        path: Dotted path to the item.
        value: The value to store.

    Raises:
        TypeError: If path is not a string.
        InvalidPathError: If path is empty.
    """
    segments = split_path(path)
    if not segments:
        raise InvalidPathError("Cannot set a value at the empty path")

    current = tree
    for segment in segments[:-1]:
        child = current.get(segment)
        if not is_mapping(child):
            child = {}
            current[segment] = child
        current = child
    current[segments[-1]] = value


def has_value(tree: dict, path: str) -> bool:
    """True if path resolves to a value; a stored None counts as present."""
    return get_value(tree, path) is not MISSING


def has_own(tree: dict, path: str) -> bool:
    """True if the key addressed by path exists in its parent mapping.

    Unlike has_value(), positions inside sequences are not own keys:
    ``has_own(tree, 'items.0')`` is False even when items is a non-empty
    list.
    """
    split_path(path)
    if not path:
        return False
    if path in tree:
        return True
    if '.' not in path:
        return False
    parent, label = _parent_and_label(tree, path)
    return is_mapping(parent) and label in parent


def delete_value(tree: dict, path: str) -> bool:
    """Delete the key addressed by path.

    Args:
        tree: Root mapping, modified in place.
        path: Dotted path of the key to delete.

    Returns:
        True if a key was deleted, False if there was nothing to delete.
    """
    split_path(path)
    if not path:
        return False
    if path in tree:
        del tree[path]
        return True
    parent, label = _parent_and_label(tree, path)
    if is_mapping(parent) and label in parent:
        del parent[label]
        return True
    return False


def _same(a: Any, b: Any) -> bool:
    if a is b:
        return True
    if kind_of(a).is_leaf and kind_of(b).is_leaf:
        # 1, 1.0 and True must stay distinct
        return type(a) is type(b) and a == b
    return False


def union_values(tree: dict, path: str, *values: Any) -> list:
    """Merge values into the list stored at path.

    The current value is taken as a list (missing or None gives an empty
    list, a scalar becomes a one-element list). It is concatenated with
    values, flattening list arguments one level, and duplicates are dropped
    keeping the first occurrence. The result is stored back at path.

    Example:
        >>> data = {'tags': 'x'}
        >>> union_values(data, 'tags', ['y', 'x'], 'z')
        ['x', 'y', 'z']

    Returns:
        The new list stored at path.
    """
    current = get_value(tree, path, None)
    if current is None:
        current = []
    elif not is_sequence(current):
        current = [current]

    flat: list = []
    for item in (*current, *values):
        if is_sequence(item):
            flat.extend(item)
        else:
            flat.append(item)

    result: list = []
    for item in flat:
        if not any(_same(item, seen) for seen in result):
            result.append(item)

    set_value(tree, path, result)
    return result


def clone_tree(value: Any) -> Any:
    """Deep copy mappings and sequences; return scalars by reference."""
    kind = kind_of(value)
    if kind is NodeKind.MAPPING:
        return {key: clone_tree(child) for key, child in value.items()}
    if kind is NodeKind.SEQUENCE:
        return [clone_tree(child) for child in value]
    return value
