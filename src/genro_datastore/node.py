# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Node kinds of a value tree.

Every value stored in a DataStore tree is one of three kinds:

- MAPPING: a dict, whose keys are path segments (branch)
- SEQUENCE: a list, indexed by decimal path segments (branch)
- SCALAR: anything else, returned by reference (leaf)

Tree operations dispatch on kind_of() rather than probing types themselves.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class NodeKind(Enum):
    """Kind of a node in a value tree."""

    MAPPING = 'mapping'
    SEQUENCE = 'sequence'
    SCALAR = 'scalar'

    @property
    def is_branch(self) -> bool:
        """True if nodes of this kind contain other nodes."""
        return self is not NodeKind.SCALAR

    @property
    def is_leaf(self) -> bool:
        """True if nodes of this kind hold a plain value."""
        return self is NodeKind.SCALAR


def kind_of(value: Any) -> NodeKind:
    """Return the NodeKind of a value.

    Only plain dicts and lists are branches. Strings, numbers, booleans,
    None and any other object (compiled regexes, dates, ...) are scalars.

    Example:
        >>> kind_of({'a': 1})
        <NodeKind.MAPPING: 'mapping'>
        >>> kind_of('abc')
        <NodeKind.SCALAR: 'scalar'>
    """
    if isinstance(value, dict):
        return NodeKind.MAPPING
    if isinstance(value, list):
        return NodeKind.SEQUENCE
    return NodeKind.SCALAR


def is_mapping(value: Any) -> bool:
    return kind_of(value) is NodeKind.MAPPING


def is_sequence(value: Any) -> bool:
    return kind_of(value) is NodeKind.SEQUENCE
