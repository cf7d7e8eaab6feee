# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Dotted path parsing.

A path addresses a location in a nested tree: ``'a.b.c'`` walks three
levels. A dot preceded by a backslash is part of the key, so
``'host\\.name'`` addresses the single key ``'host.name'``.

Example:
    >>> split_path('config.database.host')
    ['config', 'database', 'host']
    >>> split_path('servers.www\\\\.example\\\\.com.port')
    ['servers', 'www.example.com', 'port']
"""

from __future__ import annotations

import re
from typing import Iterable

_SPLIT_RE = re.compile(r'(?<!\\)\.')
_ESCAPE_RE = re.compile(r'\\(?=\.)')


def _check_path(path: str) -> None:
    if not isinstance(path, str):
        raise TypeError(
            f"expected path to be a string, not {type(path).__name__}"
        )


def strip_escapes(segment: str) -> str:
    """Remove the backslash in front of every escaped dot."""
    return _ESCAPE_RE.sub('', segment)


def split_path(path: str) -> list[str]:
    """Split a dotted path into its segments.

    Splits on every dot that is not preceded by a backslash, then removes
    the escaping backslashes. No other normalization is applied.

    Args:
        path: Dotted path string.

    Returns:
        List of key segments. The empty path yields an empty list,
        which addresses the whole tree.

    Raises:
        TypeError: If path is not a string.
    """
    _check_path(path)
    if not path:
        return []
    return [strip_escapes(part) for part in _SPLIT_RE.split(path)]


def escape_key(key: str) -> str:
    """Escape the dots of a single key so it survives split_path()."""
    _check_path(key)
    return key.replace('.', '\\.')


def join_path(segments: Iterable[str]) -> str:
    """Build a dotted path from key segments.

    Example:
        >>> join_path(['servers', 'www.example.com'])
        'servers.www\\\\.example\\\\.com'
    """
    return '.'.join(escape_key(segment) for segment in segments)
