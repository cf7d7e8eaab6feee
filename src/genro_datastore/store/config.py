# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""DataStore configuration.

Resolves where a store lives on disk and validates the write options.

Path precedence:
    1. ``path``: explicit file path, used as given
    2. ``<home>/<base>/<name>.json`` where
       - home defaults to $XDG_CONFIG_HOME, then %APPDATA% on Windows,
         then ~/.config
       - base defaults to DEFAULT_BASE
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from numbers import Real
from pathlib import Path
from typing import Any, Mapping

from ..exceptions import StoreConfigError

DEFAULT_BASE = 'genro-datastore'
DEFAULT_INDENT = 2


def default_home() -> Path:
    """Return the user configuration directory."""
    xdg = os.environ.get('XDG_CONFIG_HOME')
    if xdg:
        return Path(xdg).expanduser()
    if sys.platform == 'win32' and os.environ.get('APPDATA'):
        return Path(os.environ['APPDATA'])
    return Path.home() / '.config'


def resolve_store_path(
    name: str | None = None,
    path: str | os.PathLike[str] | None = None,
    home: str | os.PathLike[str] | None = None,
    base: str | None = None,
) -> Path:
    """Resolve the absolute path of a store file.

    Args:
        name: File stem, required unless path is given.
        path: Explicit file path; overrides name, home and base.
        home: Root directory, defaults to default_home().
        base: Subdirectory of home, defaults to DEFAULT_BASE.

    Returns:
        Absolute path of the JSON file.

    Raises:
        StoreConfigError: If neither a string name nor a path is given.

    Example:
        >>> resolve_store_path('prefs', home='/etc/app')
        PosixPath('/etc/app/genro-datastore/prefs.json')
    """
    if path is not None:
        return Path(path).expanduser().absolute()
    if not isinstance(name, str) or not name:
        raise StoreConfigError(
            f"expected store name to be a non-empty string, not {name!r}"
        )
    root = Path(home).expanduser() if home is not None else default_home()
    return (root / (base or DEFAULT_BASE) / f"{name}.json").absolute()


@dataclass(frozen=True)
class StoreConfig:
    """Validated options of a DataStore.

    Attributes:
        path: Absolute path of the JSON file.
        name: File stem (derived from path when not given).
        indent: Serialization indent; None or 0 for compact output.
        delay: Write coalescing window in milliseconds, None to write
            synchronously.
        mkdir: Keyword overrides for ensure_dir() (mode, cwd).
        defaults: Values merged under the file content on every load.
    """

    path: Path
    name: str
    indent: int | None = DEFAULT_INDENT
    delay: float | None = None
    mkdir: Mapping[str, Any] = field(default_factory=dict)
    defaults: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_options(
        cls,
        name: str | None = None,
        *,
        path: str | os.PathLike[str] | None = None,
        home: str | os.PathLike[str] | None = None,
        base: str | None = None,
        indent: int | None = DEFAULT_INDENT,
        delay: float | None = None,
        mkdir: Mapping[str, Any] | None = None,
        defaults: Mapping[str, Any] | None = None,
    ) -> StoreConfig:
        """Build a StoreConfig from user options.

        Raises:
            StoreConfigError: On a missing name, a non-integer indent, a
                negative or non-numeric delay, unknown mkdir options, or
                mkdir or defaults that are not mappings.
        """
        if name is not None and not isinstance(name, str):
            raise StoreConfigError(
                f"expected store name to be a string, not {type(name).__name__}"
            )
        resolved = resolve_store_path(name, path=path, home=home, base=base)

        if indent is not None and (isinstance(indent, bool) or not isinstance(indent, int)):
            raise StoreConfigError(f"indent must be an integer or None, not {indent!r}")
        if indent is not None and indent < 0:
            raise StoreConfigError(f"indent must not be negative, got {indent}")

        if delay is not None:
            if isinstance(delay, bool) or not isinstance(delay, Real):
                raise StoreConfigError(f"delay must be a number of milliseconds, not {delay!r}")
            if delay < 0:
                raise StoreConfigError(f"delay must not be negative, got {delay}")

        if mkdir is not None and not isinstance(mkdir, Mapping):
            raise StoreConfigError(f"mkdir must be a mapping, not {type(mkdir).__name__}")
        mkdir = dict(mkdir or {})
        unknown = set(mkdir) - {'mode', 'cwd'}
        if unknown:
            raise StoreConfigError(f"Unknown mkdir options: {', '.join(sorted(unknown))}")

        if defaults is not None and not isinstance(defaults, Mapping):
            raise StoreConfigError(
                f"defaults must be a mapping, not {type(defaults).__name__}"
            )

        return cls(
            path=resolved,
            name=name if name is not None else resolved.stem,
            indent=indent,
            delay=delay,
            mkdir=mkdir,
            defaults=dict(defaults or {}),
        )
