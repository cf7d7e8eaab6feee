# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""DataStore - A persistent nested key-value store in a JSON file.

This module provides the DataStore class, which combines the path
operations of tree.py with the PersistenceEngine of persistence.py behind
a single API.

Key Features:
    - **Dotted paths**: 'a.b.c' addresses nested mappings, created on set
    - **Escaped dots**: 'www\\.example\\.com' is a single key
    - **Lazy loading**: the file is read on first access, then cached
    - **Write coalescing**: with ``delay`` many saves become one write
    - **Default location**: ~/.config/genro-datastore/<name>.json

Every read goes through ensure_loaded(); every mutation ends in persist().
There are no properties with hidden side effects.

Example:
    Basic usage::

        store = DataStore('myapp')
        store.set('window.size', [800, 600])
        store.set('servers.www\\.example\\.com.port', 443)

        store.get('window.size')    # [800, 600]
        store.has('window.theme')   # False

    Coalesced writes::

        with DataStore('myapp', delay=200) as store:
            for i in range(1000):
                store.set('counter', i)   # one write, on exit
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator

from ..persistence import EngineState, PersistenceEngine, serialize
from ..tree import (
    MISSING,
    clone_tree,
    delete_value,
    get_value,
    has_own,
    has_value,
    set_value,
    union_values,
)
from .config import DEFAULT_INDENT, StoreConfig

logger = logging.getLogger(__name__)


def _check_key(key: Any) -> None:
    if not isinstance(key, str):
        raise TypeError(f"expected key to be a string, not {type(key).__name__}")


class DataStore:
    """A nested key-value store persisted to a JSON file.

    DataStore provides:
    - set(path, value) / get(path): dotted path access with autocreate
    - has(path) / has_own(path): presence checks
    - delete(path), union(path, *values), clear()
    - save(), load(), flush(): explicit persistence control

    The in-memory tree is the source of truth once loaded; the file is
    only ever overwritten. A single process is assumed to own the file.

    Example:
        >>> store = DataStore('demo', home='/tmp/conf')
        >>> store.set('a.b', 1).get('a')
        {'b': 1}
    """

    __slots__ = ('_config', '_engine')

    def __init__(
        self,
        name: str | None = None,
        *,
        path: str | os.PathLike[str] | None = None,
        home: str | os.PathLike[str] | None = None,
        base: str | None = None,
        indent: int | None = DEFAULT_INDENT,
        delay: float | None = None,
        mkdir: Mapping[str, Any] | None = None,
        defaults: Mapping[str, Any] | None = None,
    ) -> None:
        """Initialize a DataStore.

        Nothing is read or written until the store is first used.

        Args:
            name: File stem of the store. Required unless path is given.
            path: Explicit file path, overriding name, home and base.
            home: Root directory, defaults to $XDG_CONFIG_HOME or the
                platform user configuration directory.
            base: Subdirectory of home, defaults to 'genro-datastore'.
            indent: JSON indent width; None or 0 for compact output.
            delay: Milliseconds to wait before writing, coalescing every
                save made in the meantime. None writes on every save.
            mkdir: Overrides for directory creation ('mode', 'cwd').
            defaults: Values used for keys missing from the file.

        Raises:
            StoreConfigError: If the options are invalid.

        Example:
            >>> DataStore('prefs')                       # ~/.config/genro-datastore/prefs.json
            >>> DataStore(path='./state.json', indent=None)
            >>> DataStore('cache', delay=250, defaults={'version': 1})
        """
        self._config = StoreConfig.from_options(
            name,
            path=path,
            home=home,
            base=base,
            indent=indent,
            delay=delay,
            mkdir=mkdir,
            defaults=defaults,
        )
        self._engine = PersistenceEngine(
            self._config.path,
            indent=self._config.indent,
            delay=self._config.delay,
            mkdir=self._config.mkdir,
            defaults=self._config.defaults,
        )

    # ==================== Special Methods ====================

    def __repr__(self) -> str:
        return f"DataStore({str(self.path)!r})"

    def __len__(self) -> int:
        """Return the number of top-level keys."""
        return len(self.ensure_loaded())

    def __iter__(self) -> Iterator[str]:
        """Iterate over top-level keys in insertion order."""
        return iter(list(self.ensure_loaded()))

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def __getitem__(self, key: str) -> Any:
        """Get the value at a dotted path.

        Raises:
            KeyError: If the path does not resolve.
        """
        _check_key(key)
        value = get_value(self.ensure_loaded(), key)
        if value is MISSING:
            raise KeyError(key)
        return value

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __delitem__(self, key: str) -> None:
        """Delete the key at a dotted path.

        Raises:
            KeyError: If there was nothing to delete.
        """
        _check_key(key)
        if not self._delete_one(key):
            raise KeyError(key)

    def __enter__(self) -> DataStore:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.flush()

    # ==================== Properties ====================

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def path(self) -> Path:
        """Absolute path of the backing JSON file."""
        return self._config.path

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def indent(self) -> int | None:
        return self._config.indent

    @property
    def delay(self) -> float | None:
        return self._config.delay

    @property
    def state(self) -> EngineState:
        """Persistence state: uninitialized, loaded or pending write."""
        return self._engine.state

    # ==================== Tree Access ====================

    @property
    def lock(self) -> threading.RLock:
        """Reentrant lock shared by mutations and delayed writes."""
        return self._engine.lock

    def ensure_loaded(self) -> dict:
        """Return the live tree, loading it from disk on first use.

        The returned dict is the store's own tree. Changes made to it
        directly are written by the next save(). With a delay set, make
        them under the lock (or inside transaction()) so a delayed write
        never serializes a half-changed tree.
        """
        return self._engine.ensure_loaded()

    @contextmanager
    def transaction(self) -> Iterator[dict]:
        """Hold the lock around direct changes to the tree, then save.

        Nothing is saved if the block raises.

        Example:
            >>> with store.transaction() as tree:
            ...     tree['window'] = {'width': 800}
            ...     tree['recent'].append('report.txt')
        """
        with self._engine.lock:
            tree = self.ensure_loaded()
            yield tree
            self.persist()

    def persist(self) -> DataStore:
        """Apply the write policy to the current tree."""
        self._engine.save()
        return self

    def replace(self, tree: Mapping[str, Any]) -> DataStore:
        """Replace the whole tree and persist it.

        Args:
            tree: New root mapping. It is stored as a dict, not copied
                deeply.

        Raises:
            TypeError: If tree is not a mapping.
        """
        if not isinstance(tree, Mapping):
            raise TypeError(f"expected tree to be a mapping, not {type(tree).__name__}")
        with self._engine.lock:
            self._engine.replace(dict(tree))
            return self.persist()

    # ==================== Core API ====================

    def set(self, key: str | Mapping[str, Any], value: Any = MISSING) -> DataStore:
        """Set value at a dotted path and save.

        Intermediate mappings are created as needed; a non-mapping value in
        the way of a deeper path is replaced.

        Args:
            key: Dotted path, or a mapping whose items are merged into the
                top level of the tree.
            value: The value to store. Must be JSON serializable. Defaults
                to None; not allowed when key is a mapping.

        Returns:
            The store, for chaining.

        Raises:
            TypeError: If key is neither a string nor a mapping, or if a
                value is given together with a mapping.

        Example:
            >>> store.set('a.b', 'c')              # {'a': {'b': 'c'}}
            >>> store.set({'x': 1, 'y': 2})        # merge top-level keys
            >>> store.set('www\\.site\\.org', 1)   # {'www.site.org': 1}
        """
        if isinstance(key, Mapping):
            if value is not MISSING:
                raise TypeError("set() takes no value when key is a mapping")
        else:
            _check_key(key)
            if value is MISSING:
                value = None
        with self._engine.lock:
            tree = self.ensure_loaded()
            if isinstance(key, Mapping):
                tree.update(key)
            else:
                set_value(tree, key, value)
            return self.persist()

    def get(self, key: str | None = None, default: Any = None) -> Any:
        """Get the value at a dotted path.

        Args:
            key: Dotted path. If None, returns the whole tree.
            default: Returned when the path does not resolve.

        Returns:
            The stored value (by reference), or default.
        """
        if key is None:
            return self.ensure_loaded()
        _check_key(key)
        return get_value(self.ensure_loaded(), key, default)

    def has(self, key: str) -> bool:
        """True if key resolves to a value. A stored None counts.

        Example:
            >>> store.set('a', 42).set('c', None)
            >>> store.has('a'), store.has('c'), store.has('d')
            (True, True, False)
        """
        _check_key(key)
        return has_value(self.ensure_loaded(), key)

    def has_own(self, key: str) -> bool:
        """True if key exists in its parent mapping, whatever its value."""
        _check_key(key)
        return has_own(self.ensure_loaded(), key)

    def delete(self, key: str | Iterable[str]) -> DataStore:
        """Delete one or more keys, saving only if something was removed.

        Args:
            key: Dotted path, or a list/tuple of dotted paths.

        Example:
            >>> store.set('foo.bar', 'baz')
            >>> store.delete('foo.bar').get()      # {'foo': {}}
            >>> store.delete(['foo', 'missing']).get()
            {}
        """
        if isinstance(key, (list, tuple)):
            for item in key:
                self.delete(item)
            return self
        _check_key(key)
        self._delete_one(key)
        return self

    def _delete_one(self, key: str) -> bool:
        with self._engine.lock:
            deleted = delete_value(self.ensure_loaded(), key)
            if deleted:
                self.persist()
            return deleted

    def union(self, key: str, *values: Any) -> DataStore:
        """Add values to the list at key, without duplicates, and save.

        Example:
            >>> store.union('tags', 'x', 'y').union('tags', 'y', 'z')
            >>> store.get('tags')
            ['x', 'y', 'z']
        """
        _check_key(key)
        with self._engine.lock:
            union_values(self.ensure_loaded(), key, *values)
            return self.persist()

    def clone(self) -> dict:
        """Return a deep copy of the tree."""
        return clone_tree(self.ensure_loaded())

    def clear(self) -> DataStore:
        """Reset the tree to an empty mapping and save."""
        return self.replace({})

    def json(self, indent: Any = MISSING) -> str:
        """Serialize the tree.

        Args:
            indent: Indent width, defaults to the store's indent.
        """
        if indent is MISSING:
            indent = self.indent
        return serialize(self.ensure_loaded(), indent)

    # ==================== Persistence ====================

    def save(self) -> DataStore:
        """Persist the tree now, or schedule it when a delay is set."""
        return self.persist()

    def load(self) -> dict:
        """Reload the tree from disk.

        If a delayed write is pending it is cancelled instead, and the
        in-memory tree is kept: it is more current than the file. Call
        save() afterwards to write it.

        Raises:
            StorePermissionError: If the file is not readable.
        """
        return self._engine.load()

    def flush(self) -> bool:
        """Write a pending delayed save immediately.

        Returns:
            True if a pending write was flushed.
        """
        flushed = self._engine.flush()
        if flushed:
            logger.debug("Flushed pending write of %s", self.path)
        return flushed
