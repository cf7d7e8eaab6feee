# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Genro-DataStore - Persistent nested key-value store in a JSON file.

A lightweight, zero-dependency library for the Genro ecosystem: values
are addressed by dotted paths and written to a single JSON file, either
on every change or coalesced over a short delay.
"""

__version__ = "0.1.0"

from .directories import ensure_dir
from .exceptions import (
    DataStoreError,
    InvalidPathError,
    StoreConfigError,
    StorePermissionError,
)
from .node import NodeKind, kind_of
from .paths import escape_key, join_path, split_path
from .persistence import DelayedTask, EngineState, PersistenceEngine
from .store import DataStore, StoreConfig
from .tree import MISSING

__all__ = [
    # Core classes
    "DataStore",
    "StoreConfig",
    # Persistence
    "PersistenceEngine",
    "DelayedTask",
    "EngineState",
    "ensure_dir",
    # Paths and tree
    "split_path",
    "join_path",
    "escape_key",
    "NodeKind",
    "kind_of",
    "MISSING",
    # Exceptions
    "DataStoreError",
    "StoreConfigError",
    "InvalidPathError",
    "StorePermissionError",
]
