# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""DataStore package - Persistent nested key-value store.

The package is organized into:
- core: Main DataStore class with path access and persistence control
- config: Resolution of the file location and validation of options

Example:
    >>> from genro_datastore import DataStore
    >>> store = DataStore('myapp')
    >>> store.set('config.name', 'MyApp')
    >>> store.get('config.name')
    'MyApp'
"""

from .config import DEFAULT_BASE, StoreConfig, default_home, resolve_store_path
from .core import DataStore

__all__ = [
    "DataStore",
    "StoreConfig",
    "DEFAULT_BASE",
    "default_home",
    "resolve_store_path",
]
