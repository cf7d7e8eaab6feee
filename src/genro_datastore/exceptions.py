# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""DataStore exceptions."""

from __future__ import annotations


class DataStoreError(Exception):
    """Base exception for DataStore errors."""

    pass


class StoreConfigError(DataStoreError, ValueError):
    """Raised when a store is configured without a usable name or options."""

    pass


class InvalidPathError(DataStoreError, ValueError):
    """Raised when a path cannot address a location in the tree."""

    pass


class StorePermissionError(DataStoreError, PermissionError):
    """Raised when the backing file cannot be read for lack of permission."""

    pass
