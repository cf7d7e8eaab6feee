# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Directory provisioning for store files."""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def _levels(target: Path, cwd: Path) -> list[Path]:
    """List every directory from the starting point down to target.

    The starting point is cwd itself when target lies under it; otherwise
    the walk begins just below the filesystem root.
    """
    try:
        relative = target.relative_to(cwd)
    except ValueError:
        current = Path(target.anchor)
        levels = []
        parts = target.parts[1:]
    else:
        current = cwd
        levels = [cwd]
        parts = relative.parts

    for part in parts:
        current = current / part
        levels.append(current)
    return levels


def ensure_dir(
    path: str | os.PathLike[str],
    mode: int = 0o777,
    cwd: str | os.PathLike[str] | None = None,
) -> Path:
    """Create a directory and any missing parents, one level at a time.

    Each level is created unconditionally; a FileExistsError is accepted
    only if the existing entry is a directory. There is no existence check
    before mkdir, so concurrent processes creating the same path do not
    make this fail.

    Args:
        path: Directory to create. Relative paths are taken from cwd.
        mode: Permission bits for created directories (the umask applies).
        cwd: Starting directory. Defaults to the current directory.
            Levels above it are only touched when path lies outside it.

    Returns:
        The absolute path of the directory.

    Raises:
        FileExistsError: If a component exists and is not a directory.
        OSError: For any other failure (e.g. PermissionError).
    """
    base = Path(cwd).absolute() if cwd is not None else Path.cwd()
    target = Path(os.path.normpath(base / Path(path).expanduser()))

    for level in _levels(target, base):
        try:
            os.mkdir(level, mode)
        except FileExistsError:
            if not level.is_dir():
                raise
        else:
            logger.debug("Created directory %s", level)
    return target
