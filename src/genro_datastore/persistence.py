# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Persistence of a value tree to a single JSON file.

This module provides the PersistenceEngine, which owns the cached tree of
a DataStore and decides how it reaches the disk:

    - Without a delay every save() writes the file synchronously.
    - With a delay, save() (re)schedules a single DelayedTask. Saves made
      within the window are coalesced: the task serializes the live tree
      when it fires, so the one write carries every mutation made so far.

Engine states:
    UNINITIALIZED -> LOADED <-> PENDING_WRITE

    load() while a write is pending cancels the write and keeps the
    in-memory tree, which is always more current than the file.

Example:
    >>> engine = PersistenceEngine('/tmp/settings.json', delay=100)
    >>> tree = engine.ensure_loaded()
    >>> tree['theme'] = 'dark'
    >>> engine.save()      # scheduled, returns immediately
    >>> engine.flush()     # write now
    True
"""

from __future__ import annotations

import json
import logging
import os
import threading
from enum import Enum
from functools import partial
from pathlib import Path
from typing import Any, Callable, Mapping

from .directories import ensure_dir
from .exceptions import StorePermissionError
from .node import is_mapping
from .tree import clone_tree

logger = logging.getLogger(__name__)

FILE_MODE = 0o600


def serialize(tree: Any, indent: int | None = 2) -> str:
    """Serialize a tree to JSON text.

    Args:
        tree: The value tree.
        indent: Indentation width. None or 0 produce single-line output.
    """
    return json.dumps(tree, indent=indent or None, ensure_ascii=False)


class EngineState(Enum):
    """Lifecycle state of a PersistenceEngine."""

    UNINITIALIZED = 'uninitialized'
    LOADED = 'loaded'
    PENDING_WRITE = 'pending_write'


class DelayedTask:
    """A callback scheduled to run once after a delay, until cancelled.

    Thin wrapper over threading.Timer. The timer thread is a daemon, so a
    task still pending at interpreter exit never runs.
    """

    __slots__ = ('delay', 'callback', 'on_error', '_timer')

    def __init__(
        self,
        delay: float,
        callback: Callable[[], Any],
        on_error: Callable[[Exception], Any] | None = None,
    ) -> None:
        """Initialize a DelayedTask.

        Args:
            delay: Delay in milliseconds.
            callback: Called with no arguments, from the timer thread or
                from fire_now().
            on_error: Receives an exception raised by callback on the timer
                thread. Without it the exception is left to the thread.
                Exceptions raised under fire_now() always propagate.
        """
        self.delay = delay
        self.callback = callback
        self.on_error = on_error
        self._timer: threading.Timer | None = None

    def __repr__(self) -> str:
        return f"DelayedTask(delay={self.delay!r}, pending={self.pending})"

    @property
    def pending(self) -> bool:
        """True from start() until the callback has run or was cancelled."""
        return self._timer is not None and not self._timer.finished.is_set()

    def start(self) -> DelayedTask:
        if self._timer is not None:
            raise RuntimeError("DelayedTask already started")
        self._timer = threading.Timer(max(0.0, self.delay / 1000.0), self._run)
        self._timer.daemon = True
        self._timer.start()
        return self

    def cancel(self) -> bool:
        """Cancel the task. Returns True if it had not run yet."""
        was_pending = self.pending
        if self._timer is not None:
            self._timer.cancel()
        return was_pending

    def fire_now(self) -> bool:
        """Cancel the timer and run the callback in the calling thread.

        The callback only runs if the task was still pending. A timer
        thread already inside the callback is not stopped, so callbacks
        must tolerate a second invocation.

        Returns:
            True if the callback ran.
        """
        if not self.cancel():
            return False
        self.callback()
        return True

    def _run(self) -> None:
        try:
            self.callback()
        except Exception as exc:
            if self.on_error is None:
                raise
            self.on_error(exc)


class PersistenceEngine:
    """Loads and saves the value tree of one store file.

    Attributes:
        path: The JSON file.
        indent: Serialization indent (None or 0 for compact output).
        delay: Write coalescing window in milliseconds, or None to write
            synchronously on every save.
        mkdir: Keyword overrides for ensure_dir() (mode, cwd).
        defaults: Mapping merged under the file content on every load.
        lock: Reentrant lock guarding the tree. A fired delayed write
            holds it while serializing; callers mutating the tree from
            the owning thread should hold it too.
    """

    def __init__(
        self,
        path: str | os.PathLike[str],
        indent: int | None = 2,
        delay: float | None = None,
        mkdir: Mapping[str, Any] | None = None,
        defaults: Mapping[str, Any] | None = None,
    ) -> None:
        self.path = Path(path)
        self.indent = indent
        self.delay = delay
        self.mkdir = dict(mkdir or {})
        self.defaults = dict(defaults or {})
        self.lock = threading.RLock()
        self._tree: dict | None = None
        self._task: DelayedTask | None = None
        self._generation = 0
        self._provisioned = False

    def __repr__(self) -> str:
        return f"PersistenceEngine({str(self.path)!r}, state={self.state.name})"

    @property
    def state(self) -> EngineState:
        if self._task is not None and self._task.pending:
            return EngineState.PENDING_WRITE
        if self._tree is None:
            return EngineState.UNINITIALIZED
        return EngineState.LOADED

    @property
    def pending(self) -> bool:
        """True if a delayed write is scheduled."""
        return self.state is EngineState.PENDING_WRITE

    # ==================== Loading ====================

    def load(self) -> dict:
        """Load the tree from disk, or keep the in-memory tree.

        If a delayed write is pending it is cancelled and the cached tree
        is returned unchanged. Otherwise the file is read and parsed; a
        missing file, malformed JSON or a document that is not an object
        resets the tree to an empty mapping (plus defaults).

        Returns:
            The cached tree.

        Raises:
            StorePermissionError: If the file cannot be read for lack of
                permission.
            OSError: For any other read failure.
        """
        with self.lock:
            if self._cancel_task() and self._tree is not None:
                logger.debug("Pending write to %s cancelled by load", self.path)
                return self._tree
            self._tree = self._read()
            return self._tree

    def _read(self) -> dict:
        try:
            data = json.loads(self.path.read_text(encoding='utf-8'))
        except FileNotFoundError:
            logger.debug("Store file %s does not exist, starting empty", self.path)
            data = {}
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("Discarding unreadable store file %s: %s", self.path, exc)
            data = {}
        except PermissionError as exc:
            raise StorePermissionError(
                f"{exc}\ngenro-datastore does not have permission to load {self.path}"
            ) from exc
        else:
            logger.debug("Loaded store file %s", self.path)

        if not is_mapping(data):
            logger.warning(
                "Discarding store file %s: top-level value is %s, not an object",
                self.path, type(data).__name__,
            )
            data = {}
        if self.defaults:
            data = {**clone_tree(self.defaults), **data}
        return data

    def ensure_loaded(self) -> dict:
        """Return the cached tree, loading it on first use."""
        with self.lock:
            if self._tree is None:
                return self.load()
            return self._tree

    def replace(self, tree: dict) -> None:
        """Swap the cached tree without writing."""
        with self.lock:
            self._tree = tree

    # ==================== Saving ====================

    def save(self) -> None:
        """Persist the tree according to the write policy.

        The first save provisions the parent directory. Without a delay the
        file is written before returning; with a delay any pending write is
        cancelled and a new one is scheduled.

        Raises:
            OSError: If the directory cannot be created or, for synchronous
                saves, the file cannot be written.
        """
        with self.lock:
            self._provision()
            if self.delay is None:
                self._cancel_task()
                self._write()
                return

            self._schedule()

    def flush(self, force: bool = False) -> bool:
        """Write a pending delayed save now.

        Args:
            force: Write even if nothing is pending.

        Returns:
            True if the file was written.

        Raises:
            OSError: If the file cannot be written.
        """
        with self.lock:
            task = self._task
            if task is not None and task.fire_now():
                return True
            self._task = None
            if not force:
                return False
            self._provision()
            self._write()
            return True

    def cancel(self) -> bool:
        """Drop a pending delayed write. Returns True if one was pending."""
        with self.lock:
            return self._cancel_task()

    def _provision(self) -> None:
        if not self._provisioned:
            ensure_dir(self.path.parent, **self.mkdir)
            self._provisioned = True

    def _cancel_task(self) -> bool:
        task, self._task = self._task, None
        if task is None:
            return False
        return task.cancel()

    def _schedule(self) -> None:
        self._cancel_task()
        self._generation += 1
        self._task = DelayedTask(
            self.delay,
            partial(self._fire, self._generation),
            on_error=self._on_delayed_error,
        ).start()
        logger.debug("Write to %s scheduled in %sms", self.path, self.delay)

    def _fire(self, generation: int) -> None:
        """Write the live tree unless a newer schedule superseded this one."""
        with self.lock:
            if generation != self._generation or self._task is None:
                return
            self._task = None
            self._write()

    def _on_delayed_error(self, exc: Exception) -> None:
        """Handle a failure of a write fired by the timer thread.

        A tree mutated without the lock while it was being serialized makes
        json raise RuntimeError before the file is opened; the write is
        scheduled again so it still happens. Other failures are logged.
        """
        if isinstance(exc, RuntimeError) and not isinstance(exc, RecursionError):
            with self.lock:
                if self._task is None:
                    logger.debug(
                        "Tree of %s changed during a delayed write, rescheduling: %s",
                        self.path, exc,
                    )
                    self._schedule()
            return
        logger.error("Delayed write to %s failed", self.path, exc_info=exc)

    def _write(self) -> None:
        text = serialize(self.ensure_loaded(), self.indent)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
        with os.fdopen(fd, 'w', encoding='utf-8') as handle:
            handle.write(text)
        logger.debug("Wrote store file %s", self.path)
