"""Lock manager for statement isolation.

Statements run one at a time per resource class: any number of readers,
or a single writer. Resources are named by tuples:

    ("catalog",)            - the set of databases
    ("database", "<name>")  - one database and its tables

Lock Modes:
    - SHARED (S): SELECT, SHOW, DESCRIBE and the catalog read taken by
      every statement
    - EXCLUSIVE (X): INSERT, UPDATE, DELETE, table DDL on a database;
      database DDL on the catalog

Locks are held for the duration of one statement and released in reverse
order of acquisition. An owner (session) may re-enter a lock it already
holds in the same or a weaker mode.
"""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Hashable, Iterator

from minisql.domain.errors import EngineError, ErrorKind
from minisql.domain.value_objects import LockMode

logger = logging.getLogger(__name__)

Resource = tuple[Hashable, ...]


@dataclass
class LockEntry:
    """Entry in the lock table for a resource."""

    # Granted locks: owner -> (mode, re-entry count)
    granted: Dict[Hashable, list] = field(default_factory=dict)
    waiting: int = 0

    def has_conflict(self, mode: LockMode, owner: Hashable) -> bool:
        """Check if granting ``mode`` to ``owner`` would conflict."""
        for holder, (held_mode, _) in self.granted.items():
            if holder == owner:
                continue
            if not LockMode.is_compatible(held_mode, mode):
                return True
        return False

    def is_idle(self) -> bool:
        return not self.granted and not self.waiting


class LockManager:
    """Readers-writer locks over named resources.

    Thread Safety:
        All lock table updates happen under one condition variable;
        waiters are woken whenever any lock is released.
    """

    def __init__(self, default_timeout: float | None = None) -> None:
        """Initialize the lock manager.

        Args:
            default_timeout: Seconds to wait for a lock when the caller
                gives no timeout (None = forever).
        """
        self._condition = threading.Condition()
        self._default_timeout = default_timeout
        self._lock_table: Dict[Resource, LockEntry] = {}

    @contextmanager
    def hold(
        self,
        owner: Hashable,
        resource: Resource,
        mode: LockMode,
        timeout: float | None = None,
    ) -> Iterator[float]:
        """Hold a lock for the body of a ``with`` block.

        Yields:
            Seconds spent waiting for the lock.
        """
        waited = self.acquire(owner, resource, mode, timeout)
        try:
            yield waited
        finally:
            self.release(owner, resource)

    def acquire(
        self,
        owner: Hashable,
        resource: Resource,
        mode: LockMode,
        timeout: float | None = None,
    ) -> float:
        """Acquire a lock on a resource, blocking until it is granted.

        Args:
            owner: The requesting session.
            resource: The resource to lock.
            mode: The lock mode requested.
            timeout: Max seconds to wait (None = manager default).

        Returns:
            Seconds spent waiting.

        Raises:
            LockTimeoutError: If the lock was not granted in time.
        """
        if timeout is None:
            timeout = self._default_timeout
        started = time.monotonic()
        deadline = None if timeout is None else started + timeout

        with self._condition:
            entry = self._lock_table.setdefault(resource, LockEntry())

            held = entry.granted.get(owner)
            if held is not None and (held[0] is mode or held[0] is LockMode.EXCLUSIVE):
                held[1] += 1
                return 0.0

            entry.waiting += 1
            try:
                while entry.has_conflict(mode, owner):
                    remaining = None if deadline is None else deadline - time.monotonic()
                    if remaining is not None and remaining <= 0:
                        raise LockTimeoutError(
                            f"Lock wait timeout exceeded on {_describe(resource)}"
                        )
                    self._condition.wait(remaining)
            finally:
                entry.waiting -= 1

            if held is not None:
                # Upgrade keeps the re-entry count.
                held[0] = mode
                held[1] += 1
            else:
                entry.granted[owner] = [mode, 1]

        waited = time.monotonic() - started
        if waited > 0.001:
            logger.debug("Waited %.3fs for %s lock on %s", waited, mode.name, _describe(resource))
        return waited

    def release(self, owner: Hashable, resource: Resource) -> bool:
        """Release one hold of a lock.

        Returns:
            True if a lock was released, False if not held.
        """
        with self._condition:
            entry = self._lock_table.get(resource)
            if entry is None or owner not in entry.granted:
                return False

            held = entry.granted[owner]
            held[1] -= 1
            if held[1] == 0:
                del entry.granted[owner]
                self._condition.notify_all()
            if entry.is_idle():
                del self._lock_table[resource]
            return True

    def release_all(self, owner: Hashable) -> int:
        """Release every lock held by an owner, e.g. when a session closes.

        Returns:
            Number of resources released.
        """
        with self._condition:
            count = 0
            for resource, entry in list(self._lock_table.items()):
                if entry.granted.pop(owner, None) is not None:
                    count += 1
                    if entry.is_idle():
                        del self._lock_table[resource]
            if count:
                self._condition.notify_all()
            return count

    def get_locks_held(self, owner: Hashable) -> list[tuple[Resource, LockMode]]:
        with self._condition:
            return [
                (resource, entry.granted[owner][0])
                for resource, entry in self._lock_table.items()
                if owner in entry.granted
            ]


def _describe(resource: Resource) -> str:
    return ":".join(str(part) for part in resource)


class LockTimeoutError(EngineError):
    """Raised when lock wait times out."""

    kind = ErrorKind.LOCK_TIMEOUT
