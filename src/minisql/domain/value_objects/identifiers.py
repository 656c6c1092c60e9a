"""Identifiers and lock modes used across the engine."""

from __future__ import annotations

from enum import Enum
from typing import NewType

RowId = NewType("RowId", int)
"""Identifier of a row within its table. Monotonically increasing, never reused."""

SessionId = NewType("SessionId", int)
"""Identifier of an engine session."""

INVALID_ROW_ID = RowId(0)


class LockMode(Enum):
    """Lock modes for the readers-writer discipline."""

    SHARED = "S"
    EXCLUSIVE = "X"

    @staticmethod
    def is_compatible(held: LockMode, requested: LockMode) -> bool:
        """Only two shared locks can be held together."""
        return held is LockMode.SHARED and requested is LockMode.SHARED
