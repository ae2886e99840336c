"""
Bounded undo ledger for boolean operations.
"""

import time
from collections import deque
from dataclasses import dataclass, field
from typing import Optional

from meshkernel.core.config import CSGOptions, HistoryOptions
from meshkernel.core.exceptions import ConfigurationError
from meshkernel.core.logging import get_logger
from meshkernel.core.mesh import Mesh

logger = get_logger(__name__)


@dataclass
class BooleanHistoryEntry:
    """One recorded boolean operation."""

    operation: str
    original_mesh: Mesh
    result_mesh: Mesh
    options: CSGOptions
    timestamp: float = field(default_factory=time.time)


class BooleanHistory:
    """
    Keeps the most recent boolean operations so they can be undone.

    Meshes are cloned on entry, so later edits to the caller's meshes do not
    leak into the ledger. Once ``max_entries`` is reached the oldest entry
    is evicted. There is no redo.

    Example:
        >>> history = BooleanHistory(max_entries=10)
        >>> history.undo() is None
        True
    """

    def __init__(self, max_entries: int = HistoryOptions().max_entries) -> None:
        if max_entries < 1:
            raise ConfigurationError(
                "History needs room for at least one entry",
                details={"max_entries": max_entries},
            )
        self.max_entries = max_entries
        self._entries: deque[BooleanHistoryEntry] = deque(maxlen=max_entries)

    @classmethod
    def from_options(cls, options: HistoryOptions) -> "BooleanHistory":
        return cls(max_entries=options.max_entries)

    def __len__(self) -> int:
        return len(self._entries)

    def add_entry(
        self,
        operation: str,
        original_mesh: Mesh,
        result_mesh: Mesh,
        options: CSGOptions = CSGOptions(),
    ) -> BooleanHistoryEntry:
        """Record an operation, evicting the oldest entry when full."""
        entry = BooleanHistoryEntry(
            operation=operation,
            original_mesh=original_mesh.clone(),
            result_mesh=result_mesh.clone(),
            options=options,
        )
        if len(self._entries) == self.max_entries:
            logger.debug("boolean_history_evict", operation=self._entries[0].operation)
        self._entries.append(entry)
        return entry

    def get_history(self) -> list[BooleanHistoryEntry]:
        """Entries in insertion order (a copy of the ledger)."""
        return list(self._entries)

    def undo(self) -> Optional[Mesh]:
        """
        Pop the latest entry and return the mesh it replaced.

        Returns None when there is nothing to undo.
        """
        if not self._entries:
            return None
        entry = self._entries.pop()
        logger.debug("boolean_undo", operation=entry.operation, remaining=len(self._entries))
        return entry.original_mesh

    def last_operation(self) -> Optional[BooleanHistoryEntry]:
        return self._entries[-1] if self._entries else None

    def clear_history(self) -> None:
        self._entries.clear()
