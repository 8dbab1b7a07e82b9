"""Operation queue for one schema-change unit.

Operations live in an append-only arena. Each slot carries a state flag
(pending, consumed or removed) and an identity index maps an operation
object to its slot, so removing an operation never mutates the arena
while the compiler is draining it. Identity is used throughout because
operations are mutable models whose equality is structural.
"""

from typing import Dict, Iterator, List, Optional

from ddlflow.common.exceptions import ErrorCode, validation_error
from ddlflow.operations.base import BaseOperation

_PENDING = 0
_CONSUMED = 1
_REMOVED = 2


class OperationQueue:
    """Strict FIFO queue of operations with tombstone removal.

    Example:
        >>> queue = OperationQueue()
        >>> queue.enqueue(table)
        >>> queue.enqueue(primary_key)
        >>> queue.remove(primary_key)
        True
        >>> queue.dequeue_next() is table
        True
        >>> queue.dequeue_next() is None
        True
    """

    def __init__(self) -> None:
        self._arena: List[BaseOperation] = []
        self._state: List[int] = []
        self._slots: Dict[int, int] = {}
        self._head = 0

    def enqueue(self, operation: BaseOperation) -> None:
        """Append an operation to the tail.

        Raises:
            DDLFlowError: If the same operation object is already queued
        """
        if id(operation) in self._slots:
            raise validation_error(
                f"{operation.kind.value} operation on '{operation.target_name}' is already queued",
                field="operation",
                value=operation.kind.value,
                error_code=ErrorCode.DUPLICATE_OPERATION,
            )
        self._slots[id(operation)] = len(self._arena)
        self._arena.append(operation)
        self._state.append(_PENDING)

    def dequeue_next(self) -> Optional[BaseOperation]:
        """Consume and return the head operation, or None when drained."""
        while self._head < len(self._arena):
            slot = self._head
            self._head += 1
            if self._state[slot] == _PENDING:
                self._state[slot] = _CONSUMED
                return self._arena[slot]
        return None

    def remove(self, operation: BaseOperation) -> bool:
        """Tombstone a still-pending operation.

        Returns:
            True if the operation was pending and is now removed, False if it
            was never queued, already consumed or already removed.
        """
        slot = self._slots.get(id(operation))
        if slot is None or self._state[slot] != _PENDING:
            return False
        self._state[slot] = _REMOVED
        return True

    def is_pending(self, operation: BaseOperation) -> bool:
        slot = self._slots.get(id(operation))
        return slot is not None and self._state[slot] == _PENDING

    def pending(self) -> List[BaseOperation]:
        """Operations still waiting to be consumed, in queue order."""
        return list(self._iter_state(_PENDING))

    def consumed(self) -> List[BaseOperation]:
        return list(self._iter_state(_CONSUMED))

    def removed(self) -> List[BaseOperation]:
        """Operations tombstoned by another operation's lowering."""
        return list(self._iter_state(_REMOVED))

    def _iter_state(self, state: int) -> Iterator[BaseOperation]:
        for slot, operation in enumerate(self._arena):
            if self._state[slot] == state:
                yield operation

    def __len__(self) -> int:
        return self._state.count(_PENDING)

    def __bool__(self) -> bool:
        return len(self) > 0

    def __repr__(self) -> str:
        return (
            f"OperationQueue(pending={len(self)}, "
            f"consumed={self._state.count(_CONSUMED)}, "
            f"removed={self._state.count(_REMOVED)})"
        )
