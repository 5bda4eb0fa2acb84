from __future__ import annotations

from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")

MAX_HISTORY = 20


class EditHistory(Generic[T]):
    """
    Bounded undo/redo list of immutable snapshots with a cursor.

    Pushing drops any redo tail; when full the oldest snapshot is evicted.
    """

    def __init__(self, max_size: int = MAX_HISTORY):
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        self.max_size = max_size
        self._items: List[T] = []
        self._index = -1

    def __len__(self) -> int:
        return len(self._items)

    @property
    def index(self) -> int:
        return self._index

    @property
    def current(self) -> Optional[T]:
        return self._items[self._index] if self._index >= 0 else None

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._items) - 1

    def push(self, snapshot: T) -> bool:
        """Record a new snapshot; returns False if it equals the current one."""
        current = self.current
        if current is not None and (current is snapshot or current == snapshot):
            return False

        del self._items[self._index + 1 :]
        self._items.append(snapshot)
        if len(self._items) > self.max_size:
            self._items.pop(0)
        self._index = len(self._items) - 1
        return True

    def undo(self) -> Optional[T]:
        if not self.can_undo:
            return None
        self._index -= 1
        return self._items[self._index]

    def redo(self) -> Optional[T]:
        if not self.can_redo:
            return None
        self._index += 1
        return self._items[self._index]

    def clear(self) -> None:
        self._items = []
        self._index = -1
