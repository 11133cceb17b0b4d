"""Snapshot command log backing undo/redo."""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Optional

from topicgraph.models.diagram import TopicDocument


@dataclass
class HistoryEntry:
    action: str
    document: TopicDocument


@dataclass
class CommandLog:
    """Bounded undo/redo stacks of whole-document snapshots."""

    limit: int = 100
    _past: Deque[HistoryEntry] = field(default_factory=deque)
    _future: Deque[HistoryEntry] = field(default_factory=deque)

    def record(self, action: str, before: TopicDocument) -> None:
        self._past.append(HistoryEntry(action, before))
        while len(self._past) > self.limit:
            self._past.popleft()
        self._future.clear()

    def undo(self, current: TopicDocument) -> Optional[HistoryEntry]:
        if not self._past:
            return None
        entry = self._past.pop()
        self._future.append(HistoryEntry(entry.action, current))
        return entry

    def redo(self, current: TopicDocument) -> Optional[HistoryEntry]:
        if not self._future:
            return None
        entry = self._future.pop()
        self._past.append(HistoryEntry(entry.action, current))
        return entry

    @property
    def can_undo(self) -> bool:
        return bool(self._past)

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    def clear(self) -> None:
        self._past.clear()
        self._future.clear()
