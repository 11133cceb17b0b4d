"""Error taxonomy shared by the engine, the migration pipeline and the CLI."""
from __future__ import annotations

from typing import Any, Iterable, List


class TopicGraphError(Exception):
    """Base class for every error raised by topicgraph."""


class NotFound(TopicGraphError, LookupError):
    """Raised when an id does not exist in the collection it was looked up in."""

    def __init__(self, message: str, item_id: str, collection: Iterable[Any] = ()):
        super().__init__(f"{message}: {item_id}")
        self.id = item_id
        self.collection: List[Any] = list(collection)


class InvalidRelation(TopicGraphError, ValueError):
    """Raised when a (parent type, child type) pair has no ontology entry."""

    def __init__(self, parent_type: str, child_type: str, message: str | None = None):
        super().__init__(message or f"No relation from '{child_type}' to '{parent_type}'")
        self.parent_type = parent_type
        self.child_type = child_type


class ConsistencyError(TopicGraphError, RuntimeError):
    """Raised when a mirror location or cascade target is missing from the document."""


class ValidationError(TopicGraphError, ValueError):
    """Raised for field-level constraint violations at the engine boundary."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field


class MigrationError(TopicGraphError, ValueError):
    """Raised when a migrated document does not match the current schema."""
