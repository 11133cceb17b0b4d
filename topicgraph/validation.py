"""Field validation for values arriving from outside the engine."""
from __future__ import annotations

import re

from topicgraph.errors import ValidationError
from topicgraph.ontology import NODE_TYPES, RELATION_NAMES
from topicgraph.utils.config import Settings, settings as default_settings

# github username rules, with repo name length
_TOPIC_TITLE_RE = re.compile(r"^[a-z\d](?:[a-z\d]|-(?=[a-z\d])){0,99}$", re.IGNORECASE)
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

_ARGUABLE_TYPES = ("node", "edge")
_DIRECTIONS = ("parent", "child")


def _check_text(field: str, value: str, max_length: int) -> str:
    if not isinstance(value, str):
        raise ValidationError(field, "must be a string")
    if len(value) > max_length:
        raise ValidationError(field, f"must be at most {max_length} characters (got {len(value)})")
    if _CONTROL_CHARS_RE.search(value):
        raise ValidationError(field, "contains control characters")
    return value


def validate_label(value: str, config: Settings | None = None) -> str:
    config = config or default_settings
    return _check_text("label", value, config.max_label_length)


def validate_notes(value: str, config: Settings | None = None) -> str:
    config = config or default_settings
    return _check_text("notes", value, config.max_notes_length)


def validate_topic_title(value: str) -> str:
    if not value:
        raise ValidationError("title", "must not be empty")
    if not _TOPIC_TITLE_RE.match(value):
        raise ValidationError(
            "title",
            "may only contain alphanumeric characters or single hyphens, "
            "and cannot begin or end with a hyphen",
        )
    return value


def validate_node_type(value: str) -> str:
    if value not in NODE_TYPES:
        raise ValidationError("node_type", f"unknown node type '{value}'")
    return value


def validate_relation_name(value: str) -> str:
    if value not in RELATION_NAMES:
        raise ValidationError("relation", f"unknown relation '{value}'")
    return value


def validate_arguable_type(value: str) -> str:
    if value not in _ARGUABLE_TYPES:
        raise ValidationError("arguable_type", f"must be 'node' or 'edge', got '{value}'")
    return value


def validate_direction(value: str) -> str:
    if value not in _DIRECTIONS:
        raise ValidationError("as", f"must be 'parent' or 'child', got '{value}'")
    return value
