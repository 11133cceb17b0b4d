"""Topic graph engine.

Maintains argument/topic maps: typed nodes joined by ontology-checked edges,
grouped into a topic diagram plus one claim diagram per argued node or edge.

Components:
- ontology: legal relations between node types, composition and shortcut rules
- models: pydantic entities for nodes, edges, diagrams and the document
- deriver: implied edges from shortcut and composition rules
- layout: layered positions for the visible part of a diagram
- scores: score mirroring between arguables and root claims
- migrate: versioned upgrades of persisted documents
- engine: the command surface tying the above together
"""

from topicgraph.engine import GraphEngine

from topicgraph.errors import (
    ConsistencyError,
    InvalidRelation,
    MigrationError,
    NotFound,
    TopicGraphError,
    ValidationError,
)

from topicgraph.models.diagram import (
    TOPIC_DIAGRAM_ID,
    Diagram,
    Edge,
    Node,
    Position,
    TopicDocument,
)

from topicgraph.migrate import LATEST_VERSION, load_document, migrate

from topicgraph.ontology import Relation, lookup_relation

__all__ = [
    "GraphEngine",
    "ConsistencyError",
    "InvalidRelation",
    "MigrationError",
    "NotFound",
    "TopicGraphError",
    "ValidationError",
    "TOPIC_DIAGRAM_ID",
    "Diagram",
    "Edge",
    "Node",
    "Position",
    "TopicDocument",
    "LATEST_VERSION",
    "load_document",
    "migrate",
    "Relation",
    "lookup_relation",
]
