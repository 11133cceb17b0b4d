"""Topic document entities (framework-agnostic).

Persisted documents use camelCase keys; Python code uses the snake_case
attribute names. Both are accepted when validating.
"""
from __future__ import annotations

from typing import Dict, List, Literal, Optional, Union, get_args

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from topicgraph.ontology import NodeType, RelationName

Score = Literal["-", "1", "2", "3", "4", "5", "6", "7", "8", "9"]
POSSIBLE_SCORES = get_args(Score)

ArguableType = Literal["node", "edge"]
DiagramType = Literal["topic", "claim"]

TOPIC_DIAGRAM_ID = "topicDiagram"


class _Model(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )


class Position(_Model):
    x: float
    y: float


class Node(_Model):
    id: str
    diagram_id: str
    type: NodeType
    label: str = "new node"
    notes: str = ""
    score: Score = "-"
    showing: bool = True
    argued_diagram_part_id: Optional[str] = None
    width: Optional[float] = None
    position: Optional[Position] = None


class Edge(_Model):
    id: str
    diagram_id: str
    type: Literal["relation"] = "relation"
    label: RelationName
    source: str  # child
    target: str  # parent
    notes: str = ""
    score: Score = "-"
    argued_diagram_part_id: Optional[str] = None


GraphPart = Union[Node, Edge]


class Diagram(_Model):
    id: str
    type: DiagramType
    nodes: List[Node] = Field(default_factory=list)
    edges: List[Edge] = Field(default_factory=list)


class TopicDocument(_Model):
    version: int
    diagrams: Dict[str, Diagram] = Field(default_factory=dict)
    active_claim_diagram_id: Optional[str] = None
    active_table_problem_id: Optional[str] = None
    next_node_id: int = 0
    next_edge_id: int = 0

    def to_persisted(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def build_node(
    node_id: str,
    node_type: str,
    diagram_id: str,
    *,
    label: str = "new node",
    score: str = "-",
    argued_diagram_part_id: Optional[str] = None,
) -> Node:
    return Node(
        id=node_id,
        diagram_id=diagram_id,
        type=node_type,
        label=label,
        score=score,
        argued_diagram_part_id=argued_diagram_part_id,
    )


def build_edge(
    edge_id: str,
    source_id: str,
    target_id: str,
    relation: str,
    diagram_id: str,
    *,
    argued_diagram_part_id: Optional[str] = None,
) -> Edge:
    return Edge(
        id=edge_id,
        diagram_id=diagram_id,
        label=relation,
        source=source_id,
        target=target_id,
        argued_diagram_part_id=argued_diagram_part_id,
    )


def build_topic_document(version: int, *, root_label: str = "new node") -> TopicDocument:
    """A fresh document whose topic diagram holds one problem node."""
    root = build_node("0", "problem", TOPIC_DIAGRAM_ID, label=root_label)
    topic = Diagram(id=TOPIC_DIAGRAM_ID, type="topic", nodes=[root])
    return TopicDocument(
        version=version,
        diagrams={TOPIC_DIAGRAM_ID: topic},
        next_node_id=1,
        next_edge_id=0,
    )
