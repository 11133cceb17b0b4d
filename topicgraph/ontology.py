"""Relation ontology: which node types may be connected, and by what relation.

Relations are keyed by (parent type, child type). Edges point from child to
parent, so an edge resolves through ``lookup_relation(target.type, source.type)``.
Adding a node type or relation only requires touching the tables below.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Literal, Optional, Tuple, get_args

from topicgraph.errors import InvalidRelation

# Order matters: it is the order nodes of different types are grouped in a layout rank.
NodeType = Literal[
    "problem",
    "criterion",
    "effect",
    "solutionComponent",
    "solution",
    "rootClaim",
    "support",
    "critique",
    "question",
    "answer",
    "fact",
    "source",
]
NODE_TYPES: Tuple[str, ...] = get_args(NodeType)

RelationName = Literal[
    # topic
    "causes",
    "solves",
    "addresses",
    "createdBy",
    "has",
    "criterionFor",
    "creates",
    "embodies",
    # explore
    "asksAbout",
    "potentialAnswerTo",
    "relevantFor",
    "sourceOf",
    # claim
    "supports",
    "critiques",
]
RELATION_NAMES: Tuple[str, ...] = get_args(RelationName)

RelationDirection = Literal["parent", "child"]

TOPIC_NODE_TYPES: Tuple[str, ...] = ("problem", "criterion", "effect", "solutionComponent", "solution")
EXPLORE_NODE_TYPES: Tuple[str, ...] = ("question", "answer", "fact", "source")
CLAIM_NODE_TYPES: Tuple[str, ...] = ("rootClaim", "support", "critique")


@dataclass(frozen=True)
class Relation:
    parent: str
    child: str
    name: str


@dataclass(frozen=True)
class ShortcutRelation:
    """A detour node sitting between relation.parent and relation.child can be skipped."""

    detour_node_type: str
    relation: Relation


def _build_relations() -> List[Relation]:
    relations = [
        Relation("problem", "problem", "causes"),
        Relation("problem", "solution", "solves"),
        Relation("problem", "solutionComponent", "solves"),
        Relation("problem", "criterion", "criterionFor"),
        Relation("problem", "effect", "addresses"),
        Relation("solution", "problem", "createdBy"),
        Relation("solution", "solutionComponent", "has"),
        Relation("solution", "effect", "creates"),
        Relation("solutionComponent", "effect", "creates"),
        Relation("criterion", "solution", "embodies"),
        Relation("criterion", "solutionComponent", "embodies"),
        Relation("criterion", "effect", "embodies"),
        Relation("question", "answer", "potentialAnswerTo"),
        Relation("fact", "source", "sourceOf"),
    ]

    for parent in TOPIC_NODE_TYPES:
        relations.append(Relation(parent, "question", "asksAbout"))

    for parent in TOPIC_NODE_TYPES + ("question", "answer"):
        relations.append(Relation(parent, "fact", "relevantFor"))
        relations.append(Relation(parent, "source", "relevantFor"))

    for parent in CLAIM_NODE_TYPES:
        relations.append(Relation(parent, "support", "supports"))
        relations.append(Relation(parent, "critique", "critiques"))

    return relations


RELATIONS: Tuple[Relation, ...] = tuple(_build_relations())

COMPOSED_RELATIONS: Tuple[Relation, ...] = (Relation("solution", "solutionComponent", "has"),)

SHORTCUT_RELATIONS: Tuple[ShortcutRelation, ...] = (
    ShortcutRelation("criterion", Relation("problem", "solution", "solves")),
    ShortcutRelation("criterion", Relation("problem", "solutionComponent", "solves")),
    ShortcutRelation("criterion", Relation("problem", "effect", "addresses")),
)


def lookup_relation(parent_type: str, child_type: str, name: Optional[str] = None) -> Optional[Relation]:
    for relation in RELATIONS:
        if relation.parent != parent_type or relation.child != child_type:
            continue
        if name is not None and relation.name != name:
            continue
        return relation
    return None


def require_relation(parent_type: str, child_type: str) -> Relation:
    relation = lookup_relation(parent_type, child_type)
    if relation is None:
        raise InvalidRelation(parent_type, child_type)
    return relation


def is_composition(relation: Relation) -> bool:
    return relation in COMPOSED_RELATIONS


def shortcuts_for(node_type: str) -> List[ShortcutRelation]:
    return [shortcut for shortcut in SHORTCUT_RELATIONS if shortcut.detour_node_type == node_type]


def addable_relations_from(node_type: str, adding_as: RelationDirection) -> List[Tuple[str, Relation]]:
    """Return (to_node_type, relation) pairs a node of ``node_type`` can grow along.

    Claim diagrams are trees, so claim nodes can only add children.
    """
    if node_type in CLAIM_NODE_TYPES and adding_as == "parent":
        return []

    if adding_as == "parent":
        return [(relation.parent, relation) for relation in RELATIONS if relation.child == node_type]
    return [(relation.child, relation) for relation in RELATIONS if relation.parent == node_type]


def edge_relation(source_type: str, target_type: str, label: Optional[str] = None) -> Optional[Relation]:
    """Resolve the relation of an edge from its rendered endpoints (source=child, target=parent)."""
    return lookup_relation(target_type, source_type, label)
