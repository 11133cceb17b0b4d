"""Implied-edge derivation.

Creating an edge may imply further edges:

- shortcut: a detour node (e.g. a criterion) between two nodes that would
  otherwise be related one hop further implies the direct edge
  (criterion embodied by a solution => the criterion's problem is solved by it),
- composition: a node composed by another (a solution's component) shares the
  relations of its composer.

Every implied edge goes back through ``create_edge_and_implied_edges``; the
existing-edge check at the top turns already-derived states into no-ops, which
is what bounds the recursion.
"""
from __future__ import annotations

import logging
from typing import List

from topicgraph.errors import ConsistencyError
from topicgraph.graph import children, find_node, get_connecting_edge, get_nodes_composed_by, parents
from topicgraph.models.diagram import Diagram, Edge, Node, TopicDocument, build_edge
from topicgraph.ontology import SHORTCUT_RELATIONS, Relation, is_composition, lookup_relation

logger = logging.getLogger(__name__)


def _next_edge_id(document: TopicDocument) -> str:
    edge_id = str(document.next_edge_id)
    document.next_edge_id += 1
    return edge_id


def create_edge_and_implied_edges(
    document: TopicDocument,
    diagram: Diagram,
    parent: Node,
    child: Node,
    relation: Relation,
    *,
    _depth: int = 0,
) -> List[Edge]:
    """Insert the parent <- child edge and every edge it implies. Mutates ``document``.

    Assumes at most one edge between two nodes; a second relation between the
    same pair is treated as already connected.
    """
    if _depth > len(diagram.nodes):
        raise ConsistencyError(
            f"implied edge derivation exceeded depth {len(diagram.nodes)} "
            f"at {child.id} -> {parent.id} ({relation.name})"
        )

    if get_connecting_edge(parent, child, diagram.edges) is not None:
        return diagram.edges

    new_edge = build_edge(_next_edge_id(document), child.id, parent.id, relation.name, diagram.id)
    diagram.edges = [*diagram.edges, new_edge]
    logger.debug(
        "Created edge",
        extra={"edge_id": new_edge.id, "relation": relation.name, "source": child.id, "target": parent.id, "depth": _depth},
    )

    _create_shortcut_edges(document, diagram, parent, child, _depth + 1)
    _create_edges_implied_by_composition(document, diagram, parent, child, relation, _depth + 1)

    return diagram.edges


def _create_shortcut_edges(document: TopicDocument, diagram: Diagram, parent: Node, child: Node, depth: int) -> None:
    for shortcut in SHORTCUT_RELATIONS:
        relation = shortcut.relation

        if parent.type == shortcut.detour_node_type and child.type == relation.child:
            grandparents = [node for node in parents(parent, diagram) if node.type == relation.parent]
            for grandparent in grandparents:
                create_edge_and_implied_edges(document, diagram, grandparent, child, relation, _depth=depth)

        if child.type == shortcut.detour_node_type and parent.type == relation.parent:
            grandchildren = [node for node in children(child, diagram) if node.type == relation.child]
            for grandchild in grandchildren:
                create_edge_and_implied_edges(document, diagram, parent, grandchild, relation, _depth=depth)


def _create_edges_implied_by_composition(
    document: TopicDocument,
    diagram: Diagram,
    parent: Node,
    child: Node,
    relation: Relation,
    depth: int,
) -> None:
    for composed in get_nodes_composed_by(parent, diagram):
        relation_for_composed = lookup_relation(composed.type, relation.child, relation.name)
        if relation_for_composed is None:
            continue
        create_edge_and_implied_edges(document, diagram, composed, child, relation_for_composed, _depth=depth)

    for composed in get_nodes_composed_by(child, diagram):
        relation_for_composed = lookup_relation(relation.parent, composed.type, relation.name)
        if relation_for_composed is None:
            continue
        create_edge_and_implied_edges(document, diagram, parent, composed, relation_for_composed, _depth=depth)

    if is_composition(relation):
        _inherit_composer_relations(document, diagram, composer=parent, component=child, depth=depth)


def _inherit_composer_relations(
    document: TopicDocument, diagram: Diagram, *, composer: Node, component: Node, depth: int
) -> None:
    """A newly composed node picks up the relations its composer already has."""
    for edge in list(diagram.edges):
        if edge.source == composer.id:
            other = find_node(edge.target, diagram.nodes)
            inherited = lookup_relation(other.type, component.type, edge.label)
            if inherited is not None:
                create_edge_and_implied_edges(document, diagram, other, component, inherited, _depth=depth)
        elif edge.target == composer.id and edge.source != component.id:
            other = find_node(edge.source, diagram.nodes)
            inherited = lookup_relation(component.type, other.type, edge.label)
            if inherited is not None:
                create_edge_and_implied_edges(document, diagram, component, other, inherited, _depth=depth)


def connect_detour_siblings(document: TopicDocument, diagram: Diagram, new_node: Node, from_node: Node) -> None:
    """Connect a node just added beneath ``from_node`` to its siblings across a detour.

    A new criterion under a problem is embodied by the problem's solutions,
    components and effects; a new solution under a problem embodies each of the
    problem's criteria.
    """
    for shortcut in SHORTCUT_RELATIONS:
        relation = shortcut.relation
        if from_node.type != relation.parent:
            continue

        if new_node.type == shortcut.detour_node_type:
            siblings = [node for node in children(from_node, diagram) if node.type == relation.child]
            for sibling in siblings:
                sibling_relation = lookup_relation(new_node.type, sibling.type)
                if sibling_relation is None:
                    continue
                create_edge_and_implied_edges(document, diagram, new_node, sibling, sibling_relation)

        elif new_node.type == relation.child:
            detours = [node for node in children(from_node, diagram) if node.type == shortcut.detour_node_type]
            for detour in detours:
                detour_relation = lookup_relation(detour.type, new_node.type)
                if detour_relation is None:
                    continue
                create_edge_and_implied_edges(document, diagram, detour, new_node, detour_relation)
