"""Pure query helpers over a diagram.

Diagrams hold hundreds of parts at most, so every helper is a linear scan of
the edge list rather than an index.
"""
from __future__ import annotations

from typing import List, Optional, Sequence

from topicgraph.errors import NotFound
from topicgraph.models.diagram import Diagram, Edge, GraphPart, Node
from topicgraph.ontology import COMPOSED_RELATIONS


def find_node(node_id: str, nodes: Sequence[Node]) -> Node:
    for node in nodes:
        if node.id == node_id:
            return node
    raise NotFound("node not found", node_id, nodes)


def find_edge(edge_id: str, edges: Sequence[Edge]) -> Edge:
    for edge in edges:
        if edge.id == edge_id:
            return edge
    raise NotFound("edge not found", edge_id, edges)


def find_graph_part(graph_part_id: str, nodes: Sequence[Node], edges: Sequence[Edge]) -> GraphPart:
    for graph_part in [*nodes, *edges]:
        if graph_part.id == graph_part_id:
            return graph_part
    raise NotFound("graph part not found", graph_part_id, [*nodes, *edges])


def find_arguable(diagram: Diagram, arguable_id: str, arguable_type: str) -> GraphPart:
    if arguable_type == "node":
        return find_node(arguable_id, diagram.nodes)
    return find_edge(arguable_id, diagram.edges)


def is_node(graph_part: GraphPart) -> bool:
    return isinstance(graph_part, Node)


def parents(node: Node, diagram: Diagram) -> List[Node]:
    parent_ids = [edge.target for edge in diagram.edges if edge.source == node.id]
    return [find_node(parent_id, diagram.nodes) for parent_id in parent_ids]


def children(node: Node, diagram: Diagram) -> List[Node]:
    child_ids = [edge.source for edge in diagram.edges if edge.target == node.id]
    return [find_node(child_id, diagram.nodes) for child_id in child_ids]


def neighbors(node: Node, diagram: Diagram) -> List[Node]:
    return [*parents(node, diagram), *children(node, diagram)]


def edges_of(node: Node, diagram: Diagram) -> List[Edge]:
    return [edge for edge in diagram.edges if node.id in (edge.source, edge.target)]


def get_connecting_edge(first: Node, second: Node, edges: Sequence[Edge]) -> Optional[Edge]:
    """The edge joining two nodes in either direction, if any."""
    for edge in edges:
        if (edge.source, edge.target) in ((first.id, second.id), (second.id, first.id)):
            return edge
    return None


def get_nodes_composed_by(node: Node, diagram: Diagram) -> List[Node]:
    composed: List[Node] = []
    for composed_relation in COMPOSED_RELATIONS:
        composing_edges = [
            edge for edge in diagram.edges if edge.target == node.id and edge.label == composed_relation.name
        ]
        candidates = [find_node(edge.source, diagram.nodes) for edge in composing_edges]
        # stale edges may point at a node whose type no longer composes
        composed.extend(candidate for candidate in candidates if candidate.type == composed_relation.child)
    return composed
