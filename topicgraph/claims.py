"""Claim diagram ids and labels."""
from __future__ import annotations

from typing import Tuple

from topicgraph.errors import NotFound
from topicgraph.graph import find_edge, find_node
from topicgraph.models.diagram import Diagram

_ARGUABLE_TYPES = ("node", "edge")


def get_claim_diagram_id(arguable_id: str, arguable_type: str) -> str:
    return f"{arguable_type}-{arguable_id}"


def parse_claim_diagram_id(diagram_id: str) -> Tuple[str, str]:
    """Return (arguable_type, arguable_id) encoded in a claim diagram id."""
    arguable_type, sep, arguable_id = diagram_id.partition("-")
    if not sep or arguable_type not in _ARGUABLE_TYPES or not arguable_id:
        raise NotFound("not a claim diagram id", diagram_id)
    return arguable_type, arguable_id


def get_implicit_label(arguable_id: str, arguable_type: str, diagram: Diagram) -> str:
    """The statement a root claim makes about the arguable it argues."""
    if arguable_type == "node":
        node = find_node(arguable_id, diagram.nodes)
        return f'"{node.label}" is important'

    edge = find_edge(arguable_id, diagram.edges)
    child = find_node(edge.source, diagram.nodes)
    parent = find_node(edge.target, diagram.nodes)
    return f'"{child.label}" {edge.label} "{parent.label}"'
