"""Read-only selectors for presentation layers.

Unlike the helpers in ``graph``, these tolerate ids that no longer exist and
answer with an empty result instead of raising.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from topicgraph.errors import NotFound
from topicgraph.graph import children, find_node, parents
from topicgraph.models.diagram import TOPIC_DIAGRAM_ID, Edge, Node, TopicDocument

logger = logging.getLogger(__name__)


def _topic(document: TopicDocument):
    return document.diagrams[TOPIC_DIAGRAM_ID]


def node_children(document: TopicDocument, node_id: Optional[str]) -> List[Node]:
    if not node_id:
        return []
    topic = _topic(document)
    try:
        return children(find_node(node_id, topic.nodes), topic)
    except NotFound:
        return []


def node_parents(document: TopicDocument, node_id: Optional[str]) -> List[Node]:
    if not node_id:
        return []
    topic = _topic(document)
    try:
        return parents(find_node(node_id, topic.nodes), topic)
    except NotFound:
        return []


def criteria_table_problem_nodes(document: TopicDocument) -> List[Node]:
    """Problems that have at least one criterion, i.e. that a criteria table can show."""
    topic = _topic(document)
    try:
        return [
            node
            for node in topic.nodes
            if node.type == "problem" and any(child.type == "criterion" for child in children(node, topic))
        ]
    except NotFound:
        return []


def criterion_solution_edges(document: TopicDocument, problem_node_id: Optional[str]) -> List[Edge]:
    if not problem_node_id:
        return []
    topic = _topic(document)
    try:
        problem = find_node(problem_node_id, topic.nodes)
        if problem.type != "problem":
            return []
        problem_children = children(problem, topic)
    except NotFound:
        return []

    criteria_ids = {node.id for node in problem_children if node.type == "criterion"}
    solution_ids = {node.id for node in problem_children if node.type == "solution"}
    return [edge for edge in topic.edges if edge.target in criteria_ids and edge.source in solution_ids]


@dataclass
class CriteriaTable:
    problem: Node
    criteria: List[Node] = field(default_factory=list)
    solutions: List[Node] = field(default_factory=list)
    # (criterion id, solution id) -> edge id, None when the solution doesn't embody the criterion
    cells: Dict[Tuple[str, str], Optional[str]] = field(default_factory=dict)

    def columns(self) -> List[Dict[str, str]]:
        return [{"id": solution.id, "label": solution.label} for solution in self.solutions]

    def rows(self) -> List[Dict[str, object]]:
        """One row per criterion; cells are keyed by solution id since labels needn't be unique."""
        return [
            {
                "id": criterion.id,
                "criterion": criterion.label,
                "cells": {solution.id: self.cells[(criterion.id, solution.id)] for solution in self.solutions},
            }
            for criterion in self.criteria
        ]


def criteria_table(document: TopicDocument, problem_node_id: Optional[str]) -> Optional[CriteriaTable]:
    """Criteria as rows and solutions as columns for one problem."""
    if not problem_node_id:
        return None
    topic = _topic(document)
    try:
        problem = find_node(problem_node_id, topic.nodes)
        problem_children = children(problem, topic)
    except NotFound:
        logger.debug("No criteria table", extra={"problem_node_id": problem_node_id})
        return None
    if problem.type != "problem":
        return None

    table = CriteriaTable(
        problem=problem,
        criteria=[node for node in problem_children if node.type == "criterion"],
        solutions=[node for node in problem_children if node.type == "solution"],
    )
    edges = criterion_solution_edges(document, problem_node_id)
    for criterion in table.criteria:
        for solution in table.solutions:
            edge = next((e for e in edges if e.target == criterion.id and e.source == solution.id), None)
            table.cells[(criterion.id, solution.id)] = edge.id if edge else None
    return table


def claim_diagrams_with_explicit_claims(document: TopicDocument) -> List[Tuple[str, str]]:
    """(argued part id, root claim label) for claim diagrams holding more than the root claim."""
    result: List[Tuple[str, str]] = []
    for diagram in document.diagrams.values():
        if diagram.type != "claim" or not diagram.edges:
            continue
        root = next((node for node in diagram.nodes if node.type == "rootClaim"), None)
        if root is not None and root.argued_diagram_part_id is not None:
            result.append((root.argued_diagram_part_id, root.label))
    return result
