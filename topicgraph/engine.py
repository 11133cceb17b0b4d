"""GraphEngine: the command surface over one topic document.

Every command works on a deep copy of the document and only replaces the
engine's document once the command, its implied edges and the re-layout have
all completed, so readers never observe a half-applied change.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from topicgraph.claims import get_claim_diagram_id, get_implicit_label, parse_claim_diagram_id
from topicgraph.deriver import connect_detour_siblings, create_edge_and_implied_edges
from topicgraph.errors import ConsistencyError, InvalidRelation, NotFound, ValidationError
from topicgraph.graph import children, edges_of, find_arguable, find_edge, find_node, get_connecting_edge
from topicgraph.history import CommandLog
from topicgraph.layout import layout_visible_components
from topicgraph.migrate import LATEST_VERSION, load_document
from topicgraph.models.diagram import TOPIC_DIAGRAM_ID, Diagram, TopicDocument, build_node, build_topic_document
from topicgraph.ontology import CLAIM_NODE_TYPES, Relation, lookup_relation, require_relation
from topicgraph.scores import set_score as propagate_score
from topicgraph.utils.config import Settings, settings as default_settings
from topicgraph.validation import (
    validate_arguable_type,
    validate_direction,
    validate_label,
    validate_node_type,
    validate_notes,
)

logger = logging.getLogger(__name__)


def _active_diagram(document: TopicDocument) -> Diagram:
    diagram_id = document.active_claim_diagram_id or TOPIC_DIAGRAM_ID
    diagram = document.diagrams.get(diagram_id)
    if diagram is None:
        raise ConsistencyError(f"active diagram {diagram_id} is missing from the document")
    return diagram


def _next_node_id(document: TopicDocument) -> str:
    node_id = str(document.next_node_id)
    document.next_node_id += 1
    return node_id


class GraphEngine:
    def __init__(self, document: Optional[TopicDocument] = None, *, config: Optional[Settings] = None):
        self.config = config or default_settings
        self.document = document or build_topic_document(LATEST_VERSION)
        self.history = CommandLog(limit=self.config.history_limit)

    @classmethod
    def from_persisted(cls, persisted: Dict[str, Any], *, config: Optional[Settings] = None) -> "GraphEngine":
        return cls(load_document(persisted), config=config)

    def to_persisted(self) -> Dict[str, Any]:
        return self.document.to_persisted()

    @property
    def active_diagram(self) -> Diagram:
        return _active_diagram(self.document)

    @property
    def topic_diagram(self) -> Diagram:
        return self.document.diagrams[TOPIC_DIAGRAM_ID]

    def diagram(self, diagram_id: str) -> Diagram:
        diagram = self.document.diagrams.get(diagram_id)
        if diagram is None:
            raise NotFound("diagram not found", diagram_id, self.document.diagrams.keys())
        return diagram

    @contextmanager
    def _mutation(self, action: str, **context: Any) -> Iterator[TopicDocument]:
        draft = self.document.model_copy(deep=True)
        yield draft
        self.history.record(action, self.document)
        self.document = draft
        logger.info("Applied command", extra={"action": action, **context})

    def _relayout(self, document: TopicDocument, diagram_id: str) -> None:
        document.diagrams[diagram_id] = layout_visible_components(document.diagrams[diagram_id], self.config)

    # structure

    def add_node(
        self,
        from_node_id: str,
        as_: str,
        to_node_type: str,
        relation: Optional[Relation] = None,
    ) -> str:
        """Add a node of ``to_node_type`` as the parent or child of ``from_node_id``.

        Returns the new node's id.
        """
        validate_direction(as_)
        validate_node_type(to_node_type)

        with self._mutation("addNode", from_node_id=from_node_id, to_node_type=to_node_type) as draft:
            diagram = _active_diagram(draft)
            from_node = find_node(from_node_id, diagram.nodes)
            if from_node.type in CLAIM_NODE_TYPES and as_ == "parent":
                raise InvalidRelation(to_node_type, from_node.type, "claim diagrams are trees; claim nodes can't add parents")

            parent_type, child_type = (to_node_type, from_node.type) if as_ == "parent" else (from_node.type, to_node_type)
            resolved = require_relation(parent_type, child_type)
            if relation is not None and relation != resolved:
                raise InvalidRelation(parent_type, child_type, f"'{relation.name}' does not relate {child_type} to {parent_type}")

            argued_id = parse_claim_diagram_id(diagram.id)[1] if diagram.type == "claim" else None
            new_node = build_node(_next_node_id(draft), to_node_type, diagram.id, argued_diagram_part_id=argued_id)
            diagram.nodes = [*diagram.nodes, new_node]

            parent, child = (new_node, from_node) if as_ == "parent" else (from_node, new_node)
            create_edge_and_implied_edges(draft, diagram, parent, child, resolved)
            if as_ == "child":
                connect_detour_siblings(draft, diagram, new_node, from_node)

            self._relayout(draft, diagram.id)
        return new_node.id

    def add_claim(self, parent_claim_id: str, claim_type: str) -> str:
        """Add a support or critique beneath a claim of the active claim diagram."""
        if claim_type not in ("support", "critique"):
            raise ValidationError("claim_type", f"must be 'support' or 'critique', got '{claim_type}'")
        if self.active_diagram.type != "claim":
            raise ValidationError("diagram", "no claim diagram is active")
        return self.add_node(parent_claim_id, "child", claim_type)

    def connect_nodes(self, parent_id: str, child_id: str) -> None:
        diagram = self.active_diagram
        parent = find_node(parent_id, diagram.nodes)
        child = find_node(child_id, diagram.nodes)

        if parent.id == child.id:
            raise InvalidRelation(parent.type, child.type, "cannot connect a node to itself")
        if get_connecting_edge(parent, child, diagram.edges) is not None:
            return
        if parent.type in CLAIM_NODE_TYPES:
            raise InvalidRelation(parent.type, child.type, "claim diagrams are trees; claim nodes can't gain parents")
        relation = require_relation(parent.type, child.type)

        with self._mutation("connectNodes", parent_id=parent_id, child_id=child_id) as draft:
            draft_diagram = _active_diagram(draft)
            draft_parent = find_node(parent_id, draft_diagram.nodes)
            draft_child = find_node(child_id, draft_diagram.nodes)
            create_edge_and_implied_edges(draft, draft_diagram, draft_parent, draft_child, relation)
            self._relayout(draft, draft_diagram.id)

    def delete_node(self, node_id: str) -> None:
        with self._mutation("deleteNode", node_id=node_id) as draft:
            diagram = _active_diagram(draft)
            node = find_node(node_id, diagram.nodes)

            if node.type == "rootClaim":
                del draft.diagrams[diagram.id]
                if draft.active_claim_diagram_id == diagram.id:
                    draft.active_claim_diagram_id = None
                return

            node_edges = edges_of(node, diagram)
            removed_edge_ids = {edge.id for edge in node_edges}
            diagram.nodes = [n for n in diagram.nodes if n.id != node_id]
            diagram.edges = [e for e in diagram.edges if e.id not in removed_edge_ids]

            self._delete_claim_diagram(draft, get_claim_diagram_id(node_id, "node"))
            for edge_id in removed_edge_ids:
                self._delete_claim_diagram(draft, get_claim_diagram_id(edge_id, "edge"))
            if draft.active_table_problem_id == node_id:
                draft.active_table_problem_id = None

            self._relayout(draft, diagram.id)

    def delete_edge(self, edge_id: str) -> None:
        with self._mutation("deleteEdge", edge_id=edge_id) as draft:
            diagram = _active_diagram(draft)
            find_edge(edge_id, diagram.edges)
            diagram.edges = [e for e in diagram.edges if e.id != edge_id]
            self._delete_claim_diagram(draft, get_claim_diagram_id(edge_id, "edge"))
            self._relayout(draft, diagram.id)

    @staticmethod
    def _delete_claim_diagram(document: TopicDocument, diagram_id: str) -> None:
        if document.diagrams.pop(diagram_id, None) is not None and document.active_claim_diagram_id == diagram_id:
            document.active_claim_diagram_id = None

    # content

    def set_node_label(self, node_id: str, text: str) -> None:
        validate_label(text, self.config)
        with self._mutation("setNodeLabel", node_id=node_id) as draft:
            find_node(node_id, _active_diagram(draft).nodes).label = text

    def set_node_notes(self, node_id: str, text: str) -> None:
        validate_notes(text, self.config)
        with self._mutation("setNodeNotes", node_id=node_id) as draft:
            find_node(node_id, _active_diagram(draft).nodes).notes = text

    def set_score(self, arguable_id: str, arguable_type: str, score: str) -> None:
        validate_arguable_type(arguable_type)
        with self._mutation("setScore", arguable_id=arguable_id, score=score) as draft:
            propagate_score(draft, arguable_id, arguable_type, score, _active_diagram(draft).id)

    def toggle_show_criteria(self, problem_node_id: str, show: bool) -> None:
        with self._mutation("toggleShowCriteria", problem_node_id=problem_node_id, show=show) as draft:
            topic = draft.diagrams[TOPIC_DIAGRAM_ID]  # criteria only live in the topic diagram
            problem = find_node(problem_node_id, topic.nodes)
            if problem.type != "problem":
                raise ValidationError("problem_node_id", f"node {problem_node_id} is not a problem")

            for criterion in children(problem, topic):
                if criterion.type == "criterion":
                    criterion.showing = show

            self._relayout(draft, TOPIC_DIAGRAM_ID)

    # navigation

    def view_or_create_claim_diagram(self, arguable_id: str, arguable_type: str) -> str:
        """Activate the claim diagram arguing about an arguable, creating it on first access."""
        validate_arguable_type(arguable_type)
        diagram_id = get_claim_diagram_id(arguable_id, arguable_type)

        with self._mutation("viewOrCreateClaimDiagram", diagram_id=diagram_id) as draft:
            if diagram_id not in draft.diagrams:
                # nested claim diagrams are not supported; arguables live in the topic diagram
                topic = draft.diagrams[TOPIC_DIAGRAM_ID]
                arguable = find_arguable(topic, arguable_id, arguable_type)
                root_claim = build_node(
                    _next_node_id(draft),
                    "rootClaim",
                    diagram_id,
                    label=get_implicit_label(arguable_id, arguable_type, topic),
                    score=arguable.score,
                    argued_diagram_part_id=arguable_id,
                )
                draft.diagrams[diagram_id] = Diagram(id=diagram_id, type="claim", nodes=[root_claim], edges=[])
                self._relayout(draft, diagram_id)

            draft.active_claim_diagram_id = diagram_id
        return diagram_id

    def view_claim_diagram(self, diagram_id: str) -> None:
        diagram = self.diagram(diagram_id)
        if diagram.type != "claim":
            raise ValidationError("diagram_id", f"{diagram_id} is not a claim diagram")
        with self._mutation("viewClaimDiagram", diagram_id=diagram_id) as draft:
            draft.active_claim_diagram_id = diagram_id

    def close_claim_diagram(self) -> None:
        with self._mutation("closeClaimDiagram") as draft:
            draft.active_claim_diagram_id = None

    def view_criteria_table(self, problem_node_id: str) -> None:
        problem = find_node(problem_node_id, self.topic_diagram.nodes)
        if problem.type != "problem":
            raise ValidationError("problem_node_id", f"node {problem_node_id} is not a problem")
        with self._mutation("viewCriteriaTable", problem_node_id=problem_node_id) as draft:
            draft.active_table_problem_id = problem_node_id
            draft.active_claim_diagram_id = None

    def close_table(self) -> None:
        with self._mutation("closeTable") as draft:
            draft.active_table_problem_id = None

    def view_topic_diagram(self) -> None:
        with self._mutation("viewTopicDiagram") as draft:
            draft.active_table_problem_id = None
            draft.active_claim_diagram_id = None

    # history

    def _restore(self, snapshot: TopicDocument) -> None:
        # counters only grow, so ids handed out before an undo stay retired
        snapshot.next_node_id = max(snapshot.next_node_id, self.document.next_node_id)
        snapshot.next_edge_id = max(snapshot.next_edge_id, self.document.next_edge_id)
        self.document = snapshot

    def undo(self) -> bool:
        entry = self.history.undo(self.document)
        if entry is None:
            return False
        self._restore(entry.document)
        logger.info("Undid command", extra={"action": entry.action})
        return True

    def redo(self) -> bool:
        entry = self.history.redo(self.document)
        if entry is None:
            return False
        self._restore(entry.document)
        logger.info("Redid command", extra={"action": entry.action})
        return True

    # serialized commands

    def apply_command(self, command: Dict[str, Any]) -> Any:
        """Apply a serialized command: {"action": "...", "payload": {...}}."""
        action = (command.get("action") or "").strip()
        if not action:
            raise ValidationError("action", "action is required")
        payload = command.get("payload") or {}

        if action == "addNode":
            relation = payload.get("relation")
            if isinstance(relation, dict):
                relation = lookup_relation(relation.get("parent"), relation.get("child"), relation.get("name"))
                if relation is None:
                    raise InvalidRelation(payload["relation"].get("parent"), payload["relation"].get("child"))
            return self.add_node(payload["fromNodeId"], payload["as"], payload["toNodeType"], relation)
        if action == "addClaim":
            return self.add_claim(payload["parentClaimId"], payload["claimType"])
        if action == "connectNodes":
            return self.connect_nodes(payload["parentId"], payload["childId"])
        if action == "deleteNode":
            return self.delete_node(payload["nodeId"])
        if action == "deleteEdge":
            return self.delete_edge(payload["edgeId"])
        if action == "setNodeLabel":
            return self.set_node_label(payload["nodeId"], payload["text"])
        if action == "setNodeNotes":
            return self.set_node_notes(payload["nodeId"], payload["text"])
        if action == "setScore":
            return self.set_score(payload["arguableId"], payload["arguableType"], payload["score"])
        if action == "toggleShowCriteria":
            return self.toggle_show_criteria(payload["problemNodeId"], bool(payload["show"]))
        if action == "viewOrCreateClaimDiagram":
            return self.view_or_create_claim_diagram(payload["arguableId"], payload["arguableType"])
        if action == "viewClaimDiagram":
            return self.view_claim_diagram(payload["diagramId"])
        if action == "closeClaimDiagram":
            return self.close_claim_diagram()
        if action == "viewCriteriaTable":
            return self.view_criteria_table(payload["problemNodeId"])
        if action == "closeTable":
            return self.close_table()
        if action == "viewTopicDiagram":
            return self.view_topic_diagram()
        if action == "undo":
            return self.undo()
        if action == "redo":
            return self.redo()
        raise ValidationError("action", f"Unsupported action '{action}'")

    def apply_commands(self, commands: List[Dict[str, Any]]) -> List[Any]:
        return [self.apply_command(command) for command in commands]
