"""Versioned migrations for persisted topic documents.

Each transformer upgrades a document by exactly one version and only assumes
the shape its predecessor produced. ``migrate`` runs them in order from the
document's version to ``LATEST_VERSION`` and validates the result against
``DOCUMENT_SCHEMA``. Transformers fall back to a structurally valid value
instead of failing when the data they depend on is missing.
"""
from __future__ import annotations

import copy
import logging
import re
from typing import Any, Callable, Dict, List, Optional

from jsonschema import Draft202012Validator
from jsonschema import ValidationError as SchemaValidationError

from topicgraph.errors import MigrationError
from topicgraph.models.diagram import POSSIBLE_SCORES, TOPIC_DIAGRAM_ID, TopicDocument
from topicgraph.ontology import NODE_TYPES, RELATION_NAMES, edge_relation

logger = logging.getLogger(__name__)

Document = Dict[str, Any]

# ontology as it was stored in version 0 documents; edges then pointed parent -> child
_V0_RELATIONS = [
    {"Parent": "Problem", "Child": "Problem", "name": "causes"},
    {"Parent": "Problem", "Child": "Solution", "name": "solves"},
    {"Parent": "Solution", "Child": "Problem", "name": "created by"},
    {"Parent": "RootClaim", "Child": "Support", "name": "supports"},
    {"Parent": "RootClaim", "Child": "Critique", "name": "critiques"},
    {"Parent": "Support", "Child": "Support", "name": "supports"},
    {"Parent": "Support", "Child": "Critique", "name": "critiques"},
    {"Parent": "Critique", "Child": "Support", "name": "supports"},
    {"Parent": "Critique", "Child": "Critique", "name": "critiques"},
]

_LEGACY_PROBLEM_DIAGRAM_ID = "problemDiagram"


def _camel_case(value: str) -> str:
    words = [w for w in re.split(r"[\s_\-]+|(?<=[a-z0-9])(?=[A-Z])", value) if w]
    if not words:
        return value
    return words[0].lower() + "".join(w[:1].upper() + w[1:].lower() for w in words[1:])


def _diagrams(state: Document) -> List[Document]:
    return list((state.get("diagrams") or {}).values())


def _find_node(diagram: Document, node_id: Any) -> Optional[Document]:
    return next((node for node in diagram.get("nodes", []) if node.get("id") == node_id), None)


def migrate_0_to_1(state: Document) -> Document:
    state = copy.deepcopy(state)
    for diagram in _diagrams(state):
        for edge in diagram.get("edges", []):
            edge["markerStart"] = {"type": "arrowclosed", "width": 30, "height": 30}

            source = _find_node(diagram, edge.get("source"))
            target = _find_node(diagram, edge.get("target"))
            source_type = source.get("type") if source else None
            target_type = target.get("type") if target else None
            relation = next(
                (r for r in _V0_RELATIONS if r["Parent"] == source_type and r["Child"] == target_type),
                None,
            )
            edge["label"] = relation["name"] if relation else None
            if relation is None:
                logger.warning("Could not infer edge label", extra={"edge_id": edge.get("id")})

        diagram["type"] = "Problem" if diagram.get("direction") == "TB" else "Claim"
        diagram.pop("direction", None)
    return state


def migrate_1_to_2(state: Document) -> Document:
    state = copy.deepcopy(state)
    for diagram in _diagrams(state):
        for node in diagram.get("nodes", []):
            node["type"] = _camel_case(node.get("type", ""))
    return state


def migrate_2_to_3(state: Document) -> Document:
    state = copy.deepcopy(state)
    for diagram in _diagrams(state):
        for node in diagram.get("nodes", []):
            if node.get("type") == "problem":
                node.setdefault("data", {})["showCriteria"] = True
    return state


def migrate_3_to_4(state: Document) -> Document:
    state = copy.deepcopy(state)
    state["activeClaimDiagramId"] = None
    state["activeTableProblemId"] = None
    state.pop("activeDiagramId", None)

    for diagram_id, diagram in (state.get("diagrams") or {}).items():
        diagram["id"] = diagram_id
        diagram["type"] = str(diagram.get("type", "claim")).lower()
        for node in diagram.get("nodes", []):
            # width is no longer stored per node
            node.get("data", {}).pop("width", None)
    return state


def _flatten_node(node: Document, diagram_id: str) -> Document:
    data = node.get("data") or {}
    flat = {
        "id": str(node.get("id")),
        "diagramId": diagram_id,
        "type": node.get("type"),
        "label": data.get("label", "new node"),
        "notes": data.get("notes", ""),
        "score": data.get("score", "-"),
        "showing": data.get("showing", True),
        "arguedDiagramPartId": data.get("arguedDiagramPartId"),
    }
    if node.get("position") is not None:
        flat["position"] = node["position"]
    return flat


def _flatten_edge(edge: Document, diagram_id: str) -> Document:
    data = edge.get("data") or {}
    return {
        "id": str(edge.get("id")),
        "diagramId": diagram_id,
        "label": edge.get("label"),
        "source": str(edge.get("source")),
        "target": str(edge.get("target")),
        "notes": data.get("notes", ""),
        "score": data.get("score", "-"),
        "arguedDiagramPartId": data.get("arguedDiagramPartId"),
    }


def migrate_4_to_5(state: Document) -> Document:
    state = copy.deepcopy(state)
    diagrams: Document = {}
    for diagram_id, diagram in (state.get("diagrams") or {}).items():
        if diagram.get("type") == "problem":
            diagram_id = TOPIC_DIAGRAM_ID
        nodes = diagram.get("nodes", [])
        edges = diagram.get("edges", [])

        hidden_criteria = set()
        for problem in nodes:
            if problem.get("type") != "problem" or (problem.get("data") or {}).get("showCriteria", True):
                continue
            for edge in edges:
                child = _find_node(diagram, edge.get("target"))
                if edge.get("source") == problem.get("id") and child and child.get("type") == "criterion":
                    hidden_criteria.add(child.get("id"))

        flat_nodes = [_flatten_node(node, diagram_id) for node in nodes]
        for node in flat_nodes:
            if node["id"] in {str(c) for c in hidden_criteria}:
                node["showing"] = False

        diagrams[diagram_id] = {
            "id": diagram_id,
            "type": "topic" if diagram.get("type") == "problem" else "claim",
            "nodes": flat_nodes,
            "edges": [_flatten_edge(edge, diagram_id) for edge in edges],
        }

    if TOPIC_DIAGRAM_ID not in diagrams:
        logger.warning("Document had no problem diagram; adding an empty topic diagram")
        diagrams = {TOPIC_DIAGRAM_ID: {"id": TOPIC_DIAGRAM_ID, "type": "topic", "nodes": [], "edges": []}, **diagrams}

    state["diagrams"] = diagrams
    if state.get("activeClaimDiagramId") == _LEGACY_PROBLEM_DIAGRAM_ID:
        state["activeClaimDiagramId"] = None
    return state


def _max_numeric_id(parts: List[Document]) -> int:
    numeric = [int(part["id"]) for part in parts if str(part.get("id", "")).isdigit()]
    return max(numeric, default=-1)


def migrate_5_to_6(state: Document) -> Document:
    state = copy.deepcopy(state)
    all_nodes: List[Document] = []
    all_edges: List[Document] = []
    for diagram in _diagrams(state):
        for edge in diagram.get("edges", []):
            # edges now point child -> parent
            edge["source"], edge["target"] = edge.get("target"), edge.get("source")
            edge["type"] = "relation"
            if edge.get("label"):
                edge["label"] = _camel_case(edge["label"])
            else:
                source = _find_node(diagram, edge["source"])
                target = _find_node(diagram, edge["target"])
                relation = edge_relation(source["type"], target["type"]) if source and target else None
                edge["label"] = relation.name if relation else None
        all_nodes.extend(diagram.get("nodes", []))
        all_edges.extend(diagram.get("edges", []))

    if state.get("nextNodeId") is None:
        state["nextNodeId"] = _max_numeric_id(all_nodes) + 1
    if state.get("nextEdgeId") is None:
        state["nextEdgeId"] = _max_numeric_id(all_edges) + 1
    return state


def migrate_6_to_7(state: Document) -> Document:
    state = copy.deepcopy(state)
    diagrams = state.get("diagrams") or {}

    for diagram_id in list(diagrams):
        diagram = diagrams[diagram_id]
        node_types = {node.get("id"): node.get("type") for node in diagram.get("nodes", [])}
        kept_edges = []
        for edge in diagram.get("edges", []):
            source, target = edge.get("source"), edge.get("target")
            if (
                edge.get("label") not in RELATION_NAMES
                or source not in node_types
                or target not in node_types
                or edge_relation(node_types[source], node_types[target], edge["label"]) is None
            ):
                logger.warning("Dropping unresolvable edge", extra={"edge_id": edge.get("id"), "diagram_id": diagram_id})
                continue
            kept_edges.append(edge)
        diagram["edges"] = kept_edges

        if diagram.get("type") == "claim":
            root_claims = [node for node in diagram.get("nodes", []) if node.get("type") == "rootClaim"]
            if len(root_claims) != 1:
                logger.warning("Dropping claim diagram without a single root claim", extra={"diagram_id": diagram_id})
                del diagrams[diagram_id]

    if state.get("activeClaimDiagramId") not in diagrams:
        state["activeClaimDiagramId"] = None
    state.setdefault("activeTableProblemId", None)
    return state


MIGRATIONS: List[Callable[[Document], Document]] = [
    migrate_0_to_1,
    migrate_1_to_2,
    migrate_2_to_3,
    migrate_3_to_4,
    migrate_4_to_5,
    migrate_5_to_6,
    migrate_6_to_7,
]

LATEST_VERSION = len(MIGRATIONS)


_POSITION_SCHEMA = {
    "type": "object",
    "required": ["x", "y"],
    "properties": {"x": {"type": "number"}, "y": {"type": "number"}},
}

_NODE_SCHEMA = {
    "type": "object",
    "required": ["id", "diagramId", "type", "label", "notes", "score", "showing"],
    "properties": {
        "id": {"type": "string"},
        "diagramId": {"type": "string"},
        "type": {"type": "string", "enum": list(NODE_TYPES)},
        "label": {"type": "string"},
        "notes": {"type": "string"},
        "score": {"type": "string", "enum": list(POSSIBLE_SCORES)},
        "showing": {"type": "boolean"},
        "arguedDiagramPartId": {"type": ["string", "null"]},
        "width": {"type": ["number", "null"], "minimum": 0},
        "position": {"oneOf": [{"type": "null"}, _POSITION_SCHEMA]},
    },
}

_EDGE_SCHEMA = {
    "type": "object",
    "required": ["id", "diagramId", "type", "label", "source", "target", "notes", "score"],
    "properties": {
        "id": {"type": "string"},
        "diagramId": {"type": "string"},
        "type": {"const": "relation"},
        "label": {"type": "string", "enum": list(RELATION_NAMES)},
        "source": {"type": "string"},
        "target": {"type": "string"},
        "notes": {"type": "string"},
        "score": {"type": "string", "enum": list(POSSIBLE_SCORES)},
        "arguedDiagramPartId": {"type": ["string", "null"]},
    },
}

DOCUMENT_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": [
        "version",
        "diagrams",
        "activeClaimDiagramId",
        "activeTableProblemId",
        "nextNodeId",
        "nextEdgeId",
    ],
    "properties": {
        "version": {"const": LATEST_VERSION},
        "diagrams": {
            "type": "object",
            "required": [TOPIC_DIAGRAM_ID],
            "additionalProperties": {
                "type": "object",
                "required": ["id", "type", "nodes", "edges"],
                "properties": {
                    "id": {"type": "string"},
                    "type": {"type": "string", "enum": ["topic", "claim"]},
                    "nodes": {"type": "array", "items": _NODE_SCHEMA},
                    "edges": {"type": "array", "items": _EDGE_SCHEMA},
                },
            },
        },
        "activeClaimDiagramId": {"type": ["string", "null"]},
        "activeTableProblemId": {"type": ["string", "null"]},
        "nextNodeId": {"type": "integer", "minimum": 0},
        "nextEdgeId": {"type": "integer", "minimum": 0},
    },
}

_VALIDATOR = Draft202012Validator(DOCUMENT_SCHEMA)


def validate_document(payload: Document) -> None:
    try:
        _VALIDATOR.validate(payload)
    except SchemaValidationError as exc:
        path = "/".join(str(p) for p in exc.absolute_path)
        raise MigrationError(f"Document validation failed at '{path}': {exc.message}") from exc


def migrate(persisted: Document, from_version: int) -> Document:
    """Bring ``persisted`` from ``from_version`` up to ``LATEST_VERSION``."""
    if from_version < 0 or from_version > LATEST_VERSION:
        raise MigrationError(f"Unknown document version {from_version} (latest is {LATEST_VERSION})")

    state = persisted
    for index in range(from_version, LATEST_VERSION):
        state = MIGRATIONS[index](state)
        logger.debug("Applied migration", extra={"from_version": index, "to_version": index + 1})

    if from_version < LATEST_VERSION:
        state = dict(state)
        state["version"] = LATEST_VERSION
        logger.info("Migrated document", extra={"from_version": from_version, "to_version": LATEST_VERSION})

    validate_document(state)
    return state


def load_document(persisted: Document) -> TopicDocument:
    """Migrate a persisted document and build the engine's model of it."""
    version = int(persisted.get("version", 0))
    return TopicDocument.model_validate(migrate(persisted, version))
