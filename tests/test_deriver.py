import pytest

from topicgraph.deriver import connect_detour_siblings, create_edge_and_implied_edges
from topicgraph.errors import ConsistencyError
from topicgraph.graph import find_node
from topicgraph.models.diagram import TOPIC_DIAGRAM_ID, build_node, build_topic_document
from topicgraph.ontology import lookup_relation


def _document_with(*nodes):
    """Topic document holding problem "0" plus (id, type) nodes, no edges."""
    document = build_topic_document(7)
    topic = document.diagrams[TOPIC_DIAGRAM_ID]
    topic.nodes = [*topic.nodes, *(build_node(node_id, node_type, TOPIC_DIAGRAM_ID) for node_id, node_type in nodes)]
    document.next_node_id = len(topic.nodes)
    return document, topic


def _connect(document, topic, parent_id, child_id):
    parent = find_node(parent_id, topic.nodes)
    child = find_node(child_id, topic.nodes)
    relation = lookup_relation(parent.type, child.type)
    return create_edge_and_implied_edges(document, topic, parent, child, relation)


def _triples(topic):
    return {(e.source, e.target, e.label) for e in topic.edges}


def test_creates_single_edge_child_to_parent():
    document, topic = _document_with(("1", "solution"))
    _connect(document, topic, "0", "1")
    assert _triples(topic) == {("1", "0", "solves")}
    assert topic.edges[0].id == "0"
    assert document.next_edge_id == 1


def test_existing_connection_is_a_no_op():
    document, topic = _document_with(("1", "solution"))
    _connect(document, topic, "0", "1")
    _connect(document, topic, "0", "1")
    assert len(topic.edges) == 1
    assert document.next_edge_id == 1


def test_embodies_implies_solves_through_criterion():
    document, topic = _document_with(("1", "criterion"), ("2", "solution"))
    _connect(document, topic, "0", "1")
    _connect(document, topic, "1", "2")
    assert _triples(topic) == {
        ("1", "0", "criterionFor"),
        ("2", "1", "embodies"),
        ("2", "0", "solves"),
    }


def test_criterion_joining_problem_picks_up_embodying_solutions():
    document, topic = _document_with(("1", "criterion"), ("2", "solution"))
    _connect(document, topic, "1", "2")
    _connect(document, topic, "0", "1")
    assert ("2", "0", "solves") in _triples(topic)


def test_component_inherits_composer_relations():
    document, topic = _document_with(("1", "criterion"), ("2", "solution"), ("3", "solutionComponent"))
    _connect(document, topic, "0", "1")
    _connect(document, topic, "1", "2")
    _connect(document, topic, "2", "3")
    triples = _triples(topic)
    assert ("3", "2", "has") in triples
    assert ("3", "0", "solves") in triples
    assert ("3", "1", "embodies") in triples


def test_relation_to_composer_reaches_components():
    document, topic = _document_with(("1", "solution"), ("2", "solutionComponent"), ("3", "criterion"))
    _connect(document, topic, "1", "2")
    _connect(document, topic, "3", "1")
    assert ("2", "3", "embodies") in _triples(topic)


def test_derivation_is_idempotent():
    document, topic = _document_with(("1", "criterion"), ("2", "solution"), ("3", "solutionComponent"))
    _connect(document, topic, "0", "1")
    _connect(document, topic, "1", "2")
    _connect(document, topic, "2", "3")
    before = _triples(topic)
    _connect(document, topic, "1", "2")
    _connect(document, topic, "2", "3")
    assert _triples(topic) == before


def test_depth_guard_raises_consistency_error():
    document, topic = _document_with(("1", "solution"))
    parent = find_node("0", topic.nodes)
    child = find_node("1", topic.nodes)
    with pytest.raises(ConsistencyError):
        create_edge_and_implied_edges(
            document, topic, parent, child, lookup_relation("problem", "solution"), _depth=len(topic.nodes) + 1
        )
    assert topic.edges == []


def test_new_solution_embodies_sibling_criteria():
    document, topic = _document_with(("1", "criterion"), ("2", "criterion"), ("3", "solution"))
    _connect(document, topic, "0", "1")
    _connect(document, topic, "0", "2")
    _connect(document, topic, "0", "3")
    connect_detour_siblings(document, topic, find_node("3", topic.nodes), find_node("0", topic.nodes))
    triples = _triples(topic)
    assert ("3", "1", "embodies") in triples
    assert ("3", "2", "embodies") in triples


def test_new_criterion_is_embodied_by_sibling_solutions():
    document, topic = _document_with(("1", "solution"), ("2", "effect"), ("3", "criterion"))
    _connect(document, topic, "0", "1")
    _connect(document, topic, "0", "2")
    _connect(document, topic, "0", "3")
    connect_detour_siblings(document, topic, find_node("3", topic.nodes), find_node("0", topic.nodes))
    triples = _triples(topic)
    assert ("1", "3", "embodies") in triples
    assert ("2", "3", "embodies") in triples
