import pytest

from topicgraph.errors import ConsistencyError, ValidationError
from topicgraph.models.diagram import TOPIC_DIAGRAM_ID, Diagram, build_edge, build_node, build_topic_document
from topicgraph.scores import set_score


def _document_with_claim_diagram():
    document = build_topic_document(7)
    topic = document.diagrams[TOPIC_DIAGRAM_ID]
    topic.nodes = [*topic.nodes, build_node("1", "solution", TOPIC_DIAGRAM_ID)]
    topic.edges = [build_edge("0", "1", "0", "solves", TOPIC_DIAGRAM_ID)]
    document.diagrams["node-0"] = Diagram(
        id="node-0",
        type="claim",
        nodes=[
            build_node("2", "rootClaim", "node-0", argued_diagram_part_id="0"),
            build_node("3", "support", "node-0", argued_diagram_part_id="0"),
        ],
        edges=[build_edge("1", "3", "2", "supports", "node-0", argued_diagram_part_id="0")],
    )
    return document


def test_score_on_plain_arguable():
    document = _document_with_claim_diagram()
    set_score(document, "1", "node", "4", TOPIC_DIAGRAM_ID)
    assert document.diagrams[TOPIC_DIAGRAM_ID].nodes[1].score == "4"


def test_score_on_edge():
    document = _document_with_claim_diagram()
    set_score(document, "0", "edge", "6", TOPIC_DIAGRAM_ID)
    assert document.diagrams[TOPIC_DIAGRAM_ID].edges[0].score == "6"


def test_score_mirrors_to_child_root_claim():
    document = _document_with_claim_diagram()
    set_score(document, "0", "node", "8", TOPIC_DIAGRAM_ID)
    assert document.diagrams[TOPIC_DIAGRAM_ID].nodes[0].score == "8"
    assert document.diagrams["node-0"].nodes[0].score == "8"


def test_root_claim_score_mirrors_to_parent_arguable():
    document = _document_with_claim_diagram()
    set_score(document, "2", "node", "3", "node-0")
    assert document.diagrams["node-0"].nodes[0].score == "3"
    assert document.diagrams[TOPIC_DIAGRAM_ID].nodes[0].score == "3"


def test_non_root_claim_does_not_mirror():
    document = _document_with_claim_diagram()
    set_score(document, "3", "node", "9", "node-0")
    assert document.diagrams["node-0"].nodes[1].score == "9"
    assert document.diagrams[TOPIC_DIAGRAM_ID].nodes[0].score == "-"


def test_invalid_score_is_rejected():
    document = _document_with_claim_diagram()
    with pytest.raises(ValidationError):
        set_score(document, "0", "node", "10", TOPIC_DIAGRAM_ID)


def test_missing_parent_arguable_is_inconsistent():
    document = _document_with_claim_diagram()
    topic = document.diagrams[TOPIC_DIAGRAM_ID]
    topic.nodes = [n for n in topic.nodes if n.id != "0"]
    with pytest.raises(ConsistencyError):
        set_score(document, "2", "node", "5", "node-0")


def test_child_claim_diagram_without_root_claim_is_inconsistent():
    document = _document_with_claim_diagram()
    claim = document.diagrams["node-0"]
    claim.nodes = [n for n in claim.nodes if n.type != "rootClaim"]
    with pytest.raises(ConsistencyError):
        set_score(document, "0", "node", "5", TOPIC_DIAGRAM_ID)
