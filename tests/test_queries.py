from topicgraph.engine import GraphEngine
from topicgraph.queries import (
    claim_diagrams_with_explicit_claims,
    criteria_table,
    criteria_table_problem_nodes,
    criterion_solution_edges,
    node_children,
    node_parents,
)


def _sample_engine():
    """Problem "0" with criteria 1, 2 and solutions 3, 4; solution 4 no longer embodies criterion 2."""
    engine = GraphEngine()
    engine.add_node("0", "child", "criterion")
    engine.add_node("0", "child", "criterion")
    engine.add_node("0", "child", "solution")
    engine.add_node("0", "child", "solution")
    edge = next(e for e in engine.topic_diagram.edges if (e.source, e.target) == ("4", "2"))
    engine.delete_edge(edge.id)
    return engine


def test_children_and_parents():
    engine = _sample_engine()
    assert [n.id for n in node_children(engine.document, "0")] == ["1", "2", "3", "4"]
    assert {n.id for n in node_parents(engine.document, "3")} == {"0", "1", "2"}


def test_missing_ids_give_empty_results():
    engine = _sample_engine()
    assert node_children(engine.document, "99") == []
    assert node_parents(engine.document, None) == []
    assert criterion_solution_edges(engine.document, "99") == []
    assert criteria_table(engine.document, "99") is None


def test_problems_with_criteria():
    engine = _sample_engine()
    engine.add_node("0", "parent", "problem")
    assert [n.id for n in criteria_table_problem_nodes(engine.document)] == ["0"]


def test_criterion_solution_edges():
    engine = _sample_engine()
    edges = criterion_solution_edges(engine.document, "0")
    assert {(e.source, e.target) for e in edges} == {("3", "1"), ("3", "2"), ("4", "1")}
    assert all(e.label == "embodies" for e in edges)


def test_criteria_table_cells():
    engine = _sample_engine()
    engine.set_node_label("3", "Trains")
    engine.set_node_label("4", "Bikes")
    table = criteria_table(engine.document, "0")

    assert [c.id for c in table.criteria] == ["1", "2"]
    assert [s.id for s in table.solutions] == ["3", "4"]
    assert table.cells[("1", "3")] is not None
    assert table.cells[("2", "4")] is None
    assert table.rows()[1]["cells"]["4"] is None
    assert table.rows()[1]["cells"]["3"] == table.cells[("2", "3")]
    assert table.columns() == [{"id": "3", "label": "Trains"}, {"id": "4", "label": "Bikes"}]


def test_criteria_table_of_non_problem():
    engine = _sample_engine()
    assert criteria_table(engine.document, "3") is None


def test_claim_diagrams_with_explicit_claims():
    engine = GraphEngine()
    engine.set_node_label("0", "Cars are slow")
    engine.view_or_create_claim_diagram("0", "node")
    assert claim_diagrams_with_explicit_claims(engine.document) == []

    engine.add_node(engine.active_diagram.nodes[0].id, "child", "support")
    assert claim_diagrams_with_explicit_claims(engine.document) == [("0", '"Cars are slow" is important')]


def test_criteria_table_keeps_solutions_sharing_a_label():
    engine = GraphEngine()
    engine.add_node("0", "child", "criterion")
    engine.add_node("0", "child", "solution")
    engine.add_node("0", "child", "solution")
    engine.set_node_label("2", "criterion")

    rows = criteria_table(engine.document, "0").rows()
    assert rows[0]["criterion"] == "new node"
    assert set(rows[0]["cells"]) == {"2", "3"}
    assert all(edge_id is not None for edge_id in rows[0]["cells"].values())
