import networkx as nx

from topicgraph.layout import compute_positions, count_crossings, layout_visible_components
from topicgraph.models.diagram import TOPIC_DIAGRAM_ID, Diagram, Position, build_edge, build_node
from topicgraph.utils.config import Settings

CONFIG = Settings(node_width=150, node_height=90, rank_sep=100, node_sep=50, crossing_sweeps=8)


def _diagram(nodes, edges):
    return Diagram(
        id=TOPIC_DIAGRAM_ID,
        type="topic",
        nodes=[build_node(node_id, node_type, TOPIC_DIAGRAM_ID) for node_id, node_type in nodes],
        edges=[
            build_edge(str(index), source, target, label, TOPIC_DIAGRAM_ID)
            for index, (source, target, label) in enumerate(edges)
        ],
    )


def test_parent_is_ranked_above_child():
    diagram = _diagram([("0", "problem"), ("1", "solution")], [("1", "0", "solves")])
    positions = compute_positions(diagram.nodes, diagram.edges, CONFIG)
    assert positions["0"] == Position(x=0, y=0)
    assert positions["1"] == Position(x=0, y=190)


def test_siblings_are_packed_and_centered():
    diagram = _diagram(
        [("0", "problem"), ("1", "solution"), ("2", "solution")],
        [("1", "0", "solves"), ("2", "0", "solves")],
    )
    positions = compute_positions(diagram.nodes, diagram.edges, CONFIG)
    assert positions["0"].x == 100
    assert positions["1"].x == 0
    assert positions["2"].x == 200
    assert positions["1"].y == positions["2"].y == 190


def test_type_order_groups_ranks():
    diagram = _diagram(
        [("0", "problem"), ("1", "solution"), ("2", "criterion")],
        [("1", "0", "solves"), ("2", "0", "criterionFor")],
    )
    positions = compute_positions(diagram.nodes, diagram.edges, CONFIG)
    # criteria come before solutions within a rank
    assert positions["2"].x < positions["1"].x


def test_long_edges_keep_rank_by_longest_path():
    diagram = _diagram(
        [("0", "problem"), ("1", "criterion"), ("2", "solution")],
        [("1", "0", "criterionFor"), ("2", "1", "embodies"), ("2", "0", "solves")],
    )
    positions = compute_positions(diagram.nodes, diagram.edges, CONFIG)
    assert positions["0"].y < positions["1"].y < positions["2"].y
    assert set(positions) == {"0", "1", "2"}


def test_cycles_are_laid_out():
    diagram = _diagram(
        [("0", "problem"), ("1", "problem"), ("2", "problem")],
        [("1", "0", "causes"), ("2", "1", "causes"), ("0", "2", "causes")],
    )
    positions = compute_positions(diagram.nodes, diagram.edges, CONFIG)
    assert len({p.y for p in positions.values()}) == 3


def test_layout_is_deterministic():
    diagram = _diagram(
        [("0", "problem"), ("1", "solution"), ("2", "criterion"), ("3", "solution"), ("4", "effect")],
        [
            ("1", "0", "solves"),
            ("2", "0", "criterionFor"),
            ("3", "0", "solves"),
            ("1", "2", "embodies"),
            ("4", "1", "creates"),
        ],
    )
    first = compute_positions(diagram.nodes, diagram.edges, CONFIG)
    second = compute_positions(diagram.nodes, diagram.edges, CONFIG)
    assert first == second


def test_node_width_overrides_default():
    diagram = _diagram([("0", "problem"), ("1", "solution"), ("2", "solution")], [("1", "0", "solves"), ("2", "0", "solves")])
    diagram.nodes[1].width = 250
    positions = compute_positions(diagram.nodes, diagram.edges, CONFIG)
    assert positions["2"].x == 300


def test_empty_diagram_has_no_positions():
    assert compute_positions([], [], CONFIG) == {}


def test_hidden_nodes_keep_previous_position():
    diagram = _diagram([("0", "problem"), ("1", "criterion")], [("1", "0", "criterionFor")])
    laid_out = layout_visible_components(diagram, CONFIG)
    previous = laid_out.nodes[1].position
    assert previous is not None

    laid_out.nodes[1].showing = False
    relaid = layout_visible_components(laid_out, CONFIG)
    assert relaid.nodes[1].position == previous
    assert relaid.nodes[0].position == Position(x=0, y=0)


def test_layout_returns_a_copy():
    diagram = _diagram([("0", "problem")], [])
    laid_out = layout_visible_components(diagram, CONFIG)
    assert laid_out.nodes[0].position is not None
    assert diagram.nodes[0].position is None


def test_count_crossings():
    g = nx.DiGraph([("a", "d"), ("b", "c")])
    assert count_crossings(g, [["a", "b"], ["c", "d"]]) == 1
    assert count_crossings(g, [["a", "b"], ["d", "c"]]) == 0
