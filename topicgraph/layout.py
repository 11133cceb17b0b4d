"""Layered layout of a diagram's visible subgraph.

Parents are ranked above their children: cycles are broken by reversing DFS
back edges, ranks come from the longest path, long edges are split by dummy
nodes, and barycenter sweeps reduce crossings before coordinates are packed.
Every step iterates in insertion order so the same diagram always lays out the
same way.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Sequence, Set, Tuple

import networkx as nx

from topicgraph.models.diagram import Diagram, Edge, Node, Position
from topicgraph.ontology import NODE_TYPES
from topicgraph.utils.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

_DUMMY_PREFIX = "__dummy__"


def _build_graph(nodes: Sequence[Node], edges: Sequence[Edge]) -> nx.DiGraph:
    g = nx.DiGraph()
    for index, node in enumerate(nodes):
        g.add_node(node.id, type=node.type, index=index)
    node_ids = set(g.nodes)
    for edge in edges:
        if edge.source not in node_ids or edge.target not in node_ids or edge.source == edge.target:
            continue
        # edges point child -> parent; rank parents first
        g.add_edge(edge.target, edge.source)
    return g


def _break_cycles(g: nx.DiGraph) -> nx.DiGraph:
    """Return an acyclic copy of ``g`` with DFS back edges reversed."""
    dag = nx.DiGraph()
    dag.add_nodes_from(g.nodes(data=True))

    state: Dict[str, int] = {}  # 1 = on stack, 2 = finished
    reversed_edges: List[Tuple[str, str]] = []
    for root in g.nodes:
        if root in state:
            continue
        state[root] = 1
        stack = [(root, iter(g.successors(root)))]
        while stack:
            current, successors = stack[-1]
            advanced = False
            for successor in successors:
                successor_state = state.get(successor)
                if successor_state == 1:
                    reversed_edges.append((current, successor))
                    continue
                if successor_state is None:
                    state[successor] = 1
                    stack.append((successor, iter(g.successors(successor))))
                    advanced = True
                    break
            if not advanced:
                state[current] = 2
                stack.pop()

    reversed_set = set(reversed_edges)
    for u, v in g.edges:
        if (u, v) in reversed_set:
            dag.add_edge(v, u)
        else:
            dag.add_edge(u, v)

    if reversed_edges:
        logger.debug("Reversed edges to break cycles", extra={"reversed_edges": reversed_edges})
    return dag


def _assign_ranks(dag: nx.DiGraph) -> Dict[str, int]:
    ranks: Dict[str, int] = {}
    for node in nx.lexicographical_topological_sort(dag, key=lambda n: dag.nodes[n]["index"]):
        predecessor_ranks = [ranks[p] + 1 for p in dag.predecessors(node)]
        ranks[node] = max(predecessor_ranks, default=0)
    return ranks


def _split_long_edges(dag: nx.DiGraph, ranks: Dict[str, int]) -> nx.DiGraph:
    """Insert dummy nodes so every edge joins adjacent ranks."""
    layered = nx.DiGraph()
    layered.add_nodes_from(dag.nodes(data=True))
    for u, v in dag.edges:
        span = ranks[v] - ranks[u]
        if span <= 1:
            layered.add_edge(u, v)
            continue
        previous = u
        for step in range(1, span):
            dummy = f"{_DUMMY_PREFIX}:{u}:{v}:{step}"
            layered.add_node(dummy, dummy=True, index=dag.nodes[u]["index"])
            ranks[dummy] = ranks[u] + step
            layered.add_edge(previous, dummy)
            previous = dummy
        layered.add_edge(previous, v)
    return layered


def _type_order(g: nx.DiGraph, node: str) -> Tuple[int, int]:
    data = g.nodes[node]
    node_type = data.get("type")
    type_index = NODE_TYPES.index(node_type) if node_type in NODE_TYPES else len(NODE_TYPES)
    return type_index, data["index"]


def _barycenter(neighbors: List[str], positions: Dict[str, int]) -> float | None:
    placed = [positions[n] for n in neighbors if n in positions]
    if not placed:
        return None
    return sum(placed) / len(placed)


def _reorder(layer: List[str], neighbors_of, positions: Dict[str, int]) -> List[str]:
    keyed = []
    for current_index, node in enumerate(layer):
        barycenter = _barycenter(neighbors_of(node), positions)
        # nodes without neighbors in the fixed layer keep their slot
        keyed.append((barycenter if barycenter is not None else float(current_index), current_index, node))
    keyed.sort(key=lambda item: (item[0], item[1]))
    return [node for _, _, node in keyed]


def _positions(layers: List[List[str]]) -> Dict[str, int]:
    return {node: index for layer in layers for index, node in enumerate(layer)}


def count_crossings(layered: nx.DiGraph, layers: List[List[str]]) -> int:
    crossings = 0
    for upper, lower in zip(layers, layers[1:]):
        upper_pos = {node: i for i, node in enumerate(upper)}
        lower_pos = {node: i for i, node in enumerate(lower)}
        segments = [
            (upper_pos[u], lower_pos[v]) for u in upper for v in layered.successors(u) if v in lower_pos
        ]
        for i, (a_top, a_bottom) in enumerate(segments):
            for b_top, b_bottom in segments[i + 1 :]:
                if (a_top - b_top) * (a_bottom - b_bottom) < 0:
                    crossings += 1
    return crossings


def _order_layers(layered: nx.DiGraph, ranks: Dict[str, int], sweeps: int) -> List[List[str]]:
    depth = max(ranks.values(), default=-1) + 1
    layers: List[List[str]] = [[] for _ in range(depth)]
    for node in sorted(layered.nodes, key=lambda n: _type_order(layered, n)):
        layers[ranks[node]].append(node)

    # seed each rank below the first from its parents
    for rank in range(1, depth):
        layers[rank] = _reorder(layers[rank], lambda n: list(layered.predecessors(n)), _positions(layers[rank - 1 : rank]))

    best = [list(layer) for layer in layers]
    best_crossings = count_crossings(layered, best)
    for sweep in range(sweeps):
        if best_crossings == 0:
            break
        if sweep % 2 == 0:
            for rank in range(1, depth):
                fixed = _positions([layers[rank - 1]])
                layers[rank] = _reorder(layers[rank], lambda n: list(layered.predecessors(n)), fixed)
        else:
            for rank in range(depth - 2, -1, -1):
                fixed = _positions([layers[rank + 1]])
                layers[rank] = _reorder(layers[rank], lambda n: list(layered.successors(n)), fixed)
        crossings = count_crossings(layered, layers)
        if crossings < best_crossings:
            best = [list(layer) for layer in layers]
            best_crossings = crossings
    return best


def compute_positions(
    nodes: Sequence[Node], edges: Sequence[Edge], config: Settings | None = None
) -> Dict[str, Position]:
    """Top-left anchored positions for ``nodes``, keyed by node id."""
    config = config or default_settings
    if not nodes:
        return {}

    g = _build_graph(nodes, edges)
    dag = _break_cycles(g)
    ranks = _assign_ranks(dag)
    layered = _split_long_edges(dag, ranks)
    layers = _order_layers(layered, ranks, config.crossing_sweeps)

    widths: Dict[str, float] = {node.id: node.width or config.node_width for node in nodes}
    height = config.node_height

    def width_of(node_id: str) -> float:
        return widths.get(node_id, 0.0)

    layer_widths = [
        sum(width_of(n) for n in layer) + config.node_sep * max(len(layer) - 1, 0) for layer in layers
    ]
    widest = max(layer_widths, default=0.0)

    positions: Dict[str, Position] = {}
    for rank, layer in enumerate(layers):
        center_y = rank * (height + config.rank_sep) + height / 2
        cursor = (widest - layer_widths[rank]) / 2
        for node_id in layer:
            width = width_of(node_id)
            center_x = cursor + width / 2
            cursor += width + config.node_sep
            if layered.nodes[node_id].get("dummy"):
                continue
            # layout coordinates are center-anchored
            positions[node_id] = Position(x=center_x - width / 2, y=center_y - height / 2)
    return positions


def visible_subgraph(diagram: Diagram) -> Tuple[List[Node], List[Edge]]:
    visible_nodes = [node for node in diagram.nodes if node.showing]
    visible_ids: Set[str] = {node.id for node in visible_nodes}
    visible_edges = [edge for edge in diagram.edges if edge.source in visible_ids and edge.target in visible_ids]
    return visible_nodes, visible_edges


def layout_visible_components(diagram: Diagram, config: Settings | None = None) -> Diagram:
    """Return a copy of ``diagram`` with its visible nodes positioned.

    Hidden nodes keep whatever position they had and take no part in ranking.
    """
    laid_out = diagram.model_copy(deep=True)
    visible_nodes, visible_edges = visible_subgraph(laid_out)
    positions = compute_positions(visible_nodes, visible_edges, config)
    for node in visible_nodes:
        node.position = positions[node.id]

    logger.debug(
        "Laid out diagram",
        extra={"diagram_id": diagram.id, "visible_nodes": len(visible_nodes), "visible_edges": len(visible_edges)},
    )
    return laid_out
