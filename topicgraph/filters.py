"""Filter options narrowing which part of the topic diagram is shown."""
from __future__ import annotations

import logging
from typing import Annotated, List, Literal, Optional, Set, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from topicgraph.graph import children, find_node, parents
from topicgraph.models.diagram import Diagram, Node

logger = logging.getLogger(__name__)


class _Options(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NoFilter(_Options):
    type: Literal["none"] = "none"


class ProblemFilter(_Options):
    type: Literal["problem"] = "problem"
    central_problem_id: str
    detail: Literal["all", "connectedToCriteria", "none"] = "all"
    # empty means every solution / criterion of the central problem
    solutions: List[str] = Field(default_factory=list)
    criteria: List[str] = Field(default_factory=list)


class QuestionFilter(_Options):
    type: Literal["question"] = "question"
    central_question_id: str


FilterOptions = Annotated[Union[NoFilter, ProblemFilter, QuestionFilter], Field(discriminator="type")]

_adapter: TypeAdapter = TypeAdapter(FilterOptions)


def parse_filter_options(data) -> Union[NoFilter, ProblemFilter, QuestionFilter]:
    return _adapter.validate_python(data)


def _descendants(node: Node, diagram: Diagram) -> Set[str]:
    seen: Set[str] = set()
    stack = [node]
    while stack:
        current = stack.pop()
        for child in children(current, diagram):
            if child.id not in seen:
                seen.add(child.id)
                stack.append(child)
    return seen


def _problem_node_ids(diagram: Diagram, options: ProblemFilter) -> Set[str]:
    problem = find_node(options.central_problem_id, diagram.nodes)
    problem_children = children(problem, diagram)

    solutions = [n for n in problem_children if n.type == "solution"]
    if options.solutions:
        solutions = [n for n in solutions if n.id in options.solutions]
    criteria = [n for n in problem_children if n.type == "criterion"]
    if options.criteria:
        criteria = [n for n in criteria if n.id in options.criteria]

    kept = {problem.id}
    for solution in solutions:
        kept.add(solution.id)
        # components and effects hanging off the solution
        kept |= {
            node_id for node_id in _descendants(solution, diagram) if find_node(node_id, diagram.nodes).type != "criterion"
        }

    if options.detail in ("all", "connectedToCriteria"):
        kept |= {n.id for n in criteria}
    if options.detail == "all":
        kept |= {n.id for n in problem_children if n.type not in ("solution", "criterion")}
        kept |= {n.id for n in parents(problem, diagram)}
    return kept


def _question_node_ids(diagram: Diagram, options: QuestionFilter) -> Set[str]:
    question = find_node(options.central_question_id, diagram.nodes)
    kept = {question.id} | _descendants(question, diagram)
    kept |= {n.id for n in parents(question, diagram)}
    return kept


def apply_filter(diagram: Diagram, options: Optional[Union[NoFilter, ProblemFilter, QuestionFilter]]) -> Diagram:
    """Return a copy of ``diagram`` holding only the nodes the filter keeps.

    Edges survive when both of their endpoints do. Raises ``NotFound`` when the
    central node doesn't exist.
    """
    filtered = diagram.model_copy(deep=True)
    if options is None or options.type == "none":
        return filtered

    if options.type == "problem":
        kept = _problem_node_ids(diagram, options)
    elif options.type == "question":
        kept = _question_node_ids(diagram, options)
    else:
        raise ValueError(f"Unsupported filter type '{options.type}'")

    filtered.nodes = [node for node in filtered.nodes if node.id in kept]
    filtered.edges = [edge for edge in filtered.edges if edge.source in kept and edge.target in kept]
    logger.debug(
        "Filtered diagram",
        extra={"filter_type": options.type, "kept_nodes": len(filtered.nodes), "kept_edges": len(filtered.edges)},
    )
    return filtered
