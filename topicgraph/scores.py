"""Score propagation.

One score can be displayed in up to three places:

- on the arguable itself,
- on the parent arguable in the topic diagram, when the arguable is a root claim,
- on the root claim of the arguable's own claim diagram, when that diagram exists.

``set_score`` writes all of them; a mirror that cannot be resolved means the
document is corrupt and is reported instead of skipped.
"""
from __future__ import annotations

import logging

from topicgraph.claims import get_claim_diagram_id, parse_claim_diagram_id
from topicgraph.errors import ConsistencyError, NotFound, ValidationError
from topicgraph.graph import find_arguable, is_node
from topicgraph.models.diagram import POSSIBLE_SCORES, TOPIC_DIAGRAM_ID, TopicDocument

logger = logging.getLogger(__name__)


def validate_score(score: str) -> str:
    if score not in POSSIBLE_SCORES:
        raise ValidationError("score", f"'{score}' is not one of {', '.join(POSSIBLE_SCORES)}")
    return score


def set_score(
    document: TopicDocument,
    arguable_id: str,
    arguable_type: str,
    score: str,
    diagram_id: str,
) -> None:
    """Write ``score`` to every location it is mirrored in. Mutates ``document``."""
    validate_score(score)

    diagram = document.diagrams.get(diagram_id)
    if diagram is None:
        raise NotFound("diagram not found", diagram_id, document.diagrams.keys())

    arguable = find_arguable(diagram, arguable_id, arguable_type)
    arguable.score = score

    if is_node(arguable) and arguable.type == "rootClaim":
        try:
            parent_type, parent_id = parse_claim_diagram_id(diagram.id)
            parent_arguable = find_arguable(document.diagrams[TOPIC_DIAGRAM_ID], parent_id, parent_type)
        except (NotFound, KeyError) as exc:
            raise ConsistencyError(
                f"root claim {arguable_id} in {diagram.id} has no parent arguable to mirror its score"
            ) from exc
        parent_arguable.score = score

    child_diagram = document.diagrams.get(get_claim_diagram_id(arguable_id, arguable_type))
    if child_diagram is not None:
        root_claims = [node for node in child_diagram.nodes if node.type == "rootClaim"]
        if len(root_claims) != 1:
            raise ConsistencyError(
                f"claim diagram {child_diagram.id} has {len(root_claims)} root claims, expected 1"
            )
        root_claims[0].score = score

    logger.debug(
        "Set score",
        extra={"arguable_id": arguable_id, "arguable_type": arguable_type, "score": score, "diagram_id": diagram_id},
    )
