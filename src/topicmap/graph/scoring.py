"""ScoreSynchronizer - Keep every copy of a score equal.

One score can live in up to three places:
- on the arguable itself
- on the arguable a rootClaim argues for (when the arguable is a rootClaim)
- on the rootClaim of the arguable's own claim diagram (if it exists)

``set_score`` resolves all of them before writing any, inside one
transaction, so either every copy changes or none does.
"""

from __future__ import annotations

import structlog

from topicmap.graph.claims import get_claim_diagram_id, parse_claim_diagram_id
from topicmap.graph.mutations import MutationEntry
from topicmap.graph.schema import NodeType
from topicmap.graph.scores import Score
from topicmap.graph.store import TopicStore
from topicmap.graph.topic import ArguableKind, Scorable, Topic, find_scorable

logger = structlog.get_logger(__name__)


def resolve_score_mirrors(topic: Topic, arguable_id: str, kind: ArguableKind) -> list[Scorable]:
    """Collect every node or edge holding a copy of an arguable's score.

    The arguable is looked up in the active diagram.

    Returns:
        The arguable first, then its mirrors.

    Raises:
        NotFoundError: If the arguable, or the arguable a rootClaim argues
            for, cannot be found.
        InvariantViolationError: If a rootClaim sits outside a claim diagram
            or a claim diagram does not hold exactly one rootClaim.
    """
    active = topic.active_diagram
    arguable = find_scorable(active, arguable_id, kind)
    targets: list[Scorable] = [arguable]

    if kind == ArguableKind.NODE and arguable.type == NodeType.ROOT_CLAIM:
        key = parse_claim_diagram_id(active.id)
        # Claims nest one level: the argued-for arguable lives in the root diagram.
        targets.append(find_scorable(topic.root_diagram, key.arguable_id, key.kind))

    claim_diagram_id = get_claim_diagram_id(arguable_id, kind)
    if topic.has_diagram(claim_diagram_id):
        targets.append(topic.get_diagram(claim_diagram_id).root_claim())

    return targets


class ScoreSynchronizer:
    """Transactional score writes across all mirrors.

    Args:
        store: Store holding the topic being edited.
    """

    def __init__(self, store: TopicStore) -> None:
        self._store = store

    def set_score(
        self, arguable_id: str, kind: ArguableKind | str, score: Score | str | int
    ) -> MutationEntry | None:
        """Set the score of an arguable of the active diagram and its mirrors.

        Args:
            arguable_id: Node or edge id.
            kind: Whether the id names a node or an edge.
            score: New score, or its string value.

        Returns:
            The committed MutationEntry.

        Raises:
            ValueError: If the score is not a possible score.
            NotFoundError: If the arguable or a mirror cannot be found.
            InvariantViolationError: If the claim structure is inconsistent.
        """
        kind = ArguableKind(kind)
        score = Score.parse(score)

        with self._store.transaction("set_score", arguable_id) as pending:
            targets = resolve_score_mirrors(pending.topic, arguable_id, kind)
            pending.before_state = {"score": targets[0].data.score.value}
            for target in targets:
                target.data.score = score
            pending.after_state = {
                "score": score.value,
                "kind": kind.value,
                "mirrors": len(targets) - 1,
            }

        logger.info(
            "score_set",
            arguable_id=arguable_id,
            kind=kind.value,
            score=score.value,
            mirrors=len(targets) - 1,
        )
        return self._store.last_entry()


__all__ = ["ScoreSynchronizer", "resolve_score_mirrors"]
