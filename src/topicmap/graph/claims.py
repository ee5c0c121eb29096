"""Claims - Identity and labelling of claim diagrams.

A claim diagram holds the argument for the score of one arguable (a node or
an edge). Its id is derived from the arguable through ClaimDiagramKey, and
can be parsed back into the same key.
"""

from __future__ import annotations

from dataclasses import dataclass

from topicmap.graph.errors import InvariantViolationError
from topicmap.graph.topic import ROOT_DIAGRAM_ID, ArguableKind, Diagram, find_edge, find_node

_SEPARATOR = "-"


@dataclass(frozen=True)
class ClaimDiagramKey:
    """Tagged key of a claim diagram: the arguable it argues about.

    Attributes:
        kind: Whether the arguable is a node or an edge.
        arguable_id: Id of the arguable.
    """

    kind: ArguableKind
    arguable_id: str

    def __post_init__(self) -> None:
        if not self.arguable_id or _SEPARATOR in self.arguable_id:
            raise InvariantViolationError(f"Invalid arguable id: {self.arguable_id!r}")

    @property
    def diagram_id(self) -> str:
        return f"{self.kind.value}{_SEPARATOR}{self.arguable_id}"

    @classmethod
    def parse(cls, diagram_id: str) -> ClaimDiagramKey:
        """Parse a claim diagram id back into its key.

        Raises:
            InvariantViolationError: If the id is not a claim diagram id.
        """
        kind_value, sep, arguable_id = diagram_id.partition(_SEPARATOR)
        kinds = {kind.value: kind for kind in ArguableKind}
        if not sep or kind_value not in kinds or not arguable_id:
            raise InvariantViolationError(f"'{diagram_id}' is not a claim diagram id")
        return cls(kinds[kind_value], arguable_id)

    def __str__(self) -> str:
        return self.diagram_id


def get_claim_diagram_id(arguable_id: str, kind: ArguableKind) -> str:
    """Return the id of the claim diagram arguing about an arguable."""
    return ClaimDiagramKey(kind, arguable_id).diagram_id


def parse_claim_diagram_id(diagram_id: str) -> ClaimDiagramKey:
    """Inverse of get_claim_diagram_id."""
    return ClaimDiagramKey.parse(diagram_id)


def is_claim_diagram_id(diagram_id: str) -> bool:
    if diagram_id == ROOT_DIAGRAM_ID:
        return False
    try:
        ClaimDiagramKey.parse(diagram_id)
    except InvariantViolationError:
        return False
    return True


def get_implicit_label(arguable_id: str, kind: ArguableKind, diagram: Diagram) -> str:
    """Derive the label of the root claim arguing about an arguable.

    Nodes yield ``"<label>" is important``; edges read child first, e.g.
    ``"Bike lanes" solves "Traffic"``.

    Raises:
        NotFoundError: If the arguable or an edge endpoint is missing.
    """
    if kind == ArguableKind.NODE:
        node = find_node(diagram, arguable_id)
        return f'"{node.data.label}" is important'

    edge = find_edge(diagram, arguable_id)
    parent = find_node(diagram, edge.source)
    child = find_node(diagram, edge.target)
    return f'"{child.data.label}" {edge.label} "{parent.data.label}"'


__all__ = [
    "ArguableKind",
    "ClaimDiagramKey",
    "get_claim_diagram_id",
    "parse_claim_diagram_id",
    "is_claim_diagram_id",
    "get_implicit_label",
]
