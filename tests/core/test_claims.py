"""Tests for claim diagram ids and implicit labels."""

from __future__ import annotations

import pytest

from topicmap.graph.claims import (
    ClaimDiagramKey,
    get_claim_diagram_id,
    get_implicit_label,
    is_claim_diagram_id,
    parse_claim_diagram_id,
)
from topicmap.graph.errors import InvariantViolationError, NotFoundError
from topicmap.graph.GraphNode import build_node
from topicmap.graph.relations import build_edge
from topicmap.graph.schema import NodeType
from topicmap.graph.topic import ROOT_DIAGRAM_ID, ArguableKind, Diagram, DiagramKind


def build_labelled_diagram() -> Diagram:
    diagram = Diagram(id=ROOT_DIAGRAM_ID, kind=DiagramKind.PROBLEM)
    diagram.nodes = [
        build_node("0", NodeType.PROBLEM, ROOT_DIAGRAM_ID, label="Traffic"),
        build_node("1", NodeType.SOLUTION, ROOT_DIAGRAM_ID, label="Bike lanes"),
    ]
    diagram.edges = [build_edge("0", "0", "1", "solves")]
    return diagram


class TestClaimDiagramId:
    """Tests for deriving and parsing claim diagram ids."""

    def test_node_and_edge_ids_differ(self):
        assert get_claim_diagram_id("3", ArguableKind.NODE) == "node-3"
        assert get_claim_diagram_id("3", ArguableKind.EDGE) == "edge-3"

    def test_derivation_is_deterministic(self):
        assert get_claim_diagram_id("12", ArguableKind.EDGE) == get_claim_diagram_id(
            "12", ArguableKind.EDGE
        )

    @pytest.mark.parametrize("kind", list(ArguableKind))
    def test_parse_inverts_derivation(self, kind):
        key = parse_claim_diagram_id(get_claim_diagram_id("42", kind))

        assert key == ClaimDiagramKey(kind, "42")

    @pytest.mark.parametrize("diagram_id", ["root", "node", "node-", "claim-3", ""])
    def test_parse_rejects_non_claim_ids(self, diagram_id):
        with pytest.raises(InvariantViolationError):
            parse_claim_diagram_id(diagram_id)

    def test_key_rejects_separator_in_arguable_id(self):
        with pytest.raises(InvariantViolationError):
            ClaimDiagramKey(ArguableKind.NODE, "1-2")

    def test_is_claim_diagram_id(self):
        assert is_claim_diagram_id("edge-0")
        assert not is_claim_diagram_id(ROOT_DIAGRAM_ID)
        assert not is_claim_diagram_id("bogus")

    def test_key_str_is_diagram_id(self):
        assert str(ClaimDiagramKey(ArguableKind.NODE, "7")) == "node-7"


class TestImplicitLabel:
    """Tests for the label seeded into a new root claim."""

    def test_node_label(self):
        diagram = build_labelled_diagram()

        label = get_implicit_label("1", ArguableKind.NODE, diagram)

        assert label == '"Bike lanes" is important'

    def test_edge_label_reads_child_first(self):
        diagram = build_labelled_diagram()

        label = get_implicit_label("0", ArguableKind.EDGE, diagram)

        assert label == '"Bike lanes" solves "Traffic"'

    def test_missing_arguable_raises(self):
        diagram = build_labelled_diagram()

        with pytest.raises(NotFoundError):
            get_implicit_label("9", ArguableKind.EDGE, diagram)
