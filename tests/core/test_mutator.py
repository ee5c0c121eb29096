"""Tests for structural edits through DiagramMutator."""

from __future__ import annotations

import pytest

from topicmap.graph.errors import InvariantViolationError, NotFoundError
from topicmap.graph.ids import IdAllocator
from topicmap.graph.layout import Orientation
from topicmap.graph.schema import (
    EMBODIES,
    FALLBACK_RELATION_NAME,
    UNRESTRICTED,
    NodeType,
    RelationDirection,
)
from topicmap.graph.scores import Score
from topicmap.graph.topic import ArguableKind, new_topic
from tests.core.topic_helpers import (
    PROBLEM_ID,
    RecordingLayout,
    add_child,
    all_ids,
    build_editor,
    edge_triples,
)


class TestIdAllocation:
    """Tests for topic-wide id counters."""

    def test_new_topic_counters(self):
        topic = new_topic()

        assert [node.id for node in topic.root_diagram.nodes] == [PROBLEM_ID]
        assert topic.next_node_id == 1
        assert topic.next_edge_id == 0

    def test_allocator_returns_decimal_strings(self):
        topic = new_topic()
        ids = IdAllocator(topic)

        assert [ids.next_node_id(), ids.next_node_id()] == ["1", "2"]
        assert ids.next_edge_id() == "0"
        assert (topic.next_node_id, topic.next_edge_id) == (3, 1)

    def test_ids_unique_across_diagrams(self):
        store, mutator, scores = build_editor()
        solution_id = add_child(mutator, PROBLEM_ID, NodeType.SOLUTION, "solves")
        add_child(mutator, PROBLEM_ID, NodeType.CRITERION, "criterion for")
        mutator.set_or_create_active_diagram(solution_id, ArguableKind.NODE)
        root_claim = store.topic.active_diagram.root_claim()
        add_child(mutator, root_claim.id, NodeType.SUPPORT, "supports")
        mutator.set_active_diagram("root")
        mutator.set_or_create_active_diagram("0", ArguableKind.EDGE)

        node_ids, edge_ids = all_ids(store.topic)

        assert len(node_ids) == len(set(node_ids))
        assert len(edge_ids) == len(set(edge_ids))


class TestAddNode:
    """Tests for DiagramMutator.add_node()."""

    def test_solution_then_criterion_links_once(self, editor):
        store, mutator, _ = editor

        solution_entry = mutator.add_node(
            PROBLEM_ID, RelationDirection.CHILD, NodeType.SOLUTION, "solves"
        )
        criterion_entry = mutator.add_node(
            PROBLEM_ID, RelationDirection.CHILD, NodeType.CRITERION, "criterion for"
        )

        solution_id = solution_entry.after_state["node_id"]
        criterion_id = criterion_entry.after_state["node_id"]
        assert edge_triples(store.topic.root_diagram) == {
            (PROBLEM_ID, solution_id, "solves"),
            (PROBLEM_ID, criterion_id, "criterion for"),
            (criterion_id, solution_id, EMBODIES),
        }
        assert len(criterion_entry.after_state["cross_link_edge_ids"]) == 1

    def test_new_solution_links_to_every_criterion(self, editor):
        store, mutator, _ = editor
        first = add_child(mutator, PROBLEM_ID, NodeType.CRITERION, "criterion for")
        second = add_child(mutator, PROBLEM_ID, NodeType.CRITERION, "criterion for")

        solution_id = add_child(mutator, PROBLEM_ID, NodeType.SOLUTION, "solves")

        embodies = {
            (source, target)
            for source, target, label in edge_triples(store.topic.root_diagram)
            if label == EMBODIES
        }
        assert embodies == {(first, solution_id), (second, solution_id)}

    def test_cross_links_only_under_the_same_problem(self, editor):
        store, mutator, _ = editor
        add_child(mutator, PROBLEM_ID, NodeType.SOLUTION, "solves")
        sub_problem = add_child(mutator, PROBLEM_ID, NodeType.PROBLEM, "causes")

        add_child(mutator, sub_problem, NodeType.CRITERION, "criterion for")

        labels = [edge.label for edge in store.topic.root_diagram.edges]
        assert EMBODIES not in labels

    def test_add_as_parent_points_edge_at_existing_node(self, editor):
        store, mutator, _ = editor
        solution_id = add_child(mutator, PROBLEM_ID, NodeType.SOLUTION, "solves")

        entry = mutator.add_node(solution_id, RelationDirection.PARENT, NodeType.EFFECT, "creates")

        effect_id = entry.after_state["node_id"]
        assert (effect_id, solution_id, "creates") in edge_triples(store.topic.root_diagram)
        assert entry.after_state["cross_link_edge_ids"] == []

    def test_solution_added_as_parent_links_to_criteria(self, editor):
        store, mutator, _ = editor
        criterion_id = add_child(mutator, PROBLEM_ID, NodeType.CRITERION, "criterion for")

        entry = mutator.add_node(
            PROBLEM_ID, RelationDirection.PARENT, NodeType.SOLUTION, FALLBACK_RELATION_NAME
        )

        solution_id = entry.after_state["node_id"]
        triples = edge_triples(store.topic.root_diagram)
        assert (solution_id, PROBLEM_ID, FALLBACK_RELATION_NAME) in triples
        assert (criterion_id, solution_id, EMBODIES) in triples
        assert len(entry.after_state["cross_link_edge_ids"]) == 1

    def test_accepts_string_values(self, editor):
        store, mutator, _ = editor

        entry = mutator.add_node(PROBLEM_ID, "child", "effect", "causes")

        new_node = store.topic.root_diagram.get_node(entry.after_state["node_id"])
        assert new_node.type == NodeType.EFFECT
        assert new_node.diagram_id == "root"
        assert new_node.data.show_criteria is None

    def test_new_problem_starts_with_criteria_hidden(self, editor):
        store, mutator, _ = editor

        problem_id = add_child(mutator, PROBLEM_ID, NodeType.PROBLEM, "causes")

        assert store.topic.root_diagram.get_node(problem_id).data.show_criteria is False

    def test_unknown_source_leaves_topic_unchanged(self, editor):
        store, mutator, _ = editor
        before = store.snapshot()

        with pytest.raises(NotFoundError):
            mutator.add_node("99", RelationDirection.CHILD, NodeType.SOLUTION, "solves")

        assert store.topic == before
        assert len(store.mutation_log) == 0

    def test_records_mutation(self, editor):
        store, mutator, _ = editor

        entry = mutator.add_node(PROBLEM_ID, RelationDirection.CHILD, NodeType.SOLUTION, "solves")

        assert entry.operation == "add_node"
        assert entry.target_id == PROBLEM_ID
        assert entry.relayout is True
        assert entry.after_state["edge_id"] == "0"
        assert store.mutation_log.last() is entry


class TestConnectNodes:
    """Tests for DiagramMutator.connect_nodes()."""

    def test_licensed_connection_uses_schema_name(self, editor):
        store, mutator, _ = editor
        effect_id = add_child(mutator, PROBLEM_ID, NodeType.EFFECT, "causes")
        solution_id = add_child(mutator, PROBLEM_ID, NodeType.SOLUTION, "solves")

        entry = mutator.connect_nodes(effect_id, solution_id)

        assert entry is not None
        assert (effect_id, solution_id, "creates") in edge_triples(store.topic.root_diagram)

    def test_unlicensed_connection_is_noop_when_restricted(self, editor):
        store, mutator, _ = editor
        solution_id = add_child(mutator, PROBLEM_ID, NodeType.SOLUTION, "solves")
        effect_id = add_child(mutator, PROBLEM_ID, NodeType.EFFECT, "causes")
        before = store.snapshot()
        log_size = len(store.mutation_log)

        assert mutator.connect_nodes(solution_id, effect_id) is None

        assert store.topic == before
        assert len(store.mutation_log) == log_size

    def test_unlicensed_connection_uses_fallback_when_unrestricted(self, editor):
        store, mutator, _ = editor
        solution_id = add_child(mutator, PROBLEM_ID, NodeType.SOLUTION, "solves")
        effect_id = add_child(mutator, PROBLEM_ID, NodeType.EFFECT, "causes")
        edge_count = len(store.topic.root_diagram.edges)

        entry = mutator.connect_nodes(solution_id, effect_id, mode=UNRESTRICTED)

        assert entry is not None
        assert len(store.topic.root_diagram.edges) == edge_count + 1
        new_edge = store.topic.root_diagram.get_edge(entry.after_state["edge_id"])
        assert new_edge.label == FALLBACK_RELATION_NAME
        assert new_edge.is_fallback

    def test_duplicate_connection_is_noop(self, editor):
        store, mutator, _ = editor
        solution_id = add_child(mutator, PROBLEM_ID, NodeType.SOLUTION, "solves")
        next_edge_id = store.topic.next_edge_id

        assert mutator.connect_nodes(PROBLEM_ID, solution_id) is None
        assert store.topic.next_edge_id == next_edge_id

    def test_cycle_is_noop_in_both_modes(self, editor):
        store, mutator, _ = editor
        solution_id = add_child(mutator, PROBLEM_ID, NodeType.SOLUTION, "solves")

        assert mutator.connect_nodes(solution_id, PROBLEM_ID) is None
        assert mutator.connect_nodes(solution_id, PROBLEM_ID, mode=UNRESTRICTED) is None

    def test_unknown_node_raises(self, editor):
        _, mutator, _ = editor

        with pytest.raises(NotFoundError):
            mutator.connect_nodes(PROBLEM_ID, "42")

    def test_ignored_connection_does_not_notify(self, editor):
        store, mutator, _ = editor
        solution_id = add_child(mutator, PROBLEM_ID, NodeType.SOLUTION, "solves")
        seen = []
        store.subscribe(lambda entry, topic: seen.append(entry.operation))

        mutator.connect_nodes(solution_id, PROBLEM_ID)

        assert seen == []


class TestReconnectEdge:
    """Tests for DiagramMutator.reconnect_edge()."""

    def test_reconnect_rederives_label_and_keeps_score(self, editor):
        store, mutator, scores = editor
        solution_id = add_child(mutator, PROBLEM_ID, NodeType.SOLUTION, "solves")
        effect_id = add_child(mutator, PROBLEM_ID, NodeType.EFFECT, "causes")
        scores.set_score("0", ArguableKind.EDGE, "6")

        entry = mutator.reconnect_edge("0", effect_id, solution_id)

        assert entry is not None
        edge = store.topic.root_diagram.get_edge("0")
        assert (edge.source, edge.target, edge.label) == (effect_id, solution_id, "creates")
        assert edge.data.score == Score.SIX
        assert entry.before_state == {
            "source": PROBLEM_ID,
            "target": solution_id,
            "relation": "solves",
        }

    def test_invalid_reconnect_is_noop(self, editor):
        store, mutator, _ = editor
        solution_id = add_child(mutator, PROBLEM_ID, NodeType.SOLUTION, "solves")
        before = store.snapshot()

        assert mutator.reconnect_edge("0", solution_id, PROBLEM_ID) is None
        assert store.topic == before

    def test_reconnect_onto_existing_edge_is_noop(self, editor):
        store, mutator, _ = editor
        first = add_child(mutator, PROBLEM_ID, NodeType.SOLUTION, "solves")
        add_child(mutator, PROBLEM_ID, NodeType.SOLUTION, "solves")
        before = store.snapshot()

        assert mutator.reconnect_edge("1", PROBLEM_ID, first, mode=UNRESTRICTED) is None
        assert store.topic == before

    def test_reconnect_into_self_loop_is_noop(self, editor):
        store, mutator, _ = editor
        solution_id = add_child(mutator, PROBLEM_ID, NodeType.SOLUTION, "solves")
        before = store.snapshot()

        assert mutator.reconnect_edge("0", solution_id, solution_id, mode=UNRESTRICTED) is None
        assert store.topic == before

    def test_unrestricted_reconnect_uses_fallback_and_keeps_id(self, editor):
        store, mutator, _ = editor
        solution_id = add_child(mutator, PROBLEM_ID, NodeType.SOLUTION, "solves")
        effect_id = add_child(mutator, PROBLEM_ID, NodeType.EFFECT, "causes")
        edge_count = len(store.topic.root_diagram.edges)

        assert mutator.reconnect_edge("1", solution_id, effect_id) is None
        entry = mutator.reconnect_edge("1", solution_id, effect_id, mode=UNRESTRICTED)

        assert entry.after_state["relation"] == FALLBACK_RELATION_NAME
        edge = store.topic.root_diagram.get_edge("1")
        assert (edge.source, edge.target, edge.label) == (
            solution_id,
            effect_id,
            FALLBACK_RELATION_NAME,
        )
        assert len(store.topic.root_diagram.edges) == edge_count

    def test_unknown_edge_raises(self, editor):
        _, mutator, _ = editor

        with pytest.raises(NotFoundError):
            mutator.reconnect_edge("5", PROBLEM_ID, PROBLEM_ID)


class TestNodeData:
    """Tests for labels and criteria visibility."""

    def test_set_label_does_not_relayout(self, editor):
        store, mutator, _ = editor

        entry = mutator.set_node_label(PROBLEM_ID, "Flooding")

        assert store.topic.root_diagram.get_node(PROBLEM_ID).data.label == "Flooding"
        assert entry.before_state == {"label": "Traffic congestion"}
        assert entry.relayout is False

    def test_criteria_hidden_until_toggled(self, editor):
        store, mutator, _ = editor
        solution_id = add_child(mutator, PROBLEM_ID, NodeType.SOLUTION, "solves")
        criterion_id = add_child(mutator, PROBLEM_ID, NodeType.CRITERION, "criterion for")
        diagram = store.topic.root_diagram

        assert diagram.get_node(criterion_id).hidden
        assert not diagram.get_node(solution_id).hidden
        assert all(edge.hidden for edge in diagram.iter_incoming_edges(criterion_id))
        assert all(edge.hidden for edge in diagram.iter_outgoing_edges(criterion_id))

        entry = mutator.toggle_show_criteria(PROBLEM_ID)

        diagram = store.topic.root_diagram
        assert entry.after_state == {"show_criteria": True}
        assert not diagram.get_node(criterion_id).hidden
        assert not any(edge.hidden for edge in diagram.edges)

    def test_toggle_twice_restores_flag(self, editor):
        store, mutator, _ = editor

        mutator.toggle_show_criteria(PROBLEM_ID)
        mutator.toggle_show_criteria(PROBLEM_ID)

        assert store.topic.root_diagram.get_node(PROBLEM_ID).data.show_criteria is False

    def test_toggle_on_non_problem_raises(self, editor):
        store, mutator, _ = editor
        solution_id = add_child(mutator, PROBLEM_ID, NodeType.SOLUTION, "solves")
        log_size = len(store.mutation_log)

        with pytest.raises(InvariantViolationError):
            mutator.toggle_show_criteria(solution_id)

        assert len(store.mutation_log) == log_size


class TestLayoutTriggering:
    """Tests for relayout after structural changes."""

    def test_layout_receives_only_visible_subgraph(self):
        layout = RecordingLayout()
        store, mutator, _ = build_editor(layout=layout)
        solution_id = add_child(mutator, PROBLEM_ID, NodeType.SOLUTION, "solves")

        add_child(mutator, PROBLEM_ID, NodeType.CRITERION, "criterion for")

        assert layout.calls[-1] == ([PROBLEM_ID, solution_id], ["0"], Orientation.DOWN)

    def test_positions_written_back(self):
        layout = RecordingLayout()
        store, mutator, _ = build_editor(layout=layout)

        solution_id = add_child(mutator, PROBLEM_ID, NodeType.SOLUTION, "solves")

        diagram = store.topic.root_diagram
        assert diagram.get_node(PROBLEM_ID).position is not None
        assert diagram.get_node(solution_id).position is not None
        assert len(diagram.get_edge("0").routing) == 2

    def test_label_change_skips_layout(self):
        layout = RecordingLayout()
        _, mutator, _ = build_editor(layout=layout)

        mutator.set_node_label(PROBLEM_ID, "Noise")

        assert layout.calls == []


class TestSelection:
    """Tests for selection state."""

    def test_set_selected_replaces_selection(self, editor):
        store, mutator, _ = editor
        solution_id = add_child(mutator, PROBLEM_ID, NodeType.SOLUTION, "solves")
        mutator.set_selected([PROBLEM_ID])

        mutator.set_selected([solution_id], ["0"])

        diagram = store.topic.root_diagram
        assert [node.id for node in diagram.nodes if node.selected] == [solution_id]
        assert [edge.id for edge in diagram.edges if edge.selected] == ["0"]

    def test_deselect_all(self, editor):
        store, mutator, _ = editor
        add_child(mutator, PROBLEM_ID, NodeType.SOLUTION, "solves")
        mutator.set_selected([PROBLEM_ID], ["0"])

        mutator.deselect_all()

        diagram = store.topic.root_diagram
        assert not any(node.selected for node in diagram.nodes)
        assert not any(edge.selected for edge in diagram.edges)

    def test_selecting_unknown_id_raises(self, editor):
        _, mutator, _ = editor

        with pytest.raises(NotFoundError):
            mutator.set_selected(["17"])
