"""DiagramMutator - Structural write operations on a topic.

Every public method runs as a single TopicStore transaction: it validates
against the schema and the current topic, edits a draft, recomputes the
layout when structure or visibility changed, and commits everything at once.
Each committed call returns the MutationEntry recorded for it.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from topicmap.graph.claims import get_claim_diagram_id, get_implicit_label
from topicmap.graph.errors import InvalidTransitionError, InvariantViolationError
from topicmap.graph.GraphNode import GraphNode, build_node
from topicmap.graph.ids import IdAllocator
from topicmap.graph.layout import LayoutTrigger
from topicmap.graph.mutations import MutationEntry
from topicmap.graph.relations import Edge, build_edge
from topicmap.graph.schema import (
    CRITERION_FOR,
    EMBODIES,
    RESTRICTED,
    SOLVES,
    EditMode,
    NodeType,
    Relation,
    RelationDirection,
    validate_edge,
)
from topicmap.graph.store import PendingMutation, TopicStore
from topicmap.graph.topic import (
    ROOT_DIAGRAM_ID,
    ArguableKind,
    Diagram,
    DiagramKind,
    find_edge,
    find_node,
    find_scorable,
)

logger = structlog.get_logger(__name__)


class DiagramMutator:
    """Transactional write surface for nodes, edges and the active diagram.

    Args:
        store: Store holding the topic being edited.
        layout: Layout trigger used after structural changes.
    """

    def __init__(self, store: TopicStore, layout: LayoutTrigger | None = None) -> None:
        self._store = store
        self._layout = layout or LayoutTrigger()

    @property
    def store(self) -> TopicStore:
        return self._store

    def _relayout(self, pending: PendingMutation, diagram: Diagram) -> None:
        layouted = self._layout.layout_visible_components(diagram)
        diagram.nodes = layouted.nodes
        diagram.edges = layouted.edges
        pending.relayout = True

    # ─────────────────────────────────────────────────────────────────────────
    # Node and Edge Creation
    # ─────────────────────────────────────────────────────────────────────────

    def add_node(
        self,
        from_node_id: str,
        direction: RelationDirection | str,
        to_node_type: NodeType | str,
        relation: Relation | str,
    ) -> MutationEntry | None:
        """Add a node connected to an existing node of the active diagram.

        Callers are expected to offer only schema-valid choices (see
        ``addable_relations_from``); the relation is not re-validated.

        When a criterion or solution is added next to a problem, in either
        direction, it is linked with "embodies" edges to every solution or criterion already
        under that problem.

        Args:
            from_node_id: Node being extended.
            direction: Whether the new node becomes the parent or the child.
            to_node_type: Type of the new node.
            relation: Relation (or its name) used as the label of the new edge.

        Returns:
            The committed MutationEntry; ``after_state`` holds the new ids.

        Raises:
            NotFoundError: If from_node_id is not in the active diagram.
        """
        direction = RelationDirection(direction)
        to_node_type = NodeType(to_node_type)
        relation_name = relation.name if isinstance(relation, Relation) else relation

        with self._store.transaction("add_node", from_node_id) as pending:
            topic = pending.topic
            diagram = topic.active_diagram
            from_node = find_node(diagram, from_node_id)
            ids = IdAllocator(topic)

            new_node = build_node(ids.next_node_id(), to_node_type, diagram.id)
            if direction == RelationDirection.PARENT:
                new_edge = build_edge(ids.next_edge_id(), new_node.id, from_node.id, relation_name)
            else:
                new_edge = build_edge(ids.next_edge_id(), from_node.id, new_node.id, relation_name)

            cross_links: list[Edge] = []
            if from_node.type == NodeType.PROBLEM and new_node.type in (
                NodeType.CRITERION,
                NodeType.SOLUTION,
            ):
                cross_links = _link_criteria_to_solutions(diagram, ids, new_node, from_node)

            diagram.nodes.append(new_node)
            diagram.edges.append(new_edge)
            diagram.edges.extend(cross_links)
            self._relayout(pending, diagram)

            pending.after_state = {
                "node_id": new_node.id,
                "node_type": new_node.type.value,
                "edge_id": new_edge.id,
                "relation": relation_name,
                "cross_link_edge_ids": [edge.id for edge in cross_links],
            }

        logger.info(
            "node_added",
            diagram_id=diagram.id,
            from_node_id=from_node_id,
            node_id=new_node.id,
            node_type=new_node.type.value,
            direction=direction.value,
            cross_links=len(cross_links),
        )
        return self._store.last_entry()

    def connect_nodes(
        self, parent_id: str, child_id: str, mode: EditMode = RESTRICTED
    ) -> MutationEntry | None:
        """Connect two existing nodes of the active diagram.

        Invalid connections (duplicate, self-loop, unlicensed while
        restricted, or cycle-closing) are silently ignored.

        Returns:
            The committed MutationEntry, or None if the connection was ignored.

        Raises:
            NotFoundError: If either node is not in the active diagram.
        """
        with self._store.transaction("connect_nodes", parent_id) as pending:
            topic = pending.topic
            diagram = topic.active_diagram
            parent = find_node(diagram, parent_id)
            child = find_node(diagram, child_id)

            try:
                relation = validate_edge(diagram, parent, child, mode)
            except InvalidTransitionError as exc:
                logger.info(
                    "connection_rejected", parent_id=parent_id, child_id=child_id, reason=str(exc)
                )
                pending.abandon()
                return None

            edge_id = IdAllocator(topic).next_edge_id()
            new_edge = build_edge(edge_id, parent.id, child.id, relation.name)
            diagram.edges.append(new_edge)
            self._relayout(pending, diagram)

            pending.after_state = {
                "edge_id": new_edge.id,
                "source": parent.id,
                "target": child.id,
                "relation": relation.name,
            }

        logger.info("nodes_connected", edge_id=new_edge.id, relation=relation.name)
        return self._store.last_entry()

    def reconnect_edge(
        self,
        edge_id: str,
        new_source_id: str,
        new_target_id: str,
        mode: EditMode = RESTRICTED,
    ) -> MutationEntry | None:
        """Re-point an existing edge to new endpoints.

        The edge keeps its id and score; its label is re-derived for the new
        endpoint types. Same validation contract as ``connect_nodes``.

        Returns:
            The committed MutationEntry, or None if the change was ignored.

        Raises:
            NotFoundError: If the edge or either endpoint is not in the
                active diagram.
        """
        with self._store.transaction("reconnect_edge", edge_id) as pending:
            diagram = pending.topic.active_diagram
            edge = find_edge(diagram, edge_id)
            source = find_node(diagram, new_source_id)
            target = find_node(diagram, new_target_id)

            try:
                relation = validate_edge(diagram, source, target, mode, ignore_edge_id=edge.id)
            except InvalidTransitionError as exc:
                logger.info("reconnection_rejected", edge_id=edge_id, reason=str(exc))
                pending.abandon()
                return None

            pending.before_state = {
                "source": edge.source,
                "target": edge.target,
                "relation": edge.label,
            }
            edge.source = source.id
            edge.target = target.id
            edge.label = relation.name
            self._relayout(pending, diagram)
            pending.after_state = {
                "source": source.id,
                "target": target.id,
                "relation": relation.name,
            }

        logger.info("edge_reconnected", edge_id=edge_id, source=new_source_id, target=new_target_id)
        return self._store.last_entry()

    # ─────────────────────────────────────────────────────────────────────────
    # Node Data
    # ─────────────────────────────────────────────────────────────────────────

    def set_node_label(self, node_id: str, text: str) -> MutationEntry | None:
        """Set the label of a node of the active diagram. No relayout.

        Raises:
            NotFoundError: If the node is not in the active diagram.
        """
        with self._store.transaction("set_node_label", node_id) as pending:
            node = find_node(pending.topic.active_diagram, node_id)
            pending.before_state = {"label": node.data.label}
            node.data.label = text
            pending.after_state = {"label": text}

        logger.debug("node_label_set", node_id=node_id)
        return self._store.last_entry()

    def toggle_show_criteria(self, problem_node_id: str) -> MutationEntry | None:
        """Show or hide the criteria under a problem, then relayout.

        Raises:
            NotFoundError: If the node is not in the active diagram.
            InvariantViolationError: If the node is not a problem.
        """
        with self._store.transaction("toggle_show_criteria", problem_node_id) as pending:
            diagram = pending.topic.active_diagram
            node = find_node(diagram, problem_node_id)
            if node.type != NodeType.PROBLEM:
                raise InvariantViolationError(
                    f"Node '{problem_node_id}' is a {node.type.value}, not a problem"
                )

            showing = bool(node.data.show_criteria)
            node.data.show_criteria = not showing
            self._relayout(pending, diagram)
            pending.before_state = {"show_criteria": showing}
            pending.after_state = {"show_criteria": not showing}

        logger.info("criteria_toggled", node_id=problem_node_id, show_criteria=not showing)
        return self._store.last_entry()

    # ─────────────────────────────────────────────────────────────────────────
    # Diagram Navigation
    # ─────────────────────────────────────────────────────────────────────────

    def set_or_create_active_diagram(
        self, arguable_id: str, kind: ArguableKind | str
    ) -> MutationEntry | None:
        """Make the claim diagram of an arguable active, creating it if needed.

        A new claim diagram holds one rootClaim carrying the implicit label
        and the arguable's current score. Existing claim diagrams are reused
        untouched. Claims are only created for arguables of the root diagram.

        Raises:
            NotFoundError: If the claim diagram must be created and the
                arguable is not in the active diagram.
            InvariantViolationError: If the claim diagram must be created
                while a claim diagram is active.
        """
        kind = ArguableKind(kind)
        diagram_id = get_claim_diagram_id(arguable_id, kind)

        with self._store.transaction("set_or_create_active_diagram", diagram_id) as pending:
            topic = pending.topic
            created = False
            if not topic.has_diagram(diagram_id):
                active = topic.active_diagram
                if active.id != ROOT_DIAGRAM_ID:
                    raise InvariantViolationError(
                        f"Cannot argue about {kind.value} '{arguable_id}' of claim diagram "
                        f"'{active.id}': claims nest only one level below the root diagram"
                    )
                arguable = find_scorable(active, arguable_id, kind)
                root_claim = build_node(
                    IdAllocator(topic).next_node_id(),
                    NodeType.ROOT_CLAIM,
                    diagram_id,
                    label=get_implicit_label(arguable_id, kind, active),
                    score=arguable.data.score,
                )
                claim_diagram = Diagram(id=diagram_id, kind=DiagramKind.CLAIM, nodes=[root_claim])
                topic.diagrams[diagram_id] = claim_diagram
                self._relayout(pending, claim_diagram)
                created = True

            pending.before_state = {"active_diagram_id": topic.active_diagram_id}
            topic.active_diagram_id = diagram_id
            pending.after_state = {"active_diagram_id": diagram_id, "created": created}

        logger.info("claim_diagram_activated", diagram_id=diagram_id, created=created)
        return self._store.last_entry()

    def set_active_diagram(self, diagram_id: str) -> MutationEntry | None:
        """Switch the active diagram. Each diagram keeps its own layout.

        Raises:
            NotFoundError: If the diagram does not exist.
        """
        with self._store.transaction("set_active_diagram", diagram_id) as pending:
            topic = pending.topic
            topic.get_diagram(diagram_id)
            pending.before_state = {"active_diagram_id": topic.active_diagram_id}
            topic.active_diagram_id = diagram_id
            pending.after_state = {"active_diagram_id": diagram_id}

        logger.debug("diagram_activated", diagram_id=diagram_id)
        return self._store.last_entry()

    # ─────────────────────────────────────────────────────────────────────────
    # Selection
    # ─────────────────────────────────────────────────────────────────────────

    def deselect_all(self) -> MutationEntry | None:
        """Clear the selection of every node and edge of the active diagram."""
        diagram_id = self._store.topic.active_diagram_id
        with self._store.transaction("deselect_all", diagram_id) as pending:
            diagram = pending.topic.active_diagram
            for node in diagram.nodes:
                node.selected = False
            for edge in diagram.edges:
                edge.selected = False

        return self._store.last_entry()

    def set_selected(
        self, node_ids: Iterable[str] = (), edge_ids: Iterable[str] = ()
    ) -> MutationEntry | None:
        """Select exactly the given nodes and edges of the active diagram.

        Raises:
            NotFoundError: If an id is not in the active diagram.
        """
        node_ids = set(node_ids)
        edge_ids = set(edge_ids)
        diagram_id = self._store.topic.active_diagram_id
        with self._store.transaction("set_selected", diagram_id) as pending:
            diagram = pending.topic.active_diagram
            for node_id in node_ids:
                find_node(diagram, node_id)
            for edge_id in edge_ids:
                find_edge(diagram, edge_id)

            for node in diagram.nodes:
                node.selected = node.id in node_ids
            for edge in diagram.edges:
                edge.selected = edge.id in edge_ids
            pending.after_state = {"node_ids": sorted(node_ids), "edge_ids": sorted(edge_ids)}

        return self._store.last_entry()


def _link_criteria_to_solutions(
    diagram: Diagram, ids: IdAllocator, new_node: GraphNode, problem: GraphNode
) -> list[Edge]:
    """Build "embodies" edges between a new criterion or solution and its peers.

    A new criterion is linked to every solution that solves the problem; a
    new solution is linked to every criterion of the problem. Edges always
    point criterion -> solution.
    """
    peer_relation = SOLVES if new_node.type == NodeType.CRITERION else CRITERION_FOR
    edges: list[Edge] = []
    for edge in list(diagram.iter_outgoing_edges(problem.id)):
        if edge.label != peer_relation:
            continue
        peer = find_node(diagram, edge.target)
        if new_node.type == NodeType.CRITERION:
            source_id, target_id = new_node.id, peer.id
        else:
            source_id, target_id = peer.id, new_node.id
        edges.append(build_edge(ids.next_edge_id(), source_id, target_id, EMBODIES))
    return edges


__all__ = ["DiagramMutator"]
