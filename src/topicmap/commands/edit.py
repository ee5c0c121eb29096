"""
topicmap.commands.edit - Apply one edit to a topic file.

Each invocation opens the topic, applies a single operation (atomically)
and saves the topic back. Ignored connections leave the file untouched and
exit with status 1.
"""

from __future__ import annotations

import argparse
import sys

from topicmap.commands.context import open_session
from topicmap.graph.mutations import MutationEntry
from topicmap.graph.schema import NodeType, RelationDirection, addable_relations_from
from topicmap.graph.topic import ArguableKind, find_node
from topicmap.session import TopicSession


def run(args: argparse.Namespace) -> int:
    """Run the edit command."""
    action = getattr(args, "edit_action", None)
    handler = _HANDLERS.get(action)
    if handler is None:
        print(f"Usage: topicmap edit <{'|'.join(_HANDLERS)}>", file=sys.stderr)
        return 1

    session = open_session(args)
    entry = handler(session, args)
    if entry is None:
        return 1

    session.save()
    return 0


def _add_node(session: TopicSession, args: argparse.Namespace) -> MutationEntry | None:
    direction = RelationDirection(args.direction)
    node_type = NodeType(args.node_type)
    from_node = find_node(session.topic.active_diagram, args.from_id)

    choices = [
        item
        for item in addable_relations_from(from_node.type, direction, session.mode)
        if item.to_node_type == node_type
        and (args.relation is None or item.relation.name == args.relation)
    ]
    if not choices:
        print(
            f"Error: cannot add a {node_type.value} as {direction.value} "
            f"of {from_node.type.value} '{from_node.id}'",
            file=sys.stderr,
        )
        return None

    entry = session.mutator.add_node(from_node.id, direction, node_type, choices[0].relation)
    if entry is not None:
        state = entry.after_state
        print(f"Added {state['node_type']} #{state['node_id']} (edge {state['edge_id']})")
        if state["cross_link_edge_ids"]:
            print(f"Linked {len(state['cross_link_edge_ids'])} criterion/solution pair(s)")
    return entry


def _connect(session: TopicSession, args: argparse.Namespace) -> MutationEntry | None:
    entry = session.mutator.connect_nodes(args.parent_id, args.child_id, mode=session.mode)
    if entry is None:
        print(f"Connection ignored: '{args.parent_id}' -> '{args.child_id}'", file=sys.stderr)
    else:
        state = entry.after_state
        print(f"Connected with edge {state['edge_id']} ({state['relation']})")
    return entry


def _reconnect(session: TopicSession, args: argparse.Namespace) -> MutationEntry | None:
    entry = session.mutator.reconnect_edge(
        args.edge_id, args.source_id, args.target_id, mode=session.mode
    )
    if entry is None:
        print(f"Reconnection ignored for edge '{args.edge_id}'", file=sys.stderr)
    else:
        print(f"Reconnected edge {args.edge_id} ({entry.after_state['relation']})")
    return entry


def _label(session: TopicSession, args: argparse.Namespace) -> MutationEntry | None:
    entry = session.mutator.set_node_label(args.node_id, args.text)
    print(f"Labelled node {args.node_id}")
    return entry


def _toggle_criteria(session: TopicSession, args: argparse.Namespace) -> MutationEntry | None:
    entry = session.mutator.toggle_show_criteria(args.node_id)
    if entry is not None:
        state = "shown" if entry.after_state["show_criteria"] else "hidden"
        print(f"Criteria of problem {args.node_id} {state}")
    return entry


def _kind(args: argparse.Namespace) -> ArguableKind:
    return ArguableKind.EDGE if getattr(args, "edge", False) else ArguableKind.NODE


def _score(session: TopicSession, args: argparse.Namespace) -> MutationEntry | None:
    entry = session.scores.set_score(args.arguable_id, _kind(args), args.score)
    if entry is not None:
        print(f"Scored {_kind(args).value} {args.arguable_id}: {entry.after_state['score']}")
    return entry


def _claim(session: TopicSession, args: argparse.Namespace) -> MutationEntry | None:
    entry = session.mutator.set_or_create_active_diagram(args.arguable_id, _kind(args))
    if entry is not None:
        verb = "Created" if entry.after_state["created"] else "Opened"
        print(f"{verb} claim diagram {entry.after_state['active_diagram_id']}")
    return entry


def _activate(session: TopicSession, args: argparse.Namespace) -> MutationEntry | None:
    entry = session.mutator.set_active_diagram(args.diagram_id)
    print(f"Active diagram: {args.diagram_id}")
    return entry


def _select(session: TopicSession, args: argparse.Namespace) -> MutationEntry | None:
    if not args.nodes and not args.edges:
        return session.mutator.deselect_all()
    return session.mutator.set_selected(args.nodes or (), args.edges or ())


def _reset(session: TopicSession, args: argparse.Namespace) -> MutationEntry | None:
    entry = session.store.reset(args.label or "")
    print("Topic reset")
    return entry


_HANDLERS = {
    "add-node": _add_node,
    "connect": _connect,
    "reconnect": _reconnect,
    "label": _label,
    "toggle-criteria": _toggle_criteria,
    "score": _score,
    "claim": _claim,
    "activate": _activate,
    "select": _select,
    "reset": _reset,
}
