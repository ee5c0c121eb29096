"""
topicmap.commands.relations - Query the relation schema.

Without arguments, lists every licensed relation. With ``--from TYPE``,
lists the ways a node of that type can be extended in the given direction,
honoring the edit mode.
"""

from __future__ import annotations

import argparse
import json

from topicmap.commands.context import get_config
from topicmap.graph.schema import (
    DEFAULT_SCHEMA,
    NodeType,
    RelationDirection,
    addable_relations_from,
    edit_mode,
)


def run(args: argparse.Namespace) -> int:
    """Run the relations command."""
    as_json = getattr(args, "json", False)
    from_type = getattr(args, "from_type", None)

    if from_type is None:
        rows = [
            {
                "parent": relation.parent.value,
                "child": relation.child.value,
                "name": relation.name,
                "addable": relation.addable,
            }
            for relation in DEFAULT_SCHEMA.relations
        ]
        if as_json:
            print(json.dumps(rows, indent=2))
        else:
            for row in rows:
                suffix = "" if row["addable"] else "  (automatic)"
                print(f"{row['parent']} -> {row['child']}: {row['name']}{suffix}")
        return 0

    config = get_config(args)
    mode = edit_mode(bool(config["editing"]["unrestricted"]))
    direction = RelationDirection(getattr(args, "direction", "child"))
    addable = addable_relations_from(NodeType(from_type), direction, mode)

    if as_json:
        print(
            json.dumps(
                [
                    {"type": item.to_node_type.value, "relation": item.relation.name}
                    for item in addable
                ],
                indent=2,
            )
        )
    elif not addable:
        print(f"No {direction.value} can be added to a {from_type}")
    else:
        for item in addable:
            print(f"{item.to_node_type.value} ({item.relation.name})")
    return 0
