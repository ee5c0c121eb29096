"""
topicmap.commands.show - Print a topic as a markdown outline or JSON.
"""

from __future__ import annotations

import argparse
import json

from topicmap.commands.context import open_session
from topicmap.graph.serialize import serialize_diagram, serialize_topic, to_markdown


def run(args: argparse.Namespace) -> int:
    """Run the show command."""
    session = open_session(args, readonly=True)
    topic = session.topic
    diagram_id = getattr(args, "diagram", None)
    if getattr(args, "active", False):
        diagram_id = topic.active_diagram_id

    if getattr(args, "format", "markdown") == "json":
        if diagram_id:
            data = serialize_diagram(topic.get_diagram(diagram_id))
        else:
            data = serialize_topic(topic)
        print(json.dumps(data, indent=2))
    else:
        print(to_markdown(topic, diagram_id), end="")
    return 0
