"""
topicmap.commands.init - Create a configuration file and an empty topic.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from topicmap.commands.context import get_topic_path
from topicmap.config import CONFIG_FILE_NAME, default_config_text
from topicmap.graph.topic import new_topic
from topicmap.persistence import JsonFilePersistence


def run(args: argparse.Namespace) -> int:
    """Run the init command.

    Writes ``.topicmap.toml`` in the working directory and a topic file
    holding a single problem node. Existing files are kept unless
    ``--force`` is given.
    """
    force = getattr(args, "force", False)

    config_path = Path.cwd() / CONFIG_FILE_NAME
    if config_path.exists() and not force:
        print(f"Config exists: {config_path}")
    else:
        config_path.write_text(default_config_text(), encoding="utf-8")
        print(f"Created {config_path}")

    persistence = JsonFilePersistence(get_topic_path(args))
    if persistence.exists() and not force:
        print(f"Error: topic file already exists: {persistence.path}", file=sys.stderr)
        print("Use --force to replace it.", file=sys.stderr)
        return 1

    persistence.save(new_topic(getattr(args, "label", "") or ""))
    print(f"Created {persistence.path}")
    return 0
