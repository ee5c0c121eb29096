"""
topicmap.commands.context - Shared config and session setup for commands.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any

from topicmap.config import load_config
from topicmap.persistence import JsonFilePersistence
from topicmap.session import TopicSession


def get_config(args: argparse.Namespace) -> dict[str, Any]:
    """Load the effective config once per invocation.

    ``--unrestricted`` on the command line overrides ``[editing]``.
    """
    config = getattr(args, "_config", None)
    if config is None:
        config = load_config(getattr(args, "config", None))
        if getattr(args, "unrestricted", False):
            config["editing"]["unrestricted"] = True
        args._config = config
    return config


def get_topic_path(args: argparse.Namespace) -> Path:
    """Topic file from ``--file``, else ``[storage] path``."""
    explicit = getattr(args, "file", None)
    if explicit:
        return Path(explicit)
    return Path(get_config(args)["storage"]["path"])


def open_session(args: argparse.Namespace, readonly: bool = False) -> TopicSession:
    """Open the topic file as a session.

    Raises:
        TopicLoadError: If the topic file is missing or invalid.
    """
    persistence = JsonFilePersistence(get_topic_path(args))
    return TopicSession.open(persistence, config=get_config(args), readonly=readonly)
