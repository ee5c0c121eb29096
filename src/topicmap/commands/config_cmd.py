"""
topicmap.commands.config_cmd - Inspect the effective configuration.

Subcommands:
- show: print the merged configuration (defaults, file, environment)
- path: print the location of the config file in use
"""

from __future__ import annotations

import argparse
import json
import sys

import tomlkit

from topicmap.commands.context import get_config
from topicmap.config import find_config_file


def run(args: argparse.Namespace) -> int:
    """Run the config command."""
    action = getattr(args, "config_action", None)

    if action == "show":
        return _show(args)
    elif action == "path":
        return _path(args)
    else:
        print("Usage: topicmap config <show|path>", file=sys.stderr)
        return 1


def _show(args: argparse.Namespace) -> int:
    config = get_config(args)
    if getattr(args, "json", False):
        print(json.dumps(config, indent=2))
    else:
        print(tomlkit.dumps(config), end="")
    return 0


def _path(args: argparse.Namespace) -> int:
    path = getattr(args, "config", None) or find_config_file()
    if path is None:
        print("No config file found (using defaults)", file=sys.stderr)
        return 1
    print(path)
    return 0
