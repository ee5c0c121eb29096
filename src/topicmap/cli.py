"""
topicmap.cli - Command-line interface.

Main entry point for the topicmap CLI tool.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from topicmap import __version__
from topicmap.commands import config_cmd, edit, init, relations, show
from topicmap.commands.context import get_config
from topicmap.graph.schema import NodeType, RelationDirection
from topicmap.graph.scores import POSSIBLE_SCORES
from topicmap.logging_config import LOG_FORMATS, configure_logging

NODE_TYPES = [node_type.value for node_type in NodeType]
DIRECTIONS = [direction.value for direction in RelationDirection]


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="topicmap",
        description="Problem maps with typed relations and claim diagrams",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  topicmap init --label "Traffic congestion"    # New topic with one problem
  topicmap edit add-node 0 child solution       # Add a solution to problem 0
  topicmap edit score 1 7                       # Score node 1
  topicmap edit claim 1                         # Argue about node 1
  topicmap show                                 # Outline of every diagram

Configuration:
  topicmap config path          # Show config file location
  topicmap config show          # View effective settings
  topicmap relations            # Show the relation schema

For detailed command help: topicmap <command> --help
        """,
    )

    # Global options
    parser.add_argument(
        "--version",
        action="version",
        version=f"topicmap {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file",
        metavar="PATH",
    )
    parser.add_argument(
        "-f",
        "--file",
        type=Path,
        help="Topic file (overrides [storage] path)",
        metavar="PATH",
    )
    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        help="Log output format (overrides [logging] format)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-error output",
    )

    # Subcommands
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init command
    init_parser = subparsers.add_parser(
        "init",
        help="Create .topicmap.toml and an empty topic file",
    )
    init_parser.add_argument(
        "--label",
        default="",
        help="Label of the initial problem",
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite existing files",
    )

    # show command
    show_parser = subparsers.add_parser(
        "show",
        help="Print the topic as a markdown outline or JSON",
    )
    show_parser.add_argument(
        "--format",
        choices=["markdown", "json"],
        default="markdown",
        help="Output format (default: markdown)",
    )
    diagram_group = show_parser.add_mutually_exclusive_group()
    diagram_group.add_argument(
        "--diagram",
        help="Show only this diagram",
        metavar="ID",
    )
    diagram_group.add_argument(
        "--active",
        action="store_true",
        help="Show only the active diagram",
    )

    # relations command
    relations_parser = subparsers.add_parser(
        "relations",
        help="Show the relation schema or how a node type can be extended",
    )
    relations_parser.add_argument(
        "--from",
        dest="from_type",
        choices=NODE_TYPES,
        help="List relations available when extending this node type",
        metavar="TYPE",
    )
    relations_parser.add_argument(
        "--direction",
        choices=DIRECTIONS,
        default="child",
        help="Role of the new node (default: child)",
    )
    relations_parser.add_argument(
        "--unrestricted",
        action="store_true",
        help="Allow any node type through the generic relation",
    )
    relations_parser.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Output as JSON",
    )

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Inspect configuration",
    )
    config_subparsers = config_parser.add_subparsers(dest="config_action")
    config_show = config_subparsers.add_parser("show", help="Show effective configuration")
    config_show.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    config_subparsers.add_parser("path", help="Show config file location")

    # edit command
    edit_parser = subparsers.add_parser(
        "edit",
        help="Apply one edit to the topic file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  topicmap edit add-node 0 child criterion        # Criterion for problem 0
  topicmap edit connect 2 3                       # Edge from node 2 to node 3
  topicmap edit --unrestricted connect 3 0        # Generic relatesTo edge
  topicmap edit label 1 "Bike lanes"
  topicmap edit toggle-criteria 0
  topicmap edit score --edge 0 8                  # Score edge 0
  topicmap edit claim --edge 0                    # Open the claim diagram of edge 0
  topicmap edit activate root                     # Back to the problem diagram
""",
    )
    edit_parser.add_argument(
        "--unrestricted",
        action="store_true",
        help="Allow connections the schema does not license",
    )
    edit_subparsers = edit_parser.add_subparsers(dest="edit_action")

    add_node = edit_subparsers.add_parser("add-node", help="Add a node next to an existing one")
    add_node.add_argument("from_id", help="Node being extended")
    add_node.add_argument("direction", choices=DIRECTIONS, help="Role of the new node")
    add_node.add_argument("node_type", choices=NODE_TYPES, help="Type of the new node")
    add_node.add_argument("--relation", help="Relation name when several apply")

    connect = edit_subparsers.add_parser("connect", help="Connect two existing nodes")
    connect.add_argument("parent_id", help="Parent (edge source)")
    connect.add_argument("child_id", help="Child (edge target)")

    reconnect = edit_subparsers.add_parser("reconnect", help="Re-point an existing edge")
    reconnect.add_argument("edge_id")
    reconnect.add_argument("source_id", help="New parent")
    reconnect.add_argument("target_id", help="New child")

    label = edit_subparsers.add_parser("label", help="Set the label of a node")
    label.add_argument("node_id")
    label.add_argument("text")

    toggle = edit_subparsers.add_parser(
        "toggle-criteria", help="Show or hide the criteria of a problem"
    )
    toggle.add_argument("node_id")

    score = edit_subparsers.add_parser("score", help="Score a node or edge")
    score.add_argument("arguable_id")
    score.add_argument("score", choices=POSSIBLE_SCORES)
    score.add_argument("--edge", action="store_true", help="The id names an edge")

    claim = edit_subparsers.add_parser(
        "claim", help="Open (creating if needed) the claim diagram of a node or edge"
    )
    claim.add_argument("arguable_id")
    claim.add_argument("--edge", action="store_true", help="The id names an edge")

    activate = edit_subparsers.add_parser("activate", help="Switch the active diagram")
    activate.add_argument("diagram_id")

    select = edit_subparsers.add_parser(
        "select", help="Select nodes and edges (none given: clear selection)"
    )
    select.add_argument("--nodes", nargs="*", default=[], metavar="ID")
    select.add_argument("--edges", nargs="*", default=[], metavar="ID")

    reset = edit_subparsers.add_parser("reset", help="Replace the topic with a single problem")
    reset.add_argument("--label", default="", help="Label of the new problem")

    return parser


def _configure_logging(args: argparse.Namespace) -> None:
    section = get_config(args)["logging"]
    level = section.get("level", "WARNING")
    if args.verbose:
        level = "DEBUG"
    elif args.quiet:
        level = "ERROR"
    configure_logging(level=level, fmt=args.log_format or section.get("format", "console"))


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()

    # Enable shell tab-completion if argcomplete is installed
    # Install with: pip install topicmap[completion]
    # Then activate: eval "$(register-python-argcomplete topicmap)"
    try:
        import argcomplete

        argcomplete.autocomplete(parser)
    except ImportError:
        pass

    args = parser.parse_args(argv)

    # Handle no command
    if not args.command:
        parser.print_help()
        return 0

    try:
        _configure_logging(args)

        # Dispatch to command handlers
        if args.command == "init":
            return init.run(args)
        elif args.command == "show":
            return show.run(args)
        elif args.command == "relations":
            return relations.run(args)
        elif args.command == "config":
            return config_cmd.run(args)
        elif args.command == "edit":
            return edit.run(args)
        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled.", file=sys.stderr)
        return 130
    except Exception as e:
        if args.verbose:
            raise
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
