"""
topicmap.commands - CLI command implementations
"""

__all__ = [
    "config_cmd",
    "context",
    "edit",
    "init",
    "relations",
    "show",
]
