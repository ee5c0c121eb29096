"""
topicmap.config.defaults - Default configuration values
"""

from typing import Any, Dict

CONFIG_FILE_NAME = ".topicmap.toml"

ENV_PREFIX = "TOPICMAP_"

DEFAULT_CONFIG: Dict[str, Any] = {
    "editing": {
        # Allow any two node types to be connected with the generic relation.
        "unrestricted": False,
    },
    "layout": {
        "node_spacing": 160.0,
        "rank_spacing": 120.0,
        "problem_orientation": "DOWN",
        "claim_orientation": "RIGHT",
    },
    "logging": {
        "level": "WARNING",
        "format": "console",
    },
    "storage": {
        "path": "topic.json",
    },
}
