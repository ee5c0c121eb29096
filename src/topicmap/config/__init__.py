"""
topicmap.config - Configuration loading and defaults
"""

from topicmap.config.defaults import CONFIG_FILE_NAME, DEFAULT_CONFIG
from topicmap.config.loader import (
    apply_env_overrides,
    default_config_text,
    find_config_file,
    load_config,
    merge_configs,
    parse_toml,
    parse_toml_document,
)

__all__ = [
    "load_config",
    "find_config_file",
    "merge_configs",
    "apply_env_overrides",
    "parse_toml",
    "parse_toml_document",
    "default_config_text",
    "CONFIG_FILE_NAME",
    "DEFAULT_CONFIG",
]
