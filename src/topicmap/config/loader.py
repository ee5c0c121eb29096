"""
topicmap.config.loader - Configuration file discovery, parsing and merging.

Configuration is read from a ``.topicmap.toml`` file (found by walking up
from the working directory), merged over ``DEFAULT_CONFIG``, then overridden
by ``TOPICMAP_<SECTION>_<KEY>`` environment variables.
"""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any, Mapping

import tomlkit
from tomlkit import TOMLDocument

from topicmap.config.defaults import CONFIG_FILE_NAME, DEFAULT_CONFIG, ENV_PREFIX


def parse_toml_document(content: str) -> TOMLDocument:
    """Parse TOML text, keeping formatting for round-trip edits."""
    return tomlkit.parse(content)


def parse_toml(content: str) -> dict[str, Any]:
    """Parse TOML text into plain Python dicts and lists."""
    return parse_toml_document(content).unwrap()


def find_config_file(start: Path | None = None) -> Path | None:
    """Find ``.topicmap.toml`` in start or one of its parents.

    Args:
        start: Directory to search from (defaults to the working directory).

    Returns:
        Path to the config file, or None if there is none.
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def merge_configs(defaults: Mapping[str, Any], user: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge user settings over defaults without mutating either."""
    merged = copy.deepcopy(dict(defaults))
    for key, value in user.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _try_parse_env_value(value: str) -> Any:
    """Interpret an environment variable value.

    JSON arrays/objects, booleans and numbers are converted; anything else
    (including malformed JSON) is returned unchanged.
    """
    stripped = value.strip()
    if stripped.startswith(("[", "{")):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            return value
    lowered = stripped.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    try:
        return int(stripped)
    except ValueError:
        pass
    try:
        return float(stripped)
    except ValueError:
        return value


def apply_env_overrides(
    config: dict[str, Any], environ: Mapping[str, str] | None = None
) -> dict[str, Any]:
    """Apply ``TOPICMAP_<SECTION>_<KEY>`` overrides to known sections.

    Example: ``TOPICMAP_EDITING_UNRESTRICTED=true`` sets
    ``config["editing"]["unrestricted"] = True``.
    """
    environ = os.environ if environ is None else environ
    result = copy.deepcopy(config)
    for name, raw in environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        section, _, key = name[len(ENV_PREFIX) :].lower().partition("_")
        if not key or not isinstance(result.get(section), dict):
            continue
        result[section][key] = _try_parse_env_value(raw)
    return result


def load_config(
    config_path: Path | None = None, environ: Mapping[str, str] | None = None
) -> dict[str, Any]:
    """Load the effective configuration.

    Args:
        config_path: Explicit config file; discovered from the working
            directory when None. A missing file means defaults only.
        environ: Environment used for overrides (defaults to os.environ).

    Returns:
        Merged configuration dict.

    Raises:
        FileNotFoundError: If an explicit config_path does not exist.
    """
    if config_path is not None and not config_path.is_file():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    path = config_path or find_config_file()
    user: dict[str, Any] = {}
    if path is not None:
        user = parse_toml(path.read_text(encoding="utf-8"))

    return apply_env_overrides(merge_configs(DEFAULT_CONFIG, user), environ)


def default_config_text() -> str:
    """Render DEFAULT_CONFIG as a commented TOML document for ``topicmap init``."""
    doc = tomlkit.document()
    doc.add(tomlkit.comment("topicmap configuration"))
    for section, values in DEFAULT_CONFIG.items():
        table = tomlkit.table()
        for key, value in values.items():
            table.add(key, value)
        doc.add(section, table)
    return tomlkit.dumps(doc)
