"""Persistence layer - load and save topic snapshots.

A persistence collaborator exposes ``load()`` and ``save(topic)`` and is only
used at session boundaries. Loading either returns a fully validated topic
or raises TopicLoadError; there is no partially loaded state.

Public API
----------
- ``TopicPersistence`` - protocol implemented by collaborators
- ``JsonFilePersistence`` - snapshot stored as a JSON file
- ``SnapshotPersistence`` - snapshot held in memory (e.g. fetched remotely)
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

import structlog

from topicmap.graph.errors import TopicLoadError
from topicmap.graph.serialize import deserialize_topic, serialize_topic
from topicmap.graph.topic import Topic

logger = structlog.get_logger(__name__)


class TopicPersistence(Protocol):
    """Storage for one topic snapshot."""

    def load(self) -> Topic: ...

    def save(self, topic: Topic) -> None: ...


class JsonFilePersistence:
    """Topic snapshot stored as a JSON file.

    Args:
        path: Location of the snapshot file.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Topic:
        """Read and validate the snapshot.

        Raises:
            TopicLoadError: If the file is missing, not JSON, or inconsistent.
        """
        try:
            content = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise TopicLoadError(f"Cannot read topic file {self.path}: {exc}") from exc
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise TopicLoadError(f"Topic file {self.path} is not valid JSON: {exc}") from exc

        topic = deserialize_topic(data)
        logger.info("topic_loaded", path=str(self.path), diagrams=len(topic.diagrams))
        return topic

    def save(self, topic: Topic) -> None:
        """Write the snapshot atomically (temporary file, then rename)."""
        content = json.dumps(serialize_topic(topic), indent=2) + "\n"
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(content)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.info("topic_saved", path=str(self.path), diagrams=len(topic.diagrams))


class SnapshotPersistence:
    """Topic snapshot held in memory.

    Used for snapshots fetched elsewhere (such as another user's topic) and
    in tests. ``save`` replaces the held snapshot.
    """

    def __init__(self, snapshot: dict[str, Any]) -> None:
        self._snapshot = json.loads(json.dumps(snapshot))

    @property
    def snapshot(self) -> dict[str, Any]:
        return self._snapshot

    def load(self) -> Topic:
        return deserialize_topic(json.loads(json.dumps(self._snapshot)))

    def save(self, topic: Topic) -> None:
        self._snapshot = serialize_topic(topic)


__all__ = ["TopicPersistence", "JsonFilePersistence", "SnapshotPersistence"]
