"""
topicmap.session - One editing session over a topic.

A TopicSession wires a loaded topic to its store, structural mutator and
score synchronizer, using the edit mode and layout settings from config.
Sessions never share state: each one copies the topic it starts from.
"""

from __future__ import annotations

from typing import Any, Mapping

import structlog

from topicmap.config.defaults import DEFAULT_CONFIG
from topicmap.graph.errors import ReadOnlyTopicError
from topicmap.graph.layout import LayoutTrigger
from topicmap.graph.mutator import DiagramMutator
from topicmap.graph.schema import EditMode, edit_mode
from topicmap.graph.scoring import ScoreSynchronizer
from topicmap.graph.serialize import deserialize_topic
from topicmap.graph.store import TopicStore
from topicmap.graph.topic import Topic
from topicmap.persistence import TopicPersistence

logger = structlog.get_logger(__name__)


class TopicSession:
    """Store, mutator and score synchronizer for one topic.

    Args:
        topic: Starting topic (copied by the store).
        config: Effective configuration; defaults when None.
        persistence: Where ``save`` writes to, if anywhere.
        readonly: Reject every mutation with ReadOnlyTopicError.
    """

    def __init__(
        self,
        topic: Topic | None = None,
        config: Mapping[str, Any] | None = None,
        persistence: TopicPersistence | None = None,
        readonly: bool = False,
    ) -> None:
        self.config = dict(config) if config is not None else dict(DEFAULT_CONFIG)
        self.persistence = persistence
        self.store = TopicStore(topic, readonly=readonly)
        self.mutator = DiagramMutator(self.store, LayoutTrigger.from_config(self.config))
        self.scores = ScoreSynchronizer(self.store)
        self.mode: EditMode = edit_mode(
            bool(self.config.get("editing", {}).get("unrestricted", False))
        )

    @classmethod
    def open(
        cls,
        persistence: TopicPersistence,
        config: Mapping[str, Any] | None = None,
        readonly: bool = False,
    ) -> TopicSession:
        """Load a topic from persistence and start a session on it.

        Raises:
            TopicLoadError: If the stored snapshot is invalid.
        """
        topic = persistence.load()
        logger.debug("session_opened", readonly=readonly)
        return cls(topic, config=config, persistence=persistence, readonly=readonly)

    @classmethod
    def from_snapshot(
        cls,
        data: dict[str, Any],
        config: Mapping[str, Any] | None = None,
        readonly: bool = True,
    ) -> TopicSession:
        """Start a session from a snapshot, read-only unless told otherwise.

        Used for topics visited from elsewhere, which may be viewed but not
        changed.

        Raises:
            TopicLoadError: If the snapshot is invalid.
        """
        return cls(deserialize_topic(data), config=config, readonly=readonly)

    @property
    def topic(self) -> Topic:
        return self.store.topic

    @property
    def readonly(self) -> bool:
        return self.store.readonly

    def save(self) -> None:
        """Write the committed topic to the session's persistence.

        Raises:
            ReadOnlyTopicError: If the session is read-only.
            ValueError: If the session has no persistence.
        """
        if self.readonly:
            raise ReadOnlyTopicError("Cannot save: topic is read-only")
        if self.persistence is None:
            raise ValueError("Session has no persistence to save to")
        self.persistence.save(self.store.topic)


__all__ = ["TopicSession"]
