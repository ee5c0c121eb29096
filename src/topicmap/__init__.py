"""
topicmap - Problem maps and the arguments behind them

topicmap keeps a typed graph of problems, solutions, criteria and effects,
and lets every node or edge be argued about in its own claim diagram of
supports and critiques. Scores stay in sync across the arguable and its
claims, and every edit is validated against the relation schema.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("topicmap")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed

from topicmap.graph import (
    ArguableKind,
    DiagramMutator,
    NodeType,
    RelationDirection,
    Score,
    ScoreSynchronizer,
    Topic,
    TopicError,
    TopicStore,
    new_topic,
)
from topicmap.persistence import JsonFilePersistence
from topicmap.session import TopicSession

__all__ = [
    "__version__",
    "ArguableKind",
    "DiagramMutator",
    "NodeType",
    "RelationDirection",
    "Score",
    "ScoreSynchronizer",
    "Topic",
    "TopicError",
    "TopicStore",
    "new_topic",
    "JsonFilePersistence",
    "TopicSession",
]
