"""
topicmap.graph - Typed topic graph, claim diagrams, scores and layout.
"""

from topicmap.graph.claims import (
    ClaimDiagramKey,
    get_claim_diagram_id,
    get_implicit_label,
    is_claim_diagram_id,
    parse_claim_diagram_id,
)
from topicmap.graph.errors import (
    InvalidTransitionError,
    InvariantViolationError,
    NotFoundError,
    ReadOnlyTopicError,
    TopicError,
    TopicLoadError,
)
from topicmap.graph.GraphNode import GraphNode, NodeData, Position
from topicmap.graph.ids import IdAllocator
from topicmap.graph.layout import LayoutResult, LayoutTrigger, Orientation, layered_layout
from topicmap.graph.mutations import MutationEntry, MutationLog
from topicmap.graph.mutator import DiagramMutator
from topicmap.graph.relations import Edge, EdgeData
from topicmap.graph.schema import (
    RESTRICTED,
    UNRESTRICTED,
    AddableRelation,
    EditMode,
    NodeType,
    Relation,
    RelationDirection,
    Restricted,
    TypeSchema,
    Unrestricted,
    addable_relations_from,
    can_create_edge,
    get_relation,
)
from topicmap.graph.scores import POSSIBLE_SCORES, Score
from topicmap.graph.scoring import ScoreSynchronizer
from topicmap.graph.serialize import deserialize_topic, serialize_topic, to_markdown
from topicmap.graph.store import TopicStore
from topicmap.graph.topic import (
    ROOT_DIAGRAM_ID,
    ArguableKind,
    Diagram,
    DiagramKind,
    Topic,
    find_node,
    find_scorable,
    new_topic,
)

__all__ = [
    # Schema
    "NodeType",
    "RelationDirection",
    "Relation",
    "AddableRelation",
    "TypeSchema",
    "Restricted",
    "Unrestricted",
    "EditMode",
    "RESTRICTED",
    "UNRESTRICTED",
    "get_relation",
    "addable_relations_from",
    "can_create_edge",
    # Model
    "Score",
    "POSSIBLE_SCORES",
    "Position",
    "NodeData",
    "GraphNode",
    "EdgeData",
    "Edge",
    "ROOT_DIAGRAM_ID",
    "DiagramKind",
    "ArguableKind",
    "Diagram",
    "Topic",
    "find_node",
    "find_scorable",
    "new_topic",
    # Claims
    "ClaimDiagramKey",
    "get_claim_diagram_id",
    "parse_claim_diagram_id",
    "is_claim_diagram_id",
    "get_implicit_label",
    # Operations
    "IdAllocator",
    "TopicStore",
    "MutationEntry",
    "MutationLog",
    "DiagramMutator",
    "ScoreSynchronizer",
    "LayoutTrigger",
    "LayoutResult",
    "Orientation",
    "layered_layout",
    # Snapshots
    "serialize_topic",
    "deserialize_topic",
    "to_markdown",
    # Errors
    "TopicError",
    "NotFoundError",
    "InvalidTransitionError",
    "InvariantViolationError",
    "TopicLoadError",
    "ReadOnlyTopicError",
]
