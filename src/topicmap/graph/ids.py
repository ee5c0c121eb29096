"""IdAllocator - Topic-wide monotonic node and edge ids."""

from __future__ import annotations

from topicmap.graph.topic import Topic


class IdAllocator:
    """Allocate ids from the counters of a topic.

    The counters live on the topic itself, so they are saved with it and
    shared by the root diagram and every claim diagram. Allocate only on a
    transaction draft that will consume the id: discarding the draft then
    discards the allocation with it.
    """

    def __init__(self, topic: Topic) -> None:
        self._topic = topic

    def next_node_id(self) -> str:
        node_id = self._topic.next_node_id
        self._topic.next_node_id += 1
        return str(node_id)

    def next_edge_id(self) -> str:
        edge_id = self._topic.next_edge_id
        self._topic.next_edge_id += 1
        return str(edge_id)


__all__ = ["IdAllocator"]
