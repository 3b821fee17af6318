"""Naming utilities for stable node and edge identifiers.

Provides a single source of truth for the identifiers shared between the
graph builder, the layout engine and the rendering layer. Node identity is
carried as a tagged value (kind + entity id); the string form
``"{kind}-{entity_id}"`` is only produced at the edges of the system.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

EDGE_SEPARATOR = "→"


class NodeKind(str, Enum):
    """Kind of node in the data flow graph."""

    CLIENT = "client"
    SERVER = "server"
    EVENT = "event"
    SINK = "sink"
    EVENT_GROUP = "event_group"

    @property
    def prefix(self) -> str:
        """Return the string key prefix used for this kind."""
        if self is NodeKind.EVENT_GROUP:
            return "event-group-"
        return f"{self.value}-"


# Columns in left-to-right order. Group containers live in the event column.
ENTITY_KINDS: tuple[NodeKind, ...] = (
    NodeKind.CLIENT,
    NodeKind.SERVER,
    NodeKind.EVENT,
    NodeKind.SINK,
)


@dataclass(frozen=True, slots=True, order=True)
class NodeId:
    """Identifier of one node in the data flow graph.

    Attributes:
        kind: Node kind.
        entity_id: Entity id within its kind (group name for group containers).
    """

    kind: NodeKind
    entity_id: str

    @property
    def key(self) -> str:
        """Return the stable string key, e.g. ``"server-libera"``."""
        return f"{self.kind.prefix}{self.entity_id}"

    def __str__(self) -> str:
        return self.key

    @classmethod
    def client(cls, entity_id: str) -> NodeId:
        return cls(NodeKind.CLIENT, str(entity_id))

    @classmethod
    def server(cls, entity_id: str) -> NodeId:
        return cls(NodeKind.SERVER, str(entity_id))

    @classmethod
    def event(cls, entity_id: str) -> NodeId:
        return cls(NodeKind.EVENT, str(entity_id))

    @classmethod
    def sink(cls, entity_id: str) -> NodeId:
        return cls(NodeKind.SINK, str(entity_id))

    @classmethod
    def event_group(cls, group_name: str) -> NodeId:
        return cls(NodeKind.EVENT_GROUP, str(group_name))

    @classmethod
    def parse(cls, key: str) -> NodeId:
        """Parse a string key back into a NodeId.

        The group prefix is checked before the plain event prefix because
        ``"event-group-x"`` also starts with ``"event-"``. Use ``readings``
        when the key may belong to an event whose id starts with ``group-``.

        Args:
            key: String key such as ``"sink-discord"``.

        Returns:
            Parsed NodeId.

        Raises:
            ValueError: If the key has no known prefix or an empty entity id.
        """
        candidates = cls.readings(key)
        if not candidates:
            raise ValueError(f"Unknown node id prefix or empty entity id: '{key}'")
        return candidates[0]

    @classmethod
    def readings(cls, key: str) -> list[NodeId]:
        """Return every NodeId whose key equals ``key``, longest prefix first.

        ``"event-group-alerts"`` reads both as the container of group
        ``alerts`` and as the event ``group-alerts``.
        """
        text = str(key)
        ordered = sorted(NodeKind, key=lambda k: len(k.prefix), reverse=True)
        return [
            cls(kind, text[len(kind.prefix) :])
            for kind in ordered
            if text.startswith(kind.prefix) and len(text) > len(kind.prefix)
        ]


def edge_id(source: NodeId, target: NodeId) -> str:
    """Return the edge identifier ``"source→target"``."""
    return f"{source.key}{EDGE_SEPARATOR}{target.key}"


def layer_id(kind: NodeKind) -> str:
    """Return the identifier of the background band for a column."""
    return f"layer-{kind.value}s"
