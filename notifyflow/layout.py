"""Deterministic four-column layout for the data flow diagram.

Columns are fixed by entity kind (clients, servers, events, sinks). Every
column is vertically centered on one shared center line derived from the
longest column, so the diagram stays balanced regardless of which column
dominates. The events column is special: events are ordered by priority and
events sharing a ``group`` are stacked inside one group container whose
position is decided by the highest priority among its members.

Everything here is plain arithmetic on the input order. The same snapshot
always produces the same coordinates.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from notifyflow.config import LayoutConfig
from notifyflow.log_config import get_logger
from notifyflow.naming import NodeId, NodeKind, layer_id
from notifyflow.snapshot import ConfigSnapshot, Event

logger = get_logger(__name__)

COLUMN_INDEX: dict[NodeKind, int] = {
    NodeKind.CLIENT: 0,
    NodeKind.SERVER: 1,
    NodeKind.EVENT: 2,
    NodeKind.EVENT_GROUP: 2,
    NodeKind.SINK: 3,
}


@dataclass(frozen=True, slots=True)
class LayoutNode:
    """Positioned node. ``x``/``y`` is the top-left corner."""

    id: NodeId
    column: int
    x: float
    y: float
    width: float
    height: float
    group: str | None = None

    @property
    def kind(self) -> NodeKind:
        return self.id.kind


@dataclass(frozen=True, slots=True)
class LayerBand:
    """Background band behind one non-empty column."""

    id: str
    kind: NodeKind
    column: int
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True, slots=True)
class Layout:
    nodes: tuple[LayoutNode, ...]
    layers: tuple[LayerBand, ...]
    center_y: float

    def position_of(self, node: NodeId) -> LayoutNode | None:
        for item in self.nodes:
            if item.id == node:
                return item
        return None


@dataclass(frozen=True, slots=True)
class _EventItem:
    """Sortable unit of the events column: one loose event or one group."""

    events: tuple[Event, ...]
    priority: int
    group: str | None
    height: float


def _unique_by_id(entities: Sequence) -> list:
    seen: set[str] = set()
    result = []
    for entity in entities:
        if entity.id in seen:
            continue
        seen.add(entity.id)
        result.append(entity)
    return result


def _container_id(group: str, taken: set[str]) -> NodeId:
    """Return a group container id whose key is not in ``taken``, then claim it.

    An event named ``group-{name}`` has the key ``event-group-{name}``; the
    container of group ``name`` then gets an underscore suffix.
    """
    node = NodeId.event_group(group)
    while node.key in taken:
        node = NodeId.event_group(f"{node.entity_id}_")
    taken.add(node.key)
    return node


class LayoutEngine:
    """Compute node positions from the entity lists of a snapshot.

    Args:
        config: Layout dimensions.
    """

    def __init__(self, config: LayoutConfig | None = None) -> None:
        self.config = config or LayoutConfig()

    @property
    def _step(self) -> float:
        return self.config.node_height + self.config.node_spacing

    def _block_height(self, count: int) -> float:
        return count * self._step - self.config.node_spacing

    def _band_width(self) -> float:
        cfg = self.config
        return cfg.node_width + cfg.layer_header_width + cfg.layer_padding

    def _band(
        self, kind: NodeKind, content_top: float, content_height: float
    ) -> LayerBand:
        column = COLUMN_INDEX[kind]
        pad = self.config.layer_padding
        return LayerBand(
            id=layer_id(kind),
            kind=kind,
            column=column,
            x=column * self.config.column_spacing,
            y=content_top - pad,
            width=self._band_width(),
            height=content_height + 2 * pad,
        )

    def _node_x(self, column: int) -> float:
        return column * self.config.column_spacing + self.config.layer_header_width

    def layout_column(
        self, node_ids: Sequence[NodeId], kind: NodeKind, center_y: float
    ) -> tuple[list[LayoutNode], LayerBand | None]:
        """Lay out a column of uniform nodes centered on ``center_y``.

        Args:
            node_ids: Nodes in display order.
            kind: Column kind (client, server or sink).
            center_y: Shared vertical center line.

        Returns:
            Tuple of positioned nodes and the band (None for an empty column).
        """
        if not node_ids:
            return [], None
        column = COLUMN_INDEX[kind]
        block = self._block_height(len(node_ids))
        top = center_y - block / 2
        x = self._node_x(column)
        nodes = [
            LayoutNode(
                id=node,
                column=column,
                x=x,
                y=top + i * self._step,
                width=self.config.node_width,
                height=self.config.node_height,
            )
            for i, node in enumerate(node_ids)
        ]
        return nodes, self._band(kind, top, block)

    def _event_items(self, events: Sequence[Event]) -> list[_EventItem]:
        """Group events and order loose events and groups by priority.

        Events are sorted by priority (stable) before grouping, so members of
        a group are already in priority order. Loose events are listed before
        groups ahead of the final stable sort, which decides ties.
        """
        cfg = self.config
        by_priority = sorted(events, key=lambda e: -e.priority)

        groups: dict[str, list[Event]] = {}
        loose: list[Event] = []
        for event in by_priority:
            if event.group:
                groups.setdefault(event.group, []).append(event)
            else:
                loose.append(event)

        items = [
            _EventItem(
                events=(e,), priority=e.priority, group=None, height=cfg.node_height
            )
            for e in loose
        ]
        for name, members in groups.items():
            n = len(members)
            height = (
                cfg.group_header_height
                + n * cfg.node_height
                + (n - 1) * cfg.node_spacing
                + cfg.group_internal_padding
            )
            items.append(
                _EventItem(
                    events=tuple(members),
                    priority=max(e.priority for e in members),
                    group=name,
                    height=height,
                )
            )

        items.sort(key=lambda item: -item.priority)
        return items

    def layout_events(
        self, events: Sequence[Event], center_y: float
    ) -> tuple[list[LayoutNode], LayerBand | None]:
        """Lay out the events column with priority-ordered groups."""
        if not events:
            return [], None
        cfg = self.config
        column = COLUMN_INDEX[NodeKind.EVENT]
        items = self._event_items(events)
        taken = {NodeId.event(e.id).key for e in events}

        offsets: list[float] = []
        current = 0.0
        for index, item in enumerate(items):
            offsets.append(current)
            current += item.height
            if index < len(items) - 1:
                current += cfg.node_spacing
        total = current
        top = center_y - total / 2

        node_x = self._node_x(column)
        group_inset = cfg.layer_padding / 2
        nodes: list[LayoutNode] = []
        for item, offset in zip(items, offsets, strict=True):
            item_y = top + offset
            if item.group is None:
                nodes.append(
                    LayoutNode(
                        id=NodeId.event(item.events[0].id),
                        column=column,
                        x=node_x,
                        y=item_y,
                        width=cfg.node_width,
                        height=cfg.node_height,
                    )
                )
                continue

            nodes.append(
                LayoutNode(
                    id=_container_id(item.group, taken),
                    column=column,
                    x=column * cfg.column_spacing + group_inset,
                    y=item_y,
                    width=self._band_width() - 2 * group_inset,
                    height=item.height,
                    group=item.group,
                )
            )
            for idx, event in enumerate(item.events):
                nodes.append(
                    LayoutNode(
                        id=NodeId.event(event.id),
                        column=column,
                        x=node_x,
                        y=item_y + cfg.group_header_height + idx * self._step,
                        width=cfg.node_width,
                        height=cfg.node_height,
                        group=item.group,
                    )
                )

        return nodes, self._band(NodeKind.EVENT, top, total)

    def compute(self, snapshot: ConfigSnapshot) -> Layout:
        """Compute the full layout for a snapshot.

        Args:
            snapshot: Configuration snapshot.

        Returns:
            Layout with nodes in column order and one band per non-empty column.
        """
        clients = _unique_by_id(snapshot.clients)
        servers = _unique_by_id(snapshot.servers)
        events = _unique_by_id(snapshot.events)
        sinks = _unique_by_id(snapshot.sinks)

        max_items = max(len(clients), len(servers), len(events), len(sinks))
        center_y = self._block_height(max_items) / 2 if max_items else 0.0

        columns = [
            self.layout_column(
                [NodeId.client(c.id) for c in clients], NodeKind.CLIENT, center_y
            ),
            self.layout_column(
                [NodeId.server(s.id) for s in servers], NodeKind.SERVER, center_y
            ),
            self.layout_events(events, center_y),
            self.layout_column(
                [NodeId.sink(k.id) for k in sinks], NodeKind.SINK, center_y
            ),
        ]

        nodes: list[LayoutNode] = []
        layers: list[LayerBand] = []
        for column_nodes, band in columns:
            nodes.extend(column_nodes)
            if band is not None:
                layers.append(band)

        logger.debug(
            f"Layout: {len(nodes)} positioned nodes, {len(layers)} bands, "
            f"center line at y={center_y:g}"
        )
        return Layout(nodes=tuple(nodes), layers=tuple(layers), center_y=center_y)
