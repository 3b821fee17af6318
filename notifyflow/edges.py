"""Edge aggregation and classification.

Connections between the same pair of nodes are merged into one displayed
edge that keeps every contributing path record. The edge color reflects the
state of the source node as seen through those records, never the target.
"""

from __future__ import annotations

from dataclasses import dataclass

from notifyflow.config import ColorConfig
from notifyflow.graph_builder import EdgePathInfo, FlowGraph
from notifyflow.log_config import get_logger
from notifyflow.naming import NodeId, edge_id
from notifyflow.reachability import ReachabilityAnalyzer
from notifyflow.status import FlowStatus, edge_color, resolve_status

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Edge:
    """Displayed edge between two nodes.

    Attributes:
        id: ``"source→target"``.
        contributing_paths: Path records merged into this edge, in creation
            order.
        status: Display status derived from the source node.
        stroke_color: Color for ``status``.
    """

    id: str
    source: NodeId
    target: NodeId
    contributing_paths: tuple[EdgePathInfo, ...]
    status: FlowStatus
    stroke_color: str

    @property
    def enabled(self) -> bool:
        """Whether any contributing record is enabled end to end."""
        return any(p.enabled for p in self.contributing_paths)


def classify_edges(
    flow: FlowGraph,
    reachability: ReachabilityAnalyzer,
    colors: ColorConfig | None = None,
) -> list[Edge]:
    """Aggregate connections into edges and classify them.

    Args:
        flow: Flow graph with connections.
        reachability: Orphan status of the same graph.
        colors: Color palette; defaults to ``ColorConfig()``.

    Returns:
        One edge per connected ``(source, target)`` pair in first-seen order.
    """
    colors = colors or ColorConfig()

    grouped: dict[tuple[NodeId, NodeId], list[EdgePathInfo]] = {}
    for conn in flow.connections:
        grouped.setdefault((conn.source, conn.target), []).append(conn.path)

    edges: list[Edge] = []
    for (source, target), records in grouped.items():
        source_enabled = any(r.source_enabled(source.kind) for r in records)
        status = resolve_status(source_enabled, reachability.is_orphaned(source))
        edges.append(
            Edge(
                id=edge_id(source, target),
                source=source,
                target=target,
                contributing_paths=tuple(records),
                status=status,
                stroke_color=edge_color(status, colors),
            )
        )

    counts = {s: 0 for s in FlowStatus}
    for edge in edges:
        counts[edge.status] += 1
    logger.debug(
        "Classified edges: "
        + ", ".join(f"{s.value}={n}" for s, n in counts.items())
    )
    return edges
