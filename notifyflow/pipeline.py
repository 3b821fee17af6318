"""End-to-end data flow computation with snapshot-keyed caching.

Runs graph construction, reachability, layout and edge classification for a
snapshot and bundles the results into a ``FlowView``. Views are pure
functions of the snapshot and the configuration, so ``FlowEngine`` caches
them by snapshot fingerprint.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field

from notifyflow.config import FlowConfig
from notifyflow.edges import Edge, classify_edges
from notifyflow.graph_builder import FlowGraph, build_flow_graph
from notifyflow.highlight import PathHighlighter, Selection
from notifyflow.layout import LayerBand, LayoutEngine, LayoutNode
from notifyflow.log_config import get_logger
from notifyflow.naming import NodeId
from notifyflow.reachability import ReachabilityAnalyzer
from notifyflow.snapshot import ConfigSnapshot
from notifyflow.stats import FlowStats, compute_stats
from notifyflow.status import FlowStatus, node_color, resolve_status

logger = get_logger(__name__)


@dataclass
class FlowView:
    """Computed data flow view for one snapshot.

    Attributes:
        nodes: Positioned nodes (entities and event group containers).
        edges: Classified edges.
        layers: Background bands of the non-empty columns.
        statuses: Display status of every entity node.
        colors: Fill color of every entity node.
        stats: Summary counters.
        fingerprint: Fingerprint of the source snapshot.
        highlight_color: Color for selected nodes and edges.
    """

    nodes: list[LayoutNode]
    edges: list[Edge]
    layers: list[LayerBand]
    statuses: dict[NodeId, FlowStatus]
    colors: dict[NodeId, str]
    stats: FlowStats
    fingerprint: str
    flow: FlowGraph = field(repr=False)
    reachability: ReachabilityAnalyzer = field(repr=False)
    highlighter: PathHighlighter = field(repr=False)
    highlight_color: str = "#3b82f6"

    def highlight(self, node: NodeId | str) -> Selection:
        """Return nodes and edges on complete paths through ``node``."""
        return self.highlighter.highlight(node)

    def edge(self, edge_id: str) -> Edge | None:
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    def is_orphaned(self, node: NodeId) -> bool:
        return self.reachability.is_orphaned(node)


def compute_view(snapshot: ConfigSnapshot, config: FlowConfig | None = None) -> FlowView:
    """Run the full pipeline for a snapshot.

    Args:
        snapshot: Configuration snapshot.
        config: Engine configuration; defaults to ``FlowConfig()``.

    Returns:
        Computed view.
    """
    config = config or FlowConfig()

    flow = build_flow_graph(snapshot)
    reachability = ReachabilityAnalyzer(
        flow, strategy=config.analysis.reachability_strategy
    )
    layout = LayoutEngine(config.layout).compute(snapshot)
    edges = classify_edges(flow, reachability, config.colors)

    statuses: dict[NodeId, FlowStatus] = {}
    colors: dict[NodeId, str] = {}
    for node in flow.graph.nodes:
        status = resolve_status(flow.is_enabled(node), reachability.is_orphaned(node))
        statuses[node] = status
        colors[node] = node_color(status, config.colors)

    view = FlowView(
        nodes=list(layout.nodes),
        edges=edges,
        layers=list(layout.layers),
        statuses=statuses,
        colors=colors,
        stats=compute_stats(flow, reachability),
        fingerprint=snapshot.fingerprint(),
        flow=flow,
        reachability=reachability,
        highlighter=PathHighlighter(flow, strategy=config.analysis.highlight_strategy),
        highlight_color=config.colors.highlight,
    )
    logger.info(
        f"Computed data flow view: {len(view.nodes)} nodes, {len(view.edges)} edges"
    )
    return view


class FlowEngine:
    """Compute views and cache them by snapshot fingerprint.

    Args:
        config: Engine configuration; defaults to ``FlowConfig()``.
    """

    def __init__(self, config: FlowConfig | None = None) -> None:
        self.config = config or FlowConfig()
        self._cache: OrderedDict[str, FlowView] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def view(self, snapshot: ConfigSnapshot) -> FlowView:
        """Return the view for ``snapshot``, computing it on a cache miss."""
        if not self.config.cache.enabled:
            self.misses += 1
            return compute_view(snapshot, self.config)

        key = snapshot.fingerprint()
        cached = self._cache.get(key)
        if cached is not None:
            self.hits += 1
            self._cache.move_to_end(key)
            logger.debug(f"View cache hit for snapshot {key[:12]}")
            return cached

        self.misses += 1
        view = compute_view(snapshot, self.config)
        self._cache[key] = view
        while len(self._cache) > int(self.config.cache.max_entries):
            evicted, _ = self._cache.popitem(last=False)
            logger.debug(f"Evicted cached view for snapshot {evicted[:12]}")
        return view

    def highlight(self, snapshot: ConfigSnapshot, node: NodeId | str) -> Selection:
        return self.view(snapshot).highlight(node)

    def clear(self) -> None:
        self._cache.clear()
