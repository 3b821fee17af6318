"""Orphan detection over the connection graph.

A node is orphaned when it has no live input: no incoming connection that is
enabled and whose source is itself not orphaned. Clients are the roots of the
flow and are never orphaned. The node's own enabled flag plays no part here;
it is already folded into every connection the node takes part in.
"""

from __future__ import annotations

from notifyflow.graph_builder import FlowGraph
from notifyflow.log_config import get_logger
from notifyflow.naming import NodeId, NodeKind

logger = get_logger(__name__)


def _fixed_point(flow: FlowGraph) -> dict[NodeId, bool]:
    """Resolve orphan status by iterating to a fixed point.

    Every non-client node starts orphaned and flips to live once one of its
    enabled connections comes from a live source. Values only ever change from
    orphaned to live, so at most one sweep per node is needed; nodes on a cycle
    without a live entry stay orphaned.
    """
    nodes = list(flow.graph.nodes)
    status = {n: n.kind is not NodeKind.CLIENT for n in nodes}
    incoming = {n: flow.incoming(n) for n in nodes if n.kind is not NodeKind.CLIENT}

    sweeps = 0
    changed = True
    while changed and sweeps <= len(nodes):
        changed = False
        sweeps += 1
        for node, connections in incoming.items():
            if not status[node]:
                continue
            live = any(
                c.enabled and not status.get(c.source, True) for c in connections
            )
            if live:
                status[node] = False
                changed = True

    logger.debug(f"Orphan fixed point reached after {sweeps} sweeps")
    return status


def _provisional(flow: FlowGraph) -> dict[NodeId, bool]:
    """Resolve orphan status with the recursive memoized rule.

    While a node's sources are probed the node is provisionally marked as not
    orphaned, which stops recursion on cycles. The mark is removed once the
    probe returns and the final value is stored from the real rule.
    """
    cache: dict[NodeId, bool] = {}

    def is_orphaned(node: NodeId) -> bool:
        if node in cache:
            return cache[node]
        if node.kind is NodeKind.CLIENT:
            cache[node] = False
            return False

        connections = flow.incoming(node)
        if not connections:
            cache[node] = True
            return True

        has_live_input = False
        for conn in connections:
            if not conn.enabled:
                continue
            cache[node] = False
            source_orphaned = is_orphaned(conn.source)
            cache.pop(node, None)
            if not source_orphaned:
                has_live_input = True
                break

        cache[node] = not has_live_input
        return cache[node]

    for node in flow.graph.nodes:
        is_orphaned(node)
    return cache


class ReachabilityAnalyzer:
    """Orphan status for every node of one flow graph.

    Status is computed once on construction and memoized for the lifetime of
    the analyzer; a new snapshot needs a new analyzer.

    Args:
        flow: Flow graph to analyse.
        strategy: "fixed_point" (default) or "provisional".

    Raises:
        ValueError: If the strategy is unknown.
    """

    def __init__(self, flow: FlowGraph, strategy: str = "fixed_point") -> None:
        if strategy == "fixed_point":
            resolver = _fixed_point
        elif strategy == "provisional":
            resolver = _provisional
        else:
            raise ValueError(f"Unknown reachability strategy: {strategy}")
        self.flow = flow
        self.strategy = strategy
        self._status = resolver(flow)
        orphaned = sum(1 for v in self._status.values() if v)
        logger.info(
            f"Reachability ({strategy}): {orphaned} of {len(self._status)} nodes orphaned"
        )

    def is_orphaned(self, node: NodeId) -> bool:
        """Return whether ``node`` has no live incoming connection.

        Clients are never orphaned. Nodes unknown to the graph are orphaned
        unless they are clients.
        """
        if node.kind is NodeKind.CLIENT:
            return False
        return self._status.get(node, True)

    def orphaned_nodes(self) -> list[NodeId]:
        """Return all orphaned nodes in graph order."""
        return [n for n, orphaned in self._status.items() if orphaned]
