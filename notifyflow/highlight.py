"""Highlighting of complete paths through a selected node.

A complete path starts at a client and follows edges until a node without
outgoing edges. Selecting a node highlights every node and edge that lies on
at least one complete path through it.

Two strategies are available. ``traversal`` (default) answers with one
ancestor sweep and one descendant sweep from the selected node, restricted to
what clients can reach; it is linear in the graph size. ``exhaustive``
enumerates every simple client-to-leaf path and filters them; it is
exponential in the branching factor and kept for cross-checking. Both give
the same answer on acyclic graphs.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import networkx as nx

from notifyflow.graph_builder import FlowGraph
from notifyflow.log_config import get_logger
from notifyflow.naming import NodeId, NodeKind, edge_id

logger = get_logger(__name__)


@dataclass(frozen=True)
class Selection:
    """Nodes and edge ids to highlight."""

    nodes: frozenset[NodeId] = field(default_factory=frozenset)
    edges: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_empty(self) -> bool:
        return not self.nodes


EMPTY_SELECTION = Selection()


def enumerate_paths(graph: nx.DiGraph, start: NodeId) -> list[list[NodeId]]:
    """Enumerate simple paths from ``start`` to nodes without successors.

    A branch that can only continue into nodes already on the current path
    ends where it is.

    Args:
        graph: Directed flow graph.
        start: First node of every path.

    Returns:
        List of node paths.
    """

    def walk(node: NodeId, visited: frozenset[NodeId]) -> list[list[NodeId]]:
        if node in visited:
            return []
        visited = visited | {node}
        successors = list(graph.successors(node))
        if not successors:
            return [[node]]
        extended: list[list[NodeId]] = []
        for nxt in successors:
            for sub in walk(nxt, visited):
                extended.append([node, *sub])
        return extended or [[node]]

    return walk(start, frozenset())


class PathHighlighter:
    """Answer highlight queries for one flow graph.

    Args:
        flow: Flow graph; only read, never modified.
        strategy: "traversal" (default) or "exhaustive".

    Raises:
        ValueError: If the strategy is unknown.
    """

    def __init__(self, flow: FlowGraph, strategy: str = "traversal") -> None:
        if strategy not in ("traversal", "exhaustive"):
            raise ValueError(f"Unknown highlight strategy: {strategy}")
        self.strategy = strategy
        self.graph = flow.flow_digraph()
        self.roots = [n for n in self.graph.nodes if n.kind is NodeKind.CLIENT]
        self._root_reach: set[NodeId] | None = None

    @property
    def root_reach(self) -> set[NodeId]:
        """Nodes reachable from any client, clients included."""
        if self._root_reach is None:
            reach: set[NodeId] = set(self.roots)
            for root in self.roots:
                reach |= nx.descendants(self.graph, root)
            self._root_reach = reach
        return self._root_reach

    def highlight(self, node: NodeId | str) -> Selection:
        """Return everything on complete paths through ``node``.

        Args:
            node: Selected node, as NodeId or string key.

        Returns:
            Selection that always contains the node itself when it exists.
            Unknown ids (layer bands, group containers) give an empty selection.
        """
        if isinstance(node, str):
            # "event-group-x" may name the event "group-x"
            found = [n for n in NodeId.readings(node) if n in self.graph]
            if not found:
                return EMPTY_SELECTION
            node = found[0]
        if node not in self.graph:
            return EMPTY_SELECTION

        if self.strategy == "exhaustive":
            selection = self._exhaustive(node)
        else:
            selection = self._traversal(node)
        logger.debug(
            f"Highlight {node.key}: {len(selection.nodes)} nodes, "
            f"{len(selection.edges)} edges"
        )
        return selection

    def _traversal(self, node: NodeId) -> Selection:
        if node not in self.root_reach:
            return Selection(nodes=frozenset({node}))

        upstream = (nx.ancestors(self.graph, node) & self.root_reach) | {node}
        downstream = nx.descendants(self.graph, node) | {node}

        edges = {
            edge_id(u, v)
            for u, v in self.graph.edges
            if (u in upstream and v in upstream)
            or (u in downstream and v in downstream)
        }
        return Selection(nodes=frozenset(upstream | downstream), edges=frozenset(edges))

    def _exhaustive(self, node: NodeId) -> Selection:
        nodes: set[NodeId] = {node}
        edges: set[str] = set()
        for root in self.roots:
            for path in enumerate_paths(self.graph, root):
                if node not in path:
                    continue
                nodes.update(path)
                for u, v in zip(path, path[1:], strict=False):
                    edges.add(edge_id(u, v))
        return Selection(nodes=frozenset(nodes), edges=frozenset(edges))
