"""Data flow graph construction from a configuration snapshot.

Builds the node set (one node per client, server, event and sink) and the
connection multigraph used by the analysis steps:

1. Client → server connections come from ``Server.client_ids``.
2. Server → event and event → sink connections come from the routing paths,
   excluding paths of wildcard events (``applies_to_all_servers`` or no
   explicit server ids). Wildcard fan-out cannot be drawn as discrete edges
   without enumerating every server, so those paths are not rendered.

Every connection is stored as one parallel edge of a ``networkx.MultiDiGraph``
and carries its combined enabled flag (both endpoints enabled) together with
the record of the path that produced it. References to unknown entities are
skipped without raising.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import networkx as nx

from notifyflow.log_config import get_logger
from notifyflow.naming import NodeId, NodeKind
from notifyflow.snapshot import ConfigSnapshot, RoutingPath

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class EdgePathInfo:
    """Per-hop enabled flags of one record contributing to an edge.

    Attributes:
        path_id: ``client-server-{client}-{server}`` for synthesized records,
            ``path-{index}`` for routing paths (index among retained paths).
        enabled: Combined flag of the two entities joined by this hop.
    """

    path_id: str
    enabled: bool
    client_enabled: bool = True
    server_enabled: bool = True
    event_enabled: bool = True
    sink_enabled: bool = True

    def source_enabled(self, kind: NodeKind) -> bool:
        """Return the flag of the hop's source entity of the given kind."""
        if kind is NodeKind.CLIENT:
            return self.client_enabled
        if kind is NodeKind.SERVER:
            return self.server_enabled
        if kind is NodeKind.EVENT:
            return self.event_enabled
        if kind is NodeKind.SINK:
            return self.sink_enabled
        return False


@dataclass(frozen=True, slots=True)
class Connection:
    """One potential source → target link."""

    source: NodeId
    target: NodeId
    enabled: bool
    path: EdgePathInfo

    @property
    def source_kind(self) -> NodeKind:
        return self.source.kind


@dataclass
class FlowGraph:
    """Node set and connections derived from one snapshot.

    Attributes:
        snapshot: Source snapshot.
        graph: MultiDiGraph keyed by NodeId; node attributes ``kind``,
            ``name`` and ``enabled``; each edge holds a ``connection``.
        connections: All connections in creation order.
        retained_paths: Routing paths that survived the wildcard filter.
    """

    snapshot: ConfigSnapshot
    graph: nx.MultiDiGraph = field(default_factory=nx.MultiDiGraph)
    connections: list[Connection] = field(default_factory=list)
    retained_paths: list[RoutingPath] = field(default_factory=list)

    def nodes_of(self, kind: NodeKind) -> list[NodeId]:
        """Return the nodes of one kind in snapshot order."""
        return [n for n, k in self.graph.nodes(data="kind") if k is kind]

    def is_enabled(self, node: NodeId) -> bool:
        """Return the node's own enabled flag (False for unknown nodes)."""
        if node not in self.graph:
            return False
        return bool(self.graph.nodes[node].get("enabled", False))

    def incoming(self, node: NodeId) -> list[Connection]:
        """Return the connections whose target is ``node``."""
        if node not in self.graph:
            return []
        return [d["connection"] for _u, _v, d in self.graph.in_edges(node, data=True)]

    def add_connection(self, connection: Connection) -> None:
        self.graph.add_edge(
            connection.source, connection.target, connection=connection
        )
        self.connections.append(connection)

    def flow_digraph(self) -> nx.DiGraph:
        """Return a simple DiGraph with one edge per connected node pair."""
        simple = nx.DiGraph()
        simple.add_nodes_from(self.graph.nodes(data=True))
        for conn in self.connections:
            simple.add_edge(conn.source, conn.target)
        return simple


def _is_retained(path: RoutingPath, snapshot: ConfigSnapshot) -> bool:
    event = snapshot.event(path.event_id)
    if event is None:
        logger.debug(f"Skipping routing path for unknown event '{path.event_id}'")
        return False
    return not event.is_wildcard


def build_flow_graph(snapshot: ConfigSnapshot) -> FlowGraph:
    """Build the data flow graph for a snapshot.

    Args:
        snapshot: Configuration snapshot.

    Returns:
        FlowGraph with all entity nodes and connections.
    """
    flow = FlowGraph(snapshot=snapshot)
    G = flow.graph

    for kind, entities in (
        (NodeKind.CLIENT, snapshot.clients),
        (NodeKind.SERVER, snapshot.servers),
        (NodeKind.EVENT, snapshot.events),
        (NodeKind.SINK, snapshot.sinks),
    ):
        for entity in entities:
            node = NodeId(kind, entity.id)
            if node in G:
                logger.debug(f"Duplicate {kind.value} id '{entity.id}' ignored")
                continue
            G.add_node(node, kind=kind, name=entity.name, enabled=entity.enabled)

    skipped = 0

    # Client -> server from server.client_ids
    for server in snapshot.servers:
        for client_id in server.client_ids:
            client = snapshot.client(client_id)
            if client is None:
                skipped += 1
                logger.debug(
                    f"Server '{server.id}' references unknown client '{client_id}'"
                )
                continue
            enabled = client.enabled and server.enabled
            flow.add_connection(
                Connection(
                    source=NodeId.client(client_id),
                    target=NodeId.server(server.id),
                    enabled=enabled,
                    path=EdgePathInfo(
                        path_id=f"client-server-{client_id}-{server.id}",
                        enabled=enabled,
                        client_enabled=client.enabled,
                        server_enabled=server.enabled,
                    ),
                )
            )

    flow.retained_paths = [p for p in snapshot.routing_paths if _is_retained(p, snapshot)]
    excluded = len(snapshot.routing_paths) - len(flow.retained_paths)
    if excluded:
        logger.debug(f"Excluded {excluded} wildcard or dangling routing paths")

    # Server -> event and event -> sink from retained routing paths
    for index, path in enumerate(flow.retained_paths):
        path_id = f"path-{index}"
        event_node = NodeId.event(path.event_id)

        if snapshot.server(path.server_id) is not None:
            enabled = path.server_enabled and path.event_enabled
            flow.add_connection(
                Connection(
                    source=NodeId.server(path.server_id),
                    target=event_node,
                    enabled=enabled,
                    path=EdgePathInfo(
                        path_id=path_id,
                        enabled=enabled,
                        client_enabled=path.client_enabled,
                        server_enabled=path.server_enabled,
                        event_enabled=path.event_enabled,
                    ),
                )
            )
        else:
            skipped += 1
            logger.debug(f"Routing path references unknown server '{path.server_id}'")

        for sink in path.sink_statuses:
            if snapshot.sink(sink.id) is None:
                skipped += 1
                logger.debug(f"Routing path references unknown sink '{sink.id}'")
                continue
            enabled = path.event_enabled and sink.enabled
            flow.add_connection(
                Connection(
                    source=event_node,
                    target=NodeId.sink(sink.id),
                    enabled=enabled,
                    path=EdgePathInfo(
                        path_id=path_id,
                        enabled=enabled,
                        client_enabled=path.client_enabled,
                        server_enabled=path.server_enabled,
                        event_enabled=path.event_enabled,
                        sink_enabled=sink.enabled,
                    ),
                )
            )

    logger.info(
        f"Built flow graph: {G.number_of_nodes()} nodes, "
        f"{len(flow.connections)} connections"
    )
    if skipped:
        logger.debug(f"Skipped {skipped} dangling references")
    return flow
