"""Summary counters for the data flow overview."""

from __future__ import annotations

from dataclasses import asdict, dataclass

from notifyflow.graph_builder import FlowGraph
from notifyflow.naming import NodeKind
from notifyflow.reachability import ReachabilityAnalyzer


@dataclass(frozen=True, slots=True)
class FlowStats:
    """Entity, routing path and orphan counters for one snapshot.

    Attributes:
        rendered_routing_paths: Paths drawn as explicit edges (wildcard events
            and unknown events excluded).
        events_with_wildcard_servers: Events whose paths are not drawn.
        orphaned_*: Nodes without live input, counted regardless of their own
            enabled flag. Clients are never orphaned.
    """

    total_clients: int = 0
    enabled_clients: int = 0
    total_servers: int = 0
    enabled_servers: int = 0
    total_events: int = 0
    enabled_events: int = 0
    total_sinks: int = 0
    enabled_sinks: int = 0
    total_routing_paths: int = 0
    enabled_routing_paths: int = 0
    rendered_routing_paths: int = 0
    events_with_wildcard_servers: int = 0
    grouped_events: int = 0
    orphaned_servers: int = 0
    orphaned_events: int = 0
    orphaned_sinks: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


def compute_stats(flow: FlowGraph, reachability: ReachabilityAnalyzer) -> FlowStats:
    """Compute summary counters for a built and analysed flow graph."""
    snap = flow.snapshot

    def _orphans(kind: NodeKind) -> int:
        return sum(1 for n in flow.nodes_of(kind) if reachability.is_orphaned(n))

    return FlowStats(
        total_clients=len(snap.clients),
        enabled_clients=sum(1 for c in snap.clients if c.enabled),
        total_servers=len(snap.servers),
        enabled_servers=sum(1 for s in snap.servers if s.enabled),
        total_events=len(snap.events),
        enabled_events=sum(1 for e in snap.events if e.enabled),
        total_sinks=len(snap.sinks),
        enabled_sinks=sum(1 for k in snap.sinks if k.enabled),
        total_routing_paths=len(snap.routing_paths),
        enabled_routing_paths=sum(1 for p in snap.routing_paths if p.enabled),
        rendered_routing_paths=len(flow.retained_paths),
        events_with_wildcard_servers=sum(1 for e in snap.events if e.is_wildcard),
        grouped_events=sum(1 for e in snap.events if e.group),
        orphaned_servers=_orphans(NodeKind.SERVER),
        orphaned_events=_orphans(NodeKind.EVENT),
        orphaned_sinks=_orphans(NodeKind.SINK),
    )
