"""Tests for edge aggregation and coloring."""

from notifyflow.config import ColorConfig
from notifyflow.edges import classify_edges
from notifyflow.graph_builder import build_flow_graph
from notifyflow.reachability import ReachabilityAnalyzer
from notifyflow.snapshot import ConfigSnapshot
from notifyflow.status import FlowStatus


def _edges(snapshot, colors=None):
    flow = build_flow_graph(snapshot)
    return classify_edges(flow, ReachabilityAnalyzer(flow), colors)


def test_sample_edges_in_first_seen_order(sample_snapshot):
    ids = [e.id for e in _edges(sample_snapshot)]
    assert ids == [
        "client-c1→server-s1",
        "client-c2→server-s2",
        "server-s1→event-e1",
        "event-e1→sink-k1",
        "server-s1→event-e2",
        "event-e2→sink-k1",
        "event-e2→sink-k2",
        "server-s2→event-e3",
        "event-e3→sink-k3",
    ]


def test_sample_edge_statuses(sample_snapshot):
    statuses = {e.id: e.status for e in _edges(sample_snapshot)}
    assert statuses["client-c2→server-s2"] is FlowStatus.DISABLED
    assert statuses["server-s2→event-e3"] is FlowStatus.ORPHANED
    assert statuses["event-e3→sink-k3"] is FlowStatus.ORPHANED
    # Colored from the source side: the disabled sink does not matter
    assert statuses["event-e2→sink-k2"] is FlowStatus.ACTIVE
    active = [k for k, v in statuses.items() if v is FlowStatus.ACTIVE]
    assert len(active) == 6


def test_default_stroke_colors(sample_snapshot):
    colors = {e.id: e.stroke_color for e in _edges(sample_snapshot)}
    assert colors["client-c1→server-s1"] == "#10b981"
    assert colors["client-c2→server-s2"] == "#dc2626"
    assert colors["server-s2→event-e3"] == "#64748b"


def test_custom_palette(sample_snapshot):
    palette = ColorConfig(active="#00ff00", orphaned_edge="#999999")
    colors = {e.id: e.stroke_color for e in _edges(sample_snapshot, palette)}
    assert colors["client-c1→server-s1"] == "#00ff00"
    assert colors["event-e3→sink-k3"] == "#999999"


def test_parallel_connections_are_merged():
    snapshot = ConfigSnapshot.from_dict(
        {
            "clients": [{"id": "c1"}],
            "servers": [{"id": "s1", "clientIds": ["c1"]}],
            "events": [{"id": "e1", "serverIds": ["s1"]}],
            "sinks": [{"id": "k1"}],
            "routingPaths": [
                {"clientId": "c1", "serverId": "s1", "eventId": "e1",
                 "sinkStatuses": [{"id": "k1"}]},
                {"clientId": "c1", "serverId": "s1", "eventId": "e1",
                 "sinkStatuses": [{"id": "k1"}], "eventEnabled": False},
            ],
        }
    )
    edges = {e.id: e for e in _edges(snapshot)}
    assert len(edges) == 3
    merged = edges["event-e1→sink-k1"]
    assert [p.path_id for p in merged.contributing_paths] == ["path-0", "path-1"]
    # One record with the source flag set is enough for a live edge
    assert merged.status is FlowStatus.ACTIVE
    assert merged.enabled is True


def test_edge_disabled_when_no_record_has_source_flag(chain_snapshot):
    edges = {e.id: e for e in _edges(chain_snapshot(event_enabled=False))}
    edge = edges["event-e1→sink-sk1"]
    assert edge.status is FlowStatus.DISABLED
    assert edge.enabled is False
    # Server side is unaffected, but its target is disabled
    assert edges["server-s1→event-e1"].status is FlowStatus.ACTIVE


def test_no_edges_for_empty_snapshot():
    assert _edges(ConfigSnapshot()) == []
