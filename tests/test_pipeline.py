"""End-to-end tests for view computation and the view cache."""

import json

import pytest

from notifyflow.config import CacheConfig, FlowConfig
from notifyflow.export import view_to_dict
from notifyflow.naming import NodeId
from notifyflow.pipeline import FlowEngine, compute_view
from notifyflow.snapshot import ConfigSnapshot
from notifyflow.status import FlowStatus

GREEN = "#10b981"
GRAY = "#94a3b8"
RED = "#dc2626"


def _scenario(client_enabled=True, server_enabled=True) -> ConfigSnapshot:
    return ConfigSnapshot.from_dict(
        {
            "clients": [{"id": "c1", "enabled": client_enabled}],
            "servers": [{"id": "s1", "enabled": server_enabled, "clientIds": ["c1"]}],
        }
    )


def test_scenario_a_live_server_is_green():
    view = compute_view(_scenario())
    s1 = NodeId.server("s1")
    assert view.is_orphaned(s1) is False
    assert view.statuses[s1] is FlowStatus.ACTIVE
    assert view.colors[s1] == GREEN
    assert view.edges[0].enabled is True


def test_scenario_b_disabled_client_orphans_server():
    view = compute_view(_scenario(client_enabled=False))
    s1 = NodeId.server("s1")
    assert view.is_orphaned(s1) is True
    assert view.statuses[s1] is FlowStatus.ORPHANED
    assert view.colors[s1] == GRAY
    assert view.colors[NodeId.client("c1")] == RED


def test_scenario_c_disabled_wins_over_orphaned():
    view = compute_view(_scenario(client_enabled=False, server_enabled=False))
    s1 = NodeId.server("s1")
    assert view.is_orphaned(s1) is True
    assert view.statuses[s1] is FlowStatus.DISABLED
    assert view.colors[s1] == RED


def test_scenario_d_full_chain_is_green(chain_snapshot):
    view = compute_view(chain_snapshot())
    assert set(view.statuses.values()) == {FlowStatus.ACTIVE}
    assert all(e.stroke_color == GREEN for e in view.edges)
    selection = view.highlight("sink-sk1")
    assert {n.key for n in selection.nodes} == {
        "client-c1",
        "server-s1",
        "event-e1",
        "sink-sk1",
    }
    assert len(selection.edges) == 3


@pytest.mark.parametrize("enabled", [True, False])
def test_scenario_e_wildcard_has_no_server_edge(chain_snapshot, enabled):
    view = compute_view(
        chain_snapshot(wildcard=True, server_enabled=enabled, event_enabled=enabled)
    )
    assert [e.id for e in view.edges] == ["client-c1→server-s1"]
    assert view.edge("server-s1→event-e1") is None


def test_sample_statuses(sample_snapshot):
    view = compute_view(sample_snapshot)
    statuses = {n.key: s.value for n, s in view.statuses.items()}
    assert statuses == {
        "client-c1": "active",
        "client-c2": "disabled",
        "server-s1": "active",
        "server-s2": "orphaned",
        "server-s3": "orphaned",
        "event-e1": "active",
        "event-e2": "active",
        "event-e3": "orphaned",
        "event-e4": "orphaned",
        "sink-k1": "active",
        "sink-k2": "disabled",
        "sink-k3": "orphaned",
    }


def test_group_containers_have_no_status(sample_snapshot):
    view = compute_view(sample_snapshot)
    assert NodeId.event_group("alerts") not in view.statuses
    assert any(n.id == NodeId.event_group("alerts") for n in view.nodes)
    assert all("group" not in e.id for e in view.edges)


def test_compute_view_is_byte_identical(sample_snapshot, sample_snapshot_dict):
    first = json.dumps(view_to_dict(compute_view(sample_snapshot)), ensure_ascii=False)
    second = json.dumps(
        view_to_dict(compute_view(ConfigSnapshot.from_dict(sample_snapshot_dict))),
        ensure_ascii=False,
    )
    assert first == second


def test_empty_snapshot_gives_empty_view():
    view = compute_view(ConfigSnapshot())
    assert view.nodes == []
    assert view.edges == []
    assert view.layers == []


def test_config_strategies_are_used(sample_snapshot):
    config = FlowConfig()
    config.analysis.reachability_strategy = "provisional"
    config.analysis.highlight_strategy = "exhaustive"
    view = compute_view(sample_snapshot, config)
    assert view.reachability.strategy == "provisional"
    assert view.highlighter.strategy == "exhaustive"


def test_engine_caches_by_fingerprint(sample_snapshot, sample_snapshot_dict):
    engine = FlowEngine()
    first = engine.view(sample_snapshot)
    again = engine.view(ConfigSnapshot.from_dict(sample_snapshot_dict))
    assert again is first
    assert (engine.hits, engine.misses) == (1, 1)


def test_engine_evicts_least_recently_used(sample_snapshot, chain_snapshot):
    engine = FlowEngine(FlowConfig(cache=CacheConfig(max_entries=2)))
    a, b, c = sample_snapshot, chain_snapshot(), chain_snapshot(sink_enabled=False)
    view_a = engine.view(a)
    engine.view(b)
    engine.view(a)  # a becomes most recent
    engine.view(c)  # evicts b
    assert engine.view(a) is view_a
    misses = engine.misses
    engine.view(b)
    assert engine.misses == misses + 1


def test_engine_without_cache_always_computes(sample_snapshot):
    engine = FlowEngine(FlowConfig(cache=CacheConfig(enabled=False)))
    assert engine.view(sample_snapshot) is not engine.view(sample_snapshot)
    assert engine.hits == 0
    assert engine.misses == 2


def test_engine_highlight_and_clear(sample_snapshot):
    engine = FlowEngine()
    selection = engine.highlight(sample_snapshot, "event-e1")
    assert {n.key for n in selection.nodes} == {
        "client-c1",
        "server-s1",
        "event-e1",
        "sink-k1",
    }
    engine.clear()
    engine.view(sample_snapshot)
    assert engine.misses == 2
