"""Pytest configuration and shared fixtures for notifyflow tests."""

import json

import pytest


@pytest.fixture
def sample_snapshot_dict():
    """Data flow document with groups, a wildcard event and dangling ids.

    Flow summary:
        c1 (enabled)  -> s1 -> e1, e2 (group "alerts") -> k1, k2 (disabled)
        c2 (disabled) -> s2 -> e3 -> k3
        s3 references an unknown client; e4 applies to all servers.
    """
    return {
        "clients": [
            {"id": "c1", "name": "Weechat", "enabled": True},
            {"id": "c2", "name": "Irssi", "enabled": False},
        ],
        "servers": [
            {"id": "s1", "displayName": "Libera", "enabled": True, "clientIds": ["c1"]},
            {"id": "s2", "hostname": "irc.oftc.net", "enabled": True, "clientIds": ["c2"]},
            {"id": "s3", "enabled": True, "clientIds": ["ghost"]},
        ],
        "events": [
            {"id": "e1", "name": "Mention", "enabled": True, "serverIds": ["s1"],
             "appliesToAllServers": False, "group": "alerts", "priority": 10},
            {"id": "e2", "name": "Query", "enabled": True, "serverIds": ["s1"],
             "appliesToAllServers": False, "group": "alerts", "priority": 5},
            {"id": "e3", "name": "Keyword", "enabled": True, "serverIds": ["s2"],
             "appliesToAllServers": False, "priority": 7},
            {"id": "e4", "name": "Everything", "enabled": True, "serverIds": ["*"],
             "appliesToAllServers": True, "priority": 1},
        ],
        "sinks": [
            {"id": "k1", "name": "Discord", "enabled": True},
            {"id": "k2", "name": "Ntfy", "enabled": False},
            {"id": "k3", "name": "Webhook", "enabled": True},
        ],
        "routingPaths": [
            {"clientId": "c1", "serverId": "s1", "eventId": "e1",
             "sinkStatuses": [{"id": "k1", "name": "Discord", "enabled": True}],
             "clientEnabled": True, "serverEnabled": True, "eventEnabled": True,
             "enabled": True},
            {"clientId": "c1", "serverId": "s1", "eventId": "e2",
             "sinkStatuses": [
                 {"id": "k1", "name": "Discord", "enabled": True},
                 {"id": "k2", "name": "Ntfy", "enabled": False},
             ],
             "clientEnabled": True, "serverEnabled": True, "eventEnabled": True,
             "enabled": True},
            {"clientId": "c2", "serverId": "s2", "eventId": "e3",
             "sinkStatuses": [{"id": "k3", "name": "Webhook", "enabled": True}],
             "clientEnabled": False, "serverEnabled": True, "eventEnabled": True,
             "enabled": False},
            {"clientId": "c1", "serverId": "s1", "eventId": "e4",
             "sinkStatuses": [{"id": "k3", "name": "Webhook", "enabled": True}],
             "clientEnabled": True, "serverEnabled": True, "eventEnabled": True,
             "enabled": True},
        ],
    }


@pytest.fixture
def sample_snapshot(sample_snapshot_dict):
    """Parsed ConfigSnapshot for the sample document."""
    from notifyflow.snapshot import ConfigSnapshot

    return ConfigSnapshot.from_dict(sample_snapshot_dict)


@pytest.fixture
def chain_snapshot():
    """Factory for a single client -> server -> event -> sink chain.

    Keyword arguments toggle the enabled flags of each entity and the
    wildcard flag of the event.
    """
    from notifyflow.snapshot import ConfigSnapshot

    def _make(
        client_enabled: bool = True,
        server_enabled: bool = True,
        event_enabled: bool = True,
        sink_enabled: bool = True,
        wildcard: bool = False,
    ) -> ConfigSnapshot:
        return ConfigSnapshot.from_dict(
            {
                "clients": [{"id": "c1", "enabled": client_enabled}],
                "servers": [
                    {"id": "s1", "enabled": server_enabled, "clientIds": ["c1"]}
                ],
                "events": [
                    {
                        "id": "e1",
                        "enabled": event_enabled,
                        "serverIds": [] if wildcard else ["s1"],
                        "appliesToAllServers": wildcard,
                    }
                ],
                "sinks": [{"id": "sk1", "enabled": sink_enabled}],
                "routingPaths": [
                    {
                        "clientId": "c1",
                        "serverId": "s1",
                        "eventId": "e1",
                        "sinkStatuses": [{"id": "sk1", "enabled": sink_enabled}],
                        "clientEnabled": client_enabled,
                        "serverEnabled": server_enabled,
                        "eventEnabled": event_enabled,
                        "enabled": all(
                            (client_enabled, server_enabled, event_enabled, sink_enabled)
                        ),
                    }
                ],
            }
        )

    return _make


@pytest.fixture
def snapshot_file(tmp_path, sample_snapshot_dict):
    """Write the sample document to a JSON file."""
    path = tmp_path / "data-flow.json"
    path.write_text(json.dumps(sample_snapshot_dict))
    return path


@pytest.fixture
def sample_config_dict():
    """Engine configuration dictionary for testing."""
    return {
        "layout": {
            "node_width": 180,
            "node_height": 50,
            "node_spacing": 20,
            "column_spacing": 400,
        },
        "colors": {"active": "#00ff00"},
        "analysis": {
            "reachability_strategy": "provisional",
            "highlight_strategy": "exhaustive",
        },
        "cache": {"enabled": True, "max_entries": 2},
    }


@pytest.fixture
def temp_config_file(tmp_path, sample_config_dict):
    """Create a temporary configuration file for testing."""
    import yaml

    config_file = tmp_path / "test_config.yml"
    with open(config_file, "w") as f:
        yaml.dump(sample_config_dict, f, default_flow_style=False, indent=2)
    return config_file


@pytest.fixture
def invalid_config_file(tmp_path):
    """Create an invalid YAML configuration file for testing."""
    config_file = tmp_path / "invalid_config.yml"
    config_file.write_text("invalid: yaml: content: [unclosed")
    return config_file


@pytest.fixture
def group_prefixed_snapshot():
    """Event ``group-alerts`` next to a group named ``alerts``.

    Both the event node and the group container would naturally use the key
    ``event-group-alerts``.
    """
    from notifyflow.snapshot import ConfigSnapshot

    return ConfigSnapshot.from_dict(
        {
            "clients": [{"id": "c1"}],
            "servers": [{"id": "s1", "clientIds": ["c1"]}],
            "events": [
                {"id": "group-alerts", "serverIds": ["s1"]},
                {"id": "e2", "serverIds": ["s1"], "group": "alerts"},
            ],
            "sinks": [{"id": "k1"}],
            "routingPaths": [
                {"clientId": "c1", "serverId": "s1", "eventId": "group-alerts",
                 "sinkStatuses": [{"id": "k1"}]},
            ],
        }
    )
