"""Configuration snapshot model and loaders.

A snapshot is the read-only view of the routing configuration that the data
flow engine analyses: clients, servers, events, sinks and the pre-expanded
routing paths. The on-disk format is the ``/api/data-flow`` response document
(camelCase keys); YAML files with the same structure are accepted too.

Only the fields the engine reads are modelled. Unknown keys are ignored so
that full API responses can be loaded unchanged.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from notifyflow.log_config import get_logger

logger = get_logger(__name__)


def _as_bool(value: Any, default: bool = True) -> bool:
    if value is None:
        return default
    return bool(value)


def _as_priority(value: Any) -> int:
    """Return an integer priority; missing or malformed values become 0."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _require_id(entry: dict[str, Any], section: str) -> str:
    raw = entry.get("id")
    if raw is None or str(raw) == "":
        raise ValueError(f"Entry in '{section}' is missing required 'id'")
    return str(raw)


def _string_list(value: Any, what: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"'{what}' must be a list")
    return tuple(str(v) for v in value)


@dataclass(frozen=True, slots=True)
class Client:
    """IRC client adapter (a root of the data flow)."""

    id: str
    name: str = ""
    enabled: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Client:
        cid = _require_id(data, "clients")
        return cls(
            id=cid,
            name=str(data.get("name") or cid),
            enabled=_as_bool(data.get("enabled")),
        )


@dataclass(frozen=True, slots=True)
class Server:
    """IRC server fed by one or more clients."""

    id: str
    name: str = ""
    enabled: bool = True
    client_ids: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Server:
        sid = _require_id(data, "servers")
        name = data.get("displayName") or data.get("hostname") or sid
        return cls(
            id=sid,
            name=str(name),
            enabled=_as_bool(data.get("enabled")),
            client_ids=_string_list(data.get("clientIds"), f"servers[{sid}].clientIds"),
        )


@dataclass(frozen=True, slots=True)
class Event:
    """Event pattern matched on servers and routed to sinks.

    Attributes:
        server_ids: Servers the event explicitly applies to.
        applies_to_all_servers: Wildcard flag; wildcard events get no explicit
            server edges.
        group: Optional layout group name. Empty string means ungrouped.
        priority: Ordering key in the events column (higher first).
    """

    id: str
    name: str = ""
    enabled: bool = True
    server_ids: tuple[str, ...] = ()
    applies_to_all_servers: bool = False
    group: str = ""
    priority: int = 0

    @property
    def is_wildcard(self) -> bool:
        """Whether the event matches servers implicitly (all or none listed)."""
        return self.applies_to_all_servers or len(self.server_ids) == 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Event:
        eid = _require_id(data, "events")
        group = data.get("group")
        return cls(
            id=eid,
            name=str(data.get("name") or eid),
            enabled=_as_bool(data.get("enabled")),
            server_ids=_string_list(data.get("serverIds"), f"events[{eid}].serverIds"),
            applies_to_all_servers=bool(data.get("appliesToAllServers", False)),
            group=str(group) if group else "",
            priority=_as_priority(data.get("priority")),
        )


@dataclass(frozen=True, slots=True)
class Sink:
    """Notification endpoint (a leaf of the data flow)."""

    id: str
    name: str = ""
    enabled: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Sink:
        kid = _require_id(data, "sinks")
        return cls(
            id=kid,
            name=str(data.get("name") or kid),
            enabled=_as_bool(data.get("enabled")),
        )


@dataclass(frozen=True, slots=True)
class SinkStatus:
    """Sink reference inside a routing path."""

    id: str
    enabled: bool = True
    name: str = ""


@dataclass(frozen=True, slots=True)
class RoutingPath:
    """One resolved client → server → event → sinks chain."""

    server_id: str
    event_id: str
    client_id: str = ""
    sink_statuses: tuple[SinkStatus, ...] = ()
    client_enabled: bool = True
    server_enabled: bool = True
    event_enabled: bool = True
    enabled: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RoutingPath:
        if "serverId" not in data or "eventId" not in data:
            raise ValueError("Routing path requires 'serverId' and 'eventId'")
        raw_sinks = data.get("sinkStatuses") or []
        if not isinstance(raw_sinks, list):
            raise ValueError("'sinkStatuses' must be a list")
        sinks = tuple(
            SinkStatus(
                id=_require_id(s, "sinkStatuses"),
                enabled=_as_bool(s.get("enabled")),
                name=str(s.get("name") or s.get("id")),
            )
            for s in raw_sinks
        )
        return cls(
            server_id=str(data["serverId"]),
            event_id=str(data["eventId"]),
            client_id=str(data.get("clientId") or ""),
            sink_statuses=sinks,
            client_enabled=_as_bool(data.get("clientEnabled")),
            server_enabled=_as_bool(data.get("serverEnabled")),
            event_enabled=_as_bool(data.get("eventEnabled")),
            enabled=_as_bool(data.get("enabled")),
        )


@dataclass(frozen=True, slots=True)
class ConfigSnapshot:
    """Immutable configuration snapshot consumed by the engine."""

    clients: tuple[Client, ...] = ()
    servers: tuple[Server, ...] = ()
    events: tuple[Event, ...] = ()
    sinks: tuple[Sink, ...] = ()
    routing_paths: tuple[RoutingPath, ...] = ()
    _lookup: dict[str, dict[str, Any]] = field(
        default_factory=dict, init=False, repr=False, compare=False, hash=False
    )

    def _index(self, section: str) -> dict[str, Any]:
        cached = self._lookup.get(section)
        if cached is None:
            cached = {}
            for entity in getattr(self, section):
                # First occurrence wins when ids repeat
                cached.setdefault(entity.id, entity)
            self._lookup[section] = cached
        return cached

    def client(self, client_id: str) -> Client | None:
        return self._index("clients").get(client_id)

    def server(self, server_id: str) -> Server | None:
        return self._index("servers").get(server_id)

    def event(self, event_id: str) -> Event | None:
        return self._index("events").get(event_id)

    def sink(self, sink_id: str) -> Sink | None:
        return self._index("sinks").get(sink_id)

    @property
    def is_empty(self) -> bool:
        return not (self.clients or self.servers or self.events or self.sinks)

    def fingerprint(self) -> str:
        """Return a SHA-256 digest of the canonical snapshot content."""
        payload = {
            "clients": [asdict(c) for c in self.clients],
            "servers": [asdict(s) for s in self.servers],
            "events": [asdict(e) for e in self.events],
            "sinks": [asdict(k) for k in self.sinks],
            "routing_paths": [asdict(p) for p in self.routing_paths],
        }
        blob = json.dumps(payload, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(blob.encode("utf-8")).hexdigest()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConfigSnapshot:
        """Create a snapshot from a data flow document.

        Args:
            data: Mapping with ``clients``, ``servers``, ``events``, ``sinks``
                and ``routingPaths`` lists. Missing sections are empty.

        Returns:
            Parsed snapshot.

        Raises:
            ValueError: If the document or one of its sections is malformed.
        """
        if not isinstance(data, dict):
            raise ValueError("Snapshot document must be a mapping")

        def _section(key: str) -> list[dict[str, Any]]:
            raw = data.get(key)
            if raw is None:
                return []
            if not isinstance(raw, list):
                raise ValueError(f"'{key}' must be a list")
            for entry in raw:
                if not isinstance(entry, dict):
                    raise ValueError(f"Entries in '{key}' must be mappings")
            return raw

        snapshot = cls(
            clients=tuple(Client.from_dict(d) for d in _section("clients")),
            servers=tuple(Server.from_dict(d) for d in _section("servers")),
            events=tuple(Event.from_dict(d) for d in _section("events")),
            sinks=tuple(Sink.from_dict(d) for d in _section("sinks")),
            routing_paths=tuple(
                RoutingPath.from_dict(d) for d in _section("routingPaths")
            ),
        )
        logger.debug(
            f"Parsed snapshot: {len(snapshot.clients)} clients, "
            f"{len(snapshot.servers)} servers, {len(snapshot.events)} events, "
            f"{len(snapshot.sinks)} sinks, {len(snapshot.routing_paths)} routing paths"
        )
        return snapshot


def load_snapshot(path: Path) -> ConfigSnapshot:
    """Load a snapshot from a JSON or YAML file.

    Args:
        path: Path to a ``.json``, ``.yml`` or ``.yaml`` file.

    Returns:
        Parsed snapshot.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the content is not a valid snapshot document.
        yaml.YAMLError: If a YAML file cannot be parsed.
    """
    path = Path(path)
    logger.info(f"Loading snapshot from: {path}")

    if not path.exists():
        raise FileNotFoundError(f"Snapshot file not found: {path}")

    with path.open("r") as f:
        if path.suffix.lower() in {".yml", ".yaml"}:
            raw = yaml.safe_load(f)
        else:
            try:
                raw = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in snapshot {path}: {e}") from e

    return ConfigSnapshot.from_dict(raw if raw is not None else {})
