"""JSON export of computed data flow views.

The document mirrors what the rendering layer needs: positioned nodes with
their status color, background bands, colored edges and summary counters.
Node ids are written as their string keys.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from notifyflow.highlight import Selection
from notifyflow.layout import LayoutNode
from notifyflow.log_config import get_logger
from notifyflow.pipeline import FlowView

logger = get_logger(__name__)


def _node_entry(view: FlowView, node: LayoutNode) -> dict[str, Any]:
    data = view.flow.graph.nodes[node.id] if node.id in view.flow.graph else {}
    entry: dict[str, Any] = {
        "id": node.id.key,
        "kind": node.kind.value,
        "column": node.column,
        "x": float(node.x),
        "y": float(node.y),
        "width": float(node.width),
        "height": float(node.height),
    }
    if node.group is not None:
        entry["group"] = node.group
    if node.id in view.statuses:
        entry["label"] = data.get("name", node.id.entity_id)
        entry["enabled"] = bool(data.get("enabled", False))
        entry["status"] = view.statuses[node.id].value
        entry["color"] = view.colors[node.id]
    else:
        entry["label"] = (node.group or node.id.entity_id).upper()
    return entry


def view_to_dict(view: FlowView) -> dict[str, Any]:
    """Convert a view into a JSON-serializable mapping.

    Raises:
        ValueError: If two positioned nodes share the same id key.
    """
    nodes = [_node_entry(view, n) for n in view.nodes]
    seen: set[str] = set()
    for entry in nodes:
        if entry["id"] in seen:
            raise ValueError(f"Duplicate node id in view: {entry['id']}")
        seen.add(entry["id"])

    return {
        "fingerprint": view.fingerprint,
        "highlightColor": view.highlight_color,
        "layers": [
            {
                "id": band.id,
                "kind": band.kind.value,
                "column": band.column,
                "x": float(band.x),
                "y": float(band.y),
                "width": float(band.width),
                "height": float(band.height),
            }
            for band in view.layers
        ],
        "nodes": nodes,
        "edges": [
            {
                "id": e.id,
                "source": e.source.key,
                "target": e.target.key,
                "status": e.status.value,
                "strokeColor": e.stroke_color,
                "paths": [p.path_id for p in e.contributing_paths],
            }
            for e in view.edges
        ],
        "stats": view.stats.to_dict(),
    }


def selection_to_dict(selection: Selection) -> dict[str, list[str]]:
    """Convert a highlight selection into sorted id lists."""
    return {
        "nodes": sorted(n.key for n in selection.nodes),
        "edges": sorted(selection.edges),
    }


def save_view_to_json(view: FlowView, path: Path, indent: int = 2) -> None:
    """Save a view to a JSON file.

    Args:
        view: Computed view.
        path: Output path; parent directories are created.
        indent: JSON indentation.
    """
    logger.info(f"Saving data flow view to JSON: {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w") as f:
        json.dump(view_to_dict(view), f, indent=indent, ensure_ascii=False)
    logger.info(f"Saved data flow view: {path.stat().st_size / 1024:.1f} KB")
