"""Display status shared by nodes and edges."""

from __future__ import annotations

from enum import Enum

from notifyflow.config import ColorConfig


class FlowStatus(str, Enum):
    ACTIVE = "active"
    ORPHANED = "orphaned"
    DISABLED = "disabled"


def resolve_status(enabled: bool, orphaned: bool) -> FlowStatus:
    """Apply the precedence disabled > orphaned > active."""
    if not enabled:
        return FlowStatus.DISABLED
    if orphaned:
        return FlowStatus.ORPHANED
    return FlowStatus.ACTIVE


def node_color(status: FlowStatus, colors: ColorConfig) -> str:
    if status is FlowStatus.DISABLED:
        return colors.disabled
    if status is FlowStatus.ORPHANED:
        return colors.orphaned_node
    return colors.active


def edge_color(status: FlowStatus, colors: ColorConfig) -> str:
    if status is FlowStatus.DISABLED:
        return colors.disabled
    if status is FlowStatus.ORPHANED:
        return colors.orphaned_edge
    return colors.active
