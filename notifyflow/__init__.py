"""Data flow analysis for IRC notification routing.

Derives the client → server → event → sink graph from a configuration
snapshot, detects orphaned nodes, lays the graph out in four columns and
answers path highlighting queries for the admin UI.
"""

__version__ = "0.1.0"

# Core classes and utilities
from .config import FlowConfig
from .naming import NodeId, NodeKind
from .pipeline import FlowEngine, FlowView, compute_view
from .snapshot import ConfigSnapshot, load_snapshot

__all__ = [
    "ConfigSnapshot",
    "FlowConfig",
    "FlowEngine",
    "FlowView",
    "NodeId",
    "NodeKind",
    "compute_view",
    "load_snapshot",
]
