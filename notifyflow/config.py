"""Configuration management for the data flow engine."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from notifyflow.log_config import get_logger

logger = get_logger(__name__)

REACHABILITY_STRATEGIES = ("fixed_point", "provisional")
HIGHLIGHT_STRATEGIES = ("traversal", "exhaustive")


@dataclass
class LayoutConfig:
    """Layout dimensions for the four-column data flow diagram.

    All values are in layout units (pixels in the web UI).
    """

    node_width: float = 200.0
    node_height: float = 60.0
    node_spacing: float = 30.0  # Vertical gap between items in a column
    column_spacing: float = 500.0  # Horizontal distance between column origins
    layer_padding: float = 40.0  # Padding inside the background band
    layer_header_width: float = 50.0  # Band area reserved for the column title
    group_header_height: float = 40.0  # Space for the event group label
    group_internal_padding: float = 30.0  # Bottom padding inside an event group


@dataclass
class ColorConfig:
    """Display colors for the three flow states and the selection highlight."""

    active: str = "#10b981"
    orphaned_node: str = "#94a3b8"
    orphaned_edge: str = "#64748b"
    disabled: str = "#dc2626"
    highlight: str = "#3b82f6"


@dataclass
class AnalysisConfig:
    """Algorithm selection for reachability and path highlighting.

    Attributes:
        reachability_strategy: "fixed_point" (iterative) or "provisional"
            (recursive with a temporary mark on the node being resolved).
        highlight_strategy: "traversal" (ancestor/descendant sweep) or
            "exhaustive" (enumerate every client-to-leaf path).
    """

    reachability_strategy: str = "fixed_point"
    highlight_strategy: str = "traversal"


@dataclass
class CacheConfig:
    """Caching of computed views keyed by snapshot fingerprint."""

    enabled: bool = True
    max_entries: int = 8


@dataclass
class FlowConfig:
    """Complete engine configuration."""

    layout: LayoutConfig = field(default_factory=LayoutConfig)
    colors: ColorConfig = field(default_factory=ColorConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    _source_path: Path | None = None

    @classmethod
    def from_yaml(cls, config_path: Path) -> FlowConfig:
        """Load configuration from YAML file.

        Args:
            config_path: Path to YAML configuration file.

        Returns:
            Parsed configuration object.

        Raises:
            FileNotFoundError: If config file doesn't exist.
            yaml.YAMLError: If YAML is invalid.
            ValueError: If configuration is invalid.
        """
        logger.info(f"Loading configuration from: {config_path}")

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, "r") as f:
                raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Invalid YAML in configuration: {e}")
            raise

        cfg = cls._from_dict(raw_config or {})
        cfg._source_path = Path(config_path)
        return cfg

    @classmethod
    def _from_dict(cls, config_dict: dict[str, Any]) -> FlowConfig:
        """Create configuration from dictionary.

        Every section is optional; omitted keys keep their defaults.

        Args:
            config_dict: Raw configuration dictionary.

        Returns:
            Parsed and validated configuration object.
        """
        if not isinstance(config_dict, dict):
            raise ValueError("Configuration root must be a mapping")

        sections = {
            "layout": LayoutConfig,
            "colors": ColorConfig,
            "analysis": AnalysisConfig,
            "cache": CacheConfig,
        }
        unknown = set(config_dict) - set(sections)
        if unknown:
            raise ValueError(
                f"Unknown configuration sections: {', '.join(sorted(unknown))}"
            )

        parsed: dict[str, Any] = {}
        for name, section_cls in sections.items():
            section_dict = config_dict.get(name) or {}
            if not isinstance(section_dict, dict):
                raise ValueError(f"'{name}' configuration section must be a dictionary")
            allowed = {f.name for f in fields(section_cls)}
            bad_keys = set(section_dict) - allowed
            if bad_keys:
                raise ValueError(
                    f"Unknown keys in '{name}': {', '.join(sorted(bad_keys))}"
                )
            parsed[name] = section_cls(**section_dict)

        cfg = cls(**parsed)
        cfg.validate()
        return cfg

    def validate(self) -> None:
        """Validate configuration parameters.

        Raises:
            ValueError: If configuration is invalid.
        """
        logger.debug("Validating configuration")

        for name in ("node_width", "node_height", "column_spacing"):
            if float(getattr(self.layout, name)) <= 0:
                raise ValueError(f"layout.{name} must be positive")
        for name in (
            "node_spacing",
            "layer_padding",
            "layer_header_width",
            "group_header_height",
            "group_internal_padding",
        ):
            if float(getattr(self.layout, name)) < 0:
                raise ValueError(f"layout.{name} must be non-negative")

        if self.analysis.reachability_strategy not in REACHABILITY_STRATEGIES:
            raise ValueError(
                "analysis.reachability_strategy must be one of "
                f"{list(REACHABILITY_STRATEGIES)}"
            )
        if self.analysis.highlight_strategy not in HIGHLIGHT_STRATEGIES:
            raise ValueError(
                "analysis.highlight_strategy must be one of "
                f"{list(HIGHLIGHT_STRATEGIES)}"
            )
        if int(self.cache.max_entries) < 1:
            raise ValueError("cache.max_entries must be at least 1")

    def summary(self) -> str:
        """Generate configuration summary string.

        Returns:
            Human-readable configuration summary.
        """
        lines = [
            "DATA FLOW ENGINE CONFIGURATION",
            "=" * 60,
            "",
            "LAYOUT",
            "-" * 30,
            f"   Node Size: {self.layout.node_width:g}x{self.layout.node_height:g}",
            f"   Node Spacing: {self.layout.node_spacing:g}",
            f"   Column Spacing: {self.layout.column_spacing:g}",
            "",
            "ANALYSIS",
            "-" * 30,
            f"   Reachability: {self.analysis.reachability_strategy}",
            f"   Highlighting: {self.analysis.highlight_strategy}",
            "",
            "CACHE",
            "-" * 30,
            f"   Enabled: {self.cache.enabled}",
            f"   Max Entries: {self.cache.max_entries}",
            "",
            "=" * 60,
        ]

        return "\n".join(lines)
