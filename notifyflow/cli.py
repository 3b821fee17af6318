"""Command line interface for data flow analysis of routing snapshots."""

from __future__ import annotations

import argparse
import json
import sys
import time
from contextlib import contextmanager, redirect_stdout
from pathlib import Path

from notifyflow.config import FlowConfig
from notifyflow.log_config import get_logger
from notifyflow.snapshot import ConfigSnapshot, load_snapshot

logger = get_logger(__name__)


@contextmanager
def Timer(description: str):
    """Context manager for timing operations with both print and log output.

    Args:
        description: Operation description for timing messages.

    Yields:
        None: Context manager yields nothing.
    """
    print(f"🔄 {description}...")
    logger.info(f"Starting {description}")
    start = time.time()
    try:
        yield
        elapsed = time.time() - start
        print(f"✅ {description} (completed in {elapsed:.2f}s)")
        logger.info(f"Completed {description} in {elapsed:.2f}s")
    except Exception as e:
        elapsed = time.time() - start
        print(f"❌ {description} (failed after {elapsed:.2f}s)")
        logger.error(f"Failed {description} after {elapsed:.2f}s: {e}")
        raise


def _load_config(config_path: Path | None) -> FlowConfig:
    """Load and validate configuration.

    Args:
        config_path: Path to YAML configuration file, or None for defaults.

    Returns:
        Loaded and validated configuration object.

    Raises:
        SystemExit: If configuration loading or validation fails.
    """
    if config_path is None:
        return FlowConfig()
    try:
        config = FlowConfig.from_yaml(config_path)
        logger.info(f"Loaded configuration from {config_path}")
        return config
    except FileNotFoundError:
        print(f"❌ Configuration file not found: {config_path}")
        logger.error(f"Configuration file not found: {config_path}")
        sys.exit(2)  # Config problem
    except Exception as e:
        logger.error(f"Failed to load config: {e}")
        print(f"❌ Configuration error: {e}")
        print(f"💡 Check YAML syntax in: {config_path}")
        sys.exit(2)  # Config problem


def _load_snapshot(snapshot_path: Path) -> ConfigSnapshot:
    """Load a snapshot, exiting with code 3 when it cannot be used.

    Raises:
        SystemExit: If the file is missing or not a valid snapshot.
    """
    try:
        return load_snapshot(snapshot_path)
    except FileNotFoundError:
        print(f"❌ Snapshot file not found: {snapshot_path}")
        logger.error(f"Snapshot file not found: {snapshot_path}")
        sys.exit(3)
    except Exception as e:
        print(f"❌ Invalid snapshot: {e}")
        logger.error(f"Invalid snapshot {snapshot_path}: {e}")
        sys.exit(3)


def _config_arg(args: argparse.Namespace) -> Path | None:
    value = getattr(args, "config", None)
    return Path(value) if value else None


def analyze_command(args: argparse.Namespace) -> None:
    """Compute the data flow view and write or print it as JSON.

    Args:
        args: Parsed arguments with ``snapshot``, ``config`` and ``output``.
    """
    from notifyflow.export import save_view_to_json, view_to_dict
    from notifyflow.pipeline import compute_view

    config = _load_config(_config_arg(args))
    snapshot = _load_snapshot(Path(args.snapshot))
    output = getattr(args, "output", None)
    # stdout carries only the JSON document when no output file is given
    status_stream = sys.stdout if output else sys.stderr
    try:
        with redirect_stdout(status_stream), Timer("Data flow analysis"):
            view = compute_view(snapshot, config)

        if output:
            output_path = Path(output)
            save_view_to_json(view, output_path)
            print(f"🎉 SUCCESS! Data flow view written to: {output_path}")
        else:
            print(json.dumps(view_to_dict(view), indent=2, ensure_ascii=False))

        stats = view.stats
        orphaned = stats.orphaned_servers + stats.orphaned_events + stats.orphaned_sinks
        print(
            f"📊 {len(view.nodes)} nodes, {len(view.edges)} edges, "
            f"{orphaned} orphaned",
            file=status_stream,
        )
    except Exception as e:
        logger.error(f"Analysis failed: {e}")
        print("💡 Use -v for detailed error information", file=status_stream)
        sys.exit(1)


def highlight_command(args: argparse.Namespace) -> None:
    """Print the nodes and edges on complete paths through a node.

    Args:
        args: Parsed arguments with ``snapshot``, ``node`` and ``config``.
    """
    from notifyflow.export import selection_to_dict
    from notifyflow.pipeline import compute_view

    config = _load_config(_config_arg(args))
    snapshot = _load_snapshot(Path(args.snapshot))
    try:
        view = compute_view(snapshot, config)
        selection = view.highlight(args.node)
    except Exception as e:
        logger.error(f"Highlight failed: {e}")
        print(f"❌ ERROR: {e}")
        sys.exit(1)

    if selection.is_empty:
        print(f"⚠️  Node not found in data flow: {args.node}")
        sys.exit(1)
    print(json.dumps(selection_to_dict(selection), indent=2, ensure_ascii=False))


def stats_command(args: argparse.Namespace) -> None:
    """Show entity, routing path and orphan counters for a snapshot.

    Args:
        args: Parsed arguments with ``snapshot`` and ``config``.
    """
    from notifyflow.pipeline import compute_view

    config = _load_config(_config_arg(args))
    snapshot = _load_snapshot(Path(args.snapshot))
    try:
        stats = compute_view(snapshot, config).stats
    except Exception as e:
        print(f"❌ ERROR: {e}")
        sys.exit(1)

    print("Data Flow Summary")
    print("=" * 30)
    print(f"Clients: {stats.enabled_clients}/{stats.total_clients} enabled")
    print(
        f"Servers: {stats.enabled_servers}/{stats.total_servers} enabled, "
        f"{stats.orphaned_servers} orphaned"
    )
    print(
        f"Events:  {stats.enabled_events}/{stats.total_events} enabled, "
        f"{stats.orphaned_events} orphaned, "
        f"{stats.events_with_wildcard_servers} wildcard"
    )
    print(
        f"Sinks:   {stats.enabled_sinks}/{stats.total_sinks} enabled, "
        f"{stats.orphaned_sinks} orphaned"
    )
    print("\nRouting Paths")
    print("=" * 20)
    print(f"Total: {stats.total_routing_paths}")
    print(f"Enabled: {stats.enabled_routing_paths}")
    print(f"Rendered: {stats.rendered_routing_paths}")

    if stats.events_with_wildcard_servers:
        print(
            "\n⚠️  Wildcard events have no explicit server edges; "
            "configure specific server IDs to see their routing paths"
        )


def main() -> None:
    """Parse command line arguments and execute the appropriate subcommand.

    Configures logging, parses CLI arguments, and dispatches to the correct
    command function (analyze, highlight, or stats).
    """
    parser = argparse.ArgumentParser(
        prog="notifyflow",
        description="Analyse IRC notification routing snapshots: orphan detection, layout and path highlighting.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # Global options
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress console output (logs only)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def _add_common(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "snapshot",
            nargs="?",
            default="data-flow.json",
            help="Snapshot file path, JSON or YAML (default: data-flow.json)",
        )
        sub.add_argument(
            "-c",
            "--config",
            default=None,
            help="Engine configuration YAML (default: built-in defaults)",
        )

    analyze_parser = subparsers.add_parser(
        "analyze", help="Compute layout, statuses and edges for a snapshot"
    )
    _add_common(analyze_parser)
    analyze_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Write the view JSON to this file instead of stdout",
    )
    analyze_parser.set_defaults(func=analyze_command)

    highlight_parser = subparsers.add_parser(
        "highlight", help="Show nodes and edges on complete paths through a node"
    )
    highlight_parser.add_argument(
        "node", help="Node id such as 'server-libera' or 'sink-discord'"
    )
    _add_common(highlight_parser)
    highlight_parser.set_defaults(func=highlight_command)

    stats_parser = subparsers.add_parser(
        "stats", help="Show entity, routing path and orphan counters"
    )
    _add_common(stats_parser)
    stats_parser.set_defaults(func=stats_command)

    # Parse arguments and dispatch
    args = parser.parse_args()

    # Configure logging based on arguments
    import logging

    from notifyflow.log_config import set_global_log_level

    if args.verbose:
        log_level = logging.DEBUG
    else:
        log_level = logging.INFO

    set_global_log_level(log_level)

    # Suppress print output if --quiet is set
    if args.quiet:
        import builtins

        builtins.print = lambda *args, **kwargs: None

    if not hasattr(args, "func") or args.func is None:
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
