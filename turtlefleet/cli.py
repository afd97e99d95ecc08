"""
TurtleFleet CLI entry point.

Usage:
    turtlefleet run --paths paths.yaml [--config fleet.yaml]   # Draw a PathSet
    turtlefleet star --turtles 2                               # Built-in star demo
    turtlefleet validate --config fleet.yaml                   # Check a config file
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import Any, Dict, List, Optional, Tuple

from rich.console import Console
from rich.table import Table

from turtlefleet.config import ConfigError, load_config, validate_config
from turtlefleet.coordinator import FleetCoordinator
from turtlefleet.feed import PoseFeedBus
from turtlefleet.gateway import LifecycleGateway
from turtlefleet.hosts.simulated import SimulatedHost
from turtlefleet.observers import PoseTable
from turtlefleet.paths import load_path_set, star_path_set
from turtlefleet.types import PathSet

logger = logging.getLogger("TurtleFleet")

console = Console()


def _setup_logging(level: Optional[str], config: Dict[str, Any]) -> None:
    level = level or (config.get("logging") or {}).get("level") or os.getenv("LOG_LEVEL", "INFO")
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def _apply_overrides(config: Dict[str, Any], args) -> Dict[str, Any]:
    if getattr(args, "time_scale", None):
        config.setdefault("simulation", {})["time_scale"] = args.time_scale
    return config


# ---------------------------------------------------------------------------
# Fleet runner
# ---------------------------------------------------------------------------


async def run_fleet(
    path_set: PathSet, config: Dict[str, Any], duration: Optional[float] = None
) -> Tuple[List[Dict[str, Any]], bool]:
    """Run *path_set* against an in-process simulated host.

    Returns:
        ``(status_rows, finished)`` — the agents' final snapshots and
        whether every path completed before *duration* elapsed.
    """
    bus = PoseFeedBus()
    host = SimulatedHost(bus, config)
    coordinator = FleetCoordinator(
        LifecycleGateway(host, config), bus, config, observers=[PoseTable()]
    )
    await host.start()
    try:
        await coordinator.bootstrap()
        await coordinator.assign(path_set)
        finished = await coordinator.wait_all(timeout=duration)
        rows = coordinator.status()
    finally:
        await coordinator.shutdown()
        await host.stop()
        host.close()
    return rows, finished


def _print_status(rows: List[Dict[str, Any]], finished: bool) -> None:
    table = Table(title=f"Fleet: {len(rows)} turtle(s)", show_header=True)
    table.add_column("Name", style="bold")
    table.add_column("Status")
    table.add_column("x", justify="right")
    table.add_column("y", justify="right")
    table.add_column("theta", justify="right")
    table.add_column("Waypoints", justify="right")

    for row in rows:
        status_style = "[green]done[/]" if row["completed"] else f"[yellow]{row['status']}[/]"
        table.add_row(
            row["name"],
            status_style,
            f"{row['x']:.3f}",
            f"{row['y']:.3f}",
            f"{row['theta']:.3f}",
            str(row["waypoints"]),
        )
    console.print(table)
    if not finished:
        console.print("  [dim]Stopped before every path completed (--duration reached).[/]")


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def cmd_run(args) -> None:
    """Draw the PathSet from a YAML file."""
    config = _apply_overrides(load_config(args.config), args)
    _setup_logging(args.log_level, config)
    path_set = load_path_set(args.paths)
    rows, finished = asyncio.run(run_fleet(path_set, config, args.duration))
    _print_status(rows, finished)


def cmd_star(args) -> None:
    """Draw the demo star with one or more turtles."""
    config = _apply_overrides(load_config(args.config), args)
    _setup_logging(args.log_level, config)
    rows, finished = asyncio.run(run_fleet(star_path_set(args.turtles), config, args.duration))
    _print_status(rows, finished)
    if finished:
        console.print("  [bold cyan]star complete[/]")


def cmd_validate(args) -> None:
    """Print every problem in a config file."""
    import yaml

    with open(args.config) as f:
        try:
            config = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            console.print(f"  [red]Invalid YAML:[/] {exc}")
            sys.exit(1)
    ok, errors = validate_config(config)
    if ok:
        console.print(f"  [green]{args.config}: OK[/]")
        return
    for msg in errors:
        console.print(f"  [red]x[/] {msg}")
    sys.exit(1)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="turtlefleet",
        description="TurtleFleet - closed-loop path drawing for a fleet of simulated turtles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command")

    def _common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--config", default=None, help="Fleet config YAML")
        p.add_argument("--duration", type=float, default=None, help="Stop after N seconds")
        p.add_argument("--time-scale", type=float, default=None, help="Simulated seconds per second")
        p.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")

    # turtlefleet run
    p_run = sub.add_parser(
        "run",
        help="Draw a PathSet from a YAML file",
        epilog="Example: turtlefleet run --paths star.yaml --time-scale 5",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p_run.add_argument("--paths", required=True, help="YAML file with a 'paths' list")
    _common(p_run)

    # turtlefleet star
    p_star = sub.add_parser("star", help="Draw the demo star")
    p_star.add_argument("--turtles", type=int, default=1, help="Number of turtles sharing the star")
    _common(p_star)

    # turtlefleet validate
    p_val = sub.add_parser("validate", help="Validate a fleet config file")
    p_val.add_argument("--config", required=True, help="Fleet config YAML")

    args = parser.parse_args(argv)

    commands = {
        "run": cmd_run,
        "star": cmd_star,
        "validate": cmd_validate,
    }

    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return
    try:
        handler(args)
    except ConfigError as exc:
        console.print("\n  [red]Config error:[/]")
        for msg in exc.errors:
            console.print(f"    - {msg}")
        sys.exit(1)
    except ValueError as exc:
        console.print(f"\n  [red]Error:[/] {exc}\n")
        sys.exit(1)
    except FileNotFoundError as exc:
        console.print(f"\n  [red]File not found:[/] {exc.filename or exc}\n")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n  Interrupted.\n")
        sys.exit(130)


if __name__ == "__main__":
    main()
