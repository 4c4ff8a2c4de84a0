"""
Guardwatch CLI - Main entry point.

Provides a command-line interface over the geofence engine: effective guard
statuses, dashboard statistics, site anchors, a rendered live map, and a
simulated camera focus run.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from guardwatch_feed.client import DashboardApiClient, FeedError
from guardwatch_feed.logging import create_logger
from guardwatch_feed.schemas import FeedSnapshot
from guardwatch_monitor.config import MapConfig, MonitorConfig
from guardwatch_monitor.registry import SiteRegistry
from guardwatch_zone.analytics.counter import DashboardCounter
from guardwatch_zone.camera.config import FramingConfig
from guardwatch_zone.camera.controller import CameraFramingController, FocusState, TERMINAL_STATES
from guardwatch_zone.camera.viewport import SimulatedViewport
from guardwatch_zone.models import Site
from guardwatch_zone.pipeline import PipelineBuilder


def load_snapshot(args: argparse.Namespace) -> FeedSnapshot:
    """
    Read sites and guards from --snapshot or --api.

    Raises:
        FileNotFoundError: If the snapshot file doesn't exist
        FeedError: If the API cannot be read
    """
    feed_logger = create_logger("cli")
    if args.snapshot:
        path = Path(args.snapshot)
        if not path.exists():
            raise FileNotFoundError(f"Snapshot file not found: {args.snapshot}")
        return FeedSnapshot.from_file(path, logger=feed_logger)

    with DashboardApiClient(args.api, timeout_s=args.timeout, logger=feed_logger) as client:
        return client.fetch_snapshot()


def load_settings(config_path: Optional[str]) -> Tuple[MapConfig, FramingConfig]:
    """Map and framing settings from a monitor config, or the defaults."""
    if not config_path:
        return MapConfig(), FramingConfig()
    config = MonitorConfig.from_yaml(Path(config_path))
    return config.map, config.framing


def cmd_status(snapshot: FeedSnapshot, sites: List[Site], as_json: bool) -> None:
    pipeline = PipelineBuilder().build()
    guards = snapshot.core_guards()
    live = pipeline.snapshot(guards, sites)

    if as_json:
        print(json.dumps(live.to_dict(), indent=2))
        return

    by_id = {g.id: g for g in guards}
    for marker in live.guards:
        guard = by_id[marker.guard_id]
        override = "" if marker.effective_status == marker.reported_status else f" (reported {marker.reported_status.value})"
        print(
            f"{guard.id:<12} {guard.name:<24} {marker.effective_status.value:<8}{override}"
            f"  site={guard.site_id or '-'}"
        )
    for guard_id in live.unlocated_guard_ids:
        guard = by_id[guard_id]
        print(f"{guard.id:<12} {guard.name:<24} {guard.reported_status.value:<8}  no location fix")


def cmd_stats(snapshot: FeedSnapshot, sites: List[Site], as_json: bool) -> None:
    stats = DashboardCounter().update(snapshot.core_guards(), sites)

    if as_json:
        print(json.dumps(stats.to_dict(), indent=2))
        return

    print(f"Guards:               {stats.total_guards}")
    for status, count in sorted(stats.status_counts.items()):
        print(f"  {status:<19} {count}")
    print(f"Sites (active/total): {stats.active_sites}/{stats.total_sites}")
    print(f"Clocked in:           {stats.clocked_in}")
    print(f"Not on site:          {stats.not_on_site}")
    print(f"Geofence compliance:  {stats.geofence_compliance_pct}%")


def cmd_anchors(sites: List[Site], as_json: bool) -> None:
    registry = SiteRegistry()
    registry.sync(sites)

    infos = {site.id: registry.get_site_info(site.id) for site in sites}
    if as_json:
        print(json.dumps(infos, indent=2))
        return

    for site_id, info in infos.items():
        lat, lng = info["anchor"]
        state = "active" if info["active"] else "inactive"
        print(f"{site_id:<12} {info['zone_type']:<8} {state:<9} anchor=({lat:.6f}, {lng:.6f})")


def cmd_render(snapshot: FeedSnapshot, sites: List[Site], map_config: MapConfig, args: argparse.Namespace) -> None:
    width, height = map_config.size_wh
    pipeline = (
        PipelineBuilder()
        .with_size(args.width or width, args.height or height)
        .with_default_view(map_config.default_center, map_config.default_zoom)
        .with_guard_labels(args.labels)
        .build()
    )
    canvas = pipeline.render(snapshot.core_guards(), sites)
    path = pipeline.save(canvas, args.out)
    print(f"Live map written to {path}")


async def run_focus(
    site: Site,
    map_config: MapConfig,
    framing: FramingConfig,
    settle_offset_m: float = 0.0,
    animation_s: float = 0.25,
    timeout_s: float = 30.0,
) -> Tuple[FocusState, int, SimulatedViewport]:
    """
    Focus a SimulatedViewport on a site's zone on the running event loop.

    Returns:
        (terminal_state, attempts, viewport)
    """
    loop = asyncio.get_running_loop()
    viewport = SimulatedViewport(
        loop,
        center=map_config.default_center,
        zoom=map_config.default_zoom,
        size_wh=map_config.size_wh,
        animation_s=animation_s,
        settle_offset_m=settle_offset_m,
    )
    controller = CameraFramingController(viewport, loop, config=framing)

    finished = loop.create_future()

    def on_state(request_id: int, state: FocusState) -> None:
        if state in TERMINAL_STATES and not finished.done():
            finished.set_result(state)

    controller.subscribe(on_state)
    try:
        controller.focus(site.zone, fallback_center=site.coordinate)
        state = await asyncio.wait_for(finished, timeout_s)
        attempts = controller.current.attempt_count if controller.current else 0
    finally:
        controller.close()

    # One-shot paths converge on command; let the animation land before reporting
    await asyncio.sleep(animation_s)
    return state, attempts, viewport


def cmd_focus(sites: List[Site], map_config: MapConfig, framing: FramingConfig, args: argparse.Namespace) -> int:
    site = next((s for s in sites if s.id == args.site_id), None)
    if site is None:
        print(f"Error: site '{args.site_id}' not found", file=sys.stderr)
        return 1

    state, attempts, viewport = asyncio.run(
        run_focus(
            site,
            map_config,
            framing,
            settle_offset_m=args.settle_offset_m,
            animation_s=args.animation_s,
        )
    )

    center = viewport.get_center()
    print(f"Focus {site.id}: {state.value} after {attempts} attempt(s)")
    print(f"Viewport center=({center.latitude:.6f}, {center.longitude:.6f}) zoom={viewport.zoom:.2f}")
    for name, target, zoom in viewport.commands:
        print(f"  {name:<12} ({target.latitude:.6f}, {target.longitude:.6f}) zoom={zoom:.2f}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="guardwatch",
        description="Guardwatch CLI - geofence status, stats and map framing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Effective status per guard
  guardwatch --snapshot data/demo_snapshot.yaml status

  # Dashboard counters from the live API
  guardwatch --api http://localhost:3001 stats --json

  # Marker anchor per site
  guardwatch --snapshot data/demo_snapshot.yaml anchors

  # Render the live map
  guardwatch --snapshot data/demo_snapshot.yaml render --out live_map.png

  # Simulate framing the map on a site (viewport lands 80 m short)
  guardwatch --snapshot data/demo_snapshot.yaml focus site-1 --settle-offset-m 80
"""
    )

    # Global arguments
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--snapshot", help="JSON/YAML file with 'sites' and 'guards'")
    source.add_argument("--api", help="Dashboard API base URL (e.g. http://localhost:3001)")
    parser.add_argument(
        "--timeout",
        type=float,
        default=10.0,
        help="API request timeout in seconds (default: 10)"
    )
    parser.add_argument("--config", help="Monitor config YAML (map size, framing policy)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show structured logs")

    # Subcommands
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    status = subparsers.add_parser('status', help='Effective status per guard')
    status.add_argument('--json', action='store_true', help='Print JSON')

    stats = subparsers.add_parser('stats', help='Dashboard statistics')
    stats.add_argument('--json', action='store_true', help='Print JSON')

    anchors = subparsers.add_parser('anchors', help='Marker anchor per site')
    anchors.add_argument('--json', action='store_true', help='Print JSON')

    render = subparsers.add_parser('render', help='Render the live map to an image')
    render.add_argument('--out', default=None, help='Output image (default: runs/live_map/<timestamp>/live_map.png)')
    render.add_argument('--width', type=int, default=None, help='Image width in pixels')
    render.add_argument('--height', type=int, default=None, help='Image height in pixels')
    render.add_argument('--labels', action='store_true', help='Label guard markers')

    focus = subparsers.add_parser('focus', help='Simulate framing the map on a site')
    focus.add_argument('site_id', help='Site ID to focus')
    focus.add_argument(
        '--settle-offset-m',
        type=float,
        default=0.0,
        help='Simulated viewport lands this many meters north of target (default: 0)'
    )
    focus.add_argument(
        '--animation-s',
        type=float,
        default=0.25,
        help='Simulated animation duration in seconds (default: 0.25)'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='%(message)s',
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    try:
        map_config, framing = load_settings(args.config)
        snapshot = load_snapshot(args)
        sites = snapshot.core_sites()

        if args.command == 'status':
            cmd_status(snapshot, sites, args.json)
        elif args.command == 'stats':
            cmd_stats(snapshot, sites, args.json)
        elif args.command == 'anchors':
            cmd_anchors(sites, args.json)
        elif args.command == 'render':
            cmd_render(snapshot, sites, map_config, args)
        elif args.command == 'focus':
            return cmd_focus(sites, map_config, framing, args)

    except (FileNotFoundError, ValueError, FeedError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
