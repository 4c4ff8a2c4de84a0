#!/usr/bin/env python3
"""
Guardwatch Monitor - Entry Point
================================

Runs the MonitorService against the dashboard API or a snapshot file and
keeps dashboard statistics and geofence presence events flowing to the log.

Usage:
    python run_monitor.py --config config/guardwatch.yaml
    python run_monitor.py --config config/guardwatch.yaml --once

Lifecycle:
    config (YAML, validated up front) -> logging (console + optional file)
    -> MonitorService.start() -> wait for SIGINT/SIGTERM -> stop()

--once runs a single poll, prints the statistics as JSON and exits; handy
for cron checks and for validating a new config.

Exit codes:
    0  clean shutdown
    1  bad configuration or service failure
"""

import argparse
import json
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional, TextIO

import yaml

from guardwatch_feed import create_logger
from guardwatch_monitor import MonitorConfig, MonitorService

DEFAULT_LOG_FILE = Path('logs/monitor.log')

logger = logging.getLogger("guardwatch.runner")


def setup_logging(
    log_file: Optional[Path] = None,
    level: int = logging.INFO,
    stream: TextIO = sys.stdout,
) -> None:
    """
    Route every guardwatch logger to a console stream and, optionally, a file.

    Structured loggers emit ready JSON; the runner's own lines get a prefix.
    """
    handlers: List[logging.Handler] = [logging.StreamHandler(stream)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        handlers=handlers,
    )


def describe(config: MonitorConfig) -> List[str]:
    """Startup summary lines for a config."""
    feed = config.feed
    if feed.base_url:
        source = f"API {feed.base_url} every {feed.poll_interval_s}s (timeout {feed.timeout_s}s)"
    else:
        source = f"snapshot file {feed.snapshot_path}"

    lines = [f"service_id={config.service_id}", f"source: {source}"]
    if feed.simulate:
        lines.append(f"simulated movement: up to {feed.simulation_step_m} m per poll")
    framing = config.framing
    lines.append(
        f"framing: {framing.max_attempts} attempts, zoom {framing.min_zoom}-{framing.max_zoom}"
    )
    return lines


class MonitorApp:
    """
    Owns one MonitorService for the lifetime of the process.

    Signals only request a stop; run() returns once the poller thread has
    been joined, so shutdown always goes through MonitorService.stop().
    """

    def __init__(self, config: MonitorConfig):
        self.config = config
        self.service = MonitorService(
            config=config,
            event_logger=create_logger("monitor", service_id=config.service_id),
        )
        self._stopping = False

    def run(self) -> int:
        signal.signal(signal.SIGTERM, self._request_stop)
        signal.signal(signal.SIGINT, self._request_stop)

        for line in describe(self.config):
            logger.info(line)

        self.service.start()
        logger.info("Monitor running; Ctrl+C to stop")
        try:
            self.service.wait()
        finally:
            self.shutdown()
        return 0

    def run_once(self) -> int:
        stats = self.service.poll_once()
        print(json.dumps(stats.to_dict(), indent=2))
        return 0

    def shutdown(self) -> None:
        if self._stopping:
            return
        self._stopping = True

        if self.service.is_running:
            self.service.stop()
        logger.info("Monitor stopped")

    def _request_stop(self, signum, frame):
        logger.info(f"Received {signal.Signals(signum).name}, stopping")
        self.shutdown()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Guardwatch Monitor - geofence presence and dashboard stats",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Demo config (snapshot file + simulated movement)
  python run_monitor.py --config config/guardwatch.yaml

  # One poll, statistics as JSON
  python run_monitor.py --config config/guardwatch.yaml --once

  # Console only, debug level
  python run_monitor.py --config config/guardwatch.yaml --no-log-file --verbose
        """
    )
    parser.add_argument('--config', type=Path, required=True, help='Monitor configuration YAML')

    log_target = parser.add_mutually_exclusive_group()
    log_target.add_argument(
        '--log-file',
        type=Path,
        default=None,
        help=f'Log file (default: log_file from config, else {DEFAULT_LOG_FILE})'
    )
    log_target.add_argument('--no-log-file', action='store_true', help='Console logging only')

    parser.add_argument('--once', action='store_true', help='Poll once, print stats as JSON, exit')
    parser.add_argument('--verbose', '-v', action='store_true', help='DEBUG level logging')
    return parser.parse_args(argv)


def resolve_log_file(args: argparse.Namespace, config: MonitorConfig) -> Optional[Path]:
    if args.no_log_file or args.once:
        return None
    return args.log_file or config.log_file or DEFAULT_LOG_FILE


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    try:
        config = MonitorConfig.from_yaml(args.config)
    except FileNotFoundError:
        print(f"Error: configuration file not found: {args.config}", file=sys.stderr)
        return 1
    except (ValueError, KeyError, TypeError, yaml.YAMLError) as e:
        print(f"Error: invalid configuration {args.config}: {e}", file=sys.stderr)
        return 1

    setup_logging(
        resolve_log_file(args, config),
        logging.DEBUG if args.verbose else logging.INFO,
        # --once keeps stdout for the JSON document
        stream=sys.stderr if args.once else sys.stdout,
    )

    app = MonitorApp(config)
    if args.once:
        return app.run_once()

    try:
        return app.run()
    except Exception as e:
        logger.error(f"Monitor failed: {e}", exc_info=True)
        return 1


if __name__ == '__main__':
    sys.exit(main())
