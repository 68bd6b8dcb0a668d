"""Entry point for the live log viewer."""

import argparse
import asyncio
import logging
import signal
import sys
import threading

from log_viewer.config import load_config, with_overrides
from log_viewer.filters import filter_records
from log_viewer.formatter import get_formatter
from log_viewer.viewer import LogViewer

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="live-log-viewer",
        description="Follow a websocket log stream in the terminal",
    )
    parser.add_argument("url", nargs="?", default=None, help="Websocket endpoint (ws://host:port)")
    parser.add_argument("--config", default=None, help="YAML config file")
    parser.add_argument("--level", default=None, help="Only show records of this level")
    parser.add_argument(
        "--reconnect-delay", type=float, default=None, help="Seconds to wait before reconnecting"
    )
    parser.add_argument(
        "--max-reconnect-attempts",
        type=int,
        default=None,
        help="Stop retrying after N attempts (0=unlimited)",
    )
    parser.add_argument(
        "--max-records", type=int, default=None, help="Keep at most N records (0=unbounded)"
    )
    parser.add_argument(
        "--dashboard-port", type=int, default=None, help="Serve the HTTP dashboard on this port"
    )
    parser.add_argument("--color", action="store_true", help="Colorize output by log level (ANSI)")
    parser.add_argument("--log-level", default=None, help="Logging level for diagnostics")
    return parser.parse_args(argv)


def build_config(args):
    config = load_config(args.config)
    return with_overrides(config, {
        "url": args.url,
        "level_filter": args.level,
        "reconnect_delay": args.reconnect_delay,
        "max_reconnect_attempts": args.max_reconnect_attempts,
        "max_records": args.max_records,
        "dashboard_port": args.dashboard_port,
        "color": True if args.color else None,
        "log_level": args.log_level,
    })


def attach_console(viewer: LogViewer, formatter, out=sys.stdout):
    """Print store changes as they happen."""

    def print_records(records):
        for record in filter_records(records, viewer.selected_level):
            print(formatter(record), file=out, flush=True)

    def reprint(*_):
        print(f"--- showing {viewer.selected_level} ---", file=out, flush=True)
        for record in viewer.displayed_records():
            print(formatter(record), file=out, flush=True)

    def cleared():
        print("--- cleared ---", file=out, flush=True)

    return [
        viewer.subscribe("append", print_records),
        viewer.subscribe("replace", reprint),
        viewer.subscribe("filter", reprint),
        viewer.subscribe("clear", cleared),
        viewer.subscribe("status", lambda status, state: logger.info("Status: %s", status)),
    ]


async def run(config):
    loop = asyncio.get_running_loop()
    stop = asyncio.Event()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            signal.signal(sig, lambda signum, frame: loop.call_soon_threadsafe(stop.set))

    viewer = LogViewer(config)
    attach_console(viewer, get_formatter(config.color))

    if config.dashboard_port:
        from log_viewer.dashboard import create_dashboard_app, run_dashboard

        app = create_dashboard_app(viewer, dispatch=loop.call_soon_threadsafe)
        threading.Thread(
            target=run_dashboard, args=(app, config.dashboard_port), daemon=True
        ).start()
        logger.info("Dashboard listening on port %d", config.dashboard_port)

    logger.info("Following %s (filter=%s)", config.url, config.level_filter)
    viewer.start()
    try:
        await stop.wait()
    finally:
        viewer.teardown()
        logger.info("Shutdown complete: %d records in view", len(viewer.store))


def main(argv=None):
    args = parse_args(argv)
    config = build_config(args)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    asyncio.run(run(config))


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        sys.exit(0)
