"""
Command-line interface for the nfsiotop NFS server I/O monitor.

This module parses arguments, loads and validates configuration, sets up
logging, builds the event source and rendering pipeline, and maps the
outcome of a run to a process exit code.

Usage:
    nfsiotop [-g] [-n] [-i SECONDS] [--passwd-map PATH] [--group-map PATH]
    bpftrace -e "$(nfsiotop --print-program)" | nfsiotop --stdin
"""

import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .. import __version__
from ..collectors import AbstractEventSource, BpftraceCollector, StreamCollector, build_bpftrace_program
from ..config import get_config, set_config_path
from ..models.config import SOURCE_STDIN, MonitorConfig
from ..monitoring import FramePresenter, MonitorCoordinator, NameResolver, Renderer
from ..system.commands import find_bpftrace
from ..validation import TracerError, ValidationError, handle_cli_error

LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nfsiotop",
        description="Show NFS server read/write throughput per user or group.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "examples:\n"
            "    nfsiotop                 # per-user view, 3 second windows\n"
            "    nfsiotop -g -i 0.5       # per-group view, half-second windows\n"
            "    nfsiotop -n              # numeric ids, skip map files\n"
            "    bpftrace -e \"$(nfsiotop --print-program)\" | nfsiotop --stdin\n"
        ),
    )
    parser.add_argument(
        "-g", "--group", action="store_true", default=None,
        help="Rank groups (gid) instead of users (uid).",
    )
    parser.add_argument(
        "-i", "--interval", type=str, default=None, metavar="SECONDS",
        help="Window length in seconds, fractions allowed (default: 3).",
    )
    parser.add_argument(
        "-n", "--no-names", action="store_true", default=None,
        help="Show numeric ids and do not read the map files.",
    )
    parser.add_argument(
        "--passwd-map", type=str, default=None, metavar="PATH",
        help="passwd-style file mapping uids to names (default: /etc/passwd).",
    )
    parser.add_argument(
        "--group-map", type=str, default=None, metavar="PATH",
        help="group-style file mapping gids to names (default: /etc/group).",
    )
    parser.add_argument(
        "--stdin", action="store_true", default=None,
        help="Read tracer output from stdin instead of launching bpftrace.",
    )
    parser.add_argument(
        "--bpftrace", type=str, default=None, metavar="PATH",
        help="bpftrace executable to launch (default: bpftrace).",
    )
    parser.add_argument(
        "--render-thread", action="store_true", default=None,
        help="Draw frames on a background thread.",
    )
    parser.add_argument(
        "--print-program", action="store_true",
        help="Print the bpftrace program for the configured interval and exit.",
    )
    parser.add_argument(
        "--config", type=str, default=None, metavar="PATH",
        help="TOML configuration file.",
    )
    parser.add_argument(
        "--log-file", type=str, default=None, metavar="PATH",
        help="Write log records to PATH instead of stderr.",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Increase log verbosity (-v info, -vv debug).",
    )
    parser.add_argument(
        "-V", "--version", action="version", version=f"%(prog)s {__version__}",
    )
    return parser


def overrides_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    """Translate parsed arguments into [monitor] overrides (None = keep file value)."""
    overrides: Dict[str, Any] = {
        "interval_seconds": args.interval,
        "passwd_map": args.passwd_map,
        "group_map": args.group_map,
        "bpftrace_path": args.bpftrace,
        "log_file": args.log_file,
    }
    if args.group:
        overrides["view"] = "group"
    if args.no_names:
        overrides["resolve_names"] = False
    if args.stdin:
        overrides["source"] = SOURCE_STDIN
    if args.render_thread:
        overrides["render_thread"] = True
    if args.verbose == 1:
        overrides["log_level"] = "INFO"
    elif args.verbose >= 2:
        overrides["log_level"] = "DEBUG"
    return overrides


def setup_logging(config: MonitorConfig) -> None:
    """
    Configure root logging. Records never go to stdout, which holds the table.
    """
    handler_kwargs: Dict[str, Any] = {}
    if config.log_file is not None:
        handler_kwargs["filename"] = str(config.log_file)
    else:
        handler_kwargs["stream"] = sys.stderr
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        force=True,
        **handler_kwargs,
    )


def _raise_keyboard_interrupt(signum, frame):
    """Treat SIGTERM like Ctrl-C so the same cleanup path runs."""
    logger.info(f"Signal {signal.strsignal(signum)} received, shutting down")
    raise KeyboardInterrupt


def build_event_source(config: MonitorConfig) -> AbstractEventSource:
    """
    Create the configured event source.

    Raises:
        ValidationError: If bpftrace is selected but cannot be found.
    """
    if config.source == SOURCE_STDIN:
        return StreamCollector(sys.stdin)

    bpftrace = find_bpftrace(config.bpftrace_path)
    if bpftrace is None:
        raise ValidationError(
            f"bpftrace executable '{config.bpftrace_path}' not found; install bpftrace "
            f"or pipe tracer output into --stdin",
            field_name="monitor.bpftrace_path",
            value=config.bpftrace_path,
        )
    return BpftraceCollector(
        interval_seconds=config.interval_seconds,
        bpftrace_path=bpftrace,
        tracer_stderr_file=config.tracer_stderr_file,
    )


def build_coordinator(
    config: MonitorConfig, source: AbstractEventSource, stream=None
) -> MonitorCoordinator:
    """Wire resolver, renderer and presenter for a run."""
    resolver = NameResolver(enabled=config.resolve_names)
    resolver.load(config.passwd_map, config.group_map)

    renderer = Renderer(
        stream if stream is not None else sys.stdout,
        group_view=config.group_view,
        interval_seconds=config.interval_seconds,
    )
    presenter = FramePresenter(
        renderer,
        resolver,
        interval_seconds=config.interval_seconds,
        group_view=config.group_view,
    )
    return MonitorCoordinator(
        source,
        presenter,
        render_thread=config.render_thread,
        render_queue_size=config.render_queue_size,
    )


def main_cli(argv: Optional[List[str]] = None) -> int:
    """
    Main command-line entry point.

    Returns:
        Process exit code: 0 on end of stream or interrupt, 1 on tracer failure.

    Raises:
        SystemExit: On configuration errors (exit code 1).
    """
    args = build_parser().parse_args(argv)

    if args.config:
        set_config_path(Path(args.config).expanduser(), required=True)

    try:
        config = get_config(overrides_from_args(args))
    except (FileNotFoundError, KeyError, ValueError, ValidationError) as e:
        # tomllib.TOMLDecodeError is a ValueError.
        handle_cli_error(error=e, context="configuration loading", exit_code=1, logger=logger)

    setup_logging(config)

    if args.print_program:
        sys.stdout.write(build_bpftrace_program(config.interval_seconds))
        return 0

    try:
        source = build_event_source(config)
    except ValidationError as e:
        handle_cli_error(error=e, context="event source setup", exit_code=1, logger=logger)

    signal.signal(signal.SIGTERM, _raise_keyboard_interrupt)

    try:
        source.start()
    except TracerError as e:
        handle_cli_error(error=e, context="starting tracer", exit_code=1, logger=logger)

    try:
        coordinator = build_coordinator(config, source)
        windows = coordinator.run()
        logger.info(f"Monitor finished after {windows} windows")
        return 0
    except KeyboardInterrupt:
        logger.info("Interrupted, exiting")
        return 0
    except TracerError as e:
        logger.error(f"Tracer failed: {e}")
        print(f"nfsiotop: {e}", file=sys.stderr)
        return 1
    finally:
        source.stop()


if __name__ == "__main__":
    sys.exit(main_cli())
