"""bugreport-durations — report per-section collection durations from bugreport archives."""

import logging
import signal
import sys
import time
from argparse import ArgumentParser

from bugreport_collector.archive import BugReportArchiveError, BugReportNotFoundError
from bugreport_collector.config import ConfigError, load_config, load_yaml_config
from bugreport_collector.device import AdbCommandError, AdbDevice
from bugreport_collector.formatter import FORMATS, get_formatter
from bugreport_collector.helper import BugReportDurationHelper
from bugreport_collector.parser import to_metric_map

logger = logging.getLogger(__name__)

_running = True


def _signal_handler(sig, frame):
    global _running
    logger.info("Shutdown signal received, stopping...")
    _running = False


def build_parser() -> ArgumentParser:
    """Build the CLI argument parser."""
    parser = ArgumentParser(
        prog="bugreport-durations",
        description="Report dumpstate and dumpsys section durations from bugreport archives.",
    )
    parser.add_argument(
        "--dir",
        help="Directory holding bugreport-*.zip archives (default: ./bugreports)",
    )
    parser.add_argument(
        "--archive",
        help="Parse this archive name instead of the newest one",
    )
    parser.add_argument(
        "--pull",
        action="store_true",
        help="Pull the newest bugreport from the device into --dir first",
    )
    parser.add_argument(
        "--output",
        choices=list(FORMATS),
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Show totals and slowest sections instead of every metric",
    )
    parser.add_argument(
        "--top",
        type=int,
        help="Number of slowest sections shown with --stats (default: 10)",
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Keep running and report each new archive as it appears",
    )
    parser.add_argument(
        "--config",
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--serial",
        help="Device serial for --pull (default: $ANDROID_SERIAL)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def watch(helper: BugReportDurationHelper, formatter) -> None:
    """Report existing archives, then every new one until interrupted."""
    from watchdog.observers import Observer

    from bugreport_collector.watcher import BugReportWatcher

    def emit(archive_name, metrics):
        print(f"# {archive_name}")
        print(formatter(metrics), flush=True)

    watcher = BugReportWatcher(helper, emit)
    watcher.process_existing()

    observer = Observer()
    observer.schedule(watcher, helper.bugreport_dir, recursive=False)
    observer.start()
    logger.info("Watching %s for new bugreports", helper.bugreport_dir)

    try:
        while _running:
            time.sleep(1)
    finally:
        observer.stop()
        observer.join(timeout=5)
        logger.info("Watcher stopped.")


def run(args) -> int:
    """Resolve config and run the requested mode. Returns the exit code."""
    if args.watch and (args.stats or args.archive):
        print("Error: --watch cannot be combined with --stats or --archive", file=sys.stderr)
        return 1

    try:
        config = load_config(args, load_yaml_config(args.config))
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if config.output_format not in FORMATS:
        print(f"Error: unknown output format {config.output_format!r}", file=sys.stderr)
        return 1
    logger.debug("Config: %s", config)

    formatter = get_formatter(config.output_format)
    helper = BugReportDurationHelper(config.bugreport_dir)

    try:
        if args.pull:
            device = AdbDevice.from_config(config)
            device.pull_latest_bugreport(config.remote_bugreport_dir, config.bugreport_dir)

        if args.watch:
            signal.signal(signal.SIGTERM, _signal_handler)
            watch(helper, formatter)
            return 0

        helper.start_collecting()
        metrics = helper.get_duration_metrics(args.archive)
        helper.stop_collecting()
    except (BugReportNotFoundError, BugReportArchiveError, AdbCommandError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.stats:
        from bugreport_collector.stats import compute_stats, format_stats_json, format_stats_text
        stats = compute_stats(metrics, top_n=config.top_n)
        if config.output_format == "json":
            print(format_stats_json(stats))
        else:
            print(format_stats_text(stats))
        return 0

    output = formatter(to_metric_map(metrics))
    if output:
        print(output)
    return 0


def main():
    parser = build_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [BUGREPORT] %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    sys.exit(run(args))


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        sys.exit(0)
    except BrokenPipeError:
        sys.exit(0)
