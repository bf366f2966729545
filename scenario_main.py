"""Run registered device scenarios through adb."""

import argparse
import logging
import sys

from bugreport_collector.config import ConfigError, load_config, load_yaml_config
from bugreport_collector.device import AdbCommandError, AdbDevice
from bugreport_collector.scenarios import list_scenarios, run_scenario

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [SCENARIO] %(levelname)s %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run device scenarios")
    parser.add_argument(
        "names", nargs="*",
        help="Scenario name(s) to run, in order",
    )
    parser.add_argument(
        "--list", action="store_true",
        help="List available scenarios and exit",
    )
    parser.add_argument(
        "--serial", default=None,
        help="Device serial (default: $ANDROID_SERIAL)",
    )
    parser.add_argument(
        "--config", default=None,
        help="Path to YAML config file",
    )
    return parser


def main() -> int:
    parser = build_cli_parser()
    args = parser.parse_args()

    if args.list:
        for name in list_scenarios():
            print(name)
        return 0

    if not args.names:
        parser.error("at least one scenario name is required (or --list)")

    unknown = [n for n in args.names if n not in list_scenarios()]
    if unknown:
        print(f"Error: unknown scenario(s): {', '.join(unknown)}", file=sys.stderr)
        return 1

    try:
        config = load_config(args, load_yaml_config(args.config))
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    device = AdbDevice.from_config(config)

    for name in args.names:
        try:
            output = run_scenario(name, device)
        except AdbCommandError as e:
            logger.error("Scenario %s failed: %s", name, e)
            return 1
        if output.strip():
            logger.info("%s: %s", name, output.strip())
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(0)
