"""Command line entry point for the replica set monitor."""

import argparse
import logging
import os
import sys
from functools import partial
from typing import List, Optional

from dotenv import load_dotenv

from mongomonitor import __version__
from mongomonitor.config import DEFAULT_CONFIG_PATH, ConfigError, load_config
from mongomonitor.monitor import check_members
from mongomonitor.notifier import Notifier
from scheduler import PassScheduler

logger = logging.getLogger("mongomonitor")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mongomonitor",
        description="Monitor the health of a MongoDB replica set.",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=os.environ.get("MONGOMONITOR_CONFIG", DEFAULT_CONFIG_PATH),
        help="path to the mongomonitor config file (default: %(default)s)",
    )
    parser.add_argument(
        "--test-email",
        action="store_true",
        help="send a test alert to verify the notification config, then exit",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="run a single health check pass and exit",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def setup_logging(verbose: bool = False) -> None:
    level = "DEBUG" if verbose else os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for ``python run_monitor.py``."""

    load_dotenv()
    args = parse_args(argv)
    setup_logging(args.verbose)

    config_path = os.path.abspath(args.config)
    logger.info("Initializing using the following config file: %s", config_path)
    try:
        config = load_config(config_path)
    except ConfigError as exc:
        logger.error("%s", exc)
        return 1

    if args.test_email:
        notifier = Notifier(config.slack, background=False)
        return 0 if notifier.send_test_alert() else 1

    # A single pass exits right after, so alerts are delivered inline
    notifier = Notifier(config.slack, background=not args.once)
    run_pass = partial(check_members, config, notifier)

    if args.once:
        result = run_pass()
        return 0 if result.healthy else 2

    scheduler = PassScheduler(run_pass, config.interval)
    try:
        scheduler.run_forever()
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
        scheduler.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
