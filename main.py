# =============================================================================
# GOVERNANCE PROPOSAL WATCHER
# Module: main.py
# Purpose: CLI entry point - wire collaborators and run the poll loop
# =============================================================================
#
# USAGE:
# python main.py                       # run forever with config.yaml
# python main.py --config prod.yaml    # custom config
# python main.py --once                # single cycle, then exit
#
# EXIT CODES:
# 0 - stopped by signal, or --once finished (even if the cycle had errors)
# 1 - config could not be loaded, store unreachable, bot token rejected
#
# =============================================================================

import argparse
import logging
import signal
import sys
from typing import List, Optional

from app.reconciler import Reconciler
from app.scheduler import Scheduler
from collector.client import ProposalFeedClient
from notifications.telegram import TelegramNotifier
from proposals.storage import open_store
from shared.config import DEFAULT_CONFIG_PATH, load_config
from shared.exceptions import ConfigError, NotifyError, StoreError
from shared.logging_config import setup_logging

logger = logging.getLogger("watcher")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="proposal-watcher",
        description="Governance Proposal Watcher - Telegram alerts for new proposals",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py
  python main.py --config /etc/watcher/config.yaml
  python main.py --once --verbose
        """,
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=str(DEFAULT_CONFIG_PATH),
        help=f"Path to YAML config (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single cycle and exit",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--no-log-file",
        action="store_true",
        help="Log to console only",
    )

    return parser.parse_args(argv)


def _install_signal_handlers(scheduler: Scheduler) -> None:
    def _handle(signum, frame):
        logger.info(f"Received signal {signum}, stopping after current cycle")
        scheduler.stop()

    signal.signal(signal.SIGINT, _handle)
    signal.signal(signal.SIGTERM, _handle)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    setup_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        file_output=False,
    )

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.critical(f"Error loading config: {e}")
        return 1

    # Re-initialize with the configured level and log file
    setup_logging(
        level=logging.DEBUG if args.verbose else config.logging.level,
        file_output=config.logging.file and not args.no_log_file,
        log_dir=config.logging.dir,
    )

    store = open_store(config.storage, config.redis)
    try:
        store.ping()
    except StoreError as e:
        logger.critical(f"Error connecting to store: {e}")
        return 1
    logger.info(f"Store: {store.description}")

    notifier = TelegramNotifier(
        bot_token=config.telegram.bot_token,
        chat_id=config.telegram.chat_id,
        explorer_base_url=config.explorer_base_url,
    )
    try:
        notifier.verify()
    except NotifyError as e:
        logger.critical(f"Error initializing Telegram bot: {e}")
        store.close()
        return 1

    source = ProposalFeedClient(config.api_url, timeout=config.api_timeout)
    reconciler = Reconciler(source=source, store=store, notifier=notifier)

    try:
        if args.once:
            reconciler.run_cycle()
            return 0

        scheduler = Scheduler(reconciler, interval_seconds=config.poll_interval_seconds)
        _install_signal_handlers(scheduler)
        scheduler.run()
        return 0
    finally:
        source.close()
        notifier.close()
        store.close()


if __name__ == "__main__":
    sys.exit(main())
