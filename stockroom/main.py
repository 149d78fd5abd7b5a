#!/usr/bin/env python3
"""
Main entry point for Stockroom.

Single-operator console inventory tracker with a sales ledger and action history.
"""

import argparse
import sys
from typing import List, Optional

from .app import StockroomApplication
from .config import get_config_manager
from .exceptions import (
    InputClosedError,
    PersistenceError,
    StateInconsistencyError,
)
from .ui import ConsoleMenu
from .utils import get_logger


def build_parser() -> argparse.ArgumentParser:
    """Command line options."""
    parser = argparse.ArgumentParser(
        prog="stockroom",
        description="Console inventory tracker with sales ledger and action history",
    )
    parser.add_argument(
        '--config-dir',
        default='config',
        help='Directory holding app_config.json (default: config)'
    )
    parser.add_argument(
        '--data-dir',
        default=None,
        help='Directory for stock.dat, grand_total.dat and history.log '
             '(default: storage.data_dir from config)'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code: 0 after a normal exit, 1 after a fatal error
    """
    args = build_parser().parse_args(argv)
    config = get_config_manager(args.config_dir)
    logger = get_logger("main")

    app = StockroomApplication(config, data_dir=args.data_dir)

    try:
        app.initialize()
    except StateInconsistencyError as e:
        logger.critical(f"Startup refused: {e}")
        print("\n" + "=" * 60)
        print("ERROR: Stored data is in an inconsistent state")
        print("=" * 60)
        print(str(e))
        return 1
    except PersistenceError as e:
        logger.critical(f"Startup failed: {e}")
        print(f"\nERROR: {e}")
        return 1

    try:
        return ConsoleMenu(app).run()
    except PersistenceError as e:
        logger.critical(f"Fatal storage error: {e}")
        print("\n" + "=" * 60)
        print("FATAL: Data could not be saved")
        print("=" * 60)
        print(str(e))
        if getattr(e, "committed", False):
            print("The change is journaled and will be completed on next start.")
        else:
            print("The last change was NOT recorded.")
        return 1
    except InputClosedError:
        logger.error("Input closed; exiting without a final save")
        print("\nInput closed. Exiting.")
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted by operator")
        print("\n\nReceived interrupt signal")
        return 1


if __name__ == "__main__":
    sys.exit(main())
