"""Main module for trippin."""

import logging
import os
import sys

from trippin.cli import run
from trippin.config.paths import get_paths
from trippin.config.settings import settings


def setup_logging() -> None:
    """Configure logging to file for debugging."""
    paths = get_paths()
    paths.workspace_config.mkdir(parents=True, exist_ok=True)
    log_file = paths.debug_log

    # Set level from env var, default to INFO
    level = os.environ.get("TRIPPIN_LOG_LEVEL", "INFO").upper()

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(log_file, mode="a"),
        ],
    )
    logging.info("Trippin starting, logging to %s", log_file)
    logging.info("Journey data: %s", settings.data_directory)


def main() -> None:
    """Entry point for the Trippin application."""
    sys.exit(run(configure_logging=setup_logging))


if __name__ == "__main__":
    main()
