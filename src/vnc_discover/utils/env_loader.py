"""Environment loader utilities for early initialization.

This module provides functions to load environment variables from a
``.env`` file and to configure logging before the CLI runs.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def find_dotenv() -> Optional[str]:
    """Find .env file, searching up from current directory."""
    current = Path.cwd()
    while current != current.parent:
        env_path = current / ".env"
        if env_path.exists():
            return str(env_path)
        current = current.parent
    return None


def load_dotenv_early(override: bool = False) -> Optional[str]:
    """Load the nearest .env file. Returns its path, if any."""
    env_path = find_dotenv()
    if env_path:
        load_dotenv(env_path, override=override)
    return env_path


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr so stdout only carries the report.

    LOG_LEVEL sets the level; --verbose forces DEBUG.
    """
    if verbose:
        level = logging.DEBUG
    else:
        level = logging.getLevelName(os.getenv("LOG_LEVEL", "WARNING").upper())
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)
