"""
Utility functions shared by the CLI and the HTTP servers.
"""

import logging
from typing import Union


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """Set up logging configuration for the application."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
