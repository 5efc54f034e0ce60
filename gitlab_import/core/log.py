"""Logging setup shared by applications embedding the import step."""

import logging


def setup_logging(level: int = logging.INFO) -> None:
    """
    Configure logging for the application with a standardized format.

    Args:
        level: Logging level (default: INFO)
    """
    logging.basicConfig(
        format="%(asctime)s [%(levelname)s] %(message)s",
        level=level,
    )
