"""Logging setup for the kemkit command line."""

import logging
import sys
from typing import Optional, TextIO


def configure_logging(level: int = logging.INFO, stream: Optional[TextIO] = None) -> None:
    # Root handler is installed once; later calls only move the kemkit level.
    logging.basicConfig(
        level=logging.WARNING,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=stream or sys.stdout,
    )
    logging.getLogger("kemkit").setLevel(level)
