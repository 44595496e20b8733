from __future__ import annotations

import logging
import sys

from frame_picker.config import LoggingSettings


def configure_logging(settings: LoggingSettings) -> None:
    """Configure process-wide logging once at startup.

    Records go to stderr; stdout carries the CLI's JSON output.
    """

    logging.basicConfig(
        level=getattr(logging, settings.level.upper(), logging.INFO),
        format=settings.format,
        stream=sys.stderr,
        force=True,
    )
