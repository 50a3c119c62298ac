from __future__ import annotations


import logging
import os


DEFAULT_WIN_SIZE = 4096
DEFAULT_HOP_SIZE = 512
DEFAULT_DB_RANGE = 80.0
DEFAULT_MAX_FREQ_HZ = 8000.0

# Added to linear magnitudes before log10 so silent bins stay finite
DB_EPSILON = 1e-12
# Overlap-add positions with less accumulated window energy than this are emitted as silence
NORM_EPSILON = 1e-8

# Log level for scripts; set SPECTRO_PAINT_LOG_LEVEL=DEBUG to see per-call geometry and timing
LOG_LEVEL_DEFAULT = os.environ.get("SPECTRO_PAINT_LOG_LEVEL", "WARNING")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int | None = None) -> None:
    """
    Install a basic stderr handler for command-line use.

    Library modules only create loggers; handlers are left to the application.
    """
    if level is None:
        level = LOG_LEVEL_DEFAULT
    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
