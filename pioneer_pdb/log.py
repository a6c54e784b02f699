import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from . import config


def setup_logging(level: Optional[str] = None, log_file: Optional[Path] = None) -> None:
    """
    Route pioneer_pdb log output to stderr, and optionally to a file.

    Args:
        level: Minimum level (DEBUG, INFO, WARNING, ERROR). Defaults to
            PIONEER_PDB_LOG_LEVEL.
        log_file: Optional path of a rotating log file
    """
    level = level or config.LOG_LEVEL

    logger.remove()
    logger.add(sys.stderr, level=level, format="{level: <8} | {message}")
    if log_file is not None:
        logger.add(
            log_file,
            rotation="10 MB",
            retention=5,
            level=level,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}",
        )
    logger.enable("pioneer_pdb")
