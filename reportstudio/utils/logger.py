"""
Logging for reportstudio
Console output plus an optional rotating log file, both taken from Config
"""

import sys
from typing import Optional

from loguru import logger

from reportstudio.config import Config, config as global_config

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"


def setup_logging(settings: Optional[Config] = None):
    """Replace loguru's handlers with the sinks described by ``settings``"""
    settings = settings or global_config
    logger.remove()

    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=settings.log_level, colorize=True)

    # the log directory is created when Config is built
    if settings.log_file:
        logger.add(
            settings.log_file,
            format=FILE_FORMAT,
            level=settings.log_level,
            rotation="50 MB",
            retention="30 days",
            compression="zip",
            encoding="utf-8",
        )


def get_logger(name: str):
    """Get a named logger"""
    return logger.bind(name=name)
