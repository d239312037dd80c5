"""Logging for the cv_blueprint package: rotating log file plus stderr."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Union

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_FILE = "cv_blueprint.log"


def resolve_level(level: Union[int, str]) -> int:
    """Accept a logging constant or a level name; unknown names fall back to INFO."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(log_dir: str = "logs", level: Union[int, str] = logging.INFO) -> logging.Logger:
    """Attach file and console handlers to the ``cv_blueprint`` logger.

    Every module logs through a child logger (``cv_blueprint.merging``,
    ``cv_blueprint.storage``, ...), so this is the only place handlers live.
    Calling it again replaces the handlers instead of adding more.
    """
    level = resolve_level(level)
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("cv_blueprint")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    # 5MB per file, keep 3 backups
    file_handler = RotatingFileHandler(
        log_path / LOG_FILE,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    # stderr keeps the JSON the CLI prints on stdout parseable
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger
