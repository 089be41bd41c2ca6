from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

LOGGER_NAME = "ekubo_sdk"
LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def configure_logging(level: int = logging.INFO, log_path: Optional[Union[str, Path]] = None) -> logging.Logger:
    """Attach stream (and optional file) handlers to the package logger.

    Library code only logs; applications call this once at startup.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for h in list(logger.handlers):
        if not isinstance(h, logging.NullHandler):
            logger.removeHandler(h)
            h.close()

    fmt = logging.Formatter(LOG_FORMAT)

    if log_path is not None:
        path = Path(log_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(fmt)
        logger.addHandler(file_handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(fmt)
    logger.addHandler(stream_handler)

    return logger
