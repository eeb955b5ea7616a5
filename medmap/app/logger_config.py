import logging
import os
import sys
from datetime import datetime

from uvicorn.logging import DefaultFormatter

from . import config

LOG_FORMAT = "%(levelprefix)s | %(asctime)s | %(name)s | %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
QUIET_PATHS = ("/health",)


class QuietPathFilter(logging.Filter):
    """Drops uvicorn access lines for polling endpoints such as /health."""

    def filter(self, record: logging.LogRecord) -> bool:
        # uvicorn.access args: (client, method, path, http_version, status)
        args = record.args if isinstance(record.args, tuple) else ()
        if len(args) >= 3:
            return args[2] not in QUIET_PATHS
        return True


def configure_loggers(level=None, to_file=None):
    """
    Gives the "medmap" logger tree its own stderr handler. Safe to call more
    than once: handlers from an earlier call are replaced.
    """
    level = level or config.LOG_LEVEL
    to_file = config.LOG_TO_FILE if to_file is None else to_file

    logger = logging.getLogger("medmap")
    logger.setLevel(level)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(DefaultFormatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)

    if to_file:
        os.makedirs(config.LOGS_DIR, exist_ok=True)
        name = datetime.now().strftime("medmap_%Y-%m-%d_%H-%M-%S.log")
        file_handler = logging.FileHandler(os.path.join(config.LOGS_DIR, name))
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    access = logging.getLogger("uvicorn.access")
    if not any(isinstance(f, QuietPathFilter) for f in access.filters):
        access.addFilter(QuietPathFilter())

    return logger
