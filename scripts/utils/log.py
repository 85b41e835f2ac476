# scripts/utils/log.py
import logging
import os


class LevelColorFormatter(logging.Formatter):
    """
    Formatter that colours each line by its log level.

    Usage:
        handler = logging.StreamHandler()
        handler.setFormatter(LevelColorFormatter())
    """
    grey = "\x1b[37;20m"
    yellow = "\x1b[33;20m"
    red = "\x1b[31;20m"
    bold_red = "\x1b[31;1m"
    dark_grey = "\x1b[30;1m"
    reset = "\x1b[0m"
    fmt = "[%(levelname)s] %(asctime)s - %(message)s"

    FORMATS = {
        logging.DEBUG: dark_grey + fmt + reset,
        logging.INFO: grey + fmt + reset,
        logging.WARNING: yellow + fmt + reset,
        logging.ERROR: red + fmt + reset,
        logging.CRITICAL: bold_red + fmt + reset,
    }

    def format(self, record):
        log_fmt = self.FORMATS.get(record.levelno, self.fmt)
        return logging.Formatter(log_fmt).format(record)


_ROOT_NAME = "site"


def _root_logger() -> logging.Logger:
    root = logging.getLogger(_ROOT_NAME)
    if not root.handlers:
        ch = logging.StreamHandler()
        ch.setFormatter(LevelColorFormatter())
        root.addHandler(ch)
        root.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    return root


def get_logger(name: str) -> logging.Logger:
    """Child of the shared ``site`` logger, e.g. ``site.scripts.media.optimize_images``."""
    _root_logger()
    return logging.getLogger(f"{_ROOT_NAME}.{name}")
