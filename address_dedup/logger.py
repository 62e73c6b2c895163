# address_dedup/logger.py
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import List, Optional

_configured = False

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _file_handler(path: str, level: int, formatter: logging.Formatter) -> logging.Handler:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    handler = RotatingFileHandler(
        path,
        maxBytes=int(os.getenv("LOG_MAX_BYTES", str(2 * 1024 * 1024))),
        backupCount=int(os.getenv("LOG_BACKUPS", "3")),
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def build_handlers(level: int, formatter: logging.Formatter) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []

    if _env_flag("LOG_TO_STDOUT", "true"):
        ch = logging.StreamHandler(sys.stdout)
        ch.setLevel(level)
        ch.setFormatter(formatter)
        handlers.append(ch)

    if _env_flag("LOG_TO_FILE", "false"):
        log_file = os.getenv("LOG_FILE", "/data/address_dedup.log")
        try:
            handlers.append(_file_handler(log_file, level, formatter))
        except OSError as e:
            logging.getLogger(__name__).warning(
                "Failed to initialize file logging at %s: %s", log_file, e
            )

    return handlers


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure the root logger once per process from LOG_* env vars.
    File logging is off unless LOG_TO_FILE=true; the diagnostics of skipped
    duplicates go wherever the root logger writes.
    """
    global _configured
    if _configured:
        return

    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    numeric = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    root.setLevel(numeric)
    formatter = logging.Formatter(os.getenv("LOG_FORMAT", LOG_FORMAT))

    # Host application already configured logging
    if not root.handlers:
        for handler in build_handlers(numeric, formatter):
            root.addHandler(handler)

    _configured = True


def get_logger(name: str | None = None) -> logging.Logger:
    setup_logging()
    return logging.getLogger(name)
