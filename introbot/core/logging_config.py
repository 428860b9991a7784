"""Process-wide logging for introbot.

Console output is coloured by level. With ``log_file`` a rotating
``introbot.log`` is written under ``log_dir`` at DEBUG. Our own loggers and
the noisy libraries get their levels from two tables below.
"""

from __future__ import annotations

import copy
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Dict, Iterable, Union

# our packages; raised to DEBUG when debug is on
PACKAGE_LEVELS: Dict[str, int] = {
    "introbot": logging.INFO,
    "introbot.localization": logging.INFO,
    "introbot.features.splash": logging.INFO,
    "introbot.infra": logging.WARNING,
}

# third-party loggers that stay quiet even in debug mode
LIBRARY_LEVELS: Dict[str, int] = {
    "telegram": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "aiosqlite": logging.WARNING,
    "asyncio": logging.ERROR,
}

CONSOLE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s - %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s (%(filename)s:%(lineno)d) - %(message)s"
LOG_FILE_NAME = "introbot.log"
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3

# marks handlers installed here so a second setup replaces only those
_HANDLER_TAG = "_introbot_handler"


class LevelColorFormatter(logging.Formatter):
    """Wraps the level name in an ANSI colour."""

    PALETTE = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.PALETTE.get(record.levelno)
        if color is None:
            return super().format(record)
        # other handlers share the record
        record = copy.copy(record)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def _tagged(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_TAG, True)
    return handler


def console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(LevelColorFormatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
    return _tagged(handler)


def file_handler(log_dir: Path) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return _tagged(handler)


def _replace_handlers(root: logging.Logger, handlers: Iterable[logging.Handler]) -> None:
    for old in [h for h in root.handlers if getattr(h, _HANDLER_TAG, False)]:
        root.removeHandler(old)
        old.close()
    for handler in handlers:
        root.addHandler(handler)


def setup_logging(log_file: bool = True, debug: bool = False, log_dir: Union[Path, str] = "logs") -> None:
    """Install introbot's handlers on the root logger and apply the level tables.

    Safe to call more than once: handlers from an earlier call are closed and
    replaced, handlers installed by anything else are left alone.
    """
    level = logging.DEBUG if debug else logging.INFO
    root = logging.getLogger()
    root.setLevel(level)

    handlers = [console_handler(level)]
    if log_file:
        handlers.append(file_handler(Path(log_dir)))
    _replace_handlers(root, handlers)

    for name, package_level in PACKAGE_LEVELS.items():
        logging.getLogger(name).setLevel(logging.DEBUG if debug else package_level)
    for name, library_level in LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(library_level)

    logging.getLogger(__name__).info(
        "Logging configured (level=%s, file=%s)",
        logging.getLevelName(level),
        Path(log_dir) / LOG_FILE_NAME if log_file else "off",
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
