"""
Root logger setup for the API process.

Console output stays terse; the optional per-run log file records
everything at DEBUG with source locations.
"""
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

CONSOLE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s [%(filename)s:%(lineno)d] %(message)s"

# Gateway and completion traffic is already logged by our own modules
QUIET_LOGGERS = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "openai": logging.WARNING,
    "urllib3": logging.WARNING,
    "langchain": logging.INFO,
}


def _level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
    return handler


def _run_log_path(logs_dir: str) -> Path:
    directory = Path(logs_dir)
    directory.mkdir(parents=True, exist_ok=True)
    return directory / f"meeting_digest_{datetime.now():%Y%m%d_%H%M%S}.log"


def _file_handler(path: Path) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(log_level: str = "INFO", log_to_file: bool = True, logs_dir: str = "logs") -> Optional[Path]:
    """
    Replace the root logger's handlers with ours.

    Unknown level names fall back to INFO. Returns the run's log file,
    or None when file logging is off.
    """
    level = _level(log_level)
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        if isinstance(handler, logging.FileHandler):
            handler.close()
    root.setLevel(level)
    root.addHandler(_console_handler(level))

    log_file = None
    if log_to_file:
        log_file = _run_log_path(logs_dir)
        root.addHandler(_file_handler(log_file))

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)

    root.info(f"Logging at {logging.getLevelName(level)}" + (f" to {log_file}" if log_file else ""))
    return log_file
