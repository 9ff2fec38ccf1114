"""Logging setup for the assistant CLI: console by verbosity, file always DEBUG."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

# Chatty third-party loggers; only shown at the highest verbosity.
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "google_genai")

LEVELS = {0: logging.WARNING, 1: logging.INFO, 2: logging.DEBUG}


def setup_logging(
    verbosity: int = 0,
    log_file: Optional[str] = None,
    log_dir: str = "logs",
) -> logging.Logger:
    """
    Set up logging with verbosity levels and file output.

    Args:
        verbosity: 0=WARNING, 1=INFO, 2=DEBUG, 3=DEBUG including HTTP client logs
        log_file: Optional log file path. If None, a timestamped file in log_dir is used.
        log_dir: Directory for the default log file

    Returns:
        Configured logger instance
    """
    console_level = LEVELS.get(verbosity, logging.DEBUG)

    if log_file is None:
        logs_dir = Path(log_dir)
        logs_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_path = logs_dir / f"cal_assistant_{timestamp}.log"
    else:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    # stderr, so stdout carries only the reply
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(console_handler)

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbosity >= 3 else logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging initialized. Verbosity: {verbosity}, Log file: {log_path}")

    return logger


def parse_verbosity(args: list) -> int:
    """
    Parse verbosity level from command line arguments.

    Accepts -v, -vv, -vvv and repeated -v flags.

    Args:
        args: Command line arguments

    Returns:
        Verbosity level (0-3)
    """
    verbosity = 0
    for arg in args:
        if arg.startswith("-") and not arg.startswith("--") and set(arg[1:]) == {"v"}:
            verbosity += len(arg) - 1
    return min(verbosity, 3)
