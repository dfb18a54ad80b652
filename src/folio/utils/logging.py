"""Logging utilities for folio."""

import logging
import time
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

# Libraries that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(
    level: int | str = logging.INFO,
    log_file: Path | None = None,
) -> logging.Logger:
    """Send folio logs to stderr through Rich, and everything to log_file when given."""
    logger = logging.getLogger("folio")
    logger.setLevel(logging.DEBUG if log_file else level)
    logger.handlers.clear()
    logger.propagate = False

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=False,
        markup=False,
    )
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


def get_logger(name: str = "folio") -> logging.Logger:
    return logging.getLogger(name)


class LogContext:
    """Logs the start, duration and outcome of one user-facing operation."""

    def __init__(self, logger: logging.Logger, context: str):
        self.logger = logger
        self.context = context
        self._started = 0.0

    def __enter__(self):
        self._started = time.perf_counter()
        self.logger.debug(f"Starting: {self.context}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.perf_counter() - self._started
        if exc_type:
            self.logger.error(f"Failed: {self.context} after {elapsed:.2f}s - {exc_val}")
        else:
            self.logger.info(f"Completed: {self.context} in {elapsed:.2f}s")
        return False
