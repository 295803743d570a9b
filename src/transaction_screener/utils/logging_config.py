"""Logging setup shared by the CLI and the screening pipeline.

All loggers hang off the ``transaction_screener`` logger so one call to
setup_logging routes every module's output to the same handlers.
"""

import logging
import sys
import time
from pathlib import Path

DEFAULT_LOG_FILE = "transaction_screener.log"

ROOT_LOGGER_NAME = "transaction_screener"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    console_output: bool = True,
) -> logging.Logger:
    """Configure the package logger.

    Calling this again replaces the previous handlers instead of adding to them.

    Args:
        level: Log level name; unknown names fall back to INFO.
        log_file: Path to the log file. If None, uses DEFAULT_LOG_FILE.
        console_output: Whether to also write to stderr.

    Returns:
        The configured package logger.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.setLevel(numeric_level)

    for handler in list(package_logger.handlers):
        handler.close()
        package_logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: list[logging.Handler] = [
        logging.FileHandler(Path(log_file or DEFAULT_LOG_FILE), encoding="utf-8")
    ]
    if console_output:
        handlers.append(logging.StreamHandler(sys.stderr))

    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Get a module logger under the package logger.

    Args:
        name: Module name (typically __name__). Names already inside the
            package are used unchanged.

    Returns:
        Logger named ``transaction_screener.<module>``.
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


class LogContext:
    """Logs the start, duration and failure of one batch step.

    Start is logged at DEBUG, completion at INFO with the elapsed time, and
    failures at ERROR with the traceback. Exceptions are never suppressed.
    """

    def __init__(self, logger: logging.Logger, operation: str, **context: object):
        """Initialize log context.

        Args:
            logger: Logger instance to use.
            operation: Name of the step, e.g. "process batch".
            **context: Values describing the step's input (row counts, file names).
        """
        self.logger = logger
        self.operation = operation
        self.context = context
        self.elapsed: float | None = None
        self._started = 0.0

    def _describe(self) -> str:
        if not self.context:
            return self.operation
        details = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.operation} ({details})"

    def __enter__(self) -> "LogContext":
        self.logger.debug(f"Starting {self._describe()}")
        self._started = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> bool:
        self.elapsed = time.perf_counter() - self._started
        if exc_type is not None:
            self.logger.error(
                f"Error in {self._describe()} after {self.elapsed:.3f}s: "
                f"{exc_type.__name__}: {exc_val}",
                exc_info=True,
            )
        else:
            self.logger.info(f"Completed {self._describe()} in {self.elapsed:.3f}s")
        return False
