"""
Logging setup for the dues service.

Everything goes to the console. ERROR records are also written to a file
under LOG_DIR, which is only created once the first error happens so a clean
run leaves no empty log files behind.
"""
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from config import LOG_FILE_PREFIX, LOG_SQL

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# One line per HTTP request, see request_logger()
REQUEST_LOGGER = "dues.requests"

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,  # replaced by REQUEST_LOGGER
    "multipart": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
}


class DeferredErrorFile(logging.Handler):
    """Opens `<prefix>_<started>.log` on the first record it receives."""

    def __init__(self, log_dir: Path, prefix: str, level: int = logging.ERROR):
        super().__init__(level)
        self.path = Path(log_dir) / f"{prefix}_{datetime.now():%Y%m%d_%H%M%S}.log"
        self._target: Optional[logging.FileHandler] = None

    def emit(self, record):
        if self._target is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._target = logging.FileHandler(self.path, encoding="utf-8")
            self._target.setFormatter(self.formatter)
        self._target.emit(record)

    def close(self):
        if self._target is not None:
            self._target.close()
        super().close()


def setup_logging(
    log_dir: Union[str, Path, None] = None,
    level: Union[int, str] = logging.INFO,
    file_prefix: str = LOG_FILE_PREFIX,
) -> None:
    """Configure the root logger. Safe to call more than once (handlers are replaced)."""
    log_dir = Path(log_dir) if log_dir else Path(__file__).parent / "logs"
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    root.addHandler(console)

    error_file = DeferredErrorFile(log_dir, file_prefix)
    error_file.setFormatter(formatter)
    root.addHandler(error_file)

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)
    if LOG_SQL:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)

    logging.getLogger(__name__).info("Logging ready (errors go to %s)", error_file.path)


def request_logger() -> logging.Logger:
    return logging.getLogger(REQUEST_LOGGER)


def log_request(method: str, path: str, status_code: int, started: float) -> None:
    """Access-log line; 5xx responses are logged as errors so they reach the error file."""
    elapsed_ms = (time.perf_counter() - started) * 1000
    level = logging.ERROR if status_code >= 500 else logging.INFO
    request_logger().log(level, "%s %s -> %d (%.1f ms)", method, path, status_code, elapsed_ms)
