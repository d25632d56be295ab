"""
Handles configuration of logging for the command-line and CGI front ends.
"""
import logging
import sys
import os
from pathlib import Path
from datetime import datetime


LOG_DIR_ENV = "DOCBINDER_LOG_DIR"
MAX_LOG_FILES = 20
CONSOLE_LOG_FORMAT = "%(levelname)s: %(message)s"
FILE_LOG_FORMAT = (
    "%(asctime)s [%(process)d] %(levelname)s - [%(module)s:%(lineno)d] - %(message)s"
)

# Console level for each verbosity setting (--quiet = -1, each -v adds one)
_VERBOSITY_LEVELS = {
    -1: logging.ERROR,
    0: logging.WARNING,
    1: logging.INFO,
}


def _console_handler(logger: logging.Logger) -> logging.Handler | None:
    return next(
        (h for h in logger.handlers if getattr(h, "name", None) == "console"), None
    )


def setup_main_logger(console_level=logging.WARNING, log_dir: Path | None = None):
    """
    Configures the "docbinder" logger for the main process.

    Console output goes to stderr at the specified level. When a log
    directory is given (or DOCBINDER_LOG_DIR is set), every run also writes
    a new DEBUG-level log file there and old files are rotated out.
    """
    logger = logging.getLogger("docbinder")
    logger.setLevel(logging.DEBUG)  # Capture all levels

    # Avoid adding duplicate handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    # --- Console Handler ---
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.set_name("console")
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_LOG_FORMAT))
    logger.addHandler(console_handler)

    if log_dir is None and os.environ.get(LOG_DIR_ENV):
        log_dir = Path(os.environ[LOG_DIR_ENV])
    if log_dir is None:
        return

    try:
        _add_file_handler(logger, log_dir)
    except OSError:
        logger.error("Failed to set up file logging.", exc_info=True)


def _rotate_logs(log_dir: Path, keep: int):
    """Deletes the oldest run logs so that at most `keep` remain."""
    logs = sorted(log_dir.glob("docbinder_*.log"), key=os.path.getmtime)
    for stale in logs[:max(0, len(logs) - keep)]:
        try:
            stale.unlink()
        except OSError:
            pass  # Still open elsewhere


def _add_file_handler(logger: logging.Logger, log_dir: Path) -> Path:
    """Starts a new DEBUG-level log file for this run."""
    log_dir.mkdir(parents=True, exist_ok=True)
    _rotate_logs(log_dir, MAX_LOG_FILES - 1)

    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    path = log_dir / f"docbinder_{stamp}_{os.getpid()}.log"

    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)

    logger.debug(f"Logging to {path}")
    return path


def set_console_verbosity(verbosity: int):
    """Adjusts the console handler to the job's verbosity."""
    logger = logging.getLogger("docbinder")
    handler = _console_handler(logger)
    if handler is None:
        return
    if verbosity > 1:
        level = logging.DEBUG
    else:
        level = _VERBOSITY_LEVELS.get(verbosity, logging.ERROR)
    handler.setLevel(level)
