"""Logging setup shared by the Streamlit app and the scripts."""

import logging
import logging.handlers
import os
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_HANDLER_MARK = "_mvpfin_handler"


def setup_logging(app_name: str = "mvpfin", log_dir: Path | str | None = None, level: str | int = logging.INFO) -> None:
    """Configure application logging

    Streamlit reruns the script on every interaction, so handlers installed
    by an earlier run are detected and left alone.

    Args:
        app_name: Name to use for log files
        log_dir: Directory for the log files, defaults to ``$LOG_DIR`` or ``logs``
        level: Root logger level

    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    if any(getattr(handler, _HANDLER_MARK, False) for handler in root_logger.handlers):
        return

    log_dir = Path(log_dir or os.getenv("LOG_DIR", "logs"))
    os.makedirs(log_dir, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    # File handler with rotation
    file_handler = logging.handlers.RotatingFileHandler(
        filename=log_dir / f"{app_name}.log",
        maxBytes=10_000_000,  # 10MB
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)

    # Errors get their own file
    error_handler = logging.handlers.RotatingFileHandler(
        filename=log_dir / f"{app_name}-error.log",
        maxBytes=10_000_000,  # 10MB
        backupCount=5,
        encoding="utf-8",
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(formatter)

    for handler in (console_handler, file_handler, error_handler):
        setattr(handler, _HANDLER_MARK, True)
        root_logger.addHandler(handler)
