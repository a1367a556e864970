"""Per-run logging: stderr plus a timestamped file under ``config.log_dir``."""

import logging
import time
from pathlib import Path

from ulid import ULID

from .config import AppConfig

LOG_FORMAT = "%(asctime)s %(levelname)s:%(name)s:%(message)s"


def verbosity_to_level(verbose: int) -> int:
    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(config: AppConfig) -> tuple[logging.Logger, Path, str]:
    """
    Attach a file handler for this run to the ``shobdo`` logger.

    Returns:
        (logger, log_path, run_id)
    """
    run_id = str(ULID())
    config.log_dir.mkdir(parents=True, exist_ok=True)
    log_path = config.log_dir / f"shobdo_{time.strftime('%Y%m%d_%H%M%S')}_{run_id[-6:]}.log"

    logger = logging.getLogger("shobdo")
    logger.setLevel(verbosity_to_level(config.verbose))

    # Re-running in the same process (tests, REPL) must not stack handlers.
    for handler in list(logger.handlers):
        if getattr(handler, "_shobdo_run_handler", False):
            logger.removeHandler(handler)
            handler.close()

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    file_handler._shobdo_run_handler = True  # type: ignore[attr-defined]
    logger.addHandler(file_handler)

    logger.debug(f"Run {run_id} logging to {log_path}")
    return logger, log_path, run_id
