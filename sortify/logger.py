"""
Logging setup.

The terminal belongs to the interactive menu, so log records go to a file
in the log directory instead of the screen.
"""

from datetime import datetime
from pathlib import Path
import logging

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def setup_logging(log_dir: str = "logs", debug: bool = False) -> Path:
    """Send all log records to a fresh timestamped file.

    Existing root handlers are removed first, so calling this again
    reconfigures logging instead of duplicating output.

    Args:
        log_dir: Directory for log files, created if missing
        debug: Log at DEBUG instead of INFO

    Returns:
        Path of the log file
    """
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    log_path = directory / f"sortify_{datetime.now():%Y-%m-%d_%H-%M-%S}.log"

    # Clear existing handlers to allow reconfiguration
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = logging.FileHandler(log_path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger.setLevel(logging.DEBUG if debug else logging.INFO)
    root_logger.addHandler(handler)

    # HTTP client chatter is only useful when debugging
    for noisy in ("urllib3", "spotipy"):
        logging.getLogger(noisy).setLevel(logging.DEBUG if debug else logging.WARNING)

    return log_path
