"""
Logging configuration utility for SeasonKeeper services.

Deferred event handlers run on worker threads, so the thread name is part of every record.
"""
import logging
import os
import sys

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(threadName)s - %(module)s::%(funcName)s - %(message)s'

def _level_for(verbosity: int) -> int:
    if verbosity <= 0:
        return logging.CRITICAL + 1  # disables all log output to terminal
    if verbosity == 1:
        return logging.INFO
    return logging.DEBUG

def setup_logging(verbosity: int = 0, logfile: str = None) -> None:
    """
    Configure the root logger level and optional file output.

    Args:
        verbosity (int): Verbosity level (0=off, 1=info, 2=debug).
        logfile (str, optional): Path to log file; its directory is created if needed.

    Returns:
        None
    """
    level = _level_for(verbosity)
    formatter = logging.Formatter(LOG_FORMAT)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    if verbosity > 0:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        console_handler.setLevel(level)
        root.addHandler(console_handler)

    if logfile:
        log_dir = os.path.dirname(logfile)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(logfile, encoding='utf-8')
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        root.addHandler(file_handler)

    root.info(f"Logging configured: level={logging.getLevelName(level)}, logfile={logfile}")
