import logging
import time

from pathlib import Path
from triggerscale.constants import DEFAULT_FMT, TSCALE_CSV, TSCALE_FILE, TSCALE_STDOUT
from triggerscale.logger.formatter import DelimitedFormatter
from triggerscale.logger.rotator import LogFileRotator

def get_base_logger(name=None, level=TSCALE_STDOUT, handlers=None, formatter=None):
    """Create and configure a logger that outputs messages to the console or specified handlers."""

    # Get or create a logger with the given name.
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # If no handlers are provided, create a default StreamHandler (console output).
    if not handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(formatter or logging.Formatter(fmt=DEFAULT_FMT))
        handlers = [handler]
    elif not isinstance(handlers, (list, tuple)):
        handlers = [handlers]

    # Drop handlers from an earlier logger of the same name so lines are not duplicated.
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    for handler in handlers:
        logger.addHandler(handler)

    return logger

def get_file_logger(name=None, dirname="logs", filename=None, level=TSCALE_FILE, mode="w", **kwargs):
    """Create a file-based logger that writes plain log lines to a persistent file."""

    filename = Path(dirname) / (filename or f"{name or f'log_{int(time.time())}'}.log")

    # Ensure the directory exists before writing logs.
    filename.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(filename, mode=mode)
    handler.setFormatter(logging.Formatter(fmt=DEFAULT_FMT))

    return get_base_logger(name, level=level, handlers=handler, **kwargs)

def get_csv_logger(name=None, dirname="logs", header=None, level=TSCALE_CSV, mode="w", delimiter=",", datefmt="%Y/%m/%d %H:%M:%S", max_size=0, backup_count=0, **kwargs):
    """Create a CSV-based logger that writes rows to a rotating file."""

    # Rows carry their own timestamp column, so the format is the bare message.
    message_format = "%(message)s"

    filename = Path(dirname) / f"{name or f'log_{int(time.time())}'}.csv"
    filename.parent.mkdir(parents=True, exist_ok=True)

    handler = LogFileRotator(
        filename, message_format=message_format, datefmt=datefmt,
        max_size=max_size, header=header, delimiter=delimiter, mode=mode,
        backupCount=backup_count,
    )

    return get_base_logger(name, level=level, handlers=handler, **kwargs)
