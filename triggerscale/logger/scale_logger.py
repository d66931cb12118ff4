import logging

from ..constants import TSCALE_CSV, TSCALE_FILE, TSCALE_STDOUT
from ..utils.logger import get_base_logger, get_csv_logger, get_file_logger

# Register custom log levels with logging.
logging.addLevelName(TSCALE_STDOUT, "TSCALE_STDOUT")
logging.addLevelName(TSCALE_CSV, "TSCALE_CSV")
logging.addLevelName(TSCALE_FILE, "TSCALE_FILE")

class ScaleLogger:
    """Centralized logging for the engine, supporting standard, file, and CSV logs."""

    def __init__(
        self, name=None,
        dirname=None,
        csv_header=None,
        level=TSCALE_STDOUT,
        std_log_kwargs=None,
        csv_log_kwargs=None,
        file_log_kwargs=None
    ):
        super().__init__()

        self.name = name
        self._std_log = get_base_logger(f"std_{name}", level, **(std_log_kwargs or {}))

        # File and CSV outputs are only created when a log directory is configured.
        self._file_log = None
        self._csv_log = None
        if dirname:
            self._file_log = get_file_logger(f"file_{name}", dirname, level=level, **(file_log_kwargs or {}))
            if csv_header:
                self._csv_log = get_csv_logger(f"csv_{name}", dirname, header=csv_header, level=level, **(csv_log_kwargs or {}))

    @property
    def loggers(self):
        return [logger for logger in (self._std_log, self._file_log, self._csv_log) if logger is not None]

    def setLevel(self, level):
        for logger in self.loggers:
            logger.setLevel(level)

    def _log(self, logger, level, message, *args, **kwargs):
        if logger is not None and logger.isEnabledFor(level):
            logger._log(level, message, args, **kwargs)

    def std_log(self, message, *args, **kwargs):
        self._log(self._std_log, TSCALE_STDOUT, message, *args, **kwargs)
        self._log(self._file_log, TSCALE_FILE, message, *args, **kwargs)

    def error_log(self, message, *args, **kwargs):
        self._log(self._std_log, logging.ERROR, message, *args, **kwargs)
        self._log(self._file_log, logging.ERROR, message, *args, **kwargs)

    def csv_log(self, message, *args, **kwargs):
        self._log(self._csv_log, TSCALE_CSV, message, *args, **kwargs)

    def file_log(self, message, *args, **kwargs):
        self._log(self._file_log, TSCALE_FILE, message, *args, **kwargs)

    def close(self):
        """Flush and close file-backed handlers."""

        for logger in (self._file_log, self._csv_log):
            if logger is None:
                continue
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)
