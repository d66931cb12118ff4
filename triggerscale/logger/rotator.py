from logging.handlers import RotatingFileHandler
from os import path
from triggerscale.logger.formatter import DelimitedFormatter

class LogFileRotator(RotatingFileHandler):
    """Rotating file handler for CSV logging that keeps the header on every file."""

    def __init__(self, filename, message_format=None, datefmt=None, max_size=0, header=None, delimiter=",", mode="a", **kwargs):
        file_exists = path.exists(filename) and path.getsize(filename) > 0
        super().__init__(filename, maxBytes=max_size, mode=mode, **kwargs)

        self.formatter = DelimitedFormatter(message_format, datefmt, delimiter)
        self._header = self.formatter.delimit_message(header) if header else None

        # Write header if the file is new or opened in write mode.
        if self.stream and (mode == "w" or not file_exists) and self._header:
            self.stream.write(self._header + "\n")
            self.stream.flush()

    def doRollover(self):
        """Perform rollover and write the CSV header to the new log file."""

        super().doRollover()

        if self._header and self.stream:
            self.stream.write(self._header + "\n")
            self.stream.flush()
