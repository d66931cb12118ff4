from logging import Formatter

class DelimitedFormatter(Formatter):
    """
    Formatter for CSV reports. A list-like message becomes one row: empty cells
    for None, and any delimiter or line break inside a cell is replaced so a
    free-text column (such as error messages) cannot shift the columns after it.
    """

    def __init__(self, message_format=None, datefmt=None, delimiter=",", replacement=None):
        super().__init__(message_format, datefmt)
        if replacement is None:
            replacement = ";" if delimiter != ";" else ","
        if replacement == delimiter:
            raise ValueError("replacement must differ from the delimiter")
        self.delimiter = delimiter
        self.replacement = replacement

    def cell(self, value):
        if value is None:
            return ""
        text = str(value)
        return " ".join(text.splitlines()).replace(self.delimiter, self.replacement)

    def delimit_message(self, msg):
        if isinstance(msg, (list, tuple)):
            return self.delimiter.join(self.cell(value) for value in msg)
        return str(msg)

    def format(self, record):
        record.msg = self.delimit_message(record.msg)
        return super().format(record)
