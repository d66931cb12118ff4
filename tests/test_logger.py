import logging

import pytest

from triggerscale.constants import TSCALE_CSV, TSCALE_FILE, TSCALE_STDOUT
from triggerscale.logger import ScaleLogger
from triggerscale.logger.formatter import DelimitedFormatter
from triggerscale.utils.data import resolve_env_variables
from triggerscale.utils.logger import get_base_logger, get_csv_logger

pytestmark = [pytest.mark.unit]


def test_custom_levels_are_registered():
    assert logging.getLevelName(TSCALE_STDOUT) == "TSCALE_STDOUT"
    assert logging.getLevelName(TSCALE_CSV) == "TSCALE_CSV"
    assert logging.getLevelName(TSCALE_FILE) == "TSCALE_FILE"


def test_delimited_formatter_joins_lists():
    formatter = DelimitedFormatter("%(message)s", delimiter=";")
    record = logging.LogRecord("x", TSCALE_CSV, __file__, 1, ["a", 1, True], (), None)
    assert formatter.format(record) == "a;1;True"


def test_delimited_formatter_keeps_cells_in_place():
    formatter = DelimitedFormatter("%(message)s")
    record = logging.LogRecord("x", TSCALE_CSV, __file__, 1, ["ns", None, "refused, retry\nlater"], (), None)
    assert formatter.format(record) == "ns,,refused; retry later"


def test_delimited_formatter_rejects_clashing_replacement():
    with pytest.raises(ValueError):
        DelimitedFormatter(delimiter=";", replacement=";")


def test_base_logger_does_not_duplicate_handlers():
    get_base_logger("dup_check")
    logger = get_base_logger("dup_check")
    assert len(logger.handlers) == 1


def test_csv_header_survives_rollover(tmp_path):
    logger = get_csv_logger("rolling", tmp_path, header=["a", "b"], max_size=40, backup_count=5)
    for i in range(10):
        logger.log(TSCALE_CSV, [i, "x" * 10])
    for handler in logger.handlers:
        handler.close()

    files = sorted(tmp_path.glob("rolling.csv*"))
    assert len(files) > 1
    for path in files:
        assert path.read_text().splitlines()[0] == "a,b"


def test_std_only_logger_has_no_files(tmp_path):
    logger = ScaleLogger("std_only")
    assert len(logger.loggers) == 1
    logger.csv_log(["ignored"])
    logger.file_log("ignored")
    assert list(tmp_path.iterdir()) == []


def test_log_kwargs_apply_to_one_logger_only(tmp_path):
    custom = ScaleLogger("semicolon", dirname=tmp_path, csv_header=["a", "b"], csv_log_kwargs={"delimiter": ";"})
    plain = ScaleLogger("comma", dirname=tmp_path, csv_header=["a", "b"])
    custom.close()
    plain.close()

    assert (tmp_path / "csv_semicolon.csv").read_text().splitlines()[0] == "a;b"
    assert (tmp_path / "csv_comma.csv").read_text().splitlines()[0] == "a,b"


def test_resolve_env_variables(monkeypatch):

    monkeypatch.setenv("QUEUE", "grp1")
    monkeypatch.delenv("MISSING", raising=False)
    resolved = resolve_env_variables({"a": "${QUEUE}", "b": ["${MISSING:-fallback}", "${MISSING}"], "c": 3})
    assert resolved == {"a": "grp1", "b": ["fallback", "${MISSING}"], "c": 3}
