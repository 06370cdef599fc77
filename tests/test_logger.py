import pytest

from district.logger import LogLevel, Logger, log_debug, log_error, log_info, log_warning


@pytest.mark.parametrize(
    "level, label",
    [
        (LogLevel.DEV, "DEV"),
        (LogLevel.DEBUG, "DEBUG"),
        (LogLevel.INFO, "INFO"),
        (LogLevel.WARNING, "WARN"),
        (LogLevel.ERROR, "ERROR"),
    ],
)
def test_level_labels(level, label):
    assert level.label == label
    assert str(level) == label


def test_plain_format_layout():
    line = Logger(LogLevel.INFO, color=False).format("hello", "src/x.py")
    assert line.split("]")[0] == "[" + "src/x.py".ljust(30)
    assert line.endswith("INFO".ljust(6) + ": hello")


def test_long_caller_not_truncated():
    caller = "c" * 40
    line = Logger(LogLevel.ERROR, color=False).format("m", caller)
    assert line.startswith("[" + caller + "]")


def test_colored_format_contains_plain_parts():
    line = Logger(LogLevel.WARNING).format("careful", "here.py")
    assert "\x1b[" in line
    assert "WARN" in line
    assert line.endswith(": careful")


def test_colored_differs_per_level():
    a = Logger(LogLevel.DEBUG).format("m", "c")
    b = Logger(LogLevel.ERROR).format("m", "c")
    assert a != b


def test_log_prints_line(capsys):
    Logger(LogLevel.DEV, color=False).log(42, "caller.py")
    out = capsys.readouterr().out
    assert out == Logger(LogLevel.DEV, color=False).format(42, "caller.py") + "\n"


@pytest.mark.parametrize(
    "func, label",
    [(log_debug, "DEBUG"), (log_info, "INFO"), (log_warning, "WARN"), (log_error, "ERROR")],
)
def test_helpers_report_caller(capsys, func, label):
    func("message text")
    out = capsys.readouterr().out
    assert "message text" in out
    assert label in out
    assert "test_logger.py" in out