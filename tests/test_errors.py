import pytest

from lasdecode import errors
from lasdecode.errors import ResultCode, result_str


@pytest.mark.parametrize(
    "code, message",
    [
        (ResultCode.SUCCESS, "Success"),
        (ResultCode.INVALID_FILE, "Unknown file format"),
        (ResultCode.INVALID_RANGE, "Invalid point range"),
        (ResultCode.VERSION_UNSUPPORTED, "Unsupported version, supported versions: 1.0, 1.1, 1.2 and 1.3"),
        (ResultCode.FORMAT_UNSUPPORTED, "Unknown point format, known formats: 0, 1, 2, 3, 4 and 5"),
        (ResultCode.IO_READ, "Truncated read"),
    ],
)
def test_result_str(code, message):
    assert result_str(code) == message
    assert result_str(int(code)) == message


def test_result_str_unknown_code():
    assert result_str(-42) == "Unknown error"


@pytest.mark.parametrize(
    "exc_type, code",
    [
        (errors.InvalidFileError, -1),
        (errors.InvalidRangeError, -2),
        (errors.VersionUnsupportedError, -3),
        (errors.FormatUnsupportedError, -4),
        (errors.IoReadError, -5),
    ],
)
def test_exceptions_carry_result_codes(exc_type, code):
    exc = exc_type("detail here")
    assert isinstance(exc, errors.LasDecodeError)
    assert exc.result == code
    assert str(exc) == f"{result_str(code)}: detail here"
    assert exc.detail == "detail here"


def test_exception_without_detail():
    assert str(errors.IoReadError()) == "Truncated read"
