from __future__ import annotations

from enum import IntEnum


class ResultCode(IntEnum):
    SUCCESS = 0
    INVALID_FILE = -1
    INVALID_RANGE = -2
    VERSION_UNSUPPORTED = -3
    FORMAT_UNSUPPORTED = -4
    IO_READ = -5


_RESULT_MESSAGES = {
    ResultCode.SUCCESS: "Success",
    ResultCode.INVALID_FILE: "Unknown file format",
    ResultCode.INVALID_RANGE: "Invalid point range",
    ResultCode.VERSION_UNSUPPORTED: "Unsupported version, supported versions: 1.0, 1.1, 1.2 and 1.3",
    ResultCode.FORMAT_UNSUPPORTED: "Unknown point format, known formats: 0, 1, 2, 3, 4 and 5",
    ResultCode.IO_READ: "Truncated read",
}


def result_str(code: int) -> str:
    try:
        return _RESULT_MESSAGES[ResultCode(code)]
    except ValueError:
        return "Unknown error"


class LasDecodeError(Exception):
    """
    Base class for every failure the decoder reports about a file or a read.

    ``result`` holds the matching :class:`ResultCode` so callers that log or
    forward numeric status codes can keep doing so.
    """

    result: ResultCode = ResultCode.SUCCESS

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail
        message = result_str(self.result)
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class InvalidFileError(LasDecodeError):
    result = ResultCode.INVALID_FILE


class InvalidRangeError(LasDecodeError):
    result = ResultCode.INVALID_RANGE


class VersionUnsupportedError(LasDecodeError):
    result = ResultCode.VERSION_UNSUPPORTED


class FormatUnsupportedError(LasDecodeError):
    result = ResultCode.FORMAT_UNSUPPORTED


class IoReadError(LasDecodeError):
    result = ResultCode.IO_READ
