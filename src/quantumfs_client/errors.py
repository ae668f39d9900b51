"""Error values returned by every layer of the client.

Errors are plain values: each call hands back an :class:`Error` and the
caller checks :attr:`Error.ok`. Nothing in the library raises for a failed
exchange.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class ErrorCode(IntEnum):
    """Local outcome of a client call."""

    SUCCESS = 0
    CANT_OPEN_API_FILE = 1
    API_FILE_NOT_OPEN = 2
    API_FILE_SEEK_FAIL = 3
    API_FILE_WRITE_FAIL = 4
    API_FILE_FLUSH_FAIL = 5
    API_FILE_READ_FAIL = 6
    BUFFER_TOO_BIG = 7
    DONT_KNOW_CWD = 8
    CANT_FIND_API_FILE = 9
    WORKSPACE_PATH_INVALID = 10
    JSON_ENCODING_ERROR = 11
    JSON_DECODING_ERROR = 12
    MISSING_JSON_OBJECT = 13
    API_ERROR = 14
    INVALID_KEY = 15


class CommandError(IntEnum):
    """Error codes reported by the filesystem in a response's ``ErrorCode``."""

    OK = 0
    BAD_ARGS = 1
    BAD_JSON = 2
    BAD_COMMAND_ID = 3
    COMMAND_FAILED = 4
    KEY_NOT_FOUND = 5
    BLOCK_TOO_LARGE = 6
    WORKSPACE_NOT_FOUND = 7


ERROR_DESCRIPTIONS: dict[ErrorCode, str] = {
    ErrorCode.SUCCESS: "success",
    ErrorCode.CANT_OPEN_API_FILE: "couldn't open API file",
    ErrorCode.API_FILE_NOT_OPEN: "API file not open",
    ErrorCode.API_FILE_SEEK_FAIL: "couldn't seek within API file",
    ErrorCode.API_FILE_WRITE_FAIL: "couldn't write to API file",
    ErrorCode.API_FILE_FLUSH_FAIL: "couldn't flush API file",
    ErrorCode.API_FILE_READ_FAIL: "couldn't read from API file",
    ErrorCode.BUFFER_TOO_BIG: "buffer would grow beyond its maximum size",
    ErrorCode.DONT_KNOW_CWD: "couldn't determine current working directory",
    ErrorCode.CANT_FIND_API_FILE: "couldn't find API file",
    ErrorCode.WORKSPACE_PATH_INVALID: "invalid workspace path",
    ErrorCode.JSON_ENCODING_ERROR: "couldn't encode request JSON",
    ErrorCode.JSON_DECODING_ERROR: "couldn't decode response JSON",
    ErrorCode.MISSING_JSON_OBJECT: "JSON object missing from response",
    ErrorCode.API_ERROR: "API returned an error",
    ErrorCode.INVALID_KEY: "invalid object key",
}


@dataclass(frozen=True)
class Error:
    """Outcome of a call.

    ``api_code`` and ``api_message`` are only set for
    :attr:`ErrorCode.API_ERROR`, where they carry what the filesystem put in
    the response's ``ErrorCode`` and ``Message`` fields.
    """

    code: ErrorCode = ErrorCode.SUCCESS
    message: str = ""
    api_code: int | None = None
    api_message: str = ""

    @property
    def ok(self) -> bool:
        return self.code == ErrorCode.SUCCESS

    def __str__(self) -> str:
        description = ERROR_DESCRIPTIONS.get(self.code, self.code.name)
        if self.message:
            return f"{description}: {self.message}"
        return description

    def to_dict(self) -> dict:
        result: dict = {"code": self.code.name, "error": str(self)}
        if self.api_code is not None:
            result["api_code"] = self.api_code
            result["api_message"] = self.api_message
        return result


SUCCESS = Error()


def get_error(code: ErrorCode, details: str = "") -> Error:
    """Build an :class:`Error` for ``code`` with optional detail text."""
    if code == ErrorCode.SUCCESS and not details:
        return SUCCESS
    return Error(code=code, message=details)


def describe_api_error(api_code: int, message: str) -> str:
    """Render a remote error code and message as one line."""
    try:
        name = CommandError(api_code).name
    except ValueError:
        name = "UNKNOWN"
    return f"qfs command error {api_code} ({name}): {message}"
