"""JSON envelope encoding, decoding and validation.

Requests are encoded as compact JSON with sorted keys so that identical
requests always produce identical bytes. Every response must be an object
with an integer ``ErrorCode`` and a string ``Message``; anything else is a
protocol violation, distinct from the filesystem reporting a failure.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from ..errors import (
    Error,
    ErrorCode,
    SUCCESS,
    describe_api_error,
    get_error,
)
from .buffer import CommandBuffer
from .commands import ERROR_CODE, MESSAGE

if TYPE_CHECKING:
    from ..transport.api_file import ApiFile

logger = logging.getLogger(__name__)

# How much of an undecodable response is quoted back in the error
JSON_ERROR_CONTEXT = 1024

WORKSPACE_SEPARATORS = 2  # "/namespace/workspace", counting the root


def encode_request(request: dict[str, Any]) -> tuple[Error, bytes]:
    """Serialize ``request`` to canonical compact JSON, UTF-8 encoded."""
    try:
        text = json.dumps(
            request, sort_keys=True, separators=(",", ":"), ensure_ascii=False
        )
        payload = text.encode("utf-8")
    except (TypeError, ValueError) as e:
        # UnicodeEncodeError (lone surrogates) is a ValueError
        return get_error(ErrorCode.JSON_ENCODING_ERROR, str(e)), b""
    return SUCCESS, payload


def build_json_error_details(text: str, raw: bytes) -> str:
    """Combine a diagnostic with the start of the offending response."""
    prefix = raw[:JSON_ERROR_CONTEXT].decode("utf-8", errors="replace")
    return f"{text}: {prefix!r}"


def check_common_api_response(
    response: CommandBuffer,
) -> tuple[Error, dict[str, Any] | None]:
    """Decode a response and check its envelope.

    Returns:
        ``(SUCCESS, payload)`` when the filesystem reported success, where
        ``payload`` is the whole decoded object. Otherwise the error and
        ``None``.
    """
    response.sanitize()
    raw = response.data

    try:
        parsed = json.loads(raw)
    except (ValueError, UnicodeDecodeError, RecursionError) as e:
        # RecursionError: nesting deeper than the decoder can follow
        return get_error(
            ErrorCode.JSON_DECODING_ERROR, build_json_error_details(str(e), raw)
        ), None

    if not isinstance(parsed, dict):
        return get_error(
            ErrorCode.MISSING_JSON_OBJECT, build_json_error_details(ERROR_CODE, raw)
        ), None

    for field_name in (ERROR_CODE, MESSAGE):
        if field_name not in parsed:
            return get_error(
                ErrorCode.MISSING_JSON_OBJECT,
                build_json_error_details(field_name, raw),
            ), None

    api_code = parsed[ERROR_CODE]
    if not isinstance(api_code, int) or isinstance(api_code, bool):
        return get_error(
            ErrorCode.JSON_DECODING_ERROR,
            build_json_error_details("error code in response JSON is not valid", raw),
        ), None

    if api_code != 0:
        api_message = parsed[MESSAGE]
        if not isinstance(api_message, str):
            api_message = str(api_message)
        details = build_json_error_details(
            describe_api_error(api_code, api_message), raw
        )
        return Error(
            code=ErrorCode.API_ERROR,
            message=details,
            api_code=api_code,
            api_message=api_message,
        ), None

    return SUCCESS, parsed


def send_json(
    api_file: ApiFile,
    request: dict[str, Any],
    max_size: int | None = None,
) -> tuple[Error, dict[str, Any] | None]:
    """Send ``request`` through ``api_file`` and decode the reply.

    Args:
        api_file: Open (or openable) api file handle.
        request: Request mapping, including ``CommandId``.
        max_size: Bound for the request and response buffers.
    """
    err, payload = encode_request(request)
    if not err.ok:
        return err, None

    if max_size is None:
        command, response = CommandBuffer(), CommandBuffer()
    else:
        command, response = CommandBuffer(max_size), CommandBuffer(max_size)

    err = command.copy_string(payload)
    if not err.ok:
        return err, None

    logger.debug("Sending %r", payload)
    err = api_file.send_command(command, response)
    if not err.ok:
        return err, None

    return check_common_api_response(response)


def _count_separators(path: str) -> int:
    # The implicit leading root separator counts as the first one.
    return ("/" + path).count("/")


def check_workspace_path_valid(workspace_path: str) -> Error:
    """Check that ``workspace_path`` names a single workspace.

    Workspace names are written relative to the filesystem root, e.g.
    ``"namespace/workspace"``; together with the root that makes exactly two
    separators.
    """
    if _count_separators(workspace_path) != WORKSPACE_SEPARATORS:
        return get_error(ErrorCode.WORKSPACE_PATH_INVALID, workspace_path)
    return SUCCESS


def check_destination_path_valid(path: str) -> Error:
    """Check that ``path`` lies inside a workspace (``namespace/workspace/...``)."""
    if _count_separators(path) < WORKSPACE_SEPARATORS:
        return get_error(ErrorCode.WORKSPACE_PATH_INVALID, path)
    return SUCCESS
