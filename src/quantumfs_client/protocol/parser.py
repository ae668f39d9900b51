"""Command-specific payload parsing for decoded responses."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any

from ..errors import Error, ErrorCode, SUCCESS, get_error
from ..models.accessed import PathsAccessed
from .commands import ACCESS_LIST, DATA

logger = logging.getLogger(__name__)


def parse_accessed_list(payload: dict[str, Any]) -> tuple[Error, PathsAccessed | None]:
    """Parse the ``AccessList`` of a GetAccessed response.

    ``AccessList`` maps file paths to a flag: true for files created in the
    workspace, false for files only accessed. Entries whose value is not a
    boolean are skipped.
    """
    access_list = payload.get(ACCESS_LIST)
    if not isinstance(access_list, dict):
        return get_error(ErrorCode.MISSING_JSON_OBJECT, ACCESS_LIST), None

    paths: dict[str, bool] = {}
    for path, created in access_list.items():
        if not isinstance(created, bool):
            logger.debug("Skipping %s in %s: %r is not a bool", path, ACCESS_LIST, created)
            continue
        paths[path] = created

    return SUCCESS, PathsAccessed(paths=paths)


def parse_get_block(payload: dict[str, Any]) -> tuple[Error, bytes | None]:
    """Parse the base64 ``Data`` field of a GetBlock response."""
    if DATA not in payload:
        return get_error(ErrorCode.MISSING_JSON_OBJECT, DATA), None

    encoded = payload[DATA]
    if encoded is None:
        # An empty byte slice is sent as null
        return SUCCESS, b""
    if not isinstance(encoded, str):
        return get_error(
            ErrorCode.JSON_DECODING_ERROR, f"{DATA} is not a base64 string"
        ), None

    try:
        return SUCCESS, base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        return get_error(ErrorCode.JSON_DECODING_ERROR, f"{DATA}: {e}"), None
