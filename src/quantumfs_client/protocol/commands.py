"""Command identifiers and request builders.

Every request is a JSON object carrying a ``CommandId`` plus the fields of
that command. The builders here only assemble the mapping; validation of
workspace names happens in :mod:`quantumfs_client.protocol.codec`.
"""

from __future__ import annotations

import base64
from enum import IntEnum
from typing import Any

# Field names shared by requests and responses
COMMAND_ID = "CommandId"
ERROR_CODE = "ErrorCode"
MESSAGE = "Message"
ACCESS_LIST = "AccessList"
WORKSPACE_ROOT = "WorkspaceRoot"
DATA = "Data"
KEY = "Key"

NULL_WORKSPACE = "_null/null"


class CommandId(IntEnum):
    """Command identifiers. The wire values are fixed by the filesystem."""

    INVALID = 0
    ERROR = 1
    BRANCH = 2
    GET_ACCESSED = 3
    CLEAR_ACCESSED = 4
    SYNC_ALL = 5
    INSERT_INODE = 6
    DELETE_WORKSPACE = 7
    SET_BLOCK = 8
    GET_BLOCK = 9
    ENABLE_ROOT_WRITE = 10
    SET_WORKSPACE_IMMUTABLE = 11
    MERGE_WORKSPACES = 12


def build_command(command: CommandId, **fields: Any) -> dict[str, Any]:
    """Build a request mapping for ``command`` with the given fields."""
    request: dict[str, Any] = {COMMAND_ID: int(command)}
    request.update(fields)
    return request


def encode_bytes(data: bytes) -> str:
    """Encode raw bytes the way the filesystem expects them in JSON."""
    return base64.b64encode(data).decode("ascii")


def build_get_accessed(workspace_root: str) -> dict[str, Any]:
    return build_command(CommandId.GET_ACCESSED, WorkspaceRoot=workspace_root)


def build_clear_accessed(workspace_root: str) -> dict[str, Any]:
    return build_command(CommandId.CLEAR_ACCESSED, WorkspaceRoot=workspace_root)


def build_branch(src: str, dst: str) -> dict[str, Any]:
    """Build a Branch request copying workspace ``src`` into ``dst``."""
    return build_command(CommandId.BRANCH, Src=src, Dst=dst)


def build_merge(base: str, remote: str, local: str) -> dict[str, Any]:
    """Build a three-way merge request.

    ``local`` wins conflicts with matching modification times and is the
    workspace advanced to the merge result.
    """
    return build_command(
        CommandId.MERGE_WORKSPACES,
        BaseWorkspace=base,
        RemoteWorkspace=remote,
        LocalWorkspace=local,
    )


def build_sync_all() -> dict[str, Any]:
    return build_command(CommandId.SYNC_ALL)


def build_insert_inode(
    dst: str, key: str, permissions: int, uid: int, gid: int
) -> dict[str, Any]:
    """Build an InsertInode request placing object ``key`` at ``dst``.

    Args:
        dst: Destination path, starting with the workspace name.
        key: Extended object key.
        permissions: Mode bits for the new inode.
        uid: Owner user id.
        gid: Owner group id.
    """
    return build_command(
        CommandId.INSERT_INODE,
        DstPath=dst,
        Key=key,
        Permissions=permissions,
        Uid=uid,
        Gid=gid,
    )


def build_enable_root_write(workspace: str) -> dict[str, Any]:
    return build_command(CommandId.ENABLE_ROOT_WRITE, Workspace=workspace)


def build_set_workspace_immutable(workspace: str) -> dict[str, Any]:
    return build_command(CommandId.SET_WORKSPACE_IMMUTABLE, WorkspacePath=workspace)


def build_delete_workspace(workspace: str) -> dict[str, Any]:
    return build_command(CommandId.DELETE_WORKSPACE, WorkspacePath=workspace)


def build_set_block(key: bytes, data: bytes) -> dict[str, Any]:
    """Build a SetBlock request. Keys and data travel base64-encoded."""
    return build_command(
        CommandId.SET_BLOCK, Key=encode_bytes(key), Data=encode_bytes(data)
    )


def build_get_block(key: bytes) -> dict[str, Any]:
    return build_command(CommandId.GET_BLOCK, Key=encode_bytes(key))
