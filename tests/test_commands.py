"""Tests for command ids and request builders."""

import base64

from quantumfs_client.protocol.commands import (
    CommandId,
    build_branch,
    build_clear_accessed,
    build_command,
    build_delete_workspace,
    build_enable_root_write,
    build_get_accessed,
    build_get_block,
    build_insert_inode,
    build_merge,
    build_set_block,
    build_set_workspace_immutable,
    build_sync_all,
)


def test_command_enum_values():
    """Command ids match the values the filesystem expects."""
    assert CommandId.INVALID == 0
    assert CommandId.ERROR == 1
    assert CommandId.BRANCH == 2
    assert CommandId.GET_ACCESSED == 3
    assert CommandId.CLEAR_ACCESSED == 4
    assert CommandId.SYNC_ALL == 5
    assert CommandId.INSERT_INODE == 6
    assert CommandId.DELETE_WORKSPACE == 7
    assert CommandId.SET_BLOCK == 8
    assert CommandId.GET_BLOCK == 9
    assert CommandId.ENABLE_ROOT_WRITE == 10
    assert CommandId.SET_WORKSPACE_IMMUTABLE == 11
    assert CommandId.MERGE_WORKSPACES == 12


def test_build_command_uses_plain_int():
    """CommandId is stored as a plain integer."""
    request = build_command(CommandId.SYNC_ALL, Extra="x")
    assert request == {"CommandId": 5, "Extra": "x"}
    assert type(request["CommandId"]) is int


def test_build_get_accessed():
    """GetAccessed carries the workspace root."""
    assert build_get_accessed("a/b") == {"CommandId": 3, "WorkspaceRoot": "a/b"}


def test_build_clear_accessed():
    assert build_clear_accessed("a/b") == {"CommandId": 4, "WorkspaceRoot": "a/b"}


def test_build_branch():
    """Branch names source and destination."""
    assert build_branch("a/b", "c/d") == {"CommandId": 2, "Src": "a/b", "Dst": "c/d"}


def test_build_merge():
    """Merge carries all three workspaces."""
    assert build_merge("x/base", "x/remote", "x/local") == {
        "CommandId": 12,
        "BaseWorkspace": "x/base",
        "RemoteWorkspace": "x/remote",
        "LocalWorkspace": "x/local",
    }


def test_build_sync_all():
    """SyncAll has no fields beyond the id."""
    assert build_sync_all() == {"CommandId": 5}


def test_build_insert_inode():
    """InsertInode carries destination, key and ownership."""
    assert build_insert_inode("a/b/file", "KEY", 0o644, 1000, 100) == {
        "CommandId": 6,
        "DstPath": "a/b/file",
        "Key": "KEY",
        "Permissions": 0o644,
        "Uid": 1000,
        "Gid": 100,
    }


def test_build_workspace_state_commands():
    """Workspace state commands use their own field names."""
    assert build_enable_root_write("a/b") == {"CommandId": 10, "Workspace": "a/b"}
    assert build_set_workspace_immutable("a/b") == {
        "CommandId": 11, "WorkspacePath": "a/b",
    }
    assert build_delete_workspace("a/b") == {"CommandId": 7, "WorkspacePath": "a/b"}


def test_build_set_block_encodes_bytes():
    """Block keys and data travel base64-encoded."""
    request = build_set_block(b"\x01\x02", b"hello")
    assert request["CommandId"] == 8
    assert base64.b64decode(request["Key"]) == b"\x01\x02"
    assert base64.b64decode(request["Data"]) == b"hello"


def test_build_get_block():
    """GetBlock carries only the encoded key."""
    assert build_get_block(b"key") == {"CommandId": 9, "Key": "a2V5"}
