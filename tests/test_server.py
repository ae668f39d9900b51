"""Tests for the MCP tool wrappers."""

from __future__ import annotations

import base64
import json
import sys
from unittest.mock import MagicMock, patch

from quantumfs_client.errors import Error, ErrorCode, SUCCESS, get_error
from quantumfs_client.models.accessed import PathsAccessed


def _get_server_module():
    """Import server module with FastMCP mocked to avoid init issues."""
    mock_fastmcp_cls = MagicMock()
    mock_fastmcp_instance = MagicMock()
    # Make the @mcp.tool() decorator a no-op that returns the function unchanged
    mock_fastmcp_instance.tool.return_value = lambda fn: fn
    mock_fastmcp_instance.resource.return_value = lambda fn: fn
    mock_fastmcp_cls.return_value = mock_fastmcp_instance

    with patch("mcp.server.fastmcp.FastMCP", mock_fastmcp_cls):
        # Remove cached server module so it re-imports with our mock
        sys.modules.pop("quantumfs_client.server", None)
        import quantumfs_client.server as server_mod

    return server_mod


def test_tools_require_connection():
    """Calling a tool before connect explains what to do."""
    server = _get_server_module()
    try:
        server.sync_all()
    except RuntimeError as e:
        assert "connect" in str(e)
    else:
        raise AssertionError("expected RuntimeError")


def test_get_accessed_tool():
    """The accessed list is returned split and formatted."""
    server = _get_server_module()
    mock_client = MagicMock()
    mock_client.get_accessed.return_value = (
        SUCCESS, PathsAccessed(paths={"a.txt": True, "b.txt": False}),
    )

    with patch.object(server, "_get_client", return_value=mock_client):
        result = server.get_accessed("ns/ws")

    assert result["created"] == ["a.txt"]
    assert result["accessed"] == ["b.txt"]
    assert result["workspace"] == "ns/ws"
    assert result["text"].startswith("------ Created Files ------\na.txt\n")


def test_get_accessed_tool_error():
    """Errors become an error dict carrying the remote details."""
    server = _get_server_module()
    mock_client = MagicMock()
    mock_client.get_accessed.return_value = (
        Error(code=ErrorCode.API_ERROR, message="m", api_code=5,
              api_message="workspace not found"),
        None,
    )

    with patch.object(server, "_get_client", return_value=mock_client):
        result = server.get_accessed("ns/ws")

    assert result["code"] == "API_ERROR"
    assert result["api_code"] == 5
    assert result["api_message"] == "workspace not found"


def test_merge_tool_two_and_three_way():
    """An empty base selects a two-way merge."""
    server = _get_server_module()
    mock_client = MagicMock()
    mock_client.merge.return_value = SUCCESS
    mock_client.merge3way.return_value = SUCCESS

    with patch.object(server, "_get_client", return_value=mock_client):
        assert server.merge_workspaces("ns/r", "ns/l")["merged"] is True
        server.merge_workspaces("ns/r", "ns/l", base="ns/b")

    mock_client.merge.assert_called_once_with("ns/r", "ns/l")
    mock_client.merge3way.assert_called_once_with("ns/b", "ns/r", "ns/l")


def test_insert_inode_tool_parses_octal():
    """Permissions are given in octal."""
    server = _get_server_module()
    mock_client = MagicMock()
    mock_client.insert_inode.return_value = SUCCESS

    with patch.object(server, "_get_client", return_value=mock_client):
        result = server.insert_inode("ns/ws/f", "KEY", permissions="750", uid=1, gid=2)
        bad = server.insert_inode("ns/ws/f", "KEY", permissions="9x")

    assert result == {"inserted": True, "dst": "ns/ws/f"}
    mock_client.insert_inode.assert_called_once_with("ns/ws/f", "KEY", 0o750, 1, 2)
    assert bad["code"] == "INVALID_ARGUMENT"
    assert "octal" in bad["error"]


def test_block_tools_use_base64():
    """Block tools take and return base64 text."""
    server = _get_server_module()
    mock_client = MagicMock()
    mock_client.set_block.return_value = SUCCESS
    mock_client.get_block.return_value = (SUCCESS, b"\x00raw")
    key = base64.b64encode(b"key").decode()

    with patch.object(server, "_get_client", return_value=mock_client):
        stored = server.set_block(key, base64.b64encode(b"\x00raw").decode())
        fetched = server.get_block(key)
        bad = server.get_block("***")

    mock_client.set_block.assert_called_once_with(b"key", b"\x00raw")
    assert stored == {"stored": True, "size": 4}
    assert base64.b64decode(fetched["data"]) == b"\x00raw"
    assert bad["code"] == "INVALID_KEY"


def test_simple_tool_failure():
    """Local validation failures are reported by code name."""
    server = _get_server_module()
    mock_client = MagicMock()
    mock_client.delete_workspace.return_value = get_error(
        ErrorCode.WORKSPACE_PATH_INVALID, "ws"
    )

    with patch.object(server, "_get_client", return_value=mock_client):
        result = server.delete_workspace("ws")

    assert result["code"] == "WORKSPACE_PATH_INVALID"


def test_connect_and_disconnect(api_path):
    """connect opens an explicit api path and disconnect closes it."""
    server = _get_server_module()

    result = server.connect(api_path)
    assert result == {"connected": True, "path": api_path}
    assert json.loads(server.resource_connection_status()) == {
        "connected": True, "path": api_path,
    }

    again = server.connect(api_path)
    assert again["message"] == "Already connected"

    assert server.disconnect() == {"disconnected": True}
    assert json.loads(server.resource_connection_status()) == {"connected": False}


def test_connect_failure(tmp_path):
    """A path that cannot be opened leaves the server disconnected."""
    server = _get_server_module()

    result = server.connect(str(tmp_path / "missing" / "api"))
    assert result["code"] == "CANT_OPEN_API_FILE"
    assert server._client is None


def test_set_block_tool_rejects_bad_base64():
    """Undecodable key or data is reported with a code and never sent."""
    server = _get_server_module()
    mock_client = MagicMock()
    good = base64.b64encode(b"x").decode()

    with patch.object(server, "_get_client", return_value=mock_client):
        bad_key = server.set_block("***", good)
        bad_data = server.set_block(good, "***")

    assert bad_key["code"] == "INVALID_KEY"
    assert bad_data == {"error": "data must be base64 encoded", "code": "INVALID_ARGUMENT"}
    mock_client.set_block.assert_not_called()
