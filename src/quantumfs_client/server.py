"""MCP server entry point for the QuantumFS api.

Exposes the filesystem commands as tools via the Model Context Protocol
using the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from .client import QfsClient
from .config import ClientConfig
from .errors import Error, ErrorCode, get_error
from .transport.resolver import find_api_path

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "quantumfs",
    instructions="MCP server for the QuantumFS control api",
)

# Global connection state
_client: QfsClient | None = None


def _get_client() -> QfsClient:
    """Get the active client, raising if not connected."""
    if _client is None:
        raise RuntimeError(
            "Not connected to QuantumFS. Use the 'connect' tool first."
        )
    return _client


def _result(err: Error, **fields: Any) -> dict[str, Any]:
    if not err.ok:
        return err.to_dict()
    return fields


def _invalid_argument(message: str) -> dict[str, Any]:
    return {"error": message, "code": "INVALID_ARGUMENT"}


def _decode_b64(name: str, value: str) -> bytes | None:
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        logger.debug("Invalid base64 in %s", name)
        return None


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(api_path: str = "") -> dict[str, Any]:
    """Open the QuantumFS api file.

    Without ``api_path`` the file is looked up via QUANTUMFS_API_PATH, the
    single mounted QuantumFS instance, then the current directory and its
    parents.

    Args:
        api_path: Explicit location of the api file.
    """
    global _client
    if _client is not None and _client.api_file.is_open:
        return {"connected": True, "message": "Already connected", "path": _client.path}

    config = ClientConfig.from_env()
    if not api_path:
        err, api_path = find_api_path(config)
        if not err.ok:
            return err.to_dict()

    client = QfsClient(path=api_path, config=config)
    err = client.open()
    if not err.ok:
        return err.to_dict()

    _client = client
    return {"connected": True, "path": client.path}


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the QuantumFS api file."""
    global _client
    if _client is None:
        return {"disconnected": True}
    _client.close()
    _client = None
    return {"disconnected": True}


# ─── ACCESS LIST TOOLS ────────────────────────────────────────────────

@mcp.tool()
def get_accessed(workspace: str) -> dict[str, Any]:
    """List files created and accessed in a workspace.

    Args:
        workspace: Workspace name, e.g. "namespace/workspace".
    """
    err, paths = _get_client().get_accessed(workspace)
    if not err.ok:
        return err.to_dict()
    result = paths.to_dict()
    result["workspace"] = workspace
    result["text"] = paths.format()
    return result


@mcp.tool()
def clear_accessed(workspace: str) -> dict[str, Any]:
    """Clear the access list of a workspace.

    Args:
        workspace: Workspace name.
    """
    err = _get_client().clear_accessed(workspace)
    return _result(err, cleared=True, workspace=workspace)


# ─── WORKSPACE TOOLS ──────────────────────────────────────────────────

@mcp.tool()
def branch_workspace(src: str, dst: str) -> dict[str, Any]:
    """Create workspace dst as a copy of src at this point in time.

    Args:
        src: Source workspace name.
        dst: New workspace name.
    """
    err = _get_client().branch(src, dst)
    return _result(err, branched=True, src=src, dst=dst)


@mcp.tool()
def merge_workspaces(remote: str, local: str, base: str = "") -> dict[str, Any]:
    """Merge remote into local.

    Args:
        remote: Workspace whose changes are merged in.
        local: Workspace that receives the merge; wins tied conflicts.
        base: Common ancestor; omit for a two-way merge.
    """
    client = _get_client()
    if base:
        err = client.merge3way(base, remote, local)
    else:
        err = client.merge(remote, local)
    return _result(err, merged=True, remote=remote, local=local)


@mcp.tool()
def enable_root_write(workspace: str) -> dict[str, Any]:
    """Make a workspace writable.

    Args:
        workspace: Workspace name.
    """
    err = _get_client().enable_root_write(workspace)
    return _result(err, writable=True, workspace=workspace)


@mcp.tool()
def set_workspace_immutable(workspace: str) -> dict[str, Any]:
    """Make a workspace irreversibly immutable.

    Args:
        workspace: Workspace name.
    """
    err = _get_client().set_workspace_immutable(workspace)
    return _result(err, immutable=True, workspace=workspace)


@mcp.tool()
def delete_workspace(workspace: str) -> dict[str, Any]:
    """Delete a workspace from the workspace database.

    Args:
        workspace: Workspace name.
    """
    err = _get_client().delete_workspace(workspace)
    return _result(err, deleted=True, workspace=workspace)


@mcp.tool()
def sync_all() -> dict[str, Any]:
    """Sync all active workspaces to the datastore."""
    err = _get_client().sync_all()
    return _result(err, synced=True)


# ─── OBJECT & BLOCK TOOLS ─────────────────────────────────────────────

@mcp.tool()
def insert_inode(
    dst: str,
    key: str,
    permissions: str = "644",
    uid: int = 0,
    gid: int = 0,
) -> dict[str, Any]:
    """Insert the object with an extended key at a path in a workspace.

    Args:
        dst: Destination path, e.g. "namespace/workspace/dir/file".
        key: Extended object key.
        permissions: Permission bits in octal, e.g. "755".
        uid: Owner user id.
        gid: Owner group id.
    """
    try:
        mode = int(permissions, 8)
    except ValueError:
        return _invalid_argument(f"Permissions must be octal, got '{permissions}'")

    err = _get_client().insert_inode(dst, key, mode, uid, gid)
    return _result(err, inserted=True, dst=dst)


@mcp.tool()
def set_block(key: str, data: str) -> dict[str, Any]:
    """Store a block in the datastore.

    Args:
        key: Block key, base64 encoded.
        data: Block content, base64 encoded.
    """
    raw_key = _decode_b64("key", key)
    if raw_key is None:
        return get_error(ErrorCode.INVALID_KEY, "key must be base64 encoded").to_dict()
    raw_data = _decode_b64("data", data)
    if raw_data is None:
        return _invalid_argument("data must be base64 encoded")

    err = _get_client().set_block(raw_key, raw_data)
    return _result(err, stored=True, size=len(raw_data))


@mcp.tool()
def get_block(key: str) -> dict[str, Any]:
    """Fetch a block stored with set_block.

    Args:
        key: Block key, base64 encoded.
    """
    raw_key = _decode_b64("key", key)
    if raw_key is None:
        return get_error(ErrorCode.INVALID_KEY, "key must be base64 encoded").to_dict()

    err, data = _get_client().get_block(raw_key)
    if not err.ok:
        return err.to_dict()
    return {"data": base64.b64encode(data).decode("ascii"), "size": len(data)}


# ─── MCP RESOURCES ───────────────────────────────────────────────────

@mcp.resource("quantumfs://connection/status")
def resource_connection_status() -> str:
    """Connection state and api file location."""
    if _client is None or not _client.api_file.is_open:
        return json.dumps({"connected": False})
    return json.dumps({"connected": True, "path": _client.path})


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
