"""High-level QuantumFS API: one method per filesystem command.

Usage::

    with QfsClient() as qfs:
        err, paths = qfs.get_accessed("user/workspace")
        if err.ok:
            print(paths.format())
        else:
            print(err)
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from .config import ClientConfig
from .errors import Error, ErrorCode, get_error
from .models.accessed import PathsAccessed
from .protocol.codec import (
    check_destination_path_valid,
    check_workspace_path_valid,
    send_json,
)
from .protocol.commands import (
    NULL_WORKSPACE,
    build_branch,
    build_clear_accessed,
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
from .protocol.parser import parse_accessed_list, parse_get_block
from .transport.api_file import ApiFile, ExchangeHook

logger = logging.getLogger(__name__)


class QfsClient:
    """Issues commands to QuantumFS through its api file.

    Args:
        path: Location of the api file; discovered from the cwd when empty.
        config: Client configuration, defaults to :class:`ClientConfig`.
        hook: Exchange hook substituted for the read half, for tests.
    """

    def __init__(
        self,
        path: str = "",
        config: ClientConfig | None = None,
        hook: ExchangeHook | None = None,
    ) -> None:
        self._config = config or ClientConfig()
        if path:
            self._config = replace(self._config, api_path=path)
        self._api_file = ApiFile.from_config(self._config, hook=hook)

    @property
    def api_file(self) -> ApiFile:
        return self._api_file

    @property
    def path(self) -> str:
        return self._api_file.path

    def __enter__(self) -> QfsClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def open(self) -> Error:
        return self._api_file.open()

    def close(self) -> None:
        self._api_file.close()

    def _send(self, request: dict[str, Any]) -> tuple[Error, dict[str, Any] | None]:
        err, payload = send_json(
            self._api_file, request, max_size=self._config.max_buffer_size
        )
        if not err.ok:
            logger.warning("Command %s failed: %s", request.get("CommandId"), err)
        return err, payload

    def _run(self, request: dict[str, Any]) -> Error:
        err, _ = self._send(request)
        return err

    # ─── ACCESS LISTS ─────────────────────────────────────────────────

    def get_accessed(self, workspace_root: str) -> tuple[Error, PathsAccessed | None]:
        """Fetch the files created and accessed in ``workspace_root``."""
        err = check_workspace_path_valid(workspace_root)
        if not err.ok:
            return err, None

        err, payload = self._send(build_get_accessed(workspace_root))
        if not err.ok:
            return err, None

        return parse_accessed_list(payload)

    def clear_accessed(self, workspace_root: str) -> Error:
        """Reset the access list of ``workspace_root``."""
        err = check_workspace_path_valid(workspace_root)
        if not err.ok:
            return err
        return self._run(build_clear_accessed(workspace_root))

    # ─── WORKSPACES ───────────────────────────────────────────────────

    def branch(self, src: str, dst: str) -> Error:
        """Create workspace ``dst`` as a copy of ``src`` as of now."""
        for workspace in (src, dst):
            err = check_workspace_path_valid(workspace)
            if not err.ok:
                return err
        return self._run(build_branch(src, dst))

    def merge(self, remote: str, local: str) -> Error:
        """Two-way merge: a three-way merge against the empty workspace."""
        return self.merge3way(NULL_WORKSPACE, remote, local)

    def merge3way(self, base: str, remote: str, local: str) -> Error:
        """Merge ``remote`` into ``local`` using ``base`` as common ancestor."""
        for workspace in (base, remote, local):
            err = check_workspace_path_valid(workspace)
            if not err.ok:
                return err
        return self._run(build_merge(base, remote, local))

    def enable_root_write(self, workspace: str) -> Error:
        err = check_workspace_path_valid(workspace)
        if not err.ok:
            return err
        return self._run(build_enable_root_write(workspace))

    def set_workspace_immutable(self, workspace: str) -> Error:
        """Make ``workspace`` irreversibly immutable.

        Like :meth:`delete_workspace`, this takes a workspace path, which
        needs at least ``namespace/workspace`` but may name deeper.
        """
        err = check_destination_path_valid(workspace)
        if not err.ok:
            return err
        return self._run(build_set_workspace_immutable(workspace))

    def delete_workspace(self, workspace: str) -> Error:
        err = check_destination_path_valid(workspace)
        if not err.ok:
            return err
        return self._run(build_delete_workspace(workspace))

    def sync_all(self) -> Error:
        """Flush every active workspace to the datastore."""
        return self._run(build_sync_all())

    # ─── OBJECTS & BLOCKS ─────────────────────────────────────────────

    def insert_inode(
        self, dst: str, key: str, permissions: int, uid: int, gid: int
    ) -> Error:
        """Place the object identified by ``key`` at ``dst``.

        Args:
            dst: Destination path inside a workspace, e.g. ``"ns/ws/dir/file"``.
            key: Extended key of the object to insert.
            permissions: Mode bits of the new inode.
            uid: Owner user id.
            gid: Owner group id.
        """
        err = check_destination_path_valid(dst)
        if not err.ok:
            return err
        if not key:
            return get_error(ErrorCode.INVALID_KEY, "key must not be empty")
        return self._run(build_insert_inode(dst, key, permissions, uid, gid))

    def set_block(self, key: bytes, data: bytes) -> Error:
        """Store ``data`` in the datastore under ``key``.

        Blocks live in a namespace separate from filesystem objects.
        """
        if not key:
            return get_error(ErrorCode.INVALID_KEY, "key must not be empty")
        return self._run(build_set_block(key, data))

    def get_block(self, key: bytes) -> tuple[Error, bytes | None]:
        """Fetch a block previously stored with :meth:`set_block`."""
        if not key:
            return get_error(ErrorCode.INVALID_KEY, "key must not be empty"), None

        err, payload = self._send(build_get_block(key))
        if not err.ok:
            return err, None

        return parse_get_block(payload)


def get_api(path: str = "", config: ClientConfig | None = None) -> tuple[Error, QfsClient]:
    """Create a client and open its api file.

    The client is returned even on failure so callers can inspect ``path``.
    """
    client = QfsClient(path=path, config=config)
    return client.open(), client
