"""Locate the QuantumFS api file.

The api file is recognised by identity rather than by name alone: it must be
called ``api``, be a regular file or a symlink, and carry the inode number
QuantumFS reserves for it. A file or directory called ``api`` with any other
inode is an ordinary entry and is skipped.
"""

from __future__ import annotations

import logging
import os
import stat

from ..config import API_INODE_ID, API_NAME, ClientConfig
from ..errors import Error, ErrorCode, get_error

logger = logging.getLogger(__name__)

FUSE_FSTYPE = "fuse.QuantumFS"


class ApiPathResolver:
    """Walks from the current directory towards ``/`` looking for the api file.

    Usage::

        resolver = ApiPathResolver()
        err, path = resolver.determine_path()
        if err.ok:
            ...
    """

    def __init__(
        self,
        api_name: str = API_NAME,
        api_inode_id: int = API_INODE_ID,
    ) -> None:
        self._api_name = api_name
        self._api_inode_id = api_inode_id

    @classmethod
    def from_config(cls, config: ClientConfig) -> ApiPathResolver:
        return cls(api_name=config.api_name, api_inode_id=config.api_inode_id)

    @property
    def api_name(self) -> str:
        return self._api_name

    @property
    def api_inode_id(self) -> int:
        return self._api_inode_id

    def is_api_file(self, path: str) -> bool:
        """True if ``path`` (not followed if a symlink) is the api file."""
        try:
            st = os.lstat(path)
        except OSError:
            return False
        if not (stat.S_ISREG(st.st_mode) or stat.S_ISLNK(st.st_mode)):
            return False
        return st.st_ino == self._api_inode_id

    def determine_path(self) -> tuple[Error, str]:
        """Find the api file in the cwd or the nearest ancestor holding one.

        Returns:
            ``(error, path)``; ``path`` is empty unless the error is success.
        """
        try:
            cwd = os.getcwd()
        except OSError as e:
            return get_error(ErrorCode.DONT_KNOW_CWD, str(e)), ""

        directories = [part for part in cwd.split("/") if part]

        while True:
            path = "/" + "/".join(directories + [self._api_name])
            if self.is_api_file(path):
                logger.debug("Found api file at %s", path)
                return get_error(ErrorCode.SUCCESS, path), path

            logger.debug("No api file at %s", path)

            if not directories:
                return get_error(ErrorCode.CANT_FIND_API_FILE, cwd), ""

            directories.pop()


def find_api_path_environment(
    config: ClientConfig, resolver: ApiPathResolver
) -> str:
    """Return ``config.api_path`` if it names a genuine api file."""
    path = config.api_path
    if not path:
        return ""
    if not path.endswith(os.sep + config.api_name):
        logger.debug("Ignoring api path %s: wrong file name", path)
        return ""
    if not resolver.is_api_file(path):
        logger.debug("Ignoring api path %s: not the api file", path)
        return ""
    return path


def find_api_path_mount(config: ClientConfig, resolver: ApiPathResolver) -> str:
    """Return the api file of the only QuantumFS mount, if exactly one exists.

    Mount table lines look like::

        138 30 0:32 / /mnt/quantumfs rw,relatime - fuse.QuantumFS QuantumFS ...

    The minor number of the device field (``32`` above) is the FUSE
    connection. Bind mounts of one filesystem share it, so several lines
    with the same connection still count as a single mount.
    """
    try:
        with open(config.mountinfo_path, encoding="utf-8", errors="replace") as f:
            lines = f.read().splitlines()
    except OSError as e:
        logger.debug("Cannot read %s: %s", config.mountinfo_path, e)
        return ""

    mount_point = ""
    connection_id: int | None = None

    for line in lines:
        if FUSE_FSTYPE not in line:
            continue

        fields = line.split(" ", 5)
        if len(fields) < 5:
            return ""
        try:
            connection = int(fields[2].split(":")[1])
        except (IndexError, ValueError):
            # A QuantumFS mount we cannot parse; searching further is unsafe.
            return ""

        if connection_id is not None and connection_id != connection:
            logger.debug("More than one QuantumFS mount, not choosing")
            return ""

        connection_id = connection
        mount_point = fields[4]

    if connection_id is None:
        return ""

    path = os.path.join(mount_point, config.api_name)
    if not resolver.is_api_file(path):
        return ""
    return path


def find_api_path(config: ClientConfig | None = None) -> tuple[Error, str]:
    """Locate the api file using every known source, in order.

    1. ``config.api_path`` (normally from ``QUANTUMFS_API_PATH``).
    2. The root of the sole mounted QuantumFS instance.
    3. The nearest ``api`` file from the cwd upwards.
    """
    config = config or ClientConfig.from_env()
    resolver = ApiPathResolver.from_config(config)

    path = find_api_path_environment(config, resolver)
    if path:
        return get_error(ErrorCode.SUCCESS, path), path

    path = find_api_path_mount(config, resolver)
    if path:
        return get_error(ErrorCode.SUCCESS, path), path

    return resolver.determine_path()
