"""Client configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

API_NAME = "api"
API_INODE_ID = 2  # inode reserved for the api file in every QuantumFS mount
READ_CHUNK_SIZE = 4096
MAX_BUFFER_SIZE = 64 * 1024 * 1024
MOUNTINFO_PATH = "/proc/self/mountinfo"
API_PATH_ENV = "QUANTUMFS_API_PATH"


@dataclass
class ClientConfig:
    """Where to look for the api file and how to talk to it.

    Attributes:
        api_name: File name of the control file.
        api_inode_id: Inode number the control file must have.
        api_path: Explicit control file location, empty to discover it.
        read_chunk_size: Bytes requested per read of a response.
        max_buffer_size: Upper bound for request and response buffers.
        mountinfo_path: Mount table consulted by :func:`find_api_path`.
    """

    api_name: str = API_NAME
    api_inode_id: int = API_INODE_ID
    api_path: str = ""
    read_chunk_size: int = READ_CHUNK_SIZE
    max_buffer_size: int = MAX_BUFFER_SIZE
    mountinfo_path: str = MOUNTINFO_PATH

    @classmethod
    def from_env(cls) -> ClientConfig:
        """Defaults, with ``api_path`` taken from ``QUANTUMFS_API_PATH``."""
        return cls(api_path=os.environ.get(API_PATH_ENV, ""))
