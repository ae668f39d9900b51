"""Shared fixtures: a plain file standing in for the api file, and canned replies."""

from __future__ import annotations

import pytest

from quantumfs_client.client import QfsClient
from quantumfs_client.errors import Error, SUCCESS
from quantumfs_client.protocol.buffer import CommandBuffer
from quantumfs_client.transport.api_file import ApiFile


class CannedResponse:
    """Exchange hook recording each command and answering with ``body``."""

    def __init__(self, body: bytes, post_write_error: Error = SUCCESS) -> None:
        self.body = body
        self.post_write_error = post_write_error
        self.written: list[bytes] = []

    def post_write(self, command: CommandBuffer) -> Error:
        self.written.append(command.data)
        return self.post_write_error

    def pre_read(self, response: CommandBuffer) -> Error:
        response.reset()
        return response.append(self.body)


@pytest.fixture
def api_path(tmp_path):
    """An empty regular file to open as the api file."""
    path = tmp_path / "api"
    path.write_bytes(b"")
    return str(path)


@pytest.fixture
def canned_api_file(api_path):
    """Factory for an ApiFile whose replies are ``body``."""
    opened: list[ApiFile] = []

    def make(body: bytes) -> tuple[ApiFile, CannedResponse]:
        hook = CannedResponse(body)
        api_file = ApiFile(path=api_path, hook=hook)
        opened.append(api_file)
        return api_file, hook

    yield make
    for api_file in opened:
        api_file.close()


@pytest.fixture
def canned_client(api_path):
    """Factory for a QfsClient whose replies are ``body``."""
    clients: list[QfsClient] = []

    def make(body: bytes) -> tuple[QfsClient, CannedResponse]:
        hook = CannedResponse(body)
        client = QfsClient(path=api_path, hook=hook)
        clients.append(client)
        return client, hook

    yield make
    for client in clients:
        client.close()
