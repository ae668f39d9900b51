"""Synchronous command exchange over the QuantumFS api file.

A command is written at offset 0 of the api file, then the response is read
back from offset 0 of the same open file until end of file. Both directions
share one seek position, so a handle carries at most one exchange at a time.
"""

from __future__ import annotations

import logging
from typing import BinaryIO, Protocol

from ..config import READ_CHUNK_SIZE, ClientConfig
from ..errors import Error, ErrorCode, SUCCESS, get_error
from ..protocol.buffer import CommandBuffer
from .resolver import ApiPathResolver

logger = logging.getLogger(__name__)


class ExchangeHook(Protocol):
    """Replaces the read half of an exchange, for tests.

    ``post_write`` is called once the command has been written and flushed.
    ``pre_read`` then fills ``response`` in place of reading the api file.
    """

    def post_write(self, command: CommandBuffer) -> Error: ...

    def pre_read(self, response: CommandBuffer) -> Error: ...


class ApiFile:
    """Owns the open api file and performs write-then-read exchanges.

    Usage::

        with ApiFile() as api_file:
            err = api_file.send_command(command, response)

    Without an explicit ``path`` the location is discovered with the
    resolver on the first :meth:`open`. Once known, the path never changes.
    """

    def __init__(
        self,
        path: str = "",
        resolver: ApiPathResolver | None = None,
        hook: ExchangeHook | None = None,
        read_chunk_size: int = READ_CHUNK_SIZE,
    ) -> None:
        self._path = path
        self._resolver = resolver or ApiPathResolver()
        self._hook = hook
        self._read_chunk_size = read_chunk_size
        self._file: BinaryIO | None = None

    @classmethod
    def from_config(
        cls, config: ClientConfig, hook: ExchangeHook | None = None
    ) -> ApiFile:
        return cls(
            path=config.api_path,
            resolver=ApiPathResolver.from_config(config),
            hook=hook,
            read_chunk_size=config.read_chunk_size,
        )

    @property
    def path(self) -> str:
        return self._path

    @property
    def is_open(self) -> bool:
        return self._file is not None

    def __enter__(self) -> ApiFile:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __del__(self) -> None:
        self.close()

    def open(self) -> Error:
        """Open the api file, determining its location first if needed."""
        if not self._path:
            err, path = self._resolver.determine_path()
            if not err.ok:
                return err
            self._path = path

        if self._file is not None:
            return SUCCESS

        try:
            self._file = open(self._path, "r+b")
        except OSError as e:
            logger.debug("Open of %s failed: %s", self._path, e)
            return get_error(ErrorCode.CANT_OPEN_API_FILE, self._path)

        logger.info("Opened api file %s", self._path)
        return SUCCESS

    def close(self) -> None:
        """Close the api file if it is open."""
        f = getattr(self, "_file", None)
        if f is None:
            return

        try:
            f.close()
        except OSError as e:
            logger.warning("Error closing api file %s: %s", self._path, e)
        finally:
            self._file = None
            logger.info("Closed api file %s", self._path)

    def send_command(self, command: CommandBuffer, response: CommandBuffer) -> Error:
        """Write ``command`` and read the reply into ``response``."""
        err = self.open()
        if not err.ok:
            return err

        err = self.write_command(command)
        if not err.ok:
            return err

        if self._hook is not None:
            err = self._hook.post_write(command)
            if not err.ok:
                return err
            return self._hook.pre_read(response)

        return self.read_response(response)

    def write_command(self, command: CommandBuffer) -> Error:
        """Write the whole of ``command`` at offset 0 and flush it."""
        if self._file is None:
            return get_error(ErrorCode.API_FILE_NOT_OPEN)

        try:
            self._file.seek(0)
        except (OSError, ValueError):
            return get_error(ErrorCode.API_FILE_SEEK_FAIL, self._path)

        try:
            self._file.write(command.data)
        except (OSError, ValueError):
            return get_error(ErrorCode.API_FILE_WRITE_FAIL, self._path)

        try:
            self._file.flush()
        except (OSError, ValueError):
            return get_error(ErrorCode.API_FILE_FLUSH_FAIL, self._path)

        logger.debug("Wrote %d byte command to %s", command.size, self._path)
        return SUCCESS

    def read_response(self, response: CommandBuffer) -> Error:
        """Read the api file from offset 0 to end of file into ``response``."""
        if self._file is None:
            return get_error(ErrorCode.API_FILE_NOT_OPEN)

        try:
            self._file.seek(0)
        except (OSError, ValueError):
            return get_error(ErrorCode.API_FILE_SEEK_FAIL, self._path)

        response.reset()

        while True:
            try:
                chunk = self._file.read(self._read_chunk_size)
            except (OSError, ValueError):
                return get_error(ErrorCode.API_FILE_READ_FAIL, self._path)

            if not chunk:
                break

            err = response.append(chunk)
            if not err.ok:
                return err

        logger.debug("Read %d byte response from %s", response.size, self._path)
        return SUCCESS
