"""Byte buffer holding a raw request or response.

Request layout on the wire::

    +-------------------------------+------------+
    | JSON text (UTF-8, compact)    | Terminator |
    | variable length               | 1 byte 0x00|
    +-------------------------------+------------+

Responses are the bytes read back from offset 0 until end of file. The
filesystem may pad them with NUL bytes, which :meth:`CommandBuffer.sanitize`
removes before decoding.
"""

from __future__ import annotations

from ..config import MAX_BUFFER_SIZE
from ..errors import Error, ErrorCode, SUCCESS, get_error

TERMINATOR = b"\x00"


class CommandBuffer:
    """Growable byte container with an upper size bound.

    Appends are all-or-nothing: one that would take the buffer past
    ``max_size`` fails with ``BUFFER_TOO_BIG`` and leaves it untouched.
    """

    def __init__(self, max_size: int = MAX_BUFFER_SIZE) -> None:
        self._data = bytearray()
        self._max_size = max_size

    @property
    def data(self) -> bytes:
        return bytes(self._data)

    @property
    def size(self) -> int:
        return len(self._data)

    @property
    def max_size(self) -> int:
        return self._max_size

    def __len__(self) -> int:
        return len(self._data)

    def __bytes__(self) -> bytes:
        return bytes(self._data)

    def __repr__(self) -> str:
        return f"CommandBuffer(size={len(self._data)}, max_size={self._max_size})"

    def view(self) -> memoryview:
        """Read-only view of the content, without copying."""
        return memoryview(self._data).toreadonly()

    def reset(self) -> None:
        self._data.clear()

    def append(self, data: bytes) -> Error:
        """Append ``data`` to the tail of the buffer."""
        if len(self._data) + len(data) > self._max_size:
            return get_error(
                ErrorCode.BUFFER_TOO_BIG,
                f"{len(self._data)} + {len(data)} bytes exceeds {self._max_size}",
            )
        self._data += data
        return SUCCESS

    def copy_string(self, s: str | bytes) -> Error:
        """Replace the content with ``s`` followed by a NUL terminator.

        ``str`` values are stored UTF-8 encoded, ``bytes`` as they are.
        """
        if isinstance(s, str):
            s = s.encode("utf-8")
        self.reset()
        return self.append(s + TERMINATOR)

    def copy(self, source: CommandBuffer) -> Error:
        """Replace the content with that of ``source``."""
        self.reset()
        return self.append(source.data)

    def sanitize(self) -> None:
        """Strip trailing NUL bytes."""
        end = len(self._data)
        while end > 0 and self._data[end - 1] == 0:
            end -= 1
        del self._data[end:]
