"""
Byte sources for IAS3 uploads.

An upload body is streamed to the server as-is. Sources that can tell their
remaining length without reading implement ``ReportsLength``; the upload
builder turns that into an ``x-archive-size-hint`` header and skips the hint
for everything else.
"""
import asyncio
import io
import logging
import os
import stat
from typing import AsyncIterator, BinaryIO, Optional, Protocol, Union, runtime_checkable

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024

RequestContent = Union[bytes, AsyncIterator[bytes]]


@runtime_checkable
class ReportsLength(Protocol):
    def remaining_length(self) -> int:  # pragma: no cover - interface
        ...


@runtime_checkable
class UploadSource(Protocol):
    def content(self) -> RequestContent:  # pragma: no cover - interface
        ...


async def _read_chunks(reader, chunk_size: int) -> AsyncIterator[bytes]:
    while True:
        # File reads block; keep them off the event loop
        chunk = await asyncio.to_thread(reader.read, chunk_size)
        if not chunk:
            break
        yield chunk


class BytesSource:
    """In-memory upload body."""

    def __init__(self, data: Union[bytes, bytearray, memoryview, str]):
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._data = bytes(data)

    def remaining_length(self) -> int:
        return len(self._data)

    def content(self) -> RequestContent:
        return self._data


class FileSource:
    """A seekable regular file; the caller keeps ownership of the handle."""

    def __init__(self, fileobj: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self._file = fileobj
        self._chunk_size = chunk_size

    def remaining_length(self) -> int:
        size = self._stat_size()
        if size is None:
            return 0
        return max(size - self._file.tell(), 0)

    def _stat_size(self) -> Optional[int]:
        try:
            st = os.fstat(self._file.fileno())
        except (OSError, AttributeError, io.UnsupportedOperation):
            return None
        # Pipes and sockets report st_size 0, which is not a length
        if not stat.S_ISREG(st.st_mode):
            return None
        return st.st_size

    def content(self) -> RequestContent:
        return _read_chunks(self._file, self._chunk_size)


class StreamSource:
    """Any object with ``read(n)``. The length is unknown, so no size hint is sent."""

    def __init__(self, reader, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self._reader = reader
        self._chunk_size = chunk_size

    def content(self) -> RequestContent:
        return _read_chunks(self._reader, self._chunk_size)


def size_hint(source) -> Optional[int]:
    """Remaining length of ``source`` when it reports one, else None."""
    if not isinstance(source, ReportsLength):
        return None
    length = source.remaining_length()
    if length <= 0:
        logger.debug("Upload source %s reported no length; omitting size hint", type(source).__name__)
        return None
    return length
