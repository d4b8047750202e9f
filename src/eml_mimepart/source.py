"""
Byte range sources for raw message data.

A part never holds its own bytes. It reads half-open [start, end) ranges out of
the raw message, which lives either in memory (BufferSource) or in a seekable
binary stream shared with the sibling parts of the same message (StreamSource).
"""

import io
import threading
import weakref
from abc import ABC, abstractmethod
from typing import Any, Iterator, Optional

import structlog

from .config import settings
from .exceptions import SourceError

logger = structlog.get_logger(__name__)

# One lock per shared stream object, so wrappers built independently for
# sibling parts still serialize their seek+read pairs.
_stream_locks: "weakref.WeakKeyDictionary[Any, threading.Lock]" = weakref.WeakKeyDictionary()
_stream_locks_guard = threading.Lock()


def _empty_range(start: Optional[int], end: Optional[int]) -> bool:
    return start is None or end is None or start >= end


class ByteRangeSource(ABC):
    """Reads byte ranges of a raw message by absolute offset."""

    @abstractmethod
    def read_range(self, start: Optional[int], end: Optional[int]) -> bytes:
        """
        Read the half-open range [start, end).

        Returns b"" when either bound is missing or start >= end.
        """

    def iter_range(
        self, start: Optional[int], end: Optional[int], chunk_size: Optional[int] = None
    ) -> Iterator[bytes]:
        """
        Yield the range [start, end) in chunks of at most chunk_size bytes.

        Args:
            start: Absolute start offset
            end: Absolute end offset (exclusive)
            chunk_size: Maximum chunk length (defaults to settings.stream_read_chunk_size)

        Yields:
            Non-empty byte chunks, in order
        """
        if _empty_range(start, end):
            return
        chunk_size = chunk_size or settings.stream_read_chunk_size
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        position = start
        while position < end:
            chunk = self.read_range(position, min(position + chunk_size, end))
            if not chunk:
                break
            yield chunk
            position += len(chunk)


class BufferSource(ByteRangeSource):
    """In-memory raw message."""

    def __init__(self, data: bytes):
        self._data = bytes(data)

    def __len__(self) -> int:
        return len(self._data)

    def read_range(self, start: Optional[int], end: Optional[int]) -> bytes:
        if _empty_range(start, end):
            return b""
        return self._data[start:end]

    def __repr__(self) -> str:
        return f"BufferSource(size={len(self._data)})"


class StreamSource(ByteRangeSource):
    """
    Seekable binary stream shared by every part of a message.

    The stream is not owned: it is never closed here. Its read position is
    shared mutable state, so every seek+read pair runs under the wrapper lock.
    """

    def __init__(self, stream: Any, lock: Optional[threading.Lock] = None):
        self._stream = stream
        self._lock = lock if lock is not None else _lock_for(stream)

    @property
    def stream(self) -> Any:
        return self._stream

    @property
    def lock(self) -> threading.Lock:
        return self._lock

    def read_range(self, start: Optional[int], end: Optional[int]) -> bytes:
        if _empty_range(start, end):
            return b""

        wanted = end - start
        chunks = []
        with self._lock:
            self._stream.seek(start, io.SEEK_SET)
            while wanted > 0:
                chunk = self._stream.read(wanted)
                if not chunk:
                    break
                chunks.append(chunk)
                wanted -= len(chunk)

        if wanted > 0:
            logger.debug("stream_short_read", start=start, end=end, missing=wanted)
        return b"".join(chunks)

    def __repr__(self) -> str:
        return f"StreamSource(stream={self._stream!r})"


def _lock_for(stream: Any) -> threading.Lock:
    with _stream_locks_guard:
        try:
            lock = _stream_locks.get(stream)
            if lock is None:
                lock = threading.Lock()
                _stream_locks[stream] = lock
            return lock
        except TypeError:
            # Not weak-referenceable: the wrapper lock is private to this instance
            return threading.Lock()


def as_source(source: Any) -> ByteRangeSource:
    """
    Coerce a raw message handle into a ByteRangeSource.

    Args:
        source: bytes-like buffer, seekable binary stream, or ByteRangeSource

    Returns:
        BufferSource for buffers, StreamSource for streams, the source itself otherwise

    Raises:
        SourceError: If source is None or of an unsupported type
    """
    if isinstance(source, ByteRangeSource):
        return source
    if isinstance(source, (bytes, bytearray, memoryview)):
        return BufferSource(source)
    if source is not None and callable(getattr(source, "seek", None)) and callable(
        getattr(source, "read", None)
    ):
        return StreamSource(source)
    raise SourceError(
        f"Expected bytes, a seekable binary stream or a ByteRangeSource, got {type(source).__name__}"
    )
