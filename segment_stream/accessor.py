from __future__ import annotations

import abc
import io
import os
import typing as T


THandle = T.TypeVar("THandle")


class SegmentAccessor(abc.ABC, T.Generic[THandle]):
    """
    Single-resource I/O on one segment at a time.

    Implementations raise OSError (or subclasses) on I/O failures.
    """

    @abc.abstractmethod
    def open(self, filename: str, mode: str = "rb") -> THandle:
        raise NotImplementedError

    @abc.abstractmethod
    def read(self, handle: THandle, size: int) -> bytes:
        """
        Read at most size bytes; fewer (or none) when the segment has no more data available
        """
        raise NotImplementedError

    @abc.abstractmethod
    def seek(self, handle: THandle, offset: int, whence: int = io.SEEK_SET) -> int:
        """
        Return the new local position
        """
        raise NotImplementedError

    @abc.abstractmethod
    def size(self, handle: THandle) -> int | None:
        """
        Return the current size of the segment, or None if the backend can not tell
        """
        raise NotImplementedError

    @abc.abstractmethod
    def close(self, handle: THandle) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def probe_readable(self, filename: str) -> bool:
        """
        Best-effort check. A segment that passes may still fail to open
        """
        raise NotImplementedError


class LocalFileAccessor(SegmentAccessor[T.BinaryIO]):
    def open(self, filename: str, mode: str = "rb") -> T.BinaryIO:
        # Unbuffered so that data appended to a growing segment is seen by the next read
        return T.cast(T.BinaryIO, open(filename, mode, buffering=0))

    def read(self, handle: T.BinaryIO, size: int) -> bytes:
        data = handle.read(size)
        # None from non-blocking raw files means no data for now
        return data or b""

    def seek(self, handle: T.BinaryIO, offset: int, whence: int = io.SEEK_SET) -> int:
        return handle.seek(offset, whence)

    def size(self, handle: T.BinaryIO) -> int | None:
        return os.fstat(handle.fileno()).st_size

    def close(self, handle: T.BinaryIO) -> None:
        handle.close()

    def probe_readable(self, filename: str) -> bool:
        return os.path.isfile(filename) and os.access(filename, os.R_OK)


def accessor_for_seed(seed: str) -> SegmentAccessor:
    """
    Pick the backend for the seed: HTTP(S) URLs are read with range requests,
    everything else from the local filesystem
    """
    if seed.lower().startswith(("http://", "https://")):
        from .http import HTTPAccessor

        return HTTPAccessor()

    return LocalFileAccessor()
