from __future__ import annotations

import dataclasses
import errno
import io

import pytest

from segment_stream.accessor import SegmentAccessor


@dataclasses.dataclass
class FakeHandle:
    filename: str
    # shared with FakeAccessor.segments so appends are visible, and kept alive after removal like an unlinked file
    data: bytearray
    position: int = 0
    closed: bool = False


class FakeAccessor(SegmentAccessor[FakeHandle]):
    def __init__(self) -> None:
        self.segments: dict[str, bytearray] = {}
        self.open_handles: list[FakeHandle] = []
        self.max_open_handles = 0
        # filenames whose size is unknown
        self.unknown_size: set[str] = set()
        # filenames removed right before they are opened, i.e. after probing
        self.vanish_on_open: set[str] = set()
        # filenames that fail to read
        self.fail_read: set[str] = set()

    def add(self, filename: str, data: bytes) -> None:
        self.segments[filename] = bytearray(data)

    def open(self, filename: str, mode: str = "rb") -> FakeHandle:
        if filename in self.vanish_on_open:
            self.segments.pop(filename, None)
        if filename not in self.segments:
            raise FileNotFoundError(errno.ENOENT, "No such segment", filename)
        handle = FakeHandle(filename, self.segments[filename])
        self.open_handles.append(handle)
        self.max_open_handles = max(self.max_open_handles, len(self.open_handles))
        return handle

    def read(self, handle: FakeHandle, size: int) -> bytes:
        assert not handle.closed
        if handle.filename in self.fail_read:
            raise OSError(errno.EIO, "Read failed", handle.filename)
        data = bytes(handle.data[handle.position : handle.position + size])
        handle.position += len(data)
        return data

    def seek(self, handle: FakeHandle, offset: int, whence: int = io.SEEK_SET) -> int:
        assert not handle.closed
        if whence == io.SEEK_SET:
            position = offset
        elif whence == io.SEEK_CUR:
            position = handle.position + offset
        else:
            position = len(handle.data) + offset
        if position < 0:
            raise OSError(errno.EINVAL, "Invalid seek", handle.filename)
        handle.position = position
        return position

    def size(self, handle: FakeHandle) -> int | None:
        assert not handle.closed
        if handle.filename in self.unknown_size:
            return None
        return len(handle.data)

    def close(self, handle: FakeHandle) -> None:
        assert not handle.closed, f"{handle.filename} closed twice"
        handle.closed = True
        self.open_handles.remove(handle)

    def probe_readable(self, filename: str) -> bool:
        return filename in self.segments


@pytest.fixture
def fake_accessor() -> FakeAccessor:
    return FakeAccessor()
