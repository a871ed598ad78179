from __future__ import annotations

import contextlib
import dataclasses
import enum
import io
import logging
import typing as T

from .accessor import SegmentAccessor
from .exceptions import (
    SegmentIOError,
    SegmentNotFoundError,
    SegmentStreamError,
    SizeUnavailableError,
)
from .pattern import SegmentPattern


LOG = logging.getLogger(__name__)


class Direction(enum.IntEnum):
    FORWARD = 1
    BACKWARD = -1


class Progress(enum.Enum):
    SWITCHED = "switched"
    # No readable segment in that direction; not an error
    NOT_SWITCHED = "not_switched"


@dataclasses.dataclass
class Segment:
    filename: str
    handle: T.Any
    # last known size, may be behind the real size of a growing segment
    size: int


@contextlib.contextmanager
def _accessor_errors(action: str, filename: str) -> T.Generator[None, None, None]:
    try:
        yield
    except SegmentStreamError:
        raise
    except (OSError, ValueError) as ex:
        raise SegmentIOError(f"Failed to {action} segment {filename}: {ex}") from ex


def _open_segment(accessor: SegmentAccessor, filename: str, mode: str) -> Segment:
    # Errors from accessor.open are left to the caller to classify
    handle = accessor.open(filename, mode)

    try:
        size = accessor.size(handle)
    except (OSError, ValueError) as ex:
        accessor.close(handle)
        raise SizeUnavailableError(
            f"Failed to get the size of segment {filename}: {ex}"
        ) from ex

    if size is None or size < 0:
        accessor.close(handle)
        raise SizeUnavailableError(f"Unknown size of segment {filename}")

    return Segment(filename=filename, handle=handle, size=size)


class SegmentNavigator:
    """
    Keeps exactly one segment open and tracks where it begins in the virtual stream.

    Invariant: segment_start + the local position in the current segment is the
    absolute virtual offset. Offset 0 is the beginning of the segment the
    navigator was opened with, so segments before it have negative offsets.
    """

    def __init__(
        self,
        accessor: SegmentAccessor,
        pattern: SegmentPattern,
        current: Segment,
        mode: str = "rb",
    ) -> None:
        self.accessor = accessor
        self.pattern = pattern
        self.mode = mode
        self.index = pattern.start_index
        self.segment_start = 0
        self._current: Segment | None = current

    @classmethod
    def open(
        cls,
        accessor: SegmentAccessor,
        pattern: SegmentPattern,
        mode: str = "rb",
        filename: str | None = None,
    ) -> SegmentNavigator:
        """
        Open the first segment. It is the given filename if any, otherwise the
        filename the pattern renders for its start index.
        """
        if filename is None:
            filename = pattern.format(pattern.start_index)

        try:
            current = _open_segment(accessor, filename, mode)
        except SegmentStreamError:
            raise
        except (OSError, ValueError) as ex:
            raise SegmentNotFoundError(
                f"Failed to open the first segment {filename}: {ex}"
            ) from ex

        LOG.debug(
            "Opened segment %s (index %d, %d bytes)",
            filename,
            pattern.start_index,
            current.size,
        )

        return cls(accessor, pattern, current, mode=mode)

    @property
    def current(self) -> Segment:
        if self._current is None:
            raise SegmentIOError(
                f"No segment is open after failing to switch away from index {self.index}"
            )
        return self._current

    @property
    def is_open(self) -> bool:
        return self._current is not None

    def progress(self, direction: Direction) -> Progress:
        """
        Switch to the next (FORWARD) or the previous (BACKWARD) segment if it is readable.

        The new segment is positioned at its beginning. Errors while switching
        are raised as SegmentIOError and never reported as NOT_SWITCHED.
        """
        current = self.current

        if self.index + direction < 0:
            LOG.debug("No segment before index %d", self.index)
            return Progress.NOT_SWITCHED

        candidate = self.pattern.format(self.index + direction)

        if not self.accessor.probe_readable(candidate):
            LOG.debug("No readable segment %s", candidate)
            return Progress.NOT_SWITCHED

        with _accessor_errors("get the size of", current.filename):
            old_size = self.accessor.size(current.handle)
        if old_size is None:
            old_size = current.size

        self._close_current()

        try:
            new = _open_segment(self.accessor, candidate, self.mode)
        except SegmentStreamError:
            raise
        except (OSError, ValueError) as ex:
            # The segment might be overwritten by the producer since it was probed
            LOG.warning("Segment %s became unavailable: %s", candidate, ex)
            raise SegmentIOError(f"Failed to open segment {candidate}: {ex}") from ex

        self._current = new
        self.index += direction
        if direction == Direction.FORWARD:
            self.segment_start += old_size
        else:
            self.segment_start -= new.size

        LOG.debug(
            "Switched to segment %s (index %d, %d bytes) starting at %d",
            candidate,
            self.index,
            new.size,
            self.segment_start,
        )

        self.rewind()

        return Progress.SWITCHED

    def read(self, size: int) -> bytes:
        current = self.current
        with _accessor_errors("read", current.filename):
            return self.accessor.read(current.handle, size)

    def seek_local(self, offset: int) -> int:
        current = self.current
        with _accessor_errors("seek", current.filename):
            return self.accessor.seek(current.handle, offset, io.SEEK_SET)

    def rewind(self) -> int:
        return self.seek_local(0)

    def tell(self) -> int:
        current = self.current
        with _accessor_errors("seek", current.filename):
            return self.accessor.seek(current.handle, 0, io.SEEK_CUR)

    def absolute_offset(self) -> int:
        return self.segment_start + self.tell()

    def refresh_size(self) -> int:
        """
        Re-measure the current segment which may have grown since it was opened
        """
        current = self.current
        with _accessor_errors("get the size of", current.filename):
            size = self.accessor.size(current.handle)
        if size is not None and size != current.size:
            LOG.debug(
                "Segment %s changed size from %d to %d",
                current.filename,
                current.size,
                size,
            )
            current.size = size
        return current.size

    def close(self) -> None:
        if self._current is not None:
            self._close_current()

    def _close_current(self) -> None:
        current = self.current
        # Forget the handle even if closing fails to never close it twice
        self._current = None
        with _accessor_errors("close", current.filename):
            self.accessor.close(current.handle)
        LOG.debug("Closed segment %s", current.filename)
