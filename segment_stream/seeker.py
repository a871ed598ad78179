from __future__ import annotations

import io
import logging

from .exceptions import InvalidWhenceError
from .navigator import Direction, Progress, SegmentNavigator


LOG = logging.getLogger(__name__)


def seek_relative(navigator: SegmentNavigator, delta: int) -> int:
    """
    Move delta bytes from the current position, switching segments as needed.

    Seeking before the first available segment clamps to its beginning, and
    seeking past the last one clamps to its last byte. Returns the absolute
    virtual offset.
    """
    # target position relative to the beginning of the current segment
    target = navigator.tell() + delta

    while True:
        segment_start = navigator.segment_start

        if target < 0:
            if navigator.progress(Direction.BACKWARD) is Progress.NOT_SWITCHED:
                navigator.rewind()
                LOG.debug(
                    "Clamped seek to the beginning of %s", navigator.current.filename
                )
                return navigator.segment_start

        # the segment may have grown since it was last measured
        elif target > navigator.current.size and target > navigator.refresh_size():
            if navigator.progress(Direction.FORWARD) is Progress.NOT_SWITCHED:
                offset = navigator.seek_local(max(navigator.current.size - 1, 0))
                LOG.debug(
                    "Clamped seek to offset %d of %s",
                    offset,
                    navigator.current.filename,
                )
                return navigator.segment_start + offset

        else:
            break

        # add the size of the segment moved into (backward) or subtract the one left (forward)
        target -= navigator.segment_start - segment_start

    offset = navigator.seek_local(target)
    return navigator.segment_start + offset


def seek(navigator: SegmentNavigator, position: int, whence: int = io.SEEK_SET) -> int:
    if whence == io.SEEK_SET:
        return seek_relative(navigator, position - navigator.absolute_offset())

    elif whence == io.SEEK_CUR:
        return seek_relative(navigator, position)

    elif whence == io.SEEK_END:
        while navigator.progress(Direction.FORWARD) is Progress.SWITCHED:
            pass
        # seek_relative expects a valid position inside the segment
        navigator.rewind()
        return seek_relative(navigator, navigator.refresh_size() + position)

    else:
        raise InvalidWhenceError(f"Invalid whence {whence}")
