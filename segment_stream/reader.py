from __future__ import annotations

import logging

from .exceptions import SegmentStreamError
from .navigator import Direction, Progress, SegmentNavigator


LOG = logging.getLogger(__name__)


def read_into(navigator: SegmentNavigator, buffer) -> int:
    """
    Fill the buffer from the current segment onwards, switching forward on every short read.

    Returns fewer bytes than requested, possibly 0, when there is no next
    segment (soft EOF). An error after some bytes were delivered is dropped in
    favor of returning them; the next call raises it again if it persists.
    """
    view = memoryview(buffer).cast("B")
    total = 0

    while total < len(view):
        remaining = len(view) - total

        try:
            data = navigator.read(remaining)
        except SegmentStreamError:
            if total:
                LOG.debug("Read failed after %d bytes", total, exc_info=True)
                return total
            raise

        view[total : total + len(data)] = data
        total += len(data)

        if len(data) < remaining:
            try:
                progress = navigator.progress(Direction.FORWARD)
            except SegmentStreamError:
                if total:
                    LOG.debug("Switch failed after %d bytes", total, exc_info=True)
                    return total
                raise

            # Never retry here, otherwise reading at the end loops forever
            if progress is Progress.NOT_SWITCHED:
                break

    return total
