from __future__ import annotations


class SegmentStreamError(Exception):
    exit_code: int = 1


class NoDigitRunError(SegmentStreamError, ValueError):
    """
    Raise when the seed has no decimal digits to derive segment indices from
    """

    exit_code = 2


class SegmentNotFoundError(SegmentStreamError, FileNotFoundError):
    exit_code = 3


class SizeUnavailableError(SegmentStreamError):
    """
    Raise when the backend can not tell the size of an opened segment
    """

    exit_code = 4


class SegmentIOError(SegmentStreamError, OSError):
    exit_code = 5


class InvalidWhenceError(SegmentStreamError, ValueError):
    exit_code = 6
