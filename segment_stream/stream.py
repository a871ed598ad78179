from __future__ import annotations

import io
import typing as T

from . import pattern as pattern_module, reader, seeker
from .accessor import accessor_for_seed, SegmentAccessor
from .navigator import SegmentNavigator


class SegmentStream(io.RawIOBase):
    """
    A read-only, seekable byte stream over a numbered series of segment files.

    >>> with SegmentStream.open("/var/rec/chunk_42.ts") as fp:  # doctest: +SKIP
    ...     fp.seek(-188, io.SEEK_END)
    ...     packet = fp.read(188)

    Segments are discovered lazily from the seed: the next segment of
    chunk_42.ts is chunk_43.ts, the previous one chunk_41.ts. Only one of them
    is open at a time.
    """

    _navigator: SegmentNavigator

    def __init__(self, navigator: SegmentNavigator) -> None:
        super().__init__()
        self._navigator = navigator

    @classmethod
    def open(
        cls,
        seed: str,
        mode: str = "rb",
        accessor: SegmentAccessor | None = None,
        scheme: str | None = None,
        preserve_width: bool | None = None,
    ) -> SegmentStream:
        if mode not in ["r", "rb"]:
            raise ValueError(f"Segment streams are read-only but got mode {mode!r}")
        # Segments are always read as bytes
        mode = "rb"

        pattern = pattern_module.parse_seed(
            seed, scheme=scheme, preserve_width=preserve_width
        )
        path = pattern_module.seed_path(seed, scheme=scheme)

        if accessor is None:
            accessor = accessor_for_seed(path)

        navigator = SegmentNavigator.open(accessor, pattern, mode=mode, filename=path)

        return cls(navigator)

    @property
    def index(self) -> int:
        return self._navigator.index

    @property
    def segment_start(self) -> int:
        return self._navigator.segment_start

    @property
    def filename(self) -> str:
        return self._navigator.current.filename

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def writable(self) -> bool:
        return False

    def write(self, buffer: T.Any) -> int:
        raise io.UnsupportedOperation("write")

    def readinto(self, buffer: T.Any) -> int:
        self._checkClosed()
        return reader.read_into(self._navigator, buffer)

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        self._checkClosed()
        return seeker.seek(self._navigator, offset, whence)

    def tell(self) -> int:
        self._checkClosed()
        return self._navigator.absolute_offset()

    def close(self) -> None:
        if self.closed:
            return
        try:
            self._navigator.close()
        finally:
            super().close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} index={self._navigator.index} segment_start={self._navigator.segment_start}>"


open_stream = SegmentStream.open
