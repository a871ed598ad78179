from __future__ import annotations

import logging
import re
import typing as T

from . import constants
from .exceptions import NoDigitRunError


LOG = logging.getLogger(__name__)


# The last run of ASCII digits, followed only by non-digits up to the end
_LAST_DIGIT_RUN = re.compile(r"([0-9]+)([^0-9]*)$")


class SegmentPattern(T.NamedTuple):
    prefix: str
    suffix: str
    # index of the segment named by the seed
    start_index: int
    # 0 for plain decimals, otherwise indices are zero-padded to this width
    width: int = 0

    @property
    def template(self) -> str:
        """
        The filename template in str.format syntax

        >>> SegmentPattern("rec_", ".ts", 7, 3).template
        'rec_{:03d}.ts'
        >>> SegmentPattern("{a}/", "", 1).template
        '{{a}}/{:d}'
        """

        def _escape(s: str) -> str:
            return s.replace("{", "{{").replace("}", "}}")

        placeholder = f"{{:0{self.width}d}}" if self.width else "{:d}"
        return _escape(self.prefix) + placeholder + _escape(self.suffix)

    def format(self, index: int) -> str:
        """
        >>> SegmentPattern("rec_", ".ts", 7).format(8)
        'rec_8.ts'
        >>> SegmentPattern("rec_", ".ts", 7, 3).format(8)
        'rec_008.ts'
        """
        if self.width:
            return f"{self.prefix}{index:0{self.width}d}{self.suffix}"
        else:
            return f"{self.prefix}{index:d}{self.suffix}"


def seed_path(seed: str, scheme: str | None = None) -> str:
    """
    Strip the scheme prefix and truncate overlong seeds

    >>> seed_path("flccat:/data/rec_42.ts")
    '/data/rec_42.ts'
    >>> seed_path("https://example.com/rec_42.ts")
    'https://example.com/rec_42.ts'
    """
    if scheme is None:
        scheme = constants.URI_SCHEME
    if scheme and seed.startswith(scheme + ":"):
        seed = seed[len(scheme) + 1 :]
    return seed[: constants.MAX_SEED_LENGTH]


def parse_seed(
    seed: str,
    scheme: str | None = None,
    preserve_width: bool | None = None,
) -> SegmentPattern:
    """
    Derive the segment filename pattern from the filename of one segment

    >>> parse_seed("flccat:/data/rec_42.ts")
    SegmentPattern(prefix='/data/rec_', suffix='.ts', start_index=42, width=0)
    >>> parse_seed("/data/cam1/chunk_007.bin", preserve_width=True)
    SegmentPattern(prefix='/data/cam1/chunk_', suffix='.bin', start_index=7, width=3)
    """
    if preserve_width is None:
        preserve_width = constants.PRESERVE_INDEX_WIDTH

    path = seed_path(seed, scheme)
    if not path:
        raise NoDigitRunError(f"Empty seed {seed!r}")

    match = _LAST_DIGIT_RUN.search(path)
    if match is None:
        raise NoDigitRunError(f"No segment index found in the seed {seed!r}")

    digits = match.group(1)
    pattern = SegmentPattern(
        prefix=path[: match.start(1)],
        suffix=match.group(2),
        start_index=int(digits),
        width=len(digits) if preserve_width else 0,
    )
    LOG.debug("Parsed seed %r into template %r", seed, pattern.template)

    return pattern
