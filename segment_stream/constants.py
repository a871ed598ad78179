from __future__ import annotations

import functools
import os

_ENV_PREFIX = "SEGMENT_STREAM_"


def _yes_or_no(val: str) -> bool:
    return val.strip().upper() in ["1", "TRUE", "YES"]


def _parse_scaled_integers(
    value: str, scale: dict[str, int] | None = None
) -> int | None:
    """
    >>> scale = {"": 1, "b": 1, "K": 1024, "M": 1024 * 1024, "G": 1024 * 1024 * 1024}
    >>> _parse_scaled_integers("0", scale=scale)
    0
    >>> _parse_scaled_integers("100B", scale=scale)
    100
    >>> _parse_scaled_integers("64k", scale=scale)
    65536
    >>> _parse_scaled_integers("100t", scale=scale)
    Traceback (most recent call last):
    ValueError: Expect valid integer ends with , b, K, M, G, but got 100T
    """

    if scale is None:
        scale = {"": 1}

    value = value.strip().upper()

    if value in ["INF", "INFINITY"]:
        return None

    try:
        for k, v in scale.items():
            k = k.upper()
            if k and value.endswith(k):
                return int(value[: -len(k)]) * v

        if "" in scale:
            return int(value) * scale[""]
    except ValueError:
        pass

    raise ValueError(
        f"Expect valid integer ends with {', '.join(scale.keys())}, but got {value}"
    )


_parse_filesize = functools.partial(
    _parse_scaled_integers,
    scale={"": 1, "B": 1, "K": 1024, "M": 1024 * 1024, "G": 1024 * 1024 * 1024},
)


##################
##### SEEDS ######
##################
# Seeds may carry a "<scheme>:" prefix which is stripped before parsing
URI_SCHEME: str = os.getenv(_ENV_PREFIX + "URI_SCHEME", "flccat")
# Zero-pad segment indices to the width of the digit run found in the seed,
# e.g. rec_007.ts -> rec_008.ts instead of rec_8.ts
PRESERVE_INDEX_WIDTH: bool = _yes_or_no(
    os.getenv(_ENV_PREFIX + "PRESERVE_INDEX_WIDTH", "NO")
)
# Longer seeds are truncated before parsing
MAX_SEED_LENGTH = int(os.getenv(_ENV_PREFIX + "MAX_SEED_LENGTH", 1023))


###################
##### READING #####
###################
# In seconds, per HTTP request
HTTP_TIMEOUT = float(os.getenv(_ENV_PREFIX + "HTTP_TIMEOUT", 60))
READ_CHUNK_SIZE: int = (
    _parse_filesize(os.getenv(_ENV_PREFIX + "READ_CHUNK_SIZE", "64K")) or 64 * 1024
)
