from __future__ import annotations

import dataclasses
import io
import logging
import sys
import typing as T

if sys.version_info >= (3, 12):
    from typing import override
else:
    from typing_extensions import override

import requests

from . import constants
from .accessor import SegmentAccessor


LOG = logging.getLogger(__name__)


class Session(requests.Session):
    @override
    def request(self, method: str | bytes, url: str | bytes, *args, **kwargs):
        self._log_debug_request(method, url, **kwargs)
        resp = super().request(method, url, *args, **kwargs)
        self._log_debug_response(resp)
        return resp

    def _log_debug_request(self, method: str | bytes, url: str | bytes, **kwargs):
        if not LOG.isEnabledFor(logging.DEBUG):
            return

        if isinstance(method, str) and isinstance(url, str):
            msg = f"HTTP {method} {url}"
        else:
            msg = f"HTTP {method!r} {url!r}"

        headers = kwargs.get("headers")
        if headers is not None:
            msg += f" HEADERS={_sanitize(headers)}"

        timeout = kwargs.get("timeout")
        if timeout is not None:
            msg += f" TIMEOUT={timeout}"

        LOG.debug(msg)

    def _log_debug_response(self, resp: requests.Response):
        if not LOG.isEnabledFor(logging.DEBUG):
            return

        # Segment payloads are binary so only their length is logged
        length = resp.headers.get("Content-Length", "unknown")
        LOG.debug(f"HTTP {resp.status_code} {resp.reason} (Content-Length: {length})")


def _sanitize(headers: T.Mapping[T.Any, T.Any]) -> T.Mapping[T.Any, T.Any]:
    new_headers = {}

    for k, v in headers.items():
        if k.lower() in ["authorization", "cookie", "proxy-authorization"]:
            new_headers[k] = "[REDACTED]"
        else:
            new_headers[k] = v

    return new_headers


@dataclasses.dataclass
class HTTPSegment:
    url: str
    position: int = 0
    closed: bool = False


class HTTPAccessor(SegmentAccessor[HTTPSegment]):
    """
    Reads segments served over HTTP with range requests.

    requests.RequestException derives from OSError, so HTTP failures propagate
    as I/O errors without conversion.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: float | None = None,
    ) -> None:
        self.session = session if session is not None else Session()
        self.timeout = constants.HTTP_TIMEOUT if timeout is None else timeout

    def _head(self, url: str) -> requests.Response:
        return self.session.head(url, allow_redirects=True, timeout=self.timeout)

    def open(self, filename: str, mode: str = "rb") -> HTTPSegment:
        if mode not in ["r", "rb"]:
            raise ValueError(f"HTTP segments are read-only but got mode {mode!r}")

        resp = self._head(filename)
        if resp.status_code == 404:
            raise FileNotFoundError(f"Segment not found: {filename}")
        resp.raise_for_status()

        return HTTPSegment(url=filename)

    def read(self, handle: HTTPSegment, size: int) -> bytes:
        self._ensure_open(handle)

        if size == 0:
            return b""

        if size < 0:
            range_header = f"bytes={handle.position}-"
        else:
            range_header = f"bytes={handle.position}-{handle.position + size - 1}"

        resp = self.session.get(
            handle.url, headers={"Range": range_header}, timeout=self.timeout
        )

        # Nothing left to read from this position
        if resp.status_code == 416:
            return b""

        resp.raise_for_status()

        if resp.status_code == 206:
            data = resp.content
        else:
            # The server ignored the range and sent the whole segment
            end = None if size < 0 else handle.position + size
            data = resp.content[handle.position : end]

        handle.position += len(data)

        return data

    def seek(self, handle: HTTPSegment, offset: int, whence: int = io.SEEK_SET) -> int:
        self._ensure_open(handle)

        if whence == io.SEEK_SET:
            new_position = offset
        elif whence == io.SEEK_CUR:
            new_position = handle.position + offset
        elif whence == io.SEEK_END:
            size = self.size(handle)
            if size is None:
                raise io.UnsupportedOperation(
                    f"Can not seek from the end of {handle.url} with unknown size"
                )
            new_position = size + offset
        else:
            raise ValueError(f"Invalid whence {whence}")

        if new_position < 0:
            raise ValueError(f"Negative seek position {new_position}")

        handle.position = new_position

        return handle.position

    def size(self, handle: HTTPSegment) -> int | None:
        self._ensure_open(handle)

        # Queried every time since segments may grow while being read
        resp = self._head(handle.url)
        resp.raise_for_status()

        length = resp.headers.get("Content-Length")
        if length is None:
            return None

        try:
            return int(length)
        except ValueError:
            LOG.warning("Invalid Content-Length %r from %s", length, handle.url)
            return None

    def close(self, handle: HTTPSegment) -> None:
        handle.closed = True

    def probe_readable(self, filename: str) -> bool:
        try:
            resp = self._head(filename)
        except requests.RequestException as ex:
            LOG.debug("Failed to probe %s: %s", filename, ex)
            return False
        return resp.ok

    def _ensure_open(self, handle: HTTPSegment) -> None:
        if handle.closed:
            raise ValueError(f"I/O operation on closed segment {handle.url}")
