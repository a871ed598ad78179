from __future__ import annotations

import io
import logging
import re

import pytest
import requests

from segment_stream.accessor import accessor_for_seed, LocalFileAccessor
from segment_stream.exceptions import SegmentNotFoundError, SizeUnavailableError
from segment_stream.http import HTTPAccessor, Session
from segment_stream.stream import SegmentStream


def _response(url: str, status_code: int, content: bytes = b"", headers=None):
    resp = requests.Response()
    resp.url = url
    resp.status_code = status_code
    resp._content = content
    resp.headers.update(headers or {})
    return resp


class FakeSession:
    def __init__(self, files: dict[str, bytes], support_range: bool = True):
        self.files = files
        self.support_range = support_range
        self.hide_length = False
        self.requests: list[tuple[str, str]] = []

    def head(self, url: str, allow_redirects=True, timeout=None):
        self.requests.append(("HEAD", url))
        if url not in self.files:
            return _response(url, 404)
        headers = {} if self.hide_length else {"Content-Length": str(len(self.files[url]))}
        return _response(url, 200, headers=headers)

    def get(self, url: str, headers=None, timeout=None):
        self.requests.append(("GET", url))
        if url not in self.files:
            return _response(url, 404)
        data = self.files[url]
        range_header = (headers or {}).get("Range")
        if not self.support_range or range_header is None:
            return _response(url, 200, data)
        match = re.fullmatch(r"bytes=(\d+)-(\d*)", range_header)
        assert match is not None, range_header
        begin = int(match.group(1))
        end = int(match.group(2)) + 1 if match.group(2) else len(data)
        if len(data) <= begin:
            return _response(url, 416)
        return _response(url, 206, data[begin:end])


FILES = {
    "http://example.com/live/seg_1.bin": b"hello",
    "http://example.com/live/seg_2.bin": b"world",
    "http://example.com/live/seg_3.bin": b"foo",
}


def test_accessor():
    accessor = HTTPAccessor(session=FakeSession(dict(FILES)), timeout=1)
    handle = accessor.open("http://example.com/live/seg_1.bin")
    assert accessor.size(handle) == 5
    assert accessor.read(handle, 3) == b"hel"
    assert accessor.read(handle, 3) == b"lo"
    assert accessor.read(handle, 3) == b""
    assert accessor.seek(handle, 1) == 1
    assert accessor.read(handle, -1) == b"ello"
    assert accessor.seek(handle, -2, io.SEEK_END) == 3
    assert accessor.seek(handle, -1, io.SEEK_CUR) == 2
    assert accessor.read(handle, 0) == b""
    with pytest.raises(ValueError):
        accessor.seek(handle, -10, io.SEEK_CUR)
    accessor.close(handle)
    with pytest.raises(ValueError):
        accessor.read(handle, 1)


def test_accessor_without_range_support():
    accessor = HTTPAccessor(session=FakeSession(dict(FILES), support_range=False))
    handle = accessor.open("http://example.com/live/seg_2.bin")
    accessor.seek(handle, 1)
    assert accessor.read(handle, 3) == b"orl"
    assert accessor.read(handle, -1) == b"d"


def test_missing_segment_is_unreadable():
    accessor = HTTPAccessor(session=FakeSession(dict(FILES)))
    assert accessor.probe_readable("http://example.com/live/seg_1.bin")
    assert not accessor.probe_readable("http://example.com/live/seg_0.bin")
    with pytest.raises(FileNotFoundError):
        accessor.open("http://example.com/live/seg_0.bin")
    with pytest.raises(ValueError):
        accessor.open("http://example.com/live/seg_1.bin", mode="wb")


def test_stream_over_http():
    session = FakeSession(dict(FILES))
    accessor = HTTPAccessor(session=session)
    with SegmentStream.open("http://example.com/live/seg_1.bin", accessor=accessor) as s:
        assert s.read(7) == b"hellowo"
        assert s.segment_start == 5
        assert s.read() == b"rldfoo"
        assert s.seek(-4, io.SEEK_END) == 9
        assert s.read(2) == b"df"
        assert s.seek(2) == 2
        assert s.read(4) == b"llow"

        # a new segment is published
        session.files["http://example.com/live/seg_4.bin"] = b"bar"
        assert s.seek(0, io.SEEK_END) == 16


def test_stream_over_http_missing_seed():
    accessor = HTTPAccessor(session=FakeSession(dict(FILES)))
    with pytest.raises(SegmentNotFoundError):
        SegmentStream.open("http://example.com/live/seg_9.bin", accessor=accessor)


def test_stream_over_http_unknown_size():
    session = FakeSession(dict(FILES))
    session.hide_length = True
    with pytest.raises(SizeUnavailableError):
        SegmentStream.open(
            "http://example.com/live/seg_1.bin", accessor=HTTPAccessor(session=session)
        )


def test_accessor_for_seed():
    assert isinstance(accessor_for_seed("https://example.com/seg_1.bin"), HTTPAccessor)
    assert isinstance(accessor_for_seed("HTTP://example.com/seg_1.bin"), HTTPAccessor)
    assert isinstance(accessor_for_seed("/var/rec/seg_1.bin"), LocalFileAccessor)


def test_session_logs_sanitized_requests(caplog):
    session = Session()
    with caplog.at_level(logging.DEBUG, logger="segment_stream.http"):
        session._log_debug_request(
            "GET",
            "http://example.com/live/seg_1.bin",
            headers={"Authorization": "Bearer secret", "Range": "bytes=0-4"},
            timeout=5,
        )
        session._log_debug_response(
            _response("http://example.com/live/seg_1.bin", 206, b"hello", {"Content-Length": "5"})
        )

    assert "secret" not in caplog.text
    assert "[REDACTED]" in caplog.text
    assert "bytes=0-4" in caplog.text
    assert "TIMEOUT=5" in caplog.text
    assert "Content-Length: 5" in caplog.text
