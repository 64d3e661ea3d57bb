"""
Shared fixtures: an in-memory stand-in for the remote servers and archive builders.
No test performs real network I/O.
"""
import io
import tarfile
import zipfile
from typing import Dict, List

import pytest
import requests
from urllib3.exceptions import ProtocolError

from ghddl_data.acquisition.target import AcquisitionTarget


class FakeRaw:
    """Mimics the urllib3 response behind `Response.raw`."""

    def __init__(self, body: bytes, fail_after: int = None):
        self.body = body
        self.fail_after = fail_after
        self.decode_requests = []

    def stream(self, amt=2 ** 16, decode_content=None):
        self.decode_requests.append(decode_content)
        for offset in range(0, len(self.body), amt):
            if self.fail_after is not None and offset >= self.fail_after:
                raise ProtocolError("Connection broken: connection reset by peer")
            yield self.body[offset:offset + amt]


class FakeResponse:
    """Mimics the parts of `requests.Response` used by the fetcher."""

    def __init__(self, body: bytes = b"", status_code: int = 200, headers: Dict[str, str] = None,
                 fail_after: int = None):
        self.status_code = status_code
        self.headers = {"content-length": str(len(body))} if headers is None else headers
        self.raw = FakeRaw(body, fail_after)

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeServer:
    """Serves canned responses by URL and records every request."""

    def __init__(self):
        self.routes: Dict[str, object] = {}
        self.calls: List[dict] = []
        self.on_request = None

    def add(self, url: str, response):
        """`response` is a FakeResponse, raw bytes, or an exception instance to raise."""
        self.routes[url] = response

    def get(self, url, stream=False, timeout=None, **kwargs):
        self.calls.append({"url": url, "stream": stream, "timeout": timeout})
        if self.on_request:
            self.on_request(url)
        if url not in self.routes:
            return FakeResponse(status_code=404)
        response = self.routes[url]
        if isinstance(response, Exception):
            raise response
        if isinstance(response, bytes):
            return FakeResponse(response)
        return response


@pytest.fixture
def fake_server(monkeypatch):
    server = FakeServer()
    monkeypatch.setattr(requests, "get", server.get)
    return server


def make_tar_gz(files: Dict[str, bytes]) -> bytes:
    """Builds a gzip-compressed tar with the given member names and contents."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tf:
        for name, data in files.items():
            info = tarfile.TarInfo(name=name)
            info.size = len(data)
            tf.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def make_zip(files: Dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, data in files.items():
            zf.writestr(name, data)
    return buffer.getvalue()


@pytest.fixture
def review_archive() -> bytes:
    return make_tar_gz({
        "aclImdb/README": b"Large Movie Review Dataset v1.0\n",
        "aclImdb/train/pos/0_9.txt": b"A wonderful film.",
        "aclImdb/train/neg/0_3.txt": b"Dreadful.",
    })


@pytest.fixture
def review_target(tmp_path) -> AcquisitionTarget:
    base = tmp_path / "data" / "dl4j_w2vSentiment"
    return AcquisitionTarget(
        name="reviews",
        remote_url="http://example.com/aclImdb_v1.tar.gz",
        archive_path=base / "aclImdb_v1.tar.gz",
        extracted_path=base / "aclImdb",
        description="review corpus",
        size_hint="80MB",
    )


@pytest.fixture
def embeddings_target(tmp_path) -> AcquisitionTarget:
    return AcquisitionTarget(
        name="embeddings",
        remote_url="https://example.com/vectors.bin.gz",
        archive_path=tmp_path / "data" / "vectors.bin.gz",
    )
