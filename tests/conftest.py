"""Pytest configuration and fixtures."""

import pytest

from formwire.models import Response
from formwire.parts import FilePart, FormPart


class FakeSocket:
    """Socket stand-in that replays a canned server response."""

    def __init__(self, payload: bytes = b"") -> None:
        self.payload = payload
        self.sent = bytearray()
        self.closed = False
        self.timeout = None

    def sendall(self, data: bytes) -> None:
        self.sent.extend(data)

    def recv(self, n: int) -> bytes:
        chunk, self.payload = self.payload[:n], self.payload[n:]
        return chunk

    def settimeout(self, timeout) -> None:
        self.timeout = timeout

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_socket():
    """Factory for FakeSocket instances."""
    return FakeSocket


@pytest.fixture
def sample_response():
    """Create a sample Response object."""
    return Response(
        status_code=200,
        reason="OK",
        http_version="1.1",
        headers=[
            ("Content-Type", "application/json"),
            ("Content-Length", "13"),
        ],
        body=b'{"key":"val"}',
    )


@pytest.fixture
def form_part():
    return FormPart("field1", "value1")


@pytest.fixture
def file_part():
    return FilePart("file1", "text/plain", "a.txt", b"hi")
