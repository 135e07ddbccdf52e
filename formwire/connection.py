from __future__ import annotations

import logging
import socket
import ssl
import time
from collections.abc import Iterable

from .compression import decode_body
from .errors import ConnectionError, ProtocolError, TLSNegotiationError
from .models import Response

logger = logging.getLogger(__name__)


class Connection:
    """
    Single TCP/TLS connection that can be reused for multiple HTTP/1.1 requests.
    """

    def __init__(
        self,
        host: str,
        port: int,
        scheme: str,
        timeout: float = 10.0,
        verify: bool = True,
    ) -> None:
        self.host = host
        self.port = port
        self.scheme = scheme
        self.timeout = timeout
        self.verify = verify
        self.sock: socket.socket | ssl.SSLSocket | None = None
        self.closed = True

    def connect(self) -> None:
        raw = self._open_tcp()

        if self.scheme == "https":
            context = ssl.create_default_context()
            if not self.verify:
                context.check_hostname = False
                context.verify_mode = ssl.CERT_NONE
            context.set_alpn_protocols(["http/1.1"])
            try:
                self.sock = context.wrap_socket(raw, server_hostname=self.host)
            except ssl.SSLError as exc:
                raw.close()
                raise TLSNegotiationError(f"TLS handshake failed: {exc}") from exc
        else:
            self.sock = raw

        self.sock.settimeout(self.timeout)
        self.closed = False
        logger.debug("Connected to %s://%s:%d", self.scheme, self.host, self.port)

    def request(
        self,
        method: str,
        path: str,
        headers: Iterable[tuple[str, str]],
        body: bytes | None = None,
    ) -> Response:
        if self.closed or self.sock is None:
            self.connect()

        started = time.monotonic()
        request_bytes = self._build_request(method, path, headers, body)
        try:
            assert self.sock is not None
            self.sock.sendall(request_bytes)
        except OSError as exc:
            self.close()
            raise ConnectionError(f"Send failed: {exc}") from exc

        try:
            status_code, reason, version, raw_headers, raw_body = self._read_response(method)
        except OSError as exc:
            self.close()
            if isinstance(exc, TimeoutError):
                raise
            raise ConnectionError(f"Receive failed: {exc}") from exc
        except ProtocolError:
            self.close()
            raise

        elapsed_ms = int((time.monotonic() - started) * 1000)
        header_map = {k.lower(): v for k, v in raw_headers}
        response = Response(
            status_code,
            reason,
            version,
            raw_headers,
            decode_body(raw_body, header_map.get("content-encoding", "")),
            network_time_ms=elapsed_ms,
        )
        # Respect Connection: close
        if header_map.get("connection", "").lower() == "close":
            self.close()
        return response

    def _build_request(
        self,
        method: str,
        path: str,
        headers: Iterable[tuple[str, str]],
        body: bytes | None,
    ) -> bytes:
        lines = [f"{method} {path} HTTP/1.1\r\n".encode("ascii")]
        for name, value in headers:
            lines.append(f"{name}: {value}\r\n".encode("latin-1"))
        lines.append(b"\r\n")
        if body:
            lines.append(body)
        return b"".join(lines)

    def _readline(self) -> bytes:
        assert self.sock is not None
        buf = bytearray()
        while True:
            ch = self.sock.recv(1)
            if not ch:
                break
            buf.extend(ch)
            if buf.endswith(b"\r\n"):
                break
        return bytes(buf)

    def _read_exact(self, n: int) -> bytes:
        assert self.sock is not None
        remaining = n
        chunks: list[bytes] = []
        while remaining > 0:
            chunk = self.sock.recv(remaining)
            if not chunk:
                raise ProtocolError("Unexpected EOF while reading body")
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def _read_response(self, method: str) -> tuple[int, str, str, list[tuple[str, str]], bytes]:
        status_line = self._readline()
        if not status_line:
            raise ProtocolError("Empty response")
        try:
            # e.g., HTTP/1.1 200 OK
            parts = status_line.decode("latin-1").strip().split(" ", 2)
            version = parts[0].split("/", 1)[1]
            status_code = int(parts[1])
            reason = parts[2] if len(parts) > 2 else ""
        except (IndexError, ValueError) as exc:
            raise ProtocolError(f"Malformed status line: {status_line!r}") from exc

        headers: list[tuple[str, str]] = []
        while True:
            line = self._readline()
            if line in (b"\r\n", b"\n", b""):
                break
            try:
                name, value = line.split(b":", 1)
            except ValueError as exc:
                raise ProtocolError(f"Malformed header line: {line!r}") from exc
            headers.append(
                (name.decode("latin-1").strip(), value.decode("latin-1").strip())
            )

        header_map = {k.lower(): v for k, v in headers}
        if method.upper() == "HEAD" or status_code in (204, 304) or 100 <= status_code < 200:
            body = b""
        elif "chunked" in header_map.get("transfer-encoding", "").lower():
            body = self._read_chunked_body()
        elif "content-length" in header_map:
            try:
                length = int(header_map["content-length"])
            except ValueError as exc:
                raise ProtocolError("Invalid Content-Length") from exc
            body = self._read_exact(length)
        else:
            body = self._read_until_close()
        return status_code, reason, version, headers, body

    def _read_until_close(self) -> bytes:
        assert self.sock is not None
        chunks: list[bytes] = []
        while True:
            data = self.sock.recv(4096)
            if not data:
                break
            chunks.append(data)
        self.close()
        return b"".join(chunks)

    def _read_chunked_body(self) -> bytes:
        chunks: list[bytes] = []
        while True:
            line = self._readline()
            if not line:
                raise ProtocolError("Unexpected EOF while reading chunked body")
            try:
                size = int(line.split(b";", 1)[0].strip(), 16)
            except ValueError as exc:
                raise ProtocolError(f"Invalid chunk size line: {line!r}") from exc
            if size == 0:
                # Skip trailers up to the terminating blank line
                while self._readline() not in (b"\r\n", b"\n", b""):
                    pass
                break
            chunks.append(self._read_exact(size))
            # Discard CRLF
            self._read_exact(2)
        return b"".join(chunks)

    def close(self) -> None:
        if self.sock:
            try:
                self.sock.close()
            finally:
                self.sock = None
        self.closed = True

    def _open_tcp(self) -> socket.socket:
        try:
            return socket.create_connection(
                (self.host, self.port), timeout=self.timeout
            )
        except OSError as exc:
            raise ConnectionError(f"TCP connection failed: {exc}") from exc
