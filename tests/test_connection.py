"""Tests for formwire.connection module."""

import gzip
import ssl
from unittest.mock import MagicMock, patch

import pytest

from formwire.connection import Connection
from formwire.errors import ConnectionError, ProtocolError, TLSNegotiationError


def _connected(fake_socket, payload: bytes) -> tuple[Connection, object]:
    sock = fake_socket(payload)
    conn = Connection("example.com", 80, "http")
    conn.sock = sock
    conn.closed = False
    return conn, sock


class TestConnectionInit:
    """Tests for Connection initialization."""

    def test_init_defaults(self):
        """Test Connection starts closed with default settings."""
        conn = Connection(host="example.com", port=80, scheme="http")
        assert conn.timeout == 10.0
        assert conn.verify is True
        assert conn.sock is None
        assert conn.closed is True


class TestConnectionConnect:
    """Tests for Connection.connect."""

    @patch("formwire.connection.socket.create_connection")
    def test_connect_http(self, mock_create_conn):
        """Test plain HTTP connection."""
        mock_sock = MagicMock()
        mock_create_conn.return_value = mock_sock

        conn = Connection("example.com", 80, "http", timeout=5.0)
        conn.connect()

        mock_create_conn.assert_called_once_with(("example.com", 80), timeout=5.0)
        mock_sock.settimeout.assert_called_once_with(5.0)
        assert conn.sock is mock_sock
        assert conn.closed is False

    @patch("formwire.connection.ssl.create_default_context")
    @patch("formwire.connection.socket.create_connection")
    def test_connect_https(self, mock_create_conn, mock_ssl_ctx):
        """Test HTTPS wraps the socket with SNI."""
        mock_ctx = MagicMock()
        mock_ssl_ctx.return_value = mock_ctx

        conn = Connection("example.com", 443, "https")
        conn.connect()

        mock_ctx.wrap_socket.assert_called_once_with(
            mock_create_conn.return_value, server_hostname="example.com"
        )
        assert conn.sock is mock_ctx.wrap_socket.return_value

    @patch("formwire.connection.ssl.create_default_context")
    @patch("formwire.connection.socket.create_connection")
    def test_connect_https_no_verify(self, _mock_create_conn, mock_ssl_ctx):
        """Test verify=False disables certificate checks."""
        mock_ctx = MagicMock()
        mock_ssl_ctx.return_value = mock_ctx

        Connection("example.com", 443, "https", verify=False).connect()

        assert mock_ctx.check_hostname is False
        assert mock_ctx.verify_mode == ssl.CERT_NONE

    @patch("formwire.connection.ssl.create_default_context")
    @patch("formwire.connection.socket.create_connection")
    def test_tls_failure(self, mock_create_conn, mock_ssl_ctx):
        """Test handshake errors raise TLSNegotiationError and close the socket."""
        mock_ctx = MagicMock()
        mock_ctx.wrap_socket.side_effect = ssl.SSLError("handshake")
        mock_ssl_ctx.return_value = mock_ctx

        with pytest.raises(TLSNegotiationError):
            Connection("example.com", 443, "https").connect()
        mock_create_conn.return_value.close.assert_called_once()

    @patch("formwire.connection.socket.create_connection", side_effect=OSError("refused"))
    def test_tcp_failure(self, _mock_create_conn):
        """Test TCP errors raise ConnectionError."""
        with pytest.raises(ConnectionError, match="refused"):
            Connection("example.com", 80, "http").connect()


class TestRequest:
    """Tests for Connection.request."""

    def test_writes_request_and_body(self, fake_socket):
        """Test the request line, headers and body are sent."""
        conn, sock = _connected(
            fake_socket, b"HTTP/1.1 201 Created\r\nContent-Length: 2\r\n\r\nok"
        )
        response = conn.request("POST", "/upload", [("Host", "example.com")], b"BODY")

        assert bytes(sock.sent) == b"POST /upload HTTP/1.1\r\nHost: example.com\r\n\r\nBODY"
        assert response.status_code == 201
        assert response.reason == "Created"
        assert response.http_version == "1.1"
        assert response.content == b"ok"
        assert not conn.closed

    def test_chunked_body(self, fake_socket):
        """Test chunked transfer encoding is reassembled."""
        conn, _ = _connected(
            fake_socket,
            b"HTTP/1.1 200 OK\r\nTransfer-Encoding: chunked\r\n\r\n"
            b"5\r\nhello\r\n6;ext=1\r\n world\r\n0\r\nX-Trailer: 1\r\n\r\n",
        )
        assert conn.request("GET", "/", []).content == b"hello world"

    def test_read_until_close(self, fake_socket):
        """Test bodies without length are read until EOF."""
        conn, _ = _connected(fake_socket, b"HTTP/1.0 200 OK\r\n\r\nstreamed")
        response = conn.request("GET", "/", [])
        assert response.content == b"streamed"
        assert conn.closed

    def test_no_body_for_304(self, fake_socket):
        """Test 304 responses have no body even with Content-Length."""
        conn, _ = _connected(fake_socket, b"HTTP/1.1 304 Not Modified\r\nContent-Length: 10\r\n\r\n")
        response = conn.request("GET", "/", [])
        assert response.not_modified
        assert response.content == b""

    def test_gzip_decoded(self, fake_socket):
        """Test compressed bodies are decoded."""
        compressed = gzip.compress(b"zipped")
        conn, _ = _connected(
            fake_socket,
            b"HTTP/1.1 200 OK\r\nContent-Encoding: gzip\r\nContent-Length: "
            + str(len(compressed)).encode() + b"\r\n\r\n" + compressed,
        )
        assert conn.request("GET", "/", []).content == b"zipped"

    def test_connection_close_header(self, fake_socket):
        """Test Connection: close closes the socket."""
        conn, sock = _connected(
            fake_socket, b"HTTP/1.1 200 OK\r\nConnection: close\r\nContent-Length: 0\r\n\r\n"
        )
        conn.request("GET", "/", [])
        assert conn.closed
        assert sock.closed

    @pytest.mark.parametrize(
        "payload,match",
        [
            (b"", "Empty response"),
            (b"garbage\r\n\r\n", "Malformed status line"),
            (b"HTTP/1.1 200 OK\r\nno-colon\r\n\r\n", "Malformed header line"),
            (b"HTTP/1.1 200 OK\r\nContent-Length: x\r\n\r\n", "Invalid Content-Length"),
            (b"HTTP/1.1 200 OK\r\nContent-Length: 10\r\n\r\nshort", "Unexpected EOF"),
            (b"HTTP/1.1 200 OK\r\nTransfer-Encoding: chunked\r\n\r\nzz\r\n", "Invalid chunk size"),
        ],
    )
    def test_protocol_errors(self, fake_socket, payload, match):
        """Test malformed responses raise ProtocolError and close."""
        conn, _ = _connected(fake_socket, payload)
        with pytest.raises(ProtocolError, match=match):
            conn.request("GET", "/", [])
        assert conn.closed

    def test_send_failure(self):
        """Test send errors raise ConnectionError."""
        conn = Connection("example.com", 80, "http")
        conn.sock = MagicMock()
        conn.sock.sendall.side_effect = OSError("broken pipe")
        conn.closed = False
        with pytest.raises(ConnectionError, match="Send failed"):
            conn.request("GET", "/", [])
        assert conn.closed

    def test_receive_timeout_propagates(self):
        """Test socket timeouts surface as TimeoutError."""
        conn = Connection("example.com", 80, "http")
        conn.sock = MagicMock()
        conn.sock.recv.side_effect = TimeoutError("timed out")
        conn.closed = False
        with pytest.raises(TimeoutError):
            conn.request("GET", "/", [])
        assert conn.closed

    @patch("formwire.connection.socket.create_connection")
    def test_connects_lazily(self, mock_create_conn, fake_socket):
        """Test request opens the connection when needed."""
        mock_create_conn.return_value = fake_socket(b"HTTP/1.1 204 No Content\r\n\r\n")
        conn = Connection("example.com", 80, "http")
        assert conn.request("DELETE", "/", []).status_code == 204
        mock_create_conn.assert_called_once()


def test_close_is_idempotent(fake_socket):
    """Test close can be called repeatedly."""
    conn, sock = _connected(fake_socket, b"")
    conn.close()
    conn.close()
    assert sock.closed
    assert conn.sock is None
