from __future__ import annotations

import uuid
from collections.abc import Mapping

from .errors import BodyBuildError
from .parts import FilePart, FormPart, Part

CRLF = b"\r\n"

# Characters that would end a quoted parameter or a header line early.
_UNSAFE_HEADER_CHARS = ('"', "\r", "\n", "\x00")


def _check_header_value(kind: str, value: str) -> str:
    for ch in _UNSAFE_HEADER_CHARS:
        if ch in value:
            raise BodyBuildError(f"{kind} {value!r} contains forbidden character {ch!r}")
    return value


def _encode_field_headers(part: FormPart) -> bytes:
    name = _check_header_value("Part name", part.name)
    return f'Content-Disposition: form-data; name="{name}"\r\n\r\n'.encode()


def _encode_file_headers(part: FilePart) -> bytes:
    name = _check_header_value("Part name", part.name)
    filename = _check_header_value("Filename", part.filename or "")
    mime_type = _check_header_value("MIME type", part.mime_type or "")
    return (
        f'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\n'
        f"Content-type: {mime_type}\r\n\r\n"
    ).encode()


class MultipartBody:
    """
    Ordered collection of parts serialized as a multipart/form-data body.

    The boundary is fixed when the body is created, so ``build()`` returns
    the same bytes every time it is called on an unmodified body.
    """

    def __init__(self, boundary: str | None = None) -> None:
        self.boundary = boundary or uuid.uuid4().hex
        self._parts: list[Part] = []

    @property
    def parts(self) -> tuple[Part, ...]:
        return tuple(self._parts)

    def __len__(self) -> int:
        return len(self._parts)

    def add_part(self, part: Part | None) -> None:
        if part is not None:
            self._parts.append(part)

    @property
    def content_type(self) -> str:
        return f"multipart/form-data;boundary={self.boundary}"

    def get_content_type(self) -> str:
        return self.content_type

    def build(self) -> bytes:
        """
        Serialize all parts in insertion order.

        Raises:
            BodyBuildError: if a part cannot be encoded. No partial body is
                ever returned.
        """
        delimiter = f"--{self.boundary}\r\n".encode("ascii")
        chunks: list[bytes] = []
        try:
            for part in self._parts:
                chunks.append(delimiter)
                if isinstance(part, FilePart):
                    chunks.append(_encode_file_headers(part))
                elif isinstance(part, FormPart):
                    chunks.append(_encode_field_headers(part))
                else:
                    raise BodyBuildError(f"Unsupported part type: {type(part).__name__}")
                chunks.append(bytes(memoryview(part.get_data())))
                chunks.append(CRLF)
            chunks.append(f"--{self.boundary}--\r\n".encode("ascii"))
        except BodyBuildError:
            raise
        except Exception as exc:
            raise BodyBuildError(f"Failed to serialize multipart body: {exc}") from exc
        return b"".join(chunks)


def build_multipart(
    data: Mapping[str, str] | None,
    files: Mapping[str, bytes | tuple[str, bytes, str | None]] | None = None,
) -> tuple[str, bytes]:
    """
    Build a multipart/form-data body from plain mappings.

    Form fields come first, then files, each in mapping order. ``files``
    values can be bytes or (filename, bytes, content_type|None); a bare bytes
    value uses the field name as filename.

    Returns:
        (content_type, body)
    """
    body = MultipartBody()
    if data:
        for name, value in data.items():
            body.add_part(FormPart(name, value))
    for field, val in (files or {}).items():
        if isinstance(val, (bytes, bytearray)):
            body.add_part(FilePart(field, "application/octet-stream", field, bytes(val)))
        else:
            filename, content, ctype = val
            body.add_part(FilePart(field, ctype or "application/octet-stream", filename, content))
    return body.content_type, body.build()
