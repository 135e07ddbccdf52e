"""
Parts of a multipart/form-data body.

A part is either a plain form field (``FormPart``) or a file attachment
(``FilePart``). Both expose ``name``, ``mime_type`` and ``get_data()``.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FormPart:
    """A named text field."""

    name: str
    value: str

    @property
    def mime_type(self) -> str:
        return ""

    def get_data(self) -> bytes:
        return self.value.encode("utf-8")


@dataclass(frozen=True)
class FilePart:
    """
    A named file attachment.

    Args:
        name: Form field name.
        mime_type: MIME type sent in the part headers, e.g. "image/png".
        filename: Filename reported to the server (may be None or empty).
        data: File content, embedded verbatim.
    """

    name: str
    mime_type: str
    filename: str | None
    data: bytes

    def get_data(self) -> bytes:
        return self.data


Part = FormPart | FilePart
