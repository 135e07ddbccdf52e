from __future__ import annotations

from collections.abc import Iterable, Mapping


def _sanitize_header(name: str, value: str) -> tuple[str, str]:
    """
    Strip CR, LF and NUL from a header name and value so caller-supplied
    headers cannot inject extra header lines.
    """
    clean_name = name.replace("\r", "").replace("\n", "").replace("\x00", "")
    clean_value = value.replace("\r", "").replace("\n", "").replace("\x00", "")
    return clean_name, clean_value


def merge_headers(
    default_headers: Iterable[tuple[str, str]],
    *overrides: Mapping[str, str] | None,
) -> list[tuple[str, str]]:
    """
    Merge header sources case-insensitively, later sources winning.

    Defaults keep their position; new names are appended in the order they
    first appear.
    """
    merged: dict[str, tuple[str, str]] = {}
    for name, value in default_headers:
        name, value = _sanitize_header(name, value)
        merged[name.lower()] = (name, value)
    for source in overrides:
        if not source:
            continue
        for name, value in source.items():
            name, value = _sanitize_header(name, str(value))
            merged[name.lower()] = (name, value)
    return list(merged.values())
