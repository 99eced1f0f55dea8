from __future__ import annotations

from urllib.parse import quote

_MAX_FILENAME_LENGTH = 150


def sanitize_filename(filename: str | None, *, fallback: str = "download") -> str:
    """Reduce a client supplied name to a bare, header-safe file name."""
    v = (filename or "").strip()
    v = v.replace("\\", "/").rsplit("/", 1)[-1]
    v = "".join(ch for ch in v if ch not in "\r\n\x00")
    if v in {"", ".", ".."}:
        v = fallback
    return v[:_MAX_FILENAME_LENGTH]


def build_content_disposition(filename: str, *, inline: bool = False) -> str:
    """Content-Disposition with an ASCII `filename=` and an RFC 5987 `filename*=`."""
    name = sanitize_filename(filename)
    ascii_name = name.encode("ascii", errors="ignore").decode("ascii") or "download"
    ascii_name = ascii_name.replace('"', "'")
    disposition = "inline" if inline else "attachment"
    return f"{disposition}; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(name, safe='')}"
