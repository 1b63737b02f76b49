"""File bodies and HTTP dates.

Shared by ``send_file()`` and the static file middleware: both stream
files from disk in fixed-size chunks and answer conditional GETs from
the file's modification time.
"""

import email.utils
import mimetypes
from collections.abc import AsyncIterator
from datetime import UTC, datetime
from pathlib import Path

import anyio

CHUNK_SIZE = 8192
FALLBACK_CONTENT_TYPE = "application/octet-stream"


def http_date(value: datetime | float) -> str:
    """Format a datetime or POSIX timestamp as an RFC 7231 date."""
    if not isinstance(value, datetime):
        value = datetime.fromtimestamp(value, UTC)
    elif value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return email.utils.format_datetime(value.astimezone(UTC), usegmt=True)


def parse_http_date(value: str | None) -> datetime | None:
    """Parse an HTTP date header; ``None`` if absent or malformed."""
    if not value:
        return None
    try:
        parsed = email.utils.parsedate_to_datetime(value.split(";", 1)[0].strip())
    except (TypeError, ValueError, IndexError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def guess_content_type(path: str | Path) -> str:
    content_type, _ = mimetypes.guess_type(str(path))
    return content_type or FALLBACK_CONTENT_TYPE


def modified_since(path: Path, header: str | None) -> bool:
    """Whether *path* changed after the ``If-Modified-Since`` *header*.

    Comparison is at whole-second resolution, as HTTP dates are.
    """
    since = parse_http_date(header)
    if since is None:
        return True
    return int(path.stat().st_mtime) > since.timestamp()


async def iter_file(path: Path, chunk_size: int = CHUNK_SIZE) -> AsyncIterator[bytes]:
    """Read *path* chunk by chunk without blocking the event loop."""
    async with await anyio.open_file(path, "rb") as f:
        while chunk := await f.read(chunk_size):
            yield chunk
