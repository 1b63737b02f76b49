"""HTTP responses.

``MutableResponse`` is the response under construction: handlers,
filters and recovery handlers set its status, headers and body while a
request is dispatched. ``finish()`` seals it into an immutable
``Response`` (body in memory) or ``StreamingResponse`` (body produced
chunk by chunk), which is what middleware and the ASGI sender see.
"""

from collections.abc import AsyncIterator, Callable, Iterable, Mapping
from dataclasses import dataclass, replace
from typing import Any

from crooner._internal.invoke import invoke
from crooner.http.headers import MutableHeaders

DEFAULT_CONTENT_TYPE = "text/html; charset=utf-8"

type Chunk = str | bytes
type Body = list[Chunk] | Iterable[Chunk] | AsyncIterator[Chunk] | Callable[[], Any]


@dataclass(frozen=True, slots=True)
class SetCookie:
    """A ``Set-Cookie`` directive attached to a response."""

    name: str
    value: str
    max_age: int | None = None
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str = "lax"

    def to_header_value(self) -> str:
        """Serialize to a ``Set-Cookie`` header value string."""
        parts = [f"{self.name}={self.value}"]
        if self.max_age is not None:
            parts.append(f"Max-Age={self.max_age}")
        if self.path:
            parts.append(f"Path={self.path}")
        if self.domain:
            parts.append(f"Domain={self.domain}")
        if self.secure:
            parts.append("Secure")
        if self.httponly:
            parts.append("HttpOnly")
        if self.samesite:
            parts.append(f"SameSite={self.samesite}")
        return "; ".join(parts)


def _find_header(headers: tuple[tuple[str, str], ...], name: str) -> str | None:
    lower = name.lower()
    for key, value in headers:
        if key.lower() == lower:
            return value
    return None


@dataclass(frozen=True, slots=True)
class Response:
    """A sealed HTTP response. Each ``.with_*()`` call returns a new one."""

    body: str | bytes = ""
    status: int = 200
    content_type: str = DEFAULT_CONTENT_TYPE
    headers: tuple[tuple[str, str], ...] = ()
    cookies: tuple[SetCookie, ...] = ()

    def with_status(self, status: int) -> Response:
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> Response:
        return replace(self, headers=(*self.headers, *headers.items()))

    def with_cookie(self, cookie: SetCookie) -> Response:
        return replace(self, cookies=(*self.cookies, cookie))

    def header(self, name: str) -> str | None:
        """First value of header *name* (case-insensitive), or ``None``."""
        if name.lower() == "content-type":
            return self.content_type
        return _find_header(self.headers, name)

    @property
    def body_bytes(self) -> bytes:
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body


@dataclass(frozen=True, slots=True)
class StreamingResponse:
    """A sealed response whose body is sent chunk by chunk.

    Supports the same ``.with_*()`` API as ``Response`` so middleware
    can adjust status and headers without knowing the body is streamed.
    """

    chunks: Iterable[Chunk] | AsyncIterator[Chunk]
    status: int = 200
    content_type: str = DEFAULT_CONTENT_TYPE
    headers: tuple[tuple[str, str], ...] = ()
    cookies: tuple[SetCookie, ...] = ()

    def with_status(self, status: int) -> StreamingResponse:
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> StreamingResponse:
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> StreamingResponse:
        return replace(self, headers=(*self.headers, *headers.items()))

    def with_cookie(self, cookie: SetCookie) -> StreamingResponse:
        return replace(self, cookies=(*self.cookies, cookie))

    def header(self, name: str) -> str | None:
        if name.lower() == "content-type":
            return self.content_type
        return _find_header(self.headers, name)


type AnyResponse = Response | StreamingResponse


async def _deferred(producer: Callable[[], Any]) -> AsyncIterator[Chunk]:
    yield await invoke(producer)


class MutableResponse:
    """The response being built for the current request.

    ``body`` is always one of: a list of chunks, a (sync or async)
    iterable of chunks, or a zero-argument callable whose result is the
    single chunk, evaluated only when the body is sent.
    """

    __slots__ = ("_body", "content_type", "cookies", "headers", "status")

    def __init__(self) -> None:
        self.status: int = 200
        self.headers: MutableHeaders = MutableHeaders()
        self.content_type: str = DEFAULT_CONTENT_TYPE
        self.cookies: list[SetCookie] = []
        self._body: Body = []

    @property
    def body(self) -> Body:
        return self._body

    @body.setter
    def body(self, value: Any) -> None:
        if value is None:
            self._body = []
        elif isinstance(value, (str, bytes)):
            self._body = [value]
        elif isinstance(value, (list, tuple)):
            self._body = list(value)
        else:
            self._body = value

    @property
    def is_streaming(self) -> bool:
        return not isinstance(self._body, list)

    def set_cookie(self, name: str, value: str, **options: Any) -> None:
        self.cookies.append(SetCookie(name=name, value=value, **options))

    def delete_cookie(self, name: str, path: str = "/") -> None:
        self.cookies.append(SetCookie(name=name, value="", max_age=0, path=path))

    def finish(self) -> AnyResponse:
        """Seal into the wire-ready immutable representation."""
        headers = self.headers.copy()
        content_type = headers.pop("Content-Type", None) or self.content_type
        common = {
            "status": self.status,
            "content_type": content_type,
            "headers": headers.to_tuple(),
            "cookies": tuple(self.cookies),
        }
        body = self._body
        if isinstance(body, list):
            if all(isinstance(chunk, str) for chunk in body):
                return Response(body="".join(body), **common)
            joined = b"".join(
                chunk.encode("utf-8") if isinstance(chunk, str) else chunk for chunk in body
            )
            return Response(body=joined, **common)
        if callable(body):
            return StreamingResponse(chunks=_deferred(body), **common)
        return StreamingResponse(chunks=body, **common)
