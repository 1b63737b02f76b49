"""Immutable HTTP request.

Frozen metadata with async body access. The dispatcher reads the merged
query and form parameters once, before any route is tried.
"""

from collections.abc import AsyncGenerator, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qs, quote

from crooner._internal.asgi import Receive
from crooner.http.forms import FORM_CONTENT_TYPES, FormData, media_type, parse_form_data
from crooner.http.headers import Headers


def parse_cookies(header: str) -> dict[str, str]:
    """Parse a ``Cookie`` header value into a name-value dict."""
    cookies: dict[str, str] = {}
    for pair in header.split(";"):
        key, sep, value = pair.strip().partition("=")
        if sep:
            cookies[key.strip()] = value.strip()
    return cookies


class QueryParams(Mapping[str, str]):
    """Immutable query string parameters, first value per key."""

    __slots__ = ("_data", "_raw")

    def __init__(self, query_string: bytes = b"") -> None:
        object.__setattr__(self, "_raw", query_string)
        parsed = parse_qs(query_string.decode("latin-1"), keep_blank_values=True)
        object.__setattr__(self, "_data", parsed)

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"QueryParams({dict(self)!r})"

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._data.get(key, []))

    @property
    def raw(self) -> bytes:
        return self._raw


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, path, headers, etc.) is frozen at creation.
    ``path`` is percent-decoded; ``raw_path`` is the path as received,
    which is what route patterns are matched against.
    Body is accessed asynchronously via ``.body()``, ``.form()`` and
    ``.params()``; results are cached so middleware and the dispatcher
    can both read them.
    """

    method: str
    path: str
    raw_path: str
    headers: Headers
    query: QueryParams
    http_version: str
    server: tuple[str, int] | None
    client: tuple[str, int] | None
    cookies: Mapping[str, str]

    # Private: ASGI receive callable for body streaming
    _receive: Receive

    # Private: mutable cache for body and parsed form data
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    @property
    def host(self) -> str:
        """Host name without port, from the Host header or the server address."""
        value = self.headers.get("host")
        if value:
            if value.startswith("["):
                return value[: value.find("]") + 1]
            return value.rsplit(":", 1)[0] if value.count(":") == 1 else value
        if self.server:
            return self.server[0]
        return ""

    @property
    def user_agent(self) -> str | None:
        return self.headers.get("user-agent")

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def is_get(self) -> bool:
        return self.method == "GET"

    @property
    def is_head(self) -> bool:
        return self.method == "HEAD"

    @property
    def url(self) -> str:
        """Full request path including the query string."""
        if self.query.raw:
            return f"{self.path}?{self.query.raw.decode('latin-1')}"
        return self.path

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body (cached)."""
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def form(self) -> FormData:
        """Parse the body as form data (cached).

        Non-form content types yield an empty ``FormData``.
        """
        if "_form" in self._cache:
            return self._cache["_form"]
        if media_type(self.content_type) in FORM_CONTENT_TYPES:
            result = parse_form_data(await self.body(), self.content_type or "")
        else:
            result = FormData({})
        self._cache["_form"] = result
        return result

    async def params(self) -> dict[str, str]:
        """Query and form parameters merged, form values winning.

        Returns a fresh dict on each call.
        """
        merged = dict(self.query)
        merged.update(await self.form())
        return merged

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: Mapping[str, Any], receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        headers = Headers(tuple(scope.get("headers", ())))
        server = scope.get("server")
        client = scope.get("client")
        raw = scope.get("raw_path")
        raw_path = raw.decode("latin-1").split("?", 1)[0] if raw else quote(scope["path"])
        return cls(
            method=scope["method"],
            path=scope["path"],
            raw_path=raw_path,
            headers=headers,
            query=QueryParams(scope.get("query_string", b"")),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            cookies=parse_cookies(headers.get("cookie", "")),
            _receive=receive,
        )
