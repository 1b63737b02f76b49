"""ASGI response sending — translates sealed responses to ASGI messages.

``Response`` bodies are sent in one message with a Content-Length;
``StreamingResponse`` chunks are sent as they are produced.
"""

import logging
from collections.abc import AsyncIterable

from crooner._internal.asgi import Send
from crooner.http.response import AnyResponse, Response, StreamingResponse

logger = logging.getLogger("crooner.server")


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


def _raw_headers(response: AnyResponse) -> list[tuple[bytes, bytes]]:
    raw: list[tuple[bytes, bytes]] = [
        (b"content-type", response.content_type.encode("latin-1")),
    ]
    raw.extend(
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in response.headers
    )
    raw.extend(
        (b"set-cookie", cookie.to_header_value().encode("latin-1")) for cookie in response.cookies
    )
    return raw


def _encode_chunk(chunk: str | bytes) -> bytes:
    return chunk.encode("utf-8") if isinstance(chunk, str) else chunk


async def send_response(response: Response, send: Send, *, head: bool = False) -> None:
    """Translate a sealed Response into ASGI send() calls.

    A *head* response keeps the Content-Length of the body it omits.
    """
    raw_headers = _raw_headers(response)
    body = response.body_bytes if _body_allowed(response.status) else b""
    if response.header("content-length") is None:
        raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))
    if head:
        body = b""

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send({"type": "http.response.body", "body": body})


async def send_streaming_response(
    response: StreamingResponse, send: Send, *, head: bool = False
) -> None:
    """Send a streaming response chunk by chunk.

    Headers go out immediately. A failure mid-stream can no longer
    change the status, so it is logged and the body is closed.
    """
    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": _raw_headers(response),
        }
    )

    async def emit(chunk: str | bytes) -> None:
        if chunk:
            await send({"type": "http.response.body", "body": _encode_chunk(chunk), "more_body": True})

    if not head and _body_allowed(response.status):
        try:
            if isinstance(response.chunks, AsyncIterable):
                async for chunk in response.chunks:
                    await emit(chunk)
            else:
                for chunk in response.chunks:
                    await emit(chunk)
        except Exception:
            logger.exception("error while streaming response body")

    await send({"type": "http.response.body", "body": b"", "more_body": False})


async def send_any(response: AnyResponse, send: Send, *, head: bool = False) -> None:
    """Send either kind of sealed response; *head* sends headers only."""
    if isinstance(response, StreamingResponse):
        await send_streaming_response(response, send, head=head)
    else:
        await send_response(response, send, head=head)
