"""Access logging middleware.

One line per request to the ``crooner.access`` logger, in Common Log
Format with the elapsed time appended::

    127.0.0.1 - - [18/Oct/2026:12:00:00 +0000] "GET /hello HTTP/1.1" 200 11 0.0012
"""

import logging
import time
from datetime import UTC, datetime

from crooner.http.request import Request
from crooner.http.response import AnyResponse, Response
from crooner.middleware.protocol import Next

logger = logging.getLogger("crooner.access")


def _size(response: AnyResponse) -> str:
    if isinstance(response, Response):
        return str(len(response.body_bytes))
    return response.header("content-length") or "-"


def format_line(request: Request, response: AnyResponse, elapsed: float) -> str:
    client = request.client[0] if request.client else "-"
    stamp = datetime.now(UTC).strftime("%d/%b/%Y:%H:%M:%S %z")
    return (
        f'{client} - - [{stamp}] "{request.method} {request.url} HTTP/{request.http_version}" '
        f"{response.status} {_size(response)} {elapsed:.4f}"
    )


async def access_log(request: Request, next: Next) -> AnyResponse:
    start = time.perf_counter()
    response = await next(request)
    logger.info("%s", format_line(request, response, time.perf_counter() - start))
    return response
