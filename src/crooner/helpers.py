"""Request-scoped helpers for handlers, filters and recovery handlers.

Each helper works on the current request through ``get_context()``, so
handlers can call them without threading the context through::

    from crooner import App
    from crooner.helpers import redirect, status

    app = App()

    @app.post("/posts")
    def create():
        ...
        redirect("/posts")

Helpers that end the request (``redirect``, ``abort``, ``not_found``,
``send_file`` and the conditional GET helpers on a match) do so with
``halt()``, so nothing after them in the handler runs.
"""

import mimetypes
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import Any, NoReturn

from crooner.context import get_context
from crooner.control import halt
from crooner.http.files import guess_content_type, http_date, iter_file, parse_http_date
from crooner.http.headers import MutableHeaders
from crooner.http.response import Body

ETAG_STRENGTHS = ("strong", "weak")


def status(code: int | None = None) -> int:
    """Set the response status when *code* is given; return the current one."""
    response = get_context().response
    if code is not None:
        response.status = code
    return response.status


def body(value: Any = None) -> Body:
    """Set the response body when *value* is given; return the current one.

    A callable is not called now: its result becomes the body when the
    response is sent.
    """
    response = get_context().response
    if value is not None:
        response.body = value
    return response.body


def headers(values: Mapping[str, str] | None = None, **kwargs: str) -> MutableHeaders:
    """Merge *values* into the response headers and return them."""
    response_headers = get_context().response.headers
    if values:
        response_headers.update(values)
    if kwargs:
        response_headers.update(kwargs)
    return response_headers


def redirect(uri: str, *response: Any) -> NoReturn:
    """Halt with a 302 to *uri*; *response* is normalized like ``halt()``'s."""
    ctx = get_context()
    ctx.response.status = 302
    ctx.response.headers["Location"] = uri
    halt(*response)


def abort(code: int | str = 500, body: Any = None) -> NoReturn:
    """Halt with status *code*, setting *body* when given.

    ``abort("message")`` is ``abort(500, "message")``.
    """
    if isinstance(code, str):
        code, body = 500, code
    if body is not None:
        get_context().response.body = body
    halt(code)


def not_found(body: Any = None) -> NoReturn:
    abort(404, body)


def session() -> dict[str, Any]:
    return get_context().session


def content_type(type_: str, **params: str) -> str:
    """Set the response Content-Type.

    *type_* is a media type (``"text/plain"``) or an extension
    (``"json"`` or ``".json"``). Keyword arguments become parameters::

        content_type("html", charset="utf-8")  # text/html;charset=utf-8
    """
    if "/" in type_:
        mime = type_
    else:
        ext = type_ if type_.startswith(".") else f".{type_}"
        mime = mimetypes.types_map.get(ext.lower())
        if mime is None:
            msg = f"Unknown media type: {type_!r}"
            raise ValueError(msg)
    if params:
        mime += ";" + ";".join(f"{name}={value}" for name, value in params.items())
    get_context().response.content_type = mime
    return mime


def last_modified(time: datetime | float) -> None:
    """Set Last-Modified; halt with 304 if the client's copy is current.

    Compared to ``If-Modified-Since`` at whole-second resolution.
    """
    ctx = get_context()
    value = time if isinstance(time, datetime) else datetime.fromtimestamp(time).astimezone()
    ctx.response.headers["Last-Modified"] = http_date(value)
    since = parse_http_date(ctx.request.headers.get("if-modified-since"))
    if since is not None and int(value.timestamp()) <= since.timestamp():
        halt(304)


def etag(value: str, strength: str = "strong") -> None:
    """Set ETag; halt when ``If-None-Match`` names it.

    GET and HEAD requests halt with 304 Not Modified, other methods with
    412 Precondition Failed.
    """
    if strength not in ETAG_STRENGTHS:
        msg = f"etag strength must be 'strong' or 'weak', not {strength!r}"
        raise TypeError(msg)
    ctx = get_context()
    tag = f'"{value}"'
    if strength == "weak":
        tag = "W/" + tag
    ctx.response.headers["ETag"] = tag

    header = ctx.request.headers.get("if-none-match")
    if not header:
        return
    candidates = {item.strip() for item in header.split(",")}
    if tag in candidates or "*" in candidates:
        halt(304 if ctx.request.method in ("GET", "HEAD") else 412)


def send_file(
    path: str | Path,
    *,
    content_type: str | None = None,
    filename: str | None = None,
    chunk_size: int = 8192,
) -> NoReturn:
    """Halt, streaming the file at *path* as the body.

    Sets Content-Type (guessed from the name unless given),
    Content-Length and Last-Modified; answers a current
    ``If-Modified-Since`` with 304. With *filename* the file is sent as
    an attachment. A missing file is ``not_found()``.
    """
    file_path = Path(path)
    if not file_path.is_file():
        not_found()
    ctx = get_context()
    stat = file_path.stat()
    last_modified(stat.st_mtime)

    response = ctx.response
    response.content_type = content_type or guess_content_type(file_path)
    response.headers["Content-Length"] = str(stat.st_size)
    if filename is not None:
        response.headers["Content-Disposition"] = f'attachment; filename="{filename}"'
    halt(iter_file(file_path, chunk_size))

