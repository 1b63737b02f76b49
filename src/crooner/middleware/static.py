"""Static file serving middleware.

Files under the public directory are served for GET and HEAD before
any filter or route runs. Paths that don't name a regular file fall
through to the dispatcher.
"""

from pathlib import Path

from crooner.http.files import guess_content_type, http_date, iter_file, modified_since
from crooner.http.request import Request
from crooner.http.response import AnyResponse, Response, StreamingResponse
from crooner.middleware.protocol import Next


class StaticFiles:
    """Middleware that serves files from *directory*.

    Security: resolves symlinks and verifies the final path is within
    the configured directory to prevent path traversal. Anything that
    would escape it falls through like a missing file.

    Usage::

        app.use(StaticFiles("./public"))
    """

    __slots__ = ("_directory",)

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory).resolve()

    @property
    def directory(self) -> Path:
        return self._directory

    def resolve(self, path: str) -> Path | None:
        """Map a decoded request path to a file, or ``None``."""
        relative = path.lstrip("/")
        if not relative or "\x00" in relative:
            return None
        file_path = (self._directory / relative).resolve()
        if not file_path.is_relative_to(self._directory) or not file_path.is_file():
            return None
        return file_path

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        """Serve a static file or fall through."""
        if request.method not in ("GET", "HEAD"):
            return await next(request)

        file_path = self.resolve(request.path)
        if file_path is None:
            return await next(request)

        stat = file_path.stat()
        headers = (("Last-Modified", http_date(stat.st_mtime)),)
        if not modified_since(file_path, request.headers.get("if-modified-since")):
            return Response(status=304, headers=headers)

        content_type = guess_content_type(file_path)
        headers = (*headers, ("Content-Length", str(stat.st_size)))
        if request.method == "HEAD":
            return Response(content_type=content_type, headers=headers)
        return StreamingResponse(
            chunks=iter_file(file_path), content_type=content_type, headers=headers
        )
