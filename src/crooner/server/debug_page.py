"""Development-mode error pages.

Rendered with plain f-strings rather than the template engine, so a
broken template setup cannot prevent error reporting.

- ``render_error_page``: exception, traceback with source context and
  app-frame highlighting, and the request's parameters.
- ``render_not_found_page``: names the unmatched request and shows the
  route declaration that would handle it.
"""

import html
import linecache
import os
import types
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from crooner.context import RequestContext

_CSS = """\
body { font-family: -apple-system, system-ui, sans-serif; background: #1a1b26; color: #c0caf5;
       margin: 0; padding: 2rem; }
h1 { color: #f7768e; font-size: 1.5rem; margin: 0 0 .5rem; }
h2 { color: #7aa2f7; font-size: 1.1rem; margin: 2rem 0 .5rem; }
pre, .source { font-family: ui-monospace, monospace; font-size: .85rem; }
.frame { border: 1px solid #292e42; margin: .5rem 0; }
.frame-header { background: #24283b; padding: .4rem .6rem; display: flex;
                justify-content: space-between; }
.app-frame .frame-header { border-left: 3px solid #9ece6a; }
.source-line { white-space: pre; padding: 0 .6rem; }
.error-line { background: #3b2030; }
.lineno { color: #565f89; display: inline-block; width: 3.5em; }
table { border-collapse: collapse; }
td { padding: .2rem .8rem .2rem 0; vertical-align: top; font-family: ui-monospace, monospace; }
"""


def _esc(text: object) -> str:
    return html.escape(str(text), quote=True)


def _is_app_frame(filename: str) -> bool:
    """True if the frame is from the application (not stdlib/site-packages)."""
    if "site-packages" in filename or filename.startswith("<"):
        return False
    return not filename.startswith(os.path.dirname(os.__file__))


def _extract_frames(tb: types.TracebackType | None) -> list[dict[str, Any]]:
    frames: list[dict[str, Any]] = []
    while tb is not None:
        frame = tb.tb_frame
        lineno = tb.tb_lineno
        filename = frame.f_code.co_filename
        source_lines = [
            (i, line.rstrip())
            for i in range(max(1, lineno - 3), lineno + 4)
            if (line := linecache.getline(filename, i, frame.f_globals))
        ]
        frames.append({
            "filename": filename,
            "lineno": lineno,
            "func_name": frame.f_code.co_name,
            "source_lines": source_lines,
            "is_app": _is_app_frame(filename),
        })
        tb = tb.tb_next
    return frames


def _render_frame(frame: dict[str, Any]) -> str:
    lineno = frame["lineno"]
    source = "".join(
        f'<div class="source-line{" error-line" if n == lineno else ""}">'
        f'<span class="lineno">{n}</span>{_esc(code)}</div>'
        for n, code in frame["source_lines"]
    )
    frame_cls = "frame app-frame" if frame["is_app"] else "frame"
    return (
        f'<div class="{frame_cls}">'
        f'<div class="frame-header"><span>{_esc(frame["filename"])}:{lineno}</span>'
        f"<span>{_esc(frame['func_name'])}</span></div>"
        f'<div class="source">{source}</div>'
        f"</div>"
    )


def _render_params(params: dict[str, Any]) -> str:
    if not params:
        return "<p>(none)</p>"
    rows = "".join(
        f"<tr><td>{_esc(name)}</td><td>{_esc(repr(value))}</td></tr>"
        for name, value in sorted(params.items())
    )
    return f"<table>{rows}</table>"


def _page(title: str, body: str) -> str:
    return (
        "<!DOCTYPE html>"
        '<html lang="en"><head><meta charset="utf-8">'
        f"<title>{_esc(title)}</title><style>{_CSS}</style>"
        f"</head><body>{body}</body></html>"
    )


def render_error_page(exc: BaseException, ctx: RequestContext) -> str:
    """Render the debug page for an unhandled handler failure."""
    exc_type = type(exc)
    module = exc_type.__module__
    qualified = exc_type.__qualname__ if module == "builtins" else f"{module}.{exc_type.__qualname__}"
    request = ctx.request

    sections = [
        f"<h1>{_esc(qualified)}</h1>",
        f"<pre>{_esc(exc)}</pre>",
        f"<p>{_esc(request.method)} {_esc(request.url)}</p>",
    ]
    if exc.__cause__ is not None:
        sections.append(f"<p>Caused by {_esc(type(exc.__cause__).__name__)}: {_esc(exc.__cause__)}</p>")
    frames = _extract_frames(exc.__traceback__)
    if frames:
        sections.append("<h2>Traceback</h2>")
        sections.extend(_render_frame(f) for f in frames)
    sections.append("<h2>Params</h2>")
    sections.append(_render_params(ctx.params))
    if ctx.route is not None:
        sections.append("<h2>Route</h2>")
        sections.append(f"<pre>{_esc(ctx.route)}</pre>")
    return _page(f"{qualified}: {str(exc)[:80]}", "\n".join(sections))


def render_not_found_page(ctx: RequestContext) -> str:
    """Render the debug page for a request no route accepted."""
    request = ctx.request
    method = request.method.lower()
    if method not in ("get", "put", "post", "delete", "patch", "options"):
        method = "get"
    suggestion = (
        f'@app.{method}("{request.path}")\n'
        "def handler():\n"
        '    return "Hello World"'
    )
    body = (
        "<h1>Not Found</h1>"
        f"<p>No route accepted {_esc(request.method)} {_esc(request.path)}</p>"
        "<h2>Try this</h2>"
        f"<pre>{_esc(suggestion)}</pre>"
    )
    return _page("Not Found", body)
