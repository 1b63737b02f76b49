"""Result normalization — turns whatever a handler returned into the response.

isinstance-based dispatch, no magic, fully predictable. Applied to the
return value of handlers and recovery handlers, and to the value carried
by ``halt()``:

1. ``None``                      -> empty body
2. ``str`` / ``bytes``           -> single-chunk body
3. ``Alias(name)``               -> call the helper registered as *name*,
                                    normalize its result
4. ``Response`` / ``StreamingResponse`` -> copied onto the response
5. ``(status, body)``            -> status + body
6. ``(status, headers, body)``   -> status, headers merged, body if not None
7. ``list`` not led by a status  -> body chunks
8. ``int`` in 100..599           -> status only, body unchanged
9. other iterables / async iterables -> streamed body
10. anything else                -> ``TypeConversion``

Lists and tuples led by an ``int`` are status forms; a tuple led by
anything else is rejected.
"""

from collections.abc import AsyncIterable, Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from crooner._internal.invoke import call_with_context
from crooner._internal.types import Handler
from crooner.control import Halt
from crooner.errors import TypeConversion
from crooner.http.response import Response, StreamingResponse

if TYPE_CHECKING:
    from crooner.context import RequestContext

# Guards against helpers that alias each other in a cycle.
MAX_ALIAS_DEPTH = 16


@dataclass(frozen=True, slots=True)
class Alias:
    """Return value that delegates to a helper registered with ``App.helper``.

    Usage::

        @app.helper("home")
        def home():
            return "home page"

        @app.get("/")
        def index():
            return Alias("home")
    """

    name: str


def _is_status(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_status(value: object, result: object) -> int:
    if not _is_status(value) or not 100 <= value <= 599:  # type: ignore[operator]
        raise TypeConversion(result, f"invalid status {value!r}")
    return value  # type: ignore[return-value]


def _check_chunks(chunks: Iterable[Any], result: object) -> list[Any]:
    chunks = list(chunks)
    for chunk in chunks:
        if not isinstance(chunk, (str, bytes)):
            raise TypeConversion(result, f"body chunk {chunk!r} is not str or bytes")
    return chunks


def _coerce_body(body: object, result: object) -> Any:
    if body is None:
        return []
    if isinstance(body, (str, bytes)):
        return [body]
    if isinstance(body, (list, tuple)):
        return _check_chunks(body, result)
    if isinstance(body, Mapping):
        raise TypeConversion(result, "a mapping is not a body")
    if isinstance(body, (Iterable, AsyncIterable)):
        return body
    raise TypeConversion(result, f"{type(body).__name__} is not a body")


def _apply_status_form(ctx: RequestContext, result: list[Any] | tuple[Any, ...]) -> None:
    response = ctx.response
    if len(result) == 3:
        status, headers, body = result
        response.status = _check_status(status, result)
        if headers:
            if not isinstance(headers, Mapping):
                raise TypeConversion(result, "headers must be a mapping")
            for name, value in headers.items():
                response.headers[name] = value
        if body is not None:
            response.body = _coerce_body(body, result)
    elif len(result) == 2:
        status, body = result
        response.status = _check_status(status, result)
        response.body = _coerce_body(body, result)
    else:
        raise TypeConversion(result, "status forms are (status, body) or (status, headers, body)")


def _apply_sealed(ctx: RequestContext, result: Response | StreamingResponse) -> None:
    response = ctx.response
    response.status = result.status
    response.content_type = result.content_type
    for name, value in result.headers:
        response.headers[name] = value
    response.cookies.extend(result.cookies)
    if isinstance(result, Response):
        response.body = [result.body]
    else:
        response.body = result.chunks


async def apply_result(ctx: RequestContext, result: Any, *, depth: int = 0) -> None:
    """Normalize *result* onto ``ctx.response``.

    Raises ``TypeConversion`` for shapes that cannot become a response.
    """
    response = ctx.response
    match result:
        case None:
            response.body = []
        case bool():
            raise TypeConversion(result)
        case str() | bytes():
            response.body = [result]
        case Alias(name=name):
            if depth >= MAX_ALIAS_DEPTH:
                raise TypeConversion(result, "alias chain too deep")
            helper = ctx.definition.helpers.get(name)
            if helper is None:
                raise TypeConversion(result, f"no helper registered as {name!r}")
            await apply_result(ctx, await _call(ctx, helper), depth=depth + 1)
        case Response() | StreamingResponse():
            _apply_sealed(ctx, result)
        case tuple():
            if not result or not _is_status(result[0]):
                raise TypeConversion(result, "tuples must start with a status code")
            _apply_status_form(ctx, result)
        case list():
            if result and _is_status(result[0]):
                _apply_status_form(ctx, result)
            else:
                response.body = _check_chunks(result, result)
        case int():
            response.status = _check_status(result, result)
        case Mapping():
            raise TypeConversion(result, "a mapping is not a body")
        case Iterable() | AsyncIterable():
            response.body = result
        case _:
            raise TypeConversion(result)


async def _call(ctx: RequestContext, handler: Handler) -> Any:
    try:
        return await call_with_context(handler, ctx)
    except Halt as signal:
        return signal.value


async def run_handler(ctx: RequestContext, handler: Handler) -> None:
    """Invoke *handler* and normalize its result (or its halt value)."""
    await apply_result(ctx, await _call(ctx, handler))
