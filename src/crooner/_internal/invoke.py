"""Invoke helpers — call sync or async callables uniformly.

Crooner handlers, filters, guards and recovery handlers can be ``def``
or ``async def``, and declare only the arguments they need. This
module keeps the sync/async check and the signature-driven argument
resolution in exactly one place.

Usage::

    from crooner._internal.invoke import call_with_context

    result = await call_with_context(handler, ctx)
"""

import annotationlib
import functools
import inspect
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from crooner.context import RequestContext

_CONVERTIBLE = (int, float)


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's awaitable."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


@functools.cache
def _parameters(func: Callable[..., Any]) -> tuple[inspect.Parameter, ...]:
    try:
        sig = inspect.signature(func, annotation_format=annotationlib.Format.FORWARDREF)
        return tuple(sig.parameters.values())
    except (TypeError, ValueError):
        # Builtins without introspectable signatures take no arguments.
        return ()


def build_kwargs(func: Callable[..., Any], ctx: RequestContext) -> dict[str, Any]:
    """Inspect *func*'s signature and resolve its arguments from *ctx*.

    Resolution order:
    1. ``ctx`` / ``context`` (or a ``RequestContext`` annotation)
    2. ``request``, ``response``, ``params``
    3. ``error`` / ``exc`` — the failure being recovered, if any
    4. Route and query parameters by name, converted when annotated
       ``int`` or ``float``
    """
    from crooner.context import RequestContext

    kwargs: dict[str, Any] = {}
    for param in _parameters(func):
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        name = param.name
        if name in ("ctx", "context") or param.annotation is RequestContext:
            kwargs[name] = ctx
        elif name == "request":
            kwargs[name] = ctx.request
        elif name == "response":
            kwargs[name] = ctx.response
        elif name == "params":
            kwargs[name] = ctx.params
        elif name in ("error", "exc"):
            kwargs[name] = ctx.error
        elif name in ctx.params:
            value = ctx.params[name]
            if param.annotation in _CONVERTIBLE and isinstance(value, str):
                try:
                    value = param.annotation(value)
                except ValueError:
                    pass
            kwargs[name] = value
        elif param.default is inspect.Parameter.empty:
            kwargs[name] = None
    return kwargs


async def call_with_context(func: Callable[..., Any], ctx: RequestContext) -> Any:
    """Call *func* with arguments resolved from *ctx*, awaiting if needed."""
    return await invoke(func, **build_kwargs(func, ctx))
