"""Tests for crooner._internal.invoke — sync/async calls and argument resolution."""

from crooner import App
from crooner._internal.invoke import build_kwargs, call_with_context, invoke
from crooner.context import RequestContext
from crooner.http.request import Request


def _make_ctx(**params: object) -> RequestContext:
    scope = {"type": "http", "method": "GET", "path": "/", "headers": [], "query_string": b""}

    async def receive():
        return {"type": "http.request", "body": b"", "more_body": False}

    ctx = RequestContext(request=Request.from_asgi(scope, receive), definition=App().definition)
    ctx.params = dict(params)
    return ctx


class TestInvoke:
    async def test_sync(self) -> None:
        assert await invoke(lambda x: x * 2, 21) == 42

    async def test_async(self) -> None:
        async def double(x):
            return x * 2

        assert await invoke(double, 21) == 42


class TestBuildKwargs:
    def test_no_parameters(self) -> None:
        assert build_kwargs(lambda: None, _make_ctx()) == {}

    def test_context_objects(self) -> None:
        ctx = _make_ctx()

        def handler(ctx, request, response, params):
            pass

        kwargs = build_kwargs(handler, ctx)
        assert kwargs == {
            "ctx": ctx,
            "request": ctx.request,
            "response": ctx.response,
            "params": ctx.params,
        }

    def test_context_by_annotation(self) -> None:
        ctx = _make_ctx()

        def handler(current: RequestContext):
            pass

        assert build_kwargs(handler, ctx) == {"current": ctx}

    def test_error(self) -> None:
        ctx = _make_ctx()
        ctx.error = KeyError("k")

        def handler(error):
            pass

        assert build_kwargs(handler, ctx) == {"error": ctx.error}

    def test_params_by_name_with_conversion(self) -> None:
        ctx = _make_ctx(id="7", ratio="0.5", name="frank")

        def handler(id: int, ratio: float, name):
            pass

        assert build_kwargs(handler, ctx) == {"id": 7, "ratio": 0.5, "name": "frank"}

    def test_unconvertible_value_passed_through(self) -> None:
        ctx = _make_ctx(id="seven")

        def handler(id: int):
            pass

        assert build_kwargs(handler, ctx) == {"id": "seven"}

    def test_missing_required_is_none_and_defaults_kept(self) -> None:
        ctx = _make_ctx()

        def handler(a, b="default", *args, **kwargs):
            pass

        assert build_kwargs(handler, ctx) == {"a": None}


class TestCallWithContext:
    async def test_async_handler(self) -> None:
        ctx = _make_ctx(name="dean")

        async def handler(name):
            return f"hi {name}"

        assert await call_with_context(handler, ctx) == "hi dean"
