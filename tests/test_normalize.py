"""Tests for crooner.server.normalize — handler results to responses."""

import pytest

from crooner import Alias, App, Response, StreamingResponse
from crooner.context import RequestContext
from crooner.errors import TypeConversion
from crooner.http.request import Request
from crooner.server.normalize import MAX_ALIAS_DEPTH, apply_result, run_handler
from crooner.testing import TestClient


def _make_ctx(app: App | None = None) -> RequestContext:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [],
        "query_string": b"",
    }

    async def receive():
        return {"type": "http.request", "body": b"", "more_body": False}

    app = app or App()
    return RequestContext(request=Request.from_asgi(scope, receive), definition=app.definition)


class TestScalars:
    async def test_string(self) -> None:
        ctx = _make_ctx()
        await apply_result(ctx, "hello")
        assert ctx.response.body == ["hello"]
        assert ctx.response.status == 200

    async def test_bytes(self) -> None:
        ctx = _make_ctx()
        await apply_result(ctx, b"\x00\x01")
        assert ctx.response.body == [b"\x00\x01"]

    async def test_none_empties_body(self) -> None:
        ctx = _make_ctx()
        ctx.response.body = "old"
        await apply_result(ctx, None)
        assert ctx.response.body == []

    async def test_int_sets_status_only(self) -> None:
        ctx = _make_ctx()
        ctx.response.body = "kept"
        await apply_result(ctx, 201)
        assert ctx.response.status == 201
        assert ctx.response.body == ["kept"]

    @pytest.mark.parametrize("status", [99, 600, -1])
    async def test_int_out_of_range(self, status: int) -> None:
        with pytest.raises(TypeConversion):
            await apply_result(_make_ctx(), status)

    @pytest.mark.parametrize("value", [True, False, 3.5, object(), {"a": 1}])
    async def test_unsupported_values(self, value: object) -> None:
        with pytest.raises(TypeConversion):
            await apply_result(_make_ctx(), value)

    async def test_type_conversion_is_a_type_error(self) -> None:
        with pytest.raises(TypeError, match="not supported as a handler result"):
            await apply_result(_make_ctx(), 3.5)


class TestStatusForms:
    async def test_status_and_body(self) -> None:
        ctx = _make_ctx()
        await apply_result(ctx, (201, "created"))
        assert ctx.response.status == 201
        assert ctx.response.body == ["created"]

    async def test_status_headers_body(self) -> None:
        ctx = _make_ctx()
        ctx.response.headers["X-Existing"] = "1"
        await apply_result(ctx, (202, {"X-New": "2"}, "accepted"))
        assert ctx.response.status == 202
        assert ctx.response.headers["x-existing"] == "1"
        assert ctx.response.headers["x-new"] == "2"
        assert ctx.response.body == ["accepted"]

    async def test_three_form_with_none_body_keeps_body(self) -> None:
        ctx = _make_ctx()
        ctx.response.body = "kept"
        await apply_result(ctx, (204, {}, None))
        assert ctx.response.status == 204
        assert ctx.response.body == ["kept"]

    async def test_list_status_form(self) -> None:
        ctx = _make_ctx()
        await apply_result(ctx, [404, "nope"])
        assert ctx.response.status == 404
        assert ctx.response.body == ["nope"]

    async def test_body_may_be_chunk_list(self) -> None:
        ctx = _make_ctx()
        await apply_result(ctx, (200, ["a", "b"]))
        assert ctx.response.body == ["a", "b"]

    @pytest.mark.parametrize("value", [(200,), (200, {}, "a", "b"), [200, {}, "a", "b"]])
    async def test_wrong_length(self, value: object) -> None:
        with pytest.raises(TypeConversion):
            await apply_result(_make_ctx(), value)

    async def test_tuple_not_led_by_status(self) -> None:
        with pytest.raises(TypeConversion):
            await apply_result(_make_ctx(), ("a", "b"))

    async def test_empty_tuple(self) -> None:
        with pytest.raises(TypeConversion):
            await apply_result(_make_ctx(), ())

    async def test_headers_must_be_mapping(self) -> None:
        with pytest.raises(TypeConversion):
            await apply_result(_make_ctx(), (200, "not headers", "body"))

    async def test_invalid_status_in_form(self) -> None:
        with pytest.raises(TypeConversion):
            await apply_result(_make_ctx(), (1000, "body"))


class TestBodies:
    async def test_list_of_chunks(self) -> None:
        ctx = _make_ctx()
        await apply_result(ctx, ["a", "b", "c"])
        assert ctx.response.body == ["a", "b", "c"]

    async def test_list_with_non_chunk(self) -> None:
        with pytest.raises(TypeConversion):
            await apply_result(_make_ctx(), ["a", 1])

    async def test_generator_is_streamed(self) -> None:
        ctx = _make_ctx()

        def chunks():
            yield "a"
            yield "b"

        gen = chunks()
        await apply_result(ctx, gen)
        assert ctx.response.body is gen
        assert ctx.response.is_streaming

    async def test_async_generator_is_streamed(self) -> None:
        ctx = _make_ctx()

        async def chunks():
            yield "a"

        gen = chunks()
        await apply_result(ctx, gen)
        assert ctx.response.body is gen

    async def test_sealed_response_is_copied(self) -> None:
        ctx = _make_ctx()
        sealed = Response("hi", status=418, content_type="text/plain").with_header("X-A", "1")
        await apply_result(ctx, sealed)
        assert ctx.response.status == 418
        assert ctx.response.content_type == "text/plain"
        assert ctx.response.headers["X-A"] == "1"
        assert ctx.response.body == ["hi"]

    async def test_streaming_response_is_copied(self) -> None:
        ctx = _make_ctx()
        chunks = iter(["a", "b"])
        await apply_result(ctx, StreamingResponse(chunks, status=206))
        assert ctx.response.status == 206
        assert ctx.response.body is chunks


class TestAlias:
    async def test_alias_calls_helper(self) -> None:
        app = App()

        @app.helper("home")
        def home():
            return 201, "home page"

        ctx = _make_ctx(app)
        await apply_result(ctx, Alias("home"))
        assert ctx.response.status == 201
        assert ctx.response.body == ["home page"]

    async def test_alias_chain(self) -> None:
        app = App()

        @app.helper("a")
        def a():
            return Alias("b")

        @app.helper("b")
        def b():
            return "from b"

        ctx = _make_ctx(app)
        await apply_result(ctx, Alias("a"))
        assert ctx.response.body == ["from b"]

    async def test_unknown_alias(self) -> None:
        with pytest.raises(TypeConversion, match="no helper"):
            await apply_result(_make_ctx(), Alias("missing"))

    async def test_alias_cycle_is_bounded(self) -> None:
        app = App()

        @app.helper("loop")
        def loop():
            return Alias("loop")

        with pytest.raises(TypeConversion, match="too deep"):
            await apply_result(_make_ctx(app), Alias("loop"))
        assert MAX_ALIAS_DEPTH > 1


class TestRunHandler:
    async def test_async_handler(self) -> None:
        ctx = _make_ctx()

        async def handler():
            return "async"

        await run_handler(ctx, handler)
        assert ctx.response.body == ["async"]

    async def test_halt_value_is_normalized(self) -> None:
        from crooner import halt

        ctx = _make_ctx()

        def handler():
            halt(403, "no")

        await run_handler(ctx, handler)
        assert ctx.response.status == 403
        assert ctx.response.body == ["no"]


class TestEndToEnd:
    async def test_streamed_body_is_sent_in_order(self) -> None:
        app = App()

        @app.get("/stream")
        def stream():
            def chunks():
                yield "one "
                yield "two "
                yield "three"

            return chunks()

        async with TestClient(app) as client:
            response = await client.get("/stream")
        assert response.text == "one two three"

    async def test_conversion_failure_is_500(self) -> None:
        app = App()

        @app.get("/bad")
        def bad():
            return 3.5

        async with TestClient(app) as client:
            response = await client.get("/bad")
        assert response.status == 500
        assert response.text == "<h1>Internal Server Error</h1>"
