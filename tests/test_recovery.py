"""Tests for crooner.server.recovery — the error recovery policy."""

import pytest

from crooner import App, AppConfig
from crooner.errors import NotFound, RecoveryFailure
from crooner.helpers import status
from crooner.server.recovery import lookup_handler
from crooner.testing import TestClient


class LookupError_(KeyError):
    pass


class TestLookupHandler:
    def test_exact_class(self) -> None:
        def handler(): ...

        assert lookup_handler({KeyError: handler}, KeyError, Exception) is handler

    def test_walks_mro(self) -> None:
        def handler(): ...

        assert lookup_handler({LookupError: handler}, LookupError_, Exception) is handler

    def test_most_specific_wins(self) -> None:
        def general(): ...

        def specific(): ...

        errors = {Exception: general, KeyError: specific}
        assert lookup_handler(errors, LookupError_, Exception) is specific

    def test_stops_at_root(self) -> None:
        def handler(): ...

        assert lookup_handler({Exception: handler}, NotFound, NotFound) is None

    def test_none_registered(self) -> None:
        assert lookup_handler({}, ValueError, Exception) is None


class TestNotFound:
    async def test_default_body_and_status(self) -> None:
        app = App()
        async with TestClient(app) as client:
            response = await client.get("/nowhere")
        assert response.status == 404
        assert response.text == "<h1>Not Found</h1>"

    async def test_handler_replaces_body_and_keeps_404(self) -> None:
        app = App()

        @app.not_found
        def missing(request):
            return f"no {request.path} here"

        async with TestClient(app) as client:
            response = await client.get("/nowhere")
        assert response.status == 404
        assert response.text == "no /nowhere here"

    async def test_handler_can_change_status(self) -> None:
        app = App()

        @app.not_found
        def missing():
            return 410, "gone"

        async with TestClient(app) as client:
            response = await client.get("/nowhere")
        assert response.status == 410
        assert response.text == "gone"

    async def test_raised_not_found_from_handler(self) -> None:
        app = App()

        @app.get("/item/:id")
        def item(id):
            raise NotFound(f"no item {id}")

        @app.not_found
        def missing(error):
            return error.detail

        async with TestClient(app) as client:
            response = await client.get("/item/9")
        assert response.status == 404
        assert response.text == "no item 9"

    async def test_catch_all_does_not_handle_not_found(self) -> None:
        app = App()

        @app.error
        def oops():
            return "catch-all"

        async with TestClient(app) as client:
            response = await client.get("/nowhere")
        assert response.status == 404
        assert response.text == "<h1>Not Found</h1>"


class TestHandlerFailure:
    async def test_default_catch_all(self) -> None:
        app = App()

        @app.get("/boom")
        def boom():
            raise RuntimeError("boom")

        async with TestClient(app) as client:
            response = await client.get("/boom")
        assert response.status == 500
        assert response.text == "<h1>Internal Server Error</h1>"

    async def test_specific_kind_handler(self) -> None:
        app = App()

        @app.get("/boom")
        def boom():
            raise KeyError("missing")

        @app.error(KeyError)
        def key_error(error):
            return f"key {error.args[0]}"

        async with TestClient(app) as client:
            response = await client.get("/boom")
        assert response.status == 500
        assert response.text == "key missing"

    async def test_subclass_uses_parent_handler(self) -> None:
        app = App()

        @app.get("/boom")
        def boom():
            raise LookupError_("x")

        @app.error(LookupError)
        def lookup(error):
            return type(error).__name__

        async with TestClient(app) as client:
            response = await client.get("/boom")
        assert response.text == "LookupError_"

    async def test_catch_all_registered_with_error(self) -> None:
        app = App()

        @app.get("/boom")
        def boom():
            raise ValueError("bad")

        @app.error()
        def oops(error):
            return f"caught {error}"

        async with TestClient(app) as client:
            response = await client.get("/boom")
        assert response.text == "caught bad"

    async def test_error_recorded_on_context(self) -> None:
        app = App()
        seen: list[BaseException | None] = []

        @app.get("/boom")
        def boom():
            raise ValueError("bad")

        @app.error(ValueError)
        def oops(ctx):
            seen.append(ctx.error)
            return "handled"

        async with TestClient(app) as client:
            await client.get("/boom")
        assert isinstance(seen[0], ValueError)

    async def test_failure_in_filter_is_recovered(self) -> None:
        app = App()

        @app.before
        def broken():
            raise ZeroDivisionError

        @app.error(ArithmeticError)
        def math():
            return "math"

        async with TestClient(app) as client:
            response = await client.get("/")
        assert response.status == 500
        assert response.text == "math"

    async def test_handler_may_set_status(self) -> None:
        app = App()

        @app.get("/boom")
        def boom():
            raise PermissionError

        @app.error(PermissionError)
        def denied():
            return 403, "denied"

        async with TestClient(app) as client:
            response = await client.get("/boom")
        assert response.status == 403


class TestStatusHandlers:
    async def test_status_handler_runs_after_success(self) -> None:
        app = App()

        @app.get("/teapot")
        def teapot():
            status(418)
            return "short and stout"

        @app.error(418)
        def teapot_handler():
            return "I'm a teapot"

        async with TestClient(app) as client:
            response = await client.get("/teapot")
        assert response.status == 418
        assert response.text == "I'm a teapot"

    async def test_status_handler_layers_on_kind_recovery(self) -> None:
        app = App()
        calls: list[str] = []

        @app.get("/boom")
        def boom():
            raise ValueError

        @app.error(ValueError)
        def by_kind():
            calls.append("kind")
            return "kind"

        @app.error(500)
        def by_status():
            calls.append("status")
            return "status"

        async with TestClient(app) as client:
            response = await client.get("/boom")
        assert calls == ["kind", "status"]
        assert response.text == "status"

    async def test_404_status_handler_layers_on_not_found(self) -> None:
        app = App()

        @app.error(404)
        def by_status():
            return "status 404"

        async with TestClient(app) as client:
            response = await client.get("/nowhere")
        assert response.status == 404
        assert response.text == "status 404"

    async def test_status_below_400_never_handled(self) -> None:
        app = App()

        @app.get("/")
        def index():
            return 302, "moved"

        @app.error(302)
        def never():
            return "handled"

        async with TestClient(app) as client:
            response = await client.get("/")
        assert response.text == "moved"

    async def test_multiple_kinds_in_one_registration(self) -> None:
        app = App()

        @app.get("/a")
        def a():
            status(401)
            return "a"

        @app.get("/b")
        def b():
            status(403)
            return "b"

        @app.error(401, 403)
        def denied(response):
            return f"denied {response.status}"

        async with TestClient(app) as client:
            assert (await client.get("/a")).text == "denied 401"
            assert (await client.get("/b")).text == "denied 403"

    async def test_kinds_given_as_a_list(self) -> None:
        app = App()

        @app.get("/missing-key")
        def missing_key():
            raise KeyError("song")

        @app.get("/gone")
        def gone():
            status(410)
            return "gone"

        @app.error([KeyError, 410])
        def handled(response):
            return f"handled {response.status}"

        async with TestClient(app) as client:
            assert (await client.get("/missing-key")).text == "handled 500"
            assert (await client.get("/gone")).text == "handled 410"


class TestFatal:
    async def test_failure_in_recovery_handler_propagates(self) -> None:
        app = App()

        @app.get("/boom")
        def boom():
            raise ValueError("original")

        @app.error(ValueError)
        def broken():
            raise RuntimeError("recovery broke")

        async with TestClient(app) as client:
            with pytest.raises(RecoveryFailure) as info:
                await client.get("/boom")
        assert isinstance(info.value.__cause__, RuntimeError)

    async def test_recovery_is_attempted_once(self) -> None:
        app = App()
        calls: list[str] = []

        @app.not_found
        def missing():
            calls.append("not_found")
            raise NotFound

        async with TestClient(app) as client:
            with pytest.raises(RecoveryFailure):
                await client.get("/nowhere")
        assert calls == ["not_found"]

    async def test_raise_errors_propagates_original(self) -> None:
        app = App(AppConfig(raise_errors=True))

        @app.get("/boom")
        def boom():
            raise ValueError("surface me")

        @app.error(ValueError)
        def never():
            return "recovered"

        async with TestClient(app) as client:
            with pytest.raises(ValueError, match="surface me"):
                await client.get("/boom")

    async def test_raise_errors_still_recovers_not_found(self) -> None:
        app = App(AppConfig(raise_errors=True))
        async with TestClient(app) as client:
            response = await client.get("/nowhere")
        assert response.status == 404


class TestDebugDefaults:
    async def test_debug_error_page(self) -> None:
        app = App(AppConfig(debug=True))

        @app.get("/boom")
        def boom():
            raise ValueError("<script>bad</script>")

        async with TestClient(app) as client:
            response = await client.get("/boom?x=1")
        assert response.status == 500
        assert "ValueError" in response.text
        assert "&lt;script&gt;bad&lt;/script&gt;" in response.text
        assert "<script>bad" not in response.text
        assert "Traceback" in response.text

    async def test_debug_not_found_suggests_route(self) -> None:
        app = App(AppConfig(debug=True))
        async with TestClient(app) as client:
            response = await client.get("/missing")
        assert response.status == 404
        assert "@app.get(&quot;/missing&quot;)" in response.text

    async def test_user_handlers_override_debug_defaults(self) -> None:
        app = App(AppConfig(debug=True))

        @app.not_found
        def missing():
            return "custom"

        async with TestClient(app) as client:
            response = await client.get("/missing")
        assert response.text == "custom"
