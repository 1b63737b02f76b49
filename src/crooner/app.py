"""Crooner application class.

Mutable during setup (routes, filters, recovery handlers, helpers,
templates, middleware). Frozen into a ``Definition`` when ``app.run()``
or ``__call__()`` is first invoked.
"""

import inspect
import logging
import re
import threading
from collections.abc import Callable
from dataclasses import replace
from types import MappingProxyType
from typing import Any

from crooner._internal.asgi import Receive, Scope, Send
from crooner._internal.types import ErrorKind, Filter, Guard, Handler, RecoveryHandler
from crooner.config import AppConfig
from crooner.context import RequestContext
from crooner.definition import Definition
from crooner.errors import NotFound
from crooner.middleware.protocol import Middleware
from crooner.routing.guards import host_name, user_agent
from crooner.routing.table import RouteTable
from crooner.server.handler import handle_request
from crooner.server.recovery import INTERNAL_ERROR_BODY
from crooner.templating.environment import create_environment

logger = logging.getLogger("crooner.app")

type MatchPattern = str | re.Pattern[str]


def _internal_error() -> str:
    return INTERNAL_ERROR_BODY


def _debug_error(ctx: RequestContext) -> str:
    from crooner.server.debug_page import render_error_page

    if ctx.error is None:
        return INTERNAL_ERROR_BODY
    return render_error_page(ctx.error, ctx)


def _debug_not_found(ctx: RequestContext) -> str:
    from crooner.server.debug_page import render_not_found_page

    return render_not_found_page(ctx)


class App:
    """The crooner application.

    Mutable during setup (decorators at import time). Frozen at runtime
    when ``app.run()`` or ``__call__()`` is first invoked; registering
    anything afterwards raises ``RuntimeError``.

    Usage::

        app = App()

        @app.get("/hello/:name")
        def hello(name):
            return f"Hello {name}"

    Thread safety:
        The freeze transition uses a Lock + double-check to ensure exactly
        one thread compiles the app, even under free-threading where
        multiple ASGI workers could call ``__call__()`` concurrently on
        first request.
    """

    __slots__ = (
        "_conditions",
        "_definition",
        "_errors",
        "_filters",
        "_freeze_lock",
        "_helpers",
        "_middleware_list",
        "_routes",
        "_shutdown_hooks",
        "_startup_hooks",
        "_templates",
        "config",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._routes: RouteTable = RouteTable()
        self._conditions: list[Guard] = []
        self._filters: list[Filter] = []
        self._errors: dict[ErrorKind, RecoveryHandler] = {}
        self._helpers: dict[str, Callable[..., Any]] = {}
        self._templates: dict[str, Callable[[], str]] = {}
        self._middleware_list: list[Middleware] = []
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._freeze_lock: threading.Lock = threading.Lock()
        self._definition: Definition | None = None

    # -- Route registration --

    def route(
        self,
        method: str,
        path: object,
        *,
        host: MatchPattern | None = None,
        agent: MatchPattern | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a handler for *method* requests matching *path*.

        *path* is a pattern string (``"/hello/:name"``, ``"/files/*"``),
        a compiled regular expression, or any object with a ``match()``
        method. Guards declared with ``condition()`` since the previous
        route, then *host* and *agent*, must all accept the request.
        """

        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            guards = self._conditions
            self._conditions = []
            if host is not None:
                guards.append(host_name(host))
            if agent is not None:
                guards.append(user_agent(agent))
            route = self._routes.register(method, path, guards, func)
            logger.debug("registered %s", route)
            return func

        return decorator

    def get(self, path: object, **options: Any) -> Callable[[Handler], Handler]:
        return self.route("GET", path, **options)

    def put(self, path: object, **options: Any) -> Callable[[Handler], Handler]:
        return self.route("PUT", path, **options)

    def post(self, path: object, **options: Any) -> Callable[[Handler], Handler]:
        return self.route("POST", path, **options)

    def delete(self, path: object, **options: Any) -> Callable[[Handler], Handler]:
        return self.route("DELETE", path, **options)

    def head(self, path: object, **options: Any) -> Callable[[Handler], Handler]:
        return self.route("HEAD", path, **options)

    def patch(self, path: object, **options: Any) -> Callable[[Handler], Handler]:
        return self.route("PATCH", path, **options)

    def options(self, path: object, **options: Any) -> Callable[[Handler], Handler]:
        return self.route("OPTIONS", path, **options)

    def condition(self, func: Guard) -> Guard:
        """Add a guard to the next route registered.

        Usage::

            @app.condition
            def is_admin(request):
                return request.cookies.get("role") == "admin"

            @app.get("/admin")
            def admin(): ...
        """
        self._check_not_frozen()
        self._conditions.append(func)
        return func

    # -- Filters --

    def before(self, func: Filter) -> Filter:
        """Run *func* before routing on every request, in registration order."""
        self._check_not_frozen()
        self._filters.append(func)
        return func

    # -- Recovery handlers --

    def error(self, *kinds: Any) -> Any:
        """Register a recovery handler via decorator.

        *kinds* are exception classes (matched through the MRO) or
        status codes (run when the final status is that code), given
        directly or in lists. Without kinds the handler is the catch-all
        for ``Exception``::

            @app.error(KeyError, LookupError)
            def missing(error):
                return 410, f"gone: {error}"

            @app.error
            def oops():
                return "something broke"
        """
        if len(kinds) == 1 and callable(kinds[0]) and not isinstance(kinds[0], type):
            return self.error()(kinds[0])
        targets: list[ErrorKind] = []
        for kind in kinds:
            if isinstance(kind, (list, tuple, set, frozenset)):
                targets.extend(kind)
            else:
                targets.append(kind)
        if not targets:
            targets.append(Exception)

        def decorator(func: RecoveryHandler) -> RecoveryHandler:
            self._check_not_frozen()
            for kind in targets:
                self._errors[kind] = func
            return func

        return decorator

    def not_found(self, func: RecoveryHandler) -> RecoveryHandler:
        """Register the handler for requests no route accepts."""
        return self.error(NotFound)(func)

    # -- Helpers and templates --

    def helper(self, name: str) -> Callable[[Handler], Handler]:
        """Register a handler reachable by returning ``Alias(name)``."""

        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            self._helpers[name] = func
            return func

        return decorator

    def template(self, name: str) -> Callable[[Callable[[], str]], Callable[[], str]]:
        """Register an in-app template; the decorated function returns its source.

        Usage::

            @app.template("hello")
            def hello_template():
                return "<p>Hello {{ name }}</p>"
        """

        def decorator(func: Callable[[], str]) -> Callable[[], str]:
            self._check_not_frozen()
            self._templates[name] = func
            return func

        return decorator

    def layout(self, name: str = "layout") -> Callable[[Callable[[], str]], Callable[[], str]]:
        return self.template(name)

    # -- Middleware --

    def use(self, middleware: Middleware) -> None:
        """Add a middleware to the pipeline, inside the built-in ones."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    # -- Configuration --

    def set(self, **changes: Any) -> None:
        """Replace configuration fields::

            app.set(sessions=True, secret_key="s3cr3t")
        """
        self._check_not_frozen()
        self.config = replace(self.config, **changes)

    def configure(self, *environments: str) -> Callable[[Callable[[App], Any]], Callable[[App], Any]]:
        """Run the decorated setup function now, for matching environments.

        Usage::

            @app.configure("production")
            def production(app):
                app.set(logging=True)
        """

        def decorator(func: Callable[[App], Any]) -> Callable[[App], Any]:
            if not environments or self.config.environment in environments:
                func(self)
            return func

        return decorator

    def derive(self, config: AppConfig | None = None) -> App:
        """Create an independent child app starting from this app's setup.

        The child gets copies of the route table, filters, recovery
        handlers, helpers, templates, middleware and lifecycle hooks.
        Registration on either app never affects the other.
        """
        child = App(config or self.config)
        child._routes = self._routes.copy()
        child._filters = list(self._filters)
        child._errors = dict(self._errors)
        child._helpers = dict(self._helpers)
        child._templates = dict(self._templates)
        child._middleware_list = list(self._middleware_list)
        child._startup_hooks = list(self._startup_hooks)
        child._shutdown_hooks = list(self._shutdown_hooks)
        return child

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        before the server begins accepting HTTP requests.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Freeze the app and serve it with pounce until interrupted."""
        self._ensure_frozen()

        from crooner.server.dev import run_server

        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
            environment=self.config.environment,
            reload=self.config.reload,
            reload_dirs=self.config.reload_dirs,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return
        await handle_request(scope, receive, send, definition=self._ensure_frozen())

    async def _handle_lifespan(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup (before first HTTP request), then
        runs registered startup/shutdown hooks and signals completion
        back to the server.
        """
        self._ensure_frozen()

        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    for hook in self._startup_hooks:
                        result = hook()
                        if inspect.isawaitable(result):
                            await result
                except Exception as exc:
                    logger.exception("startup hook failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    result = hook()
                    if inspect.isawaitable(result):
                        await result
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    @property
    def frozen(self) -> bool:
        return self._definition is not None

    @property
    def definition(self) -> Definition:
        """The frozen definition, freezing the app if needed."""
        return self._ensure_frozen()

    def _ensure_frozen(self) -> Definition:
        """Thread-safe freeze with double-check locking."""
        definition = self._definition
        if definition is not None:
            return definition
        with self._freeze_lock:
            if self._definition is None:
                self._definition = self._freeze()
            return self._definition

    def _freeze(self) -> Definition:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        config = self.config
        errors = dict(self._errors)
        if config.debug:
            errors.setdefault(Exception, _debug_error)
            errors.setdefault(NotFound, _debug_not_found)
        else:
            errors.setdefault(Exception, _internal_error)

        definition = Definition(
            config=config,
            routes=self._routes.freeze(),
            filters=tuple(self._filters),
            errors=MappingProxyType(errors),
            helpers=MappingProxyType(dict(self._helpers)),
            templates=MappingProxyType(dict(self._templates)),
            template_env=create_environment(config),
            middleware=self._build_middleware(),
        )
        logger.debug(
            "frozen: %d routes, %d filters, %d middleware",
            sum(len(routes) for routes in definition.routes.values()),
            len(definition.filters),
            len(definition.middleware),
        )
        return definition

    def _build_middleware(self) -> tuple[Middleware, ...]:
        """Built-in middleware from config around the user's, outermost first."""
        config = self.config
        stack: list[Middleware] = []
        if config.sessions:
            from crooner.middleware.sessions import SessionConfig, SessionMiddleware

            stack.append(SessionMiddleware(SessionConfig(secret_key=config.secret_key)))
        if config.logging:
            from crooner.middleware.access_log import access_log

            stack.append(access_log)
        if config.method_override:
            from crooner.middleware.method_override import method_override

            stack.append(method_override)
        stack.extend(self._middleware_list)
        if config.static:
            from crooner.middleware.static import StaticFiles

            stack.append(StaticFiles(config.public_dir))
        return tuple(stack)

    def _check_not_frozen(self) -> None:
        if self._definition is not None:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, filters and handlers before calling app.run()."
            )
            raise RuntimeError(msg)
