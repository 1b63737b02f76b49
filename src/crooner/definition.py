"""The frozen application definition the dispatcher serves from.

``App`` is the builder: it collects routes, filters, recovery handlers,
helpers and templates during setup and freezes them into a
``Definition``. Nothing in a ``Definition`` is mutable, so any number
of concurrent requests can read it without locks.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from kida import Environment

from crooner._internal.types import ErrorKind, Filter, RecoveryHandler
from crooner.config import AppConfig
from crooner.middleware.protocol import Middleware
from crooner.routing.route import Route


@dataclass(frozen=True, slots=True)
class Definition:
    config: AppConfig
    routes: Mapping[str, tuple[Route, ...]]
    filters: tuple[Filter, ...]
    errors: Mapping[ErrorKind, RecoveryHandler]
    helpers: Mapping[str, Callable[..., Any]]
    templates: Mapping[str, Callable[[], str]]
    template_env: Environment
    middleware: tuple[Middleware, ...] = ()

    def routes_for(self, method: str) -> tuple[Route, ...]:
        return self.routes.get(method, ())
