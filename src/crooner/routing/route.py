"""Route — a registered (pattern, guards, handler) entry."""

from dataclasses import dataclass

from crooner._internal.types import Guard, Handler
from crooner.routing.pattern import CompiledPattern


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen route definition.

    Owned by the route table that registered it. Derived applications
    share ``Route`` values but never the lists that hold them.

    ``discard_body`` marks the synthetic ``HEAD`` route registered
    alongside every ``GET``: it runs the same handler, keeps status and
    headers, and sends no body.
    """

    method: str
    pattern: CompiledPattern
    handler: Handler
    guards: tuple[Guard, ...] = ()
    discard_body: bool = False

    @property
    def param_names(self) -> tuple[str, ...]:
        return self.pattern.names

    def __str__(self) -> str:
        return f"{self.method} {self.pattern}"
