"""Route guards (conditions) and their evaluation.

A guard is a callable resolved like a handler (``ctx``, ``request``,
``params`` ...). A falsy result, or ``pass_route()``, rejects the
route and the dispatcher moves on to the next candidate. Guards run
against a scratch copy of the parameters, so anything a guard writes
(``user_agent`` records its captures under ``"agent"``) is seen by the
handler only if every guard on the route accepts.
"""

import re
from collections.abc import Sequence
from typing import TYPE_CHECKING

from crooner._internal.invoke import call_with_context
from crooner._internal.types import Guard

if TYPE_CHECKING:
    from crooner.context import RequestContext

AGENT = "agent"


def _matches(pattern: str | re.Pattern[str], value: str | None) -> re.Match[str] | bool | None:
    if value is None:
        return None
    if isinstance(pattern, re.Pattern):
        return pattern.search(value)
    return pattern == value


def host_name(pattern: str | re.Pattern[str]) -> Guard:
    """Guard accepting requests whose host equals (or matches) *pattern*."""

    def host_guard(ctx: RequestContext) -> bool:
        return bool(_matches(pattern, ctx.request.host))

    return host_guard


def user_agent(pattern: str | re.Pattern[str]) -> Guard:
    """Guard accepting requests whose User-Agent matches *pattern*.

    String patterns are regular expressions. The match's groups are
    recorded in ``params["agent"]``.
    """
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern

    def agent_guard(ctx: RequestContext) -> bool:
        match = _matches(regex, ctx.request.user_agent)
        if not match:
            return False
        ctx.params[AGENT] = list(match.groups())
        return True

    return agent_guard


async def evaluate_guards(guards: Sequence[Guard], ctx: RequestContext) -> bool:
    """Run *guards* in order; stop at the first rejection."""
    for guard in guards:
        if not await call_with_context(guard, ctx):
            return False
    return True
