"""Path pattern compilation.

Route paths are declared as strings with ``:name`` parameters and ``*``
wildcards::

    "/hello/:name"        -> ^/hello/([^/?&#.]+)$     names ("name",)
    "/files/*"            -> ^/files/(.*?)$           names ("splat",)
    "/say/*/to/*"         -> two "splat" captures, collected in order

Anything with a ``match()`` method (a compiled ``re.Pattern`` or a
custom matcher object) is used as-is, without parameter names; its
captures are exposed under ``"captures"``.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, unquote_plus

from crooner.errors import InvalidPathSpec

SPLAT = "splat"
CAPTURES = "captures"

# Characters left alone when percent-encoding a declared path.
_SAFE = "!*'();/?:@&=+$,[]"
_TOKEN = re.compile(r":(\w+)|\*")
_PARAM = r"([^/?&#.]+)"
_WILDCARD = r"(.*?)"


@dataclass(frozen=True, slots=True)
class CompiledPattern:
    """A route matcher plus the ordered names of its captures."""

    matcher: Any
    names: tuple[str, ...] = ()
    source: str | None = None

    def captures(self, path: str) -> tuple[str | None, ...] | None:
        """Return the captured groups if *path* matches, else ``None``.

        String-derived patterns must match the whole path.
        """
        if self.source is not None:
            match = self.matcher.fullmatch(path)
        elif isinstance(self.matcher, re.Pattern):
            match = self.matcher.search(path)
        else:
            match = self.matcher.match(path)
        if not match:
            return None
        groups = getattr(match, "groups", None)
        return tuple(groups()) if callable(groups) else ()

    def __str__(self) -> str:
        if self.source is not None:
            return self.source
        return getattr(self.matcher, "pattern", repr(self.matcher))


def compile_path(path_spec: object) -> CompiledPattern:
    """Compile a route path declaration into a ``CompiledPattern``.

    Raises ``InvalidPathSpec`` for anything that is neither a string
    nor an object with a ``match()`` method.
    """
    if isinstance(path_spec, str):
        encoded = quote(path_spec, safe=_SAFE)
        names: list[str] = []
        parts: list[str] = []
        position = 0
        for token in _TOKEN.finditer(encoded):
            parts.append(re.escape(encoded[position : token.start()]))
            if token.group(1) is None:
                names.append(SPLAT)
                parts.append(_WILDCARD)
            else:
                names.append(token.group(1))
                parts.append(_PARAM)
            position = token.end()
        parts.append(re.escape(encoded[position:]))
        regex = re.compile("".join(parts), re.DOTALL)
        return CompiledPattern(regex, tuple(names), source=path_spec)

    if callable(getattr(path_spec, "match", None)):
        return CompiledPattern(path_spec)

    raise InvalidPathSpec(path_spec)


def build_params(names: Sequence[str], captures: Sequence[str | None]) -> dict[str, Any]:
    """Map decoded captures onto parameter names.

    Repeated ``"splat"`` names accumulate into a list. Without names,
    non-empty captures are exposed as a list under ``"captures"``.
    """
    values = [unquote_plus(value) if value is not None else None for value in captures]
    if names:
        params: dict[str, Any] = {}
        for name, value in zip(names, values, strict=False):
            if name == SPLAT:
                params.setdefault(SPLAT, []).append(value)
            else:
                params[name] = value
        return params
    if any(value is not None for value in values):
        return {CAPTURES: values}
    return {}
