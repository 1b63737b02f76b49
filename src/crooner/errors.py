"""Crooner exception hierarchy.

Shared across the route table, dispatcher, recovery policy and
middleware so every module raises and catches the same types.

The ``Pass`` and ``Halt`` control signals are not errors and live in
``crooner.control``.
"""


class CroonerError(Exception):
    """Base for all crooner-specific errors."""


class ConfigurationError(CroonerError):
    """Raised when an application is declared or configured incorrectly."""


class InvalidPathSpec(ConfigurationError, TypeError):
    """A route path was neither a string nor a matcher object."""

    def __init__(self, path_spec: object) -> None:
        self.path_spec = path_spec
        super().__init__(
            f"Route path must be a string or an object with a match() method, "
            f"got {type(path_spec).__name__}: {path_spec!r}"
        )


class NotFound(CroonerError):  # noqa: N818
    """404 — no route matched (or accepted) the request."""

    status = 404

    def __init__(self, detail: str = "Not Found") -> None:
        self.detail = detail
        super().__init__(detail)


class TypeConversion(CroonerError, TypeError):
    """A handler produced a value that cannot become a response."""

    def __init__(self, value: object, reason: str = "") -> None:
        self.value = value
        msg = f"{value!r} not supported as a handler result"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class RecoveryFailure(CroonerError):
    """A recovery handler itself failed.

    Always propagates to the hosting server. The original failure is
    available as ``__cause__``.
    """
