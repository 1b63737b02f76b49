"""Shared type aliases used across crooner modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler — user-defined function with variable signature
Handler: TypeAlias = Callable[..., Any]

# Pre-dispatch filter — runs for every request, return value ignored
Filter: TypeAlias = Callable[..., Any]

# Route guard — truthy result accepts the route
Guard: TypeAlias = Callable[..., Any]

# Recovery handler — produces a response for a failure kind or status
RecoveryHandler: TypeAlias = Callable[..., Any]

# Error registry key: an exception class or a status code
ErrorKind: TypeAlias = type[BaseException] | int
