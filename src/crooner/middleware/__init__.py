"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> AnyResponse

Built-in middleware, enabled through ``AppConfig``:
    SessionMiddleware -- Signed cookie sessions (requires itsdangerous)
    access_log -- Common Log Format lines on the ``crooner.access`` logger
    method_override -- ``_method`` form field for PUT/DELETE from HTML forms
    StaticFiles -- Serve files from the public directory
"""

from crooner.middleware.access_log import access_log
from crooner.middleware.method_override import method_override
from crooner.middleware.protocol import Middleware, Next
from crooner.middleware.sessions import SessionConfig, SessionMiddleware, get_session
from crooner.middleware.static import StaticFiles

__all__ = [
    "Middleware",
    "Next",
    "SessionConfig",
    "SessionMiddleware",
    "StaticFiles",
    "access_log",
    "get_session",
    "method_override",
]
