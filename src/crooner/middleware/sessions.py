"""Session middleware — signed cookie sessions.

Session data is serialized as JSON and signed using ``itsdangerous``.
The session dict is stored in a ContextVar, accessible via
``get_session()`` (or ``ctx.session`` / the ``session()`` helper) from
any handler, filter or middleware further in.

``itsdangerous`` is an optional dependency. If not installed,
``SessionMiddleware.__init__`` raises ``ConfigurationError``.
"""

import copy
import logging
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any

from crooner.errors import ConfigurationError
from crooner.http.request import Request
from crooner.http.response import AnyResponse, SetCookie
from crooner.middleware.protocol import Next

logger = logging.getLogger("crooner.server")

_session_var: ContextVar[dict[str, Any] | None] = ContextVar("crooner_session", default=None)


def get_session() -> dict[str, Any]:
    """Return the current session dict.

    Raises ``LookupError`` if called outside a request with
    ``SessionMiddleware`` active.
    """
    session = _session_var.get()
    if session is None:
        msg = "No active session. Enable sessions in AppConfig before using the session."
        raise LookupError(msg)
    return session


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Session middleware configuration.

    ``secret_key`` is required: sessions are signed, not encrypted.
    """

    secret_key: str
    cookie_name: str = "crooner.session"
    max_age: int | None = None
    path: str = "/"
    secure: bool = False
    httponly: bool = True
    samesite: str = "lax"


class SessionMiddleware:
    """Signed cookie session middleware.

    Reads the session cookie and verifies its signature, exposes the
    session dict for the duration of the request, then writes it back
    as a Set-Cookie on the response when it changed.
    """

    __slots__ = ("_config", "_serializer")

    def __init__(self, config: SessionConfig) -> None:
        try:
            from itsdangerous import URLSafeTimedSerializer
        except ImportError:
            msg = (
                "Sessions require the 'itsdangerous' package. "
                "Install it with: pip install crooner[sessions]"
            )
            raise ConfigurationError(msg) from None

        if not config.secret_key:
            msg = "Sessions are enabled but AppConfig.secret_key is empty."
            raise ConfigurationError(msg)

        self._config = config
        self._serializer = URLSafeTimedSerializer(config.secret_key)

    def _load_session(self, request: Request) -> dict[str, Any]:
        """Deserialize and verify the session cookie."""
        from itsdangerous import BadData

        cookie_value = request.cookies.get(self._config.cookie_name)
        if not cookie_value:
            return {}
        try:
            data = self._serializer.loads(cookie_value, max_age=self._config.max_age)
        except BadData:
            logger.debug("discarding session cookie with a bad signature")
            return {}
        return data if isinstance(data, dict) else {}

    def _save_session(self, response: AnyResponse, session: dict[str, Any]) -> AnyResponse:
        cfg = self._config
        return response.with_cookie(
            SetCookie(
                name=cfg.cookie_name,
                value=self._serializer.dumps(session),
                max_age=cfg.max_age,
                path=cfg.path,
                secure=cfg.secure,
                httponly=cfg.httponly,
                samesite=cfg.samesite,
            )
        )

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        """Load session, dispatch, then save session to response."""
        session = self._load_session(request)
        original = copy.deepcopy(session)
        token = _session_var.set(session)
        try:
            response = await next(request)
        finally:
            _session_var.reset(token)

        if session == original and self._config.cookie_name in request.cookies:
            return response
        return self._save_session(response, session)
