"""Serve an app with pounce.

Pounce's ``run()`` takes an import string (e.g., ``"myapp:app"``), but
``App.run()`` has a live ``App`` object, so ``pounce.Server`` is used
directly with the ASGI callable.
"""

import logging

from crooner.errors import ConfigurationError

logger = logging.getLogger("crooner.server")


def run_server(
    app: object,
    host: str,
    port: int,
    *,
    environment: str = "development",
    reload: bool = False,
    reload_dirs: tuple[str, ...] = (),
    app_path: str | None = None,
) -> None:
    """Start a single-worker pounce server for *app* and block.

    Args:
        app: ASGI callable (crooner App instance).
        host: Bind host address.
        port: Bind port number.
        environment: Reported in the startup banner.
        reload: Restart on file changes.
        reload_dirs: Extra directories to watch alongside cwd.
        app_path: Optional ``"module:attribute"`` import string. When
            provided, pounce reimports the app on each reload cycle.
    """
    try:
        from pounce.config import ServerConfig
        from pounce.server import Server
    except ImportError:
        msg = "Serving requires the 'pounce' server. Install it with: pip install crooner[server]"
        raise ConfigurationError(msg) from None

    config = ServerConfig(
        host=host,
        port=port,
        workers=1,
        reload=reload,
        reload_dirs=reload_dirs,
    )
    logger.info("== crooner has taken the stage on %s:%s for %s", host, port, environment)
    try:
        Server(config, app, app_path=app_path).run()
    finally:
        logger.info("== crooner has ended its set (crowd applauds)")
