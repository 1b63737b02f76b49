"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path


def _environment_from_env() -> str:
    return os.environ.get("CROONER_ENV", "development")


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(port=4567, sessions=True, secret_key="s3cr3t")

    ``environment`` defaults to ``$CROONER_ENV`` (or ``"development"``)
    and selects which ``App.configure(...)`` blocks run.
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 4567
    debug: bool = False
    environment: str = field(default_factory=_environment_from_env)

    # Reload (development server)
    reload: bool = False
    reload_dirs: tuple[str, ...] = ()

    # Errors: propagate failures to the server instead of recovering
    raise_errors: bool = False

    # Built-in middleware
    sessions: bool = False
    secret_key: str = ""
    logging: bool = False
    method_override: bool = False
    static: bool = False
    public_dir: str | Path = "public"

    # Templates
    views_dir: str | Path = "views"
    autoescape: bool = True

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_test(self) -> bool:
        return self.environment == "test"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"
