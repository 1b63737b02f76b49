"""Kida environment setup.

The environment is created once during ``App._freeze()`` and shared,
read-only, by every request.
"""

from kida import Environment, FileSystemLoader

from crooner.config import AppConfig


def create_environment(config: AppConfig) -> Environment:
    """Create a kida Environment loading from the configured views directory."""
    return Environment(
        loader=FileSystemLoader(str(config.views_dir)),
        autoescape=config.autoescape,
        auto_reload=config.debug,
    )
