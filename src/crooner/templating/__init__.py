"""Template rendering on kida."""

from crooner.templating.environment import create_environment
from crooner.templating.render import ENGINES, kida, render

__all__ = ["ENGINES", "create_environment", "kida", "render"]
