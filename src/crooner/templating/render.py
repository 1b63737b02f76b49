"""Template lookup, rendering and layouts.

A template is found, in order:

1. by name among the templates registered with ``App.template`` /
   ``App.layout`` (their source is produced by calling them);
2. as ``<views_dir>/<name>.<ext>``, where the extension belongs to the
   engine.

A callable passed instead of a name is the template source itself.

After rendering, the output is wrapped in a layout, itself a template
that receives the inner output as ``content``. The ``layout`` option
names it; ``False`` disables it. Without the option the template called
``layout`` is used when one exists.
"""

from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from kida.template import Markup

from crooner.context import get_context
from crooner.errors import ConfigurationError

if TYPE_CHECKING:
    from crooner.context import RequestContext

type TemplateRef = str | Callable[[], str]

DEFAULT_LAYOUT = "layout"

ENGINES: dict[str, str] = {"kida": "html"}
"""Built-in engines and the file extension of their templates."""

_MISSING = object()


def _extension(engine: str) -> str:
    try:
        return ENGINES[engine]
    except KeyError:
        msg = f"Unknown template engine {engine!r}. Available: {', '.join(sorted(ENGINES))}"
        raise ConfigurationError(msg) from None


def _compile(ctx: RequestContext, template: TemplateRef, ext: str, views: Path) -> Any | None:
    """Load *template* as a kida Template, or ``None`` when it doesn't exist."""
    env = ctx.definition.template_env
    if callable(template):
        return env.from_string(template())
    registered = ctx.definition.templates.get(template)
    if registered is not None:
        return env.from_string(registered())
    filename = f"{template}.{ext}"
    path = views / filename
    if not path.is_file():
        return None
    if views == Path(ctx.config.views_dir):
        return env.get_template(filename)
    return env.from_string(path.read_text(encoding="utf-8"))


def _scope(ctx: RequestContext, locals_: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "params": ctx.params,
        "request": ctx.request,
        "session": ctx.session,
        **locals_,
    }


def render(
    engine: str,
    template: TemplateRef,
    options: Mapping[str, Any] | None = None,
    **locals_: Any,
) -> str:
    """Render *template* with *engine* for the current request.

    *options* may carry ``layout`` (name, callable or ``False``),
    ``views`` (directory overriding ``AppConfig.views_dir``) and
    ``locals`` (a mapping merged under keyword locals).
    """
    options = options or {}
    ctx = get_context()
    ext = _extension(engine)
    views = Path(options.get("views", ctx.config.views_dir))
    scope = _scope(ctx, {**options.get("locals", {}), **locals_})

    compiled = _compile(ctx, template, ext, views)
    if compiled is None:
        msg = f"template {template!r} not found in {views}"
        raise FileNotFoundError(msg)
    output = compiled.render(scope)

    layout = options.get("layout", _MISSING)
    if layout is False or layout is None:
        return output
    explicit = layout is not _MISSING
    if not explicit:
        layout = DEFAULT_LAYOUT
    wrapper = _compile(ctx, layout, ext, views)
    if wrapper is None:
        if explicit:
            msg = f"layout {layout!r} not found in {views}"
            raise FileNotFoundError(msg)
        return output
    return wrapper.render({**scope, "content": Markup(output)})


def kida(template: TemplateRef, options: Mapping[str, Any] | None = None, **locals_: Any) -> str:
    """Render a kida template::

        @app.get("/hello/:name")
        def hello():
            return kida("hello", title="Hi")
    """
    return render("kida", template, options, **locals_)
