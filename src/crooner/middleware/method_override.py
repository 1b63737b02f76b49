"""HTTP method override for HTML forms.

Browsers only submit GET and POST. A POST carrying a ``_method`` form
field (or an ``X-HTTP-Method-Override`` header) is dispatched as that
method instead::

    <form method="post" action="/posts/1">
      <input type="hidden" name="_method" value="delete">
    </form>
"""

from dataclasses import replace

from crooner.http.request import Request
from crooner.http.response import AnyResponse
from crooner.middleware.protocol import Next

METHOD_FIELD = "_method"
METHOD_HEADER = "x-http-method-override"
OVERRIDABLE = frozenset({"PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"})


async def method_override(request: Request, next: Next) -> AnyResponse:
    if request.method == "POST":
        form = await request.form()
        method = (form.get(METHOD_FIELD) or request.headers.get(METHOD_HEADER) or "").upper()
        if method in OVERRIDABLE:
            request = replace(request, method=method)
    return await next(request)
