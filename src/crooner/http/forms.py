"""Form body parsing — URL-encoded and multipart.

URL-encoded bodies use stdlib ``urllib.parse``. Multipart bodies need
``python-multipart`` (``pip install crooner[forms]``), imported on
first use so apps that never accept uploads don't pay for it.
"""

import io
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from urllib.parse import parse_qs

from crooner.errors import ConfigurationError

FORM_CONTENT_TYPES = frozenset({"application/x-www-form-urlencoded", "multipart/form-data"})


@dataclass(frozen=True, slots=True)
class UploadFile:
    """An uploaded file from a multipart form submission."""

    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    def __repr__(self) -> str:
        return f"UploadFile({self.filename!r}, {self.content_type!r}, {self.size} bytes)"


class FormData(Mapping[str, str]):
    """Immutable parsed form data.

    ``__getitem__`` returns the first value for a key, ``get_list`` all of
    them. Uploaded files are kept apart in ``files``.
    """

    __slots__ = ("_data", "_files")

    def __init__(
        self,
        data: dict[str, list[str]],
        files: dict[str, UploadFile] | None = None,
    ) -> None:
        object.__setattr__(self, "_data", data)
        object.__setattr__(self, "_files", files or {})

    @property
    def files(self) -> Mapping[str, UploadFile]:
        """Uploaded files by field name."""
        return self._files

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"FormData({{{items}}})"

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key* (checkboxes, multi-selects)."""
        return list(self._data.get(key, []))


def media_type(content_type: str | None) -> str:
    """Return the bare, lowercased media type of a Content-Type value."""
    return (content_type or "").split(";")[0].strip().lower()


def parse_form_data(body: bytes, content_type: str) -> FormData:
    """Parse a form body into ``FormData``.

    Raises:
        ConfigurationError: multipart parsing needed but ``python-multipart``
            is not installed.
        ValueError: the content type is not a form encoding.
    """
    kind = media_type(content_type)
    if kind == "application/x-www-form-urlencoded":
        return FormData(parse_qs(body.decode("utf-8"), keep_blank_values=True))
    if kind == "multipart/form-data":
        return _parse_multipart(body, content_type)
    msg = f"Unsupported form content type: {content_type!r}"
    raise ValueError(msg)


def _parse_multipart(body: bytes, content_type: str) -> FormData:
    try:
        import python_multipart
    except ImportError:
        msg = (
            "Multipart form parsing requires the 'python-multipart' package. "
            "Install it with: pip install crooner[forms]"
        )
        raise ConfigurationError(msg) from None

    data: dict[str, list[str]] = {}
    files: dict[str, UploadFile] = {}

    def on_field(field) -> None:
        name = field.field_name.decode("utf-8")
        value = (field.value or b"").decode("utf-8", errors="replace")
        data.setdefault(name, []).append(value)

    def on_file(file) -> None:
        file.file_object.seek(0)
        files[file.field_name.decode("utf-8")] = UploadFile(
            filename=(file.file_name or b"").decode("utf-8"),
            content_type="application/octet-stream",
            content=file.file_object.read(),
        )

    headers = {
        "Content-Type": content_type.encode("latin-1"),
        "Content-Length": str(len(body)).encode("latin-1"),
    }
    python_multipart.parse_form(headers, io.BytesIO(body), on_field, on_file)
    return FormData(data, files)
