"""Request path parsing: ``/<name>/<id>`` into a ``ResourcePath``.

Examples::

    "/snips/"                -> ResourcePath("snips", "")
    "/snips/42"              -> ResourcePath("snips", "42")
    "/snips/42/publish/now"  -> ResourcePath("snips", "42/publish/now")
    "/snips"                 -> ResourcePath("snips", "", bare=True)
"""

from dataclasses import dataclass


class MalformedPath(ValueError):
    """Raised when a path has no leading ``/`` or no resource name."""


@dataclass(frozen=True, slots=True)
class ResourcePath:
    """The shape of a request path relative to the registry.

    ``id`` is everything after ``/<name>/``, verbatim; it may itself
    contain ``/``. ``bare`` marks a path with no slash after the name.
    """

    name: str
    id: str = ""
    bare: bool = False

    @property
    def is_collection(self) -> bool:
        """True for collection-level requests (empty id)."""
        return not self.id

    @property
    def tail(self) -> list[str]:
        """The id split on ``/``, as passed to the ``act`` capability."""
        return self.id.split("/")


def parse_resource_path(path: str) -> ResourcePath:
    """Split *path* into resource name and id.

    The first segment after the leading ``/`` is the name. With no
    further ``/`` the id is empty; otherwise the id is everything after
    the second slash.

    Raises:
        MalformedPath: If *path* does not start with ``/`` or its first
            segment is empty.
    """
    if not path.startswith("/"):
        msg = f"path {path!r} does not start with '/'"
        raise MalformedPath(msg)
    name, slash, rest = path[1:].partition("/")
    if not name:
        msg = f"path {path!r} has no resource name"
        raise MalformedPath(msg)
    return ResourcePath(name=name, id=rest, bare=not slash)
