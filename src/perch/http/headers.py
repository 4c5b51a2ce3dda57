"""Case-insensitive HTTP headers.

``Headers`` is the immutable request-side view over raw ASGI byte pairs.
``MutableHeaders`` is the response-side set a ``ResponseWriter`` owns
until the response is built.

Both implement the ``MultiValueMapping`` protocol.
"""

from collections.abc import Iterable, Iterator, Mapping, MutableMapping


class Headers(Mapping[str, str]):
    """Immutable, case-insensitive request headers.

    Stores raw byte pairs from the ASGI scope and decodes on access.
    ``__getitem__`` returns the first matching value; ``get_list``
    returns all of them.
    """

    __slots__ = ("_raw",)

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        object.__setattr__(self, "_raw", raw)

    @classmethod
    def from_dict(cls, headers: Mapping[str, str]) -> "Headers":
        """Build headers from a plain ``{name: value}`` mapping."""
        return cls(
            tuple(
                (name.lower().encode("latin-1"), value.encode("latin-1"))
                for name, value in headers.items()
            )
        )

    def _values(self, key: str) -> Iterator[str]:
        wanted = key.lower().encode("latin-1")
        for name, value in self._raw:
            if name.lower() == wanted:
                yield value.decode("latin-1")

    def __getitem__(self, key: str) -> str:
        for value in self._values(key):
            return value
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return any(True for _ in self._values(key))

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for name, _ in self._raw:
            key = name.decode("latin-1").lower()
            if key not in seen:
                seen.add(key)
                yield key

    def __len__(self) -> int:
        return len(set(self))

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"Headers({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        return next(self._values(key), default)

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._values(key))

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        """Raw header byte pairs, as received from ASGI."""
        return self._raw


class MutableHeaders(MutableMapping[str, str]):
    """Mutable, case-insensitive response headers.

    Keeps insertion order and the caller's spelling of each name.
    Assignment replaces every existing value for a name; ``add``
    appends another one.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[tuple[str, str]] = ()) -> None:
        self._items: list[tuple[str, str]] = list(items)

    def __getitem__(self, key: str) -> str:
        lower = key.lower()
        for name, value in self._items:
            if name.lower() == lower:
                return value
        raise KeyError(key)

    def __setitem__(self, key: str, value: str) -> None:
        lower = key.lower()
        self._items = [(n, v) for n, v in self._items if n.lower() != lower]
        self._items.append((key, value))

    def __delitem__(self, key: str) -> None:
        lower = key.lower()
        kept = [(n, v) for n, v in self._items if n.lower() != lower]
        if len(kept) == len(self._items):
            raise KeyError(key)
        self._items = kept

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        lower = key.lower()
        return any(name.lower() == lower for name, _ in self._items)

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for name, _ in self._items:
            key = name.lower()
            if key not in seen:
                seen.add(key)
                yield key

    def __len__(self) -> int:
        return len(set(self))

    def __repr__(self) -> str:
        return f"MutableHeaders({self._items!r})"

    def add(self, key: str, value: str) -> None:
        """Append *value* for *key*, keeping existing values."""
        self._items.append((key, value))

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        lower = key.lower()
        return [value for name, value in self._items if name.lower() == lower]

    def pairs(self) -> tuple[tuple[str, str], ...]:
        """Snapshot of every ``(name, value)`` pair in insertion order."""
        return tuple(self._items)
