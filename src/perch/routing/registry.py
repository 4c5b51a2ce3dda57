"""Resource registry — resource name to capability table.

Populated during setup, frozen before serving, read on every request.
"""

import logging
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from perch.errors import ConfigurationError
from perch.routing.capabilities import Capabilities, probe_capabilities

logger = logging.getLogger("perch.registry")


@dataclass(frozen=True, slots=True)
class ResourceEntry:
    """A registered resource and the capability table probed from it."""

    name: str
    resource: Any
    capabilities: Capabilities

    @property
    def prefix(self) -> str:
        """The URL prefix this resource serves under."""
        return f"/{self.name}/"


class Registry:
    """Mapping from resource name to ``ResourceEntry``.

    Usage::

        registry = Registry()
        registry.register("snips", SnipsCollection())
        registry.freeze()
        entry = registry.lookup("snips")

    Duplicate names are rejected. Registration is guarded by a lock;
    once frozen, the registry is read-only and lookups take no lock.
    """

    __slots__ = ("_entries", "_frozen", "_lock")

    def __init__(self) -> None:
        self._entries: dict[str, ResourceEntry] = {}
        self._frozen = False
        self._lock = threading.Lock()

    def register(self, name: str, resource: Any) -> ResourceEntry:
        """Register *resource* under *name* and return its entry.

        Raises:
            RuntimeError: If the registry is frozen.
            ConfigurationError: If *name* is empty, contains ``/``, is
                already registered, or the resource's callbacks have
                the wrong signatures.
        """
        if not name or "/" in name:
            msg = f"Invalid resource name {name!r}: must be non-empty and contain no '/'."
            raise ConfigurationError(msg)

        with self._lock:
            if self._frozen:
                msg = "Cannot register resources after the registry is frozen."
                raise RuntimeError(msg)
            if name in self._entries:
                msg = f"Resource {name!r} is already registered."
                raise ConfigurationError(msg)
            entry = ResourceEntry(name, resource, probe_capabilities(resource))
            self._entries[name] = entry

        logger.info(
            "registered %s -> %s [%s]",
            entry.prefix,
            type(resource).__name__,
            ", ".join(sorted(entry.capabilities.advertised)),
        )
        return entry

    def lookup(self, name: str) -> ResourceEntry | None:
        """Return the entry for *name*, or ``None`` if it is not registered."""
        return self._entries.get(name)

    def freeze(self) -> None:
        """Stop accepting registrations."""
        with self._lock:
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def names(self) -> list[str]:
        """Registered names, in registration order."""
        return list(self._entries)

    @property
    def prefixes(self) -> list[str]:
        """URL prefixes served, one per registered name."""
        return [entry.prefix for entry in self._entries.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ResourceEntry]:
        return iter(list(self._entries.values()))
