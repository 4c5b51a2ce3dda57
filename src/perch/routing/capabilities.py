"""Capability vocabulary and per-resource capability tables.

A resource implements any subset of nine capabilities. Each one has a
fixed HTTP trigger and callback signature (``w`` is the
``ResponseWriter``):

==================  ==========================  ==============================
Capability          Trigger                     Callback
==================  ==========================  ==============================
``index``           ``GET /r/``                 ``(w)``
``informed_index``  ``GET /r/``                 ``(w, form, headers)``
``create``          ``POST /r/``                ``(w, request)``
``find``            ``GET /r/<id>``             ``(w, id)``
``informed_find``   ``GET /r/<id>``             ``(w, id, form, headers)``
``update``          ``PUT /r/<id>``             ``(w, id, request)``
``delete``          ``DELETE /r/<id>``          ``(w, id)``
``act``             ``POST /r/<id>/...``        ``(w, tail, request)``
``options``         ``OPTIONS /r/`` or ``/r/x`` ``(w, id)``
==================  ==========================  ==============================

The table is computed once, at registration, by ``probe_capabilities``.
Either pass an explicit ``Capabilities`` descriptor, or an object whose
methods are named after the capabilities. A plain ``index``/``find``
method that accepts the extra ``form, headers`` arguments is taken as
the informed variant.
"""

import inspect
from dataclasses import dataclass, fields
from enum import StrEnum
from typing import Any

from perch._internal.types import Callback
from perch.errors import ConfigurationError


class Capability(StrEnum):
    """Names of the capabilities a resource can advertise."""

    INDEX = "index"
    INFORMED_INDEX = "informed_index"
    CREATE = "create"
    FIND = "find"
    INFORMED_FIND = "informed_find"
    UPDATE = "update"
    DELETE = "delete"
    ACT = "act"
    OPTIONS = "options"


# Positional arguments each callback is called with, including the writer
ARITY: dict[Capability, int] = {
    Capability.INDEX: 1,
    Capability.INFORMED_INDEX: 3,
    Capability.CREATE: 2,
    Capability.FIND: 2,
    Capability.INFORMED_FIND: 4,
    Capability.UPDATE: 3,
    Capability.DELETE: 2,
    Capability.ACT: 3,
    Capability.OPTIONS: 2,
}

# (HTTP method, capabilities that answer it), in Allow-header order
_COLLECTION_METHODS: tuple[tuple[str, tuple[Capability, ...]], ...] = (
    ("GET", (Capability.INFORMED_INDEX, Capability.INDEX)),
    ("POST", (Capability.CREATE,)),
    ("OPTIONS", (Capability.OPTIONS,)),
)
_ITEM_METHODS: tuple[tuple[str, tuple[Capability, ...]], ...] = (
    ("GET", (Capability.INFORMED_FIND, Capability.FIND)),
    ("POST", (Capability.ACT,)),
    ("PUT", (Capability.UPDATE,)),
    ("DELETE", (Capability.DELETE,)),
    ("OPTIONS", (Capability.OPTIONS,)),
)


@dataclass(frozen=True, slots=True)
class Capabilities:
    """The capability table for one resource.

    Each field holds the callback for that capability, or ``None`` when
    the resource does not advertise it. Build one directly to declare
    callbacks explicitly (the only way to give a resource both a bare
    and an informed ``index``)::

        Capabilities(index=list_all, informed_index=search, find=show)
    """

    index: Callback | None = None
    informed_index: Callback | None = None
    create: Callback | None = None
    find: Callback | None = None
    informed_find: Callback | None = None
    update: Callback | None = None
    delete: Callback | None = None
    act: Callback | None = None
    options: Callback | None = None

    def get(self, capability: Capability) -> Callback | None:
        """Return the callback for *capability*, or ``None``."""
        return getattr(self, capability.value)

    @property
    def advertised(self) -> frozenset[Capability]:
        """Every capability this table provides."""
        return frozenset(
            Capability(f.name) for f in fields(self) if getattr(self, f.name) is not None
        )

    def allowed_methods(self, *, collection: bool) -> tuple[str, ...]:
        """HTTP methods answered at collection (``/r/``) or item (``/r/<id>``) level."""
        table = _COLLECTION_METHODS if collection else _ITEM_METHODS
        return tuple(
            method
            for method, capabilities in table
            if any(self.get(c) is not None for c in capabilities)
        )


def probe_capabilities(resource: Any) -> Capabilities:
    """Build the capability table for *resource*.

    Raises:
        ConfigurationError: If a callback cannot accept the arguments
            its capability is called with, or if an ``index``/``find``
            method looks informed while an explicit ``informed_*``
            method also exists.
    """
    if isinstance(resource, Capabilities):
        for capability in resource.advertised:
            _check_arity(resource, capability, resource.get(capability))
        return resource

    found: dict[str, Callback] = {}
    for capability in Capability:
        if capability in (Capability.INDEX, Capability.FIND):
            continue
        method = _callable_attr(resource, capability.value)
        if method is not None:
            _check_arity(resource, capability, method)
            found[capability.value] = method

    for bare, informed in (
        (Capability.INDEX, Capability.INFORMED_INDEX),
        (Capability.FIND, Capability.INFORMED_FIND),
    ):
        method = _callable_attr(resource, bare.value)
        if method is None:
            continue
        if informed.value not in found and _accepts(method, ARITY[informed]):
            found[informed.value] = method
        elif _accepts(method, ARITY[bare]):
            found[bare.value] = method
        else:
            owner = _describe(resource)
            msg = (
                f"{owner}.{bare.value}() must accept {ARITY[bare]} positional argument(s) "
                f"(or {ARITY[informed]} to be used as {informed.value})"
            )
            raise ConfigurationError(msg)

    return Capabilities(**found)


def _callable_attr(resource: Any, name: str) -> Callback | None:
    value = getattr(resource, name, None)
    return value if callable(value) else None


def _accepts(callback: Callback, count: int) -> bool:
    """Whether *callback* can be called with *count* positional arguments.

    Callables without an introspectable signature are assumed to accept.
    """
    try:
        sig = inspect.signature(callback)
    except (TypeError, ValueError):
        return True
    try:
        sig.bind(*([None] * count))
    except TypeError:
        return False
    return True


def _check_arity(resource: Any, capability: Capability, callback: Callback | None) -> None:
    if callback is None or _accepts(callback, ARITY[capability]):
        return
    msg = (
        f"{_describe(resource)}.{capability.value}() must accept "
        f"{ARITY[capability]} positional argument(s)"
    )
    raise ConfigurationError(msg)


def _describe(resource: Any) -> str:
    if isinstance(resource, Capabilities):
        return "Capabilities"
    return type(resource).__name__
