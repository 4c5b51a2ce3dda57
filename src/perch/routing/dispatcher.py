"""Dispatcher — maps ``(method, path shape)`` to a capability call.

For every request the dispatcher:

1. parses the path into ``(name, id)``;
2. looks the name up in the registry (unknown name: 404);
3. picks a capability from the method and whether the id is empty;
4. invokes it with a fresh ``ResponseWriter``, or writes a fallback.

Selection matrix (informed variants are preferred over bare ones)::

    id empty      GET      informed_index | index
                  POST     create
                  OPTIONS  options(w, "")
    id non-empty  GET      informed_find | find
                  POST     act(w, id.split("/"), request)
                  PUT      update
                  DELETE   delete
                  OPTIONS  options(w, id)

Anything else is a 501. The dispatcher is stateless: one instance
serves any number of concurrent requests.
"""

import logging
from typing import Any

from perch._internal.invoke import invoke
from perch.http.forms import FormData, FormParseError
from perch.http.request import Request
from perch.http.response import Response
from perch.http.writer import (
    ResponseWriter,
    bad_request,
    error,
    moved_permanently,
    not_found,
    not_implemented,
)
from perch.routing.capabilities import Capability
from perch.routing.path import MalformedPath, ResourcePath, parse_resource_path
from perch.routing.registry import Registry, ResourceEntry
from perch.server.negotiation import negotiate

logger = logging.getLogger("perch.dispatch")


class Dispatcher:
    """Stateless request handler over a ``Registry``.

    Usage::

        dispatcher = Dispatcher(registry)
        response = await dispatcher.dispatch(request)

    ``dispatch`` never raises for routing outcomes. Exceptions raised by
    capability callbacks propagate to the caller untouched.
    """

    __slots__ = ("_max_form_size", "_registry")

    def __init__(self, registry: Registry, *, max_form_size: int | None = None) -> None:
        self._registry = registry
        self._max_form_size = max_form_size

    @property
    def registry(self) -> Registry:
        return self._registry

    async def dispatch(self, request: Request) -> Response:
        """Route *request* and return the finished response."""
        w = ResponseWriter()
        result = await self._route(w, request)
        if result is not None:
            return negotiate(result)
        return w.to_response()

    async def _route(self, w: ResponseWriter, request: Request) -> Any:
        try:
            target = parse_resource_path(request.path)
        except MalformedPath as exc:
            logger.debug("%s %s -> 404 (%s)", request.method, request.path, exc)
            not_found(w)
            return None

        entry = self._registry.lookup(target.name)
        if entry is None:
            logger.debug("%s %s -> 404 (unknown resource)", request.method, request.path)
            error(w, f"resource {target.name} not found", 404)
            return None

        if target.bare:
            location = entry.prefix
            if request.query:
                location = f"{location}?{request.query.text}"
            logger.debug("%s %s -> 301 %s", request.method, request.path, location)
            moved_permanently(w, location)
            return None

        if target.is_collection:
            return await self._collection(w, request, entry)
        return await self._item(w, request, entry, target)

    async def _collection(self, w: ResponseWriter, request: Request, entry: ResourceEntry) -> Any:
        caps = entry.capabilities
        match request.method:
            case "GET":
                if caps.informed_index is not None:
                    form = await self._parse_form(w, request)
                    if form is None:
                        return None
                    return await self._call(
                        request, entry, Capability.INFORMED_INDEX, w, form, request.headers
                    )
                if caps.index is not None:
                    return await self._call(request, entry, Capability.INDEX, w)
            case "POST":
                if caps.create is not None:
                    return await self._call(request, entry, Capability.CREATE, w, request)
            case "OPTIONS":
                if caps.options is not None:
                    return await self._call(request, entry, Capability.OPTIONS, w, "")
        return self._not_implemented(w, request, entry)

    async def _item(
        self,
        w: ResponseWriter,
        request: Request,
        entry: ResourceEntry,
        target: ResourcePath,
    ) -> Any:
        caps = entry.capabilities
        id = target.id
        match request.method:
            case "GET":
                if caps.informed_find is not None:
                    form = await self._parse_form(w, request)
                    if form is None:
                        return None
                    return await self._call(
                        request, entry, Capability.INFORMED_FIND, w, id, form, request.headers
                    )
                if caps.find is not None:
                    return await self._call(request, entry, Capability.FIND, w, id)
            case "POST":
                if caps.act is not None:
                    tail = target.tail
                    if not tail[0]:
                        logger.debug("%s %s -> 400 (empty id)", request.method, request.path)
                        bad_request(w, f"invalid uri {id}")
                        return None
                    return await self._call(request, entry, Capability.ACT, w, tail, request)
            case "PUT":
                if caps.update is not None:
                    return await self._call(request, entry, Capability.UPDATE, w, id, request)
            case "DELETE":
                if caps.delete is not None:
                    return await self._call(request, entry, Capability.DELETE, w, id)
            case "OPTIONS":
                if caps.options is not None:
                    return await self._call(request, entry, Capability.OPTIONS, w, id)
        return self._not_implemented(w, request, entry)

    async def _parse_form(self, w: ResponseWriter, request: Request) -> FormData | None:
        """Parse the request form, answering 400 on failure."""
        try:
            return await request.form(max_size=self._max_form_size)
        except FormParseError as exc:
            logger.debug("%s %s -> 400 (%s)", request.method, request.path, exc)
            bad_request(w, str(exc))
            return None

    async def _call(
        self,
        request: Request,
        entry: ResourceEntry,
        capability: Capability,
        *args: Any,
    ) -> Any:
        logger.debug("%s %s -> %s.%s", request.method, request.path, entry.name, capability)
        callback = entry.capabilities.get(capability)
        return await invoke(callback, *args)

    def _not_implemented(
        self, w: ResponseWriter, request: Request, entry: ResourceEntry
    ) -> None:
        logger.debug("%s %s -> 501 (%s)", request.method, request.path, entry.name)
        not_implemented(w)
