"""Invoke helpers — call sync or async callbacks uniformly.

Capability callbacks and lifecycle hooks can be ``def`` or ``async def``.
The sync/async check lives here and nowhere else.

Usage::

    from perch._internal.invoke import invoke

    result = await invoke(resource.find, writer, "42")
"""

import inspect
from typing import Any


async def invoke(callback: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *callback* and await the result if it's awaitable.

    Works with both kinds of capability::

        class Snips:
            def find(self, w, id):
                w.write(f"snip {id}")

            async def create(self, w, request):
                form = await request.form()
                ...
    """
    result = callback(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
