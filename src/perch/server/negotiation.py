"""Return-value conversion — maps capability return values to Responses.

Capabilities normally write to their ``ResponseWriter`` and return
``None``. Returning a value instead is a shortcut; whatever is returned
replaces anything written to the writer. isinstance-based dispatch, no
magic, fully predictable.
"""

import json as json_module
from typing import Any

from perch.http.response import Response

JSON = "application/json; charset=utf-8"


def negotiate(value: Any) -> Response:
    """Convert a capability's return value to a Response.

    Dispatch order:

    1. ``Response``            -> pass through
    2. ``str``                 -> 200, text/plain
    3. ``bytes``               -> 200, application/octet-stream
    4. ``dict`` / ``list``     -> 200, application/json
    5. ``(value, int)``        -> negotiate value, override status
    6. ``(value, int, dict)``  -> negotiate value, override status + headers
    """
    match value:
        case Response():
            return value
        case str():
            return Response(body=value)
        case bytes():
            return Response(body=value, content_type="application/octet-stream")
        case dict() | list():
            return Response(body=json_module.dumps(value, default=str), content_type=JSON)
        case (inner, int() as status):
            return negotiate(inner).with_status(status)
        case (inner, int() as status, dict() as headers):
            return negotiate(inner).with_status(status).with_headers(headers)
        case _:
            msg = (
                f"Cannot convert {type(value).__name__} to a response. "
                f"Write to the ResponseWriter, or return str, bytes, dict, list, "
                f"or Response."
            )
            raise TypeError(msg)
