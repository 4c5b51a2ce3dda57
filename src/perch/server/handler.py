"""ASGI handler — translates ASGI scope/messages to perch types.

The only component besides ``App`` that touches raw ASGI directly.
Converts the scope to a typed Request, runs the dispatcher, and sends
the Response back through ASGI send().
"""

from perch._internal.asgi import Receive, Scope, Send
from perch.errors import HTTPError
from perch.http.request import Request
from perch.routing.dispatcher import Dispatcher
from perch.server.errors import handle_http_error, handle_internal_error
from perch.server.sender import send_response


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    dispatcher: Dispatcher,
    debug: bool,
) -> None:
    """Process a single HTTP request through the dispatcher."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)

    try:
        response = await dispatcher.dispatch(request)
    except HTTPError as exc:
        response = handle_http_error(exc, request)
    except Exception as exc:
        response = handle_internal_error(exc, request, debug=debug)

    await send_response(response, send)
