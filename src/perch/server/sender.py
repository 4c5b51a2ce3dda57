"""ASGI response sending: one start message, one body message.

perch owns the framing headers. ``content-length`` always reflects the
body actually sent, and exactly one ``content-type`` goes out: an
explicit ``Content-Type`` header wins over ``Response.content_type``.
"""

from perch._internal.asgi import Send
from perch.http.response import Response

_BODILESS = frozenset({204, 304})


def body_allowed(status: int) -> bool:
    """Whether a response with *status* may carry a body."""
    return status >= 200 and status not in _BODILESS


def encode_headers(response: Response, body: bytes) -> list[tuple[bytes, bytes]]:
    """Lowercased ASGI header pairs for *response* sending *body*."""
    content_type = response.content_type
    raw: list[tuple[bytes, bytes]] = []
    for name, value in response.headers:
        lower = name.lower()
        if lower == "content-type":
            content_type = value
        elif lower != "content-length":
            raw.append((lower.encode("latin-1"), value.encode("latin-1")))
    return [
        (b"content-type", content_type.encode("latin-1")),
        *raw,
        (b"content-length", str(len(body)).encode("latin-1")),
    ]


async def send_response(response: Response, send: Send) -> None:
    """Send *response* through ASGI *send*."""
    body = response.body_bytes if body_allowed(response.status) else b""
    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": encode_headers(response, body),
        }
    )
    await send({"type": "http.response.body", "body": body, "more_body": False})
