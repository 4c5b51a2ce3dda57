"""Snips — an in-memory collection exposed as a REST resource.

Demonstrates every capability: bare ``index``, informed ``find`` (query
parameters), ``create`` from a form body, ``update``, ``delete``, an
``act`` verb, and ``options``. Some capabilities write to the response
writer, others return a value.

Run:
    cd examples/snips && python app.py

Then::

    curl -d body=hello localhost:8000/snips/
    curl localhost:8000/snips/0?format=text
    curl -X POST localhost:8000/snips/0/publish
"""

import logging
import threading
from dataclasses import dataclass, replace

from perch import App, bad_request, created, no_content, not_found, updated
from perch.http.request import Request
from perch.http.writer import ResponseWriter

logger = logging.getLogger("snips")


# ---------------------------------------------------------------------------
# In-memory storage (thread-safe for free-threading)
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Snip:
    id: int
    body: str
    published: bool = False


def _to_dict(snip: Snip) -> dict:
    return {"id": snip.id, "body": snip.body, "published": snip.published}


class SnipsCollection:
    """Snips keyed by id. Ids start at 0 and are never reused."""

    def __init__(self) -> None:
        logger.info("Creating new SnipsCollection")
        self._snips: dict[int, Snip] = {}
        self._next_id = 0
        self._lock = threading.Lock()

    def add(self, body: str) -> Snip:
        logger.info("Adding Snip: %s", body)
        with self._lock:
            snip = Snip(id=self._next_id, body=body)
            self._snips[snip.id] = snip
            self._next_id += 1
        return snip

    def with_id(self, snip_id: int) -> Snip | None:
        logger.info("Finding Snip with id: %d", snip_id)
        with self._lock:
            return self._snips.get(snip_id)

    def all(self) -> list[Snip]:
        logger.info("Finding all Snips")
        with self._lock:
            return sorted(self._snips.values(), key=lambda s: s.id)

    def replace(self, snip_id: int, body: str) -> Snip | None:
        with self._lock:
            snip = self._snips.get(snip_id)
            if snip is None:
                return None
            snip = replace(snip, body=body)
            self._snips[snip_id] = snip
            return snip

    def publish(self, snip_id: int) -> Snip | None:
        with self._lock:
            snip = self._snips.get(snip_id)
            if snip is None:
                return None
            snip = replace(snip, published=True)
            self._snips[snip_id] = snip
            return snip

    def remove(self, snip_id: int) -> bool:
        with self._lock:
            return self._snips.pop(snip_id, None) is not None


def _parse_id(raw: str) -> int | None:
    try:
        return int(raw)
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Resource
# ---------------------------------------------------------------------------


class SnipsResource:
    """``/snips/`` — wraps a ``SnipsCollection`` in perch capabilities."""

    def __init__(self, snips: SnipsCollection) -> None:
        self.snips = snips

    def index(self, w: ResponseWriter):
        return {"data": [_to_dict(s) for s in self.snips.all()]}

    def informed_find(self, w: ResponseWriter, id: str, form, headers):
        snip_id = _parse_id(id)
        snip = self.snips.with_id(snip_id) if snip_id is not None else None
        if snip is None:
            not_found(w)
            return None
        if form.get("format") == "text" or headers.get("accept") == "text/plain":
            w.write(snip.body)
            return None
        return {"data": _to_dict(snip)}

    async def create(self, w: ResponseWriter, request: Request) -> None:
        form = await request.form()
        body = (form.get("body") or "").strip()
        if not body:
            bad_request(w, "body is required")
            return
        snip = self.snips.add(body)
        created(w, f"/snips/{snip.id}")

    async def update(self, w: ResponseWriter, id: str, request: Request) -> None:
        snip_id = _parse_id(id)
        if snip_id is None:
            not_found(w)
            return
        form = await request.form()
        body = (form.get("body") or "").strip()
        if not body:
            bad_request(w, "body is required")
            return
        if self.snips.replace(snip_id, body) is None:
            not_found(w)
            return
        updated(w, f"/snips/{snip_id}")

    def delete(self, w: ResponseWriter, id: str) -> None:
        snip_id = _parse_id(id)
        if snip_id is None or not self.snips.remove(snip_id):
            not_found(w)
            return
        no_content(w)

    def act(self, w: ResponseWriter, tail: list[str], request: Request):
        if len(tail) != 2 or tail[1] != "publish":
            bad_request(w, f"unknown action {'/'.join(tail[1:]) or '(none)'}")
            return None
        snip_id = _parse_id(tail[0])
        snip = self.snips.publish(snip_id) if snip_id is not None else None
        if snip is None:
            not_found(w)
            return None
        return {"data": _to_dict(snip)}

    def options(self, w: ResponseWriter, id: str) -> None:
        allowed = "GET, POST, OPTIONS" if not id else "GET, PUT, DELETE, POST, OPTIONS"
        w.headers["Allow"] = allowed
        w.write_header(200)


app = App()
app.resource("snips", SnipsResource(SnipsCollection()))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app.run()
