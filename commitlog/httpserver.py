"""A JSON-over-HTTP front end for an in-memory log."""

from __future__ import annotations

import argparse
import base64
import json
import logging
import sys
import threading
from dataclasses import dataclass, replace
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)


class OffsetNotFoundError(LookupError):
    """Raised when no record exists at the requested offset."""

    def __init__(self, message: str = "offset not found") -> None:
        super().__init__(message)


@dataclass
class HTTPRecord:
    """A record exchanged over HTTP; ``value`` travels base64-encoded."""

    value: bytes | None = None
    offset: int = 0

    def to_json(self) -> dict[str, Any]:
        encoded = None if self.value is None else base64.b64encode(self.value).decode("ascii")
        return {"value": encoded, "offset": self.offset}

    @classmethod
    def from_json(cls, data: Any) -> "HTTPRecord":
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError("record must be a JSON object")
        raw = data.get("value")
        if raw is None:
            value = None
        elif isinstance(raw, str):
            value = base64.b64decode(raw, validate=True)
        else:
            raise ValueError("record value must be a base64 string")
        return cls(value=value, offset=_offset(data.get("offset")))


def _offset(raw: Any) -> int:
    if raw is None:
        return 0
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
        raise ValueError(f"invalid offset: {raw!r}")
    return raw


class MemoryLog:
    """A thread-safe list of records addressed by position."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: list[HTTPRecord] = []

    def append(self, record: HTTPRecord) -> int:
        """Store a record and return its offset."""
        with self._lock:
            offset = len(self._records)
            self._records.append(replace(record, offset=offset))
            return offset

    def read(self, offset: int) -> HTTPRecord:
        """Return the record at an offset; raises OffsetNotFoundError if absent."""
        with self._lock:
            if not 0 <= offset < len(self._records):
                raise OffsetNotFoundError()
            return self._records[offset]


def _decode_json(body: bytes) -> Any:
    text = body.decode("utf-8").lstrip()
    if not text:
        raise ValueError("EOF")
    document, _ = json.JSONDecoder().raw_decode(text)
    return document


def _field(document: Any, name: str) -> Any:
    if document is None:
        return None
    if not isinstance(document, dict):
        raise ValueError("request must be a JSON object")
    return document.get(name)


class _Handler(BaseHTTPRequestHandler):
    server: "_LogHTTPServer"

    def _dispatch(self) -> None:
        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length) if length > 0 else b""
        if urlsplit(self.path).path != "/":
            self._send_error(404, "404 page not found")
        elif self.command == "POST":
            self._produce(body)
        elif self.command == "GET":
            self._consume(body)
        else:
            self._send(405, b"", None)

    do_GET = do_POST = do_PUT = do_DELETE = do_PATCH = _dispatch

    def _produce(self, body: bytes) -> None:
        try:
            record = HTTPRecord.from_json(_field(_decode_json(body), "record"))
        except ValueError as exc:
            self._send_error(400, str(exc))
            return
        offset = self.server.log.append(record)
        self._send_json({"offset": offset})

    def _consume(self, body: bytes) -> None:
        try:
            offset = _offset(_field(_decode_json(body), "offset"))
        except ValueError as exc:
            self._send_error(400, str(exc))
            return
        try:
            record = self.server.log.read(offset)
        except OffsetNotFoundError as exc:
            self._send_error(404, str(exc))
            return
        self._send_json({"record": record.to_json()})

    def _send_json(self, document: dict[str, Any]) -> None:
        payload = (json.dumps(document, separators=(",", ":")) + "\n").encode("utf-8")
        self._send(200, payload, "application/json")

    def _send_error(self, status: int, message: str) -> None:
        self._send(status, (message + "\n").encode("utf-8"), "text/plain; charset=utf-8")

    def _send(self, status: int, payload: bytes, content_type: str | None) -> None:
        self.send_response(status)
        if content_type:
            self.send_header("Content-Type", content_type)
            self.send_header("X-Content-Type-Options", "nosniff")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)


class _LogHTTPServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address: tuple[str, int], log: MemoryLog) -> None:
        self.log = log
        super().__init__(address, _Handler)


def _split_addr(addr: str) -> tuple[str, int]:
    host, sep, port = addr.rpartition(":")
    if not sep:
        raise ValueError(f"address {addr}: missing port in address")
    if not (port or "0").isdigit():
        raise ValueError(f"address {addr}: invalid port")
    return host.strip("[]"), int(port or 0)


def new_http_server(addr: str) -> ThreadingHTTPServer:
    """Create a server bound to ``host:port`` that serves a fresh MemoryLog.

    POST / appends a record; GET / reads the record at an offset.
    """
    return _LogHTTPServer(_split_addr(addr), MemoryLog())


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Serve an in-memory log over HTTP.")
    parser.add_argument("--addr", default=":8080", help="listen address (default :8080)")
    args = parser.parse_args(argv)
    try:
        server = new_http_server(args.addr)
    except (OSError, ValueError) as exc:
        print(exc, file=sys.stderr)
        return 1
    with server:
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
    return 0