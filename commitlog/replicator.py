"""Copies records from other servers into the local one."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

logger = logging.getLogger(__name__)


class Replicator:
    """Consumes every joined server's log and produces its records locally.

    ``dial(addr)`` returns a client with ``consume_stream(offset, stop)``,
    yielding records until the ``stop`` event is set, and optionally
    ``close()``. ``local_server`` has ``produce(record)``.
    """

    def __init__(self, dial: Callable[[str], Any], local_server: Any) -> None:
        self.dial = dial
        self.local_server = local_server
        self._lock = threading.Lock()
        self._servers: dict[str, threading.Event] = {}
        self._closed = False

    def join(self, name: str, addr: str) -> None:
        """Start replicating from a server, unless already doing so or closed."""
        with self._lock:
            if self._closed or name in self._servers:
                return
            leave = threading.Event()
            self._servers[name] = leave
            threading.Thread(
                target=self._replicate,
                args=(addr, leave),
                name=f"replicate-{name}",
                daemon=True,
            ).start()

    def _replicate(self, addr: str, stop: threading.Event) -> None:
        try:
            client = self.dial(addr)
        except Exception as exc:
            _log_error(exc, "failed to dial", addr)
            return
        try:
            try:
                records = iter(client.consume_stream(0, stop))
            except Exception as exc:
                _log_error(exc, "failed to consume", addr)
                return
            while not stop.is_set():
                try:
                    record = next(records)
                except StopIteration:
                    return
                except Exception as exc:
                    _log_error(exc, "failed to receive", addr)
                    return
                if stop.is_set():
                    return
                try:
                    self.local_server.produce(record)
                except Exception as exc:
                    _log_error(exc, "failed to produce", addr)
                    return
        finally:
            close = getattr(client, "close", None)
            if callable(close):
                close()

    def leave(self, name: str) -> None:
        """Stop replicating from a server."""
        with self._lock:
            leave = self._servers.pop(name, None)
        if leave is not None:
            leave.set()

    def close(self) -> None:
        """Stop all replication and refuse further joins."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            events = list(self._servers.values())
        for event in events:
            event.set()


def _log_error(exc: Exception, message: str, addr: str) -> None:
    logger.error("%s addr=%s error=%s", message, addr, exc)