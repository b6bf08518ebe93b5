"""The log service: produce and consume records on behalf of a subject."""

from __future__ import annotations

import threading
import time
from typing import Any, Iterable, Iterator, Mapping, Protocol

from .api import OffsetOutOfRangeError, Record, Server, StatusCode, StatusError

OBJECT_WILDCARD = "*"
PRODUCE_ACTION = "produce"
CONSUME_ACTION = "consume"

_RETRY_INTERVAL = 0.01


class CommitLog(Protocol):
    def append(self, record: Record) -> int: ...

    def read(self, offset: int) -> Record: ...


class Authorizing(Protocol):
    def authorize(self, subject: str, obj: str, action: str) -> None: ...


class ServerLister(Protocol):
    def get_servers(self) -> list[Server]: ...


class LogService:
    """Checks each request against the authorizer, then serves it from the log."""

    def __init__(
        self,
        commit_log: CommitLog | None = None,
        authorizer: Authorizing | None = None,
        get_serverer: ServerLister | None = None,
    ) -> None:
        self.commit_log = commit_log
        self.authorizer = authorizer
        self.get_serverer = get_serverer

    def produce(self, record: Record, subject: str) -> int:
        """Append a record and return its offset."""
        self.authorizer.authorize(subject, OBJECT_WILDCARD, PRODUCE_ACTION)
        return self.commit_log.append(record)

    def consume(self, offset: int, subject: str) -> Record:
        """Return the record at an offset."""
        self.authorizer.authorize(subject, OBJECT_WILDCARD, CONSUME_ACTION)
        return self.commit_log.read(offset)

    def produce_stream(self, records: Iterable[Record], subject: str) -> Iterator[int]:
        """Produce each record in turn, yielding the offsets given to them."""
        for record in records:
            yield self.produce(record, subject)

    def consume_stream(
        self,
        offset: int,
        subject: str,
        stop: threading.Event | None = None,
    ) -> Iterator[Record]:
        """Yield records from an offset onwards, waiting for new ones until stopped."""
        while stop is None or not stop.is_set():
            try:
                record = self.consume(offset, subject)
            except OffsetOutOfRangeError:
                if stop is None:
                    time.sleep(_RETRY_INTERVAL)
                else:
                    stop.wait(_RETRY_INTERVAL)
                continue
            yield record
            offset += 1

    def get_servers(self) -> list[Server]:
        """Return the servers of the cluster."""
        if self.get_serverer is None:
            raise StatusError(StatusCode.UNIMPLEMENTED, "method GetServers not implemented")
        return list(self.get_serverer.get_servers())


def subject_from_certificate(certificate: Mapping[str, Any] | None) -> str:
    """Common name of a peer certificate as returned by ``getpeercert()``; "" without one."""
    if not certificate:
        return ""
    for rdn in certificate.get("subject", ()):
        for key, value in rdn:
            if key == "commonName":
                return value
    return ""