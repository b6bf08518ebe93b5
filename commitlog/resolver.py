"""Resolves a target into the cluster's servers, marking the leader."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable

NAME = "proglog"

logger = logging.getLogger(__name__)


@dataclass
class Address:
    """A server address with its attributes."""

    addr: str
    attributes: dict[str, Any] = field(default_factory=dict)


@dataclass
class ResolverState:
    """What the resolver hands to the client connection."""

    addresses: list[Address] = field(default_factory=list)
    service_config: Any = None


class Resolver:
    """Asks a server for the cluster and pushes the addresses to a client connection.

    ``dial(target)`` returns a client with ``get_servers()`` and ``close()``;
    the client connection has ``update_state(state)`` and
    ``parse_service_config(text)``.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.client_conn: Any = None
        self.resolver_conn: Any = None
        self.service_config: Any = None

    def build(self, target: str, client_conn: Any, dial: Callable[[str], Any]) -> "Resolver":
        self.client_conn = client_conn
        self.service_config = client_conn.parse_service_config(
            f'{{"loadBalancingConfig":[{{"{NAME}":{{}}}}]}}'
        )
        self.resolver_conn = dial(target)
        self.resolve_now()
        return self

    def scheme(self) -> str:
        return NAME

    def resolve_now(self) -> None:
        """Fetch the servers and update the client connection; failures are logged."""
        with self._lock:
            try:
                servers = self.resolver_conn.get_servers()
            except Exception as exc:
                logger.error("failed to resolve server: %s", exc)
                return
            addresses = [
                Address(server.rpc_addr, {"is_leader": server.is_leader})
                for server in servers
            ]
            self.client_conn.update_state(
                ResolverState(addresses=addresses, service_config=self.service_config)
            )

    def close(self) -> None:
        try:
            self.resolver_conn.close()
        except Exception as exc:
            logger.error("failed to close conn: %s", exc)