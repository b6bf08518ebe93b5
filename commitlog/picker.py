"""Chooses a connection per call: writes to the leader, reads round-robin from followers."""

from __future__ import annotations

import threading
from typing import Any, Mapping


class NoSubConnAvailableError(Exception):
    """Raised when no connection suits the call."""

    def __init__(self, message: str = "no SubConn is available") -> None:
        super().__init__(message)


class Picker:
    """Routes Produce calls to the leader and Consume calls to the followers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.leader: Any = None
        self.followers: list[Any] = []
        self._current = 0

    def build(self, ready: Mapping[Any, Mapping[str, Any]]) -> "Picker":
        """Take ready connections, each mapped to its address attributes."""
        with self._lock:
            followers = []
            for sub_conn, attributes in ready.items():
                if attributes["is_leader"]:
                    self.leader = sub_conn
                else:
                    followers.append(sub_conn)
            self.followers = followers
            return self

    def pick(self, method: str) -> Any:
        """Return the connection for a full method name."""
        with self._lock:
            chosen = None
            if "Produce" in method or not self.followers:
                chosen = self.leader
            elif "Consume" in method:
                chosen = self._next_follower()
        if chosen is None:
            raise NoSubConnAvailableError()
        return chosen

    def _next_follower(self) -> Any:
        index = self._current % len(self.followers)
        self._current += 1
        return self.followers[index]