# session_registry.py
#
# Peers that completed the `command` handshake, with the time of their last
# handshake. Shared by the command worker and the telemetry broadcaster, so
# every read and write goes through one lock.

import threading
import time
from typing import Callable, Iterable

Endpoint = tuple[str, int]


class SessionRegistry:
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._last_seen: dict[Endpoint, float] = {}
        self._lock = threading.Lock()

    def touch(self, endpoint: Endpoint) -> bool:
        # Records a handshake; True when the endpoint had no session yet.
        now = float(self._clock())
        with self._lock:
            is_new = endpoint not in self._last_seen
            self._last_seen[endpoint] = now
            return is_new

    def snapshot(self) -> list[tuple[Endpoint, float]]:
        # Insertion (first handshake) order.
        with self._lock:
            return list(self._last_seen.items())

    def expire(self, now: float, max_age_s: float) -> list[Endpoint]:
        with self._lock:
            stale = [ep for ep, seen in self._last_seen.items() if now - seen > max_age_s]
            for ep in stale:
                del self._last_seen[ep]
            return stale

    def remove(self, entries: Iterable[tuple[Endpoint, float]]) -> list[Endpoint]:
        # Entries come from snapshot(); a session refreshed since then is kept.
        removed: list[Endpoint] = []
        with self._lock:
            for ep, seen in entries:
                if self._last_seen.get(ep) == seen:
                    del self._last_seen[ep]
                    removed.append(ep)
        return removed

    def clear(self) -> list[Endpoint]:
        with self._lock:
            removed = list(self._last_seen)
            self._last_seen.clear()
            return removed

    def now(self) -> float:
        return float(self._clock())

    def __contains__(self, endpoint: Endpoint) -> bool:
        with self._lock:
            return endpoint in self._last_seen

    def __len__(self) -> int:
        with self._lock:
            return len(self._last_seen)
