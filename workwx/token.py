"""Cached access tokens and tickets, with optional background refreshing."""

from __future__ import annotations

import random
import threading
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass

REFRESH_WINDOW = 30 * 60.0
"""Seconds before expiry at which a token is refreshed."""

MIN_REFRESH_INTERVAL = 5.0
"""Shortest pause, in seconds, between two refresh rounds."""


@dataclass(frozen=True)
class TokenInfo:
    """A token value together with its lifetime in seconds."""

    token: str
    expires_in: float


@dataclass(frozen=True)
class ExponentialBackoff:
    """Retry schedule whose delays grow geometrically up to a ceiling."""

    initial_interval: float = 0.5
    multiplier: float = 1.5
    max_interval: float = 60.0
    max_elapsed: float = 15 * 60.0
    randomization: float = 0.5

    def delays(self) -> Iterator[float]:
        """Yield successive delays until the elapsed-time budget runs out."""
        start = time.monotonic()
        interval = self.initial_interval
        while True:
            spread = interval * self.randomization
            delay = interval + random.uniform(-spread, spread) if spread else interval
            if time.monotonic() - start + delay > self.max_elapsed:
                return
            yield delay
            interval = min(interval * self.multiplier, self.max_interval)


class Token:
    """A lazily fetched token that can be kept fresh by a background thread."""

    def __init__(
        self,
        fetch: Callable[[], TokenInfo],
        *,
        refresh_window: float = REFRESH_WINDOW,
        min_refresh_interval: float = MIN_REFRESH_INTERVAL,
        backoff: ExponentialBackoff | None = None,
    ) -> None:
        self._fetch = fetch
        self._refresh_window = refresh_window
        self._min_refresh_interval = min_refresh_interval
        self._backoff = backoff or ExponentialBackoff()
        self._lock = threading.Lock()
        self._token = ""
        self._expires_in = 0.0
        self._last_refresh: float | None = None

    @property
    def token(self) -> str:
        """The cached token, empty if none has been fetched yet."""
        with self._lock:
            return self._token

    @property
    def expires_in(self) -> float:
        """Lifetime in seconds of the cached token."""
        with self._lock:
            return self._expires_in

    def get_token(self) -> str:
        """Return the cached token, fetching it first if there is none.

        A failed fetch leaves the cache empty and yields an empty string.
        """
        with self._lock:
            current = self._token
        if current:
            return current
        try:
            self.sync_token()
        except Exception:
            pass
        return self.token

    def sync_token(self) -> None:
        """Fetch a fresh token and store it; errors from the fetch propagate."""
        info = self._fetch()
        with self._lock:
            self._token = info.token
            self._expires_in = float(info.expires_in)
            self._last_refresh = time.monotonic()

    def _sync_with_retry(self, stop: threading.Event) -> None:
        delays = self._backoff.delays()
        while True:
            try:
                self.sync_token()
                return
            except Exception:
                delay = next(delays, None)
                if delay is None or stop.wait(delay):
                    return

    def _next_wait(self) -> float:
        with self._lock:
            last, lifetime = self._last_refresh, self._expires_in
        if last is None:
            return self._min_refresh_interval
        deadline = last + lifetime - self._refresh_window
        return max(deadline - time.monotonic(), self._min_refresh_interval)

    def run_refresher(self, stop: threading.Event) -> None:
        """Refresh the token before it expires until ``stop`` is set."""
        wait = 0.0
        while not stop.wait(wait):
            self._sync_with_retry(stop)
            if stop.is_set():
                return
            wait = self._next_wait()

    def spawn_refresher(self, stop: threading.Event) -> threading.Thread:
        """Run :meth:`run_refresher` in a daemon thread and return the thread."""
        thread = threading.Thread(
            target=self.run_refresher, args=(stop,), name="token-refresher", daemon=True
        )
        thread.start()
        return thread