import threading

import pytest

from workwx.token import ExponentialBackoff, Token, TokenInfo

FAST = ExponentialBackoff(initial_interval=0.01, randomization=0.0, max_elapsed=5.0)


class Fetcher:
    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result


def test_get_token_fetches_once_and_caches():
    fetch = Fetcher(TokenInfo("token", 7200))
    token = Token(fetch)
    assert token.get_token() == "token"
    assert token.get_token() == "token"
    assert fetch.calls == 1
    assert token.expires_in == 7200


def test_get_token_returns_empty_string_on_failure():
    fetch = Fetcher(RuntimeError("boom"))
    token = Token(fetch)
    assert token.get_token() == ""
    assert token.token == ""


def test_sync_token_propagates_errors():
    token = Token(Fetcher(RuntimeError("boom")))
    with pytest.raises(RuntimeError, match="boom"):
        token.sync_token()


def test_sync_token_replaces_value():
    fetch = Fetcher(TokenInfo("first", 10), TokenInfo("second", 20))
    token = Token(fetch)
    token.sync_token()
    assert token.token == "first"
    token.sync_token()
    assert token.token == "second"
    assert token.expires_in == 20


def test_run_refresher_returns_when_stopped_before_start():
    fetch = Fetcher(TokenInfo("token", 7200))
    stop = threading.Event()
    stop.set()
    Token(fetch).run_refresher(stop)
    assert fetch.calls == 0


def test_run_refresher_retries_until_success():
    stop = threading.Event()
    successes = []

    def fetch():
        successes.append(None)
        if len(successes) < 3:
            raise RuntimeError("not yet")
        stop.set()
        return TokenInfo("token", 7200)

    token = Token(fetch, backoff=FAST)
    token.run_refresher(stop)
    assert len(successes) == 3
    assert token.token == "token"


def test_refresher_refreshes_again_after_short_lifetime():
    stop = threading.Event()
    values = iter(["a", "b", "c"])
    seen = []

    def fetch():
        value = next(values)
        seen.append(value)
        if len(seen) == 2:
            stop.set()
        return TokenInfo(value, 0)

    token = Token(fetch, min_refresh_interval=0.01, backoff=FAST)
    thread = token.spawn_refresher(stop)
    thread.join(timeout=5)
    assert not thread.is_alive()
    assert seen == ["a", "b"]
    assert token.token == "b"


def test_refresher_keeps_trying_after_backoff_exhausted():
    fetch = Fetcher(RuntimeError("down"))
    stop = threading.Event()
    backoff = ExponentialBackoff(initial_interval=0.01, randomization=0.0, max_elapsed=0.03)
    token = Token(fetch, min_refresh_interval=0.01, backoff=backoff)
    thread = token.spawn_refresher(stop)
    stop.wait(0.2)
    stop.set()
    thread.join(timeout=5)
    assert not thread.is_alive()
    assert fetch.calls > 1
    assert token.token == ""


def test_backoff_delays_grow_and_are_capped():
    backoff = ExponentialBackoff(
        initial_interval=1.0, multiplier=2.0, max_interval=4.0, max_elapsed=100.0, randomization=0.0
    )
    delays = []
    for delay in backoff.delays():
        delays.append(delay)
        if len(delays) == 5:
            break
    assert delays == sorted(delays)
    assert delays[0] == 1.0
    assert max(delays) == 4.0


def test_backoff_stops_when_budget_exceeded():
    backoff = ExponentialBackoff(initial_interval=1.0, max_elapsed=0.5, randomization=0.0)
    assert list(backoff.delays()) == []