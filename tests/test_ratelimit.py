import pytest

from system_admin.ratelimit import SlidingWindowRateLimiter


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


def test_allows_up_to_max(clock):
    limiter = SlidingWindowRateLimiter(window=60, max_actions=3, timer=clock)
    decisions = [limiter.hit("u1") for _ in range(3)]
    assert all(d.allowed for d in decisions)
    assert [d.attempts for d in decisions] == [1, 2, 3]


def test_rejects_over_max_with_retry_hint(clock):
    limiter = SlidingWindowRateLimiter(window=60, max_actions=2, timer=clock)
    limiter.hit("u1")
    clock.now += 10
    limiter.hit("u1")
    clock.now += 5

    decision = limiter.hit("u1")

    assert not decision.allowed
    assert decision.retry_after == 45
    assert decision.attempts == 2


def test_window_slides(clock):
    limiter = SlidingWindowRateLimiter(window=60, max_actions=1, timer=clock)
    assert limiter.hit("u1").allowed
    clock.now += 59
    assert not limiter.hit("u1").allowed
    clock.now += 1
    assert limiter.hit("u1").allowed


def test_rejected_hits_do_not_extend_window(clock):
    limiter = SlidingWindowRateLimiter(window=60, max_actions=1, timer=clock)
    limiter.hit("u1")
    for _ in range(5):
        clock.now += 10
        limiter.hit("u1")
    clock.now += 10
    assert limiter.hit("u1").allowed


def test_actors_are_independent(clock):
    limiter = SlidingWindowRateLimiter(window=60, max_actions=1, timer=clock)
    assert limiter.hit("u1").allowed
    assert limiter.hit("u2").allowed
    assert not limiter.hit("u1").allowed


def test_defaults_come_from_settings(settings):
    settings.ADMIN_GATEWAY = {"RATE_LIMIT_WINDOW_SECONDS": 30, "RATE_LIMIT_MAX_ACTIONS": 7, "CACHE_ALIAS": "default"}
    limiter = SlidingWindowRateLimiter()
    assert (limiter.window, limiter.max_actions, limiter.cache_alias) == (30, 7, "default")
