from app.rate_limit import RateLimiter


def test_limit_then_allowed_after_window():
    limiter = RateLimiter(2, window_seconds=60)
    assert limiter.check("alice", now=0).allowed
    assert limiter.check("alice", now=1).remaining == 0
    blocked = limiter.check("alice", now=2)
    assert not blocked.allowed
    assert blocked.retry_after == 58
    # other callers have their own window
    assert limiter.check("bob", now=2).allowed
    assert limiter.check("alice", now=61).allowed


def test_idle_callers_are_forgotten():
    limiter = RateLimiter(10, window_seconds=60)
    for i in range(1000):
        limiter.check(f"caller-{i}", now=0)
    assert len(limiter) == 1000
    limiter.check("late", now=61)
    assert len(limiter) == 1


def test_zero_window_keeps_no_history():
    limiter = RateLimiter(10, window_seconds=0)
    for i in range(1000):
        assert limiter.check(f"caller-{i}", now=float(i)).allowed
    assert len(limiter) == 1


def test_active_caller_survives_sweep():
    limiter = RateLimiter(1, window_seconds=60)
    limiter.check("idle", now=0)
    limiter.check("busy", now=30)
    limiter.check("other", now=70)
    assert len(limiter) == 2
    assert not limiter.check("busy", now=71).allowed
