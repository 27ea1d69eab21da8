from tests.helpers import FakeClock
from utils.rate_limiter import MinIntervalRateLimiter


def test_first_call_is_accepted():
    limiter = MinIntervalRateLimiter(1000, clock=FakeClock())
    assert limiter.try_acquire() is None


def test_call_inside_interval_is_rejected_with_remaining_time():
    clock = FakeClock()
    limiter = MinIntervalRateLimiter(1000, clock=clock)
    assert limiter.try_acquire() is None

    clock.advance(0.3)
    retry_after = limiter.try_acquire()
    assert retry_after is not None
    assert 0 < retry_after <= 1000
    assert 699 <= retry_after <= 701


def test_rejected_call_does_not_move_the_window():
    clock = FakeClock()
    limiter = MinIntervalRateLimiter(1000, clock=clock)
    limiter.try_acquire()
    clock.advance(0.5)
    assert limiter.try_acquire() is not None
    clock.advance(0.5)
    assert limiter.try_acquire() is None


def test_call_at_exact_interval_is_accepted():
    clock = FakeClock()
    limiter = MinIntervalRateLimiter(1000, clock=clock)
    limiter.try_acquire()
    clock.advance(1.0)
    assert limiter.try_acquire() is None


def test_reset():
    clock = FakeClock()
    limiter = MinIntervalRateLimiter(1000, clock=clock)
    limiter.try_acquire()
    limiter.reset()
    assert limiter.try_acquire() is None
