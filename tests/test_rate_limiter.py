from journey_map.strava_client.rate_limiter import RateLimiter


class FakeClock:
    def __init__(self):
        self.now = 100.0
        self.slept = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.slept.append(seconds)
        self.now += seconds


def _limiter(clock):
    return RateLimiter(throttle_seconds=15, near_limit_buffer=3, clock=clock, sleep=clock.sleep)


def test_no_throttle_under_limit():
    clock = FakeClock()
    limiter = _limiter(clock)

    assert limiter.after_response({"X-RateLimit-Usage": "10,100", "X-RateLimit-Limit": "100,1000"}, 200) is False
    limiter.before_request()
    assert clock.slept == []


def test_throttles_near_short_window_limit():
    clock = FakeClock()
    limiter = _limiter(clock)

    assert limiter.after_response({"X-RateLimit-Usage": "97,500", "X-RateLimit-Limit": "100,1000"}, 200) is True
    clock.now += 5
    limiter.before_request()
    assert clock.slept == [10.0]


def test_throttles_after_429():
    clock = FakeClock()
    limiter = _limiter(clock)

    assert limiter.after_response({}, 429) is True
    limiter.before_request()
    assert clock.slept == [15.0]
    limiter.before_request()
    assert clock.slept == [15.0]


def test_ignores_unparsable_headers():
    clock = FakeClock()
    limiter = _limiter(clock)

    assert limiter.after_response({"X-RateLimit-Usage": "n/a", "X-RateLimit-Limit": "100"}, 200) is False
    assert limiter.after_response(None, None) is False
