from starlette.requests import Request

from institut_backend.middleware.rate_limiter import RateLimitConfig, RateLimiter


class _Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def _request(headers=None, client=("10.0.0.1", 1234)):
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/ai/gemini",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


def test_bucket_allows_burst_then_blocks():
    clock = _Clock()
    limiter = RateLimiter(RateLimitConfig(requests=2, window=60, burst=1), clock=clock)

    results = [limiter.consume("ai:1.2.3.4")[0] for _ in range(4)]

    assert results == [True, True, True, False]
    allowed, headers = limiter.consume("ai:1.2.3.4")
    assert not allowed
    assert int(headers["Retry-After"]) >= 1


def test_bucket_refills_over_time():
    clock = _Clock()
    limiter = RateLimiter(RateLimitConfig(requests=1, window=10, burst=0), clock=clock)

    assert limiter.consume("k")[0] is True
    assert limiter.consume("k")[0] is False
    clock.now += 10
    assert limiter.consume("k")[0] is True


def test_keys_are_independent():
    limiter = RateLimiter(RateLimitConfig(requests=1, window=60, burst=0), clock=_Clock())
    assert limiter.consume("a")[0]
    assert limiter.consume("b")[0]


def test_client_key_prefers_forwarded_header_behind_trusted_proxy():
    limiter = RateLimiter(trust_proxy_headers=True)
    assert limiter.client_key(_request({"X-Forwarded-For": "41.1.1.1, 10.0.0.2"})) == "ai:41.1.1.1"
    assert limiter.client_key(_request({"X-Real-IP": "41.2.2.2"})) == "ai:41.2.2.2"
    assert limiter.client_key(_request()) == "ai:10.0.0.1"


def test_client_key_ignores_forwarded_headers_by_default():
    limiter = RateLimiter()
    spoofed = _request({"X-Forwarded-For": "6.6.6.6", "X-Real-IP": "7.7.7.7"})

    assert limiter.client_key(spoofed) == "ai:10.0.0.1"


def test_spoofed_forwarded_header_does_not_reset_bucket():
    limiter = RateLimiter(RateLimitConfig(requests=1, window=60, burst=0), clock=_Clock())

    first = limiter.client_key(_request({"X-Forwarded-For": "1.1.1.1"}))
    second = limiter.client_key(_request({"X-Forwarded-For": "2.2.2.2"}))

    assert first == second
    assert limiter.consume(first)[0] is True
    assert limiter.consume(second)[0] is False


def test_settings_read_trusted_proxy_flag(monkeypatch):
    from institut_core.settings import AppSettings

    monkeypatch.delenv("TRUST_PROXY_HEADERS", raising=False)
    assert AppSettings.load().trust_proxy_headers is False
    monkeypatch.setenv("TRUST_PROXY_HEADERS", "true")
    assert AppSettings.load().trust_proxy_headers is True
