from geosoft.services import rate_limit
from geosoft.services.rate_limit import SlidingWindowLimiter


def test_sliding_window_allows_limit_then_blocks(monkeypatch):
    clock = [1000.0]
    monkeypatch.setattr(rate_limit.time, "monotonic", lambda: clock[0])
    limiter = SlidingWindowLimiter()

    assert limiter.hit("k", limit=2, window_seconds=10) is None
    assert limiter.hit("k", limit=2, window_seconds=10) is None
    assert limiter.hit("k", limit=2, window_seconds=10) == 11
    assert limiter.hit("other", limit=2, window_seconds=10) is None

    clock[0] += 10
    assert limiter.hit("k", limit=2, window_seconds=10) is None


def test_register_rate_limit_sets_retry_after(client):
    statuses = []
    for _ in range(9):
        response = client.post(
            "/api/v1/auth/register",
            json={"username": "same", "email": "same@example.com", "password": "password123", "app_source": "docxiq"},
        )
        statuses.append(response.status_code)
    assert statuses[0] == 201
    assert statuses[1:8] == [409] * 7
    assert statuses[8] == 429
    assert int(response.headers["Retry-After"]) >= 1
