import pytest

from laundrygo import rate_limiter
from laundrygo.rate_limiter import check_rate_limit, reset_rate_limits


@pytest.fixture(autouse=True)
def clean_counters():
    reset_rate_limits()
    yield
    reset_rate_limits()


class RecordingRedis:
    """Minimal stand-in that remembers what the limiter pushed"""

    def __init__(self, count=None, ttl=-2):
        self.count = count
        self.remaining = ttl
        self.writes = []

    def get(self, key):
        return self.count

    def ttl(self, key):
        return self.remaining

    def set(self, key, value, ex=None):
        self.writes.append((key, value, ex))


def test_allows_until_limit():
    results = [check_rate_limit("login:1.2.3.4", 3, 60)[0] for _ in range(4)]
    assert results == [True, True, True, False]


def test_counters_are_per_key():
    for _ in range(2):
        check_rate_limit("login:a", 2, 60)
    assert check_rate_limit("login:a", 2, 60)[0] is False
    assert check_rate_limit("login:b", 2, 60)[0] is True


def test_window_expiry_resets_count(monkeypatch):
    clock = {"now": 1_000_000}
    monkeypatch.setattr(rate_limiter.time, "time", lambda: clock["now"])

    check_rate_limit("burst", 1, 30)
    allowed, _, ttl = check_rate_limit("burst", 1, 30)
    assert allowed is False
    assert ttl == 30

    clock["now"] += 31
    allowed, count, _ = check_rate_limit("burst", 1, 30)
    assert allowed is True
    assert count == 1


def test_counter_resumes_from_redis():
    client = RecordingRedis(count="4", ttl=20)
    allowed, count, ttl = check_rate_limit("shared", 5, 60, client)
    assert allowed is True
    assert count == 5
    assert ttl == 20
    assert check_rate_limit("shared", 5, 60, client)[0] is False


def test_counts_are_synced_to_redis_periodically(monkeypatch):
    clock = {"now": 2_000_000}
    monkeypatch.setattr(rate_limiter.time, "time", lambda: clock["now"])
    client = RecordingRedis()

    check_rate_limit("fresh", 5, 60, client)
    assert client.writes == []

    clock["now"] += rate_limiter.MEMORY_CACHE_SYNC_INTERVAL
    check_rate_limit("fresh", 5, 60, client)
    assert client.writes == [("fresh", 2, 60)]
