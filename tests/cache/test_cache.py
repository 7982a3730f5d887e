import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest
import redis

from common import cache


class FakeRedis:
    def __init__(self, fail=False):
        self.fail = fail
        self.values = {}
        self.ttls = {}

    def ping(self):
        return True

    def get(self, key):
        if self.fail:
            raise redis.ConnectionError("redis down")
        return self.values.get(key)

    def setex(self, key, ttl, value):
        if self.fail:
            raise redis.ConnectionError("redis down")
        self.values[key] = value
        self.ttls[key] = ttl


@pytest.fixture(autouse=True)
def fresh_client(monkeypatch):
    monkeypatch.delenv("REDIS_URL", raising=False)
    cache.reset_redis_client()
    yield
    cache.reset_redis_client()


def test_cache_disabled_without_redis_url():
    assert cache.get_redis_client() is None
    cache.set_cached_json("rooms:all", [{"id": "1"}])
    assert cache.get_cached_json("rooms:all") is None


def test_json_round_trip_with_ttl(monkeypatch):
    fake = FakeRedis()
    monkeypatch.setenv("REDIS_URL", "redis://cache:6379/0")
    monkeypatch.setattr(redis, "from_url", lambda url, decode_responses: fake)

    cache.set_cached_json("room:1", {"id": "1", "name": "Ocean View"}, ttl_seconds=300)

    assert fake.ttls["room:1"] == 300
    assert cache.get_cached_json("room:1") == {"id": "1", "name": "Ocean View"}
    assert cache.get_cached_json("room:2") is None


def test_unreachable_redis_disables_cache(monkeypatch):
    class Unreachable(FakeRedis):
        def ping(self):
            raise redis.ConnectionError("refused")

    monkeypatch.setenv("REDIS_URL", "redis://cache:6379/0")
    monkeypatch.setattr(redis, "from_url", lambda url, decode_responses: Unreachable())

    assert cache.get_redis_client() is None
    assert cache.get_cached_json("rooms:all") is None


def test_redis_errors_after_connect_are_treated_as_misses(monkeypatch):
    fake = FakeRedis(fail=True)
    monkeypatch.setenv("REDIS_URL", "redis://cache:6379/0")
    monkeypatch.setattr(redis, "from_url", lambda url, decode_responses: fake)

    cache.set_cached_json("rooms:all", [])
    assert cache.get_cached_json("rooms:all") is None


def test_corrupt_json_is_a_miss(monkeypatch):
    fake = FakeRedis()
    fake.values["rooms:all"] = "{not json"
    monkeypatch.setenv("REDIS_URL", "redis://cache:6379/0")
    monkeypatch.setattr(redis, "from_url", lambda url, decode_responses: fake)

    assert cache.get_cached_json("rooms:all") is None
