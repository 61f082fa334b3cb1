import os
import pathlib
import sys
from unittest.mock import MagicMock

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Settings are read at import time; provide everything before the app loads.
TRUSTED_TOPIC = "arn:aws:sns:us-east-1:000000000000:lifecycle-test-sns-wipe-data"
os.environ.update(
    {
        "APP_ENV": "test",
        "REDIS_URL": "redis://localhost:6379/15",
        "ALLOWED_ORIGIN": "http://localhost:3000",
        "RATE_LIMIT_TIMES": "100",
        "RATE_LIMIT_SECONDS": "60",
        "SNS_TOPIC_SUBSCRIPTION_ARN": TRUSTED_TOPIC,
        "S3_ENDPOINT_URL": "http://localhost:4566",
        "S3_ASSETS_BUCKET": "lifecycle-assets-test",
        "S3_ASSETS_PATH_PREFIX": "assets",
        "S3_MAP_TILES_TTL": "3600",
        "WIPE_PROTECTED_WORKSPACES": "MARAPP",
    }
)

from config import cache  # noqa: E402
from config.settings import settings  # noqa: E402


def _b(v) -> bytes:
    return v if isinstance(v, bytes) else str(v).encode("utf-8")


class FakePipeline:
    def __init__(self, redis: "FakeRedis") -> None:
        self._redis = redis
        self._calls = []

    def hget(self, key, field):
        self._calls.append(("hget", key, field))
        return self

    async def execute(self):
        out = []
        for name, *args in self._calls:
            out.append(await getattr(self._redis, name)(*args))
        self._calls = []
        return out


class FakeRedis:
    """In-memory stand-in for the redis.asyncio calls the repositories make."""

    def __init__(self) -> None:
        self.data = {}
        self.ttl = {}

    async def ping(self):
        return True

    async def hset(self, key, field=None, value=None, mapping=None):
        h = self.data.setdefault(key, {})
        items = dict(mapping or {})
        if field is not None:
            items[field] = value
        added = 0
        for k, v in items.items():
            added += int(_b(k) not in h)
            h[_b(k)] = _b(v)
        return added

    async def hget(self, key, field):
        return self.data.get(key, {}).get(_b(field))

    async def hgetall(self, key):
        return dict(self.data.get(key, {}))

    async def expire(self, key, seconds):
        if key not in self.data:
            return False
        self.ttl[key] = seconds
        return True

    async def delete(self, *keys):
        n = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                n += 1
        return n

    async def sadd(self, key, *members):
        s = self.data.setdefault(key, set())
        before = len(s)
        s.update(_b(m) for m in members)
        return len(s) - before

    async def srem(self, key, *members):
        s = self.data.get(key, set())
        before = len(s)
        s.difference_update(_b(m) for m in members)
        if not s:
            self.data.pop(key, None)
        return before - len(s)

    async def smembers(self, key):
        return set(self.data.get(key, set()))

    async def scard(self, key):
        return len(self.data.get(key, set()))

    def pipeline(self, transaction=True):
        return FakePipeline(self)

    async def aclose(self):
        return None


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch):
    redis = FakeRedis()
    monkeypatch.setattr(cache, "_client", redis)
    yield redis


@pytest.fixture
def s3_client():
    client = MagicMock()
    client.head_object.return_value = {
        "ETag": '"9a0364b9e99bb480dd25e1f0284c8555"',
        "ContentLength": 7,
        "Metadata": {},
    }
    client.put_bucket_lifecycle_configuration.return_value = {}
    return client


@pytest.fixture
def gateway(s3_client):
    from service.object_store_service import ObjectStoreGateway

    return ObjectStoreGateway(
        s3_client,
        endpoint_url=settings.S3_ENDPOINT_URL,
        default_bucket=settings.S3_ASSETS_BUCKET,
        cache_ttl=settings.S3_MAP_TILES_TTL,
        path_prefix=settings.S3_ASSETS_PATH_PREFIX,
    )


@pytest.fixture
def app(gateway):
    from controller import controller_dependencies as deps
    from main import app as fastapi_app

    fastapi_app.dependency_overrides[deps.rate_limiter] = lambda: None
    fastapi_app.dependency_overrides[deps.get_object_store] = lambda: gateway
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    # No context manager: the lifespan (real Redis + limiter init) stays off.
    return TestClient(app)
