"""
Tests for RedisCacheStore with a mocked Redis client.
"""
import json
from datetime import timedelta
from unittest.mock import MagicMock, Mock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from core.cache.redis_store import KEY_NAMESPACE, RedisCacheStore
from core.cache.score_cache import CacheEntry
from core.errors import CacheUnavailable
from tests.fixtures.scoring_fixtures import FIXED_NOW


class TestRedisCacheStore:
    """Test suite for RedisCacheStore."""

    @pytest.fixture
    def mock_redis(self):
        mock = MagicMock()
        mock.ping.return_value = True
        mock.hgetall.return_value = {}
        mock.delete.return_value = 1
        mock.scan.return_value = (0, [])
        return mock

    @pytest.fixture
    def store(self, mock_redis):
        return RedisCacheStore(mock_redis)

    def test_01_from_url_success(self, mock_redis):
        with patch('core.cache.redis_store.Redis') as mock_redis_class:
            mock_redis_class.from_url.return_value = mock_redis
            store = RedisCacheStore.from_url("redis://localhost:6379/0", password="secret")

        assert store.name == "redis"
        mock_redis.ping.assert_called_once()
        assert mock_redis_class.from_url.call_args.kwargs["password"] == "secret"

    def test_02_from_url_unreachable(self):
        with patch('core.cache.redis_store.Redis') as mock_redis_class:
            mock_redis_class.from_url.return_value.ping.side_effect = RedisConnectionError("refused")
            with pytest.raises(CacheUnavailable):
                RedisCacheStore.from_url("redis://:secret@localhost:6379/0")

    def test_03_fetch_miss(self, store, mock_redis):
        assert store.fetch("match:p:o") is None
        mock_redis.hgetall.assert_called_once_with(f"{KEY_NAMESPACE}match:p:o")

    def test_04_fetch_hit(self, store, mock_redis):
        mock_redis.hgetall.return_value = {
            "payload": json.dumps({"overall_score": 81.2}),
            "projections": json.dumps({"grade": "B"}),
            "created_at": FIXED_NOW.isoformat(),
            "expires_at": (FIXED_NOW + timedelta(days=1)).isoformat(),
            "hit_count": "4",
            "last_accessed_at": "",
        }
        entry = store.fetch("match:p:o")
        assert entry.payload == {"overall_score": 81.2}
        assert entry.projections == {"grade": "B"}
        assert entry.hit_count == 4
        assert entry.created_at == FIXED_NOW
        assert entry.last_accessed_at is None

    def test_05_upsert_sets_expiry(self, store, mock_redis):
        pipe = mock_redis.pipeline.return_value
        entry = CacheEntry(
            key="k",
            payload={"score": 1},
            created_at=FIXED_NOW,
            expires_at=FIXED_NOW + timedelta(days=1),
        )
        store.upsert(entry)

        pipe.delete.assert_called_once_with(f"{KEY_NAMESPACE}k")
        mapping = pipe.hset.call_args.kwargs["mapping"]
        assert json.loads(mapping["payload"]) == {"score": 1}
        assert mapping["hit_count"] == 0
        pipe.expireat.assert_called_once_with(f"{KEY_NAMESPACE}k", entry.expires_at)
        pipe.execute.assert_called_once()

    def test_06_touch_increments_only_existing_hash(self, store, mock_redis):
        script = mock_redis.register_script.return_value
        store.touch("k", FIXED_NOW)

        script_source = mock_redis.register_script.call_args.args[0]
        assert "EXISTS" in script_source
        assert script_source.index("EXISTS") < script_source.index("HINCRBY")
        script.assert_called_once_with(keys=[f"{KEY_NAMESPACE}k"], args=[FIXED_NOW.isoformat()])
        # No unconditional writes that could recreate an expired hash
        mock_redis.pipeline.return_value.hincrby.assert_not_called()
        mock_redis.hincrby.assert_not_called()

    def test_07_delete_prefix(self, store, mock_redis):
        keys = [f"{KEY_NAMESPACE}match:p:o1", f"{KEY_NAMESPACE}match:p:o2"]
        mock_redis.scan.return_value = (0, keys)
        assert store.delete_prefix("match:p:") == 2
        mock_redis.delete.assert_called_once_with(*keys)

    def test_08_delete_expired(self, store, mock_redis):
        keys = [f"{KEY_NAMESPACE}old", f"{KEY_NAMESPACE}new"]
        mock_redis.scan.return_value = (0, keys)
        mock_redis.hget.side_effect = [
            (FIXED_NOW - timedelta(seconds=1)).isoformat(),
            (FIXED_NOW + timedelta(hours=1)).isoformat(),
        ]
        assert store.delete_expired(FIXED_NOW) == 1
        mock_redis.delete.assert_called_once_with(f"{KEY_NAMESPACE}old")

    def test_09_errors_wrapped(self, store, mock_redis):
        mock_redis.hgetall.side_effect = RedisConnectionError("gone")
        with pytest.raises(CacheUnavailable):
            store.fetch("k")

        mock_redis.scan.side_effect = RedisConnectionError("gone")
        with pytest.raises(CacheUnavailable):
            store.count()

    def test_10_touch_error_wrapped(self, store, mock_redis):
        mock_redis.register_script.return_value.side_effect = RedisConnectionError("gone")
        with pytest.raises(CacheUnavailable):
            store.touch("k", FIXED_NOW)
