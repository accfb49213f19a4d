"""
Tests for AppContext wiring.
"""
from unittest.mock import Mock, patch

import pytest
from sqlalchemy.exc import OperationalError

from core.app_context import AppContext, _load_index
from core.cache.score_cache import InMemoryCacheStore
from core.config_loader import AppConfig
from core.errors import CacheUnavailable
from core.interfaces import InMemoryPropertySource
from core.spatial.index import SpatialIndex
from tests.fixtures.scoring_fixtures import DC_LAT, DC_LNG, dc_records


class TestAppContext:

    def test_01_in_memory_build(self):
        context = AppContext.build(AppConfig(), property_source=InMemoryPropertySource(dc_records()))

        assert context.index.size == 40
        assert context.cache.store.name == "memory"
        response = context.scoring_service.neighborhood_score(DC_LAT, DC_LNG, 5)
        assert response.data["metrics"]["total_properties"] == 40

    def test_02_cache_disabled(self):
        context = AppContext.build(AppConfig(cache={"enabled": False}))
        assert context.cache is None
        assert context.scoring_service.cache_stats() == {"enabled": False}

    def test_03_redis_unreachable_falls_back_to_memory(self):
        config = AppConfig(cache={"backend": "redis", "redis_url": "redis://nowhere:6379/0"})
        with patch("core.app_context.RedisCacheStore.from_url", side_effect=CacheUnavailable("down")):
            context = AppContext.build(config)
        assert context.cache.store.name == "memory"

    def test_04_database_backend_without_database(self):
        context = AppContext.build(AppConfig(cache={"backend": "database"}))
        assert context.cache.store.name == "memory"

    def test_05_explicit_cache_store(self):
        store = InMemoryCacheStore()
        context = AppContext.build(AppConfig(), cache_store=store)
        assert context.cache.store is store

    def test_06_reload_index(self):
        source = InMemoryPropertySource()
        context = AppContext.build(AppConfig(), property_source=source)
        assert context.index.size == 0

        source.records = dc_records()
        assert context.reload_index() == 40
        assert context.index.size == 40

    def test_07_load_index_retries_operational_errors(self):
        source = Mock()
        source.load_records.side_effect = [OperationalError("SELECT 1", {}, Exception("db starting")), dc_records()]
        with patch("time.sleep"):
            loaded = _load_index(SpatialIndex(), source)
        assert loaded == 40
        assert source.load_records.call_count == 2
