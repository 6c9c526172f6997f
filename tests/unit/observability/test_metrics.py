"""Tests for Prometheus metrics."""

from __future__ import annotations

from recipebox.observability.metrics import MetricsRegistry, normalize_path


class TestMetricsRegistry:
    """Test registry initialization and sampling."""

    def test_disabled_registry(self) -> None:
        registry = MetricsRegistry()
        registry.initialize(enabled=False)

        assert registry.cache_hits_total is None
        assert registry.generate_latest() == b"# Metrics disabled\n"
        assert registry.sample("recipebox_cache_hits_total") == 0.0

    def test_enabled_registry_is_isolated(self) -> None:
        first = MetricsRegistry()
        first.initialize(enabled=True)
        second = MetricsRegistry()
        second.initialize(enabled=True)

        first.cache_hits_total.labels(cache_type="redis").inc()

        assert first.sample("recipebox_cache_hits_total", {"cache_type": "redis"}) == 1.0
        assert second.sample("recipebox_cache_hits_total", {"cache_type": "redis"}) == 0.0

    def test_initialize_is_idempotent(self) -> None:
        registry = MetricsRegistry()
        registry.initialize(enabled=True)
        counter = registry.cache_misses_total
        registry.initialize(enabled=True)

        assert registry.cache_misses_total is counter

    def test_exposition_contains_series(self) -> None:
        registry = MetricsRegistry()
        registry.initialize(enabled=True)
        registry.cache_invalidation_failures_total.labels(operation="update").inc()

        text = registry.generate_latest().decode()

        assert 'recipebox_cache_invalidation_failures_total{operation="update"} 1.0' in text


class TestPathNormalization:
    """Recipe ids are collapsed so label cardinality stays bounded."""

    def test_recipe_id_is_replaced(self) -> None:
        assert normalize_path("/recipes/0f8e4c2a") == "/recipes/{id}"

    def test_search_is_kept(self) -> None:
        assert normalize_path("/recipes/search") == "/recipes/search"

    def test_collection_is_kept(self) -> None:
        assert normalize_path("/recipes") == "/recipes"

    def test_nested_paths_are_kept(self) -> None:
        assert normalize_path("/recipes/abc/extra") == "/recipes/abc/extra"
