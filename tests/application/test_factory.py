from shobdo.application.config import AppConfig
from shobdo.application.factory import get_review_store
from shobdo.infrastructure.adapters import (
    InMemoryReviewStore,
    PostgrestReviewStore,
    YamlReviewStore,
)


def test_yaml_backend_uses_data_file(mock_home, tmp_path):
    config = AppConfig(backend="yaml", data_file=tmp_path / "w.yaml")
    store = get_review_store(config)
    assert isinstance(store, YamlReviewStore)
    assert store.path == tmp_path / "w.yaml"


def test_memory_backend(mock_home):
    assert isinstance(get_review_store(AppConfig(backend="memory")), InMemoryReviewStore)


def test_postgrest_backend(mock_home):
    config = AppConfig(
        backend="postgrest",
        postgrest_url="https://demo.supabase.co",
        postgrest_api_key="k",
        request_timeout=5.0,
    )
    store = get_review_store(config)
    assert isinstance(store, PostgrestReviewStore)
    assert store.base_url == "https://demo.supabase.co/rest/v1"
