"""
Review Store Factory
Centralizes the logic for selecting the configured persistence adapter.
"""

from shobdo.application.config import AppConfig
from shobdo.domain.ports import ReviewStore
from shobdo.infrastructure.adapters.memory_store import InMemoryReviewStore
from shobdo.infrastructure.adapters.postgrest_store import PostgrestReviewStore
from shobdo.infrastructure.adapters.yaml_store import YamlReviewStore


def get_review_store(config: AppConfig) -> ReviewStore:
    """
    Returns the ReviewStore implementation named by ``config.backend``.
    """
    if config.backend == "postgrest":
        # AppConfig guarantees the URL is present for this backend.
        return PostgrestReviewStore(
            url=config.postgrest_url or "",
            api_key=config.postgrest_api_key,
            timeout=config.request_timeout,
        )

    if config.backend == "memory":
        return InMemoryReviewStore()

    return YamlReviewStore(config.data_file)
